"""Contract form models consumed by the contract content generator.

The form is an immutable value: every change goes through a named
``with_*`` transition that returns a new, fully validated form, so a
half-filled form can never reach the generator.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ContractKind(str, Enum):
    """Who the generated contract addresses"""
    MANAGER = "manager"   # Property management agreement
    TENANT = "tenant"     # Lease agreement


class FixedCompensation(BaseModel):
    """A fixed monthly amount (manager fee or tenant rent)"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed"] = "fixed"
    amount: str

    @field_validator("amount")
    @classmethod
    def _amount_is_number(cls, value: str) -> str:
        value = value.strip()
        try:
            number = Decimal(value.replace(",", ""))
        except InvalidOperation:
            raise ValueError(f"amount must be a number, got '{value}'")
        if not number.is_finite():
            raise ValueError(f"amount must be a finite number, got '{value}'")
        if number < 0:
            raise ValueError("amount must not be negative")
        return value


class PercentageCompensation(BaseModel):
    """A share of monthly property revenue, 0-100"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["percentage"] = "percentage"
    percent: str

    @field_validator("percent")
    @classmethod
    def _percent_in_range(cls, value: str) -> str:
        value = value.strip()
        try:
            number = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"percent must be a number, got '{value}'")
        if not number.is_finite():
            raise ValueError(f"percent must be a finite number, got '{value}'")
        if number < 0 or number > 100:
            raise ValueError("percent must be between 0 and 100")
        return value


Compensation = Annotated[
    Union[FixedCompensation, PercentageCompensation],
    Field(discriminator="kind"),
]


class Counterpart(BaseModel):
    """The manager or tenant a contract is addressed to"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: Optional[str] = None


class PropertyInfo(BaseModel):
    """Property details printed in the property block"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    currency: Optional[str] = None

    @property
    def full_address(self) -> str:
        parts = [self.address, self.city, self.state, self.postal_code, self.country]
        return ", ".join(p.strip() for p in parts if p and p.strip())


class ContractForm(BaseModel):
    """Validated input for a single contract rendering"""
    model_config = ConfigDict(frozen=True)

    kind: ContractKind
    counterpart: Counterpart
    property: PropertyInfo
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    compensation: Compensation
    responsibilities: str = ""
    template_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_form(self) -> "ContractForm":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.kind == ContractKind.TENANT and not isinstance(self.compensation, FixedCompensation):
            raise ValueError("tenant contracts take a fixed monthly rent")
        return self

    def _evolve(self, **changes) -> "ContractForm":
        data = self.model_dump()
        for key, value in changes.items():
            data[key] = value.model_dump() if isinstance(value, BaseModel) else value
        return type(self).model_validate(data)

    def with_counterpart(self, counterpart: Counterpart) -> "ContractForm":
        return self._evolve(counterpart=counterpart)

    def with_property(self, property_info: PropertyInfo) -> "ContractForm":
        return self._evolve(property=property_info)

    def with_term(self, start_date: Optional[date], end_date: Optional[date]) -> "ContractForm":
        return self._evolve(start_date=start_date, end_date=end_date)

    def with_compensation(
        self, compensation: Union[FixedCompensation, PercentageCompensation]
    ) -> "ContractForm":
        return self._evolve(compensation=compensation)

    def with_responsibilities(self, responsibilities: str) -> "ContractForm":
        return self._evolve(responsibilities=responsibilities)


class GeneratedContract(BaseModel):
    """A rendered contract body ready to be stored as a draft document"""
    kind: ContractKind
    title: str
    content: str
    generated_at: str
