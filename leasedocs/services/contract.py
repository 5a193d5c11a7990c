"""Contract content generator for manager and tenant agreements.

Renders a validated ContractForm into the HTML body edited by the rich text
editor and stored on draft documents. Section order is fixed:

    title, parties, property, term, compensation, responsibilities,
    standard terms, signatures, footer stamp
"""

import html
import logging
import re
from datetime import datetime
from typing import Callable, Optional

from leasedocs.models.contract import (
    ContractForm,
    ContractKind,
    FixedCompensation,
    GeneratedContract,
    PercentageCompensation,
)
from leasedocs.utils.config import get_settings
from leasedocs.utils.currency import get_currency_symbol

logger = logging.getLogger(__name__)

TITLES = {
    ContractKind.MANAGER: "PROPERTY MANAGEMENT AGREEMENT",
    ContractKind.TENANT: "LEASE AGREEMENT",
}

ROLE_NAMES = {
    ContractKind.MANAGER: "Manager",
    ContractKind.TENANT: "Tenant",
}

MANAGER_TERMS = [
    "The Manager shall collect rent and other payments on behalf of the Owner and remit them as agreed.",
    "The Manager shall arrange routine maintenance and repairs, and obtain the Owner's approval for major expenses.",
    "The Manager shall screen prospective tenants and enforce the terms of every lease.",
    "The Manager shall keep accurate records of income and expenses and provide monthly statements to the Owner.",
    "The Manager shall comply with all applicable laws and regulations governing the property.",
    "Either party may terminate this agreement with thirty (30) days written notice.",
]

TENANT_TERMS = [
    "The Tenant shall pay rent on or before the due date each month.",
    "The Tenant shall keep the premises clean and in good condition, and report any damage promptly.",
    "The Tenant shall not sublet or assign the premises without the Owner's written consent.",
    "The Tenant shall not make alterations to the premises without the Owner's written consent.",
    "The Tenant shall comply with all building rules and applicable laws.",
    "The Tenant shall return the premises in the same condition at the end of the term, fair wear and tear excepted.",
]

PERCENTAGE_EXPLANATION = (
    "This percentage is calculated on the gross rental income collected from "
    "the property each month."
)

FOOTER_MARKER = "Draft — Not yet sent for signature"
TBD = "TBD"

# Leading bullet (•, -, *) or number ("1.") markers on a responsibilities line
_ITEM_PREFIX = re.compile(r"^\s*(?:[•\-*]|\d+\.)\s*")


def normalize_responsibilities(text: str) -> list[str]:
    """Split free text into list items, dropping bullets, numbers and blanks.

    '- Collect rent\\n2. Handle repairs\\n• Inspect unit'
    -> ['Collect rent', 'Handle repairs', 'Inspect unit']
    """
    items = []
    for line in (text or "").splitlines():
        item = _ITEM_PREFIX.sub("", line, count=1).strip()
        if item:
            items.append(item)
    return items


def _esc(value: str) -> str:
    return html.escape(value, quote=False)


def _field(label: str, value: str) -> str:
    return f"<p><strong>{_esc(label)}:</strong> {_esc(value)}</p>"


class ContractContentGenerator:
    """Turn a contract form into a single document body"""

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        owner_placeholder: Optional[str] = None,
        default_currency_symbol: Optional[str] = None,
    ):
        settings = get_settings()
        self._clock = clock
        self.owner_placeholder = owner_placeholder or settings.owner_placeholder
        self.default_currency_symbol = default_currency_symbol or settings.default_currency_symbol

    def generate(self, form: ContractForm) -> GeneratedContract:
        """Render form into HTML. Output only varies with the clock."""
        generated_at = self._clock().strftime("%Y-%m-%d %H:%M")
        title = self._title(form.kind)

        sections = [
            f"<h1>{title}</h1>",
            self._parties(form),
            self._property(form),
            self._term(form),
            self._compensation(form),
            self._responsibilities(form),
            self._standard_terms(form.kind),
            self._signatures(form),
            self._footer(generated_at),
        ]
        content = "".join(sections)
        logger.info(f"Generated {form.kind.value} contract for {form.counterpart.name}")
        return GeneratedContract(
            kind=form.kind,
            title=title,
            content=content,
            generated_at=generated_at,
        )

    @staticmethod
    def _title(kind: ContractKind) -> str:
        if kind not in TITLES:
            raise ValueError(f"Unsupported contract kind: {kind}")
        return TITLES[kind]

    def _parties(self, form: ContractForm) -> str:
        role = ROLE_NAMES[form.kind]
        return (
            "<h2>1. PARTIES</h2>"
            f"<p>This agreement is made between <strong>{_esc(self.owner_placeholder)}</strong> "
            f"(the \"Owner\") and <strong>{_esc(form.counterpart.name)}</strong> "
            f"(the \"{role}\").</p>"
        )

    @staticmethod
    def _property(form: ContractForm) -> str:
        prop = form.property
        return (
            "<h2>2. PROPERTY</h2>"
            + _field("Property", prop.name)
            + _field("Address", prop.full_address or TBD)
        )

    @staticmethod
    def _term(form: ContractForm) -> str:
        start = form.start_date.isoformat() if form.start_date else TBD
        end = form.end_date.isoformat() if form.end_date else TBD
        return (
            "<h2>3. TERM</h2>"
            + _field("Start Date", start)
            + _field("End Date", end)
        )

    def _compensation(self, form: ContractForm) -> str:
        symbol = get_currency_symbol(form.property.currency, default=self.default_currency_symbol)
        comp = form.compensation

        if form.kind == ContractKind.MANAGER:
            if isinstance(comp, FixedCompensation):
                return (
                    "<h2>4. COMPENSATION</h2>"
                    "<p>The Owner shall pay the Manager a fixed management fee of "
                    f"<strong>{_esc(symbol)}{_esc(comp.amount)} per month</strong>.</p>"
                )
            if isinstance(comp, PercentageCompensation):
                return (
                    "<h2>4. COMPENSATION</h2>"
                    "<p>The Manager shall receive "
                    f"<strong>{_esc(comp.percent)}% of monthly property revenue</strong>.</p>"
                    f"<p>{PERCENTAGE_EXPLANATION}</p>"
                )
            raise ValueError(f"Unsupported compensation: {comp!r}")

        if form.kind == ContractKind.TENANT:
            return (
                "<h2>4. RENT</h2>"
                "<p>The Tenant shall pay a monthly rent of "
                f"<strong>{_esc(symbol)}{_esc(comp.amount)} per month</strong>.</p>"
            )

        raise ValueError(f"Unsupported contract kind: {form.kind}")

    @staticmethod
    def _responsibilities(form: ContractForm) -> str:
        if form.kind == ContractKind.MANAGER:
            heading = "<h2>5. MANAGER RESPONSIBILITIES</h2>"
        else:
            heading = "<h2>5. TENANT OBLIGATIONS</h2>"

        items = normalize_responsibilities(form.responsibilities)
        if not items:
            return heading + "<p>As set out in the standard terms below.</p>"
        return heading + "<ul>" + "".join(f"<li>{_esc(item)}</li>" for item in items) + "</ul>"

    @staticmethod
    def _standard_terms(kind: ContractKind) -> str:
        if kind == ContractKind.MANAGER:
            clauses = MANAGER_TERMS
        elif kind == ContractKind.TENANT:
            clauses = TENANT_TERMS
        else:
            raise ValueError(f"Unsupported contract kind: {kind}")
        return (
            "<h2>6. TERMS AND CONDITIONS</h2>"
            "<ol>" + "".join(f"<li>{_esc(clause)}</li>" for clause in clauses) + "</ol>"
        )

    def _signatures(self, form: ContractForm) -> str:
        role = ROLE_NAMES[form.kind]
        return (
            "<h2>7. SIGNATURES</h2>"
            "<p>Owner Signature: ________________________ Date: ____________</p>"
            f"<p>{role} Signature: ________________________ Date: ____________</p>"
        )

    @staticmethod
    def _footer(generated_at: str) -> str:
        return f"<hr><p><em>Generated on {generated_at} | {FOOTER_MARKER}</em></p>"
