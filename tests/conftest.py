"""Pytest configuration and fixtures"""

from datetime import datetime

import pytest

from leasedocs.db import get_database
from leasedocs.models.contract import (
    ContractForm,
    ContractKind,
    Counterpart,
    FixedCompensation,
    PercentageCompensation,
    PropertyInfo,
)
from leasedocs.models.document import Credential
from leasedocs.services.documents import DocumentService
from leasedocs.services.storage import FileStorage
from leasedocs.services.template_store import TemplateStore

FROZEN_NOW = datetime(2024, 3, 1, 9, 30)


@pytest.fixture(autouse=True)
def test_env(tmp_path, monkeypatch):
    """Set up test environment with temporary database and upload storage"""
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("STORAGE_PATH", str(tmp_path / "uploads"))
    monkeypatch.setenv("API_KEYS", "owner-1:secret-token,owner-2:other-token")
    monkeypatch.delenv("DEFAULT_CURRENCY_SYMBOL", raising=False)
    monkeypatch.delenv("UPLOAD_INITIAL_STATUS", raising=False)

    yield


@pytest.fixture
def now():
    return FROZEN_NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def db():
    return get_database()


@pytest.fixture
def store(db, clock):
    return TemplateStore(db, clock=clock)


class RecordingConverter:
    """Stands in for the format converter and remembers what it was asked"""

    def __init__(self):
        self.calls = []

    def convert(self, content, fmt, title=""):
        self.calls.append((content, fmt, title))
        return f"{fmt.value}:{title}".encode()


@pytest.fixture
def converter():
    return RecordingConverter()


@pytest.fixture
def service(db, store, converter, clock):
    return DocumentService(
        db, storage=FileStorage(), converter=converter, templates=store, clock=clock
    )


@pytest.fixture
def credential():
    return Credential(user_id="owner-1", token="secret-token")


@pytest.fixture
def property_info():
    return PropertyInfo(
        id="prop-1",
        name="Sunset Villas",
        address="12 Marina Road",
        city="Lagos",
        state="Lagos",
        country="Nigeria",
        currency="USD",
    )


@pytest.fixture
def manager_form(property_info):
    return ContractForm(
        kind=ContractKind.MANAGER,
        counterpart=Counterpart(id="mgr-1", name="Ada Obi", email="ada@example.com"),
        property=property_info,
        start_date="2024-04-01",
        end_date="2025-03-31",
        compensation=FixedCompensation(amount="5000"),
        responsibilities="- Collect rent\n2. Handle repairs\n\n• Inspect units",
    )


@pytest.fixture
def percentage_form(manager_form):
    return manager_form.with_compensation(PercentageCompensation(percent="10"))


@pytest.fixture
def tenant_form(property_info):
    return ContractForm(
        kind=ContractKind.TENANT,
        counterpart=Counterpart(id="ten-1", name="Bola Ade"),
        property=property_info,
        start_date="2024-04-01",
        end_date="2025-03-31",
        compensation=FixedCompensation(amount="1200"),
    )
