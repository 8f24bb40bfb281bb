"""Pytest bootstrap configuration.

Environment is set before application modules are imported so settings pick
up an isolated in-memory database.
"""
import os

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEFAULT_LOCALE", "en")

import pytest

from core.i18n import set_locale
from tests.fakes import InMemoryChargeRepository, FakeUnitOfWork


@pytest.fixture(autouse=True)
def _reset_locale():
    set_locale("en")
    yield
    set_locale("en")


@pytest.fixture
def charge_repo() -> InMemoryChargeRepository:
    return InMemoryChargeRepository()


@pytest.fixture
def uow_factory(charge_repo):
    def factory(*, readonly: bool = False) -> FakeUnitOfWork:
        return FakeUnitOfWork(charge_repo, readonly=readonly)

    return factory
