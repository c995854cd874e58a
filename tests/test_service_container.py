"""
Tests for the ServiceContainer wiring.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from infrastructure.mercado_pago_client import MercadoPagoClient
from infrastructure.service_container import ServiceConfig, ServiceContainer


@pytest.fixture
def payment_client():
    client = MagicMock(spec=MercadoPagoClient)
    client.is_configured = True
    return client


@pytest.fixture
def container(temp_db_path, payment_client):
    return ServiceContainer(ServiceConfig(db_path=temp_db_path), payment_client=payment_client)


@pytest.mark.asyncio
async def test_initialize_creates_repositories_and_services(container):
    assert container.is_initialized is False

    await container.initialize()

    assert container.is_initialized is True
    assert container.wallet_repo is not None
    assert container.contest_repo is not None
    assert container.bet_repo is not None
    assert container.transaction_repo is not None
    for name in (
        "wallet_service",
        "tier_config_service",
        "profile_service",
        "notification_service",
        "contest_service",
        "bet_service",
        "settlement_service",
        "withdrawal_service",
        "deposit_service",
    ):
        assert getattr(container, name) is not None, name


@pytest.mark.asyncio
async def test_initialize_is_idempotent(container):
    await container.initialize()
    wallet_service = container.wallet_service

    await container.initialize()
    container.initialize_sync()

    assert container.wallet_service is wallet_service


def test_services_missing_before_initialize(container):
    assert container.bet_service is None
    assert container.deposit_service is None


def test_config_flows_into_services(temp_db_path, payment_client):
    container = ServiceContainer(
        ServiceConfig(db_path=temp_db_path, ledger_debit_max_attempts=7),
        payment_client=payment_client,
    )
    container.initialize_sync()

    assert container.wallet_service.max_debit_attempts == 7


def test_unconfigured_provider_still_initializes(temp_db_path):
    container = ServiceContainer(ServiceConfig(db_path=temp_db_path, mercado_pago_access_token=None))

    container.initialize_sync()

    assert container.deposit_service is not None


def test_expose_to_bot(container):
    container.initialize_sync()
    bot = SimpleNamespace()

    container.expose_to_bot(bot)

    assert bot.bet_service is container.bet_service
    assert bot.contest_service is container.contest_service
    assert bot.settlement_service is container.settlement_service
    assert bot.withdrawal_service is container.withdrawal_service
    assert bot.deposit_service is container.deposit_service
    assert bot.wallet_service is container.wallet_service
    assert bot.profile_service is container.profile_service
    assert bot.transaction_repo is container.transaction_repo
