"""
Pytest fixtures for tests.

Uses a session-scoped schema template: migrations run once, and each test
copies the resulting database file instead of re-initializing it.
"""

import shutil
from decimal import Decimal

import pytest

from domain.models.caller import Caller
from infrastructure.schema_manager import SchemaManager
from repositories.bet_repository import BetRepository
from repositories.contest_repository import ContestRepository
from repositories.notification_repository import NotificationRepository
from repositories.profile_repository import ProfileRepository
from repositories.tier_config_repository import TierConfigRepository
from repositories.transaction_repository import TransactionRepository
from repositories.wallet_repository import WalletRepository
from services.bet_service import BetService
from services.contest_service import ContestService
from services.notification_service import NotificationService
from services.profile_service import ProfileService
from services.settlement_service import SettlementService
from services.tier_config_service import TierConfigService
from services.wallet_service import WalletService
from services.withdrawal_service import WithdrawalService
from utils.rate_limiter import GLOBAL_RATE_LIMITER

# =============================================================================
# CENTRALIZED CONSTANTS
# =============================================================================

ADMIN_ID = 1
USER_ID = 1001
OTHER_USER_ID = 1002

NOW = 1_800_000_000
"""Fixed 'current time' for services that take a clock."""

CLOSING_AT = NOW + 7 * 24 * 3600


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    GLOBAL_RATE_LIMITER.reset()
    yield
    GLOBAL_RATE_LIMITER.reset()


@pytest.fixture(scope="session")
def _schema_template_path(tmp_path_factory):
    """Run every migration once per session."""
    template_dir = tmp_path_factory.mktemp("schema_template")
    template_path = str(template_dir / "template.db")
    SchemaManager(template_path).initialize()
    yield template_path


@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path (no schema)."""
    yield str(tmp_path / "temp.db")


@pytest.fixture
def repo_db_path(_schema_template_path, tmp_path):
    """Temporary database with the schema already applied."""
    test_db_path = str(tmp_path / "test.db")
    shutil.copy2(_schema_template_path, test_db_path)
    yield test_db_path


# =============================================================================
# Callers
# =============================================================================


@pytest.fixture
def admin():
    return Caller(user_id=ADMIN_ID, is_admin=True, display_name="Admin")


@pytest.fixture
def user():
    return Caller(user_id=USER_ID, display_name="Ana Souza")


@pytest.fixture
def other_user():
    return Caller(user_id=OTHER_USER_ID, display_name="Bruno")


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Repositories
# =============================================================================


@pytest.fixture
def wallet_repository(repo_db_path):
    return WalletRepository(repo_db_path)


@pytest.fixture
def contest_repository(repo_db_path):
    return ContestRepository(repo_db_path)


@pytest.fixture
def bet_repository(repo_db_path):
    return BetRepository(repo_db_path)


@pytest.fixture
def transaction_repository(repo_db_path):
    return TransactionRepository(repo_db_path)


@pytest.fixture
def tier_config_repository(repo_db_path):
    return TierConfigRepository(repo_db_path)


@pytest.fixture
def profile_repository(repo_db_path):
    return ProfileRepository(repo_db_path)


@pytest.fixture
def notification_repository(repo_db_path):
    return NotificationRepository(repo_db_path)


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def wallet_service(wallet_repository):
    return WalletService(wallet_repository, max_debit_attempts=3)


@pytest.fixture
def tier_config_service(tier_config_repository):
    return TierConfigService(tier_config_repository)


@pytest.fixture
def profile_service(profile_repository):
    return ProfileService(profile_repository)


@pytest.fixture
def notification_service(notification_repository):
    return NotificationService(notification_repository)


@pytest.fixture
def contest_service(contest_repository, bet_repository, clock):
    return ContestService(
        contest_repository,
        bet_repository,
        default_bet_price=Decimal("10.00"),
        clock=clock,
    )


@pytest.fixture
def bet_service(contest_repository, bet_repository, wallet_service, clock):
    return BetService(
        contest_repository,
        bet_repository,
        wallet_service,
        clock=clock,
    )


@pytest.fixture
def settlement_service(
    contest_repository,
    bet_repository,
    transaction_repository,
    wallet_service,
    tier_config_service,
    notification_service,
    clock,
):
    return SettlementService(
        contest_repository,
        bet_repository,
        transaction_repository,
        wallet_service,
        tier_config_service,
        notification_service=notification_service,
        clock=clock,
    )


@pytest.fixture
def withdrawal_service(transaction_repository, wallet_service, profile_service, notification_service):
    return WithdrawalService(
        transaction_repository,
        wallet_service,
        profile_service,
        notification_service=notification_service,
        min_amount=Decimal("10.00"),
    )


@pytest.fixture
def open_contest(contest_service, admin):
    """An open contest priced at R$ 10.00 with no carryover."""
    result = contest_service.open_contest(admin, "11/2026", CLOSING_AT)
    assert result.success, result.error
    return result.value
