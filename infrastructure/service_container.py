"""
Service container for dependency injection and initialization.

This module centralizes service creation and wiring for both the Discord bot
and the webhook app.

Usage:
    container = ServiceContainer(config)
    await container.initialize()

    # Access services
    bet_service = container.bet_service
    settlement_service = container.settlement_service
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import config as app_config

if TYPE_CHECKING:
    from services.bet_service import BetService
    from services.contest_service import ContestService
    from services.deposit_service import DepositService
    from services.notification_service import NotificationService
    from services.profile_service import ProfileService
    from services.settlement_service import SettlementService
    from services.tier_config_service import TierConfigService
    from services.wallet_service import WalletService
    from services.withdrawal_service import WithdrawalService

from infrastructure.mercado_pago_client import MercadoPagoClient
from infrastructure.schema_manager import SchemaManager

# Repositories
from repositories.bet_repository import BetRepository
from repositories.contest_repository import ContestRepository
from repositories.notification_repository import NotificationRepository
from repositories.profile_repository import ProfileRepository
from repositories.tier_config_repository import TierConfigRepository
from repositories.transaction_repository import TransactionRepository
from repositories.wallet_repository import WalletRepository

logger = logging.getLogger("bolao.infrastructure.container")


@dataclass
class RepositoryContainer:
    """Container for all repositories."""

    wallet: WalletRepository | None = None
    contest: ContestRepository | None = None
    bet: BetRepository | None = None
    transaction: TransactionRepository | None = None
    tier_config: TierConfigRepository | None = None
    profile: ProfileRepository | None = None
    notification: NotificationRepository | None = None


@dataclass
class ServiceConfig:
    """Configuration for service initialization."""

    # Database
    db_path: str = app_config.DB_PATH

    # Contest settings
    default_bet_price: Decimal = app_config.DEFAULT_BET_PRICE

    # Wallet settings
    deposit_min_amount: Decimal = app_config.DEPOSIT_MIN_AMOUNT
    withdrawal_min_amount: Decimal = app_config.WITHDRAWAL_MIN_AMOUNT
    ledger_debit_max_attempts: int = app_config.LEDGER_DEBIT_MAX_ATTEMPTS

    # Payment provider
    mercado_pago_access_token: str | None = app_config.MERCADO_PAGO_ACCESS_TOKEN
    mercado_pago_base_url: str = app_config.MERCADO_PAGO_BASE_URL
    mercado_pago_notification_url: str | None = app_config.MERCADO_PAGO_NOTIFICATION_URL
    mercado_pago_timeout_seconds: float = app_config.MERCADO_PAGO_TIMEOUT_SECONDS
    payer_email_domain: str = app_config.PAYER_EMAIL_DOMAIN


class ServiceContainer:
    """
    Central container for all application services.

    Handles proper initialization order and dependency injection.

    Example:
        container = ServiceContainer(config)
        await container.initialize()

        # Services are now available
        bet_service = container.bet_service
    """

    def __init__(self, config: ServiceConfig | None = None, payment_client: MercadoPagoClient | None = None):
        """
        Args:
            config: Service configuration (uses defaults if None)
            payment_client: Override for the payment provider client (tests)
        """
        self.config = config or ServiceConfig()
        self._initialized = False
        self._repos = RepositoryContainer()
        self._payment_client = payment_client
        self._services: dict[str, Any] = {}

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Initialize all services in correct order.

        This method is idempotent - calling it multiple times has no effect.
        """
        self.initialize_sync()

    def initialize_sync(self) -> None:
        """Same as initialize(), for callers without an event loop (webhook app, scripts)."""
        if self._initialized:
            logger.debug("ServiceContainer already initialized, skipping")
            return

        logger.info("Initializing ServiceContainer...")
        self._init_database()
        self._init_repositories()
        self._init_core_services()
        self._init_ledger_services()
        self._initialized = True
        logger.info("ServiceContainer initialization complete")

    def _init_database(self) -> None:
        """Initialize database and run migrations."""
        logger.debug(f"Initializing database at {self.config.db_path}")
        SchemaManager(self.config.db_path).initialize()

    def _init_repositories(self) -> None:
        logger.debug("Initializing repositories")

        db_path = self.config.db_path
        self._repos.wallet = WalletRepository(db_path)
        self._repos.contest = ContestRepository(db_path)
        self._repos.bet = BetRepository(db_path)
        self._repos.transaction = TransactionRepository(db_path)
        self._repos.tier_config = TierConfigRepository(db_path)
        self._repos.profile = ProfileRepository(db_path)
        self._repos.notification = NotificationRepository(db_path)

    def _init_core_services(self) -> None:
        """Services with no service dependencies."""
        logger.debug("Initializing core services")

        from services.notification_service import NotificationService
        from services.profile_service import ProfileService
        from services.tier_config_service import TierConfigService
        from services.wallet_service import WalletService

        self._services["wallet"] = WalletService(
            self._repos.wallet,
            max_debit_attempts=self.config.ledger_debit_max_attempts,
        )
        self._services["tier_config"] = TierConfigService(self._repos.tier_config)
        self._services["profile"] = ProfileService(self._repos.profile)
        self._services["notification"] = NotificationService(self._repos.notification)

    def _init_ledger_services(self) -> None:
        """Contest, bet, settlement, withdrawal and deposit services."""
        logger.debug("Initializing ledger services")

        from services.bet_service import BetService
        from services.contest_service import ContestService
        from services.deposit_service import DepositService
        from services.settlement_service import SettlementService
        from services.withdrawal_service import WithdrawalService

        wallet = self._services["wallet"]
        notification = self._services["notification"]

        self._services["contest"] = ContestService(
            self._repos.contest,
            self._repos.bet,
            default_bet_price=self.config.default_bet_price,
        )
        self._services["bet"] = BetService(
            self._repos.contest,
            self._repos.bet,
            wallet,
        )
        self._services["settlement"] = SettlementService(
            self._repos.contest,
            self._repos.bet,
            self._repos.transaction,
            wallet,
            self._services["tier_config"],
            notification_service=notification,
        )
        self._services["withdrawal"] = WithdrawalService(
            self._repos.transaction,
            wallet,
            self._services["profile"],
            notification_service=notification,
            min_amount=self.config.withdrawal_min_amount,
        )

        payment_client = self._payment_client or MercadoPagoClient(
            access_token=self.config.mercado_pago_access_token,
            base_url=self.config.mercado_pago_base_url,
            notification_url=self.config.mercado_pago_notification_url,
            timeout=self.config.mercado_pago_timeout_seconds,
        )
        if not payment_client.is_configured:
            logger.warning("MERCADO_PAGO_ACCESS_TOKEN not set; /deposit will fail until it is configured")
        self._services["deposit"] = DepositService(
            self._repos.transaction,
            wallet,
            payment_client,
            notification_service=notification,
            min_amount=self.config.deposit_min_amount,
            payer_email_domain=self.config.payer_email_domain,
        )

    # Repository accessors

    @property
    def wallet_repo(self) -> WalletRepository:
        return self._repos.wallet

    @property
    def contest_repo(self) -> ContestRepository:
        return self._repos.contest

    @property
    def bet_repo(self) -> BetRepository:
        return self._repos.bet

    @property
    def transaction_repo(self) -> TransactionRepository:
        return self._repos.transaction

    # Service accessors

    @property
    def wallet_service(self) -> "WalletService | None":
        return self._services.get("wallet")

    @property
    def tier_config_service(self) -> "TierConfigService | None":
        return self._services.get("tier_config")

    @property
    def profile_service(self) -> "ProfileService | None":
        return self._services.get("profile")

    @property
    def notification_service(self) -> "NotificationService | None":
        return self._services.get("notification")

    @property
    def contest_service(self) -> "ContestService | None":
        return self._services.get("contest")

    @property
    def bet_service(self) -> "BetService | None":
        return self._services.get("bet")

    @property
    def settlement_service(self) -> "SettlementService | None":
        return self._services.get("settlement")

    @property
    def withdrawal_service(self) -> "WithdrawalService | None":
        return self._services.get("withdrawal")

    @property
    def deposit_service(self) -> "DepositService | None":
        return self._services.get("deposit")

    def expose_to_bot(self, bot) -> None:
        """
        Attach services to the Discord bot object; cogs read them in setup().

        Args:
            bot: The Discord bot instance
        """
        bot.wallet_service = self.wallet_service
        bot.tier_config_service = self.tier_config_service
        bot.profile_service = self.profile_service
        bot.notification_service = self.notification_service
        bot.contest_service = self.contest_service
        bot.bet_service = self.bet_service
        bot.settlement_service = self.settlement_service
        bot.withdrawal_service = self.withdrawal_service
        bot.deposit_service = self.deposit_service
        bot.transaction_repo = self.transaction_repo

        logger.info("Services exposed to bot object")
