import os
from dotenv import load_dotenv
from pydantic import BaseModel

from supply_chain.domain.exceptions import ConfigurationError

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


class QueueSettings(BaseModel):
    processing_interval_seconds: float = 30
    max_retries: int = 3
    enable_processing: bool = True
    # "abandon" | "retry_forever"
    retry_exhaustion_policy: str = "abandon"
    requeue_on_success: bool = True
    command_timeout_seconds: float = 20
    collaborator_timeout_seconds: float = 10
    shutdown_grace_seconds: float = 5

    def check_timeouts(self) -> None:
        """A stalled step must give up before the next pass is due"""
        interval = self.processing_interval_seconds
        if self.collaborator_timeout_seconds >= interval:
            raise ConfigurationError(
                f"Collaborator timeout {self.collaborator_timeout_seconds}s must be shorter "
                f"than the processing interval {interval}s"
            )
        if self.command_timeout_seconds >= interval:
            raise ConfigurationError(
                f"Command timeout {self.command_timeout_seconds}s must be shorter "
                f"than the processing interval {interval}s"
            )


class TargetQuantity(BaseModel):
    target: int
    reorder_point: int
    order_quantity: int
    unit_price: int


class ReorderSettings(BaseModel):
    enable_auto_reorder: bool = True
    run_on_tick: bool = True
    check_balance: bool = True
    supplier_origin: str = "thoh"
    supplier_bank_account: str = "TREASURY_ACCOUNT"
    sand: TargetQuantity = TargetQuantity(target=1000, reorder_point=150, order_quantity=500, unit_price=5)
    copper: TargetQuantity = TargetQuantity(target=1000, reorder_point=150, order_quantity=500, unit_price=8)
    equipment: TargetQuantity = TargetQuantity(target=2, reorder_point=0, order_quantity=1, unit_price=5000)


class EquipmentParameterSettings(BaseModel):
    input_sand_kg: int = 10
    input_copper_kg: int = 5
    output_screens_per_day: int = 100
    equipment_weight: int = 1000


class Settings:
    # Database
    POSTGRES_CONNECTION_STRING: str = os.getenv("POSTGRES_CONNECTION_STRING", "")
    SQLITE_FALLBACK_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./supply_chain.db")

    # Services
    BANK_BASE_URL: str = os.getenv("BANK_BASE_URL", "http://localhost:8081")
    LOGISTICS_BASE_URL: str = os.getenv("LOGISTICS_BASE_URL", "http://localhost:8082")
    PAYER_BANK_NAME: str = os.getenv("PAYER_BANK_NAME", "commercial-bank")
    COMPANY_ID: str = os.getenv("COMPANY_ID", "screen-supplier")
    BANK_SAFETY_BALANCE: int = _env_int("BANK_SAFETY_BALANCE", 2000)

    @property
    def DATABASE_URL(self) -> str:
        """Async URL for the application"""
        if not self.POSTGRES_CONNECTION_STRING:
            return self.SQLITE_FALLBACK_URL
        return self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql+asyncpg://")

    @property
    def SYNC_DATABASE_URL(self) -> str:
        """Sync URL for Alembic"""
        if not self.POSTGRES_CONNECTION_STRING:
            return self.SQLITE_FALLBACK_URL.replace("sqlite+aiosqlite://", "sqlite://")
        return self.POSTGRES_CONNECTION_STRING.replace("postgres://", "postgresql://")

    @property
    def queue(self) -> QueueSettings:
        return QueueSettings(
            processing_interval_seconds=float(os.getenv("QUEUE_PROCESSING_INTERVAL_SECONDS", "30")),
            max_retries=_env_int("QUEUE_MAX_RETRIES", 3),
            enable_processing=_env_bool("QUEUE_ENABLE_PROCESSING", True),
            retry_exhaustion_policy=os.getenv("QUEUE_RETRY_EXHAUSTION_POLICY", "abandon"),
            requeue_on_success=_env_bool("QUEUE_REQUEUE_ON_SUCCESS", True),
            command_timeout_seconds=float(os.getenv("QUEUE_COMMAND_TIMEOUT_SECONDS", "20")),
            collaborator_timeout_seconds=float(os.getenv("COLLABORATOR_TIMEOUT_SECONDS", "10")),
            shutdown_grace_seconds=float(os.getenv("QUEUE_SHUTDOWN_GRACE_SECONDS", "5")),
        )

    @property
    def equipment_parameters(self) -> EquipmentParameterSettings:
        return EquipmentParameterSettings(
            input_sand_kg=_env_int("EQUIPMENT_INPUT_SAND_KG", 10),
            input_copper_kg=_env_int("EQUIPMENT_INPUT_COPPER_KG", 5),
            output_screens_per_day=_env_int("EQUIPMENT_OUTPUT_SCREENS_PER_DAY", 100),
            equipment_weight=_env_int("EQUIPMENT_WEIGHT", 1000),
        )

    @property
    def reorder(self) -> ReorderSettings:
        return ReorderSettings(
            enable_auto_reorder=_env_bool("REORDER_ENABLE_AUTO", True),
            run_on_tick=_env_bool("REORDER_RUN_ON_TICK", True),
            check_balance=_env_bool("REORDER_CHECK_BALANCE", True),
            supplier_origin=os.getenv("SUPPLIER_ORIGIN", "thoh"),
            supplier_bank_account=os.getenv("SUPPLIER_BANK_ACCOUNT", "TREASURY_ACCOUNT"),
            sand=_target_from_env("SAND", 1000, 150, 500, 5),
            copper=_target_from_env("COPPER", 1000, 150, 500, 8),
            equipment=_target_from_env("EQUIPMENT", 2, 0, 1, 5000),
        )


def _target_from_env(prefix: str, target: int, reorder_point: int, order_quantity: int, unit_price: int) -> TargetQuantity:
    return TargetQuantity(
        target=_env_int(f"{prefix}_TARGET", target),
        reorder_point=_env_int(f"{prefix}_REORDER_POINT", reorder_point),
        order_quantity=_env_int(f"{prefix}_ORDER_QUANTITY", order_quantity),
        unit_price=_env_int(f"{prefix}_UNIT_PRICE", unit_price),
    )


settings = Settings()
