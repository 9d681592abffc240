"""Storage connection and runtime services shared by the routers."""
import logging
from datetime import timedelta
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from agile_canvas.config import settings
from agile_canvas.models.project import Currency
from agile_canvas.services.analytics import OverdueAlertMonitor
from agile_canvas.services.currency_service import CurrencyService
from agile_canvas.services.project_store import ProjectStore
from agile_canvas.storage import MongoStorage, ProjectStorage, build_storage


logger = logging.getLogger(__name__)


class Database:
    """Owns the storage backend, the project store and the currency rates."""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None
    storage: Optional[ProjectStorage] = None
    store: Optional[ProjectStore] = None
    currency: Optional[CurrencyService] = None
    alerts: Optional[OverdueAlertMonitor] = None

    async def connect(self) -> None:
        """Open the configured storage backend and load the project store."""
        collection = None
        if settings.storage_backend == "mongodb":
            self.client = AsyncIOMotorClient(settings.mongodb_url)
            self.db = self.client[settings.mongodb_db_name]
            collection = self.db["storage"]
            logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

        self.storage = build_storage(
            settings.storage_backend,
            path=settings.storage_path,
            key=settings.storage_key,
            collection=collection,
        )
        if isinstance(self.storage, MongoStorage):
            await self.storage.prime()

        self.store = ProjectStore(self.storage, default_currency=Currency(settings.default_currency))
        self.currency = CurrencyService(
            api_url=settings.currency_api_url,
            timeout=settings.currency_request_timeout,
        )
        self.alerts = OverdueAlertMonitor(
            cooldown=timedelta(minutes=settings.overdue_alert_cooldown_minutes),
        )
        logger.info("Project store ready (%s backend)", settings.storage_backend)

    async def disconnect(self) -> None:
        """Flush pending writes and close the connection."""
        if isinstance(self.storage, MongoStorage):
            await self.storage.flush()
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")
        self.client = None
        self.db = None


# Global database instance
database = Database()


async def get_store() -> ProjectStore:
    """Dependency to get the project store."""
    if database.store is None:
        raise RuntimeError("Project store not initialized")
    return database.store


async def get_currency_service() -> CurrencyService:
    """Dependency to get the currency service."""
    if database.currency is None:
        raise RuntimeError("Currency service not initialized")
    return database.currency


async def get_alert_monitor() -> OverdueAlertMonitor:
    """Dependency to get the overdue alert monitor."""
    if database.alerts is None:
        raise RuntimeError("Alert monitor not initialized")
    return database.alerts
