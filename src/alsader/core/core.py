from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from alsader.config import Config

logger = structlog.get_logger(__name__)

# (attribute, class name) per module under alsader.core.modules; services start in this order
SERVICE_REGISTRY: tuple[tuple[str, str], ...] = (
    ("user", "UserService"),
    ("session", "SessionService"),
    ("access", "AccessService"),
    ("counter", "CounterService"),
    ("document", "DocumentService"),
    ("reservation", "ReservationService"),
    ("availability", "AvailabilityService"),
    ("allocation", "AllocationService"),
    ("audit", "AuditService"),
    ("admin", "AdminService"),
)


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        self._core = core


class Services:
    """Service registry, one instance per entry of SERVICE_REGISTRY."""

    from alsader.core.modules.access.service import AccessService  # noqa: PLC0415
    from alsader.core.modules.admin.service import AdminService  # noqa: PLC0415
    from alsader.core.modules.allocation.service import AllocationService  # noqa: PLC0415
    from alsader.core.modules.audit.service import AuditService  # noqa: PLC0415
    from alsader.core.modules.availability.service import AvailabilityService  # noqa: PLC0415
    from alsader.core.modules.counter.service import CounterService  # noqa: PLC0415
    from alsader.core.modules.document.service import DocumentService  # noqa: PLC0415
    from alsader.core.modules.reservation.service import ReservationService  # noqa: PLC0415
    from alsader.core.modules.session.service import SessionService  # noqa: PLC0415
    from alsader.core.modules.user.service import UserService  # noqa: PLC0415

    user: UserService
    session: SessionService
    access: AccessService
    counter: CounterService
    document: DocumentService
    reservation: ReservationService
    availability: AvailabilityService
    allocation: AllocationService
    audit: AuditService
    admin: AdminService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self._services: list[Service] = []
        for attr_name, class_name in SERVICE_REGISTRY:
            module = importlib.import_module(f"alsader.core.modules.{attr_name}.service")
            service = cast(type[Service], getattr(module, class_name))(database)
            setattr(self, attr_name, service)
            self._services.append(service)

    def set_core(self, core: Core) -> None:
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop services in reverse start order."""
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, database, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    services: Services

    def __init__(self, config: Config) -> None:
        self.config = config
        # Standard UUID encoding for _id and user references; datetimes come back timezone-aware (UTC)
        self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard", tz_aware=True)
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Start services, and always stop them and close the client afterwards."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.services.start_all()
        logger.info("core_started", database=self.database.name)

    async def on_stop(self) -> None:
        await self.services.stop_all()
        await self.mongo_client.aclose()

    async def ping(self) -> bool:
        """Whether the database answers right now."""
        try:
            await self.database.command("ping")
        except PyMongoError:
            logger.warning("database_ping_failed", exc_info=True)
            return False
        return True
