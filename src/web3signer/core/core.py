from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import urlparse

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from web3signer.config import Config

if TYPE_CHECKING:
    from web3signer.core.modules.auth.flow import AuthFlow
    from web3signer.core.modules.message.ledger import SignatureLedger


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
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from web3signer.core.modules.auth.service import AuthRecordService  # noqa: PLC0415
    from web3signer.core.modules.counter.service import CounterService  # noqa: PLC0415
    from web3signer.core.modules.message.service import MessageService  # noqa: PLC0415
    from web3signer.core.modules.session.service import SessionService  # noqa: PLC0415
    from web3signer.core.modules.user.service import UserService  # noqa: PLC0415

    counter: CounterService
    user: UserService
    auth: AuthRecordService
    session: SessionService
    message: MessageService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._database = database

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for initialization - counters must exist before users and messages
        service_configs = [
            ("counter", "web3signer.core.modules.counter.service", "CounterService"),
            ("user", "web3signer.core.modules.user.service", "UserService"),
            ("auth", "web3signer.core.modules.auth.service", "AuthRecordService"),
            ("session", "web3signer.core.modules.session.service", "SessionService"),
            ("message", "web3signer.core.modules.message.service", "MessageService"),
        ]

        # Dynamically import and instantiate services
        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services that have cleanup logic."""
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, database, services and the auth flows built on them."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    services: Services
    auth: AuthFlow
    ledger: SignatureLedger

    def __init__(self, config: Config) -> None:
        """Initialize core with config, MongoDB, services and flows."""
        from web3signer.core.modules.auth.flow import AuthFlow, AuthSettings  # noqa: PLC0415
        from web3signer.core.modules.message.ledger import SignatureLedger  # noqa: PLC0415
        from web3signer.core.modules.signature.verifier import SignatureVerifier  # noqa: PLC0415

        self.config = config
        self.mongo_client = AsyncMongoClient(
            config.database_url,
            uuidRepresentation="standard",
            tz_aware=True,
            timeoutMS=config.database_timeout_ms,
        )
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.services = Services(self.database)
        self.services.set_core(self)

        verifier = SignatureVerifier()
        self.auth = AuthFlow(
            users=self.services.user,
            auth_records=self.services.auth,
            sessions=self.services.session,
            messages=self.services.message,
            verifier=verifier,
            settings=AuthSettings.from_config(config),
        )
        self.ledger = SignatureLedger(auth=self.auth, messages=self.services.message, verifier=verifier)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Start all services on application startup."""
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        await self.mongo_client.aclose()
