"""Async MongoDB session management for the maintenance tools."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import ConfigurationError, PyMongoError

from freetalk.infra.exceptions import ConfigError, ConnectError
from freetalk.obs.logging import get_logger
from freetalk.settings import Settings, settings as default_settings

LOGGER = get_logger(__name__)

DEFAULT_DATABASE = "freetalk"

ClientFactory = Callable[..., Any]


@dataclass(frozen=True)
class StoreConfig:
	endpoint: Optional[str]
	database: Optional[str] = None
	connect_timeout_ms: int = 5000
	socket_timeout_ms: int = 45000

	@classmethod
	def from_settings(cls, settings: Optional[Settings] = None) -> "StoreConfig":
		source = settings or default_settings
		return cls(
			endpoint=source.store_endpoint,
			database=source.store_database,
			connect_timeout_ms=source.store_connect_timeout_ms,
			socket_timeout_ms=source.store_socket_timeout_ms,
		)


class StoreSession:
	"""An open client plus the database the tools read from."""

	def __init__(self, client: Any, database: Any) -> None:
		self.client = client
		self.database = database
		self._open = True

	@property
	def is_open(self) -> bool:
		return self._open

	def collection(self, name: str) -> Any:
		return self.database[name]

	async def close(self) -> None:
		if not self._open:
			return
		self._open = False
		await self.client.close()
		LOGGER.info("store session closed")


async def connect(config: StoreConfig, *, client_factory: ClientFactory = AsyncMongoClient) -> StoreSession:
	if not config.endpoint or not config.endpoint.strip():
		raise ConfigError("configuration error: STORE_ENDPOINT is not set")
	try:
		client = client_factory(
			config.endpoint,
			serverSelectionTimeoutMS=config.connect_timeout_ms,
			connectTimeoutMS=config.connect_timeout_ms,
			socketTimeoutMS=config.socket_timeout_ms,
		)
	except ConfigurationError as exc:
		raise ConfigError(f"configuration error: invalid STORE_ENDPOINT ({exc})") from exc

	LOGGER.info("connecting to document store", extra={"connect_timeout_ms": config.connect_timeout_ms})
	try:
		await client.admin.command("ping")
		database = client.get_default_database(default=config.database or DEFAULT_DATABASE)
	except PyMongoError as exc:
		await client.close()
		raise ConnectError(f"could not connect to document store: {exc}") from exc
	except BaseException:
		# cancellation and unexpected failures still release the client
		await client.close()
		raise
	LOGGER.info("connected to document store", extra={"database": database.name})
	return StoreSession(client, database)


@asynccontextmanager
async def open_session(
	config: StoreConfig,
	*,
	client_factory: ClientFactory = AsyncMongoClient,
) -> AsyncIterator[StoreSession]:
	"""Acquire a store session and release it on every exit path."""
	session = await connect(config, client_factory=client_factory)
	try:
		yield session
	finally:
		await session.close()
