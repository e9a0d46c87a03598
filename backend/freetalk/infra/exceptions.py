"""Errors raised while talking to the document store."""

from __future__ import annotations


class StoreError(Exception):
	"""Base class for document store failures. All of them are fatal for a tool run."""

	detail: str = "store_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class ConfigError(StoreError):
	"""Raised when the store endpoint is missing or malformed."""

	detail = "configuration_error"


class ConnectError(StoreError):
	"""Raised when the store is unreachable or refuses authentication."""

	detail = "connect_error"


class QueryError(StoreError):
	"""Raised when the store rejects a read."""

	detail = "query_error"
