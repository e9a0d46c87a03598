import re
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from freetalk.infra.mongo import StoreConfig


def _regex_matches(value, pattern):
	values = value if isinstance(value, list) else [value]
	return any(isinstance(item, str) and re.search(pattern, item) for item in values)


def _matches(doc, query):
	for key, expected in (query or {}).items():
		if key == "$or":
			if not any(_matches(doc, clause) for clause in expected):
				return False
		elif isinstance(expected, dict) and "$regex" in expected:
			if not _regex_matches(doc.get(key), expected["$regex"]):
				return False
		elif isinstance(expected, dict) and "$in" in expected:
			if doc.get(key) not in expected["$in"]:
				return False
		elif doc.get(key) != expected:
			return False
	return True


class FakeCursor:
	"""In-memory stand-in for the async driver cursor."""

	def __init__(self, docs, error=None):
		self._docs = list(docs)
		self._error = error

	def sort(self, key, direction=1):
		self._docs.sort(key=lambda doc: doc.get(key) or datetime.min, reverse=direction < 0)
		return self

	def limit(self, count):
		self._docs = self._docs[:count]
		return self

	async def to_list(self, length=None):
		if self._error is not None:
			raise self._error
		docs = self._docs if length is None else self._docs[:length]
		return [dict(doc) for doc in docs]


class FakeCollection:
	def __init__(self, name):
		self.name = name
		self.docs = []
		self.error = None
		self.queries = []

	def find(self, query=None, projection=None):
		self.queries.append((query, projection))
		return FakeCursor([doc for doc in self.docs if _matches(doc, query)], self.error)

	async def count_documents(self, query):
		if self.error is not None:
			raise self.error
		return sum(1 for doc in self.docs if _matches(doc, query))


class FakeDatabase:
	def __init__(self, name):
		self.name = name
		self._collections = {}

	def __getitem__(self, name):
		if name not in self._collections:
			self._collections[name] = FakeCollection(name)
		return self._collections[name]


class FakeAdmin:
	def __init__(self, store):
		self._store = store

	async def command(self, name):
		self._store.commands.append(name)
		if self._store.ping_error is not None:
			raise self._store.ping_error
		return {"ok": 1.0}


class FakeClient:
	def __init__(self, store, endpoint, options):
		self.endpoint = endpoint
		self.options = options
		self.close_calls = 0
		self.admin = FakeAdmin(store)
		self._store = store

	def get_default_database(self, default=None):
		return self._store.database

	async def close(self):
		self.close_calls += 1

	@property
	def closed(self):
		return self.close_calls > 0


class FakeStore:
	"""Document store double; pass ``store.client_factory`` where the tools expect a client class."""

	def __init__(self):
		self.database = FakeDatabase("freetalk")
		self.clients = []
		self.commands = []
		self.ping_error = None

	def client_factory(self, endpoint, **options):
		client = FakeClient(self, endpoint, options)
		self.clients.append(client)
		return client

	def collection(self, name):
		return self.database[name]

	@property
	def client(self):
		return self.clients[-1]


@pytest.fixture
def fake_store():
	return FakeStore()


@pytest.fixture
def store_config():
	return StoreConfig(endpoint="mongodb://store.test:27017/freetalk")
