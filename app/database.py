# app/database.py
"""
Repository adapters over a document store.

``MongoStore`` talks to MongoDB through pymongo's asyncio client.
``MemoryStore`` keeps documents in process (tests, local demos). Both hand
out one ``Repository`` per resource kind and translate driver failures into
``StoreError`` so nothing driver-specific leaks past this module.
"""
import asyncio
import copy
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import AsyncMongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from . import config
from .errors import DuplicateResource, InvalidIdentifier, StoreError
from .models import ResourceKind

logger = logging.getLogger(__name__)

# fields the store owns; never taken from a payload
PROTECTED_FIELDS = ("_id", "createdAt", "updatedAt")

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def parse_object_id(resource_id: Any) -> ObjectId:
    if resource_id is None:
        # ObjectId(None) would mint a fresh id
        raise InvalidIdentifier("missing identifier")
    try:
        return ObjectId(resource_id)
    except (InvalidId, TypeError) as e:
        raise InvalidIdentifier(f"malformed identifier: {resource_id!r}") from e

def _writable(changes: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}


class Repository:
    """Async CRUD surface the handlers depend on."""

    def __init__(self, kind: ResourceKind):
        self.kind = kind

    async def find(self, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def find_by_id(self, resource_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    async def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def update_by_id(self, resource_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        raise NotImplementedError


# ---------------------------
# In-memory backend
# ---------------------------
class MemoryRepository(Repository):
    def __init__(self, kind: ResourceKind, documents: Dict[str, Dict[str, Any]], lock: asyncio.Lock):
        super().__init__(kind)
        self._docs = documents
        self._lock = lock

    def _check_unique(self, document: Dict[str, Any], exclude_id: Optional[str] = None):
        for field in self.kind.unique_fields:
            if field not in document:
                continue
            for existing in self._docs.values():
                if existing["_id"] != exclude_id and existing.get(field) == document[field]:
                    raise DuplicateResource(self.kind.name, field)

    async def find(self, filters):
        out = []
        for doc in self._docs.values():
            if all(doc.get(k) == v for k, v in filters.items()):
                out.append(copy.deepcopy(doc))
        return out

    async def find_by_id(self, resource_id):
        key = str(parse_object_id(resource_id))
        doc = self._docs.get(key)
        return copy.deepcopy(doc) if doc is not None else None

    async def create(self, document):
        async with self._lock:
            self._check_unique(document)
            now = _utcnow()
            doc = {"_id": str(ObjectId()), **_writable(document), "createdAt": now, "updatedAt": now}
            self._docs[doc["_id"]] = doc
            return copy.deepcopy(doc)

    async def update_by_id(self, resource_id, changes):
        key = str(parse_object_id(resource_id))
        async with self._lock:
            doc = self._docs.get(key)
            if doc is None:
                return None
            self._check_unique(changes, exclude_id=key)
            doc.update(_writable(changes))
            doc["updatedAt"] = _utcnow()
            return copy.deepcopy(doc)


class MemoryStore:
    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    async def connect(self, kinds: Iterable[ResourceKind] = ()):
        logger.info("Using in-memory document store")

    async def close(self):
        logger.info("In-memory document store closed")

    def repository(self, kind: ResourceKind) -> MemoryRepository:
        docs = self._collections.setdefault(kind.collection, {})
        return MemoryRepository(kind, docs, self._get_lock(kind.collection))

    def clear(self):
        for docs in self._collections.values():
            docs.clear()


# ---------------------------
# MongoDB backend
# ---------------------------
def _serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    doc["_id"] = str(doc["_id"])
    return doc


class MongoRepository(Repository):
    def __init__(self, kind: ResourceKind, collection):
        super().__init__(kind)
        self._coll = collection

    @contextmanager
    def _driver_errors(self, action: str):
        try:
            yield
        except DuplicateKeyError as e:
            field = next(iter((e.details or {}).get("keyValue", {})), None)
            raise DuplicateResource(self.kind.name, field) from e
        except PyMongoError as e:
            raise StoreError(f"{action} on '{self.kind.collection}' failed") from e

    async def find(self, filters):
        with self._driver_errors("find"):
            docs = await self._coll.find(dict(filters)).to_list(None)
        return [_serialize(d) for d in docs]

    async def find_by_id(self, resource_id):
        oid = parse_object_id(resource_id)
        with self._driver_errors("find_by_id"):
            doc = await self._coll.find_one({"_id": oid})
        return _serialize(doc)

    async def create(self, document):
        now = _utcnow()
        doc = {**_writable(document), "createdAt": now, "updatedAt": now}
        with self._driver_errors("create"):
            result = await self._coll.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _serialize(doc)

    async def update_by_id(self, resource_id, changes):
        oid = parse_object_id(resource_id)
        update = {"$set": {**_writable(changes), "updatedAt": _utcnow()}}
        with self._driver_errors("update_by_id"):
            doc = await self._coll.find_one_and_update(
                {"_id": oid}, update, return_document=ReturnDocument.AFTER
            )
        return _serialize(doc)


class MongoStore:
    def __init__(self, uri: str, database: str, timeout_ms: int = 5000):
        self.uri = uri
        self.database_name = database
        self.timeout_ms = timeout_ms
        self._client: Optional[AsyncMongoClient] = None
        self._db = None

    async def connect(self, kinds: Iterable[ResourceKind] = ()):
        self._client = AsyncMongoClient(self.uri, serverSelectionTimeoutMS=self.timeout_ms, tz_aware=True)
        try:
            await self._client.admin.command("ping")
            self._db = self._client[self.database_name]
            for kind in kinds:
                for field in kind.unique_fields:
                    await self._db[kind.collection].create_index(field, unique=True)
        except PyMongoError as e:
            await self._client.close()
            self._client = None
            raise StoreError("could not connect to document store") from e
        logger.info("Connected to MongoDB database '%s'", self.database_name)

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._db = None
        logger.info("MongoDB connection closed")

    def repository(self, kind: ResourceKind) -> MongoRepository:
        if self._db is None:
            raise StoreError("document store is not connected")
        return MongoRepository(kind, self._db[kind.collection])


def build_store():
    """Create the store selected by STORE_BACKEND (not yet connected)."""
    backend = config.STORE_BACKEND.lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "mongo":
        return MongoStore(config.MONGODB_URI, config.MONGODB_DATABASE, config.MONGODB_TIMEOUT_MS)
    raise ValueError(f"Unknown STORE_BACKEND: {config.STORE_BACKEND!r}")
