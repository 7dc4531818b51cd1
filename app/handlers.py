# app/handlers.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import Request

from .core import validate_payload
from .database import Repository
from .errors import ResourceNotFound, ServiceError, StoreError, ValidationFailed
from .models import ResourceKind

logger = logging.getLogger(__name__)

# This file holds the per-resource logic behind every API endpoint.

class ResourceHandler:
    """Validation -> repository call -> outcome mapping for one resource kind."""

    def __init__(self, kind: ResourceKind, repository: Repository):
        self.kind = kind
        self.repository = repository

    async def _call(self, op, *args):
        try:
            return await op(*args)
        except ServiceError:
            raise
        except Exception as e:
            raise StoreError(f"{self.kind.collection} repository call failed") from e

    async def list(self, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = {k: v for k, v in filters.items() if v is not None}
        return await self._call(self.repository.find, query)

    async def create(self, payload: Any) -> Dict[str, Any]:
        document, violations = validate_payload(self.kind.create_schema, payload)
        if violations:
            raise ValidationFailed(self.kind.name, violations)
        created = await self._call(self.repository.create, document)
        logger.info("Created %s %s", self.kind.name.lower(), created["_id"])
        return created

    async def get(self, resource_id: str) -> Dict[str, Any]:
        doc = await self._call(self.repository.find_by_id, resource_id)
        if doc is None:
            raise ResourceNotFound(self.kind.name)
        return doc

    async def update(self, resource_id: str, payload: Any) -> Dict[str, Any]:
        changes, violations = validate_payload(self.kind.update_schema, payload, partial=True)
        if violations:
            raise ValidationFailed(self.kind.name, violations)
        updated: Optional[Dict[str, Any]] = await self._call(self.repository.update_by_id, resource_id, changes)
        if updated is None:
            raise ResourceNotFound(self.kind.name)
        logger.info("Updated %s %s (%s)", self.kind.name.lower(), resource_id, ", ".join(changes) or "no fields")
        return updated


def handler_for(kind: ResourceKind):
    """FastAPI dependency that binds a handler to the app's store."""
    def dependency(request: Request) -> ResourceHandler:
        store = request.app.state.store
        if store is None:
            raise StoreError("document store is not initialised")
        return ResourceHandler(kind, store.repository(kind))
    return dependency
