"""Provides the :class:`MemoryAdapter` class."""

import asyncio
from dataclasses import replace
import logging
from typing import Any, Dict, List, Optional

from agentshelf.adapters.base import Adapter, AdapterError, DuplicateKeyError, NotFoundError, _check_fields,\
    _sort_newest_first
from agentshelf.models import Resource

logger = logging.getLogger(__name__)


class MemoryAdapter(Adapter):
    """Keeps resources in a dict. Nothing survives the process.

    Mostly useful for tests, so it has two hooks for simulating a slow or broken backing store:

    * :attr:`fail_with` maps an operation name (``list``, ``insert``, ``update``, ``delete``) to an exception
      that the next calls of that operation will raise, before changing anything.
    * :attr:`gate`, if set, is an :class:`asyncio.Event` that every operation waits on before doing its work,
      which lets a test hold operations in flight.

    .. attribute:: records
       :type: Dict[str, Resource]
    """
    def __init__(self, resources: List[Resource] = None):
        self.records = {r.id: r for r in (resources or [])}
        self.fail_with: Dict[str, AdapterError] = {}
        self.gate: Optional[asyncio.Event] = None
        self.calls: List[str] = []

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self.gate:
            await self.gate.wait()
        error = self.fail_with.get(operation)
        if error:
            logger.debug('Simulating %s failure: %s', operation, error)
            raise error

    async def list(self) -> List[Resource]:
        await self._enter('list')
        return _sort_newest_first(self.records.values())

    async def insert(self, resource: Resource) -> None:
        await self._enter('insert')
        if resource.id in self.records:
            raise DuplicateKeyError(resource.id)
        self.records[resource.id] = resource

    async def update(self, resource_id: str, fields: Dict[str, Any]) -> None:
        _check_fields(fields)
        await self._enter('update')
        if resource_id not in self.records:
            raise NotFoundError(resource_id)
        self.records[resource_id] = replace(self.records[resource_id], **fields)

    async def delete(self, resource_id: str) -> None:
        await self._enter('delete')
        if resource_id not in self.records:
            raise NotFoundError(resource_id)
        del self.records[resource_id]
