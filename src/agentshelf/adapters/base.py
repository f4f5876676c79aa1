"""Defines the API for persisting resources.

The most important class is :class:`Adapter`.
"""

from typing import Any, Dict, List

from agentshelf.models import Resource


class AdapterError(Exception):
    """Base class for failures reported by an :class:`Adapter`."""
    def __init__(self, message: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class StoreUnavailableError(AdapterError):
    """Raised when the backing store cannot be read or written (I/O fault, lost connection, corrupt data)."""


class NotFoundError(AdapterError):
    """Raised when an update or delete targets an id that the backing store does not contain."""
    def __init__(self, resource_id: str, cause: BaseException = None):
        super().__init__(f'Resource not found: {resource_id}', cause)
        self.resource_id = resource_id


class DuplicateKeyError(AdapterError):
    """Raised when inserting a resource whose id is already present in the backing store."""
    def __init__(self, resource_id: str, cause: BaseException = None):
        super().__init__(f'Resource already exists: {resource_id}', cause)
        self.resource_id = resource_id


UPDATABLE_FIELDS = frozenset({'name', 'content', 'updated'})


class Adapter:
    """Base class for adapters, which move resource records in and out of some backing store.

    All data operations are coroutines. An adapter performs no validation beyond what its backing store
    requires; enforcing things like name uniqueness is the job of :class:`agentshelf.store.ResourceStore`.

    Every operation either succeeds completely or raises an :exc:`AdapterError` without leaving a partial
    change visible to a later :meth:`list`.
    """
    async def list(self) -> List[Resource]:
        """Returns every stored resource, most recently updated first.

        May raise :exc:`StoreUnavailableError`.
        """
        raise NotImplementedError()

    async def insert(self, resource: Resource) -> None:
        """Stores a new resource.

        May raise :exc:`DuplicateKeyError` or :exc:`StoreUnavailableError`.
        """
        raise NotImplementedError()

    async def update(self, resource_id: str, fields: Dict[str, Any]) -> None:
        """Merges the given fields into the stored resource.

        Keys must be a subset of ``name``, ``content`` and ``updated``.

        May raise :exc:`NotFoundError` or :exc:`StoreUnavailableError`.
        """
        raise NotImplementedError()

    async def delete(self, resource_id: str) -> None:
        """Removes the stored resource. Deleting an id that is not present raises :exc:`NotFoundError`.

        May also raise :exc:`StoreUnavailableError`.
        """
        raise NotImplementedError()

    def close(self) -> None:
        """Release any resources associated with the adapter. Should be called when you're done with an instance."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _check_fields(fields: Dict[str, Any]) -> None:
    unknown = set(fields).difference(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f'Cannot update fields: {", ".join(sorted(unknown))}')


def _sort_newest_first(resources: List[Resource]) -> List[Resource]:
    return sorted(resources, key=lambda r: r.updated, reverse=True)
