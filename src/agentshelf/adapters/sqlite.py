"""Provides the :class:`SqliteAdapter` class."""

import asyncio
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
import logging
import sqlite3
from typing import Any, Callable, Dict, List

from agentshelf.adapters.base import Adapter, DuplicateKeyError, NotFoundError, StoreUnavailableError,\
    _check_fields
from agentshelf.models import Resource, ResourceType

logger = logging.getLogger(__name__)


_SQL_CREATE_SCHEMA = """
CREATE TABLE IF NOT EXISTS resources (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    content TEXT NOT NULL,
    type TEXT NOT NULL,
    folder_path TEXT NOT NULL,
    created TEXT NOT NULL,
    updated TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS resources_index_updated ON resources (updated);
"""

_SQL_SELECT_ALL = ('SELECT id, name, content, type, folder_path, created, updated FROM resources'
                   ' ORDER BY updated DESC')
_SqlResourceRow = namedtuple('SqlResourceRow', ['id', 'name', 'content', 'type', 'folder_path', 'created',
                                                'updated'])

_SQL_INSERT = ('INSERT INTO resources (id, name, content, type, folder_path, created, updated)'
               ' VALUES (?, ?, ?, ?, ?, ?, ?)')

_SQL_DELETE = 'DELETE FROM resources WHERE id = ?'


def _timestamp(val: datetime) -> str:
    # fixed width so that ORDER BY on the text column sorts chronologically
    return val.isoformat(timespec='microseconds')


def _row_for(resource: Resource) -> _SqlResourceRow:
    return _SqlResourceRow(id=resource.id,
                           name=resource.name,
                           content=resource.content,
                           type=resource.type.value,
                           folder_path=resource.folder_path,
                           created=_timestamp(resource.created),
                           updated=_timestamp(resource.updated))


def _resource_for(row: _SqlResourceRow) -> Resource:
    return Resource(id=row.id,
                    name=row.name,
                    content=row.content,
                    type=ResourceType(row.type),
                    folder_path=row.folder_path,
                    created=datetime.fromisoformat(row.created),
                    updated=datetime.fromisoformat(row.updated))


class SqliteAdapter(Adapter):
    """Keeps one row per resource in a SQLite table, the way a hosted database table would.

    Rows are inserted, updated and deleted individually by ``id``, and :meth:`list` orders by ``updated``
    descending in the query itself.

    All database work happens on a single background thread, so awaiting an operation never blocks the event
    loop, and operations reach the database in the order they were issued. ``timeout`` is how long SQLite
    waits on a locked database before the operation fails with :exc:`StoreUnavailableError`.

    Remember to call :meth:`close` when done with the instance, or use the instance as a context manager.
    """
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='agentshelf-sqlite')
        try:
            self.connection = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
            self.connection.executescript(_SQL_CREATE_SCHEMA)
        except sqlite3.Error as e:
            self._executor.shutdown()
            raise StoreUnavailableError(f'Could not open database {db_path}', e)

    async def _run(self, fn: Callable, *args):
        if self.connection is None:
            raise StoreUnavailableError('Adapter has been closed')
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn, *args)

    def _list(self) -> List[Resource]:
        try:
            cursor = self.connection.execute(_SQL_SELECT_ALL)
            return [_resource_for(_SqlResourceRow(*r)) for r in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StoreUnavailableError('Could not query resources', e)

    def _insert(self, resource: Resource) -> None:
        try:
            with self.connection:
                self.connection.execute(_SQL_INSERT, _row_for(resource))
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError(resource.id, e)
        except (sqlite3.Error, UnicodeEncodeError) as e:
            raise StoreUnavailableError(f'Could not insert resource {resource.id}', e)

    def _update(self, resource_id: str, fields: Dict[str, Any]) -> None:
        values = {k: _timestamp(v) if isinstance(v, datetime) else v for k, v in fields.items()}
        # column names come from UPDATABLE_FIELDS, never from callers
        assignments = ', '.join(f'{k} = ?' for k in values) or 'id = id'
        try:
            with self.connection:
                cursor = self.connection.execute(f'UPDATE resources SET {assignments} WHERE id = ?',
                                                 (*values.values(), resource_id))
        except (sqlite3.Error, UnicodeEncodeError) as e:
            raise StoreUnavailableError(f'Could not update resource {resource_id}', e)
        if cursor.rowcount == 0:
            raise NotFoundError(resource_id)

    def _delete(self, resource_id: str) -> None:
        try:
            with self.connection:
                cursor = self.connection.execute(_SQL_DELETE, (resource_id,))
        except sqlite3.Error as e:
            raise StoreUnavailableError(f'Could not delete resource {resource_id}', e)
        if cursor.rowcount == 0:
            raise NotFoundError(resource_id)

    async def list(self) -> List[Resource]:
        return await self._run(self._list)

    async def insert(self, resource: Resource) -> None:
        await self._run(self._insert, resource)

    async def update(self, resource_id: str, fields: Dict[str, Any]) -> None:
        _check_fields(fields)
        await self._run(self._update, resource_id, fields)

    async def delete(self, resource_id: str) -> None:
        await self._run(self._delete, resource_id)

    def close(self):
        if self.connection is not None:
            self._executor.shutdown(wait=True)
            self.connection.close()
            self.connection = None
