"""Provides the :class:`KeyValueAdapter` class and the storages it can sit on."""

from dataclasses import replace
import json
import logging
import os
import os.path
from tempfile import mkstemp
from typing import Any, Dict, List, Optional

from agentshelf.adapters.base import Adapter, DuplicateKeyError, NotFoundError, StoreUnavailableError,\
    _check_fields, _sort_newest_first
from agentshelf.models import Resource

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = 'ai_agent_resources'


class Storage:
    """Base class for the string key-value stores a :class:`KeyValueAdapter` writes to."""
    def get(self, key: str) -> Optional[str]:
        """Returns the stored value, or None if nothing has been stored under the key. May raise :exc:`OSError`."""
        raise NotImplementedError()

    def set(self, key: str, value: str) -> None:
        """Replaces the stored value. Must either fully succeed or raise :exc:`OSError` leaving the old value."""
        raise NotImplementedError()


class MemoryStorage(Storage):
    def __init__(self, values: Dict[str, str] = None):
        self.values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class FileStorage(Storage):
    """Stores each key as a file named ``<key>.json`` in a directory.

    Writes go to a temporary file in the same directory which is then renamed over the original, so a crash
    or full disk part way through never leaves a truncated file behind.
    """
    def __init__(self, directory: str):
        self.directory = directory

    def path(self, key: str) -> str:
        return os.path.join(self.directory, f'{key}.json')

    def get(self, key: str) -> Optional[str]:
        path = self.path(key)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as file:
            return file.read()

    def set(self, key: str, value: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp = mkstemp(prefix=f'.{key}', suffix='.tmp', dir=self.directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as file:
                file.write(value)
            os.replace(tmp, self.path(key))
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise


class KeyValueAdapter(Adapter):
    """Stores the entire collection as a single JSON array under one key.

    Every operation reads the array, and every mutation writes the whole array back. That is fine for the few
    hundred resources a person is likely to keep, and it means the stored data is always one consistent
    snapshot.

    .. attribute:: storage
       :type: Storage

    .. attribute:: key
       :type: str
    """
    def __init__(self, storage: Storage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def _read(self) -> Dict[str, Resource]:
        try:
            text = self.storage.get(self.key)
        except UnicodeDecodeError as e:
            raise StoreUnavailableError(f'Stored data under {self.key} is corrupt', e)
        except OSError as e:
            raise StoreUnavailableError(f'Could not read {self.key}', e)
        if not text:
            return {}
        try:
            resources = [Resource.from_json(d) for d in json.loads(text)]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreUnavailableError(f'Stored data under {self.key} is corrupt', e)
        return {r.id: r for r in resources}

    def _write(self, records: Dict[str, Resource]) -> None:
        text = json.dumps([r.as_json() for r in records.values()])
        try:
            self.storage.set(self.key, text)
        except OSError as e:
            raise StoreUnavailableError(f'Could not write {self.key}', e)
        logger.debug('Wrote %d resources to %s', len(records), self.key)

    async def list(self) -> List[Resource]:
        return _sort_newest_first(self._read().values())

    async def insert(self, resource: Resource) -> None:
        records = self._read()
        if resource.id in records:
            raise DuplicateKeyError(resource.id)
        records[resource.id] = resource
        self._write(records)

    async def update(self, resource_id: str, fields: Dict[str, Any]) -> None:
        _check_fields(fields)
        records = self._read()
        if resource_id not in records:
            raise NotFoundError(resource_id)
        records[resource_id] = replace(records[resource_id], **fields)
        self._write(records)

    async def delete(self, resource_id: str) -> None:
        records = self._read()
        if resource_id not in records:
            raise NotFoundError(resource_id)
        del records[resource_id]
        self._write(records)

    async def write_snapshot(self, resources: List[Resource]) -> None:
        """Replaces everything stored under the key with the given resources.

        Used to keep a last-known local copy of a collection that primarily lives somewhere else.
        May raise :exc:`StoreUnavailableError`.
        """
        self._write({r.id: r for r in resources})
