"""Provides :class:`ResourceStore`, the single source of truth for resources and the view state around them."""

from __future__ import annotations
import asyncio
from contextlib import asynccontextmanager
from dataclasses import replace
import logging
from typing import Dict, Iterable, List, Optional, Set, Union

import shortuuid

from agentshelf.adapters.base import Adapter, AdapterError, NotFoundError
from agentshelf.adapters.keyvalue import KeyValueAdapter
from agentshelf.models import Resource, ResourceTypeIsh, ResourceType, utcnow
from agentshelf.notify import Notifier, Severity
from agentshelf.templates import default_content
from agentshelf.view import Draft, Folder, ViewState, group_by_type

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when a requested change is rejected before it reaches the adapter."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateNameError(ValidationError):
    def __init__(self, name: str):
        super().__init__(f'A resource with the name "{name}" already exists')
        self.name = name


class InvalidNameError(ValidationError):
    def __init__(self, name: str):
        super().__init__('Resource name must not be empty')
        self.name = name


ResourceRef = Union[str, Resource]


class ResourceStore:
    """Holds the authoritative in-memory collection of resources and keeps it in sync with an adapter.

    Every change goes to the adapter first; the in-memory collection is only updated once the adapter has
    succeeded, so a failed operation leaves the collection exactly as it was. Outcomes are reported through
    :attr:`notifier` rather than raised, and the mutating methods return True or False so callers can react
    (e.g. keep a dialog open).

    Operations on the same resource are queued and run in the order they were issued. Operations on different
    resources may be in flight at the same time.

    .. attribute:: adapter
       :type: agentshelf.adapters.base.Adapter

    .. attribute:: cache
       :type: Optional[agentshelf.adapters.keyvalue.KeyValueAdapter]

       If set, holds a copy of the collection as of the last successful load or change, which :meth:`load`
       falls back to when the adapter is unavailable.

    .. attribute:: notifier
       :type: agentshelf.notify.Notifier

    .. attribute:: view
       :type: agentshelf.view.ViewState

    Here's an example:

    .. code-block:: python

       store = ResourceStore(KeyValueAdapter(FileStorage('/home/me/.agentshelf')))
       await store.load()
       if await store.create('skills', 'Summarize PRs'):
           await store.update(store.view.selected.id, content='# Summarize PRs\\n...')
    """
    def __init__(self, adapter: Adapter, cache: KeyValueAdapter = None, notifier: Notifier = None,
                 template_globs: Iterable[str] = ()):
        self.adapter = adapter
        self.cache = cache
        self.notifier = notifier or Notifier()
        self.template_globs = set(template_globs)
        self.view = ViewState()
        self._resources: Dict[str, Resource] = {}
        self._retired_ids: Set[str] = set()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._reserved_names: Set[str] = set()

    # Reading

    @property
    def resources(self) -> List[Resource]:
        """All resources, newest first as of loading, with resources created since then in front."""
        return list(self._resources.values())

    def get(self, resource_id: str) -> Optional[Resource]:
        return self._resources.get(resource_id)

    def find(self, name: str) -> Optional[Resource]:
        """Looks up a resource by name, ignoring case and surrounding whitespace."""
        key = name.strip().lower()
        return next((r for r in self._resources.values() if r.name.lower() == key), None)

    def visible(self) -> List[Resource]:
        """Resources matching the current search query (all of them when the query is empty)."""
        query = self.view.search_query
        return [r for r in self._resources.values() if r.matches(query)]

    def tree(self) -> List[Folder]:
        """Visible resources grouped into one folder per type."""
        return group_by_type(self.visible())

    # View state

    def select(self, resource: Optional[ResourceRef]) -> Optional[Resource]:
        """Makes the given resource (or resource id) the selected one, or clears the selection for None.

        The editor draft is reset to the selected resource. Ids that are not in the store clear the selection.
        """
        if isinstance(resource, str):
            resource = self._resources.get(resource)
        elif resource is not None:
            resource = self._resources.get(resource.id, resource)
        self.view.selected = resource
        self.view.draft = Draft.of(resource) if resource else None
        return resource

    def filter(self, query: str) -> List[Resource]:
        """Sets the search query and returns the resources that are now visible."""
        self.view.search_query = query or ''
        return self.visible()

    # Persistence

    async def load(self) -> int:
        """Replaces the collection with whatever the adapter has. Returns the number of resources loaded.

        If the adapter fails, the cache (if any) is used instead, and failing that the store starts empty. Either
        way an error notification is raised.
        """
        try:
            resources = await self.adapter.list()
        except AdapterError as e:
            logger.warning('Loading resources failed: %s', e.message)
            resources = await self._read_cache()
            self._replace_all(resources)
            if resources:
                self.notifier.notify(f'Could not load resources, showing a saved copy: {e.message}', Severity.ERROR)
            else:
                self.notifier.notify(f'Could not load resources: {e.message}', Severity.ERROR)
            return len(resources)
        self._replace_all(resources)
        logger.info('Loaded %d resources', len(resources))
        await self._write_cache()
        return len(resources)

    async def create(self, rtype: ResourceTypeIsh, name: str) -> bool:
        """Creates a resource with default content and selects it. Returns False if it could not be created.

        ``rtype`` may be a :class:`agentshelf.models.ResourceType` or its value, e.g. ``"mcp_servers"``.
        Raises :exc:`ValueError` for an unknown type.
        """
        rtype = ResourceType.parse(rtype)
        name = name.strip()
        try:
            self._check_name(name)
        except ValidationError as e:
            self.notifier.notify(e.message, Severity.ERROR)
            return False

        now = utcnow()
        resource = Resource(id=self._new_id(),
                            name=name,
                            content=default_content(rtype, name, self.template_globs),
                            type=rtype,
                            folder_path=rtype.value,
                            created=now,
                            updated=now)
        async with self._reserving(name), self._locked(resource.id):
            try:
                await self.adapter.insert(resource)
            except AdapterError as e:
                self._retired_ids.add(resource.id)
                self.notifier.notify(f'Could not create {name}: {e.message}', Severity.ERROR)
                return False
            self._resources = {resource.id: resource, **self._resources}
        self.select(resource)
        await self._write_cache()
        self.notifier.notify(f'{name} created successfully', Severity.SUCCESS)
        return True

    async def update(self, resource_id: str, name: str = None, content: str = None) -> bool:
        """Changes the name and/or content of a resource. Returns False if nothing was saved.

        Omitted (None) arguments are left unchanged. Renaming a resource to its own name, in any case, is allowed.
        """
        async with self._locked(resource_id):
            current = self._resources.get(resource_id)
            if not current:
                self.notifier.notify(NotFoundError(resource_id).message, Severity.ERROR)
                return False
            fields = {}
            if name is not None:
                name = name.strip()
                try:
                    self._check_name(name, resource_id)
                except ValidationError as e:
                    self.notifier.notify(e.message, Severity.ERROR)
                    return False
                fields['name'] = name
            if content is not None:
                fields['content'] = content
            fields['updated'] = max(utcnow(), current.updated)

            async with self._reserving(fields.get('name')):
                try:
                    await self.adapter.update(resource_id, fields)
                except AdapterError as e:
                    self.notifier.notify(f'Could not save changes: {e.message}', Severity.ERROR)
                    return False
                # other changes to this id are queued behind us, but a concurrent load() may have replaced it
                updated = replace(self._resources.get(resource_id, current), **fields)
                if resource_id in self._resources:
                    self._resources[resource_id] = updated
            if self.view.selected and self.view.selected.id == resource_id:
                self.select(updated)
        await self._write_cache()
        self.notifier.notify('Changes saved', Severity.SUCCESS)
        return True

    async def delete(self, resource_id: str) -> bool:
        """Deletes a resource, clearing the selection if it was selected. Returns False if it was not deleted."""
        async with self._locked(resource_id):
            if resource_id not in self._resources:
                self.notifier.notify(NotFoundError(resource_id).message, Severity.ERROR)
                return False
            try:
                await self.adapter.delete(resource_id)
            except AdapterError as e:
                self.notifier.notify(f'Could not delete resource: {e.message}', Severity.ERROR)
                return False
            del self._resources[resource_id]
            self._retired_ids.add(resource_id)
        if self.view.selected and self.view.selected.id == resource_id:
            self.select(None)
        await self._write_cache()
        self.notifier.notify('Resource deleted', Severity.INFO)
        return True

    async def save_draft(self) -> bool:
        """Saves the editor draft of the selected resource, if it has changes.

        Returns True when there was nothing to save, and False when there is no selection or saving failed.
        """
        selected, draft = self.view.selected, self.view.draft
        if not (selected and draft and draft.resource_id == selected.id):
            return False
        if not draft.has_changes(selected):
            return True
        return await self.update(selected.id,
                                 name=draft.name if draft.name != selected.name else None,
                                 content=draft.content if draft.content != selected.content else None)

    def close(self):
        """Closes the adapter and cache and releases any other resources."""
        self.adapter.close()
        if self.cache:
            self.cache.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # Internals

    def _check_name(self, name: str, resource_id: str = None) -> None:
        if not name:
            raise InvalidNameError(name)
        key = name.lower()
        if key in self._reserved_names:
            raise DuplicateNameError(name)
        for other in self._resources.values():
            if other.name.lower() == key and not other.id == resource_id:
                raise DuplicateNameError(name)

    def _new_id(self) -> str:
        while True:
            candidate = shortuuid.uuid()
            if candidate not in self._resources and candidate not in self._retired_ids:
                return candidate

    @asynccontextmanager
    async def _locked(self, resource_id: str):
        if resource_id not in self._locks:
            self._locks[resource_id] = asyncio.Lock()
            self._lock_users[resource_id] = 0
        lock = self._locks[resource_id]
        self._lock_users[resource_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[resource_id] -= 1
            if not self._lock_users[resource_id]:
                del self._locks[resource_id]
                del self._lock_users[resource_id]

    @asynccontextmanager
    async def _reserving(self, name: Optional[str]):
        key = name.lower() if name else None
        if key:
            self._reserved_names.add(key)
        try:
            yield
        finally:
            if key:
                self._reserved_names.discard(key)

    def _replace_all(self, resources: List[Resource]) -> None:
        self._resources = {r.id: r for r in resources}
        if self.view.selected:
            self.select(self.view.selected.id)

    async def _read_cache(self) -> List[Resource]:
        if not self.cache:
            return []
        try:
            return await self.cache.list()
        except AdapterError as e:
            logger.warning('Reading cached resources failed: %s', e.message)
            return []

    async def _write_cache(self) -> None:
        if not self.cache:
            return
        try:
            await self.cache.write_snapshot(self.resources)
        except AdapterError as e:
            logger.warning('Updating cached resources failed: %s', e.message)
