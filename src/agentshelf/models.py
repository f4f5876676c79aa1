"""Defines classes for representing resources and the categories they belong to.

The most important classes are :class:`Resource` and :class:`ResourceType`.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Union


class ResourceType(Enum):
    """The fixed set of categories a resource can belong to.

    The declaration order is the order in which folders are displayed.
    """

    AGENTS = 'agents'
    SUBAGENTS = 'subagents'
    SKILLS = 'skills'
    MCP_SERVERS = 'mcp_servers'
    HOOKS = 'hooks'
    SYSTEM_PROMPTS = 'system_prompts'

    @property
    def label(self) -> str:
        """Heading used for the folder holding resources of this type, e.g. ``MCP Servers``."""
        return _LABELS[self]

    @property
    def words(self) -> str:
        """The value with underscores replaced by spaces, e.g. ``system prompts``."""
        return self.value.replace('_', ' ')

    @classmethod
    def parse(cls, val: ResourceTypeIsh) -> ResourceType:
        """Converts the parameter to a ResourceType, if it isn't one already.

        Strings are matched case-insensitively against the values, so ``"MCP_Servers"`` works.
        Raises :exc:`ValueError` for unknown types.
        """
        if isinstance(val, ResourceType):
            return val
        return cls(val.strip().lower())


_LABELS = {
    ResourceType.AGENTS: 'Agents',
    ResourceType.SUBAGENTS: 'Subagents',
    ResourceType.SKILLS: 'Skills',
    ResourceType.MCP_SERVERS: 'MCP Servers',
    ResourceType.HOOKS: 'Hooks',
    ResourceType.SYSTEM_PROMPTS: 'System Prompts',
}


ResourceTypeIsh = Union[str, ResourceType]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(val: Union[str, datetime]) -> datetime:
    if isinstance(val, str):
        val = datetime.fromisoformat(val.replace('Z', '+00:00'))
    if not val.tzinfo:
        val = val.replace(tzinfo=timezone.utc)
    return val


@dataclass
class Resource:
    """A named, typed text document managed by a :class:`agentshelf.store.ResourceStore`.

    Instances held by the store are treated as snapshots: the store never changes one in place, it
    replaces it with an updated copy. So it is safe to hold on to an instance you received, but it
    will not reflect later changes.
    """

    id: str
    """Opaque unique identifier, assigned when the resource is created."""

    name: str
    """Human-readable label. Unique across all resources, ignoring case."""

    content: str
    """The body of the document, usually Markdown."""

    type: ResourceType
    """The category of the resource. Never changes after creation."""

    folder_path: str
    """Grouping key for display, derived from :attr:`type` at creation."""

    created: datetime
    """When the resource was created (timezone-aware, UTC)."""

    updated: datetime
    """When the resource was last successfully changed. Never earlier than :attr:`created`."""

    def matches(self, query: str) -> bool:
        """Returns True if the query is empty or appears in the name or content, ignoring case."""
        if not query:
            return True
        query = query.lower()
        return query in self.name.lower() or query in self.content.lower()

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'name': self.name,
            'content': self.content,
            'type': self.type.value,
            'folder_path': self.folder_path,
            'created': self.created.isoformat(),
            'updated': self.updated.isoformat(),
        }

    @classmethod
    def from_json(cls, data: dict) -> Resource:
        """Builds an instance from the output of :meth:`as_json`.

        Timestamps may be ISO-8601 strings or datetimes; naive values are assumed to be UTC.
        The camelCase keys ``folderPath``, ``createdAt`` and ``updatedAt`` written by the web app are also accepted.
        Raises :exc:`KeyError` or :exc:`ValueError` for malformed data.
        """
        rtype = ResourceType.parse(data['type'])
        created = data['created'] if 'created' in data else data['createdAt']
        updated = data['updated'] if 'updated' in data else data['updatedAt']
        return cls(
            id=data['id'],
            name=data['name'],
            content=data.get('content', ''),
            type=rtype,
            folder_path=data.get('folder_path') or data.get('folderPath') or rtype.value,
            created=_parse_timestamp(created),
            updated=_parse_timestamp(updated),
        )
