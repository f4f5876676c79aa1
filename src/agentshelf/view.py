"""View state shared between the store and whatever front end is displaying it."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from agentshelf.models import Resource, ResourceType


@dataclass
class Draft:
    """The editor's working copy of the selected resource's name and content."""

    resource_id: str
    name: str
    content: str

    @classmethod
    def of(cls, resource: Resource) -> Draft:
        return cls(resource.id, resource.name, resource.content)

    def has_changes(self, resource: Resource) -> bool:
        return not (self.name == resource.name and self.content == resource.content)


@dataclass
class Folder:
    """A group of visible resources that share a type, as shown in the sidebar."""

    type: ResourceType
    resources: List[Resource] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.type.label

    @property
    def count(self) -> int:
        return len(self.resources)


@dataclass
class ViewState:
    """Everything about what the user is looking at, as opposed to what is stored.

    Owned by :class:`agentshelf.store.ResourceStore`, which keeps :attr:`selected` and :attr:`draft` in step with
    the collection. Front ends may freely change :attr:`editor_mode` and :attr:`sidebar_open`; changing anything
    else should go through the store.
    """

    selected: Optional[Resource] = None
    """The resource open for viewing or editing, if any."""

    search_query: str = ''

    editor_mode: bool = True
    """True when editing, False when showing the rendered preview."""

    sidebar_open: bool = True

    draft: Optional[Draft] = None
    """Unsaved edits to :attr:`selected`. Reset whenever the selection changes or is saved."""

    def toggle_editor_mode(self) -> bool:
        self.editor_mode = not self.editor_mode
        return self.editor_mode

    def toggle_sidebar(self) -> bool:
        self.sidebar_open = not self.sidebar_open
        return self.sidebar_open


def group_by_type(resources: Iterable[Resource]) -> List[Folder]:
    """Returns one folder per resource type, in display order, including empty ones."""
    folders = {t: Folder(t) for t in ResourceType}
    for resource in resources:
        folders[resource.type].resources.append(resource)
    return list(folders.values())
