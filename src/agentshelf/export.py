"""Writes resources out as Markdown files, for backups or for use by tools that read agent configs from disk.

Each resource becomes ``<dest>/<folder_path>/<slug>.md``, with a YAML metadata header:

.. code-block:: markdown

   ---
   id: 9qaZNXDNUDN5b8PtMU3ZLP
   name: Bot One
   type: agents
   created: 2012-05-02 03:04:05+00:00
   updated: 2012-05-02 03:04:05+00:00
   ...
   # Bot One
"""

from io import StringIO
import os
import os.path
import re
from typing import Dict, Iterable, Set

import shortuuid
import yaml

from agentshelf.models import Resource


def slugify(name: str) -> str:
    """Turns a resource name into a filename stem.

    * Name is truncated to 60 characters
    * Characters are converted to lowercase
    * Only the letters a-z and digits 0-9 are kept; all other characters are replaced with dashes
    * Consecutive dashes are collapsed to a single dash
    * Leading and trailing dashes are removed

    Returns ``untitled`` if nothing is left.
    """
    slug = name.lower()[:60]
    slug = re.sub(r'[^a-z0-9]', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-') or 'untitled'


def find_available_name(dest: str, unavailable: Set[str]) -> str:
    """Returns dest, or dest with a short random suffix before the extension if it is taken or already exists."""
    while dest in unavailable or os.path.exists(dest):
        stem, suffix = os.path.splitext(dest)
        dest = f'{stem}_{shortuuid.uuid()}{suffix}'
    return dest


class _MetadataDumper(yaml.SafeDumper):
    # created and updated are often the same datetime object
    def ignore_aliases(self, data):
        return True


def as_markdown(resource: Resource) -> str:
    meta = {
        'id': resource.id,
        'name': resource.name,
        'type': resource.type.value,
        'created': resource.created,
        'updated': resource.updated,
    }
    sio = StringIO()
    yaml.dump(meta, sio, Dumper=_MetadataDumper, sort_keys=False, allow_unicode=True)
    return f'---\n{sio.getvalue()}...\n{resource.content}'


def export_resources(resources: Iterable[Resource], dest: str) -> Dict[str, str]:
    """Writes each resource to a Markdown file under dest. Returns a dict mapping resource ids to file paths.

    Existing files are never overwritten; a clashing filename gets a random suffix instead.
    """
    written = {}
    unavailable = set()
    for resource in resources:
        folder = os.path.join(dest, resource.folder_path)
        os.makedirs(folder, exist_ok=True)
        path = find_available_name(os.path.join(folder, f'{slugify(resource.name)}.md'), unavailable)
        with open(path, 'w', encoding='utf-8') as file:
            file.write(as_markdown(resource))
        unavailable.add(path)
        written[resource.id] = path
    return written
