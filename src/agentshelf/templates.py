"""Renders the starting content of newly created resources.

By default new resources get a heading and a one-line prompt. To change that for a resource type, create a Mako
template named after the type, such as ``skills.md.mako``, and list it in
:attr:`agentshelf.conf.AgentshelfConf.template_globs`. The following names are defined in the template's namespace:

* ``name``: the name of the new resource
* ``resource_type``: the :class:`agentshelf.models.ResourceType`
* ``type_words``: the type with underscores replaced by spaces, e.g. ``mcp servers``
"""

from glob import glob
import os.path
from typing import Dict, Iterable, Optional

from mako.template import Template

from agentshelf.models import ResourceType

DEFAULT_TEMPLATE = Template('# ${name}\n\nStart writing your ${type_words} configuration here...')


def templates_by_type(template_globs: Iterable[str]) -> Dict[str, str]:
    """Returns paths of templates found via the globs, keyed by lowercase name.

    The name is the part of the filename before any ``.`` character. If multiple templates have the same name,
    the one whose path is lexicographically first is used.
    """
    paths = [p for g in template_globs for p in glob(g, recursive=True) if os.path.isfile(p)]
    paths.sort(reverse=True)
    return {os.path.split(p)[1].split('.')[0].lower(): p for p in paths}


def template_for_type(rtype: ResourceType, template_globs: Iterable[str] = ()) -> Template:
    path: Optional[str] = templates_by_type(template_globs).get(rtype.value)
    if path:
        return Template(filename=os.path.abspath(path))
    return DEFAULT_TEMPLATE


def default_content(rtype: ResourceType, name: str, template_globs: Iterable[str] = ()) -> str:
    template = template_for_type(rtype, template_globs)
    return template.render(name=name, resource_type=rtype, type_words=rtype.words)
