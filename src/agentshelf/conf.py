from __future__ import annotations
from dataclasses import dataclass, field, replace
import os.path
from typing import Optional, Set

from agentshelf.adapters.keyvalue import DEFAULT_STORAGE_KEY
from agentshelf.notify import DEFAULT_DURATION


@dataclass
class AdapterConf:
    """Base class for adapter config. Use a subclass such as :class:`KeyValueAdapterConf`."""

    def instantiate(self):
        raise NotImplementedError("Please use a subclass like KeyValueAdapterConf instead!")

    def standardize(self):
        return self


@dataclass
class KeyValueAdapterConf(AdapterConf):
    """Configures storage of the whole collection as one JSON file, via
    :class:`agentshelf.adapters.keyvalue.KeyValueAdapter`."""

    directory: str = None
    """Required. Folder in which the file ``<storage_key>.json`` is kept. It will be created if needed."""

    storage_key: str = DEFAULT_STORAGE_KEY

    def instantiate(self):
        from agentshelf.adapters.keyvalue import FileStorage, KeyValueAdapter
        if not self.directory:
            raise ValueError('`directory` must be set in KeyValueAdapterConf.')
        return KeyValueAdapter(FileStorage(self.directory), self.storage_key)

    def standardize(self):
        return replace(self, directory=self.directory and os.path.expanduser(self.directory))


@dataclass
class SqliteAdapterConf(AdapterConf):
    """Configures storage of one row per resource in a SQLite table, via
    :class:`agentshelf.adapters.sqlite.SqliteAdapter`."""

    db_path: str = None
    """Required. Path of the SQLite database file, or ``:memory:``. The file will be created if it does not exist."""

    timeout: float = 5.0
    """Seconds to wait for a locked database before an operation fails."""

    def instantiate(self):
        from agentshelf.adapters.sqlite import SqliteAdapter
        if not self.db_path:
            raise ValueError('`db_path` must be set in SqliteAdapterConf.')
        return SqliteAdapter(self.db_path, self.timeout)

    def standardize(self):
        return replace(self, db_path=self.db_path and os.path.expanduser(self.db_path))


@dataclass
class MemoryAdapterConf(AdapterConf):
    """Configures an adapter that forgets everything when the process exits. Mainly for trying things out."""

    def instantiate(self):
        from agentshelf.adapters.memory import MemoryAdapter
        return MemoryAdapter()


@dataclass
class AgentshelfConf:
    adapter_conf: AdapterConf
    """Configures where resources are stored."""

    cache_conf: Optional[KeyValueAdapterConf] = None
    """If set, a local copy of the collection is kept here and used when the adapter cannot be reached at startup.

    This is mostly useful when :attr:`adapter_conf` points somewhere that can become unavailable. The copy may be
    stale; changes made elsewhere since it was written will not appear.
    """

    template_globs: Set[str] = field(default_factory=set)
    """A set of path globs such as ``{"~/agentshelf/templates/*.mako"}`` to search for content templates.

    A template named after a resource type (e.g. ``skills.md.mako``) provides the starting content for new
    resources of that type. See :mod:`agentshelf.templates`.
    """

    notification_duration: float = DEFAULT_DURATION
    """Seconds a notification stays current before it is dismissed."""

    @classmethod
    def for_user(cls) -> AgentshelfConf:
        path = os.path.expanduser(os.path.join('~', '.agentshelf.conf.py'))
        if not os.path.exists(path):
            raise Exception(f'You need to create the config file: {path}')
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise Exception('You need to assign an instance of AgentshelfConf to the variable `conf` '
                            f'in your config file: {path}')
        return context['conf']

    def standardize(self):
        return replace(
            self,
            adapter_conf=self.adapter_conf.standardize(),
            cache_conf=self.cache_conf and self.cache_conf.standardize(),
            template_globs={os.path.expanduser(g) for g in self.template_globs}
        )

    def instantiate(self):
        from agentshelf.notify import Notifier
        from agentshelf.store import ResourceStore
        conf = self.standardize()
        return ResourceStore(conf.adapter_conf.instantiate(),
                             cache=conf.cache_conf and conf.cache_conf.instantiate(),
                             notifier=Notifier(conf.notification_duration),
                             template_globs=conf.template_globs)
