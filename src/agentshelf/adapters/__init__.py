"""Handles persistence of resources.

:class:`agentshelf.adapters.base.Adapter` defines an API.
:class:`agentshelf.adapters.keyvalue.KeyValueAdapter` keeps the whole collection under one key in durable local
storage, :class:`agentshelf.adapters.sqlite.SqliteAdapter` keeps one row per resource in a table, and
:class:`agentshelf.adapters.memory.MemoryAdapter` is an in-memory stand-in for tests.
"""
