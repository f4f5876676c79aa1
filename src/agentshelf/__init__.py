"""Helps manage configuration documents for AI agents: agents, subagents, skills, MCP servers, hooks and prompts.

If you installed via ``pip``, run ``agentshelf -h`` to get help.

To use the Python API, look at :class:`agentshelf.store.ResourceStore`, or get one configured from your
``~/.agentshelf.conf.py`` via :meth:`agentshelf.conf.AgentshelfConf.for_user`.
"""
