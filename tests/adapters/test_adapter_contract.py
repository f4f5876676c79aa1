"""Behavior every adapter must share, checked against each implementation."""

import asyncio
from datetime import datetime, timezone
import pytest
from agentshelf.adapters.base import DuplicateKeyError, NotFoundError
from agentshelf.adapters.keyvalue import KeyValueAdapter, MemoryStorage
from agentshelf.adapters.memory import MemoryAdapter
from agentshelf.adapters.sqlite import SqliteAdapter


def _ts(day, microsecond=0):
    return datetime(2020, 1, day, microsecond=microsecond, tzinfo=timezone.utc)


@pytest.fixture(params=['memory', 'keyvalue', 'sqlite'])
def adapter(request):
    if request.param == 'memory':
        instance = MemoryAdapter()
    elif request.param == 'keyvalue':
        instance = KeyValueAdapter(MemoryStorage())
    else:
        instance = SqliteAdapter(':memory:')
    with instance:
        yield instance


def test_list_empty(adapter):
    assert asyncio.run(adapter.list()) == []


def test_insert_and_list_newest_first(adapter, make_resource):
    one = make_resource('r1', 'One', updated=_ts(2))
    two = make_resource('r2', 'Two', updated=_ts(3))
    three = make_resource('r3', 'Three', updated=_ts(2, 500))
    asyncio.run(adapter.insert(one))
    asyncio.run(adapter.insert(two))
    asyncio.run(adapter.insert(three))
    assert asyncio.run(adapter.list()) == [two, three, one]


def test_insert_duplicate_key(adapter, make_resource):
    asyncio.run(adapter.insert(make_resource('r1', 'One')))
    with pytest.raises(DuplicateKeyError) as exc:
        asyncio.run(adapter.insert(make_resource('r1', 'Other')))
    assert exc.value.resource_id == 'r1'
    assert [r.name for r in asyncio.run(adapter.list())] == ['One']


def test_update_merges_fields(adapter, make_resource):
    original = make_resource('r1', 'One', content='old')
    asyncio.run(adapter.insert(original))
    asyncio.run(adapter.update('r1', {'content': 'new', 'updated': _ts(5, 123456)}))
    [stored] = asyncio.run(adapter.list())
    assert stored.name == 'One'
    assert stored.content == 'new'
    assert stored.updated == _ts(5, 123456)
    assert stored.created == original.created
    asyncio.run(adapter.update('r1', {'name': 'Renamed'}))
    [stored] = asyncio.run(adapter.list())
    assert stored.name == 'Renamed'
    assert stored.content == 'new'


def test_update_missing(adapter, make_resource):
    asyncio.run(adapter.insert(make_resource('r1', 'One')))
    with pytest.raises(NotFoundError) as exc:
        asyncio.run(adapter.update('bogus', {'name': 'x'}))
    assert exc.value.resource_id == 'bogus'


def test_update_rejects_other_fields(adapter, make_resource):
    asyncio.run(adapter.insert(make_resource('r1', 'One')))
    with pytest.raises(ValueError, match='type'):
        asyncio.run(adapter.update('r1', {'type': 'skills'}))


def test_delete(adapter, make_resource):
    asyncio.run(adapter.insert(make_resource('r1', 'One')))
    asyncio.run(adapter.insert(make_resource('r2', 'Two')))
    asyncio.run(adapter.delete('r1'))
    assert [r.id for r in asyncio.run(adapter.list())] == ['r2']
    with pytest.raises(NotFoundError):
        asyncio.run(adapter.delete('r1'))
