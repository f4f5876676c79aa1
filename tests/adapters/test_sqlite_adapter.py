import asyncio
from datetime import datetime, timezone
import pytest
from agentshelf.adapters.base import StoreUnavailableError
from agentshelf.adapters.sqlite import SqliteAdapter
from agentshelf.conf import SqliteAdapterConf


def test_init():
    SqliteAdapterConf(db_path=':memory:').instantiate().close()


def test_conf_requires_path():
    with pytest.raises(ValueError, match='db_path'):
        SqliteAdapterConf().instantiate()


def test_persists_between_instances(tmp_path, make_resource):
    path = str(tmp_path / 'resources.sqlite3')
    resource = make_resource('r1', 'One', content='# One',
                             updated=datetime(2021, 6, 7, 8, 9, 10, 11, tzinfo=timezone.utc))
    with SqliteAdapter(path) as adapter:
        asyncio.run(adapter.insert(resource))
    with SqliteAdapter(path) as adapter:
        [loaded] = asyncio.run(adapter.list())
    assert loaded == resource
    assert loaded.updated.tzinfo is not None


def test_rows_are_independent(tmp_path, make_resource):
    path = str(tmp_path / 'resources.sqlite3')
    with SqliteAdapter(path) as adapter:
        asyncio.run(adapter.insert(make_resource('r1', 'One')))
        asyncio.run(adapter.insert(make_resource('r2', 'Two')))
        asyncio.run(adapter.update('r2', {'name': 'Second'}))
        rows = adapter.connection.execute('SELECT id, name FROM resources ORDER BY id').fetchall()
    assert rows == [('r1', 'One'), ('r2', 'Second')]


def test_closed_adapter_is_unavailable(make_resource):
    adapter = SqliteAdapter(':memory:')
    adapter.close()
    with pytest.raises(StoreUnavailableError):
        asyncio.run(adapter.list())
    adapter.close()


def test_database_errors_are_unavailable(make_resource):
    with SqliteAdapter(':memory:') as adapter:
        adapter.connection.execute('DROP TABLE resources')
        with pytest.raises(StoreUnavailableError) as exc:
            asyncio.run(adapter.insert(make_resource('r1', 'One')))
        assert exc.value.cause is not None


def test_unopenable_database(tmp_path):
    with pytest.raises(StoreUnavailableError):
        SqliteAdapter(str(tmp_path / 'missing-dir' / 'db.sqlite3'))


def test_unencodable_text_is_unavailable(make_resource):
    with SqliteAdapter(':memory:') as adapter:
        with pytest.raises(StoreUnavailableError) as exc:
            asyncio.run(adapter.insert(make_resource('r1', 'bad\ud800name')))
        assert isinstance(exc.value.cause, UnicodeEncodeError)
        asyncio.run(adapter.insert(make_resource('r1', 'One')))
        with pytest.raises(StoreUnavailableError):
            asyncio.run(adapter.update('r1', {'content': 'bad\ud800content'}))
        [resource] = asyncio.run(adapter.list())
        assert resource.content == ''
