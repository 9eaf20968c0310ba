import pytest
from starlette.testclient import TestClient

from keyobject_lib.main import create_app, Config


@pytest.fixture
def client(tmp_path):
    app = create_app(Config(config_path=tmp_path / 'keyobject.yml', database=':memory:', domain='orders'))
    with TestClient(app) as c:
        yield c


def test_put_get_and_prefix_listing(client):
    r = client.put('/api/records/42', json={'status': 'new'})
    assert r.status_code == 200
    assert r.json() == {'status': 'new'}

    assert client.get('/api/records/42').json() == {'status': 'new'}
    assert client.get('/api/records/orders::42').json() == {'status': 'new'}
    assert client.get('/api/records', params={'prefix': '4'}).json() == [
        {'id': 'orders::42', 'data': {'status': 'new'}}
    ]
    assert client.get('/api/records', params={'domain': 'invoices'}).json() == []


def test_missing_record_is_404(client):
    r = client.get('/api/records/nope')
    assert r.status_code == 404


def test_delete_removes_record(client):
    client.put('/api/records/a/b', json=[1, 2])
    r = client.delete('/api/records/a/b')
    assert r.json() == {'ok': True, 'id': 'orders::a/b'}
    assert client.get('/api/records/a/b').status_code == 404


def test_copy_with_missing_source_uses_fallback(client):
    r = client.post('/api/records/copy', json={'from_id': 'missing', 'to_id': 'b', 'value_if_null': {'x': 1}})
    assert r.json() == {'ok': True, 'from_id': 'orders::missing', 'to_id': 'orders::b'}
    assert client.get('/api/records/b').json() == {'x': 1}


def test_bulk_then_lookup_and_suffix(client):
    r = client.post('/api/records/bulk', json=[
        {'id': '1::draft', 'data': {'a': 1}},
        {'id': '2::sent', 'data': [1, 2]},
    ])
    assert r.json() == {'ok': True, 'ids': ['orders::1::draft', 'orders::2::sent']}

    found = client.post('/api/records/lookup', json={'ids': ['orders::1::draft', 'orders::2::sent']}).json()
    assert sorted(found, key=lambda rec: rec['id']) == [
        {'id': 'orders::1::draft', 'data': {'a': 1}},
        {'id': 'orders::2::sent', 'data': [1, 2]},
    ]
    assert client.get('/api/records', params={'suffix': '::sent'}).json() == [
        {'id': 'orders::2::sent', 'data': [1, 2]}
    ]


def test_domain_parameter_scopes_writes(client):
    client.put('/api/records/x', params={'domain': 'orders::eu'}, json='eu')
    assert client.get('/api/records/x').status_code == 404
    assert client.get('/api/records/x', params={'domain': 'orders::eu'}).json() == 'eu'
    assert client.get('/api/records').json() == [{'id': 'orders::eu::x', 'data': 'eu'}]


def test_health_reports_backend(client):
    h = client.get('/api/health').json()
    assert h['status'] == 'ok'
    assert h['backend'] == 'SqliteDatabase'
    assert isinstance(h['uptime_seconds'], int)


def test_copy_with_explicit_null_fallback(client):
    client.post('/api/records/copy', json={'from_id': 'missing', 'to_id': 'n', 'value_if_null': None})
    r = client.get('/api/records/n')
    assert r.status_code == 200
    assert r.json() is None


def test_copy_without_fallback_writes_empty_object(client):
    client.post('/api/records/copy', json={'from_id': 'missing', 'to_id': 'e'})
    assert client.get('/api/records/e').json() == {}


def test_database_falls_back_to_environment_when_config_has_none(tmp_path, monkeypatch):
    cfg = tmp_path / 'keyobject.yml'
    cfg.write_text('table_name: kv\ndomain: orders\n', encoding='utf-8')
    monkeypatch.setenv('YDB_ADDRESS', ':memory:')
    app = create_app(Config(config_path=cfg))
    with TestClient(app) as c:
        c.put('/api/records/1', json={'a': 1})
        assert c.get('/api/records/1').json() == {'a': 1}
        assert c.get('/api/health').json()['backend'] == 'SqliteDatabase'
    assert app.state.container.get('store_options').table_name == 'kv'


def test_environment_ydb_address_selects_ydb_backend(tmp_path, monkeypatch):
    from keyobject_lib.database.ydb_backend import YdbDatabase
    monkeypatch.setenv('YDB_ADDRESS', 'grpcs://ydb.example:2135/?database=/ru-central1/a/b')
    app = create_app(Config(config_path=tmp_path / 'absent.yml'))
    assert isinstance(app.state.container.get('database'), YdbDatabase)


def test_shipped_config_leaves_database_to_environment():
    from pathlib import Path
    from keyobject_lib.config import load_config
    shipped = Path(__file__).resolve().parents[2] / 'config' / 'keyobject.yml'
    assert 'database' not in load_config(shipped)


def test_store_is_built_once_by_the_container(tmp_path):
    app = create_app(Config(config_path=tmp_path / 'absent.yml', database=':memory:', domain='orders'))
    store = app.state.container.get('store')
    assert store is app.state.container.get('store')
    assert store.domain == 'orders'
    assert store.database is app.state.container.get('database')
