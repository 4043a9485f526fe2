from datetime import datetime, timedelta

from gamecenter.models import Record
from gamecenter.services.records import purge_expired_records, start_purge_worker, sync_records

NOW = datetime(2030, 5, 1, 12, 0, 0)


def test_purge_removes_only_expired(flask_app):
    sync_records('user1', [
        {'id': 'fresh', 'time': (NOW - timedelta(days=1)).isoformat()},
        {'id': 'edge', 'time': (NOW - timedelta(days=6, hours=23)).isoformat()},
        {'id': 'stale', 'time': (NOW - timedelta(days=8)).isoformat()},
    ], now=NOW)
    sync_records('user2', [{'id': 'stale', 'time': (NOW - timedelta(days=30)).isoformat()}], now=NOW)

    removed = purge_expired_records(7, now=NOW)
    assert removed == 2
    remaining = sorted(r.client_id for r in Record.query.all())
    assert remaining == ['edge', 'fresh']


def test_purge_with_nothing_expired(flask_app):
    sync_records('user1', [{'id': 'a'}], now=NOW)
    assert purge_expired_records(7, now=NOW) == 0
    assert Record.query.count() == 1


def test_purge_worker_disabled_in_tests(flask_app):
    assert start_purge_worker(flask_app) is None


def test_purge_cli_command(flask_app):
    sync_records('user1', [{'id': 'old', 'time': '2000-01-01T00:00:00Z'}])
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['purge-records'])
    assert result.exit_code == 0
    assert 'Purged 1' in result.output
    assert Record.query.count() == 0


def test_purge_worker_skipped_in_reloader_parent(flask_app, monkeypatch):
    monkeypatch.setitem(flask_app.config, 'TESTING', False)
    monkeypatch.setitem(flask_app.config, 'USE_RELOADER', True)
    monkeypatch.setitem(flask_app.config, 'RECORD_PURGE_INTERVAL_SEC', 3600)
    monkeypatch.delenv('WERKZEUG_RUN_MAIN', raising=False)
    assert start_purge_worker(flask_app) is None
