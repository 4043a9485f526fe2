import os
import threading
import time
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from gamecenter import db
from gamecenter.models import Record, utcnow


def purge_expired_records(retention_days, now=None) -> int:
    """Delete records whose timestamp is older than the retention window.

    Returns the number of deleted rows.
    """
    now = now or utcnow()
    cutoff = now - timedelta(days=int(retention_days))
    try:
        removed = Record.query.filter(Record.time < cutoff).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return removed


def _in_reloader_parent(app) -> bool:
    return bool(app.config.get('USE_RELOADER')) and os.environ.get('WERKZEUG_RUN_MAIN') != 'true'


def start_purge_worker(app):
    """Start the periodic retention sweep for ``app``.

    - No-ops in TESTING mode or when RECORD_PURGE_INTERVAL_SEC is 0
    - No-ops in the reloader parent process; the reloaded child runs it
    - Runs one sweep per interval inside an app context
    - Store faults are logged and the sweep is retried on the next tick
    """
    if app.config.get('TESTING'):
        return None
    if _in_reloader_parent(app):
        return None
    try:
        interval = int(app.config.get('RECORD_PURGE_INTERVAL_SEC', 0))
    except (TypeError, ValueError):
        interval = 0
    if interval <= 0:
        return None
    retention_days = app.config.get('RECORD_RETENTION_DAYS', 7)

    def _worker():
        while True:
            with app.app_context():
                try:
                    removed = purge_expired_records(retention_days)
                    if removed:
                        app.logger.info(f"[purge] removed={removed} retention_days={retention_days}")
                except SQLAlchemyError as exc:
                    app.logger.error(f"[purge-error] {exc}")
            time.sleep(interval)

    thread = threading.Thread(target=_worker, name='record-purge', daemon=True)
    thread.start()
    app.logger.info(f"[purge-start] interval={interval}s retention_days={retention_days}")
    return thread
