from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from gamecenter import db
from gamecenter.models import DEFAULT_STATUS, Record, utcnow


# wire key -> column
_STRING_FIELDS = (
    ('id', 'client_id'),
    ('game', 'game'),
    ('roleId', 'role_id'),
    ('roleName', 'role_name'),
    ('server', 'server'),
)

# Columns an upsert overwrites on the matching (owner, client_id) row
_REPLACED_COLUMNS = ('game', 'role_id', 'role_name', 'server', 'status', 'time')

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}
_UPSERT_CHUNK = 500

_MAX_OWNER_LENGTH = Record.__table__.c.owner.type.length
_MAX_CLIENT_ID_LENGTH = Record.__table__.c.client_id.type.length


class InvalidBatch(ValueError):
    """The batch cannot be stored as sent. Nothing has been written."""


@dataclass
class SyncResult:
    inserted: int = 0
    updated: int = 0


def _coerce_str(value: Any, default: str = '') -> str:
    # bool is an int subclass
    if isinstance(value, bool) or not value:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return default


def _from_epoch_ms(value: float, now: datetime) -> datetime:
    if not value:
        return now
    try:
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError):
        return now


def _from_iso(text: str, now: datetime) -> datetime:
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return now
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _coerce_time(value: Any, now: datetime) -> datetime:
    if isinstance(value, bool) or not value:
        return now
    if isinstance(value, str):
        text = value.strip()
        # numeric strings are epoch milliseconds, same as numbers
        try:
            value = float(text)
        except ValueError:
            return _from_iso(text, now)
    if isinstance(value, (int, float)):
        return _from_epoch_ms(value, now)
    return now


def normalize_record(payload: Any, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Coerce a loosely-typed client payload into Record column values.

    Every field is always present in the result. Missing or malformed
    values fall back to '' (``'pending'`` for status, ``now`` for time).
    Numbers are accepted for string fields and stringified, and time may
    be an ISO 8601 string or epoch milliseconds, as a number or a string.
    """
    now = now or utcnow()
    if not isinstance(payload, Mapping):
        payload = {}
    fields = {column: _coerce_str(payload.get(key)) for key, column in _STRING_FIELDS}
    fields['status'] = _coerce_str(payload.get('status'), DEFAULT_STATUS)
    fields['time'] = _coerce_time(payload.get('time'), now)
    return fields


def _existing_client_ids(owner: str, client_ids: Set[str]) -> Set[str]:
    if not client_ids:
        return set()
    rows = (
        db.session.query(Record.client_id)
        .filter(Record.owner == owner, Record.client_id.in_(client_ids))
        .all()
    )
    return {row.client_id for row in rows}


def _upsert(owner: str, rows: Dict[str, Dict[str, Any]]) -> None:
    """Insert-or-replace ``rows`` (client id -> fields) in one atomic statement per chunk."""
    dialect = db.engine.dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise NotImplementedError(f'No atomic upsert available for the {dialect!r} dialect')

    values = [dict(fields, owner=owner, client_id=client_id) for client_id, fields in rows.items()]
    for start in range(0, len(values), _UPSERT_CHUNK):
        stmt = insert(Record).values(values[start:start + _UPSERT_CHUNK])
        stmt = stmt.on_conflict_do_update(
            index_elements=['owner', 'client_id'],
            set_={column: stmt.excluded[column] for column in _REPLACED_COLUMNS},
        )
        db.session.execute(stmt)


def sync_records(owner: str, payloads: Sequence[Any], now: Optional[datetime] = None) -> SyncResult:
    """Reconcile a batch of client records into the store for ``owner``.

    Records carrying a client id are upserted on (owner, client id) with
    the store's own ``ON CONFLICT DO UPDATE``, so a row committed by a
    concurrent sync is replaced rather than duplicated (last write wins).
    Within one batch the last occurrence of a client id wins. Records
    without a client id are always inserted. The batch is committed as one
    transaction; on a store fault nothing from it is kept and the error
    propagates.

    The inserted/updated counts come from a lookup taken before the write,
    so they are approximate when another sync races on the same keys.
    """
    if not owner:
        raise ValueError('owner is required')
    if isinstance(payloads, (str, bytes)) or not isinstance(payloads, Sequence):
        raise TypeError('records must be a list')
    if len(owner) > _MAX_OWNER_LENGTH:
        raise InvalidBatch(f'Username must be at most {_MAX_OWNER_LENGTH} characters')

    now = now or utcnow()
    normalized = [normalize_record(p, now=now) for p in payloads]
    if any(len(f['client_id']) > _MAX_CLIENT_ID_LENGTH for f in normalized):
        raise InvalidBatch(f'Record id must be at most {_MAX_CLIENT_ID_LENGTH} characters')

    result = SyncResult()
    keyed: Dict[str, Dict[str, Any]] = {}
    fresh = []

    try:
        seen = _existing_client_ids(owner, {f['client_id'] for f in normalized if f['client_id']})
        for fields in normalized:
            client_id = fields.pop('client_id')
            if not client_id:
                fresh.append(Record(owner=owner, **fields))
                result.inserted += 1
                continue
            if client_id in seen:
                result.updated += 1
            else:
                seen.add(client_id)
                result.inserted += 1
            keyed[client_id] = fields

        db.session.add_all(fresh)
        if keyed:
            _upsert(owner, keyed)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return result
