from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from gamecenter.models import Record


@dataclass(frozen=True)
class ClientId:
    """Identifier generated by the frontend (``id`` on the wire)."""
    value: str


@dataclass(frozen=True)
class StoreId:
    """Primary key assigned by the store (``_id`` on the wire)."""
    value: int


RecordKey = Union[ClientId, StoreId]

# Record.id is a 32-bit Integer column
_MAX_STORE_ID = 2 ** 31 - 1


def parse_record_keys(raw) -> Tuple[RecordKey, ...]:
    """Return the keys an identifier sent by a client may refer to.

    The client id is matched exactly as sent, the way sync stores it, and
    is always tried first. A decimal integer, ignoring surrounding
    whitespace, may also be a store id.
    """
    if raw is None or raw == '':
        return ()
    raw = str(raw)
    keys = [ClientId(raw)]
    text = raw.strip()
    if text.isascii() and text.isdigit() and int(text) <= _MAX_STORE_ID:
        keys.append(StoreId(int(text)))
    return tuple(keys)


def _query_for(owner: str, key: RecordKey):
    if isinstance(key, ClientId):
        return Record.query.filter_by(owner=owner, client_id=key.value)
    if isinstance(key, StoreId):
        return Record.query.filter_by(owner=owner, id=key.value)
    raise TypeError(f'Unsupported record key: {key!r}')


def find_record(owner: str, keys: Iterable[RecordKey]) -> Optional[Record]:
    """Return the first record of ``owner`` matching one of ``keys``, in order."""
    for key in keys:
        record = _query_for(owner, key).first()
        if record is not None:
            return record
    return None
