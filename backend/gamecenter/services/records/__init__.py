"""Record domain services: sync reconciliation, lookup keys and retention.

Routes import from here so that request parsing and response formatting
stay in the blueprints and the store logic stays testable on its own.
"""

from .keys import ClientId, StoreId, parse_record_keys, find_record
from .sync import InvalidBatch, normalize_record, sync_records, SyncResult
from .store import list_records, delete_record, clear_records
from .retention import purge_expired_records, start_purge_worker

__all__ = [
    'ClientId',
    'StoreId',
    'parse_record_keys',
    'find_record',
    'InvalidBatch',
    'normalize_record',
    'sync_records',
    'SyncResult',
    'list_records',
    'delete_record',
    'clear_records',
    'purge_expired_records',
    'start_purge_worker',
]
