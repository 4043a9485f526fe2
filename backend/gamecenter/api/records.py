from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from gamecenter.services.records import (
    InvalidBatch,
    clear_records,
    delete_record,
    list_records,
    sync_records,
)
from .common import json_body, message

records = Blueprint('records', __name__)


def _owner(value):
    return value if isinstance(value, str) and value else None


@records.route('/records', methods=['POST'])
def save_records():
    data = json_body()
    owner = _owner(data.get('username'))
    batch = data.get('records')
    current_app.logger.info(
        f"[sync] owner={owner} received={len(batch) if isinstance(batch, list) else 0}"
    )
    if not owner:
        return message('Not logged in', 400)
    if not isinstance(batch, list):
        return message('Invalid data format', 400)

    try:
        result = sync_records(owner, batch)
    except InvalidBatch as exc:
        return message(str(exc), 400)
    except SQLAlchemyError as exc:
        detail = getattr(exc, 'orig', None) or exc
        current_app.logger.error(f"[sync-error] owner={owner} {detail}")
        return message(f'Sync failed: {detail}', 500)

    current_app.logger.info(
        f"[sync-done] owner={owner} inserted={result.inserted} updated={result.updated}"
    )
    return message('Records synced to the cloud', inserted=result.inserted, updated=result.updated)


@records.route('/records', methods=['GET'])
def get_records():
    owner = _owner(request.args.get('username'))
    if not owner:
        return message('Not logged in', 400)
    try:
        rows = list_records(owner)
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[records-error] owner={owner} {exc}")
        return message('Failed to fetch records', 500)
    return jsonify([r.to_dict() for r in rows])


@records.route('/records', methods=['DELETE'])
def remove_records():
    owner = _owner(request.args.get('username'))
    if not owner:
        return message('Not logged in', 400)
    raw_id = request.args.get('id')

    try:
        if raw_id:
            deleted = delete_record(owner, raw_id)
            current_app.logger.info(f"[delete-record] owner={owner} id={raw_id} deleted={deleted}")
            return message('Record deleted', deleted=deleted)
        removed = clear_records(owner)
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[delete-record-error] owner={owner} {exc}")
        return message('Delete failed', 500)

    current_app.logger.info(f"[clear-records] owner={owner} removed={removed}")
    return message('Records cleared', removed=removed)
