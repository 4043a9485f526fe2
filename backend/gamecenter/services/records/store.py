from typing import List

from sqlalchemy.exc import SQLAlchemyError

from gamecenter import db
from gamecenter.models import Record
from .keys import find_record, parse_record_keys


def list_records(owner: str) -> List[Record]:
    """All records of ``owner``, most recent first."""
    return (
        Record.query.filter_by(owner=owner)
        .order_by(Record.time.desc(), Record.id.desc())
        .all()
    )


def delete_record(owner: str, raw_id) -> bool:
    """Delete the record ``raw_id`` refers to. Unknown ids are a no-op."""
    record = find_record(owner, parse_record_keys(raw_id))
    if record is None:
        return False
    try:
        db.session.delete(record)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return True


def clear_records(owner: str) -> int:
    """Delete every record of ``owner`` and return how many were removed."""
    try:
        removed = Record.query.filter_by(owner=owner).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return removed
