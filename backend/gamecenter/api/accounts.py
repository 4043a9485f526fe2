import hmac

from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from gamecenter import db
from gamecenter.models import Admin
from gamecenter.services.records import clear_records
from .common import json_body, message

accounts = Blueprint('accounts', __name__)

_PROFILE_FIELDS = ('nickname', 'avatar')
_MAX_NICKNAME_LENGTH = 64
_MAX_USERNAME_LENGTH = 64


def _auth_code_matches(code) -> bool:
    expected = str(current_app.config.get('REG_AUTH_CODE', ''))
    if not isinstance(code, str):
        return False
    return hmac.compare_digest(code.encode('utf-8'), expected.encode('utf-8'))


def _credentials(data, password_key='password'):
    username = data.get('username')
    password = data.get(password_key)
    if not isinstance(username, str) or not username:
        username = None
    if not isinstance(password, str) or not password:
        password = None
    return username, password


@accounts.route('/register', methods=['POST'])
def register():
    data = json_body()
    if not _auth_code_matches(data.get('authCode')):
        return message('Invalid authorization code', 400)

    cfg = current_app.config
    username, password = _credentials(data)
    min_username = int(cfg.get('MIN_USERNAME_LENGTH', 4))
    min_password = int(cfg.get('MIN_PASSWORD_LENGTH', 6))
    if not username or len(username) < min_username:
        return message(f'Username must be at least {min_username} characters', 400)
    if len(username) > _MAX_USERNAME_LENGTH:
        return message(f'Username must be at most {_MAX_USERNAME_LENGTH} characters', 400)
    if not password or len(password) < min_password:
        return message(f'Password must be at least {min_password} characters', 400)

    try:
        if Admin.query.filter_by(username=username).first():
            return message('Account already exists or server error', 500)
        admin = Admin(username=username)
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[register-error] username={username} {exc}")
        return message('Account already exists or server error', 500)

    current_app.logger.info(f"[register] username={username}")
    return message('Registration successful')


@accounts.route('/login', methods=['POST'])
def login():
    username, password = _credentials(json_body())
    if not username or not password:
        return message('Username and password are required', 400)
    try:
        admin = Admin.query.filter_by(username=username).first()
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[login-error] username={username} {exc}")
        return message('Server error', 500)

    if not admin:
        return message('Account not found', 400)
    if not admin.check_password(password):
        return message('Incorrect password', 400)
    return message('Login successful', **admin.to_dict())


@accounts.route('/update-password', methods=['POST'])
def update_password():
    data = json_body()
    username, old_password = _credentials(data, 'oldPassword')
    new_password = data.get('newPassword')
    if not username or not old_password:
        return message('Username and old password are required', 400)
    min_password = int(current_app.config.get('MIN_PASSWORD_LENGTH', 6))
    if not isinstance(new_password, str) or len(new_password) < min_password:
        return message(f'New password must be at least {min_password} characters', 400)

    try:
        admin = Admin.query.filter_by(username=username).first()
        if not admin:
            return message('Account not found', 400)
        if not admin.check_password(old_password):
            return message('Incorrect old password', 400)
        admin.set_password(new_password)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[update-password-error] username={username} {exc}")
        return message('Server error', 500)
    return message('Password updated')


@accounts.route('/update-profile', methods=['POST'])
def update_profile():
    data = json_body()
    username = data.get('username')
    if not isinstance(username, str) or not username:
        return message('Not logged in', 400)

    # Only keys present in the body are applied; null clears a field
    changes = {}
    for field in _PROFILE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if value is not None and not isinstance(value, str):
            return message(f'{field} must be a string', 400)
        changes[field] = value
    nickname = changes.get('nickname')
    if nickname and len(nickname) > _MAX_NICKNAME_LENGTH:
        return message(f'Nickname must be at most {_MAX_NICKNAME_LENGTH} characters', 400)

    try:
        admin = Admin.query.filter_by(username=username).first()
        if not admin:
            return message('Account not found', 400)
        for field, value in changes.items():
            setattr(admin, field, value)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[update-profile-error] username={username} {exc}")
        return message('Server error', 500)
    return message('Profile updated', **admin.to_dict())


@accounts.route('/delete-account', methods=['DELETE'])
def delete_account():
    username, password = _credentials(json_body())
    if not username or not password:
        return message('Username and password are required', 400)

    try:
        admin = Admin.query.filter_by(username=username).first()
        if not admin:
            return message('Account not found', 400)
        if not admin.check_password(password):
            return message('Incorrect password', 400)
        # Owned records go first so no orphaned records outlive the account
        removed = clear_records(username)
        db.session.delete(admin)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[delete-account-error] username={username} {exc}")
        return message('Server error', 500)

    current_app.logger.info(f"[delete-account] username={username} records_removed={removed}")
    return message('Account deleted', recordsRemoved=removed)
