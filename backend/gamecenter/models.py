from datetime import datetime, timezone
from gamecenter import db, bcrypt

DEFAULT_STATUS = 'pending'


def utcnow():
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Admin(db.Model):
    __tablename__ = 'admin'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    nickname = db.Column(db.String(64), nullable=True)
    avatar = db.Column(db.Text, nullable=True)  # URL or inline data URL
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not isinstance(password, str) or not password:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'username': self.username,
            'nickname': self.nickname,
            'avatar': self.avatar,
        }


class Record(db.Model):
    __tablename__ = 'record'
    __table_args__ = (
        # NULL client ids are distinct, so only non-empty ids are unique per owner
        db.UniqueConstraint('owner', 'client_id', name='uq_record_owner_client_id'),
        db.Index('ix_record_owner_time', 'owner', 'time'),
    )
    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.String(255), nullable=True)
    owner = db.Column(db.String(64), nullable=False)
    game = db.Column(db.Text, nullable=False, default='')
    role_id = db.Column(db.Text, nullable=False, default='')
    role_name = db.Column(db.Text, nullable=False, default='')
    server = db.Column(db.Text, nullable=False, default='')
    status = db.Column(db.Text, nullable=False, default=DEFAULT_STATUS)
    time = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def to_dict(self):
        return {
            '_id': self.id,
            'id': self.client_id or '',
            'owner': self.owner,
            'game': self.game,
            'roleId': self.role_id,
            'roleName': self.role_name,
            'server': self.server,
            'status': self.status,
            'time': self.time.isoformat() + 'Z' if self.time else None,
        }
