from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()


def create_app(config_class=Config):
    flask_app = Flask(__name__, static_folder=None)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    CORS(flask_app, origins=flask_app.config.get('CORS_ORIGINS', '*'))

    # Import and register blueprints here
    from gamecenter.main import main
    flask_app.register_blueprint(main)

    from gamecenter.api.accounts import accounts
    from gamecenter.api.records import records
    flask_app.register_blueprint(accounts, url_prefix='/api')
    flask_app.register_blueprint(records, url_prefix='/api')

    # Ensure models are registered before create_all
    from gamecenter import models  # noqa: F401

    if flask_app.config.get('AUTO_CREATE_TABLES'):
        with flask_app.app_context():
            db.create_all()

    from gamecenter.services.records import purge_expired_records, start_purge_worker
    start_purge_worker(flask_app)

    @click.command('init-db')
    @click.option('--reset', is_flag=True, help='Drop all tables before creating them.')
    def init_db_command(reset):
        """Creates the database tables."""
        with flask_app.app_context():
            if reset:
                db.drop_all()
            db.create_all()
            click.echo('Database has been reset!' if reset else 'Database tables created.')

    @click.command('purge-records')
    def purge_records_command():
        """Deletes records older than the retention window."""
        with flask_app.app_context():
            removed = purge_expired_records(flask_app.config.get('RECORD_RETENTION_DAYS', 7))
            click.echo(f'Purged {removed} expired record(s).')

    flask_app.cli.add_command(init_db_command)
    flask_app.cli.add_command(purge_records_command)

    return flask_app
