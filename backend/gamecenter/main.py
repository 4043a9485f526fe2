import os

from flask import Blueprint, current_app, jsonify, send_from_directory

main = Blueprint('main', __name__)


def _static_dir():
    return current_app.config.get('STATIC_DIR')


@main.route('/')
def index():
    static_dir = _static_dir()
    if static_dir and os.path.isfile(os.path.join(static_dir, 'index.html')):
        return send_from_directory(static_dir, 'index.html')
    return jsonify({'message': 'Game center server is running'})


@main.route('/<path:filename>')
def frontend_file(filename):
    # send_from_directory rejects paths escaping static_dir with a 404
    static_dir = _static_dir()
    if not static_dir:
        return jsonify({'message': 'Not found'}), 404
    return send_from_directory(static_dir, filename)
