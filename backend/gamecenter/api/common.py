from flask import request, jsonify


def json_body():
    """Request JSON as a dict; anything else counts as an empty body."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def message(text, status=200, **extra):
    payload = {'message': text}
    payload.update(extra)
    return jsonify(payload), status
