import os

if __name__ == '__main__':
    # Must be set before config is imported
    os.environ.setdefault('FLASK_DEBUG', '1')

from gamecenter import create_app  # noqa: E402

app = create_app()

if __name__ == '__main__':
    debug = app.config.get('USE_RELOADER', False)
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', '3000')), debug=debug, use_reloader=debug)
