"""
WSGI entry point for the PoolGuy strip type detection service.

Used by Gunicorn in production/staging. The detection service holds only
configuration, so any number of workers can share one import of app.

Usage:
    gunicorn -w 4 -b 0.0.0.0:5000 --timeout 60 wsgi:app
"""

from app import app

application = app

if __name__ == '__main__':
    import os
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    app.run(host='0.0.0.0', port=port, debug=debug)
