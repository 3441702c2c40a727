"""
WSGI Entry Point

Production (Socket.IO needs a single worker with threads):
  gunicorn --worker-class gthread --threads 8 -w 1 wsgi:app

Development:
  python wsgi.py
"""
import os

from app_init import create_app

app = create_app()
socketio = app.extensions['socketio']

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    socketio.run(app, host='0.0.0.0', port=port, debug=app.debug, allow_unsafe_werkzeug=True)
