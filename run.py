# Entry point for the focusroom application

from focusroom import create_app
from focusroom.extensions import socketio

app = create_app()

if __name__ == '__main__':
    app.logger.info("[SERVER STARTUP] Starting focusroom...")
    socketio.run(app, host='0.0.0.0', port=5000, debug=False)
