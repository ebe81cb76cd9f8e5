import logging

from gitwars import create_app, socketio

app = create_app()

if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
