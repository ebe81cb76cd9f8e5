from flask import Blueprint, jsonify, current_app
from gitwars import get_store
from gitwars.store import StoreError

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the GitWars Portal server!'})

@main.route('/health')
def health():
    path = current_app.config['TIMER_STATE_PATH']
    try:
        snapshot = get_store().get(path)
    except StoreError as exc:
        return jsonify({'status': 'degraded', 'error': str(exc)}), 503
    return jsonify({'status': 'ok', 'timer_state': snapshot.data if snapshot.exists else None})
