from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/health')
def health():
    registry = current_app.extensions['ludo_registry']
    return jsonify({'status': 'ok', 'rooms': registry.room_count()})
