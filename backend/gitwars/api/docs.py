from flask import Blueprint, jsonify, request, current_app
from gitwars import get_store
from gitwars.store import DocumentExists, DocumentNotFound, InvalidPath, PermissionDenied, StoreError


docs = Blueprint('docs', __name__)


def _error(exc: StoreError):
    if isinstance(exc, PermissionDenied):
        status = 403
    elif isinstance(exc, DocumentNotFound):
        status = 404
    elif isinstance(exc, DocumentExists):
        status = 409
    elif isinstance(exc, InvalidPath):
        status = 400
    else:
        status = 500
    current_app.logger.warning(f"[docs-error] {type(exc).__name__}: {exc}")
    return jsonify({'error': str(exc)}), status


@docs.route('/<string:collection>/<string:doc_id>', methods=['GET'])
def get_document(collection, doc_id):
    try:
        snapshot = get_store().get(f"{collection}/{doc_id}")
    except StoreError as exc:
        return _error(exc)
    if not snapshot.exists:
        return jsonify({'error': 'Document not found'}), 404
    return jsonify(snapshot.to_dict())


@docs.route('/<string:collection>/<string:doc_id>', methods=['PUT'])
def create_document(collection, doc_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'A JSON object of fields is required'}), 400
    try:
        snapshot = get_store().create(f"{collection}/{doc_id}", data)
    except StoreError as exc:
        return _error(exc)
    return jsonify(snapshot.to_dict()), 201


@docs.route('/<string:collection>/<string:doc_id>', methods=['PATCH'])
def update_document(collection, doc_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({'error': 'A JSON object of fields is required'}), 400
    try:
        snapshot = get_store().update(f"{collection}/{doc_id}", data)
    except StoreError as exc:
        return _error(exc)
    return jsonify(snapshot.to_dict())


@docs.route('/<string:collection>/<string:doc_id>/increment', methods=['POST'])
def increment_field(collection, doc_id):
    data = request.get_json(silent=True) or {}
    field_name = data.get('field')
    delta = data.get('delta')
    floor = data.get('floor')
    if not field_name or not isinstance(delta, int) or isinstance(delta, bool):
        return jsonify({'error': 'field and integer delta are required'}), 400
    if floor is not None and (not isinstance(floor, int) or isinstance(floor, bool)):
        return jsonify({'error': 'floor must be an integer'}), 400
    try:
        snapshot = get_store().increment(f"{collection}/{doc_id}", field_name, delta, floor=floor)
    except StoreError as exc:
        return _error(exc)
    return jsonify(snapshot.to_dict())
