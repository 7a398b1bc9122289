"""Provides routes for user administration and preferences."""

from flask import Blueprint, jsonify, request

from ..auth import authenticated, current_principal
from ..auth.gates import admin, guarded
from ..controllers import users

blueprint = Blueprint('users', __name__, url_prefix='/api/users')


@blueprint.route('', methods=['GET'])
@authenticated
@guarded(admin())
def list_users() -> tuple:
    """List all users. Administrators only."""
    data, status_code, headers = users.list_users(request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/<string:user_id>', methods=['GET'])
@authenticated
def get_user(user_id: str) -> tuple:
    data, status_code, headers = users.get_user(current_principal(), user_id)
    return jsonify(data), status_code, headers


@blueprint.route('/preferences', methods=['PATCH'])
@authenticated
def update_preferences() -> tuple:
    data, status_code, headers = users.update_preferences(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/deactivate', methods=['PATCH'])
@authenticated
def deactivate() -> tuple:
    data, status_code, headers = users.deactivate(current_principal())
    return jsonify(data), status_code, headers


@blueprint.route('/<string:user_id>/reactivate', methods=['PATCH'])
@authenticated
@guarded(admin())
def reactivate(user_id: str) -> tuple:
    data, status_code, headers = users.reactivate(user_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<string:user_id>/stats', methods=['GET'])
@authenticated
def get_stats(user_id: str) -> tuple:
    data, status_code, headers = users.get_stats(current_principal(), user_id)
    return jsonify(data), status_code, headers
