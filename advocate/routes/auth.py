"""Provides routes for registration, login and the current profile."""

from flask import Blueprint, jsonify, request

from ..auth import authenticated, current_principal
from ..controllers import authentication

blueprint = Blueprint('auth', __name__, url_prefix='/api/auth')


@blueprint.route('/register', methods=['POST'])
def register() -> tuple:
    """Create a profile and get an access token."""
    data, status_code, headers = authentication.register(
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/login', methods=['POST'])
def login() -> tuple:
    """Exchange credentials for an access token."""
    data, status_code, headers = authentication.login(
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/profile', methods=['GET'])
@authenticated
def get_profile() -> tuple:
    data, status_code, headers = \
        authentication.get_profile(current_principal())
    return jsonify(data), status_code, headers


@blueprint.route('/profile', methods=['PUT'])
@authenticated
def update_profile() -> tuple:
    data, status_code, headers = authentication.update_profile(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/password', methods=['PUT'])
@authenticated
def change_password() -> tuple:
    data, status_code, headers = authentication.change_password(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/logout', methods=['POST'])
@authenticated
def logout() -> tuple:
    data, status_code, headers = authentication.logout(current_principal())
    return jsonify(data), status_code, headers


@blueprint.route('/verify', methods=['GET'])
@authenticated
def verify() -> tuple:
    """Check that the access token is still good."""
    data, status_code, headers = authentication.verify(current_principal())
    return jsonify(data), status_code, headers
