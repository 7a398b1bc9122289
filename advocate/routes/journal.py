"""Provides routes for journal entries."""

from flask import Blueprint, jsonify, request

from ..auth import authenticated, current_principal
from ..controllers import journal

blueprint = Blueprint('journal', __name__, url_prefix='/api/journal')


@blueprint.route('', methods=['GET'])
@authenticated
def list_entries() -> tuple:
    data, status_code, headers = journal.list_entries(current_principal(),
                                                      request.args)
    return jsonify(data), status_code, headers


@blueprint.route('', methods=['POST'])
@authenticated
def create_entry() -> tuple:
    data, status_code, headers = journal.create_entry(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:entry_id>', methods=['GET'])
@authenticated
def get_entry(entry_id: int) -> tuple:
    data, status_code, headers = journal.get_entry(current_principal(),
                                                   entry_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:entry_id>', methods=['PUT'])
@authenticated
def update_entry(entry_id: int) -> tuple:
    data, status_code, headers = journal.update_entry(
        current_principal(), entry_id,
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:entry_id>', methods=['DELETE'])
@authenticated
def delete_entry(entry_id: int) -> tuple:
    data, status_code, headers = journal.delete_entry(current_principal(),
                                                      entry_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:entry_id>/favorite', methods=['PATCH'])
@authenticated
def toggle_favorite(entry_id: int) -> tuple:
    data, status_code, headers = journal.toggle_favorite(current_principal(),
                                                         entry_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:entry_id>/reminders', methods=['POST'])
@authenticated
def add_reminder(entry_id: int) -> tuple:
    data, status_code, headers = journal.add_reminder(
        current_principal(), entry_id,
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/reminders/upcoming', methods=['GET'])
@authenticated
def upcoming_reminders() -> tuple:
    data, status_code, headers = journal.upcoming_reminders(
        current_principal(), request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/search/text', methods=['GET'])
@authenticated
def search() -> tuple:
    data, status_code, headers = journal.search(current_principal(),
                                                request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/meta/stats', methods=['GET'])
@authenticated
def statistics() -> tuple:
    data, status_code, headers = journal.statistics(current_principal())
    return jsonify(data), status_code, headers
