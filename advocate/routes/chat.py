"""Provides routes for conversations with the assistant."""

from flask import Blueprint, jsonify, request

from ..auth import authenticated, current_principal
from ..controllers import chat

blueprint = Blueprint('chat', __name__, url_prefix='/api/chat')


@blueprint.route('', methods=['GET'])
@authenticated
def list_conversations() -> tuple:
    data, status_code, headers = chat.list_conversations(current_principal(),
                                                         request.args)
    return jsonify(data), status_code, headers


@blueprint.route('', methods=['POST'])
@authenticated
def create_conversation() -> tuple:
    data, status_code, headers = chat.create_conversation(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:conversation_id>', methods=['GET'])
@authenticated
def get_conversation(conversation_id: int) -> tuple:
    data, status_code, headers = chat.get_conversation(current_principal(),
                                                       conversation_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:conversation_id>', methods=['PUT'])
@authenticated
def update_conversation(conversation_id: int) -> tuple:
    data, status_code, headers = chat.update_conversation(
        current_principal(), conversation_id,
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:conversation_id>', methods=['DELETE'])
@authenticated
def delete_conversation(conversation_id: int) -> tuple:
    data, status_code, headers = chat.delete_conversation(current_principal(),
                                                          conversation_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:conversation_id>/messages', methods=['POST'])
@authenticated
def send_message(conversation_id: int) -> tuple:
    """Post a message and get the assistant's reply."""
    data, status_code, headers = chat.send_message(
        current_principal(), conversation_id,
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:conversation_id>/messages/<string:message_id>',
                 methods=['PUT'])
@authenticated
def edit_message(conversation_id: int, message_id: str) -> tuple:
    data, status_code, headers = chat.edit_message(
        current_principal(), conversation_id, message_id,
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:conversation_id>/bookmark', methods=['PATCH'])
@authenticated
def toggle_bookmark(conversation_id: int) -> tuple:
    data, status_code, headers = chat.toggle_bookmark(current_principal(),
                                                      conversation_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:conversation_id>/archive', methods=['PATCH'])
@authenticated
def archive(conversation_id: int) -> tuple:
    data, status_code, headers = chat.archive(current_principal(),
                                              conversation_id)
    return jsonify(data), status_code, headers


@blueprint.route('/search/text', methods=['GET'])
@authenticated
def search() -> tuple:
    data, status_code, headers = chat.search(current_principal(),
                                             request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/meta/stats', methods=['GET'])
@authenticated
def statistics() -> tuple:
    data, status_code, headers = chat.statistics(current_principal())
    return jsonify(data), status_code, headers
