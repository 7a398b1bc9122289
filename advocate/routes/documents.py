"""Provides routes for uploaded documents."""

from flask import Blueprint, Response, jsonify, request, send_file

from ..auth import authenticated, current_principal
from ..controllers import documents

blueprint = Blueprint('documents', __name__, url_prefix='/api/documents')


@blueprint.route('', methods=['GET'])
@authenticated
def list_documents() -> tuple:
    data, status_code, headers = documents.list_documents(current_principal(),
                                                          request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/upload', methods=['POST'])
@authenticated
def upload() -> tuple:
    """Upload up to ten files as multipart form data."""
    data, status_code, headers = documents.upload(current_principal(),
                                                  request.form, request.files)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:document_id>', methods=['GET'])
@authenticated
def get_document(document_id: int) -> tuple:
    data, status_code, headers = documents.get_document(current_principal(),
                                                        document_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:document_id>', methods=['PUT'])
@authenticated
def update_document(document_id: int) -> tuple:
    data, status_code, headers = documents.update_document(
        current_principal(), document_id,
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:document_id>', methods=['DELETE'])
@authenticated
def delete_document(document_id: int) -> tuple:
    data, status_code, headers = documents.delete_document(
        current_principal(), document_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:document_id>/download', methods=['GET'])
@authenticated
def download(document_id: int) -> Response:
    document, stream = documents.download(current_principal(), document_id)
    return send_file(stream,
                     mimetype=document['mimeType']
                     or 'application/octet-stream',
                     as_attachment=True,
                     download_name=document['originalName'])


@blueprint.route('/<int:document_id>/annotations', methods=['POST'])
@authenticated
def add_annotation(document_id: int) -> tuple:
    data, status_code, headers = documents.add_annotation(
        current_principal(), document_id,
        request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/search/text', methods=['GET'])
@authenticated
def search() -> tuple:
    data, status_code, headers = documents.search(current_principal(),
                                                  request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/meta/categories', methods=['GET'])
@authenticated
def categories() -> tuple:
    data, status_code, headers = documents.categories(current_principal())
    return jsonify(data), status_code, headers


@blueprint.route('/meta/stats', methods=['GET'])
@authenticated
def statistics() -> tuple:
    data, status_code, headers = documents.statistics(current_principal())
    return jsonify(data), status_code, headers
