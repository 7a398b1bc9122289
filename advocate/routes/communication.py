"""Provides routes for communication templates and drafting aids."""

from flask import Blueprint, jsonify, request

from ..auth import authenticated, current_principal
from ..controllers import communication

blueprint = Blueprint('communication', __name__,
                      url_prefix='/api/communication')


@blueprint.route('/templates', methods=['GET'])
@authenticated
def list_templates() -> tuple:
    data, status_code, headers = communication.list_templates(
        current_principal(), request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/templates/<string:template_id>', methods=['GET'])
@authenticated
def get_template(template_id: str) -> tuple:
    data, status_code, headers = communication.get_template(
        current_principal(), template_id)
    return jsonify(data), status_code, headers


@blueprint.route('/analyze', methods=['POST'])
@authenticated
def analyze() -> tuple:
    data, status_code, headers = communication.analyze(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/tips', methods=['GET'])
@authenticated
def tips() -> tuple:
    data, status_code, headers = communication.tips(current_principal(),
                                                    request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/scenarios', methods=['GET'])
@authenticated
def scenarios() -> tuple:
    data, status_code, headers = communication.scenarios(current_principal(),
                                                         request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/generate', methods=['POST'])
@authenticated
def generate() -> tuple:
    data, status_code, headers = communication.generate(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers
