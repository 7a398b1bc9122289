"""Provides routes for legal resources and risk assessment."""

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from ..auth import authenticated, current_principal
from ..auth.gates import guarded, ownership, subscription
from ..controllers import cases, resources

blueprint = Blueprint('resources', __name__, url_prefix='/api/resources')


@blueprint.route('/search', methods=['GET'])
@authenticated
def search() -> tuple:
    data, status_code, headers = resources.search(request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/categories', methods=['GET'])
@authenticated
def categories() -> tuple:
    data, status_code, headers = resources.categories()
    return jsonify(data), status_code, headers


@blueprint.route('/recommendations/<int:case_id>', methods=['GET'])
@authenticated
@guarded(ownership(), resource=cases.load_case)
def recommendations(case_id: int, resource: Dict[str, Any]) -> tuple:
    """Resources relevant to one of the principal's cases."""
    data, status_code, headers = resources.recommendations(resource)
    return jsonify(data), status_code, headers


@blueprint.route('/risk-assessment', methods=['POST'])
@authenticated
def assess_risk() -> tuple:
    data, status_code, headers = resources.assess_risk(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/risk-assessment/template', methods=['GET'])
@authenticated
def risk_template() -> tuple:
    data, status_code, headers = resources.risk_template()
    return jsonify(data), status_code, headers


@blueprint.route('/research-tools', methods=['GET'])
@authenticated
@guarded(subscription('premium'))
def research_tools() -> tuple:
    """Research tools. Premium plans and above."""
    data, status_code, headers = resources.research_tools()
    return jsonify(data), status_code, headers
