"""
Provides routes for case records.

Every route is subject to the per-user rate limit. Routes on a single case
load it first (404 if it does not exist) and then require the principal to
own it.
"""

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from ..auth import authenticated, current_principal
from ..auth.gates import guarded, ownership, rate_limit
from ..controllers import cases

blueprint = Blueprint('cases', __name__, url_prefix='/api/cases')

owner_only = guarded(rate_limit(), ownership(), resource=cases.load_case)


@blueprint.route('', methods=['GET'])
@authenticated
@guarded(rate_limit())
def list_cases() -> tuple:
    data, status_code, headers = cases.list_cases(current_principal(),
                                                  request.args)
    return jsonify(data), status_code, headers


@blueprint.route('', methods=['POST'])
@authenticated
@guarded(rate_limit())
def create_case() -> tuple:
    data, status_code, headers = cases.create_case(
        current_principal(), request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:case_id>', methods=['GET'])
@authenticated
@owner_only
def get_case(case_id: int, resource: Dict[str, Any]) -> tuple:
    data, status_code, headers = cases.get_case(resource)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:case_id>', methods=['PUT'])
@authenticated
@owner_only
def update_case(case_id: int, resource: Dict[str, Any]) -> tuple:
    data, status_code, headers = cases.update_case(
        resource, request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:case_id>', methods=['DELETE'])
@authenticated
@owner_only
def delete_case(case_id: int, resource: Dict[str, Any]) -> tuple:
    data, status_code, headers = cases.delete_case(resource)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:case_id>/timeline', methods=['POST'])
@authenticated
@owner_only
def add_timeline_event(case_id: int, resource: Dict[str, Any]) -> tuple:
    data, status_code, headers = cases.add_timeline_event(
        resource, request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:case_id>/timeline/<string:event_id>',
                 methods=['PUT'])
@authenticated
@owner_only
def update_timeline_event(case_id: int, event_id: str,
                          resource: Dict[str, Any]) -> tuple:
    data, status_code, headers = cases.update_timeline_event(
        resource, event_id, request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers


@blueprint.route('/<int:case_id>/timeline/<string:event_id>',
                 methods=['DELETE'])
@authenticated
@owner_only
def delete_timeline_event(case_id: int, event_id: str,
                          resource: Dict[str, Any]) -> tuple:
    data, status_code, headers = cases.delete_timeline_event(resource,
                                                             event_id)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:case_id>/deadlines', methods=['GET'])
@authenticated
@owner_only
def upcoming_deadlines(case_id: int, resource: Dict[str, Any]) -> tuple:
    data, status_code, headers = cases.upcoming_deadlines(resource,
                                                          request.args)
    return jsonify(data), status_code, headers


@blueprint.route('/<int:case_id>/notes', methods=['POST'])
@authenticated
@owner_only
def add_note(case_id: int, resource: Dict[str, Any]) -> tuple:
    data, status_code, headers = cases.add_note(
        resource, request.get_json(force=True, silent=True) or {})
    return jsonify(data), status_code, headers
