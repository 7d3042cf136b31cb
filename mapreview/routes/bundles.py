"""Task bundle routes (create, fetch, unbundle, delete, bundle-wide workflow)."""

from flask import Blueprint, request, jsonify
from mapreview.services import bundles
from mapreview.utils import (
    token_required,
    reviewer_required,
    require_review_permission,
    parse_id_list,
    parse_bool_arg,
)

bundles_bp = Blueprint('bundles', __name__)


def bundle_response(bundle, tasks):
    return bundle.to_dict(tasks=tasks)


@bundles_bp.route('', methods=['POST'])
@token_required
def create_task_bundle(current_user):
    """Create a bundle from the task ids in the body, owned by the caller.

    Body:
        name: str - Optional bundle name
        taskIds: list[int] - Tasks to bundle (required, non-empty)
    """
    data = request.get_json(silent=True) or {}
    task_ids = data.get('taskIds')

    if not isinstance(task_ids, list) or not task_ids:
        return jsonify({'error': 'No task ids provided for task bundle'}), 400
    if not all(isinstance(task_id, int) and not isinstance(task_id, bool) for task_id in task_ids):
        return jsonify({'error': 'Task ids must be integers'}), 400

    bundle, tasks = bundles.create_bundle(current_user, data.get('name', ''), task_ids)
    return jsonify(bundle_response(bundle, tasks)), 201


@bundles_bp.route('/<int:bundle_id>', methods=['GET'])
@token_required
def get_task_bundle(current_user, bundle_id):
    """Get a bundle and its member tasks."""
    bundle, tasks = bundles.get_bundle(bundle_id)
    return jsonify(bundle_response(bundle, tasks)), 200


@bundles_bp.route('/<int:bundle_id>/unbundle', methods=['POST'])
@token_required
def unbundle_tasks(current_user, bundle_id):
    """Remove tasks from a bundle.

    Query params:
        - taskIds: comma-separated task ids to remove
    """
    task_ids = parse_id_list(request.args.get('taskIds', ''))
    if not task_ids:
        return jsonify({'error': 'A comma separated list of task ids is required'}), 400

    result = bundles.unbundle_tasks(current_user, bundle_id, task_ids)
    if result is None:
        return jsonify({'id': bundle_id, 'deleted': True}), 200

    bundle, tasks = result
    return jsonify(bundle_response(bundle, tasks)), 200


@bundles_bp.route('/<int:bundle_id>', methods=['DELETE'])
@token_required
def delete_task_bundle(current_user, bundle_id):
    """Delete a bundle.

    Query params:
        - primaryId: optional task id to keep locked after the bundle is gone
    """
    primary_id = request.args.get('primaryId', type=int)
    bundles.delete_bundle(current_user, bundle_id, primary_id)
    return jsonify({'message': 'Task bundle deleted', 'id': bundle_id}), 200


@bundles_bp.route('/<int:bundle_id>/<int:primary_id>/status/<int:status>', methods=['PUT'])
@token_required
def set_bundle_task_status(current_user, bundle_id, primary_id, status):
    """Set the status of every task in the bundle.

    Query params:
        - comment: optional comment added to each task
        - tags: optional comma-separated tags added to each task
        - requestReview: optional true/false, defaults to the user's setting

    The JSON body, if any, is stored with each status action as the
    completion responses.
    """
    bundle, tasks = bundles.set_bundle_task_status(
        current_user,
        bundle_id,
        primary_id,
        status,
        comment=request.args.get('comment', ''),
        tags=request.args.get('tags', ''),
        request_review=parse_bool_arg(request.args.get('requestReview')),
        completion_responses=request.get_json(silent=True)
    )
    return jsonify(bundle_response(bundle, tasks)), 200


@bundles_bp.route('/<int:bundle_id>/review/<int:review_status>', methods=['PUT'])
@token_required
def set_bundle_review_status(current_user, bundle_id, review_status):
    """Set the review status of every task in the bundle.

    Query params:
        - comment: optional comment added to each task
        - tags: optional comma-separated tags, attached to the bundle id
        - newTaskStatus: optional status to revise every task to first

    Reviewers only, except a mapper revising their own tasks back to
    Requested.
    """
    new_task_status = request.args.get('newTaskStatus', '')
    require_review_permission(current_user, review_status, new_task_status)

    bundle, tasks = bundles.set_bundle_review_status(
        current_user,
        bundle_id,
        review_status,
        comment=request.args.get('comment', ''),
        tags=request.args.get('tags', ''),
        new_task_status=new_task_status
    )
    return jsonify(bundle_response(bundle, tasks)), 200


@bundles_bp.route('/<int:bundle_id>/metareview/<int:meta_review_status>', methods=['PUT'])
@token_required
@reviewer_required
def set_bundle_meta_review_status(current_user, bundle_id, meta_review_status):
    """Set the meta-review status of every task in the bundle."""
    bundle, tasks = bundles.set_bundle_meta_review_status(
        current_user,
        bundle_id,
        meta_review_status,
        comment=request.args.get('comment', ''),
        tags=request.args.get('tags', '')
    )
    return jsonify(bundle_response(bundle, tasks)), 200
