"""Single-task routes: fetch, create, update and the per-task workflow."""

from flask import Blueprint, request, jsonify
from mapreview import db
from mapreview.constants import ItemType, TagType, TaskStatus
from mapreview.models import Task
from mapreview.routes.tags import register_tag_routes
from mapreview.services.actions import list_actions
from mapreview.services.comments import create_comment, list_comments
from mapreview.services.tags import (
    MERGE,
    REPLACE,
    associate_tags,
    extract_tags,
    list_item_tags,
    parse_tag_list,
    resolve_tags,
    validate_tag_refs,
)
from mapreview.services.task_review import set_meta_review_status, set_review_status
from mapreview.services.task_status import get_task, refetch_tasks, set_task_status, validate_task_status
from mapreview.utils import token_required, reviewer_required, require_review_permission, parse_bool_arg

tasks_bp = Blueprint('tasks', __name__)

register_tag_routes(tasks_bp, ItemType.TASK)


def task_response(task):
    task_dict = task.to_dict()
    task_dict['tags'] = [tag.to_dict() for tag in list_item_tags(ItemType.TASK, task.id)]
    return task_dict


def body_tags(data):
    """Raw tags from a create/update body (``tags`` or ``fulltags``), validated."""
    raw_tags = extract_tags(data)
    if raw_tags is not None:
        validate_tag_refs(raw_tags, TagType.TASKS)
    return raw_tags


def apply_body_tags(task, raw_tags, mode, current_user):
    if raw_tags is None:
        return
    tag_ids = resolve_tags(raw_tags, TagType.TASKS)
    if tag_ids or mode == REPLACE:
        associate_tags(ItemType.TASK, task.id, tag_ids, mode, current_user)
        db.session.commit()


@tasks_bp.route('/<int:task_id>', methods=['GET'])
def get_task_details(task_id):
    """Get a task with its tags."""
    task = get_task(task_id)
    return jsonify(task_response(task)), 200


@tasks_bp.route('/<int:task_id>/comments', methods=['GET'])
def get_task_comments(task_id):
    get_task(task_id)
    return jsonify({'comments': [comment.to_dict() for comment in list_comments(task_id)]}), 200


@tasks_bp.route('/<int:task_id>/actions', methods=['GET'])
def get_task_actions(task_id):
    """Audit actions for a task, oldest first. Filter with ?kind=."""
    get_task(task_id)
    actions = list_actions(ItemType.TASK, task_id, kind=request.args.get('kind'))
    return jsonify({'actions': [action.to_dict() for action in actions]}), 200


@tasks_bp.route('', methods=['POST'])
@token_required
def create_task(current_user):
    """Create a task.

    Body:
        name: str - required
        challenge_id: int - optional parent challenge
        status: int - optional, defaults to Created
        tags: str | list - comma separated or list of tag ids/names
        fulltags: list[dict] - tag objects with id, name, description
    """
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Task name is required'}), 400

    status = data.get('status', TaskStatus.CREATED)
    validate_task_status(status)
    raw_tags = body_tags(data)

    task = Task(name=name, challenge_id=data.get('challenge_id'), status=status)
    db.session.add(task)
    db.session.commit()

    apply_body_tags(task, raw_tags, MERGE, current_user)
    return jsonify(task_response(task)), 201


@tasks_bp.route('/<int:task_id>', methods=['PUT'])
@token_required
def update_task(current_user, task_id):
    """Update a task's name; tags in the body replace the existing tags."""
    task = get_task(task_id)
    data = request.get_json(silent=True) or {}
    raw_tags = body_tags(data)

    if 'name' in data:
        name = (data.get('name') or '').strip()
        if not name:
            return jsonify({'error': 'Task name cannot be empty'}), 400
        task.name = name
        db.session.commit()

    apply_body_tags(task, raw_tags, REPLACE, current_user)
    return jsonify(task_response(task)), 200


@tasks_bp.route('/<int:task_id>/status/<int:status>', methods=['PUT'])
@token_required
def set_single_task_status(current_user, task_id, status):
    """Set one task's status.

    Query params:
        - comment: optional comment
        - tags: optional comma-separated tags added to the task
        - requestReview: optional true/false, defaults to the user's setting
    """
    task = get_task(task_id)
    comment = request.args.get('comment', '')
    raw_tags = parse_tag_list(request.args.get('tags', ''))
    validate_task_status(status)
    validate_tag_refs(raw_tags, TagType.TASKS)

    actions = set_task_status(
        [task], status, current_user,
        request_review=parse_bool_arg(request.args.get('requestReview')),
        completion_responses=request.get_json(silent=True)
    )
    if comment:
        create_comment(current_user, task.id, comment, actions[0].id)
        db.session.commit()

    tag_ids = resolve_tags(raw_tags, TagType.TASKS)
    if tag_ids:
        associate_tags(ItemType.TASK, task.id, tag_ids, MERGE, current_user)
    db.session.commit()

    task = refetch_tasks([task])[0]
    return jsonify(task_response(task)), 200


@tasks_bp.route('/<int:task_id>/review/<int:review_status>', methods=['PUT'])
@token_required
def set_single_task_review_status(current_user, task_id, review_status):
    """Set one task's review status; tags attach to the task itself."""
    task = get_task(task_id)
    new_task_status = request.args.get('newTaskStatus', '')
    require_review_permission(current_user, review_status, new_task_status)

    tasks = set_review_status(
        [task], review_status, current_user,
        comment=request.args.get('comment', ''),
        tags=request.args.get('tags', ''),
        new_task_status=new_task_status
    )
    return jsonify(task_response(tasks[0])), 200


@tasks_bp.route('/<int:task_id>/metareview/<int:meta_review_status>', methods=['PUT'])
@token_required
@reviewer_required
def set_single_task_meta_review_status(current_user, task_id, meta_review_status):
    """Set one task's meta-review status."""
    task = get_task(task_id)
    tasks = set_meta_review_status(
        [task], meta_review_status, current_user,
        comment=request.args.get('comment', ''),
        tags=request.args.get('tags', '')
    )
    return jsonify(task_response(tasks[0])), 200
