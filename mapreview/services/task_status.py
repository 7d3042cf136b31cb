"""Task status transitions.

Setting a status credits the acting user's score and writes one audit
action per task. Each task is committed on its own: if task 3 of 5 fails,
tasks 1 and 2 keep their new status and the error reaches the caller.
"""

import logging
from datetime import datetime
from mapreview import db
from mapreview.constants import ActionKind, ItemType, ReviewStatus, is_valid_task_status
from mapreview.errors import InvalidArgumentError, NotFoundError
from mapreview.models import Task
from mapreview.services import scoring
from mapreview.services.actions import record_action

logger = logging.getLogger(__name__)


def load_tasks(task_ids):
    """Load tasks in the order given, failing if any id is unknown."""
    ids = list(dict.fromkeys(task_ids))
    if not ids:
        return []
    tasks = Task.query.filter(Task.id.in_(ids)).populate_existing().all()
    by_id = {task.id: task for task in tasks}
    missing = [task_id for task_id in ids if task_id not in by_id]
    if missing:
        raise NotFoundError(f'Tasks not found: {", ".join(str(task_id) for task_id in missing)}')
    return [by_id[task_id] for task_id in ids]


def get_task(task_id):
    task = Task.query.get(task_id)
    if task is None:
        raise NotFoundError(f'Task {task_id} not found')
    return task


def refetch_tasks(tasks):
    """Reload tasks from the database so callers see post-mutation state."""
    return load_tasks([task.id for task in tasks])


def validate_task_status(status):
    if not is_valid_task_status(status):
        raise InvalidArgumentError(f'Invalid task status: {status}')


def set_task_status(tasks, status, actor, request_review=None, completion_responses=None,
                    bundle_id=None, primary_task_id=None):
    """Apply ``status`` to every task.

    ``request_review`` of None falls back to the actor's ``needs_review``
    setting. ``completion_responses`` is stored on the action untouched.
    ``bundle_id``/``primary_task_id`` mark the action as bundle-driven.

    Returns the status-set actions in task order.
    """
    validate_task_status(status)
    if request_review is None:
        request_review = bool(actor.needs_review)

    actions = []
    for task in tasks:
        task.status = status
        task.completed_by_id = actor.id
        task.modified_at = datetime.utcnow()
        if request_review:
            task.review_status = ReviewStatus.REQUESTED
            task.review_requested_by_id = actor.id

        scoring.credit(actor.id, status)
        action = record_action(
            actor, ItemType.TASK, task.id, ActionKind.TASK_STATUS_SET,
            status=status,
            detail={
                'name': task.name,
                'request_review': request_review,
                'completion_responses': completion_responses,
                'bundle_id': bundle_id,
                'primary_task_id': primary_task_id,
            }
        )
        db.session.commit()
        actions.append(action)
        logger.info(f'User {actor.id} set task {task.id} status to {status}')

    return actions
