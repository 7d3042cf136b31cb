"""Review and meta-review transitions.

Both operate on a list of tasks; a single task is just a list of one. A
review can be preceded by a revision (``new_task_status``), in which the
mapper's credit for the old status is rolled back before the new status is
set and credited. Only the user who completed a task may revise it: the
credit being rolled back is theirs.

Tags given with a review attach to ``tag_target_id`` when one is passed.
Bundle reviews pass the bundle id, so review tags land on that id rather
than on each member task. Without a target each task gets the tags itself.
"""

import logging
from datetime import datetime
from mapreview import db
from mapreview.constants import ActionKind, ItemType, TagType, is_valid_review_status
from mapreview.errors import InvalidArgumentError, InvalidBundleStateError, PermissionDeniedError
from mapreview.services import scoring
from mapreview.services.actions import record_action
from mapreview.services.comments import create_comment
from mapreview.services.tags import MERGE, associate_tags, parse_tag_list, resolve_tags, validate_tag_refs
from mapreview.services.task_status import refetch_tasks, set_task_status, validate_task_status

logger = logging.getLogger(__name__)


def validate_review_status(review_status):
    if not is_valid_review_status(review_status):
        raise InvalidArgumentError(f'Invalid review status: {review_status}')


def parse_new_task_status(new_task_status):
    """Parse the optional revision status; blank means no revision."""
    if new_task_status is None:
        return None
    if isinstance(new_task_status, str):
        new_task_status = new_task_status.strip()
        if not new_task_status:
            return None
    try:
        status = int(new_task_status)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f'Invalid task status: {new_task_status}')
    validate_task_status(status)
    return status


def check_can_revise(tasks, actor):
    for task in tasks:
        if task.completed_by_id not in (None, actor.id):
            raise PermissionDeniedError(f'Only the user who completed task {task.id} can revise its status')


def _prepare_tags(tags):
    # Validate references up front so a bad tag fails before any task changes
    raw_refs = parse_tag_list(tags)
    validate_tag_refs(raw_refs, TagType.TASKS)
    return raw_refs


def _apply_side_effects(tasks, actor, kind, status, comment, tag_ids, tag_target_id, stamp):
    """Write the per-task review field, action, comment and tags."""
    tagged = set()
    for task in tasks:
        stamp(task)
        task.modified_at = datetime.utcnow()
        action = record_action(
            actor, ItemType.TASK, task.id, kind,
            status=status,
            detail={'name': task.name}
        )
        if comment:
            create_comment(actor, task.id, comment, action.id)

        target = tag_target_id if tag_target_id is not None else task.id
        if tag_ids and target not in tagged:
            associate_tags(ItemType.TASK, target, tag_ids, MERGE, actor)
            tagged.add(target)

        db.session.commit()
        logger.info(f'User {actor.id} set {kind} to {status} on task {task.id}')


def set_review_status(tasks, review_status, actor, comment='', tags='', new_task_status=None,
                      tag_target_id=None):
    """Review every task, optionally revising its status first.

    Returns the tasks re-fetched after all changes.
    """
    if not tasks:
        raise InvalidBundleStateError('No tasks found in this bundle.')
    validate_review_status(review_status)
    revision_status = parse_new_task_status(new_task_status)
    if revision_status is not None:
        check_can_revise(tasks, actor)
    raw_tags = _prepare_tags(tags)

    if revision_status is not None:
        for task in tasks:
            # Take back the credit for the status being revised away from
            scoring.rollback(actor.id, task.status)
        set_task_status(tasks, revision_status, actor, request_review=False)
        tasks = refetch_tasks(tasks)

    tag_ids = resolve_tags(raw_tags, TagType.TASKS)

    def stamp(task):
        task.review_status = review_status
        task.reviewed_by_id = actor.id
        task.reviewed_at = datetime.utcnow()

    _apply_side_effects(
        tasks, actor, ActionKind.TASK_REVIEW_STATUS_SET, review_status,
        comment, tag_ids, tag_target_id, stamp
    )
    return refetch_tasks(tasks)


def set_meta_review_status(tasks, meta_review_status, actor, comment='', tags='', tag_target_id=None):
    """Meta-review every task. Never touches status or review status."""
    if not tasks:
        raise InvalidBundleStateError('No tasks found in this bundle.')
    validate_review_status(meta_review_status)
    raw_tags = _prepare_tags(tags)
    tag_ids = resolve_tags(raw_tags, TagType.TASKS)

    def stamp(task):
        task.meta_review_status = meta_review_status
        task.meta_reviewed_by_id = actor.id
        task.meta_reviewed_at = datetime.utcnow()

    _apply_side_effects(
        tasks, actor, ActionKind.META_REVIEW_STATUS_SET, meta_review_status,
        comment, tag_ids, tag_target_id, stamp
    )
    return refetch_tasks(tasks)
