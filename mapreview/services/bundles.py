"""Task bundle lifecycle and bundle-wide workflow changes.

Bundle operations always act on the members the bundle has when they are
called, and every mutating operation returns the bundle re-read from the
database, since status and tag side effects are committed task by task.

A bundle that loses its last member is deleted.
"""

import logging
from mapreview import db
from mapreview.constants import ItemType, TagType
from mapreview.errors import InvalidArgumentError, InvalidBundleStateError, NotFoundError
from mapreview.models import BundleTask, TaskBundle
from mapreview.services.comments import create_comment
from mapreview.services.tags import MERGE, associate_tags, parse_tag_list, resolve_tags, validate_tag_refs
from mapreview.services.task_review import set_meta_review_status, set_review_status
from mapreview.services.task_status import load_tasks, set_task_status, validate_task_status

logger = logging.getLogger(__name__)


def get_bundle(bundle_id):
    """Return ``(bundle, tasks)`` with the member tasks in bundle order."""
    bundle = TaskBundle.query.get(bundle_id)
    if bundle is None:
        raise NotFoundError(f'Task bundle {bundle_id} not found')
    return bundle, load_tasks(bundle.task_ids)


def bundle_tasks(bundle_id):
    """Member tasks of a bundle, failing if there are none."""
    _, tasks = get_bundle(bundle_id)
    if not tasks:
        raise InvalidBundleStateError('No tasks found in this bundle.')
    return tasks


def create_bundle(actor, name, task_ids):
    """Create a bundle owned by ``actor`` and lock its tasks to them."""
    if not task_ids:
        raise InvalidArgumentError('No task ids provided for task bundle')
    tasks = load_tasks(task_ids)

    bundle = TaskBundle(owner_id=actor.id, name=name or '')
    db.session.add(bundle)
    for task in tasks:
        bundle.members.append(BundleTask(task_id=task.id))
        task.lock(actor.id)
    db.session.commit()

    logger.info(f'User {actor.id} created bundle {bundle.id} with tasks {bundle.task_ids}')
    return get_bundle(bundle.id)


def unbundle_tasks(actor, bundle_id, task_ids):
    """Remove tasks from a bundle and release their locks.

    Returns ``(bundle, tasks)``, or None when the bundle was emptied and
    therefore deleted.
    """
    bundle, _ = get_bundle(bundle_id)
    remove = set(task_ids)

    for member in list(bundle.members):
        if member.task_id in remove:
            bundle.members.remove(member)
            member.task.unlock()
    if bundle.primary_task_id in remove:
        bundle.primary_task_id = None

    if not bundle.members:
        db.session.delete(bundle)
        db.session.commit()
        logger.info(f'User {actor.id} emptied bundle {bundle_id}; bundle deleted')
        return None

    db.session.commit()
    logger.info(f'User {actor.id} removed tasks {sorted(remove)} from bundle {bundle_id}')
    return get_bundle(bundle_id)


def delete_bundle(actor, bundle_id, primary_task_id=None):
    """Delete a bundle, unlocking every member except ``primary_task_id``.

    The primary task stays locked so the caller can keep working on it.
    """
    bundle, tasks = get_bundle(bundle_id)
    for task in tasks:
        if task.id != primary_task_id:
            task.unlock()
    db.session.delete(bundle)
    db.session.commit()
    logger.info(f'User {actor.id} deleted bundle {bundle_id}')


def set_bundle_task_status(actor, bundle_id, primary_task_id, status, comment='', tags='',
                           request_review=None, completion_responses=None):
    """Set the status of every task in the bundle."""
    bundle, tasks = get_bundle(bundle_id)
    if not tasks:
        raise InvalidBundleStateError('No tasks found in this bundle.')
    if primary_task_id not in bundle.task_ids:
        raise InvalidArgumentError(f'Task {primary_task_id} is not part of bundle {bundle_id}')
    validate_task_status(status)
    raw_tags = parse_tag_list(tags)
    validate_tag_refs(raw_tags, TagType.TASKS)

    bundle.primary_task_id = primary_task_id
    db.session.commit()

    actions = set_task_status(
        tasks, status, actor,
        request_review=request_review,
        completion_responses=completion_responses,
        bundle_id=bundle_id,
        primary_task_id=primary_task_id
    )

    tag_ids = resolve_tags(raw_tags, TagType.TASKS)
    for task, action in zip(tasks, actions):
        if comment:
            create_comment(actor, task.id, comment, action.id)
        if tag_ids:
            associate_tags(ItemType.TASK, task.id, tag_ids, MERGE, actor)
        db.session.commit()

    return get_bundle(bundle_id)


def set_bundle_review_status(actor, bundle_id, review_status, comment='', tags='', new_task_status=None):
    """Review every task in the bundle; review tags attach to the bundle id."""
    tasks = bundle_tasks(bundle_id)
    set_review_status(
        tasks, review_status, actor,
        comment=comment,
        tags=tags,
        new_task_status=new_task_status,
        tag_target_id=bundle_id
    )
    return get_bundle(bundle_id)


def set_bundle_meta_review_status(actor, bundle_id, meta_review_status, comment='', tags=''):
    """Meta-review every task in the bundle; tags attach to the bundle id."""
    tasks = bundle_tasks(bundle_id)
    set_meta_review_status(
        tasks, meta_review_status, actor,
        comment=comment,
        tags=tags,
        tag_target_id=bundle_id
    )
    return get_bundle(bundle_id)
