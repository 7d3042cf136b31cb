"""Audit action recording."""

import logging
from mapreview import db
from mapreview.models import Action

logger = logging.getLogger(__name__)


def record_action(actor, item_type, item_id, kind, status=None, detail=None):
    """Add an audit action to the session and flush it so its id is usable.

    The caller owns the commit, so the action lands in the same transaction
    as the change it describes.
    """
    action = Action(
        user_id=actor.id if actor is not None else None,
        item_type=item_type,
        item_id=item_id,
        kind=kind,
        status=status,
        detail=detail,
    )
    db.session.add(action)
    db.session.flush()
    logger.debug(f'Recorded action {action.id}: {kind} on {item_type}:{item_id}')
    return action


def list_actions(item_type, item_id, kind=None):
    """Actions recorded for an item, oldest first."""
    query = Action.query.filter_by(item_type=item_type, item_id=item_id)
    if kind:
        query = query.filter_by(kind=kind)
    return query.order_by(Action.id).all()
