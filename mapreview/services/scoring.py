"""Score ledger for task status credits.

A user earns points for each task they move into a scored status. When a
mapper revises a task after review, the credit for the old status is rolled
back before the new status is credited, so a task only ever counts once.

Points per status come from the ``SCORE_POINTS`` app config; statuses that
are not scored credit nothing and touch no counter. The score and every
counter are floored at zero.
"""

import logging
from flask import current_app
from mapreview import db
from mapreview.constants import SCORE_KEYS
from mapreview.models import UserMetrics

logger = logging.getLogger(__name__)

# Status key -> counter column on UserMetrics
COUNTER_COLUMNS = {
    'FIXED': 'total_fixed',
    'FALSE_POSITIVE': 'total_false_positive',
    'ALREADY_FIXED': 'total_already_fixed',
    'TOO_HARD': 'total_too_hard',
    'SKIPPED': 'total_skipped',
}


def get_metrics(user_id):
    """Get or create the metrics row for a user."""
    metrics = UserMetrics.query.get(user_id)
    if metrics is None:
        metrics = UserMetrics(
            user_id=user_id,
            score=0,
            total_fixed=0,
            total_false_positive=0,
            total_already_fixed=0,
            total_too_hard=0,
            total_skipped=0,
        )
        db.session.add(metrics)
        db.session.flush()
    return metrics


def points_for(status):
    key = SCORE_KEYS.get(status)
    if key is None:
        return 0
    return current_app.config['SCORE_POINTS'].get(key, 0)


def _apply(user_id, status, direction):
    key = SCORE_KEYS.get(status)
    metrics = get_metrics(user_id)
    if key is None:
        return metrics

    # Score and counters never go below zero, even for a rollback with no prior credit
    metrics.score = max(0, metrics.score + direction * points_for(status))
    column = COUNTER_COLUMNS[key]
    setattr(metrics, column, max(0, getattr(metrics, column) + direction))
    return metrics


def credit(user_id, status):
    """Credit a user for moving a task into ``status``."""
    metrics = _apply(user_id, status, 1)
    logger.info(f'Credited user {user_id} for status {status}, score={metrics.score}')
    return metrics


def rollback(user_id, status):
    """Take back the credit a user earned for ``status``."""
    metrics = _apply(user_id, status, -1)
    logger.info(f'Rolled back user {user_id} credit for status {status}, score={metrics.score}')
    return metrics
