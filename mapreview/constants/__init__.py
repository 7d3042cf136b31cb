"""Shared constants for the application."""

from mapreview.constants.statuses import (
    TaskStatus,
    ReviewStatus,
    ActionKind,
    ItemType,
    TagType,
    TAG_TYPE_FOR_ITEM,
    SCORE_KEYS,
    is_valid_task_status,
    is_valid_review_status,
)

__all__ = [
    'TaskStatus',
    'ReviewStatus',
    'ActionKind',
    'ItemType',
    'TagType',
    'TAG_TYPE_FOR_ITEM',
    'SCORE_KEYS',
    'is_valid_task_status',
    'is_valid_review_status',
]
