"""Database models for the map review application."""

from .user import User, UserMetrics
from .task import Task
from .task_bundle import TaskBundle, BundleTask
from .tag import Tag, ItemTag
from .action import Action
from .comment import Comment

__all__ = [
    'User',
    'UserMetrics',
    'Task',
    'TaskBundle',
    'BundleTask',
    'Tag',
    'ItemTag',
    'Action',
    'Comment',
]
