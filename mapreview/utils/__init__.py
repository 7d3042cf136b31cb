"""Shared utilities for the map review backend.

This package contains reusable utilities that are shared across
multiple route files to reduce code duplication.
"""

from mapreview.utils.auth import (
    create_token,
    token_required,
    reviewer_required,
    require_reviewer,
    require_review_permission,
)
from mapreview.utils.request_helpers import parse_id_list, parse_bool_arg

__all__ = [
    'create_token',
    'token_required',
    'reviewer_required',
    'require_reviewer',
    'require_review_permission',
    'parse_id_list',
    'parse_bool_arg',
]
