"""Shared authentication utilities.

This module provides JWT authentication decorators used by every route
file, so authentication behaves the same across the API. Tokens are
signed elsewhere (the OAuth sign-in flow); ``create_token`` exists for
tooling and tests.
"""

from datetime import datetime, timedelta
from functools import wraps
from flask import request, jsonify, current_app, g
import jwt
from mapreview.constants import ReviewStatus
from mapreview.errors import PermissionDeniedError


def create_token(user_id, expires_in=None):
    """Sign an access token for ``user_id``."""
    if expires_in is None:
        expires_in = current_app.config['JWT_ACCESS_TOKEN_EXPIRES']
    payload = {
        'user_id': user_id,
        'exp': datetime.utcnow() + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm='HS256')


def token_required(f):
    """
    Decorator to require valid JWT token.

    Loads the User named by the token, stores it on ``g.current_user`` and
    passes it as the first argument to the decorated function.

    Usage:
        @bp.route('/protected')
        @token_required
        def protected_route(current_user):
            return jsonify({'user_id': current_user.id})
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        # Import here to avoid circular imports
        from mapreview.models import User

        auth_header = request.headers.get('Authorization')

        if not auth_header:
            return jsonify({'error': 'Token is missing'}), 401

        try:
            # Support both "Bearer <token>" and raw token formats
            token = auth_header.split(' ')[1] if ' ' in auth_header else auth_header
            payload = jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=['HS256'])
            user_id = payload['user_id']
        except jwt.ExpiredSignatureError:
            return jsonify({'error': 'Token has expired'}), 401
        except (jwt.InvalidTokenError, KeyError):
            return jsonify({'error': 'Token is invalid'}), 401

        current_user = User.query.get(user_id)
        if not current_user:
            return jsonify({'error': 'User not found'}), 401
        g.current_user = current_user

        return f(current_user, *args, **kwargs)
    return decorated


def require_reviewer(user):
    if not user.is_reviewer:
        raise PermissionDeniedError('Only reviewers can review tasks')


def require_review_permission(user, review_status, new_task_status=''):
    """Reviewers may set any review status.

    A mapper revising their own task (``newTaskStatus`` given) may only
    put it back to Requested; the service checks they completed it.
    """
    revising = bool((new_task_status or '').strip())
    if revising and review_status == ReviewStatus.REQUESTED:
        return
    require_reviewer(user)


def reviewer_required(f):
    """
    Decorator for review endpoints. Stack it under ``token_required``.

    Usage:
        @bp.route('/<int:task_id>/metareview/<int:status>', methods=['PUT'])
        @token_required
        @reviewer_required
        def meta_review(current_user, task_id, status):
            ...
    """
    @wraps(f)
    def decorated(current_user, *args, **kwargs):
        require_reviewer(current_user)
        return f(current_user, *args, **kwargs)
    return decorated
