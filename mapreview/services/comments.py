"""Task comments."""

from mapreview import db
from mapreview.models import Comment


def create_comment(actor, task_id, text, action_id=None):
    comment = Comment(user_id=actor.id, task_id=task_id, text=text, action_id=action_id)
    db.session.add(comment)
    db.session.flush()
    return comment


def list_comments(task_id):
    return Comment.query.filter_by(task_id=task_id).order_by(Comment.id).all()
