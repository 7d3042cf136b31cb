"""Comment model for task comments."""

from datetime import datetime
from mapreview import db


class Comment(db.Model):
    """A comment left on a task, optionally tied to the action that prompted it."""

    __tablename__ = 'comments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id'), nullable=False, index=True)
    text = db.Column(db.Text, nullable=False)
    action_id = db.Column(db.Integer, db.ForeignKey('actions.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'task_id': self.task_id,
            'text': self.text,
            'action_id': self.action_id,
            'created_at': self.created_at.isoformat(),
        }

    def __repr__(self):
        return f'<Comment {self.id} on task {self.task_id}>'
