"""Task model for map-editing tasks."""

from datetime import datetime
from mapreview import db


class Task(db.Model):
    """A single map-editing task moving through status, review and meta-review."""

    __tablename__ = 'tasks'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    challenge_id = db.Column(db.Integer, nullable=True, index=True)  # Parent challenge, managed elsewhere
    status = db.Column(db.Integer, default=0, nullable=False, index=True)  # See TaskStatus
    review_status = db.Column(db.Integer, nullable=True, index=True)  # Unset until the first review transition
    meta_review_status = db.Column(db.Integer, nullable=True, index=True)
    completed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)  # Last user to set the status

    # Review bookkeeping
    review_requested_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    reviewed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    meta_reviewed_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    meta_reviewed_at = db.Column(db.DateTime, nullable=True)

    # Lock held while the task is being worked on (bundling locks its members)
    locked_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    locked_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    modified_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def lock(self, user_id):
        self.locked_by_id = user_id
        self.locked_at = datetime.utcnow()

    def unlock(self):
        self.locked_by_id = None
        self.locked_at = None

    def to_dict(self):
        """Convert task to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'challenge_id': self.challenge_id,
            'status': self.status,
            'review_status': self.review_status,
            'meta_review_status': self.meta_review_status,
            'completed_by_id': self.completed_by_id,
            'review_requested_by_id': self.review_requested_by_id,
            'reviewed_by_id': self.reviewed_by_id,
            'reviewed_at': self.reviewed_at.isoformat() if self.reviewed_at else None,
            'meta_reviewed_by_id': self.meta_reviewed_by_id,
            'meta_reviewed_at': self.meta_reviewed_at.isoformat() if self.meta_reviewed_at else None,
            'locked_by_id': self.locked_by_id,
            'created_at': self.created_at.isoformat(),
            'modified_at': self.modified_at.isoformat() if self.modified_at else None,
        }

    def __repr__(self):
        return f'<Task {self.id}: {self.name}>'
