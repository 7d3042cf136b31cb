"""User and score metrics models."""

from datetime import datetime
from mapreview import db


class User(db.Model):
    """A mapper and/or reviewer working on tasks."""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    is_reviewer = db.Column(db.Boolean, default=False, nullable=False)
    needs_review = db.Column(db.Boolean, default=False, nullable=False)  # Default for "request review" on status changes
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    metrics = db.relationship('UserMetrics', backref='user', uselist=False, lazy='joined')

    def to_dict(self):
        """Convert user to dictionary."""
        return {
            'id': self.id,
            'username': self.username,
            'is_reviewer': self.is_reviewer,
            'needs_review': self.needs_review,
            'score': self.metrics.score if self.metrics else 0,
            'created_at': self.created_at.isoformat(),
        }

    def __repr__(self):
        return f'<User {self.username}>'


class UserMetrics(db.Model):
    """Score ledger row: running score plus per-status counters."""

    __tablename__ = 'user_metrics'

    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    score = db.Column(db.Integer, default=0, nullable=False)
    total_fixed = db.Column(db.Integer, default=0, nullable=False)
    total_false_positive = db.Column(db.Integer, default=0, nullable=False)
    total_already_fixed = db.Column(db.Integer, default=0, nullable=False)
    total_too_hard = db.Column(db.Integer, default=0, nullable=False)
    total_skipped = db.Column(db.Integer, default=0, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'score': self.score,
            'total_fixed': self.total_fixed,
            'total_false_positive': self.total_false_positive,
            'total_already_fixed': self.total_already_fixed,
            'total_too_hard': self.total_too_hard,
            'total_skipped': self.total_skipped,
        }

    def __repr__(self):
        return f'<UserMetrics user_id={self.user_id} score={self.score}>'
