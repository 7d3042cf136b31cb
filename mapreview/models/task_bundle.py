"""Task bundle models."""

from datetime import datetime
from mapreview import db


class TaskBundle(db.Model):
    """A named, owned group of tasks worked on together."""

    __tablename__ = 'task_bundles'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(255), default='', nullable=False)
    primary_task_id = db.Column(db.Integer, db.ForeignKey('tasks.id'), nullable=True)  # Must be a member when set
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Members in insertion order
    members = db.relationship(
        'BundleTask',
        backref='bundle',
        order_by='BundleTask.id',
        cascade='all, delete-orphan',
        lazy=True
    )
    owner = db.relationship('User', foreign_keys=[owner_id])

    @property
    def task_ids(self):
        return [member.task_id for member in self.members]

    def to_dict(self, tasks=None):
        """Convert bundle to dictionary, optionally embedding the member tasks."""
        result = {
            'id': self.id,
            'owner_id': self.owner_id,
            'name': self.name,
            'primary_task_id': self.primary_task_id,
            'task_ids': self.task_ids,
            'created_at': self.created_at.isoformat(),
        }
        if tasks is not None:
            result['tasks'] = [task.to_dict() for task in tasks]
        return result

    def __repr__(self):
        return f'<TaskBundle {self.id}: {len(self.members)} tasks>'


class BundleTask(db.Model):
    """Membership row linking a task to a bundle."""

    __tablename__ = 'bundle_tasks'

    id = db.Column(db.Integer, primary_key=True)
    bundle_id = db.Column(db.Integer, db.ForeignKey('task_bundles.id', ondelete='CASCADE'), nullable=False, index=True)
    task_id = db.Column(db.Integer, db.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False, index=True)

    # A task appears at most once per bundle
    __table_args__ = (
        db.UniqueConstraint('bundle_id', 'task_id', name='unique_bundle_task'),
    )

    task = db.relationship('Task', lazy='joined')

    def __repr__(self):
        return f'<BundleTask bundle_id={self.bundle_id} task_id={self.task_id}>'
