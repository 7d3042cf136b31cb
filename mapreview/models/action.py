"""Audit action model."""

from datetime import datetime
from mapreview import db


class Action(db.Model):
    """Audit record written by every mutating workflow operation.

    Never read back by the workflow itself; exposed for history views.
    """

    __tablename__ = 'actions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    item_type = db.Column(db.String(20), nullable=False)  # 'task', 'challenge'
    item_id = db.Column(db.Integer, nullable=False)
    kind = db.Column(db.String(50), nullable=False, index=True)  # See ActionKind
    status = db.Column(db.Integer, nullable=True)
    detail = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        db.Index('ix_actions_item', 'item_type', 'item_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'item_type': self.item_type,
            'item_id': self.item_id,
            'kind': self.kind,
            'status': self.status,
            'detail': self.detail,
            'created_at': self.created_at.isoformat(),
        }

    def __repr__(self):
        return f'<Action {self.id}: {self.kind} {self.item_type}:{self.item_id}>'
