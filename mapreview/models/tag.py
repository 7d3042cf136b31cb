"""Tag models for free-form labels on tasks and challenges."""

from datetime import datetime
from mapreview import db


class Tag(db.Model):
    """Tag model - unique per (name, tag_type)."""

    __tablename__ = 'tags'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    tag_type = db.Column(db.String(20), nullable=False, index=True)  # 'tasks' or 'challenges'
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('name', 'tag_type', name='unique_tag_name_type'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'tag_type': self.tag_type,
        }

    def __repr__(self):
        return f'<Tag {self.id}: {self.tag_type}/{self.name}>'


class ItemTag(db.Model):
    """Association between an item (task, challenge) and a tag.

    item_id is a plain reference: tags may be attached to any id the caller
    names, so there is no foreign key to a specific item table.
    """

    __tablename__ = 'item_tags'

    id = db.Column(db.Integer, primary_key=True)
    item_type = db.Column(db.String(20), nullable=False)
    item_id = db.Column(db.Integer, nullable=False)
    tag_id = db.Column(db.Integer, db.ForeignKey('tags.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('item_type', 'item_id', 'tag_id', name='unique_item_tag'),
        db.Index('ix_item_tags_item', 'item_type', 'item_id'),
    )

    tag = db.relationship('Tag', lazy='joined')

    def __repr__(self):
        return f'<ItemTag {self.item_type}:{self.item_id} tag_id={self.tag_id}>'
