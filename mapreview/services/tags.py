"""Tag reconciliation and item tag associations.

Clients refer to tags in three ways, sometimes mixed in one request:

1. a numeric id (``"12"`` or ``12``) for a tag that already exists,
2. a plain name (``"needs-imagery"``), reused if a tag with that name and
   type exists and created otherwise,
3. a full object (``{"id": 12, "name": ..., "description": ...}``) where a
   missing id (or ``-1``) means "create".

``normalize_tag_ref`` turns each raw reference into one of the ref types
below, and ``resolve_tags`` turns those into persisted tag ids. Names that
need creating become a ``PendingTag`` until they are written.

Tag creation relies on the (name, tag_type) unique constraint. When two
requests race to create the same tag, the loser rolls back, re-reads the
winner's row and reuses its id.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.exc import IntegrityError
from mapreview import db
from mapreview.constants import ActionKind
from mapreview.errors import InvalidArgumentError
from mapreview.models import Tag, ItemTag
from mapreview.services.actions import record_action

logger = logging.getLogger(__name__)

# Association modes
MERGE = 'merge'
REPLACE = 'replace'


@dataclass(frozen=True)
class TagIdRef:
    id: int


@dataclass(frozen=True)
class TagNameRef:
    name: str


@dataclass(frozen=True)
class FullTagRef:
    name: str = ''
    id: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class PendingTag:
    """A tag that was looked up by name, found missing, and awaits creation."""

    name: str
    tag_type: str
    description: Optional[str] = None


TAG_REF_TYPES = (TagIdRef, TagNameRef, FullTagRef)


def _parse_tag_id(value):
    if isinstance(value, bool):
        raise InvalidArgumentError(f'Invalid tag id: {value!r}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f'Invalid tag id: {value!r}')


def normalize_tag_ref(raw):
    """Convert one raw tag reference into a tag ref.

    Returns None for blank strings, which are skipped.
    """
    if isinstance(raw, TAG_REF_TYPES):
        return raw

    if isinstance(raw, dict):
        tag_id = raw.get('id')
        tag_id = None if tag_id in (None, -1, '-1') else _parse_tag_id(tag_id)
        name = (raw.get('name') or '').strip()
        if tag_id is None and not name:
            raise InvalidArgumentError('A tag needs either an id or a name')
        return FullTagRef(name=name, id=tag_id, description=raw.get('description'))

    if isinstance(raw, int) and not isinstance(raw, bool):
        return TagIdRef(raw)

    if isinstance(raw, str):
        value = raw.strip()
        if not value:
            return None
        try:
            return TagIdRef(int(value))
        except ValueError:
            return TagNameRef(value)

    raise InvalidArgumentError(f'Unsupported tag reference: {raw!r}')


def normalize_tag_refs(raw_refs):
    refs = []
    for raw in raw_refs or []:
        ref = normalize_tag_ref(raw)
        if ref is not None:
            refs.append(ref)
    return refs


def validate_tag_refs(raw_refs, tag_type):
    """Normalize raw references and check the ones naming existing tags.

    An id must belong to ``tag_type``, and a full ref may not rename its tag
    onto a name another tag of that type already has. Raises
    InvalidArgumentError before anything is written.
    """
    refs = normalize_tag_refs(raw_refs)
    for ref in refs:
        tag_id = getattr(ref, 'id', None)
        tag = Tag.query.get(tag_id) if tag_id is not None else None
        if tag is None:
            continue
        if tag.tag_type != tag_type:
            raise InvalidArgumentError(f'Tag {tag.id} is not a {tag_type} tag')
        if isinstance(ref, FullTagRef) and ref.name and ref.name != tag.name:
            clash = Tag.query.filter(
                Tag.name == ref.name, Tag.tag_type == tag.tag_type, Tag.id != tag.id
            ).first()
            if clash is not None:
                raise InvalidArgumentError(
                    f'Cannot rename tag {tag.id}: {tag_type} tag "{ref.name}" already exists'
                )
    return refs


def parse_tag_list(value):
    """Split a comma-separated string, or pass a list through, as raw references."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part for part in value.split(',') if part.strip()]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise InvalidArgumentError('Tags must be a comma separated string or a list')


def extract_tags(payload):
    """Read raw tag references from a request body.

    ``tags`` may be a comma-separated string or a list of ids/names;
    ``fulltags`` is a list of tag objects. Returns None when neither key is
    present, so callers can tell "no tags given" from "clear the tags".
    """
    if not payload:
        return None
    if 'tags' in payload:
        return parse_tag_list(payload['tags'])
    if 'fulltags' in payload:
        fulltags = payload['fulltags'] or []
        if not isinstance(fulltags, list) or not all(isinstance(tag, dict) for tag in fulltags):
            raise InvalidArgumentError('fulltags must be a list of tag objects')
        return fulltags
    return None


def find_tag(name, tag_type):
    return Tag.query.filter_by(name=name, tag_type=tag_type).first()


def _update_known_tag(ref):
    tag = Tag.query.get(ref.id)
    if tag is None:
        # Unknown ids pass through; the association layer owns validation
        return
    changed = False
    if ref.name and ref.name != tag.name:
        tag.name = ref.name
        changed = True
    if ref.description is not None and ref.description != tag.description:
        tag.description = ref.description
        changed = True
    if changed:
        db.session.commit()


def _create_tag(pending):
    tag = Tag(name=pending.name, description=pending.description, tag_type=pending.tag_type)
    db.session.add(tag)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        existing = find_tag(pending.name, pending.tag_type)
        if existing is None:
            raise
        logger.warning(
            f'Tag {pending.tag_type}/{pending.name} was created concurrently, '
            f'reusing id {existing.id}'
        )
        return existing.id
    logger.info(f'Created tag {tag.id}: {pending.tag_type}/{pending.name}')
    return tag.id


def resolve_tags(raw_refs, tag_type):
    """Resolve raw tag references to tag ids, creating missing tags.

    Ids come back in input order and duplicates are kept. Every reference
    goes through ``validate_tag_refs`` before anything is written. New tags
    are committed one at a time, so callers should commit their own pending
    work first.
    """
    refs = validate_tag_refs(raw_refs, tag_type)
    if not refs:
        return []

    resolved = []
    pending = {}
    for ref in refs:
        if isinstance(ref, TagIdRef):
            resolved.append(ref.id)
        elif isinstance(ref, FullTagRef) and ref.id is not None:
            _update_known_tag(ref)
            resolved.append(ref.id)
        else:
            existing = find_tag(ref.name, tag_type)
            if existing is not None:
                resolved.append(existing.id)
            else:
                description = ref.description if isinstance(ref, FullTagRef) else None
                resolved.append(pending.setdefault(ref.name, PendingTag(ref.name, tag_type, description)))

    created = {name: _create_tag(tag) for name, tag in pending.items()}
    return [item if isinstance(item, int) else created[item.name] for item in resolved]


def list_item_tags(item_type, item_id):
    return (
        Tag.query.join(ItemTag, ItemTag.tag_id == Tag.id)
        .filter(ItemTag.item_type == item_type, ItemTag.item_id == item_id)
        .order_by(ItemTag.id)
        .all()
    )


def _join_ids(ids):
    return ','.join(str(tag_id) for tag_id in ids)


def associate_tags(item_type, item_id, tag_ids, mode, actor):
    """Link tag ids to an item and record one audit action.

    MERGE adds the ids the item does not have yet; an empty list does
    nothing. REPLACE drops every existing association first, so an empty
    list clears the item. Returns the action, or None if none was recorded.
    Does not commit.
    """
    if mode not in (MERGE, REPLACE):
        raise InvalidArgumentError(f'Unknown tag association mode: {mode}')

    existing = [
        row.tag_id for row in
        ItemTag.query.filter_by(item_type=item_type, item_id=item_id).order_by(ItemTag.id).all()
    ]
    wanted = list(dict.fromkeys(tag_ids))

    if mode == MERGE:
        if not wanted:
            return None
        to_add = [tag_id for tag_id in wanted if tag_id not in existing]
    else:
        ItemTag.query.filter_by(item_type=item_type, item_id=item_id).delete()
        to_add = wanted

    for tag_id in to_add:
        db.session.add(ItemTag(item_type=item_type, item_id=item_id, tag_id=tag_id))
    db.session.flush()

    if tag_ids:
        return record_action(
            actor, item_type, item_id, ActionKind.TAG_ADDED,
            detail={'tag_ids': _join_ids(tag_ids), 'mode': mode}
        )
    if existing:
        return record_action(
            actor, item_type, item_id, ActionKind.TAG_REMOVED,
            detail={'tag_ids': _join_ids(existing), 'mode': mode}
        )
    return None


def remove_tags(item_type, item_id, names, tag_type, actor):
    """Remove the named tags from an item. Returns how many links were removed."""
    names = [name.strip() for name in names if name and name.strip()]
    if not names:
        raise InvalidArgumentError('A comma separated list of tags is required')

    tag_ids = [tag.id for tag in Tag.query.filter(Tag.name.in_(names), Tag.tag_type == tag_type).all()]
    removed = 0
    if tag_ids:
        removed = ItemTag.query.filter(
            ItemTag.item_type == item_type,
            ItemTag.item_id == item_id,
            ItemTag.tag_id.in_(tag_ids)
        ).delete(synchronize_session=False)

    record_action(actor, item_type, item_id, ActionKind.TAG_REMOVED, detail={'tags': ','.join(names)})
    return removed


def find_items_by_tags(item_type, names, tag_type, limit=10, offset=0):
    """Ids of items carrying any of the named tags."""
    rows = (
        db.session.query(ItemTag.item_id)
        .join(Tag, ItemTag.tag_id == Tag.id)
        .filter(
            ItemTag.item_type == item_type,
            Tag.tag_type == tag_type,
            Tag.name.in_(names)
        )
        .distinct()
        .order_by(ItemTag.item_id)
        .limit(limit)
        .offset(offset)
        .all()
    )
    return [row[0] for row in rows]
