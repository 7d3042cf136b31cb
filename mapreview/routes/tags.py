"""Item tag routes shared by tasks and challenges.

``register_tag_routes`` attaches the same four endpoints to an item
blueprint:

- GET    /tags?tags=a,b&limit=&offset=  items carrying any of the tags
- GET    /<id>/tags                     tags on an item
- POST   /<id>/tags?tags=a,b            replace an item's tags
- DELETE /<id>/tags?tags=a,b            remove tags from an item
"""

from flask import request, jsonify
from mapreview import db
from mapreview.constants import TAG_TYPE_FOR_ITEM
from mapreview.services.tags import (
    REPLACE,
    associate_tags,
    find_items_by_tags,
    list_item_tags,
    parse_tag_list,
    remove_tags,
    resolve_tags,
)
from mapreview.utils import token_required

MAX_ITEMS_PER_PAGE = 100
TAGS_REQUIRED_MESSAGE = (
    'A comma separated list of tags need to be provided via the query string. '
    'Example: ?tags=tag1,tag2'
)


def _tag_names(value):
    return [name.strip() for name in parse_tag_list(value)]


def register_tag_routes(bp, item_type):
    """Attach the item tag endpoints for ``item_type`` to ``bp``."""
    tag_type = TAG_TYPE_FOR_ITEM[item_type]

    @bp.route('/tags', methods=['GET'])
    def get_items_based_on_tags():
        names = _tag_names(request.args.get('tags', ''))
        if not names:
            return jsonify({'error': TAGS_REQUIRED_MESSAGE}), 400

        limit = min(request.args.get('limit', 10, type=int), MAX_ITEMS_PER_PAGE)
        offset = request.args.get('offset', 0, type=int)
        item_ids = find_items_by_tags(item_type, names, tag_type, limit=limit, offset=offset)
        return jsonify({'item_type': item_type, 'item_ids': item_ids}), 200

    @bp.route('/<int:item_id>/tags', methods=['GET'])
    def get_item_tags(item_id):
        tags = list_item_tags(item_type, item_id)
        return jsonify({'tags': [tag.to_dict() for tag in tags]}), 200

    @bp.route('/<int:item_id>/tags', methods=['POST'])
    @token_required
    def update_item_tags(current_user, item_id):
        """Replace the item's tags with the ones in ``?tags=``; empty clears them."""
        tag_ids = resolve_tags(parse_tag_list(request.args.get('tags', '')), tag_type)
        associate_tags(item_type, item_id, tag_ids, REPLACE, current_user)
        db.session.commit()

        tags = list_item_tags(item_type, item_id)
        return jsonify({'tags': [tag.to_dict() for tag in tags]}), 200

    @bp.route('/<int:item_id>/tags', methods=['DELETE'])
    @token_required
    def delete_tags_from_item(current_user, item_id):
        names = _tag_names(request.args.get('tags', ''))
        if not names:
            return jsonify({'error': TAGS_REQUIRED_MESSAGE}), 400

        remove_tags(item_type, item_id, names, tag_type, current_user)
        db.session.commit()
        return '', 204
