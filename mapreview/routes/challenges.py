"""Challenge routes. Challenges are managed elsewhere; only their tags live here."""

from flask import Blueprint
from mapreview.constants import ItemType
from mapreview.routes.tags import register_tag_routes

challenges_bp = Blueprint('challenges', __name__)

register_tag_routes(challenges_bp, ItemType.CHALLENGE)
