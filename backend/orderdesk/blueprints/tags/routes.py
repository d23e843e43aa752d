"""
Tag routes.

Any member of the store can list tags (they label orders on the board);
managing them is part of the store settings.
"""

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.tags.services import TagService
from orderdesk.blueprints.tags.schemas import TagResponseSchema, CreateTagSchema, UpdateTagSchema
from orderdesk.core.constants import Modules, Actions
from orderdesk.core.decorators import require_permission, require_store, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError

tags_bp = Blueprint("tags", __name__, url_prefix="/tags")


@tags_bp.route("", methods=["GET"])
@require_store
def list_tags():
    tags = TagService.list_tags(current_context())
    return jsonify({"tags": TagResponseSchema(many=True).dump(tags)}), 200


@tags_bp.route("", methods=["POST"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def create_tag():
    """
    Create a tag.

    Request body:
        name: Tag name, unique per store (required)
        color: Hex color (default: #6b7280)
    """
    try:
        data = CreateTagSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    tag = TagService.create_tag(current_context(), data["name"], data["color"])
    return jsonify(TagResponseSchema().dump(tag)), 201


@tags_bp.route("/<uuid:tag_id>", methods=["PUT"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def update_tag(tag_id):
    try:
        data = UpdateTagSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    tag = TagService.update_tag(current_context(), tag_id, data)
    return jsonify(TagResponseSchema().dump(tag)), 200


@tags_bp.route("/<uuid:tag_id>", methods=["DELETE"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def delete_tag(tag_id):
    TagService.delete_tag(current_context(), tag_id)
    return jsonify({"message": "Tag deleted successfully"}), 200
