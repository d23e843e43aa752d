"""
Tag service.
"""

from typing import List, Iterable
from uuid import UUID

from orderdesk.extensions import db
from orderdesk.blueprints.tags.models import Tag, order_tags
from orderdesk.core.permissions import PermissionContext
from orderdesk.core.exceptions import TagNotFoundError, ValidationError, DuplicateResourceError


class TagService:

    @staticmethod
    def list_tags(context: PermissionContext) -> List[Tag]:
        return db.session.query(Tag).filter(
            Tag.store_id == context.store_id
        ).order_by(Tag.name.asc()).all()

    @staticmethod
    def get_tag(context: PermissionContext, tag_id: UUID) -> Tag:
        tag = db.session.query(Tag).filter(
            Tag.id == tag_id,
            Tag.store_id == context.store_id
        ).first()
        if not tag:
            raise TagNotFoundError()
        return tag

    @staticmethod
    def resolve_tags(context: PermissionContext, tag_ids: Iterable) -> List[Tag]:
        """
        Load the store's tags for a list of ids, ignoring duplicates.

        Raises:
            ValidationError: If any id is not a tag of the current store
        """
        wanted = {UUID(str(tid)) for tid in tag_ids or []}
        if not wanted:
            return []

        tags = db.session.query(Tag).filter(
            Tag.store_id == context.store_id,
            Tag.id.in_(wanted)
        ).all()

        unknown = wanted - {tag.id for tag in tags}
        if unknown:
            raise ValidationError(
                "Unknown tags",
                errors={"tag_ids": sorted(str(tid) for tid in unknown)}
            )
        return tags

    @staticmethod
    def _check_name(context, name, exclude_id=None):
        query = db.session.query(Tag).filter(
            Tag.store_id == context.store_id,
            db.func.lower(Tag.name) == name.lower()
        )
        if exclude_id is not None:
            query = query.filter(Tag.id != exclude_id)
        if query.first():
            raise DuplicateResourceError(f"Tag '{name}' already exists")

    @staticmethod
    def create_tag(context: PermissionContext, name: str, color: str) -> Tag:
        name = name.strip()
        TagService._check_name(context, name)

        tag = Tag(
            store_id=context.store_id,
            name=name,
            color=color,
            created_by=context.user_id,
            updated_by=context.user_id
        )
        db.session.add(tag)
        db.session.commit()
        return tag

    @staticmethod
    def update_tag(context: PermissionContext, tag_id: UUID, data: dict) -> Tag:
        tag = TagService.get_tag(context, tag_id)

        if "name" in data:
            name = data["name"].strip()
            TagService._check_name(context, name, exclude_id=tag.id)
            tag.name = name
        if "color" in data:
            tag.color = data["color"]

        tag.updated_by = context.user_id
        db.session.commit()
        return tag

    @staticmethod
    def delete_tag(context: PermissionContext, tag_id: UUID) -> None:
        """Delete a tag and unlink it from every order."""
        tag = TagService.get_tag(context, tag_id)
        db.session.execute(order_tags.delete().where(order_tags.c.tag_id == tag.id))
        db.session.delete(tag)
        db.session.commit()
