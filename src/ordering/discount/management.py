"""Discount code administration: commands and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.discount.discount import DiscountCode, normalize_code
from ordering.domain import ordering
from shared.errors import ConflictError, NotFoundError

logger = structlog.get_logger(__name__)


def load_discount_code(discount_code_id) -> DiscountCode:
    try:
        return current_domain.repository_for(DiscountCode).get(str(discount_code_id))
    except ObjectNotFoundError as exc:
        raise NotFoundError({"discount_code_id": ["Discount code not found"]}) from exc


@ordering.command(part_of="DiscountCode")
class CreateDiscountCode:
    code = String(required=True, max_length=20)
    discount_type = String(required=True)
    discount_value = Float(required=True)
    max_uses = Integer(default=1)
    description = String(max_length=200)
    min_order_amount = Integer(default=0)
    max_discount_amount = Integer()
    applicable_users = Text()  # JSON array of customer ids
    is_first_time_only = Boolean(default=False)
    is_public = Boolean(default=False)
    created_by = String(max_length=255)


@ordering.command(part_of="DiscountCode")
class UpdateDiscountCode:
    discount_code_id = Identifier(required=True)
    description = String(max_length=200)
    discount_type = String()
    discount_value = Float()
    min_order_amount = Integer()
    max_discount_amount = Integer()
    max_uses = Integer()
    applicable_users = Text()
    is_first_time_only = Boolean()
    is_public = Boolean()
    updated_by = String(max_length=255)


@ordering.command(part_of="DiscountCode")
class ActivateDiscountCode:
    discount_code_id = Identifier(required=True)
    updated_by = String(max_length=255)


@ordering.command(part_of="DiscountCode")
class DeactivateDiscountCode:
    discount_code_id = Identifier(required=True)
    updated_by = String(max_length=255)


@ordering.command(part_of="DiscountCode")
class DeleteDiscountCode:
    discount_code_id = Identifier(required=True)
    deleted_by = String(max_length=255)


@ordering.command_handler(part_of=DiscountCode)
class ManageDiscountCodeHandler:
    @handle(CreateDiscountCode)
    def create_discount_code(self, command):
        repo = current_domain.repository_for(DiscountCode)
        code = normalize_code(command.code)

        if repo._dao.query.filter(code=code).all().items:
            raise ConflictError({"code": ["Discount code already exists"]})

        discount_code = DiscountCode.create(
            code=code,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            max_uses=command.max_uses,
            description=command.description,
            min_order_amount=command.min_order_amount,
            max_discount_amount=command.max_discount_amount,
            applicable_users=json.loads(command.applicable_users) if command.applicable_users else None,
            is_first_time_only=command.is_first_time_only,
            is_public=command.is_public,
            created_by=command.created_by,
        )
        repo.add(discount_code)
        logger.info("discount_code_created", code=discount_code.code, max_uses=discount_code.max_uses)
        return str(discount_code.id)

    @handle(UpdateDiscountCode)
    def update_discount_code(self, command):
        repo = current_domain.repository_for(DiscountCode)
        discount_code = load_discount_code(command.discount_code_id)
        discount_code.update_details(
            description=command.description,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            min_order_amount=command.min_order_amount,
            max_discount_amount=command.max_discount_amount,
            max_uses=command.max_uses,
            applicable_users=json.loads(command.applicable_users) if command.applicable_users else None,
            is_first_time_only=command.is_first_time_only,
            is_public=command.is_public,
            updated_by=command.updated_by,
        )
        repo.add(discount_code)

    @handle(ActivateDiscountCode)
    def activate_discount_code(self, command):
        repo = current_domain.repository_for(DiscountCode)
        discount_code = load_discount_code(command.discount_code_id)
        discount_code.activate(updated_by=command.updated_by)
        repo.add(discount_code)

    @handle(DeactivateDiscountCode)
    def deactivate_discount_code(self, command):
        repo = current_domain.repository_for(DiscountCode)
        discount_code = load_discount_code(command.discount_code_id)
        discount_code.deactivate(updated_by=command.updated_by)
        repo.add(discount_code)

    @handle(DeleteDiscountCode)
    def delete_discount_code(self, command):
        repo = current_domain.repository_for(DiscountCode)
        discount_code = load_discount_code(command.discount_code_id)
        discount_code.ensure_deletable()
        repo._dao.delete(discount_code)
        logger.info("discount_code_deleted", code=discount_code.code, deleted_by=command.deleted_by)
