# storefront/services/address_service.py
from typing import Any, Dict, List

from storefront.data.models.address import AddressModel
from storefront.domain.context import RequestContext
from storefront.domain.errors import NotFound, ValidationError
from storefront.repos.base import Storage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

NULLABLE_FIELDS = {"address_line2"}


class AddressService:
    def __init__(self, storage: Storage):
        self.repo = storage.addresses

    def list_addresses(self, ctx: RequestContext, user_id: int) -> List[AddressModel]:
        ctx.require_owner(user_id)
        return self.repo.list_for_user(user_id)

    def _owned(self, ctx: RequestContext, address_id: int) -> AddressModel:
        address = self.repo.get_address(address_id)
        if not address:
            raise NotFound("Address", address_id)
        ctx.require_owner(address.user_id)
        return address

    def create_address(self, ctx: RequestContext, data: Dict[str, Any]) -> AddressModel:
        user_id = ctx.require_user()
        address = self.repo.create_address(AddressModel(user_id=user_id, **data))
        logger.info(f"Address {address.id} saved for user {user_id}")
        return address

    def update_address(self, ctx: RequestContext, address_id: int, changes: Dict[str, Any]) -> AddressModel:
        """Partial update; keys missing from changes keep their stored value."""
        self._owned(ctx, address_id)
        cleared = sorted(k for k, v in changes.items() if v is None and k not in NULLABLE_FIELDS)
        if cleared:
            raise ValidationError(f"Cannot clear required address fields: {', '.join(cleared)}")
        if not changes:
            return self.repo.get_address(address_id)
        return self.repo.update_address(address_id, **changes)

    def delete_address(self, ctx: RequestContext, address_id: int) -> bool:
        self._owned(ctx, address_id)
        return self.repo.delete_address(address_id)
