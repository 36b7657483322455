# storefront/repos/address_repo.py
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from storefront.data.models.address import AddressModel
from storefront.repos.base import AddressRepo


class SqlAddressRepo(AddressRepo):
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: int) -> List[AddressModel]:
        stmt = (
            select(AddressModel)
            .where(AddressModel.user_id == user_id)
            .order_by(AddressModel.is_default.desc(), AddressModel.id)
        )
        return list(self.db.execute(stmt).scalars())

    def get_address(self, address_id: int) -> AddressModel | None:
        return self.db.get(AddressModel, address_id)

    def _clear_defaults(self, user_id: int, keep_id: int | None = None):
        stmt = update(AddressModel).where(
            AddressModel.user_id == user_id,
            AddressModel.is_default.is_(True),
        )
        if keep_id is not None:
            stmt = stmt.where(AddressModel.id != keep_id)
        self.db.execute(stmt.values(is_default=False).execution_options(synchronize_session="fetch"))

    def create_address(self, address: AddressModel) -> AddressModel:
        if address.is_default:
            self._clear_defaults(address.user_id)
        self.db.add(address)
        self.db.commit()
        self.db.refresh(address)
        return address

    def update_address(self, address_id: int, **fields) -> AddressModel | None:
        address = self.get_address(address_id)
        if not address:
            return None
        for key, value in fields.items():
            setattr(address, key, value)
        if address.is_default:
            self._clear_defaults(address.user_id, keep_id=address.id)
        self.db.commit()
        self.db.refresh(address)
        return address

    def delete_address(self, address_id: int) -> bool:
        result = self.db.execute(delete(AddressModel).where(AddressModel.id == address_id))
        self.db.commit()
        return result.rowcount > 0
