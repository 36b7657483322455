# storefront/api/routers/addresses.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_context, get_storage
from storefront.domain.context import RequestContext
from storefront.domain.schemas import AddressIn, AddressOut, AddressUpdate, MessageOut
from storefront.repos.base import Storage
from storefront.services.address_service import AddressService

router = APIRouter(prefix="/api/addresses", tags=["addresses"])


def get_service(storage: Storage = Depends(get_storage)) -> AddressService:
    return AddressService(storage)


@router.get("/{user_id}", response_model=List[AddressOut])
def list_addresses(
    user_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: AddressService = Depends(get_service),
):
    return svc.list_addresses(ctx, user_id)


@router.post("", response_model=AddressOut, status_code=201)
def create_address(
    payload: AddressIn,
    ctx: RequestContext = Depends(get_context),
    svc: AddressService = Depends(get_service),
):
    return svc.create_address(ctx, payload.model_dump())


@router.put("/{address_id}", response_model=AddressOut)
def update_address(
    address_id: int,
    payload: AddressUpdate,
    ctx: RequestContext = Depends(get_context),
    svc: AddressService = Depends(get_service),
):
    return svc.update_address(ctx, address_id, payload.model_dump(exclude_unset=True))


@router.delete("/{address_id}", response_model=MessageOut)
def delete_address(
    address_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: AddressService = Depends(get_service),
):
    svc.delete_address(ctx, address_id)
    return {"message": "Address deleted"}
