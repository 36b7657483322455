# storefront/api/routers/auth.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_context, get_notifications, get_storage
from storefront.domain.context import RequestContext
from storefront.domain.schemas import LoginIn, LoginOut, RegisterIn, UserOut
from storefront.repos.base import Storage
from storefront.services.notification_service import NotificationService
from storefront.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_service(
    storage: Storage = Depends(get_storage),
    notifications: NotificationService = Depends(get_notifications),
) -> UserService:
    return UserService(storage, notifications)


@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: RegisterIn, svc: UserService = Depends(get_service)):
    return svc.register(payload.username, payload.email, payload.password, payload.phone)


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, svc: UserService = Depends(get_service)):
    user, token = svc.login(payload.email, payload.password)
    out = UserOut.model_validate(user).model_dump()
    return {**out, "access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserOut)
def me(
    ctx: RequestContext = Depends(get_context),
    svc: UserService = Depends(get_service),
):
    return svc.get_user(ctx.require_user())
