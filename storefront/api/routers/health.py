# storefront/api/routers/health.py
from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    return {"status": "ok", "storage": request.app.state.storage_provider.name}
