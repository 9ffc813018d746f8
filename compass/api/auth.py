from fastapi import APIRouter, Depends

from compass.db.mongo import get_db
from compass.schemas.auth import AdminLoginResponse, LoginRequest, ProviderLoginResponse
from compass.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


# =========================
# Provider login (accounts are created by admins)
# =========================
@router.post("/provider/login", response_model=ProviderLoginResponse)
async def login_provider(body: LoginRequest, db=Depends(get_db)):
    return await auth_service.login_provider(db, body.email, body.password)


# =========================
# Admin login
# =========================
@router.post("/admin/login", response_model=AdminLoginResponse)
async def login_admin(body: LoginRequest, db=Depends(get_db)):
    return await auth_service.login_admin(db, body.email, body.password)
