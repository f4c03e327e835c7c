from fastapi import APIRouter, Depends, HTTPException

from app.core.dependencies import get_auth_service
from app.errors import InvalidCredentialsError, UserExistsError
from app.models import Credentials
from app.services.auth import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    credentials: Credentials,
    auth: AuthService = Depends(get_auth_service),
):
    if not credentials.username or not credentials.password:
        raise HTTPException(status_code=400, detail="Missing fields")
    try:
        await auth.register(credentials.username, credentials.password)
    except UserExistsError:
        raise HTTPException(status_code=400, detail="User already exists")
    return {"message": "User registered"}


@router.post("/login")
async def login(
    credentials: Credentials,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        return await auth.login(credentials.username or "", credentials.password or "")
    except InvalidCredentialsError:
        raise HTTPException(status_code=401, detail="Invalid credentials")
