# daybook/api/auth.py
import logging

from fastapi import APIRouter, Depends, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from daybook import schemas
from daybook.config import settings
from daybook.core.exceptions import ConflictException, UnauthorizedException
from daybook.core.security import create_access_token, hash_password, verify_password
from daybook.dependencies import get_current_user, get_repositories
from daybook.repositories import Repositories

router = APIRouter(prefix="/api/auth", tags=["Auth"])
logger = logging.getLogger("daybook")

# Rate limiter, identifies clients by their IP address
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def _auth_payload(user: schemas.User) -> dict:
    return {
        "user":  schemas.UserPublic.model_validate(user),
        "token": create_access_token(user.id, user.email),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED,
             response_model=schemas.ApiResponse[schemas.AuthResponse])
@limiter.limit(settings.AUTH_RATE_LIMIT)
def register(
    request: Request,
    payload: schemas.UserCreate,
    repos: Repositories = Depends(get_repositories),
):
    user = repos.users.create(payload.email, hash_password(payload.password))
    if not user:
        logger.warning(f"Registration attempt with existing email: {payload.email}")
        raise ConflictException("User with this email already exists")
    logger.info(f"New user registered: {user.email}")
    return {"success": True, "data": _auth_payload(user)}


@router.post("/login", response_model=schemas.ApiResponse[schemas.AuthResponse])
@limiter.limit(settings.AUTH_RATE_LIMIT)
def login(
    request: Request,
    payload: schemas.LoginRequest,
    repos: Repositories = Depends(get_repositories),
):
    user = repos.users.get_by_email(payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning(f"Failed login attempt: {payload.email}")
        raise UnauthorizedException("Invalid email or password")
    logger.info(f"User logged in: {user.email}")
    return {"success": True, "data": _auth_payload(user)}


@router.get("/me", response_model=schemas.ApiResponse[schemas.CurrentUser])
def me(current_user: schemas.User = Depends(get_current_user)):
    return {"success": True, "data": {"user_id": current_user.id, "email": current_user.email}}
