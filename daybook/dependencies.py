# daybook/dependencies.py
from functools import lru_cache

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from daybook.config import settings
from daybook.core.exceptions import UnauthorizedException
from daybook.core.security import decode_access_token
from daybook.repositories import Repositories
from daybook.schemas import User
from daybook.storage import build_stores

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


@lru_cache
def get_repositories() -> Repositories:
    stores = build_stores(
        settings.STORAGE_BACKEND,
        database_url=settings.DATABASE_URL,
        data_dir=settings.DATA_DIR,
    )
    return Repositories.from_stores(stores)


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    repos: Repositories = Depends(get_repositories),
) -> User:
    if not token:
        raise UnauthorizedException("No token provided")

    payload = decode_access_token(token)
    if payload is None:
        raise UnauthorizedException("Invalid or expired token")

    user = repos.users.get_by_id(payload["sub"])
    if not user:
        raise UnauthorizedException("Invalid or expired token")
    return user
