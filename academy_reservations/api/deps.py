# academy_reservations/api/deps.py
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from academy_reservations.core.config import settings
from academy_reservations.db.session import get_db  # noqa: F401
from academy_reservations.schemas.token import TokenPayload
from academy_reservations.services.reservations import ReservationService, reservation_service

# The `tokenUrl` doesn't have to be a real endpoint in this service,
# tokens are issued by the academy's auth service.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        token_data = TokenPayload(**payload)
    except (JWTError, ValueError):
        # Catches any error from jose or Pydantic validation
        raise credentials_exception

    return token_data


def require_roles(*roles: str) -> Callable[..., TokenPayload]:
    """Dependency factory: the current user must hold one of the given roles."""

    def checker(current_user: TokenPayload = Depends(get_current_user)) -> TokenPayload:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return current_user

    return checker


def get_reservation_service() -> ReservationService:
    return reservation_service
