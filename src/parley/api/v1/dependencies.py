"""Shared API dependencies for authentication and service wiring."""

from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from parley.core.settings import settings
from parley.db.session import get_db
from parley.repositories.message_repo import MessageRepository
from parley.services.delivery import ConnectionRegistry, DeliveryNotifier
from parley.services.media import MediaStorage
from parley.services.message_service import MessageService

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def create_access_token(user_id: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token whose subject is ``user_id``."""
    to_encode: dict[str, object] = {"sub": user_id}
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_user_id(token: str) -> str:
    """Return the user id carried in a bearer token.

    Raises:
        HTTPException: If the token is invalid, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return subject


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Get the verified user id from the request's bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
        )
    return decode_user_id(credentials.credentials)


def get_connection_registry(request: Request) -> ConnectionRegistry:
    """Return the connection registry owned by the running application."""
    return request.app.state.connections


def get_media_storage() -> MediaStorage:
    """Return storage rooted at the configured upload directory."""
    return MediaStorage()


def get_message_service(
    db: SessionDep,
    registry: Annotated[ConnectionRegistry, Depends(get_connection_registry)],
    media: Annotated[MediaStorage, Depends(get_media_storage)],
) -> MessageService:
    """Build a message service bound to the request's database session."""
    return MessageService(
        MessageRepository(db),
        media=media,
        notifier=DeliveryNotifier(registry),
    )


# Type aliases for common dependencies
CurrentUserDep = Annotated[str, Depends(get_current_user_id)]
MessageServiceDep = Annotated[MessageService, Depends(get_message_service)]
MediaStorageDep = Annotated[MediaStorage, Depends(get_media_storage)]
