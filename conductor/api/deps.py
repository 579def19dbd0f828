"""Request dependencies -- operator authentication and service lookup."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from conductor.auth import decode_token
from conductor.config import settings
from conductor.services.master_service import MasterService

import jwt as pyjwt

_bearer_scheme = HTTPBearer(auto_error=False)

ANONYMOUS_OPERATOR = "anonymous"


async def get_current_operator(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> str:
    """Return the operator named by the bearer token.

    Raises 401 if the token is missing, invalid or expired.  With
    ``REQUIRE_AUTH`` off every request runs as ``anonymous``.
    """
    if not settings.REQUIRE_AUTH:
        return ANONYMOUS_OPERATOR

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
        )

    try:
        payload = decode_token(credentials.credentials)
    except pyjwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except pyjwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )

    operator = payload.get("sub")
    if not operator:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return operator


def get_master_service(request: Request) -> MasterService:
    """The application's master container (built in ``create_app``)."""
    return request.app.state.master_service
