"""JWT authentication for FastAPI: resolves a bearer token to an owner id."""
from typing import Optional

from fastapi import HTTPException, Request, status
from jose import JWTError, jwt
from pydantic import BaseModel

from taskboard.config import AUTH_ALGORITHM, AUTH_SECRET


class CurrentUser(BaseModel):
    """User information extracted from JWT."""
    user_id: str
    email: Optional[str] = None


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: Optional[str]) -> CurrentUser:
    """
    Verify a token and extract the user it was issued for.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if not token:
        raise _unauthenticated("Missing authentication token")

    try:
        payload = jwt.decode(token, AUTH_SECRET, algorithms=[AUTH_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthenticated("Token has expired")
    except JWTError as e:
        raise _unauthenticated(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthenticated("Invalid token: missing user ID")

    return CurrentUser(user_id=str(user_id), email=payload.get("email"))


async def get_current_user(request: Request) -> CurrentUser:
    """
    Validate JWT token from Authorization header and extract user information.

    Args:
        request: FastAPI request object to extract Authorization header

    Returns:
        CurrentUser with user_id and email from token

    Raises:
        HTTPException: If token is invalid or expired
    """
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise _unauthenticated("Missing or invalid Authorization header")

    return decode_token(auth_header[7:])  # Remove "Bearer " prefix
