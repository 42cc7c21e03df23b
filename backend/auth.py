from dataclasses import dataclass

from fastapi import Request, HTTPException, status
from jose import jwt, JWTError

from config import SUPABASE_JWT_SECRET, SUPABASE_JWT_AUDIENCE, JWT_ALGORITHM
from supabase_client import get_user_from_token


@dataclass
class CurrentUser:
    id: str
    access_token: str


def verify_token(token: str, secret: str = SUPABASE_JWT_SECRET) -> dict | None:
    """Decode and verify a Supabase access token. Returns the payload or None on failure."""
    try:
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], audience=SUPABASE_JWT_AUDIENCE)
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request) -> CurrentUser:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header and resolves it to the Supabase user it was issued for.
    The token is kept so store calls run under the user's own identity.
    Raises HTTP 401 if the token is missing or invalid.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise _unauthorized("Missing or invalid Authorization header")

    token = auth_header.split(" ", 1)[1]

    if SUPABASE_JWT_SECRET:
        payload = verify_token(token)
        if payload is None:
            raise _unauthorized("Invalid or expired token")
        user_id = payload.get("sub")
    else:
        user = await get_user_from_token(token)
        user_id = user["id"] if user else None

    if not user_id:
        raise _unauthorized("Token does not identify a user")

    return CurrentUser(id=str(user_id), access_token=token)
