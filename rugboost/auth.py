from typing import Optional

from fastapi import Header
from jose import JWTError, jwt
from pydantic import BaseModel

from rugboost.config import JWT_SECRET
from rugboost.errors import AuthenticationError


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None


def verify_token(authorization: str = Header(None)) -> AuthUser:
    """Decode the bearer token and return the caller's user id and email."""
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Unsupported auth scheme")
        claims = jwt.decode(
            token, JWT_SECRET, algorithms=["HS256"], options={"verify_aud": False}
        )
    except (AttributeError, ValueError, JWTError):
        raise AuthenticationError("Authentication required")

    if not claims.get("sub"):
        raise AuthenticationError("Authentication required")
    return AuthUser(id=claims["sub"], email=claims.get("email"))
