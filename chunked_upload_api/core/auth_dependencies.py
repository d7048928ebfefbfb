"""
FastAPI dependencies for JWT authentication.
Tokens are issued by the platform's auth service; this API only verifies them.
"""
import jwt
from fastapi import Header, HTTPException, status
from typing import Optional
from chunked_upload_api.core import config


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def verify_token(authorization: Optional[str] = Header(None)) -> str:
    """
    Verify the bearer token sent by an uploading client.

    Returns:
        Subject (user id) from token

    Raises:
        HTTPException: 401 if the token is missing, malformed, expired or has no subject
    """
    if not authorization:
        raise _unauthorized("Missing authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token:
        raise _unauthorized("Invalid authorization header format")

    try:
        claims = jwt.decode(
            token,
            config.settings.jwt_secret,
            algorithms=[config.settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    subject = claims.get("sub")
    if not subject:
        raise _unauthorized("Invalid token payload")

    return subject
