"""
JWT Authentication middleware.

Validates Supabase JWT tokens and turns their claims into a Principal.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from shared.config import get_settings
from shared.models import Principal, Role, SERVICE_PRINCIPAL
from ..models.user import AUTHENTICATED_ROLE, SERVICE_ROLE, TokenPayload

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(HTTPException):
    """Authentication error with consistent format."""
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def decode_token(token: str) -> TokenPayload:
    """
    Decode and validate a Supabase JWT token.

    User tokens must carry the "authenticated" audience. Service-role keys
    carry no audience and are accepted on their role claim.

    Args:
        token: The JWT token string

    Returns:
        TokenPayload with decoded claims

    Raises:
        AuthError: If token is invalid or expired
    """
    settings = get_settings()

    if not settings.supabase_jwt_secret:
        raise AuthError("Server authentication not configured")

    try:
        claims = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            options={"verify_aud": False},
        )
        payload = TokenPayload(**claims)
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except JWTError as e:
        raise AuthError(f"Invalid token: {str(e)}")
    except ValueError:
        raise AuthError("Invalid token: malformed claims")

    if payload.role != SERVICE_ROLE:
        if AUTHENTICATED_ROLE not in payload.audiences:
            raise AuthError("Invalid token: Invalid audience")
        if not payload.sub:
            raise AuthError("Invalid token: missing subject")

    return payload


def get_principal_from_payload(payload: TokenPayload) -> Principal:
    """
    Convert JWT payload to a Principal.

    Role mapping:
        role claim "service_role"     -> service
        app_metadata.role == "admin"  -> admin
        anything else                 -> regular

    ``app_metadata`` is writable only server-side, unlike ``user_metadata``,
    so it is the only place a role is read from.
    """
    if payload.role == SERVICE_ROLE:
        if payload.sub:
            return Principal(id=payload.sub, role=Role.SERVICE, email=payload.email)
        return SERVICE_PRINCIPAL

    role = Role.REGULAR
    if payload.app_metadata.get("role") == Role.ADMIN.value:
        role = Role.ADMIN

    return Principal(id=payload.sub, role=role, email=payload.email)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Dependency that requires authentication.

    Use this for endpoints that act on behalf of a principal.

    Usage:
        @router.get("/protected")
        async def protected_route(principal: Principal = Depends(get_current_principal)):
            return {"principal_id": principal.id}
    """
    if credentials is None:
        raise AuthError("Missing authorization header")

    payload = decode_token(credentials.credentials)
    return get_principal_from_payload(payload)

