"""
Token models for authentication.

These models represent the claims of a Supabase-issued JWT.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional, Union


# Supabase "role" claim values
AUTHENTICATED_ROLE = "authenticated"
SERVICE_ROLE = "service_role"


class TokenPayload(BaseModel):
    """JWT token payload structure."""
    model_config = ConfigDict(extra="ignore")  # Ignore extra fields from JWT

    sub: Optional[str] = None  # User ID (absent on service-role keys)
    email: Optional[str] = None
    email_confirmed_at: Optional[str] = None
    aud: Optional[Union[str, list[str]]] = None  # Audience
    role: Optional[str] = None  # Postgres role: authenticated / service_role
    app_metadata: dict[str, Any] = Field(default_factory=dict)  # Set server-side only
    exp: int  # Expiration timestamp
    iat: Optional[int] = None  # Issued at timestamp

    @property
    def audiences(self) -> list[str]:
        if self.aud is None:
            return []
        return [self.aud] if isinstance(self.aud, str) else list(self.aud)
