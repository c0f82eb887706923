"""
Authenticated identity passed explicitly into every write operation
"""

from typing import Optional

from pydantic import BaseModel

ANONYMOUS_NAME = "Anônimo"


class CurrentUser(BaseModel):
    """User identity from the JWT token payload"""

    user_id: str
    name: str = ANONYMOUS_NAME
    email: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: dict) -> "CurrentUser":
        email = claims.get("email")
        name = claims.get("name") or (email.split("@")[0] if email else None) or ANONYMOUS_NAME
        return cls(user_id=claims["sub"], name=name, email=email)
