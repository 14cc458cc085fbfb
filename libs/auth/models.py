from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    An authenticated caller as asserted by the identity provider's JWT.

    ``user_id`` is the opaque login identifier; it is resolved to a profile
    by the fitness service, never trusted as a profile id itself.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = "authenticated"

    @property
    def is_service_role(self) -> bool:
        return self.role == "service_role"
