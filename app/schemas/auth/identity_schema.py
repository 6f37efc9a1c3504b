from pydantic import BaseModel, Field
from typing import List

class Identity(BaseModel):
    """Who is calling: resolved from the app session token."""
    user_id: int
    merchant_id: str
    permissions: List[str] = Field(default_factory=list)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions
