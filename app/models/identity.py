"""
Caller identity resolved from the bearer token
"""
from pydantic import BaseModel

from app.models.subscription import IdentityRole


class Identity(BaseModel):
    id: str
    role: IdentityRole = IdentityRole.USER

    @property
    def is_trainer(self) -> bool:
        return self.role == IdentityRole.TRAINER
