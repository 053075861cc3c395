from typing import Optional
from pydantic import BaseModel

from reparopro.core.settings import UserRole, UserStatus


class UserObject(BaseModel):
    id: str
    name: str
    role: UserRole
    status: UserStatus = UserStatus.ACTIVE
    email: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def get(self, key: str, default=None):
        """Allow dictionary-style access with .get() method"""
        if hasattr(self, key):
            return getattr(self, key)
        return default

    def __getitem__(self, key: str):
        """Allow dictionary-style access with [] operator"""
        return self.get(key)
