from pydantic import BaseModel
from typing import Optional
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    TECHNICIAN = "technician"
    CASHIER = "cashier"


class AuthContext(BaseModel):
    user_id: str
    user_role: Optional[UserRole] = None
