# chatrelay/app/users/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from chatrelay.app.models.user import UserStatus
from chatrelay.app.messages.schemas import MessageOut


# --- input ---

class UserCreate(BaseModel):
    name: str
    username: str
    password: str
    email: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)


class UserLogin(BaseModel):
    username: str  # username or email
    password: str


class StatusUpdate(BaseModel):
    # kept as a plain string so an unknown value reaches the store check
    status: str


# --- output ---

class UserOut(BaseModel):
    id: int
    name: str
    username: str
    email: Optional[str] = None
    age: Optional[int] = None
    status: UserStatus
    created_at: Optional[datetime] = None
    messages: List[MessageOut] = []

    class Config:
        from_attributes = True
