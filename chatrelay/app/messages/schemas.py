# chatrelay/app/messages/schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    text: str
    sender_name: Optional[str] = Field(default=None, alias="senderName")

    class Config:
        populate_by_name = True


class MessageOut(BaseModel):
    id: int
    text: str
    sender_name: Optional[str] = Field(default=None, alias="senderName")
    timestamp: datetime

    class Config:
        from_attributes = True
        populate_by_name = True


class SendMessageEvent(BaseModel):
    """
    Payload of an inbound ``send_message`` relay event.
    """
    text: str
    sender_name: Optional[str] = Field(default=None, alias="senderName")
    sender_email: str = Field(alias="senderEmail")

    class Config:
        populate_by_name = True


class NewMessageEvent(BaseModel):
    """
    Payload of the outbound ``new_message`` event fanned out to every channel.
    """
    text: str
    sender_name: Optional[str] = Field(default=None, alias="senderName")
    timestamp: datetime

    class Config:
        from_attributes = True
        populate_by_name = True
