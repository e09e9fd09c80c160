# chatrelay/app/models/user.py
import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum, func
from sqlalchemy.orm import relationship

from chatrelay.app.database.session import Base


class UserStatus(str, enum.Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    age = Column(Integer, nullable=True)
    status = Column(
        Enum(
            UserStatus,
            name="user_status",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
        default=UserStatus.OFFLINE,
    )
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # the user owns its message log; messages never outlive it
    messages = relationship(
        "Message",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Message.id",
    )
