# chatrelay/app/models/message.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from chatrelay.app.database.session import Base


class Message(Base):
    """
    One entry of a user's message log.

    Rows are only ever appended; there is no update or delete path other than
    the cascade from the owning user.
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text = Column(Text, nullable=False)
    sender_name = Column(String(100), nullable=True)  # free text, not verified
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="messages")
