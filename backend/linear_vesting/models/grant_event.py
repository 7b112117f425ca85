"""Grant event log model"""
import enum
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, BigInteger, DateTime, JSON, Index, Enum as SQLEnum
)

from linear_vesting.models.database import Base
from linear_vesting.models.grant import U64


class GrantEventType(str, enum.Enum):
    """Transfers issued by the grant operations."""
    INITIALIZE = "initialize"
    WITHDRAW = "withdraw"
    REVOKE = "revoke"


class GrantEvent(Base):
    """
    Append-only record of every token movement a grant operation performed.

    Each successful initialize, withdraw or revoke writes exactly one row in the
    same database transaction as the balance and grant updates.
    """
    __tablename__ = "grant_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    grant_address = Column(String(44), nullable=False, index=True)
    event_type = Column(SQLEnum(GrantEventType), nullable=False)

    signer = Column(String(44), nullable=False)
    source = Column(String(44), nullable=False)  # Token account debited
    destination = Column(String(44), nullable=False)  # Token account credited
    amount = Column(U64, nullable=False)
    released_amount = Column(U64, nullable=False)  # Grant's released total after this event

    # Clock reading the operation ran against
    timestamp = Column(BigInteger, nullable=False)
    data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_grant_events_grant_id", "grant_address", "id"),
    )

    def __repr__(self):
        return f"<GrantEvent(id={self.id}, type={self.event_type}, amount={self.amount})>"
