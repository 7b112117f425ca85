"""Token account models"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Index

from linear_vesting.models.database import Base
from linear_vesting.models.grant import U64


class TokenAccount(Base):
    """Custodied balance of one mint held by one authority.

    Ordinary identities hold their tokens in an associated token account;
    a grant vault is a token account whose owner is the program's vault authority.
    """
    __tablename__ = "token_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(44), nullable=False, unique=True, index=True)
    owner = Column(String(44), nullable=False)
    mint = Column(String(44), nullable=False)
    amount = Column(U64, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_token_accounts_owner_mint", "owner", "mint"),
    )

    def __repr__(self):
        return f"<TokenAccount {self.address[:8]}... ({self.amount})>"
