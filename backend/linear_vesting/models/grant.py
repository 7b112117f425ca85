"""Vesting grant model"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, BigInteger, Boolean, DateTime, Numeric, UniqueConstraint
from sqlalchemy.types import TypeDecorator

from linear_vesting.models.database import Base

U64_MAX = 2**64 - 1
I64_MAX = 2**63 - 1
I64_MIN = -(2**63)


class U64(TypeDecorator):
    """Unsigned 64-bit token amount.

    BIGINT is signed, so amounts are stored as NUMERIC(20, 0) and read back as int.
    SQLite has no exact wide decimal and falls back to its signed INTEGER.
    """
    impl = Numeric(20, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(20, 0))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value < 0 or value > U64_MAX:
            raise ValueError(f"{value} is outside the unsigned 64-bit range")
        return int(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


class VestingGrant(Base):
    """One beneficiary's linear vesting grant over a single asset.

    ``address`` is the program-derived grant id and ``vault`` the token account
    holding the custodied, not yet released funds. Everything except
    ``released_amount`` and ``revoked`` is fixed at creation.
    """
    __tablename__ = "vesting_grants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(44), nullable=False, unique=True, index=True)
    vault = Column(String(44), nullable=False, unique=True)

    owner = Column(String(44), nullable=False, index=True)
    beneficiary = Column(String(44), nullable=False, index=True)
    mint = Column(String(44), nullable=False, index=True)

    total_deposited_amount = Column(U64, nullable=False)
    released_amount = Column(U64, nullable=False, default=0)

    start_ts = Column(BigInteger, nullable=False)
    cliff_ts = Column(BigInteger, nullable=False)
    duration = Column(BigInteger, nullable=False)

    revocable = Column(Boolean, nullable=False, default=False)
    revoked = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("beneficiary", "mint", name="uq_vesting_grant_beneficiary_mint"),
    )

    @property
    def is_drained(self) -> bool:
        return self.released_amount == self.total_deposited_amount

    def __repr__(self):
        return f"<VestingGrant {self.address[:8]}... ({self.released_amount}/{self.total_deposited_amount})>"
