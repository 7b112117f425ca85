"""Vesting grant schemas"""
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any, Dict, Optional

from linear_vesting.models.grant import VestingGrant, I64_MAX, I64_MIN
from linear_vesting.models.grant_event import GrantEvent, GrantEventType
from linear_vesting.services.solana_client import parse_pubkey


class InitializeGrantRequest(BaseModel):
    """Create a grant funded by the signing owner.

    Amount and duration are range-checked by the grant operations so that
    a zero deposit or zero duration reports its own error code.
    """
    beneficiary: str
    mint: str
    amount: int
    start_ts: int = Field(ge=I64_MIN, le=I64_MAX)  # Unix timestamp
    cliff_ts: int = Field(ge=I64_MIN, le=I64_MAX)  # Unix timestamp, absolute
    duration: int  # Seconds
    revocable: bool = False

    @field_validator("beneficiary", "mint")
    @classmethod
    def validate_address(cls, value: str) -> str:
        parse_pubkey(value)
        return value


class GrantSnapshot(BaseModel):
    grant_id: str
    vault: str
    owner: str
    beneficiary: str
    mint: str
    total_deposited_amount: int
    released_amount: int
    start_ts: int
    cliff_ts: int
    duration: int
    revocable: bool
    revoked: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_grant(cls, grant: VestingGrant) -> "GrantSnapshot":
        return cls(
            grant_id=grant.address,
            vault=grant.vault,
            owner=grant.owner,
            beneficiary=grant.beneficiary,
            mint=grant.mint,
            total_deposited_amount=grant.total_deposited_amount,
            released_amount=grant.released_amount,
            start_ts=grant.start_ts,
            cliff_ts=grant.cliff_ts,
            duration=grant.duration,
            revocable=grant.revocable,
            revoked=grant.revoked,
            created_at=grant.created_at,
        )


class TransferReceipt(BaseModel):
    event_id: int
    grant_id: str
    kind: GrantEventType
    signer: str
    source: str
    destination: str
    amount: int
    released_amount: int  # Grant total released after this transfer
    timestamp: int

    @classmethod
    def from_event(cls, event: GrantEvent) -> "TransferReceipt":
        return cls(
            event_id=event.id,
            grant_id=event.grant_address,
            kind=event.event_type,
            signer=event.signer,
            source=event.source,
            destination=event.destination,
            amount=event.amount,
            released_amount=event.released_amount,
            timestamp=event.timestamp,
        )


class InitializeGrantResponse(BaseModel):
    grant: GrantSnapshot
    receipt: TransferReceipt


class VestingPreviewResponse(BaseModel):
    grant_id: str
    now: int
    vested: int
    releasable: int
    unvested: int
    vault_balance: int


class BalanceResponse(BaseModel):
    owner: str
    mint: str
    token_account: str
    balance: int


class ErrorResponse(BaseModel):
    error: str
    message: str
    context: Dict[str, Any] = {}
