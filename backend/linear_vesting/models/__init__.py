"""Database models"""
from linear_vesting.models.database import Base, get_db
from linear_vesting.models.grant import VestingGrant, U64
from linear_vesting.models.token_account import TokenAccount
from linear_vesting.models.grant_event import GrantEvent, GrantEventType

__all__ = [
    "Base",
    "get_db",
    "VestingGrant",
    "U64",
    "TokenAccount",
    "GrantEvent",
    "GrantEventType",
]
