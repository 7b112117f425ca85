"""Linear vesting services"""
from .schedule import VestingSchedule
from .solana_client import SolanaClient
from .token_ledger import TokenLedger
from .grant_operations import GrantOperations, VestingPreview

__all__ = [
    "VestingSchedule",
    "SolanaClient",
    "TokenLedger",
    "GrantOperations",
    "VestingPreview",
]
