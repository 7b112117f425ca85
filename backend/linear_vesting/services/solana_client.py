"""Solana RPC client wrapper and address derivation for linear vesting"""
from typing import Optional
from dataclasses import dataclass
import structlog
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.pubkey import Pubkey

from linear_vesting.config import get_settings

logger = structlog.get_logger()
settings = get_settings()

GRANT_PDA_SEED = b"vesting"
VAULT_PDA_SEED = b"token-vault"
VAULT_AUTHORITY_PDA_SEED = b"vault-authority"


@dataclass
class ProgramAddresses:
    """Program addresses used by linear vesting"""
    vesting: Pubkey
    token: Pubkey
    associated_token: Pubkey


def parse_pubkey(value: str) -> Pubkey:
    """Parse a base58 address, raising ValueError when malformed"""
    try:
        return Pubkey.from_string(value)
    except Exception as e:
        raise ValueError(f"Invalid address: {value!r}") from e


class SolanaClient:
    """Async Solana RPC client with vesting PDA helpers"""

    def __init__(self, rpc_url: Optional[str] = None):
        self.rpc_url = rpc_url or settings.solana_rpc_url
        self._client: Optional[AsyncClient] = None

        self.program_addresses = ProgramAddresses(
            vesting=Pubkey.from_string(settings.vesting_program_id),
            token=Pubkey.from_string(settings.token_program_id),
            associated_token=Pubkey.from_string(settings.associated_token_program_id),
        )

    async def connect(self) -> None:
        """Establish connection to Solana RPC"""
        if self._client is None:
            self._client = AsyncClient(self.rpc_url, commitment=Confirmed)
            logger.info("Connected to Solana RPC", url=self.rpc_url)

    async def disconnect(self) -> None:
        """Close RPC connection"""
        if self._client:
            await self._client.close()
            self._client = None
            logger.info("Disconnected from Solana RPC")

    @property
    def client(self) -> AsyncClient:
        """Get the async client, raise if not connected"""
        if self._client is None:
            raise RuntimeError("Solana client not connected. Call connect() first.")
        return self._client

    async def get_slot(self) -> int:
        """Get current slot"""
        response = await self.client.get_slot(commitment=Confirmed)
        return response.value

    async def get_block_time(self, slot: int) -> Optional[int]:
        """Get block time for a slot"""
        response = await self.client.get_block_time(slot)
        return response.value

    # PDA derivation helpers
    def derive_grant_pda(self, beneficiary: Pubkey, mint: Pubkey) -> tuple[Pubkey, int]:
        """Derive the grant address; one grant per (beneficiary, mint)"""
        return Pubkey.find_program_address(
            [GRANT_PDA_SEED, bytes(beneficiary), bytes(mint)],
            self.program_addresses.vesting,
        )

    def derive_vault_pda(self, grant: Pubkey) -> tuple[Pubkey, int]:
        """Derive the token vault holding a grant's custodied funds"""
        return Pubkey.find_program_address(
            [VAULT_PDA_SEED, bytes(grant)],
            self.program_addresses.vesting,
        )

    def derive_vault_authority_pda(self) -> tuple[Pubkey, int]:
        """Derive the program authority that owns every vault"""
        return Pubkey.find_program_address(
            [VAULT_AUTHORITY_PDA_SEED],
            self.program_addresses.vesting,
        )

    def derive_associated_token_address(self, owner: Pubkey, mint: Pubkey) -> Pubkey:
        """Derive an identity's associated token account for a mint"""
        address, _ = Pubkey.find_program_address(
            [bytes(owner), bytes(self.program_addresses.token), bytes(mint)],
            self.program_addresses.associated_token,
        )
        return address


# Singleton instance
_solana_client: Optional[SolanaClient] = None


def get_address_deriver() -> SolanaClient:
    """Get the client for offline address derivation (no RPC connection)"""
    global _solana_client
    if _solana_client is None:
        _solana_client = SolanaClient()
    return _solana_client


async def get_solana_client() -> SolanaClient:
    """Get or create Solana client singleton, connected"""
    client = get_address_deriver()
    await client.connect()
    return client


async def close_solana_client() -> None:
    """Close Solana client singleton"""
    global _solana_client
    if _solana_client is not None:
        await _solana_client.disconnect()
        _solana_client = None
