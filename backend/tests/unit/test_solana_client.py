"""Unit tests for Solana address derivation and the cluster clock"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from solders.pubkey import Pubkey

from linear_vesting.services.clock import ClusterClock, SystemClock, clock_from_settings
from linear_vesting.services.solana_client import SolanaClient, parse_pubkey


class TestSolanaClient:
    """Tests for PDA derivation"""

    @pytest.fixture
    def client(self):
        """Create a SolanaClient instance"""
        return SolanaClient(rpc_url="https://api.devnet.solana.com")

    def test_program_addresses_initialization(self, client):
        assert client.program_addresses.vesting is not None
        assert client.program_addresses.token is not None
        assert client.program_addresses.associated_token is not None

    def test_derive_grant_pda_is_deterministic(self, client):
        beneficiary = Pubkey.new_unique()
        mint = Pubkey.new_unique()
        pda, bump = client.derive_grant_pda(beneficiary, mint)
        assert client.derive_grant_pda(beneficiary, mint) == (pda, bump)
        assert 0 <= bump <= 255

    def test_grant_pda_is_unique_per_beneficiary_and_mint(self, client):
        beneficiary = Pubkey.new_unique()
        mint_a = Pubkey.new_unique()
        mint_b = Pubkey.new_unique()
        other = Pubkey.new_unique()
        grant_a, _ = client.derive_grant_pda(beneficiary, mint_a)
        assert grant_a != client.derive_grant_pda(beneficiary, mint_b)[0]
        assert grant_a != client.derive_grant_pda(other, mint_a)[0]

    def test_vault_pda_differs_from_grant(self, client):
        grant, _ = client.derive_grant_pda(Pubkey.new_unique(), Pubkey.new_unique())
        vault, bump = client.derive_vault_pda(grant)
        assert vault != grant
        assert isinstance(bump, int)

    def test_vault_authority_is_program_wide(self, client):
        assert client.derive_vault_authority_pda() == client.derive_vault_authority_pda()

    def test_associated_token_address_depends_on_owner(self, client):
        mint = Pubkey.new_unique()
        a = client.derive_associated_token_address(Pubkey.new_unique(), mint)
        b = client.derive_associated_token_address(Pubkey.new_unique(), mint)
        assert a != b

    def test_parse_pubkey_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_pubkey("not-a-key")

    def test_client_requires_connect(self, client):
        with pytest.raises(RuntimeError):
            _ = client.client


class TestClocks:
    """Tests for time sources"""

    @pytest.mark.asyncio
    async def test_cluster_clock_reads_block_time(self):
        solana_client = MagicMock()
        solana_client.get_slot = AsyncMock(return_value=1234)
        solana_client.get_block_time = AsyncMock(return_value=1704067200)

        now = await ClusterClock(solana_client).now()

        assert now == 1704067200
        solana_client.get_block_time.assert_awaited_once_with(1234)

    @pytest.mark.asyncio
    async def test_cluster_clock_without_block_time_fails(self):
        solana_client = MagicMock()
        solana_client.get_slot = AsyncMock(return_value=1234)
        solana_client.get_block_time = AsyncMock(return_value=None)

        with pytest.raises(RuntimeError):
            await ClusterClock(solana_client).now()

    @pytest.mark.asyncio
    async def test_system_clock_returns_int(self):
        assert isinstance(await SystemClock().now(), int)

    def test_default_clock_is_system(self):
        assert isinstance(clock_from_settings(), SystemClock)
