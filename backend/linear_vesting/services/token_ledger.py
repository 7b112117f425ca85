"""Token ledger: custodied balances and the atomic transfer primitive."""
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from linear_vesting.errors import InsufficientFunds, Unauthorized
from linear_vesting.models.grant import U64_MAX
from linear_vesting.models.token_account import TokenAccount
from linear_vesting.services.solana_client import SolanaClient, get_address_deriver, parse_pubkey

logger = structlog.get_logger()


class TokenLedger:
    """Moves tokens between token accounts inside the caller's session.

    A transfer validates authority and balance before touching either
    account, so it either applies both sides or raises with nothing changed.
    Committing is left to the session owner.
    """

    def __init__(self, db: AsyncSession, solana_client: Optional[SolanaClient] = None):
        self.db = db
        self.solana_client = solana_client or get_address_deriver()

    async def get_account(self, address: str, for_update: bool = False) -> Optional[TokenAccount]:
        query = select(TokenAccount).where(TokenAccount.address == address)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    def associated_address(self, owner: str, mint: str) -> str:
        return str(self.solana_client.derive_associated_token_address(
            parse_pubkey(owner), parse_pubkey(mint)
        ))

    async def get_or_create_associated_account(self, owner: str, mint: str) -> TokenAccount:
        """Fetch the owner's associated token account for ``mint``, opening an empty one if missing"""
        address = self.associated_address(owner, mint)
        account = await self.get_account(address, for_update=True)
        if account is None:
            account = await self.open_account(address, owner, mint)
        return account

    async def open_account(self, address: str, owner: str, mint: str) -> TokenAccount:
        account = TokenAccount(address=address, owner=owner, mint=mint, amount=0)
        self.db.add(account)
        await self.db.flush()
        logger.debug("Opened token account", address=address, owner=owner, mint=mint)
        return account

    async def balance(self, owner: str, mint: str) -> int:
        account = await self.get_account(self.associated_address(owner, mint))
        return account.amount if account else 0

    async def credit(self, owner: str, mint: str, amount: int) -> TokenAccount:
        """Record tokens arriving in an identity's account from outside the ledger"""
        account = await self.get_or_create_associated_account(owner, mint)
        if account.amount + amount > U64_MAX:
            raise ValueError("Credit would overflow the token account")
        account.amount += amount
        await self.db.flush()
        logger.info("Credited token account", address=account.address, amount=amount)
        return account

    async def transfer(
        self,
        source: TokenAccount,
        destination: TokenAccount,
        amount: int,
        authority: str,
    ) -> None:
        """Move ``amount`` from ``source`` to ``destination`` signed by ``authority``"""
        if source.owner != authority:
            raise Unauthorized(
                "Transfer authority does not own the source account",
                source=source.address,
            )
        if source.mint != destination.mint:
            raise ValueError("Cannot transfer between accounts of different mints")
        if amount > source.amount:
            raise InsufficientFunds(
                source=source.address,
                available=source.amount,
                requested=amount,
            )
        if destination.amount + amount > U64_MAX:
            raise ValueError("Transfer would overflow the destination account")

        source.amount -= amount
        destination.amount += amount
        await self.db.flush()

        logger.info(
            "Transferred tokens",
            source=source.address,
            destination=destination.address,
            amount=amount,
        )
