"""Grant operations: initialize, withdraw and revoke vesting grants."""
from dataclasses import dataclass
from typing import List, Optional, Tuple

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from linear_vesting.errors import (
    AlreadyEmpty,
    AlreadyFullyVested,
    AlreadyInitialized,
    AlreadyRevoked,
    CliffNotReached,
    GrantNotFound,
    InsufficientFunds,
    InvalidAmount,
    InvalidDuration,
    NothingToRelease,
    NotRevocable,
    Unauthorized,
)
from linear_vesting.models.grant import VestingGrant, U64_MAX, I64_MAX
from linear_vesting.models.grant_event import GrantEvent, GrantEventType
from linear_vesting.models.token_account import TokenAccount
from linear_vesting.services.schedule import VestingSchedule
from linear_vesting.services.solana_client import SolanaClient, get_address_deriver, parse_pubkey
from linear_vesting.services.token_ledger import TokenLedger

logger = structlog.get_logger()


@dataclass
class VestingPreview:
    """Read-only view of a grant's position at a point in time."""
    now: int
    vested: int
    releasable: int
    unvested: int
    vault_balance: int


class GrantOperations:
    """
    State transitions for vesting grants.

    Every operation takes the caller's attested identity and a single clock
    reading. All preconditions are checked before the first mutation, and the
    grant update, the token transfer and the event record share the caller's
    database transaction so they commit or roll back together.
    """

    def __init__(
        self,
        db: AsyncSession,
        ledger: Optional[TokenLedger] = None,
        solana_client: Optional[SolanaClient] = None,
    ):
        self.db = db
        self.solana_client = solana_client or get_address_deriver()
        self.ledger = ledger or TokenLedger(db, self.solana_client)

    @property
    def vault_authority(self) -> str:
        authority, _ = self.solana_client.derive_vault_authority_pda()
        return str(authority)

    def grant_address(self, beneficiary: str, mint: str) -> str:
        address, _ = self.solana_client.derive_grant_pda(parse_pubkey(beneficiary), parse_pubkey(mint))
        return str(address)

    async def initialize(
        self,
        owner: str,
        beneficiary: str,
        mint: str,
        amount: int,
        start_ts: int,
        cliff_ts: int,
        duration: int,
        revocable: bool,
        now: int,
    ) -> Tuple[VestingGrant, GrantEvent]:
        """
        Create a grant and move ``amount`` tokens from the owner into its vault.

        ``owner`` must be the attested signer of the request.
        """
        if amount <= 0 or amount > U64_MAX:
            raise InvalidAmount(amount=amount)
        if duration <= 0 or duration > I64_MAX:
            raise InvalidDuration(duration=duration)

        grant_pda, _ = self.solana_client.derive_grant_pda(parse_pubkey(beneficiary), parse_pubkey(mint))
        address = str(grant_pda)
        if await self._find_grant(address) is not None:
            raise AlreadyInitialized(grant_id=address)

        owner_account = await self.ledger.get_account(
            self.ledger.associated_address(owner, mint), for_update=True
        )
        if owner_account is None or owner_account.amount < amount:
            raise InsufficientFunds(
                available=owner_account.amount if owner_account else 0,
                requested=amount,
            )

        vault_pda, _ = self.solana_client.derive_vault_pda(grant_pda)
        grant = VestingGrant(
            address=address,
            vault=str(vault_pda),
            owner=owner,
            beneficiary=beneficiary,
            mint=mint,
            total_deposited_amount=amount,
            released_amount=0,
            start_ts=start_ts,
            cliff_ts=cliff_ts,
            duration=duration,
            revocable=revocable,
            revoked=False,
        )
        # A concurrent initialize can pass the lookup above; the unique grant and
        # vault addresses then reject the loser here.
        try:
            vault = await self.ledger.open_account(grant.vault, self.vault_authority, mint)
            self.db.add(grant)
            await self.db.flush()
        except IntegrityError as exc:
            raise AlreadyInitialized(grant_id=address) from exc

        await self.ledger.transfer(owner_account, vault, amount, authority=owner)
        event = await self._record(
            grant, GrantEventType.INITIALIZE, owner, owner_account, vault, amount, now,
            data={"start_ts": start_ts, "cliff_ts": cliff_ts, "duration": duration, "revocable": revocable},
        )

        logger.info(
            "Initialized vesting grant",
            grant_id=address,
            owner=owner,
            beneficiary=beneficiary,
            mint=mint,
            amount=amount,
        )
        return grant, event

    async def withdraw(self, grant_id: str, signer: str, now: int) -> GrantEvent:
        """Release everything vested but not yet released to the beneficiary."""
        grant = await self._load_grant(grant_id)
        if signer != grant.beneficiary:
            raise Unauthorized(grant_id=grant_id, signer=signer)

        schedule = VestingSchedule.for_grant(grant)
        logger.info("Clock time read for withdraw", grant_id=grant_id, now=now)
        if schedule.is_before_cliff(now):
            raise CliffNotReached(grant_id=grant_id, now=now, cliff_ts=grant.cliff_ts)

        vault = await self._load_vault(grant)
        releasable = self._releasable(grant, schedule, now)
        if releasable == 0:
            if grant.is_drained:
                raise AlreadyEmpty(grant_id=grant_id)
            raise NothingToRelease(grant_id=grant_id, now=now)

        destination = await self.ledger.get_or_create_associated_account(grant.beneficiary, grant.mint)
        await self.ledger.transfer(vault, destination, releasable, authority=self.vault_authority)
        grant.released_amount += releasable

        event = await self._record(
            grant, GrantEventType.WITHDRAW, signer, vault, destination, releasable, now,
        )
        logger.info(
            "Withdrew vested tokens",
            grant_id=grant_id,
            amount=releasable,
            released=grant.released_amount,
            total=grant.total_deposited_amount,
        )
        return event

    async def revoke(self, grant_id: str, signer: str, now: int) -> GrantEvent:
        """Return the unvested remainder to the owner and freeze the schedule."""
        grant = await self._load_grant(grant_id)
        if signer != grant.owner:
            raise Unauthorized(grant_id=grant_id, signer=signer)
        if not grant.revocable:
            raise NotRevocable(grant_id=grant_id)
        if grant.revoked:
            raise AlreadyRevoked(grant_id=grant_id)

        schedule = VestingSchedule.for_grant(grant)
        logger.info("Clock time read for revoke", grant_id=grant_id, now=now)
        if schedule.is_fully_vested(now):
            raise AlreadyFullyVested(grant_id=grant_id)

        unvested = schedule.unvested_amount(now)
        vault = await self._load_vault(grant)
        destination = await self.ledger.get_or_create_associated_account(grant.owner, grant.mint)
        await self.ledger.transfer(vault, destination, unvested, authority=self.vault_authority)
        grant.released_amount += unvested
        grant.revoked = True

        event = await self._record(
            grant, GrantEventType.REVOKE, signer, vault, destination, unvested, now,
            data={"vested_at_revocation": schedule.vested_amount(now)},
        )
        logger.info("Revoked vesting grant", grant_id=grant_id, returned=unvested)
        return event

    async def get_grant(self, grant_id: str) -> VestingGrant:
        grant = await self._find_grant(grant_id)
        if grant is None:
            raise GrantNotFound(grant_id=grant_id)
        return grant

    async def preview(self, grant_id: str, now: int) -> VestingPreview:
        grant = await self.get_grant(grant_id)
        schedule = VestingSchedule.for_grant(grant)
        vault = await self.ledger.get_account(grant.vault)
        vault_balance = vault.amount if vault else 0

        if grant.revoked:
            # Frozen at revocation: everything except what went back to the owner
            vested = grant.total_deposited_amount - await self._returned_amount(grant)
            unvested = 0
        else:
            vested = schedule.vested_amount(now)
            unvested = schedule.total_amount - vested

        return VestingPreview(
            now=now,
            vested=vested,
            releasable=self._releasable(grant, schedule, now),
            unvested=unvested,
            vault_balance=vault_balance,
        )

    async def list_grants(
        self,
        beneficiary: Optional[str] = None,
        owner: Optional[str] = None,
        mint: Optional[str] = None,
    ) -> List[VestingGrant]:
        query = select(VestingGrant).order_by(VestingGrant.id)
        if beneficiary:
            query = query.where(VestingGrant.beneficiary == beneficiary)
        if owner:
            query = query.where(VestingGrant.owner == owner)
        if mint:
            query = query.where(VestingGrant.mint == mint)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def history(self, grant_id: str) -> List[GrantEvent]:
        await self.get_grant(grant_id)
        result = await self.db.execute(
            select(GrantEvent)
            .where(GrantEvent.grant_address == grant_id)
            .order_by(GrantEvent.id)
        )
        return list(result.scalars().all())

    @staticmethod
    def _releasable(grant: VestingGrant, schedule: VestingSchedule, now: int) -> int:
        # Revocation counts the returned remainder as released, so a revoked grant
        # only has the vested-but-unwithdrawn balance left and nothing accrues.
        if grant.revoked:
            return grant.total_deposited_amount - grant.released_amount
        return schedule.vested_amount(now) - grant.released_amount

    async def _returned_amount(self, grant: VestingGrant) -> int:
        result = await self.db.execute(
            select(GrantEvent.amount).where(
                GrantEvent.grant_address == grant.address,
                GrantEvent.event_type == GrantEventType.REVOKE,
            )
        )
        return result.scalar_one_or_none() or 0

    async def _find_grant(self, grant_id: str, for_update: bool = False) -> Optional[VestingGrant]:
        query = select(VestingGrant).where(VestingGrant.address == grant_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _load_grant(self, grant_id: str) -> VestingGrant:
        grant = await self._find_grant(grant_id, for_update=True)
        if grant is None:
            raise GrantNotFound(grant_id=grant_id)
        return grant

    async def _load_vault(self, grant: VestingGrant) -> TokenAccount:
        vault = await self.ledger.get_account(grant.vault, for_update=True)
        if vault is None:
            raise RuntimeError(f"Vault {grant.vault} missing for grant {grant.address}")
        return vault

    async def _record(
        self,
        grant: VestingGrant,
        event_type: GrantEventType,
        signer: str,
        source: TokenAccount,
        destination: TokenAccount,
        amount: int,
        now: int,
        data: Optional[dict] = None,
    ) -> GrantEvent:
        event = GrantEvent(
            grant_address=grant.address,
            event_type=event_type,
            signer=signer,
            source=source.address,
            destination=destination.address,
            amount=amount,
            released_amount=grant.released_amount,
            timestamp=now,
            data=data,
        )
        self.db.add(event)
        await self.db.flush()
        return event
