"""Vesting grant API endpoints"""
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from linear_vesting.api.deps import get_clock, get_signer
from linear_vesting.models.database import get_db
from linear_vesting.schemas.grant import (
    GrantSnapshot,
    InitializeGrantRequest,
    InitializeGrantResponse,
    TransferReceipt,
    VestingPreviewResponse,
)
from linear_vesting.services.clock import Clock
from linear_vesting.services.grant_operations import GrantOperations

router = APIRouter()


@router.post("", response_model=InitializeGrantResponse, status_code=201)
async def initialize_grant(
    request: InitializeGrantRequest,
    signer: str = Depends(get_signer),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Create a grant; the signer is the owner and funds the vault"""
    now = await clock.now()
    ops = GrantOperations(db)
    grant, event = await ops.initialize(
        owner=signer,
        beneficiary=request.beneficiary,
        mint=request.mint,
        amount=request.amount,
        start_ts=request.start_ts,
        cliff_ts=request.cliff_ts,
        duration=request.duration,
        revocable=request.revocable,
        now=now,
    )
    return InitializeGrantResponse(
        grant=GrantSnapshot.from_grant(grant),
        receipt=TransferReceipt.from_event(event),
    )


@router.get("", response_model=List[GrantSnapshot])
async def list_grants(
    beneficiary: Optional[str] = Query(None),
    owner: Optional[str] = Query(None),
    mint: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List grants, optionally filtered by beneficiary, owner or mint"""
    grants = await GrantOperations(db).list_grants(beneficiary=beneficiary, owner=owner, mint=mint)
    return [GrantSnapshot.from_grant(g) for g in grants]


@router.get("/{grant_id}", response_model=GrantSnapshot)
async def get_grant(grant_id: str = Path(...), db: AsyncSession = Depends(get_db)):
    """Get a grant snapshot"""
    grant = await GrantOperations(db).get_grant(grant_id)
    return GrantSnapshot.from_grant(grant)


@router.get("/{grant_id}/vested", response_model=VestingPreviewResponse)
async def preview_vesting(
    grant_id: str = Path(...),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Vested, releasable and unvested amounts at the current clock reading"""
    now = await clock.now()
    preview = await GrantOperations(db).preview(grant_id, now)
    return VestingPreviewResponse(
        grant_id=grant_id,
        now=preview.now,
        vested=preview.vested,
        releasable=preview.releasable,
        unvested=preview.unvested,
        vault_balance=preview.vault_balance,
    )


@router.get("/{grant_id}/history", response_model=List[TransferReceipt])
async def grant_history(grant_id: str = Path(...), db: AsyncSession = Depends(get_db)):
    """Every transfer issued for a grant, oldest first"""
    events = await GrantOperations(db).history(grant_id)
    return [TransferReceipt.from_event(e) for e in events]


@router.post("/{grant_id}/withdraw", response_model=TransferReceipt)
async def withdraw(
    grant_id: str = Path(...),
    signer: str = Depends(get_signer),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Release vested tokens to the beneficiary"""
    now = await clock.now()
    event = await GrantOperations(db).withdraw(grant_id, signer, now)
    return TransferReceipt.from_event(event)


@router.post("/{grant_id}/revoke", response_model=TransferReceipt)
async def revoke(
    grant_id: str = Path(...),
    signer: str = Depends(get_signer),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Return unvested tokens to the owner"""
    now = await clock.now()
    event = await GrantOperations(db).revoke(grant_id, signer, now)
    return TransferReceipt.from_event(event)
