"""Token account API endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from linear_vesting.models.database import get_db
from linear_vesting.schemas.grant import BalanceResponse
from linear_vesting.services.token_ledger import TokenLedger

router = APIRouter()


@router.get("/{owner}/{mint}", response_model=BalanceResponse)
async def get_balance(owner: str = Path(...), mint: str = Path(...), db: AsyncSession = Depends(get_db)):
    """Balance of an identity's associated token account"""
    ledger = TokenLedger(db)
    try:
        token_account = ledger.associated_address(owner, mint)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid owner or mint address format")

    return BalanceResponse(
        owner=owner,
        mint=mint,
        token_account=token_account,
        balance=await ledger.balance(owner, mint),
    )
