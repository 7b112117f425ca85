"""Request-scoped dependencies for the vesting API"""
from fastapi import Header, HTTPException

from linear_vesting.services.clock import Clock, clock_from_settings
from linear_vesting.services.solana_client import parse_pubkey

SIGNER_HEADER = "X-Signer"


async def get_signer(x_signer: str = Header(None, alias=SIGNER_HEADER)) -> str:
    """Caller identity attested by the transport in front of the API.

    Signature verification happens upstream; the core only compares the
    attested key with the identities stored on the grant.
    """
    if not x_signer:
        raise HTTPException(status_code=401, detail=f"Missing {SIGNER_HEADER} header")
    try:
        parse_pubkey(x_signer)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid signer address format")
    return x_signer


def get_clock() -> Clock:
    """Clock read once per mutating request"""
    return clock_from_settings()
