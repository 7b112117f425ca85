"""API v1 router aggregation"""
from fastapi import APIRouter

from linear_vesting.api.v1 import grants, accounts
from linear_vesting.schemas.grant import ErrorResponse

# Rejected grant operations render as ErrorResponse (see main.vesting_error_handler)
grant_errors = {
    status: {"model": ErrorResponse}
    for status in (400, 403, 404, 409)
}

api_router = APIRouter()

api_router.include_router(grants.router, prefix="/grants", tags=["Grants"], responses=grant_errors)
api_router.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
