# src/am_admin/api/router.py
"""Admin REST API.

POST /admin/settlement/run            — settle every expired active auction now
GET  /admin/auctions/{auction_id}     — full record incl. reserve and ceilings
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_admin.application.service import AdminService
from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.auth.dependencies import require_admin
from src.am_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.post("/settlement/run")
async def run_settlement(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
) -> ApiResponse:
    result = await _service.run_settlement()
    return success_response(result, request)


@router.get("/auctions/{auction_id}")
async def get_auction_ledger(
    auction_id: UUID,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_auction_ledger(str(auction_id), db)
    return success_response(result, request)
