"""am_auction REST endpoints.

GET /auctions/{auction_id}          — public auction view
GET /auctions/{auction_id}/my-bid   — caller's own ledger row
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.application.service import AuctionApplicationService
from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, success_response
from src.am_gateway.auth.dependencies import get_current_user
from src.am_gateway.user.db_models import UserModel

router = APIRouter(prefix="/auctions", tags=["auctions"])

_service = AuctionApplicationService()


@router.get("/{auction_id}")
async def get_auction(
    auction_id: UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_auction(db, str(auction_id))
    return success_response(result.model_dump(), request)


@router.get("/{auction_id}/my-bid")
async def get_my_bid(
    auction_id: UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_my_bid(db, str(auction_id), str(current_user.id))
    return success_response(result.model_dump(), request)
