# src/am_bidding/api/router.py
"""Bid submission endpoint.

POST /bids — place or raise a proxy bid (BidTooLow → 200 with success=false)
"""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_bidding.application.schemas import PlaceBidRequest, PlaceBidResponse
from src.am_bidding.application.service import BiddingService
from src.am_common.database import get_db_session
from src.am_gateway.auth.dependencies import get_current_user
from src.am_gateway.user.db_models import UserModel

router = APIRouter(prefix="/bids", tags=["bids"])

_service = BiddingService()


@router.post("", response_model=PlaceBidResponse)
async def place_bid(
    req: PlaceBidRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> PlaceBidResponse:
    return await _service.place_bid(req, str(current_user.id), db)
