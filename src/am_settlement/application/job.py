# src/am_settlement/application/job.py
"""SettlementJob — close expired auctions, pick winners, move money.

Per auction, independently:
  tx1  lock row, re-check active + expired, active → ended (winner_id),
       read payment method / payout account, commit
  ---  no winner: listing back to published, notify seller
  ---  winner: charge through the split gateway (outside any transaction)
  tx2  on confirmed payment: order, ended → completed, listing sold, commit

Because tx1 moves the row out of `active` before any money moves, a
repeated or concurrent pass cannot pick the same auction up again.
Payment failures leave the auction `ended` for manual resolution.
A failure on one auction is recorded and the batch continues.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import settings
from src.am_auction.domain.models import Auction, Bid
from src.am_auction.domain.repository import AuctionRepositoryProtocol, BidLedgerProtocol
from src.am_auction.domain.state import ensure_transition, is_due_for_settlement
from src.am_auction.infrastructure.persistence import AuctionRepository, BidLedger
from src.am_common.datetime_utils import utc_now
from src.am_common.enums import AuctionStatus, ListingStatus, NotificationKind
from src.am_common.errors import (
    DestinationAccountNotReadyError,
    NoPaymentMethodError,
    PaymentError,
)
from src.am_common.money import calculate_fee, pence_to_display
from src.am_settlement.domain.collaborators import (
    ListingOrderStoreProtocol,
    Notifier,
    PaymentAccountsProtocol,
    PaymentSplitGateway,
)
from src.am_settlement.domain.models import (
    OrderDraft,
    PaymentConfirmation,
    PaymentSplitRequest,
    SettlementResult,
)
from src.am_settlement.domain.winner import determine_winner
from src.am_settlement.infrastructure.listing_orders import ListingOrderStore
from src.am_settlement.infrastructure.payment_accounts import PaymentAccountRepository

logger = logging.getLogger(__name__)


@dataclass
class _Claim:
    auction: Auction
    winner: Bid | None
    payment_method_ref: str | None
    payout_account_ref: str | None


class SettlementJob:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: PaymentSplitGateway,
        notifier: Notifier,
        auctions: AuctionRepositoryProtocol | None = None,
        ledger: BidLedgerProtocol | None = None,
        accounts: PaymentAccountsProtocol | None = None,
        store: ListingOrderStoreProtocol | None = None,
        fee_bps: int | None = None,
        currency: str | None = None,
        batch_limit: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._gateway = gateway
        self._notifier = notifier
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._ledger: BidLedgerProtocol = ledger or BidLedger()
        self._accounts: PaymentAccountsProtocol = accounts or PaymentAccountRepository()
        self._store: ListingOrderStoreProtocol = store or ListingOrderStore()
        self._fee_bps = settings.PLATFORM_FEE_BPS if fee_bps is None else fee_bps
        self._currency = currency or settings.CURRENCY
        self._batch_limit = batch_limit or settings.SETTLEMENT_BATCH_LIMIT
        self._clock = clock

    async def aclose(self) -> None:
        await self._gateway.aclose()

    async def process_expired_auctions(
        self, now: datetime | None = None
    ) -> list[SettlementResult]:
        """Settle every auction that expired before `now`, one page at a time.

        Pages are keyed on (end_time, id) so an auction that fails and stays
        `active` is not scanned again in the same pass.
        """
        now = now or self._clock()
        results: list[SettlementResult] = []
        after_id: str | None = None
        while True:
            async with self._session_factory() as db:
                auction_ids = await self._auctions.list_due_for_settlement(
                    db, now, self._batch_limit, after_id=after_id
                )
            if not auction_ids:
                break
            logger.info("Settling %d expired auctions", len(auction_ids))
            for auction_id in auction_ids:
                try:
                    result = await self._settle_auction(auction_id, now)
                except Exception as exc:
                    logger.exception("Settlement failed for auction %s", auction_id)
                    result = SettlementResult(
                        auction_id=auction_id, error=str(exc) or type(exc).__name__
                    )
                if result is not None:
                    results.append(result)
            if len(auction_ids) < self._batch_limit:
                break
            after_id = auction_ids[-1]
        return results

    async def _settle_auction(self, auction_id: str, now: datetime) -> SettlementResult | None:
        claim = await self._claim(auction_id, now)
        if claim is None:
            logger.info("Auction %s no longer due for settlement, skipped", auction_id)
            return None

        auction = claim.auction
        if claim.winner is None:
            logger.info("Auction %s ended without a sale", auction.id)
            await self._notifier.notify(
                auction.seller_id,
                NotificationKind.RESERVE_NOT_MET.value,
                _context(auction, auction.current_bid),
            )
            return SettlementResult(
                auction_id=auction.id,
                listing_id=auction.listing_id,
                status=AuctionStatus.ENDED.value,
            )
        return await self._charge_winner(claim, claim.winner)

    async def _claim(self, auction_id: str, now: datetime) -> _Claim | None:
        async with self._session_factory() as db:
            try:
                auction = await self._auctions.lock_auction(db, auction_id)
                if auction is None or not is_due_for_settlement(auction, now):
                    await db.rollback()
                    return None
                ensure_transition(auction.status, AuctionStatus.ENDED.value)

                top = await self._ledger.get_top_public_bid(db, auction_id)
                winner = determine_winner(auction, top)
                await self._auctions.transition(
                    db,
                    auction_id,
                    AuctionStatus.ACTIVE.value,
                    AuctionStatus.ENDED.value,
                    winner_id=winner.bidder_id if winner else None,
                )

                payment_ref = payout_ref = None
                if winner is None:
                    await self._store.set_listing_status(
                        db, auction.listing_id, ListingStatus.PUBLISHED.value
                    )
                else:
                    payment_ref = await self._accounts.get_payment_method_ref(
                        db, winner.bidder_id
                    )
                    payout_ref = await self._accounts.get_payout_account_ref(
                        db, auction.seller_id
                    )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        return _Claim(auction, winner, payment_ref, payout_ref)

    async def _charge_winner(self, claim: _Claim, winner: Bid) -> SettlementResult:
        auction = claim.auction
        amount = winner.bid_amount
        fee = calculate_fee(amount, self._fee_bps)

        try:
            if claim.payment_method_ref is None:
                raise NoPaymentMethodError(winner.bidder_id)
            if claim.payout_account_ref is None:
                raise DestinationAccountNotReadyError(auction.seller_id)
            confirmation = await self._gateway.charge(
                PaymentSplitRequest(
                    amount=amount,
                    currency=self._currency,
                    buyer_payment_method_ref=claim.payment_method_ref,
                    seller_payout_account_ref=claim.payout_account_ref,
                    platform_fee_bps=self._fee_bps,
                    platform_fee_amount=fee,
                    idempotency_key=f"auction-settlement-{auction.id}",
                    metadata={
                        "auction_id": auction.id,
                        "listing_id": auction.listing_id,
                        "buyer_id": winner.bidder_id,
                        "seller_id": auction.seller_id,
                    },
                )
            )
        except PaymentError as exc:
            logger.warning(
                "Auction %s awaiting manual payment (code=%d): %s",
                auction.id,
                exc.code,
                exc.message,
            )
            context = _context(auction, amount)
            context["reason"] = exc.message
            await self._notifier.notify(
                winner.bidder_id, NotificationKind.PAYMENT_ACTION_REQUIRED.value, context
            )
            if isinstance(exc, DestinationAccountNotReadyError):
                await self._notifier.notify(
                    auction.seller_id,
                    NotificationKind.PAYOUT_ACCOUNT_REQUIRED.value,
                    _context(auction, amount),
                )
            return SettlementResult(
                auction_id=auction.id,
                listing_id=auction.listing_id,
                status=AuctionStatus.ENDED.value,
                winner_id=winner.bidder_id,
            )

        order_id = await self._complete(auction, winner, confirmation, fee)
        logger.info(
            "Auction %s completed: winner=%s amount=%d payment=%s order=%s",
            auction.id,
            winner.bidder_id,
            amount,
            confirmation.payment_id,
            order_id,
        )
        await self._notifier.notify(
            winner.bidder_id, NotificationKind.AUCTION_WON.value, _context(auction, amount)
        )
        await self._notifier.notify(
            auction.seller_id, NotificationKind.AUCTION_SOLD.value, _context(auction, amount)
        )
        return SettlementResult(
            auction_id=auction.id,
            listing_id=auction.listing_id,
            status=AuctionStatus.COMPLETED.value,
            winner_id=winner.bidder_id,
            payment_processed=True,
            order_id=order_id,
        )

    async def _complete(
        self,
        auction: Auction,
        winner: Bid,
        confirmation: PaymentConfirmation,
        fee: int,
    ) -> str:
        async with self._session_factory() as db:
            try:
                order_id = await self._store.create_order(
                    db,
                    OrderDraft(
                        auction_id=auction.id,
                        listing_id=auction.listing_id,
                        buyer_id=winner.bidder_id,
                        seller_id=auction.seller_id,
                        total_amount=winner.bid_amount,
                        platform_fee_amount=confirmation.platform_fee_amount or fee,
                        payment_reference=confirmation.payment_id,
                    ),
                )
                moved = await self._auctions.transition(
                    db,
                    auction.id,
                    AuctionStatus.ENDED.value,
                    AuctionStatus.COMPLETED.value,
                    winner_id=winner.bidder_id,
                )
                if not moved:
                    logger.warning("Auction %s was not in ended state at completion", auction.id)
                await self._store.set_listing_status(
                    db, auction.listing_id, ListingStatus.SOLD.value
                )
                await db.commit()
            except Exception:
                await db.rollback()
                logger.critical(
                    "Payment %s captured but auction %s could not be completed",
                    confirmation.payment_id,
                    auction.id,
                )
                raise
        return order_id


def _context(auction: Auction, amount: int) -> dict[str, Any]:
    return {
        "auction_id": auction.id,
        "listing_id": auction.listing_id,
        "listing_title": auction.listing_title,
        "amount_pence": amount,
        "amount_display": pence_to_display(amount),
    }
