"""Stored buyer payment methods and seller payout accounts (raw SQL)."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_PAYMENT_METHOD_SQL = text("""
    SELECT payment_method_ref
    FROM payment_profiles
    WHERE user_id = :user_id AND payment_method_ref IS NOT NULL
""")

_PAYOUT_ACCOUNT_SQL = text("""
    SELECT account_ref
    FROM payout_accounts
    WHERE seller_id = :seller_id AND payouts_enabled
""")


class PaymentAccountRepository:
    async def get_payment_method_ref(self, db: AsyncSession, user_id: str) -> str | None:
        result = await db.execute(_PAYMENT_METHOD_SQL, {"user_id": user_id})
        return result.scalar_one_or_none()

    async def get_payout_account_ref(self, db: AsyncSession, seller_id: str) -> str | None:
        result = await db.execute(_PAYOUT_ACCOUNT_SQL, {"seller_id": seller_id})
        return result.scalar_one_or_none()
