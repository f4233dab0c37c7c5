"""HTTP adapter for the split-payment processor.

POST {PAYMENTS_API_URL}/v1/split-payments
  Idempotency-Key: auction-settlement-<auction_id>

Success (2xx) body:  {"payment_id": "...", "amount": 1234, "platform_fee_amount": 62}
Failure body:        {"code": "charge_declined", "message": "..."}

Failure mapping:
  no_payment_method              → NoPaymentMethodError
  charge_declined / HTTP 402     → ChargeDeclinedError
  destination_account_not_ready  → DestinationAccountNotReadyError
  5xx, timeout, transport error  → PaymentGatewayUnavailableError
"""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.am_common.errors import (
    ChargeDeclinedError,
    DestinationAccountNotReadyError,
    NoPaymentMethodError,
    PaymentError,
    PaymentGatewayUnavailableError,
)
from src.am_settlement.domain.models import PaymentConfirmation, PaymentSplitRequest

logger = logging.getLogger(__name__)

_SPLIT_PAYMENTS_PATH = "/v1/split-payments"


class HttpPaymentSplitGateway:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.PAYMENTS_API_URL,
            timeout=httpx.Timeout(timeout_seconds or settings.PAYMENTS_TIMEOUT_SECONDS),
            headers={"Authorization": f"Bearer {api_key or settings.PAYMENTS_API_KEY}"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def charge(self, request: PaymentSplitRequest) -> PaymentConfirmation:
        body = {
            "amount": request.amount,
            "currency": request.currency,
            "buyer_payment_method_ref": request.buyer_payment_method_ref,
            "seller_payout_account_ref": request.seller_payout_account_ref,
            "platform_fee_fraction": request.platform_fee_fraction,
            "platform_fee_amount": request.platform_fee_amount,
            "metadata": request.metadata,
        }
        try:
            response = await self._client.post(
                _SPLIT_PAYMENTS_PATH,
                json=body,
                headers={"Idempotency-Key": request.idempotency_key},
            )
        except httpx.HTTPError as exc:
            logger.warning("Payment gateway unreachable: %s", exc)
            raise PaymentGatewayUnavailableError(str(exc) or type(exc).__name__) from exc

        if response.is_success:
            data = response.json()
            return PaymentConfirmation(
                payment_id=str(data["payment_id"]),
                amount=int(data.get("amount", request.amount)),
                platform_fee_amount=int(
                    data.get("platform_fee_amount", request.platform_fee_amount)
                ),
            )
        raise _to_payment_error(response, request)


def _to_payment_error(response: httpx.Response, request: PaymentSplitRequest) -> PaymentError:
    payload: dict[str, Any] = {}
    try:
        decoded = response.json()
        if isinstance(decoded, dict):
            payload = decoded
    except ValueError:
        pass
    code = payload.get("code")
    message = str(payload.get("message") or response.reason_phrase or "payment failed")

    if code == "no_payment_method":
        return NoPaymentMethodError(request.metadata.get("buyer_id", "unknown"))
    if code == "destination_account_not_ready":
        return DestinationAccountNotReadyError(request.metadata.get("seller_id", "unknown"))
    if code == "charge_declined" or response.status_code == 402:
        return ChargeDeclinedError(message)
    if response.status_code >= 500:
        return PaymentGatewayUnavailableError(f"HTTP {response.status_code}: {message}")
    return ChargeDeclinedError(f"HTTP {response.status_code}: {message}")
