"""Parsing of M-Pesa (Daraja) STK Push result callbacks."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger(__name__)

SUCCESS_RESULT_CODE = 0

# What the gateway expects back, whatever happened on our side
ACKNOWLEDGEMENT = {"ResultCode": 0, "ResultDesc": "Success"}


@dataclass
class StkCallback:
    """Fields of one STK callback relevant to the ledger."""

    result_code: int
    result_desc: str
    checkout_request_id: str | None
    amount: Decimal | None = None
    receipt_number: str | None = None
    phone: str | None = None
    transaction_date: date | None = None

    @property
    def succeeded(self) -> bool:
        return self.result_code == SUCCESS_RESULT_CODE

    @property
    def is_complete(self) -> bool:
        return self.amount is not None and self.phone is not None


def _metadata_items(callback: dict[str, Any]) -> dict[str, Any]:
    items = (callback.get("CallbackMetadata") or {}).get("Item") or []
    return {item.get("Name"): item.get("Value") for item in items if isinstance(item, dict)}


def _parse_transaction_date(value: Any) -> date | None:
    # Daraja sends YYYYMMDDHHMMSS as a number, already in East Africa Time
    if value is None:
        return None
    try:
        return datetime.strptime(str(value), "%Y%m%d%H%M%S").date()
    except ValueError:
        logger.warning("Unparseable M-Pesa TransactionDate %r", value)
        return None


def parse_stk_callback(payload: dict[str, Any]) -> StkCallback | None:
    """Extract the STK result from a Daraja callback body.

    Returns:
        StkCallback, or None if the payload has no stkCallback section
    """
    callback = ((payload or {}).get("Body") or {}).get("stkCallback")
    if not isinstance(callback, dict):
        return None

    try:
        result_code = int(callback.get("ResultCode"))
    except (TypeError, ValueError):
        logger.warning("M-Pesa callback without a numeric ResultCode: %r", callback.get("ResultCode"))
        return None

    parsed = StkCallback(
        result_code=result_code,
        result_desc=str(callback.get("ResultDesc", "")),
        checkout_request_id=callback.get("CheckoutRequestID"),
    )
    if not parsed.succeeded:
        return parsed

    metadata = _metadata_items(callback)
    try:
        if metadata.get("Amount") is not None:
            parsed.amount = Decimal(str(metadata["Amount"]))
    except InvalidOperation:
        logger.warning("Unparseable M-Pesa Amount %r", metadata.get("Amount"))
    if metadata.get("MpesaReceiptNumber"):
        parsed.receipt_number = str(metadata["MpesaReceiptNumber"])
    if metadata.get("PhoneNumber") is not None:
        parsed.phone = str(metadata["PhoneNumber"])
    parsed.transaction_date = _parse_transaction_date(metadata.get("TransactionDate"))
    return parsed


__all__ = ["StkCallback", "parse_stk_callback", "ACKNOWLEDGEMENT"]
