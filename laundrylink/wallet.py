# laundrylink/wallet.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

from laundrylink.db.models import NO_ROWS_CODE, WALLETS, WALLET_TRANSACTIONS, TransactionType
from laundrylink.errors import PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)


def fetch_wallet(client, user_id: str) -> Optional[Dict[str, Any]]:
    """The user's wallet row, or None when no wallet has been created yet."""
    try:
        res = client.table(WALLETS).select("*").eq("user_id", user_id).single().execute()
    except APIError as e:
        if e.code == NO_ROWS_CODE:
            return None
        raise
    return res.data


def fetch_transactions(client, user_id: str, limit: int = 10) -> List[Dict[str, Any]]:
    res = (
        client.table(WALLET_TRANSACTIONS)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return res.data or []


def balance_of(wallet: Optional[Dict[str, Any]]) -> float:
    if not wallet:
        return 0.0
    return float(wallet.get("balance") or 0)


def signed_amount(transaction: Dict[str, Any]) -> float:
    amount = float(transaction.get("amount") or 0)
    return amount if transaction.get("type") == "credit" else -amount


def _record(client, wallet: Dict[str, Any], user_id: str, kind: TransactionType, amount: float,
            description: str, booking_id: Optional[str] = None) -> Dict[str, Any]:
    """Insert a ledger row, then move the balance.

    The store offers no transaction across the two writes. If the balance
    update fails, the ledger row is deleted again before the error is
    re-raised, so history and balance do not drift apart.
    """
    row = {
        "user_id": user_id,
        "wallet_id": wallet["id"],
        "type": kind,
        "amount": amount,
        "description": description,
    }
    if booking_id is not None:
        row["booking_id"] = booking_id

    inserted = client.table(WALLET_TRANSACTIONS).insert(row).execute()
    if not inserted.data:
        raise PermissionDeniedError("Failed to record wallet transaction. No data returned.")
    transaction = inserted.data[0]

    delta = amount if kind == "credit" else -amount
    new_balance = balance_of(wallet) + delta
    try:
        client.table(WALLETS).update({"balance": new_balance}).eq("id", wallet["id"]).execute()
    except APIError:
        logger.exception("Balance update failed for wallet %s, rolling back transaction %s",
                         wallet["id"], transaction.get("id"))
        client.table(WALLET_TRANSACTIONS).delete().eq("id", transaction["id"]).execute()
        raise

    logger.info("Wallet %s %s %.2f, balance now %.2f", wallet["id"], kind, amount, new_balance)
    return {**wallet, "balance": new_balance}


def add_money(client, user_id: str, wallet: Optional[Dict[str, Any]], amount: float,
              currency: str = "₹") -> Dict[str, Any]:
    if not wallet:
        raise ValidationError("No wallet found for this account")
    if amount is None or amount <= 0:
        raise ValidationError("Top-up amount must be positive")
    return _record(client, wallet, user_id, "credit", amount, f"Added {currency}{amount:g} to wallet")


def pay_for_booking(client, user_id: str, wallet: Optional[Dict[str, Any]], booking: Dict[str, Any],
                    currency: str = "₹") -> Dict[str, Any]:
    if not wallet:
        raise ValidationError("No wallet found for this account")
    cost = float(booking.get("cost") or 0)
    if cost <= 0:
        return wallet
    if balance_of(wallet) < cost:
        raise ValidationError(
            f"Insufficient balance: {currency}{balance_of(wallet):.2f} available, {currency}{cost:.2f} needed"
        )
    description = f"Paid {currency}{cost:g} for {booking.get('service_type')} on {booking.get('booking_date')}"
    return _record(client, wallet, user_id, "debit", cost, description, booking_id=booking.get("id"))
