import streamlit as st

from laundrylink.auth import SignedInUser
from laundrylink.config import AppConfig
from laundrylink.db.models import WALLET_TRANSACTIONS
from laundrylink.ui import badge, invalidate, money, notify_error, notify_success, watched_fetch
from laundrylink.wallet import add_money, balance_of, fetch_transactions, fetch_wallet, signed_amount


def render_wallet(cfg: AppConfig, client, user: SignedInUser) -> None:
    currency = cfg.app.currency

    try:
        wallet, transactions = watched_fetch(
            cfg, "wallet-updates", WALLET_TRANSACTIONS,
            lambda: (fetch_wallet(client, user.id), fetch_transactions(client, user.id)),
            filter=f"user_id=eq.{user.id}",
        )
    except Exception as e:
        notify_error("Error loading wallet", e)
        return

    with st.container(border=True):
        st.subheader("👛 Laundry Wallet")
        st.metric("Available Balance", money(balance_of(wallet), currency))

        cols = st.columns(len(cfg.app.top_up_amounts))
        for col, amount in zip(cols, cfg.app.top_up_amounts):
            if col.button(f"➕ Add {currency}{amount}", key=f"topup-{amount}"):
                try:
                    add_money(client, user.id, wallet, amount, currency)
                except Exception as e:
                    notify_error("Error adding money", e)
                    return
                invalidate("wallet-updates")
                notify_success("Money added successfully!", f"{currency}{amount} has been added to your wallet")
                st.rerun()

    st.subheader("Recent Transactions")
    if not transactions:
        st.caption("No transactions yet")
        return

    for tx in transactions:
        amount = signed_amount(tx)
        color = "#22c55e" if amount >= 0 else "#ef4444"
        sign = "+" if amount >= 0 else "-"
        with st.container(border=True):
            c1, c2 = st.columns([4, 1])
            c1.markdown(f"{'📈' if amount >= 0 else '📉'} **{tx.get('description') or tx.get('type')}**")
            c1.caption(str(tx.get("created_at") or "")[:16].replace("T", " "))
            c2.markdown(badge(f"{sign}{money(abs(amount), currency)}", color), unsafe_allow_html=True)
