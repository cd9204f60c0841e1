"""
Streamlit Dashboard for the Portfolio Tracker.

Pages:
- Overview: totals, ROI/XIRR, top/bottom stock performers, category mix, what-if
- Investments: add, browse and remove holdings
- Transactions: record and review buy/sell/bonus/split/dividend entries

All figures come from the analytics layer; this module only renders them.
"""

import time
from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from analytics.scenario import WHAT_IF_PRESETS, project_what_if
from analytics.summary import performers_frame
from config import config
from data.stock_metadata import search_stocks
from db import init_db, InvestmentCategory, TransactionType
from services.auth_service import authenticate, display_name_for, register_user
from services.investment_service import (
    ALL_CATEGORIES,
    add_investment,
    get_portfolio_summary,
    list_investments,
    remove_investment,
)
from services.transaction_service import (
    add_transaction,
    compute_total_amount,
    delete_transaction,
    list_linkable_investments,
    list_transactions,
    lookup_symbol,
)


# Initialize database on app start
init_db()


def configure_page():
    """Configure Streamlit page settings."""
    st.set_page_config(
        page_title=config.ui.page_title,
        page_icon="📊",
        layout=config.ui.layout,
        initial_sidebar_state="expanded",
    )


def format_currency(value: float) -> str:
    """Format value as currency."""
    return f"{config.ui.currency_symbol}{value:,.{config.ui.decimal_places}f}"


def format_percentage(value: float) -> str:
    """Format an already-scaled percentage value."""
    return f"{value:.{config.ui.percentage_decimal_places}f}%"


def current_user_id() -> int | None:
    return st.session_state.get("user_id")


def render_auth_page():
    """Sign-in and registration forms."""
    st.title(f"📊 {config.ui.page_title}")
    st.caption("Track every investment in one place.")

    sign_in_tab, register_tab = st.tabs(["Sign In", "Create Account"])

    with sign_in_tab:
        with st.form("sign_in_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In", type="primary")

        if submitted:
            result = authenticate(email, password)
            if result.success:
                st.session_state.user_id = result.user.id
                st.session_state.display_name = display_name_for(result.user)
                st.rerun()
            else:
                st.error(result.message)

    with register_tab:
        with st.form("register_form"):
            name = st.text_input("Display Name (optional)")
            email = st.text_input("Email", key="register_email")
            password = st.text_input("Password", type="password", key="register_password")
            confirm = st.text_input("Confirm Password", type="password")
            submitted = st.form_submit_button("Create Account", type="primary")

        if submitted:
            if password != confirm:
                st.error("❌ Passwords do not match")
            else:
                result = register_user(email, password, display_name=name)
                if result.success:
                    st.success(f"{result.message}. You can sign in now.")
                else:
                    st.error(result.message)


def render_sidebar() -> str:
    """Render sidebar navigation and return selected page."""
    st.sidebar.title("📊 Portfolio Tracker")
    st.sidebar.caption(f"👤 {st.session_state.get('display_name', 'User')}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigation",
        ["Overview", "Investments", "Transactions"],
        label_visibility="collapsed",
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("Sign Out"):
        for key in ("user_id", "display_name"):
            st.session_state.pop(key, None)
        st.rerun()

    return page


def _render_performers(title: str, rows):
    st.markdown(f"**{title}**")
    frame = performers_frame(rows, category=InvestmentCategory.STOCK)
    if frame.empty:
        st.caption("No stock holdings yet.")
        return
    frame["Investment"] = frame["Investment"].apply(format_currency)
    frame["Current Value"] = frame["Current Value"].apply(format_currency)
    frame["Return %"] = frame["Return %"].apply(format_percentage)
    st.dataframe(frame, hide_index=True)


def render_overview_page():
    """
    Render Portfolio Overview page.

    Shows:
    - Summary metrics for the selected category
    - Top and bottom stock performers
    - Category allocation
    - What-if projection
    """
    st.header(f"📌 Welcome back, {st.session_state.get('display_name', 'User')}")

    category_filter = st.selectbox(
        "Category",
        [ALL_CATEGORIES] + InvestmentCategory.choices(),
        help="Totals, returns and allocation honour this filter; performers rank all holdings.",
    )

    if "what_if_pct" not in st.session_state:
        st.session_state.what_if_pct = 0.0

    summary = get_portfolio_summary(
        current_user_id(),
        category_filter,
        what_if_pct=st.session_state.what_if_pct,
    )

    if summary.totals.position_count == 0:
        st.info("No investments yet. Add your first one on the Investments page.")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Invested", format_currency(summary.total_invested))
    col2.metric(
        "Current Value",
        format_currency(summary.total_current),
        format_currency(summary.total_gain),
    )
    col3.metric("Holdings", f"{summary.totals.position_count}")

    col4, col5, col6 = st.columns(3)
    col4.metric("ROI", format_percentage(summary.roi), help="(Current − Invested) / Invested")
    col5.metric(
        "XIRR",
        format_percentage(summary.xirr),
        help="Annualized return estimated from purchase dates and today's value",
    )
    if summary.xirr_solved is not None:
        col6.metric(
            "XIRR (solved)",
            format_percentage(summary.xirr_solved),
            help="Rate that sets the net present value of all cash flows to zero",
        )

    st.divider()

    top_col, bottom_col = st.columns(2)
    with top_col:
        _render_performers("🏆 Top Performers", summary.performers.top)
    with bottom_col:
        _render_performers("📉 Bottom Performers", summary.performers.bottom)

    st.divider()

    chart_col, what_if_col = st.columns(2)

    with chart_col:
        st.subheader("📊 Allocation by Category")
        breakdown = pd.DataFrame(
            [{"Category": name, "Value": value} for name, value in summary.breakdown.items() if value > 0]
        )
        if breakdown.empty:
            st.caption("Nothing to chart yet.")
        else:
            fig = px.pie(
                breakdown,
                values="Value",
                names="Category",
                hole=0.4,
                color_discrete_sequence=px.colors.qualitative.Set2,
            )
            fig.update_traces(
                textposition="inside",
                textinfo="percent+label",
                hovertemplate=(
                    f"<b>%{{label}}</b><br>Value: {config.ui.currency_symbol}%{{value:,.0f}}"
                    "<br>Weight: %{percent}<extra></extra>"
                ),
            )
            fig.update_layout(showlegend=False, margin=dict(t=30, b=20, l=20, r=20), height=320)
            st.plotly_chart(fig)

    with what_if_col:
        st.subheader("🔮 What If")
        delta = st.radio(
            "Market move",
            WHAT_IF_PRESETS,
            index=WHAT_IF_PRESETS.index(0.0) if 0.0 in WHAT_IF_PRESETS else 0,
            format_func=lambda pct: f"{pct:+.0f}%",
            horizontal=True,
        )
        if delta != st.session_state.what_if_pct:
            st.session_state.what_if_pct = delta
            st.rerun()

        what_if = summary.what_if or project_what_if(summary.total_current, delta)
        st.metric(
            "Projected Value",
            format_currency(what_if.what_if_value),
            format_currency(what_if.impact),
        )


def render_investments_page():
    """Add, browse and remove holdings."""
    st.header("💼 Investments")
    user_id = current_user_id()

    list_col, form_col = st.columns([3, 2])

    with form_col:
        st.subheader("➕ Add Investment")
        with st.form("add_investment_form", clear_on_submit=True):
            category = st.selectbox("Category *", InvestmentCategory.choices())
            name = st.text_input("Name *", placeholder="e.g. Infosys, SBI FD, PPF")
            symbol = st.text_input("Symbol (Stock/ETF)", placeholder="e.g. INFY")
            amount = st.number_input("Amount Invested", min_value=0.0, value=0.0, step=100.0)
            current = st.number_input("Current Value", min_value=0.0, value=0.0, step=100.0)
            units = st.number_input("Units", min_value=0.0, value=0.0, step=1.0)
            purchase_price = st.number_input("Purchase Price", min_value=0.0, value=0.0, step=0.01)
            purchased = st.date_input("Purchase Date", value=None)
            maturity = st.date_input("Maturity Date", value=None)
            institution = st.text_input("Institution")
            notes = st.text_area("Notes")
            submitted = st.form_submit_button("Add", type="primary")

        if submitted:
            result = add_investment(
                user_id,
                category,
                name,
                symbol=symbol or None,
                amount_invested=amount,
                current_value=current,
                units=units or None,
                purchase_price=purchase_price or None,
                date_purchased=purchased,
                maturity_date=maturity,
                institution=institution,
                notes=notes,
            )
            if result.success:
                st.success(result.message)
                time.sleep(1)
                st.rerun()
            else:
                st.error(result.message)

    with list_col:
        category_filter = st.selectbox("Show", [ALL_CATEGORIES] + InvestmentCategory.choices())
        investments = list_investments(user_id, category_filter)
        if not investments:
            st.info("No investments in this view.")
            return

        rows = [
            {
                "ID": inv.id,
                "Category": inv.category.value,
                "Name": inv.name,
                "Symbol": inv.symbol or "",
                "Units": inv.units,
                "Invested": format_currency(float(inv.amount_invested)),
                "Current": format_currency(float(inv.current_value)),
                "Purchased": inv.date_purchased,
                "Institution": inv.institution or "",
            }
            for inv in investments
        ]
        st.dataframe(pd.DataFrame(rows), hide_index=True)

        with st.expander("🗑️ Remove an investment"):
            options = {f"#{inv.id} {inv.name} ({inv.category.value})": inv.id for inv in investments}
            choice = st.selectbox("Investment", list(options), index=None)
            if st.button("Remove", disabled=choice is None):
                result = remove_investment(user_id, options[choice])
                if result.success:
                    st.success(result.message)
                    time.sleep(1)
                    st.rerun()
                else:
                    st.error(result.message)


def render_transactions_page():
    """Record and review ledger transactions."""
    st.header("🧾 Transactions")
    user_id = current_user_id()

    form_col, list_col = st.columns([2, 3])

    with form_col:
        st.subheader("➕ New Transaction")

        query = st.text_input("Find a stock", placeholder="Symbol or company name")
        matches = search_stocks(query) if query else []
        if matches:
            picked = st.selectbox(
                "Matches",
                matches,
                format_func=lambda row: f"{row['symbol']} - {row['name']}",
            )
            if st.button("Use this stock"):
                found = lookup_symbol(picked["symbol"])
                st.session_state.tx_symbol = found.symbol
                st.session_state.tx_stock_name = found.stock_name
                st.session_state.tx_price = found.price_per_unit or 0.0
                st.rerun()

        linkable = list_linkable_investments(user_id)
        link_options = {"(none)": None}
        link_options.update({f"#{inv.id} {inv.name} ({inv.category.value})": inv.id for inv in linkable})

        tx_type = st.selectbox("Type *", [t.value for t in TransactionType], format_func=str.upper)
        symbol = st.text_input("Symbol *", value=st.session_state.get("tx_symbol", ""))
        stock_name = st.text_input("Stock Name", value=st.session_state.get("tx_stock_name", ""))
        tx_date = st.date_input("Date", value=date.today())
        linked = st.selectbox("Linked Investment", list(link_options))

        quantity = price = None
        split_ratio = bonus_ratio = None
        total = None
        brokerage = stt = other = 0.0

        if tx_type in (TransactionType.BUY.value, TransactionType.SELL.value):
            quantity = st.number_input("Quantity *", min_value=0.0, value=0.0, step=1.0)
            price = st.number_input(
                "Price per Unit *",
                min_value=0.0,
                value=float(st.session_state.get("tx_price", 0.0)),
                step=0.05,
            )
            brokerage = st.number_input("Brokerage", min_value=0.0, value=0.0, step=1.0)
            stt = st.number_input("STT", min_value=0.0, value=0.0, step=1.0)
            other = st.number_input("Other Charges", min_value=0.0, value=0.0, step=1.0)
            st.metric("Total", format_currency(compute_total_amount(tx_type, quantity, price, brokerage, stt, other)))
        elif tx_type == TransactionType.SPLIT.value:
            split_ratio = st.text_input("Split Ratio *", placeholder="1:2")
        elif tx_type == TransactionType.BONUS.value:
            bonus_ratio = st.text_input("Bonus Ratio *", placeholder="1:1")
        else:
            total = st.number_input("Dividend Amount", min_value=0.0, value=0.0, step=1.0)

        notes = st.text_area("Notes")

        if st.button("Save Transaction", type="primary"):
            result = add_transaction(
                user_id,
                tx_type,
                symbol,
                transaction_date=tx_date,
                stock_name=stock_name,
                quantity=quantity,
                price_per_unit=price,
                total_amount=total,
                split_ratio=split_ratio,
                bonus_ratio=bonus_ratio,
                brokerage_fee=brokerage,
                stt_charges=stt,
                other_charges=other,
                notes=notes,
                investment_id=link_options[linked],
            )
            if result.success:
                for key in ("tx_symbol", "tx_stock_name", "tx_price"):
                    st.session_state.pop(key, None)
                st.success(result.message)
                time.sleep(1)
                st.rerun()
            else:
                st.error(result.message)

    with list_col:
        st.subheader("📒 History")
        transactions = list_transactions(user_id)
        if not transactions:
            st.info("No transactions recorded yet.")
            return

        rows = [
            {
                "ID": tx.id,
                "Date": tx.transaction_date,
                "Type": tx.transaction_type.value.upper(),
                "Symbol": tx.symbol,
                "Name": tx.stock_name or "",
                "Qty": tx.quantity,
                "Price": tx.price_per_unit,
                "Charges": tx.total_charges,
                "Total": float(tx.total_amount) if tx.total_amount is not None else None,
                "Ratio": tx.split_ratio or tx.bonus_ratio or "",
            }
            for tx in transactions
        ]
        st.dataframe(pd.DataFrame(rows), hide_index=True)

        with st.expander("🗑️ Delete a transaction"):
            options = {
                f"#{tx.id} {tx.transaction_date} {tx.transaction_type.value.upper()} {tx.symbol}": tx.id
                for tx in transactions
            }
            choice = st.selectbox("Transaction", list(options), index=None)
            if st.button("Delete", disabled=choice is None):
                result = delete_transaction(user_id, options[choice])
                if result.success:
                    st.success(result.message)
                    time.sleep(1)
                    st.rerun()
                else:
                    st.error(result.message)


def main():
    """Main application entry point."""
    configure_page()

    if current_user_id() is None:
        render_auth_page()
        return

    page = render_sidebar()

    if page == "Overview":
        render_overview_page()
    elif page == "Investments":
        render_investments_page()
    elif page == "Transactions":
        render_transactions_page()


if __name__ == "__main__":
    main()
