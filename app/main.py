import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
from datetime import datetime, time as dtime

import pandas as pd
import plotly.express as px
import streamlit as st

from financeflow.aggregation import aggregate_by_period
from financeflow.config import configure_logging, load_settings
from financeflow.domain import (
    DAILY, MONTHLY, YEARLY, WEEK_RELATIVE,
    DateRange, NO_SPENDING,
)
from financeflow.export import EXPORT_MIME, export_bytes, export_filename
from financeflow.forecast import HttpForecastClient, predict_next_week
from financeflow.functional import validate_positive, validate_record
from financeflow.services import DashboardService, Snapshot, default_calculators, overview_calculators
from financeflow.store import (
    add_category, add_record, load_seed, remove_category,
    remove_record, replace_record, save_seed,
)

settings = load_settings(os.environ.get("FINANCEFLOW_CONFIG"))
configure_logging(settings.log_level)
logger = logging.getLogger("financeflow.app")

st.set_page_config(page_title="FinanceFlow", layout="wide")

if "ff_records" not in st.session_state:
    if os.path.exists(settings.seed_path):
        categories, records, budget = load_seed(settings.seed_path)
    else:
        categories, records, budget = ("Food", "Transport", "Rent", "Entertainment"), (), 0.0
    st.session_state.ff_categories = categories
    st.session_state.ff_records = records
    st.session_state.ff_budget = budget


def persist():
    save_seed(
        settings.seed_path,
        st.session_state.ff_categories,
        st.session_state.ff_records,
        st.session_state.ff_budget,
    )
    logger.info("Saved %d expenses to %s", len(st.session_state.ff_records), settings.seed_path)


def records_to_df(records):
    return pd.DataFrame([
        {"date": r.occurred_at, "category": r.category, "amount": r.amount}
        for r in records
    ], columns=["date", "category", "amount"])


def snapshot():
    return Snapshot(
        records=st.session_state.ff_records,
        categories=st.session_state.ff_categories,
        budget=st.session_state.ff_budget,
        now=datetime.now(),
    )


def filter_controls(key):
    col1, col2 = st.columns(2)
    with col1:
        use_range = st.checkbox("Filter by date", key=f"{key}_use_range")
        date_range = None
        if use_range:
            picked = st.date_input("Date Range", value=(), key=f"{key}_range")
            if len(picked) == 2:
                date_range = DateRange(start=picked[0], end=picked[1])
            elif len(picked) == 1:
                date_range = DateRange(start=picked[0])
    with col2:
        choice = st.selectbox(
            "Category", ["All"] + list(st.session_state.ff_categories), key=f"{key}_cat"
        )
    return date_range, (None if choice == "All" else choice)


def record_from_form(date, amount, category):
    raw = {
        "category": category,
        "amount": amount,
        "occurred_at": datetime.combine(date, dtime.min),
    }
    return validate_record(raw, st.session_state.ff_categories).bind(validate_positive)


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "🧾 Expenses", "🗂 Categories", "📊 Analytics", "🔮 Forecast"]
)

st.sidebar.markdown("### 💰 Budget")
new_budget = st.sidebar.number_input(
    "Monthly budget", min_value=0.0, value=float(st.session_state.ff_budget), step=50.0
)
if new_budget != st.session_state.ff_budget:
    st.session_state.ff_budget = new_budget
    persist()

if menu == "🏠 Overview":
    st.title("🏠 Overview")
    rpt = DashboardService(overview_calculators()).report(snapshot())
    res = rpt["result"]
    budget = res["budget"]

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Expenses", res["count"])
    with k2:
        st.metric("Total Spending", f"${res['total']:,.2f}")
    with k3:
        st.metric("Budget", f"${budget.budget:,.2f}")
    with k4:
        st.metric("Remaining", f"${budget.remaining:,.2f}")

    if budget.budget > 0:
        st.progress(min(1.0, budget.used_ratio))
        if budget.exceeded:
            st.warning(f"⚠️ You have exceeded your budget by ${-budget.remaining:,.2f}")

    st.subheader("💡 Insights")
    i1, i2, i3 = st.columns(3)
    top = res["top_category"]
    with i1:
        st.metric("Top Category", top if top == NO_SPENDING else f"{top[0]} (${top[1]:,.2f})")
    with i2:
        st.metric("Average Daily Spend", f"${res['average_daily_spend']:,.2f}")
    with i3:
        st.metric("Most Active Day", res["most_active_weekday"])

    if res["by_category"]:
        df_cat = pd.DataFrame(res["by_category"], columns=["Category", "Total", "Share"])
        fig = px.pie(df_cat, values="Total", names="Category", title="Spending by Category")
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No expenses yet. Add one from the Expenses page.")

    for err in rpt["errors"]:
        st.error(err)

elif menu == "🧾 Expenses":
    st.title("🧾 Expenses")

    st.subheader("➕ Add Expense")
    with st.form("add_expense", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            date = st.date_input("Date")
        with col2:
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        with col3:
            category = st.selectbox("Category", list(st.session_state.ff_categories))
        submitted = st.form_submit_button("Add Expense")

        if submitted:
            result = record_from_form(date, amount, category)
            if result.is_right():
                st.session_state.ff_records = add_record(
                    st.session_state.ff_records, result.get_or_else(None)
                )
                persist()
                st.success("✅ Expense added!")
                st.rerun()
            else:
                st.error(f"❌ {result.get_error()['message']}")

    st.divider()

    st.subheader("📋 Expense List")
    date_range, category = filter_controls("expenses")
    rpt = DashboardService([]).report(snapshot(), date_range, category)
    filtered = rpt["filtered"]

    if filtered:
        disp = records_to_df(filtered)
        disp["date"] = pd.to_datetime(disp["date"]).dt.strftime("%Y-%m-%d")
        disp["amount"] = disp["amount"].map(lambda x: f"${x:,.2f}")
        st.table(disp)
        st.download_button(
            "⬇ Export CSV",
            export_bytes(filtered),
            file_name=export_filename(datetime.now()),
            mime=EXPORT_MIME,
        )
    else:
        st.info("No expenses match the selected filters")

    st.divider()

    records = st.session_state.ff_records
    if records:
        st.subheader("✏️ Edit or Delete")
        labels = [
            f"{i + 1}. {r.occurred_at:%Y-%m-%d} · {r.category} · ${r.amount:,.2f}"
            for i, r in enumerate(records)
        ]
        idx = st.selectbox("Expense", range(len(records)), format_func=lambda i: labels[i])
        current = records[idx]
        with st.form("edit_expense"):
            col1, col2, col3 = st.columns(3)
            cats = list(st.session_state.ff_categories)
            with col1:
                e_date = st.date_input("Date", value=current.occurred_at.date(), key=f"edit_date_{idx}")
            with col2:
                e_amount = st.number_input("Amount", min_value=0.0, value=float(current.amount), step=1.0, key=f"edit_amount_{idx}")
            with col3:
                e_cat = st.selectbox(
                    "Category", cats,
                    index=cats.index(current.category) if current.category in cats else 0,
                    key=f"edit_cat_{idx}",
                )
            save = st.form_submit_button("Save Changes")
            delete = st.form_submit_button("🗑 Delete")

        if save:
            result = record_from_form(e_date, e_amount, e_cat)
            if result.is_right():
                st.session_state.ff_records = replace_record(records, idx, result.get_or_else(None))
                persist()
                st.rerun()
            else:
                st.error(f"❌ {result.get_error()['message']}")
        if delete:
            st.session_state.ff_records = remove_record(records, idx)
            persist()
            st.rerun()

elif menu == "🗂 Categories":
    st.title("🗂 Categories")
    with st.form("add_category", clear_on_submit=True):
        name = st.text_input("New category")
        if st.form_submit_button("Add Category") and name:
            st.session_state.ff_categories = add_category(st.session_state.ff_categories, name)
            persist()
            st.rerun()

    for name in st.session_state.ff_categories:
        col_name, col_btn = st.columns([4, 1])
        col_name.write(name)
        if col_btn.button("Remove", key=f"rm_{name}"):
            result = remove_category(
                st.session_state.ff_categories, st.session_state.ff_records, name
            )
            if result.is_right():
                st.session_state.ff_categories = result.get_or_else(())
                persist()
                st.rerun()
            else:
                st.error(f"❌ {result.get_error()['message']}")

elif menu == "📊 Analytics":
    st.title("📊 Analytics")
    date_range, category = filter_controls("analytics")
    granularity = st.selectbox(
        "Group by",
        [DAILY, MONTHLY, YEARLY, WEEK_RELATIVE],
        index=1,
        format_func=lambda g: g.replace("_", " ").title(),
    )
    rpt = DashboardService(default_calculators(granularity)).report(snapshot(), date_range, category)
    res = rpt["result"]

    series = res.get(f"{granularity}_series", [])
    if series:
        df_series = pd.DataFrame(series, columns=["Period", "Total"])
        fig = px.bar(df_series, x="Period", y="Total", title="Spending over Time", template="plotly_dark")
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No data for the selected filters")

    if res.get("by_category"):
        df_cat = pd.DataFrame(res["by_category"], columns=["Category", "Total", "Share"])
        df_cat["Share"] = df_cat["Share"].map(lambda s: f"{s:.1%}")
        st.table(df_cat)

    for err in rpt["errors"]:
        st.error(err)

elif menu == "🔮 Forecast":
    st.title("🔮 Next Week Forecast")
    now = datetime.now()
    weekly = aggregate_by_period(st.session_state.ff_records, WEEK_RELATIVE, now)
    if weekly:
        df_week = pd.DataFrame(weekly, columns=["Week", "Total"])
        st.plotly_chart(px.line(df_week, x="Week", y="Total", markers=True), use_container_width=True)

    if st.button("Predict Next Week"):
        client = HttpForecastClient(
            settings.forecast_url,
            field=settings.forecast_field,
            timeout=settings.forecast_timeout,
        )
        with st.spinner("Contacting forecast service..."):
            prediction = asyncio.run(predict_next_week(
                st.session_state.ff_records, now, client, settings.forecast_timeout
            ))
        if isinstance(prediction, float):
            st.metric("Predicted Spending", f"${prediction:,.2f}")
        else:
            st.info(prediction)
