import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging

import streamlit as st
import pandas as pd
import numpy as np
import plotly.graph_objects as go
import plotly.express as px

from fincore.config import configure_logging, get_seed_path
from fincore.domain import BudgetPeriod, GoalCategory, GoalPriority, GoalStatus, InsightKind, ProgressStatus
from fincore.metrics import (
    budget_line,
    budget_summary,
    days_remaining,
    describe_days_remaining,
    financial_overview,
    goal_progress,
    goal_summary,
    clamp_percentage,
    total_of,
)
from fincore.transforms import (
    load_seed,
    add_record,
    delete_record,
    delete_expense,
    record_expense,
    adjust_budget_spent,
    update_goal_progress,
    set_goal_status,
    goals_with_status,
    pick_budget_color,
    new_record_id,
    savings_for_expenses,
)
from fincore.functional import validate_income, validate_expense, validate_budget, validate_goal
from fincore.filters import ALL_CATEGORIES, filter_expenses, unique_categories, sort_by_date
from fincore.lazy import lazy_top_categories
from fincore.services import ReportService
from fincore.async_reports import REPORT_WINDOWS, recent_periods, period_trends
from fincore.events import EventBus, register_default_handlers, EXPENSE_RECORDED, BUDGET_ADJUSTED, GOAL_UPDATED
from fincore.session import AuthError, InMemoryAuthBackend, SessionManager
from fincore.console import QUERY_TEMPLATES, run_query, sqlite_executor
from fincore.formatting import format_currency, format_percentage

configure_logging()
logger = logging.getLogger("fincore.app")

st.set_page_config(page_title="Finance Dashboard", layout="wide")

if "records" not in st.session_state:
    incomes, expenses, savings, budgets, goals = load_seed(get_seed_path())
    st.session_state.records = {
        "incomes": incomes,
        "expenses": expenses,
        "savings": savings,
        "budgets": budgets,
        "goals": goals,
    }
    logger.info("Dashboard loaded seed %s", get_seed_path())

if "session_manager" not in st.session_state:
    st.session_state.session_manager = SessionManager(InMemoryAuthBackend())

if "event_bus" not in st.session_state:
    st.session_state.event_bus = register_default_handlers(EventBus())

records = st.session_state.records
sessions: SessionManager = st.session_state.session_manager
bus: EventBus = st.session_state.event_bus


def store(**changes):
    records.update(changes)


def show_error(either):
    st.error(f"❌ {either.get_error()['message']}")


st.sidebar.markdown("### 👤 Account")
current = sessions.current_session()
if current:
    st.sidebar.caption(f"Signed in as **{current.username}**")
    if st.sidebar.button("Sign out"):
        sessions.logout()
        st.rerun()
else:
    st.sidebar.caption("Not signed in")

menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "💵 Income & Expenses", "🧾 Expense Tracker", "🎯 Budget Planner",
     "🏁 Goals", "📑 Reports", "🗄 SQL Console", "🔐 Account"]
)

if menu == "🏠 Overview":
    st.title("🏠 Financial Overview")
    ov = financial_overview(records["incomes"], records["expenses"], records["savings"])

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income", format_currency(ov.total_income))
    with k2:
        st.metric("Total Expenses", format_currency(ov.total_expenses))
        st.caption(f"{format_percentage(ov.expense_ratio)} of income")
    with k3:
        st.metric("Total Savings", format_currency(ov.total_savings))
        st.caption(f"{format_percentage(ov.savings_rate)} savings rate")
    with k4:
        st.metric("Available Budget", format_currency(ov.remaining_budget))
        st.caption("Over budget!" if ov.remaining_budget < 0 else "Remaining")

    st.subheader("💡 Smart Insights")
    show = {
        InsightKind.WARNING: st.warning,
        InsightKind.SUCCESS: st.success,
        InsightKind.INFO: st.info,
        InsightKind.NEUTRAL: st.info,
    }[ov.insight.kind]
    show(f"**{ov.insight.title}** {ov.insight.message}")

    c1, c2 = st.columns(2)
    with c1:
        st.write(f"Expense Ratio: {format_percentage(ov.expense_ratio)}")
        st.progress(clamp_percentage(ov.expense_ratio) / 100)
        st.caption("Recommended: Below 80%")
    with c2:
        st.write(f"Savings Rate: {format_percentage(ov.savings_rate)}")
        st.progress(clamp_percentage(ov.savings_rate) / 100)
        st.caption("Recommended: Above 20%")

    periods = recent_periods(records["incomes"], "6months")
    trends = asyncio.run(period_trends(records["incomes"], records["expenses"], records["savings"], periods))
    if trends:
        fig_ts = go.Figure()
        fig_ts.add_trace(go.Scatter(x=periods, y=[trends[p].income for p in periods], mode="lines+markers", name="Income", fill="tozeroy"))
        fig_ts.add_trace(go.Scatter(x=periods, y=[trends[p].expenses for p in periods], mode="lines+markers", name="Expenses", fill="tozeroy"))
        fig_ts.update_layout(title="Financial Trends", template="plotly_dark", margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig_ts, use_container_width=True)

        fig_sav = px.bar(x=periods, y=[trends[p].savings for p in periods], labels={"x": "Period", "y": "Savings"}, title="Savings Progress", template="plotly_dark")
        st.plotly_chart(fig_sav, use_container_width=True)
    else:
        st.info("No income recorded yet.")

elif menu == "💵 Income & Expenses":
    st.title("💵 Income & Expenses")
    col_inc, col_exp = st.columns(2)

    with col_inc:
        st.subheader("Record Salary")
        with st.form("income_form", clear_on_submit=True):
            month = st.text_input("Period", placeholder="e.g. Januari 2024")
            amount = st.number_input("Salary amount", min_value=0.0, step=100000.0, format="%.0f")
            submitted = st.form_submit_button("Save salary")
        if submitted:
            result = validate_income(new_record_id(), month, amount)
            if result.is_right():
                store(incomes=add_record(records["incomes"], result.get_or_else(None)))
                st.success("✅ Salary saved")
            else:
                show_error(result)

    with col_exp:
        st.subheader("Record Expense")
        incomes = records["incomes"]
        if not incomes:
            st.info("Record a salary first.")
        else:
            labels = {f"{i.month} - {format_currency(i.amount)}": i.id for i in reversed(incomes)}
            with st.form("expense_form", clear_on_submit=True):
                income_label = st.selectbox("Salary period", list(labels.keys()))
                category = st.text_input("Category", placeholder="e.g. makan, transport, tabungan")
                st.caption('*Use the word "tabungan" to send the expense to savings automatically')
                exp_amount = st.number_input("Amount", min_value=0.0, step=10000.0, format="%.0f")
                exp_date = st.date_input("Date")
                description = st.text_input("Description (optional)")
                submitted_exp = st.form_submit_button("Save expense")
            if submitted_exp:
                result = validate_expense(
                    new_record_id(), category, exp_amount, labels[income_label], incomes,
                    expense_date=exp_date.isoformat(), description=description,
                )
                if result.is_right():
                    expense = result.get_or_else(None)
                    new_expenses, new_savings = record_expense(records["expenses"], records["savings"], expense)
                    store(expenses=new_expenses, savings=new_savings)
                    for out in bus.publish(EXPENSE_RECORDED, {"category": expense.category, "amount": expense.amount}):
                        st.success(f"✅ {out['notice']}")
                else:
                    show_error(result)

elif menu == "🧾 Expense Tracker":
    st.title("🧾 Expense Tracker")
    expenses = records["expenses"]

    col1, col2, col3 = st.columns(3)
    with col1:
        search = st.text_input("Search expenses")
    with col2:
        category = st.selectbox("Category", [ALL_CATEGORIES] + unique_categories(expenses))
    with col3:
        dates = [e.date for e in expenses]
        if dates:
            start_default = pd.Timestamp(min(dates)).date()
            end_default = pd.Timestamp(max(dates)).date()
        else:
            start_default = end_default = pd.Timestamp.today().date()
        date_range = st.date_input("Date Range", value=(start_default, end_default), key="exp_date_range")

    start = date_range[0].isoformat() if len(date_range) > 0 else None
    end = date_range[1].isoformat() if len(date_range) > 1 else None
    filtered = sort_by_date(filter_expenses(expenses, search, category, start, end))
    total = total_of(filtered)

    st.metric(f"Showing {len(filtered)} expenses", format_currency(total))

    if filtered:
        df = pd.DataFrame([{
            "Date": e.date,
            "Category": e.category,
            "Description": e.description or "-",
            "Amount": format_currency(e.amount),
        } for e in filtered])
        st.table(df)
        csv = df.to_csv(index=False)
        st.download_button("⬇ Export CSV", csv, file_name="expenses.csv", mime="text/csv")

        to_delete = st.selectbox("Delete expense", [f"{e.date} {e.category} {format_currency(e.amount)}|{e.id}" for e in filtered])
        if st.button("🗑 Delete", key="btn_delete_expense"):
            new_expenses, new_savings = delete_expense(expenses, records["savings"], to_delete.rsplit("|", 1)[1])
            store(expenses=new_expenses, savings=new_savings)
            st.success("Expense deleted")
            st.rerun()
    else:
        st.info("No expenses found matching your criteria")

elif menu == "🎯 Budget Planner":
    st.title("🎯 Budget Planner")
    budgets = records["budgets"]

    with st.expander("➕ Add Budget"):
        with st.form("budget_form", clear_on_submit=True):
            b_category = st.text_input("Category", placeholder="e.g. Food & Dining")
            b_amount = st.number_input("Budget Amount", min_value=0.0, step=100000.0, format="%.0f")
            b_period = st.selectbox("Period", [p.value for p in BudgetPeriod], index=1)
            b_submit = st.form_submit_button("Create Budget")
        if b_submit:
            result = validate_budget(new_record_id(), b_category, b_amount, b_period, pick_budget_color())
            if result.is_right():
                store(budgets=add_record(budgets, result.get_or_else(None)))
                st.success("Budget created successfully!")
                st.rerun()
            else:
                show_error(result)

    summary = budget_summary(budgets)
    c1, c2, c3 = st.columns(3)
    c1.metric("Total Budget", format_currency(summary.total_budget))
    c2.metric("Total Spent", format_currency(summary.total_spent))
    c3.metric("Remaining", format_currency(summary.remaining))
    st.write(f"Overall Progress: {format_percentage(summary.progress)}")
    st.progress(clamp_percentage(summary.progress) / 100)

    badges = {
        ProgressStatus.OVER: "🔴 Over Budget",
        ProgressStatus.NEAR_LIMIT: "🟠 Near Limit",
        ProgressStatus.ON_TRACK: "🟢 On Track",
    }
    if not budgets:
        st.info("No budgets yet. Create your first budget to start tracking your spending limits.")
    cols = st.columns(3)
    for idx, b in enumerate(budgets):
        line = budget_line(b)
        with cols[idx % 3]:
            st.markdown(f"<span style='color:{b.color}'>●</span> **{b.category}** · {b.period.value}", unsafe_allow_html=True)
            st.caption(badges[line.status])
            st.write(f"Spent {format_currency(b.spent_amount)} of {format_currency(b.budget_amount)}")
            st.write(f"Remaining: {format_currency(line.remaining)}")
            st.progress(line.display_percentage / 100)
            st.caption(format_percentage(line.percentage))
            delta = st.number_input("Adjust spent", step=50000.0, format="%.0f", key=f"delta_{b.id}")
            a1, a2 = st.columns(2)
            if a1.button("Apply", key=f"apply_{b.id}"):
                updated = adjust_budget_spent(budgets, b.id, delta)
                store(budgets=updated)
                changed = next(x for x in updated if x.id == b.id)
                for out in bus.publish(BUDGET_ADJUSTED, {
                    "category": changed.category,
                    "budget_amount": changed.budget_amount,
                    "spent_amount": changed.spent_amount,
                }):
                    if "alert" in out:
                        st.warning(out["alert"])
                st.rerun()
            if a2.button("🗑", key=f"del_{b.id}"):
                store(budgets=delete_record(budgets, b.id))
                st.rerun()

elif menu == "🏁 Goals":
    st.title("🏁 Goal Tracker")
    goals = records["goals"]
    icons = {
        GoalCategory.SAVINGS: "💰",
        GoalCategory.INVESTMENT: "📈",
        GoalCategory.DEBT: "💳",
        GoalCategory.PURCHASE: "🛍️",
        GoalCategory.EMERGENCY: "🚨",
    }

    with st.expander("➕ Add Goal"):
        with st.form("goal_form", clear_on_submit=True):
            g_title = st.text_input("Title")
            g_desc = st.text_area("Description")
            g_target = st.number_input("Target Amount", min_value=0.0, step=1000000.0, format="%.0f")
            g_date = st.date_input("Target Date")
            g_cat = st.selectbox("Category", [c.value for c in GoalCategory])
            g_prio = st.selectbox("Priority", [p.value for p in GoalPriority], index=1)
            g_submit = st.form_submit_button("Create Goal")
        if g_submit:
            result = validate_goal(new_record_id(), g_title, g_target, g_date.isoformat(), g_cat, g_prio, g_desc)
            if result.is_right():
                store(goals=add_record(goals, result.get_or_else(None)))
                st.success("Goal created successfully!")
                st.rerun()
            else:
                show_error(result)

    gs = goal_summary(goals)
    c1, c2, c3 = st.columns(3)
    c1.metric("Active Goals", gs.active_count)
    c2.metric("Saved", f"{format_currency(gs.total_current)} / {format_currency(gs.total_target)}")
    c3.metric("Overall Progress", format_percentage(gs.progress))
    st.progress(clamp_percentage(gs.progress) / 100)

    for g in goals_with_status(goals, GoalStatus.ACTIVE) + goals_with_status(goals, GoalStatus.PAUSED):
        progress = goal_progress(g.current_amount, g.target_amount)
        days = days_remaining(g.target_date)
        st.markdown(f"### {icons[g.category]} {g.title}")
        st.caption(f"{g.category.value} · {g.priority.value} priority · {g.status.value}")
        if g.description:
            st.write(g.description)
        st.write(f"{format_currency(g.current_amount)} of {format_currency(g.target_amount)} ({format_percentage(progress)})")
        st.progress(progress / 100)
        (st.error if days < 0 else st.caption)(f"📅 {g.target_date}: {describe_days_remaining(days)}")

        b1, b2, b3, b4, b5 = st.columns(5)
        for col, delta, label in ((b1, 100000, "+100K"), (b2, 500000, "+500K"), (b3, -100000, "-100K")):
            if col.button(label, key=f"{g.id}_{delta}"):
                updated = update_goal_progress(goals, g.id, delta)
                changed = next(x for x in updated if x.id == g.id)
                for out in bus.publish(GOAL_UPDATED, {
                    "title": changed.title,
                    "current_amount": changed.current_amount,
                    "target_amount": changed.target_amount,
                }):
                    if "notice" in out:
                        # reached goals leave the active list for the completed section below
                        updated = set_goal_status(updated, g.id, GoalStatus.COMPLETED)
                        st.toast(f"🎉 {out['notice']}, moved to Completed Goals")
                        st.balloons()
                store(goals=updated)
                st.rerun()
        if b4.button("⏯", key=f"{g.id}_pause"):
            next_status = GoalStatus.ACTIVE if g.status == GoalStatus.PAUSED else GoalStatus.PAUSED
            store(goals=set_goal_status(goals, g.id, next_status))
            st.rerun()
        if b5.button("🗑", key=f"{g.id}_del"):
            store(goals=delete_record(goals, g.id))
            st.rerun()
        st.divider()

    completed = goals_with_status(goals, GoalStatus.COMPLETED)
    if completed:
        st.subheader(f"✅ Completed Goals ({len(completed)})")
        for g in completed:
            st.write(f"{icons[g.category]} **{g.title}**: {format_currency(g.current_amount)}")

elif menu == "📑 Reports":
    st.title("📑 Financial Reports")
    window = st.selectbox("Period", list(REPORT_WINDOWS.keys()), index=1)
    show_steps = st.checkbox("Show intermediate steps", value=False)

    periods = recent_periods(records["incomes"], window)
    trends = asyncio.run(period_trends(records["incomes"], records["expenses"], records["savings"], periods))
    period_ids = {i.id for i in records["incomes"] if i.month in periods}
    period_expenses = tuple(e for e in records["expenses"] if e.income_id in period_ids)
    period_savings = savings_for_expenses(records["savings"], period_expenses)
    period_incomes = tuple(i for i in records["incomes"] if i.month in periods)

    rpt = ReportService().financial_report(period_incomes, period_expenses, period_savings)
    res = rpt["result"]

    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Total Income", format_currency(res["total_income"]))
    k2.metric("Total Expenses", format_currency(res["total_expenses"]))
    k3.metric("Net", format_currency(res["net"]))
    k4.metric("Savings Rate", format_percentage(res["savings_rate"]))

    df_trend = pd.DataFrame({
        "period": periods,
        "income": np.array([trends[p].income for p in periods], dtype=float) if periods else np.zeros(0),
        "expenses": np.array([trends[p].expenses for p in periods], dtype=float) if periods else np.zeros(0),
        "savings": np.array([trends[p].savings for p in periods], dtype=float) if periods else np.zeros(0),
    })
    if not df_trend.empty:
        fig = px.area(df_trend, x="period", y=["income", "expenses"], title="Monthly Trends", template="plotly_dark")
        st.plotly_chart(fig, use_container_width=True)
        fig_s = px.line(df_trend, x="period", y="savings", markers=True, title="Savings Progress", template="plotly_dark")
        st.plotly_chart(fig_s, use_container_width=True)

    shares = res["categories"]
    if shares:
        df_cat = pd.DataFrame([{"Category": s.category, "Amount": s.amount, "Count": s.count, "Share %": s.percentage} for s in shares])
        fig_pie = px.pie(df_cat, values="Amount", names="Category", title="Expense Categories")
        st.plotly_chart(fig_pie, use_container_width=True)

        st.subheader("Top Spending Categories")
        for s in lazy_top_categories(period_expenses, 5):
            st.write(f"**{s.category}**: {format_currency(s.amount)} ({s.percentage}%)")
        st.download_button("⬇ Export CSV", df_cat.to_csv(index=False), file_name="expense_categories.csv")
    else:
        st.info("No expenses in the selected period")

    if show_steps:
        with st.expander("Intermediate steps", expanded=False):
            for s in rpt["steps"]:
                st.write(s["aggregator"], s["output"])

elif menu == "🗄 SQL Console":
    st.title("🗄 SQL Console")
    st.caption("Tables: incomes, expenses, savings, budgets, goals")

    template = st.selectbox("Template", ["(none)"] + list(QUERY_TEMPLATES.keys()))
    default_sql = QUERY_TEMPLATES.get(template, "")
    sql = st.text_area("SQL", value=default_sql, height=220)

    if st.button("▶ Run query"):
        executor = sqlite_executor(
            records["incomes"], records["expenses"], records["savings"], records["budgets"], records["goals"],
        )
        result = run_query(executor, sql)
        if result.is_right():
            qr = result.get_or_else(None)
            st.success(f"Query executed: {qr.row_count} rows, {qr.column_count} columns")
            if qr.row_count:
                st.dataframe(qr.to_frame(), use_container_width=True)
            else:
                st.info("Query returned no rows")
        else:
            show_error(result)

elif menu == "🔐 Account":
    st.title("🔐 Account")
    if current is None:
        tab_in, tab_up = st.tabs(["Sign in", "Sign up"])
        with tab_in:
            with st.form("signin_form"):
                username = st.text_input("Username")
                password = st.text_input("Password", type="password")
                go_in = st.form_submit_button("Sign in")
            if go_in:
                try:
                    sessions.login(username, password)
                    st.rerun()
                except AuthError as e:
                    st.error(str(e))
        with tab_up:
            with st.form("signup_form"):
                new_user = st.text_input("Username")
                new_pass = st.text_input("Password", type="password")
                go_up = st.form_submit_button("Create account")
            if go_up:
                try:
                    sessions.sign_up(new_user, new_pass)
                    st.success("Account created, you can sign in now")
                except AuthError as e:
                    st.error(str(e))
    else:
        st.write(f"Signed in as **{current.username}** since {current.started_at}")
        st.subheader("Change Password")
        with st.form("password_form", clear_on_submit=True):
            cur_pw = st.text_input("Current password", type="password")
            new_pw = st.text_input("New password", type="password")
            confirm_pw = st.text_input("Confirm new password", type="password")
            go_pw = st.form_submit_button("Change password")
        if go_pw:
            try:
                sessions.change_password(cur_pw, new_pw, confirm_pw)
                st.success("Password changed successfully")
            except AuthError as e:
                st.error(str(e))
