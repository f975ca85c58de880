"""
Streamlit Frontend for TipTrack

This is the screen a server or bartender opens at the end of a shift.

DESIGN PRINCIPLES:
1. Logging a shift takes seconds
2. Money is always shown in the user's currency
3. Warnings never block a save; only missing hours do
4. Nothing is deleted without an explicit confirmation

All numbers come from the calculation engine through the orchestrator;
this module only renders them.
"""

import asyncio
import json
from datetime import date, datetime
from decimal import Decimal

import streamlit as st

from tiptrack.calculator import CalculatorError, TipOutCalculator
from tiptrack.engine import (
    DAY_NAMES,
    format_currency,
    format_hours,
    format_percentage,
)
from tiptrack.models import Role, Shift, Theme, UserSettings, WeekStart
from tiptrack.orchestrator import (
    SettingsFlow,
    ShiftFlow,
    SummaryFlow,
    TemplateFlow,
    create_app_components,
)
from tiptrack.services.storage import StorageError
from tiptrack.validation import ShiftValidator


# Page configuration
st.set_page_config(
    page_title="TipTrack",
    page_icon="💵",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except StorageError as e:
        st.error(f"Could not open your data file: {e}")
        return create_app_components(use_storage=False)


def money(amount, settings: UserSettings) -> str:
    return format_currency(amount, settings.currency)


def main():
    """Main application entry point."""
    shift_flow, summary_flow, template_flow, settings_flow = get_components()

    settings = run_async(settings_flow.get_settings())
    if not settings.onboarding_complete:
        render_onboarding_page(settings_flow)
        return

    st.sidebar.title("💵 TipTrack")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Dashboard", "➕ Log Shift", "📅 Week Summary",
         "🧮 Tip-Out Calculator", "⚙️ Settings"],
        index=0,
    )

    if page == "🏠 Dashboard":
        render_dashboard_page(summary_flow)
    elif page == "➕ Log Shift":
        render_shift_page(shift_flow, settings)
    elif page == "📅 Week Summary":
        render_week_page(summary_flow)
    elif page == "🧮 Tip-Out Calculator":
        render_calculator_page(template_flow, settings)
    elif page == "⚙️ Settings":
        render_settings_page(settings_flow, summary_flow, settings)


def render_onboarding_page(settings_flow: SettingsFlow):
    """First-run setup: role, base wage and tax rates."""
    st.title("👋 Welcome to TipTrack")
    st.markdown("Track your tips and see what your paycheck will look like.")

    role = st.selectbox(
        "What's your role?",
        options=list(Role),
        format_func=lambda r: r.value.title(),
    )
    hourly_wage = st.number_input(
        "Base hourly wage ($)",
        value=float(role.default_wage),
        min_value=0.0,
        step=0.25,
        format="%.2f",
        help="Tipped employees are often paid $2.13/hr",
    )

    col1, col2 = st.columns(2)
    with col1:
        federal = st.number_input("Federal tax (%)", value=12.0, step=0.5)
    with col2:
        state = st.number_input("State tax (%)", value=5.0, step=0.5)

    if st.button("🚀 Get Started", type="primary"):
        try:
            run_async(settings_flow.complete_onboarding(
                role=role,
                hourly_wage=Decimal(str(hourly_wage)),
                federal_tax_rate=Decimal(str(federal)),
                state_tax_rate=Decimal(str(state)),
            ))
            st.rerun()
        except StorageError as e:
            st.error(f"Failed to save settings: {e}")


def render_dashboard_page(summary_flow: SummaryFlow):
    """Today's shift, this week's numbers and recent shifts."""
    st.title("🏠 Dashboard")

    view = run_async(summary_flow.load_dashboard())
    settings = view.settings
    stats = view.week_stats

    if view.today_shift:
        st.markdown(f"""
        <div class="success-box">
            <h4>Today's shift</h4>
            <p class="big-number">{money(view.today_shift.net_tips, settings)}</p>
            <p>{format_hours(view.today_shift.hours_worked)} worked</p>
        </div>
        """, unsafe_allow_html=True)
    else:
        st.info("No shift logged today yet.")

    st.markdown(
        f"### This week ({view.week_start:%b %d} - {view.week_end:%b %d})"
    )
    changes = view.trends.changes
    col1, col2, col3, col4 = st.columns(4)
    col1.metric(
        "Tips",
        money(stats.total_tips, settings),
        format_percentage(changes.total_tips),
    )
    col2.metric(
        "Hours",
        format_hours(stats.total_hours),
        format_percentage(changes.total_hours),
    )
    col3.metric("Shifts", stats.shift_count)
    col4.metric("Avg / shift", money(stats.avg_tips_per_shift, settings))

    st.bar_chart({day: float(amount) for day, amount in stats.daily_tips.items()})

    preview = view.preview
    with st.expander("💰 Paycheck preview"):
        st.markdown(f"**Gross:** {money(preview.summary.gross_earnings, settings)}")
        st.markdown(f"**Estimated taxes:** {money(preview.taxes.total_tax, settings)}")
        st.markdown(f"**Cash take-home:** {money(preview.breakdown.cash_take_home, settings)}")
        st.markdown(f"**Paycheck (net):** {money(preview.breakdown.paycheck_net, settings)}")
        st.markdown(f"**Total take-home:** {money(preview.breakdown.total_take_home, settings)}")

    st.markdown("### Recent shifts")
    if not view.recent_shifts:
        st.info("Use 'Log Shift' to add your first shift.")
    for shift in view.recent_shifts:
        render_shift_row(shift, settings)


def render_shift_row(shift: Shift, settings: UserSettings):
    col1, col2, col3, col4 = st.columns([3, 2, 2, 1])
    col1.markdown(f"**{shift.shift_date:%a %b %d}**")
    col2.markdown(format_hours(shift.hours_worked))
    col3.markdown(money(shift.net_tips, settings))
    if col4.button("✏️", key=f"edit-{shift.id}"):
        st.session_state.editing_shift = shift
        st.info("Open 'Log Shift' to edit this shift.")


def render_shift_page(shift_flow: ShiftFlow, settings: UserSettings):
    """Add a shift, or edit the one picked from the dashboard."""
    editing = st.session_state.get("editing_shift")
    st.title("✏️ Edit Shift" if editing else "➕ Log Shift")

    col1, col2 = st.columns(2)
    with col1:
        shift_date = st.date_input(
            "Date *",
            value=editing.shift_date if editing else date.today(),
        )
        hours = st.number_input(
            "Hours worked *",
            value=float(editing.hours_worked) if editing else 0.0,
            min_value=0.0,
            step=0.25,
        )
        tip_out = st.number_input(
            "Tip-out",
            value=float(editing.tip_out) if editing else 0.0,
            min_value=0.0,
            step=1.0,
            format="%.2f",
            help=f"Your usual tip-out is {settings.default_tip_out_percentage}% of tips",
        )
    with col2:
        cash = st.number_input(
            "Cash tips",
            value=float(editing.cash_tips) if editing else 0.0,
            min_value=0.0,
            step=1.0,
            format="%.2f",
        )
        credit = st.number_input(
            "Credit tips",
            value=float(editing.credit_tips) if editing else 0.0,
            min_value=0.0,
            step=1.0,
            format="%.2f",
        )

    notes = st.text_area(
        "Notes (optional)",
        value=editing.notes if editing else "",
        placeholder="Busy Friday, private party...",
    )

    values = {
        "shift_date": shift_date,
        "hours_worked": Decimal(str(hours)),
        "cash_tips": Decimal(str(cash)),
        "credit_tips": Decimal(str(credit)),
        "tip_out": Decimal(str(tip_out)),
        "notes": notes,
    }
    net = values["cash_tips"] + values["credit_tips"] - values["tip_out"]
    st.markdown(f"**Net tips:** {money(net, settings)}")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Save Shift", type="primary"):
            try:
                if editing:
                    saved, validation = run_async(
                        shift_flow.edit_shift(editing.id, values)
                    )
                else:
                    saved, validation = run_async(
                        shift_flow.log_shift(Shift(**values))
                    )
            except StorageError as e:
                st.error(f"Failed to save: {e}")
            else:
                summary = ShiftValidator().get_user_friendly_summary(validation)
                if saved is None:
                    st.error(summary)
                else:
                    st.session_state.editing_shift = None
                    st.success(f"Saved! Net tips {money(saved.net_tips, settings)}")
                    if validation.warnings:
                        st.warning(summary)

    if editing:
        with col2:
            if st.button("🗑️ Delete Shift"):
                run_async(shift_flow.delete_shift(editing.id))
                st.session_state.editing_shift = None
                st.rerun()


def render_week_page(summary_flow: SummaryFlow):
    """Week-by-week summary with navigation."""
    if "week_offset" not in st.session_state:
        st.session_state.week_offset = 0

    col1, col2, col3 = st.columns([1, 3, 1])
    with col1:
        if st.button("◀ Previous"):
            st.session_state.week_offset -= 1
            st.rerun()
    with col3:
        if st.button("Next ▶", disabled=st.session_state.week_offset >= 0):
            st.session_state.week_offset += 1
            st.rerun()

    view = run_async(summary_flow.load_week(st.session_state.week_offset))
    settings = view.settings
    preview = view.summary.preview

    with col2:
        st.title(f"📅 {view.label}")

    if not view.shifts:
        st.info("No shifts logged this week.")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Net tips", money(preview.summary.net_tips, settings))
    col2.metric("Hours", format_hours(preview.summary.total_hours))
    col3.metric("Effective rate", f"{money(preview.averages.effective_hourly_rate, settings)}/hr")

    best, worst = view.summary.best_day, view.summary.worst_day
    if best:
        st.markdown(f"🏆 **Best day:** {best.day} ({money(best.total_tips, settings)})")
    if worst and worst.day != best.day:
        st.markdown(f"📉 **Slowest day:** {worst.day} ({money(worst.total_tips, settings)})")

    st.markdown("### By day")
    for day in DAY_NAMES:
        bucket = view.summary.by_day.get(day)
        if bucket is None:
            continue
        st.markdown(
            f"**{day}** - {len(bucket.shifts)} shift(s), "
            f"{format_hours(bucket.total_hours)}, {money(bucket.total_tips, settings)}"
        )

    st.markdown("### Taxes")
    taxes = preview.taxes
    st.markdown(f"Federal: {money(taxes.federal_tax, settings)}")
    st.markdown(f"State: {money(taxes.state_tax, settings)}")
    st.markdown(f"FICA: {money(taxes.fica_tax, settings)}")
    st.markdown(f"**Total take-home:** {money(preview.breakdown.total_take_home, settings)}")


def render_calculator_page(template_flow: TemplateFlow, settings: UserSettings):
    """Split a tip pool across support staff."""
    st.title("🧮 Tip-Out Calculator")

    if "calculator" not in st.session_state:
        st.session_state.calculator = TipOutCalculator()
    calculator = st.session_state.calculator

    total = st.number_input(
        "Total tips",
        value=float(calculator.total_tips),
        min_value=0.0,
        step=5.0,
        format="%.2f",
    )
    calculator.set_total_tips(Decimal(str(total)))

    templates = run_async(template_flow.list_templates())
    if templates:
        col1, col2 = st.columns([3, 1])
        with col1:
            chosen = st.selectbox(
                "Template",
                options=templates,
                format_func=lambda t: t.name,
            )
        with col2:
            if st.button("Load"):
                run_async(template_flow.load_into_calculator(calculator, chosen.id))
                st.rerun()

    for row in calculator.recipients:
        col1, col2, col3 = st.columns([3, 2, 1])
        role = col1.text_input("Role", value=row.role, key=f"role-{row.id}")
        pct = col2.number_input(
            "%", value=float(row.percentage), min_value=0.0, step=0.5,
            key=f"pct-{row.id}",
        )
        calculator.update_recipient(row.id, role=role, percentage=Decimal(str(pct)))
        if col3.button("✖", key=f"remove-{row.id}"):
            try:
                calculator.remove_recipient(row.id)
                st.rerun()
            except CalculatorError as e:
                st.warning(str(e))

    if st.button("➕ Add recipient"):
        calculator.add_recipient()
        st.rerun()

    split = calculator.recalculate()
    st.markdown("---")
    for allocation in split.allocations:
        st.markdown(
            f"**{allocation.role or 'Unnamed'}** "
            f"({format_percentage(allocation.percentage)}): "
            f"{money(allocation.amount, settings)}"
        )
    st.markdown(f"**You keep:** {money(split.remaining, settings)}")
    if split.over_allocated:
        st.warning(
            f"Percentages add up to {format_percentage(split.total_percentage)}"
        )

    name = st.text_input("Save as template", placeholder="Friday crew")
    if st.button("💾 Save Template") and name:
        run_async(template_flow.save_from_calculator(calculator, name))
        st.success(f"Saved template '{name}'")


def render_settings_page(
    settings_flow: SettingsFlow,
    summary_flow: SummaryFlow,
    settings: UserSettings,
):
    """Wage, taxes, week start and data management."""
    st.title("⚙️ Settings")

    st.markdown("### Pay & taxes")
    col1, col2 = st.columns(2)
    with col1:
        role = st.selectbox(
            "Role",
            options=list(Role),
            index=list(Role).index(settings.role),
            format_func=lambda r: r.value.title(),
        )
        hourly_wage = st.number_input(
            "Hourly wage", value=float(settings.hourly_wage), min_value=0.0, step=0.25,
        )
        tip_out_pct = st.number_input(
            "Default tip-out (%)", value=float(settings.default_tip_out_percentage),
            min_value=0.0, step=0.5,
        )
    with col2:
        federal = st.number_input("Federal tax (%)", value=float(settings.federal_tax_rate))
        state = st.number_input("State tax (%)", value=float(settings.state_tax_rate))
        fica = st.number_input("FICA (%)", value=float(settings.fica_rate))

    st.markdown("### Preferences")
    col1, col2, col3 = st.columns(3)
    week_start = col1.selectbox(
        "Week starts on",
        options=list(WeekStart),
        index=int(settings.week_starts_on),
        format_func=lambda d: d.name.title(),
    )
    currency = col2.text_input("Currency", value=settings.currency, max_chars=3)
    theme = col3.selectbox(
        "Theme",
        options=list(Theme),
        index=list(Theme).index(settings.theme),
        format_func=lambda t: t.value.title(),
    )

    if st.button("💾 Save Settings", type="primary"):
        updates = {
            "role": role,
            "hourly_wage": Decimal(str(hourly_wage)),
            "default_tip_out_percentage": Decimal(str(tip_out_pct)),
            "federal_tax_rate": Decimal(str(federal)),
            "state_tax_rate": Decimal(str(state)),
            "fica_rate": Decimal(str(fica)),
            "week_starts_on": week_start,
            "currency": currency,
            "theme": theme,
        }
        try:
            _, validation = run_async(settings_flow.update_settings(updates))
            st.success("Settings saved")
            for warning in validation.warnings:
                st.warning(warning)
        except StorageError as e:
            st.error(f"Failed to save settings: {e}")

    st.markdown("---")
    st.markdown("### Your data")

    if st.button("📦 Prepare export"):
        st.session_state.export_bundle = run_async(settings_flow.export_data())
    bundle = st.session_state.get("export_bundle")
    if bundle is not None:
        st.download_button(
            "⬇️ Download export",
            data=bundle.model_dump_json(indent=2),
            file_name=f"tiptrack-{datetime.now():%Y%m%d}.json",
            mime="application/json",
        )

    uploaded = st.file_uploader("Import data", type=["json"])
    if uploaded and st.button("⬆️ Import"):
        try:
            sections = run_async(settings_flow.import_data(json.load(uploaded)))
            st.success(f"Imported: {', '.join(sections) or 'nothing'}")
        except (StorageError, ValueError) as e:
            st.error(f"Import failed: {e}")

    confirm = st.checkbox("I understand this deletes every shift and setting")
    if st.button("🗑️ Clear all data", disabled=not confirm):
        run_async(settings_flow.clear_all_data())
        st.session_state.clear()
        st.rerun()

    with st.expander("Recent activity"):
        events = run_async(summary_flow.recent_activity(limit=20))
        if not events:
            st.caption("Nothing yet")
        for event in events:
            st.markdown(
                f"`{event.timestamp.astimezone():%b %d %H:%M}` {event.description}"
            )


if __name__ == "__main__":
    main()
