"""/admin page: responses, analytics, exports, sharing and deletes."""
import plotly.graph_objects as go
import streamlit as st

from shared_styles import THEME_COLORS, create_header
from survey_site.admin import AdminDashboard
from survey_site.exceptions import ValidationFailed
from survey_site.export import export_filename, format_submitted
from survey_site.models import Analytics
from survey_site.pages.common import PageContext, follow, nav_button
from survey_site.router import Location

DASHBOARD_KEY = "admin_dashboard"


def analytics_figure(analytics: Analytics) -> go.Figure:
    labels = ["Average", "Highest", "Lowest"]
    values = [analytics.average_rating or 0, analytics.highest_rating or 0, analytics.lowest_rating or 0]
    fig = go.Figure(data=go.Bar(
        x=labels,
        y=values,
        texttemplate='%{y:.1f}',
        textposition='outside',
        marker_color=[THEME_COLORS['primary'], THEME_COLORS['success'], THEME_COLORS['warning']],
    ))
    fig.update_layout(
        title=dict(text="Rating analytics", font=dict(size=14)),
        yaxis_title="Rating",
        showlegend=False,
        height=380,
        yaxis=dict(range=[0, 10.5]),
        margin=dict(l=40, r=20, t=60, b=40),
    )
    return fig


def _dashboard(ctx: PageContext) -> AdminDashboard:
    dashboard = st.session_state.get(DASHBOARD_KEY)
    if dashboard is None:
        dashboard = AdminDashboard(ctx.api, ctx.session)
        st.session_state[DASHBOARD_KEY] = dashboard
    dashboard.api, dashboard.session = ctx.api, ctx.session
    return dashboard


def render(ctx: PageContext):
    create_header("Admin Dashboard", "Surveys, responses and analytics", icon="📊", admin=True)
    dashboard = _dashboard(ctx)
    surveys = dashboard.load_surveys()
    follow(dashboard)

    if dashboard.load_error:
        st.error(dashboard.load_error)
    if not surveys:
        _render_messages(dashboard)
        st.info("No surveys yet.")
        nav_button("Create a survey", Location("/create-survey"), type="primary")
        return

    ids = [s.id for s in surveys]
    titles = {s.id: s.title for s in surveys}
    current = dashboard.selected.id if dashboard.selected is not None and dashboard.selected.id in ids else None
    chosen = st.selectbox("Survey", ids, index=ids.index(current) if current is not None else None,
                          format_func=lambda sid: f"{titles[sid]} (#{sid})", placeholder="Select a survey")
    if chosen is not None and chosen != current:
        dashboard.select(chosen)
        follow(dashboard)
    _render_messages(dashboard)

    if dashboard.selected is None:
        return

    _render_survey_actions(ctx, dashboard)
    _render_analytics(dashboard)
    _render_responses(dashboard)


def _render_messages(dashboard: AdminDashboard):
    error, notice = dashboard.take_messages()
    if error:
        st.error(error)
    if notice:
        st.success(notice)


def _render_survey_actions(ctx: PageContext, dashboard: AdminDashboard):
    survey = dashboard.selected
    col1, col2, col3 = st.columns(3)
    with col1:
        nav_button("✏️ Edit survey", Location(f"/edit-survey/{survey.id}"), use_container_width=True)
    with col2:
        show_share = st.toggle("🔗 Share link", key=f"share_{survey.id}")
    with col3:
        if st.button("🗑️ Delete survey", use_container_width=True):
            dashboard.request_delete_survey(survey.id)

    if show_share:
        link = dashboard.share_link(survey.id)
        st.code(link, language=None)
        st.image(dashboard.share_qr(survey.id), caption="Scan to open the survey", width=220)

    if dashboard.pending_delete_survey == survey.id:
        st.warning(f"Delete survey \"{survey.title}\" and all of its responses?")
        c1, c2 = st.columns(2)
        if c1.button("Yes, delete survey", type="primary"):
            dashboard.confirm_delete_survey()
            follow(dashboard)
            st.rerun()
        if c2.button("Cancel", key="cancel_delete_survey"):
            dashboard.cancel_delete()
            st.rerun()


def _render_analytics(dashboard: AdminDashboard):
    analytics = dashboard.analytics
    if analytics is None:
        return
    st.subheader("Analytics")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Responses", analytics.total_responses)
    c2.metric("Average", f"{analytics.average_rating:.2f}" if analytics.average_rating is not None else "-")
    c3.metric("Highest", analytics.highest_rating if analytics.highest_rating is not None else "-")
    c4.metric("Lowest", analytics.lowest_rating if analytics.lowest_rating is not None else "-")
    st.plotly_chart(analytics_figure(analytics), use_container_width=True)


def _render_responses(dashboard: AdminDashboard):
    st.subheader("Responses")
    col1, col2, col3, col4 = st.columns([2, 2, 1, 1])
    start = col1.date_input("Start date", value=dashboard.start_date, key="filter_start")
    end = col2.date_input("End date", value=dashboard.end_date, key="filter_end")
    if col3.button("Filter", use_container_width=True):
        try:
            dashboard.apply_date_filter(start, end)
        except ValidationFailed as exc:
            st.error(exc.message)
    if col4.button("Reset", use_container_width=True):
        dashboard.reset_filters()
        for key in ("filter_start", "filter_end", "filter_search"):
            st.session_state.pop(key, None)
        st.rerun()
    dashboard.set_search(st.text_input("Search by username", value=dashboard.search, key="filter_search"))

    rows = dashboard.filtered
    if dashboard.responses_error:
        st.error(dashboard.responses_error)
    st.caption(f"{len(rows)} of {len(dashboard.responses)} responses")

    _render_exports(dashboard, rows)

    for record in rows:
        c1, c2, c3, c4 = st.columns([1, 3, 3, 1])
        c1.write(record.id)
        c2.write(record.display_name)
        c3.write(format_submitted(record))
        if c4.button("Delete", key=f"delete_response_{record.id}"):
            dashboard.request_delete_response(record.id)
            st.rerun()
        if dashboard.pending_delete_response == record.id:
            st.warning(f"Delete response #{record.id}?")
            d1, d2 = st.columns(2)
            if d1.button("Yes, delete", key=f"confirm_delete_{record.id}", type="primary"):
                dashboard.confirm_delete_response()
                follow(dashboard)
                st.rerun()
            if d2.button("Cancel", key=f"cancel_delete_{record.id}"):
                dashboard.cancel_delete()
                st.rerun()


def _render_exports(dashboard: AdminDashboard, rows):
    if not rows:
        st.info("No data to export.")
        return
    exports = dashboard.prepared_exports
    if exports is None:
        if not st.button("📦 Prepare exports"):
            return
        with st.spinner("Building Excel and PDF..."):
            exports = dashboard.prepare_exports()
    excel, pdf = exports
    title = dashboard.selected.title
    e1, e2 = st.columns(2)
    e1.download_button("📥 Export to Excel", data=excel,
                       file_name=export_filename(title, "xlsx"),
                       mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    e2.download_button("📄 Export to PDF", data=pdf,
                       file_name=export_filename(title, "pdf"), mime="application/pdf")
