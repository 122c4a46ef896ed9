# Broadway Grosses Dashboard (Streamlit)
# - Downloads the TidyTuesday Broadway grosses once and caches them under data/cache
# - Cleans to 2010+ complete rows with a December/January holiday flag
# - Overview charts here; drill-down, regression and cache pages under pages/

import logging

import streamlit as st

from data.aggregations import longest_running, top_capacity_theatres, weekly_gross_series
from service.session import get_dashboard_data
from utils.charts import bar_chart, boxplot_by_flag, line_chart, scatter_chart

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

st.set_page_config(page_title="Broadway Grosses Dashboard", page_icon="🎭", layout="wide")
st.title("🎭 Broadway Grosses Dashboard")
st.caption(
    "Weekly Broadway box-office grosses (TidyTuesday, 2020-04-28), cleaned to "
    "complete weeks from 2010 onwards."
)

data = get_dashboard_data()
cleaned = data.cleaned
top_n = int(data.settings.get("top_n", 20))

c1, c2, c3, c4 = st.columns(4)
c1.metric("Weeks of data", f"{cleaned['week_ending'].nunique():,}")
c2.metric("Shows", f"{cleaned['show'].nunique():,}")
c3.metric("Theatres", f"{len(data.domain):,}")
c4.metric("Years", f"{cleaned['year'].min()}–{cleaned['year'].max()}")

# ---------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------

col_left, col_right = st.columns(2)

with col_left:
    runs = longest_running(cleaned, top_n=top_n)
    st.plotly_chart(
        bar_chart(runs, "show", "duration_days", title=f"Top {top_n} longest-running shows",
                  metric_label="Days between first and last week", category_label="Show"),
        width="stretch",
    )

with col_right:
    capacity = top_capacity_theatres(cleaned, top_n=top_n)
    st.plotly_chart(
        bar_chart(capacity, "theatre", "mean_pct_capacity",
                  title=f"Top {top_n} theatres by average capacity sold",
                  metric_label="Mean % of capacity", category_label="Theatre"),
        width="stretch",
    )

# ---------------------------------------------------------------------
# Time series & relationships
# ---------------------------------------------------------------------

st.plotly_chart(
    line_chart(weekly_gross_series(cleaned), "week_ending", "weekly_gross_overall",
               title="Overall weekly Broadway gross", y_label="Gross across all shows (USD)"),
    width="stretch",
)

col_scatter, col_box = st.columns(2)

with col_scatter:
    st.plotly_chart(
        scatter_chart(cleaned, "avg_ticket_price", "weekly_gross",
                      title="Average ticket price vs weekly gross", trend=True),
        width="stretch",
    )

with col_box:
    st.plotly_chart(
        boxplot_by_flag(cleaned, "holiday", "weekly_gross",
                        title="Weekly gross in holiday months (Dec/Jan) vs the rest",
                        true_label="Holiday", false_label="Non-holiday"),
        width="stretch",
    )

# ---------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------

tab_grosses, tab_synopses = st.tabs(["Cleaned grosses", "Show synopses"])

with tab_grosses:
    st.caption(f"{len(cleaned):,} rows")
    st.dataframe(cleaned, width="stretch", hide_index=True)

with tab_synopses:
    st.caption(f"{len(data.synopses):,} shows")
    st.dataframe(data.synopses, width="stretch", hide_index=True)
