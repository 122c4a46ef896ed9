import streamlit as st

from service.filter_state import InvalidSelectionError
from service.session import get_dashboard_data, get_filter_state
from utils.charts import bar_chart, boxplot_by_flag, line_chart

st.set_page_config(page_title="Theatre Drill-down", page_icon="🎭", layout="wide")
st.title("Theatre Drill-down")

st.markdown("""
Pick a theatre and a range of years. Everything below is recomputed from the
cleaned grosses for that selection only.
""")

data = get_dashboard_data()
state = get_filter_state(data)
lo_bound, hi_bound = state.year_bounds

with st.sidebar:
    st.header("Selection")
    theatre = st.selectbox(
        "Theatre",
        options=list(data.domain),
        index=list(data.domain).index(state.theatre),
    )
    year_lo, year_hi = st.slider(
        "Years",
        min_value=lo_bound,
        max_value=hi_bound,
        value=state.year_range,
    )

try:
    if theatre != state.theatre:
        state.set_theatre(theatre)
    if (year_lo, year_hi) != state.year_range:
        state.set_year_range(year_lo, year_hi)
except InvalidSelectionError as e:
    st.warning(f"Selection ignored: {e}")

view = state.filtered_view()
lo, hi = state.year_range
st.subheader(f"{state.theatre}, {lo}–{hi}")

if view.empty:
    st.info("No weeks recorded at this theatre in the selected years.")
    st.stop()

c1, c2, c3 = st.columns(3)
c1.metric("Weeks", f"{len(view):,}")
c2.metric("Shows", f"{view['show'].nunique():,}")
c3.metric("Mean capacity sold", f"{view['pct_capacity'].mean():.0%}")

st.plotly_chart(
    line_chart(view, "week_ending", "weekly_gross", color="show",
               title="Weekly gross by show", y_label="Weekly gross (USD)"),
    width="stretch",
)

col_left, col_right = st.columns(2)

with col_left:
    per_show = (
        view.groupby("show", sort=False)["weekly_gross"].sum()
        .rename("total_gross").reset_index()
    )
    st.plotly_chart(
        bar_chart(per_show, "show", "total_gross", title="Total gross by show",
                  metric_label="Total gross (USD)", category_label="Show"),
        width="stretch",
    )

with col_right:
    st.plotly_chart(
        boxplot_by_flag(view, "holiday", "pct_capacity", title="Capacity sold, holiday vs other months",
                        true_label="Holiday", false_label="Non-holiday"),
        width="stretch",
    )

st.dataframe(view, width="stretch", hide_index=True)
