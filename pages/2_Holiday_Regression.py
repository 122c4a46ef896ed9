import pandas as pd
import streamlit as st

from ml.bayes_regression import comparison_frame
from service.filter_state import InvalidSelectionError
from service.session import get_dashboard_data, get_predictor_state
from utils.charts import fitted_vs_actual_chart

st.set_page_config(page_title="Holiday Regression", page_icon="🎭", layout="wide")
st.title("Holiday Effect – Bayesian Linear Regression")

st.markdown("""
### What is this page?
An illustrative Bayesian regression of **weekly gross** on two numeric
predictors (standardized to mean 0, standard deviation 1) and the
**holiday month** indicator (December or January, entered as 0/1).

Coefficients are posterior samples under weak priors. The posterior means are
used as point estimates to compute the fitted values compared below.
""")

data = get_dashboard_data()
reg_cfg = data.settings["regression"]

try:
    with st.spinner("Sampling posterior…"):
        state = get_predictor_state(data)
except ValueError as e:
    st.error(f"⚠️ **Could not fit the regression:** {e}")
    st.stop()

first, second = state.predictors
col_a, col_b = st.columns(2)
with col_a:
    pick_a = st.selectbox("First predictor", state.choices, index=state.choices.index(first))
with col_b:
    pick_b = st.selectbox("Second predictor", state.choices, index=state.choices.index(second))

if (pick_a, pick_b) != state.predictors:
    try:
        with st.spinner("Sampling posterior…"):
            state.set_predictors(pick_a, pick_b)
    except InvalidSelectionError as e:
        st.warning(f"Selection ignored: {e}")
    except ValueError as e:
        st.warning(f"Selection ignored, the model could not be fitted: {e}")

fit = state.derived("fit")

m1, m2, m3 = st.columns(3)
m1.metric("Rows", f"{int(fit.metrics['n_rows']):,}")
m2.metric("R²", f"{fit.metrics['r2']:.3f}")
m3.metric("MAE", f"${fit.metrics['mae']:,.0f}")

st.subheader("Posterior summary")
st.caption(f"{int(reg_cfg.get('n_samples', 2000)):,} posterior draws per coefficient")
st.dataframe(fit.summary_stats.round(1), width="stretch")

st.caption(
    "Predictor coefficients are per standard deviation of the original column. "
    "Scaling used:"
)
scaling = pd.DataFrame.from_dict(fit.scaling, orient="index", columns=["mean", "sd"])
st.dataframe(scaling.round(3), width="stretch")

st.subheader("Fitted vs actual weekly gross")
st.plotly_chart(
    fitted_vs_actual_chart(comparison_frame(fit), title="Posterior-mean fit vs actual weekly gross"),
    width="stretch",
)
