"""
Plotly chart renderers for the Broadway dashboard.

Every renderer takes a table plus encoding arguments and returns a
``plotly.graph_objects.Figure``. Inputs are copied, never modified.
"""

from typing import List, Optional

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

PRIMARY_COLOR = "#8B0000"
SECONDARY_COLOR = "#DAA520"


def _require_columns(df: pd.DataFrame, columns: List[str]) -> None:
    missing = [c for c in columns if c and c not in df.columns]
    if missing:
        raise ValueError(f"Chart columns missing from table: {missing}")


def bar_chart(
    df: pd.DataFrame,
    category: str,
    metric: str,
    title: str = "",
    metric_label: Optional[str] = None,
    category_label: Optional[str] = None,
) -> go.Figure:
    """Horizontal bars, categories ordered by metric with the largest on top."""
    _require_columns(df, [category, metric])
    data = df[[category, metric]].copy()
    data[category] = data[category].astype(str)
    data = data.sort_values(metric, ascending=True, kind="stable")

    fig = px.bar(
        data,
        x=metric,
        y=category,
        orientation="h",
        title=title,
        labels={metric: metric_label or metric, category: category_label or category},
        color_discrete_sequence=[PRIMARY_COLOR],
    )
    fig.update_yaxes(type="category", categoryorder="array", categoryarray=data[category].tolist())
    fig.update_layout(height=max(300, 28 * len(data)), margin=dict(l=10, r=10, t=50, b=10))
    return fig


def line_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    title: str = "",
    dtick: str = "M12",
    y_label: Optional[str] = None,
    color: Optional[str] = None,
) -> go.Figure:
    """Date on x, numeric on y, with ticks every ``dtick`` (default yearly)."""
    _require_columns(df, [x, y, color])
    cols = [x, y] + ([color] if color else [])
    data = df[cols].copy()
    data[x] = pd.to_datetime(data[x])
    data = data.sort_values(x, kind="stable")

    fig = px.line(
        data,
        x=x,
        y=y,
        color=color,
        title=title,
        labels={y: y_label or y},
        color_discrete_sequence=None if color else [PRIMARY_COLOR],
    )
    fig.update_xaxes(type="date", dtick=dtick, tickformat="%Y")
    fig.update_layout(margin=dict(l=10, r=10, t=50, b=10))
    return fig


def scatter_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    title: str = "",
    trend: bool = False,
    color: Optional[str] = None,
    opacity: float = 0.4,
) -> go.Figure:
    """Scatter plot with an optional least-squares trend line."""
    _require_columns(df, [x, y, color])
    cols = [x, y] + ([color] if color else [])
    data = df[cols].dropna(subset=[x, y]).copy()
    if color:
        data[color] = data[color].astype(str)

    fig = px.scatter(
        data,
        x=x,
        y=y,
        color=color,
        opacity=opacity,
        title=title,
        color_discrete_sequence=None if color else [PRIMARY_COLOR],
    )

    if trend and len(data) >= 2 and data[x].nunique() >= 2:
        slope, intercept = np.polyfit(data[x].astype(float), data[y].astype(float), 1)
        xs = np.linspace(data[x].min(), data[x].max(), 50)
        fig.add_trace(go.Scatter(
            x=xs,
            y=slope * xs + intercept,
            mode="lines",
            name="Linear trend",
            line=dict(color=SECONDARY_COLOR, width=3),
        ))

    fig.update_layout(margin=dict(l=10, r=10, t=50, b=10))
    return fig


def boxplot_by_flag(
    df: pd.DataFrame,
    flag: str,
    value: str,
    title: str = "",
    true_label: str = "Yes",
    false_label: str = "No",
) -> go.Figure:
    """Distribution of ``value`` split by a binary column."""
    _require_columns(df, [flag, value])
    data = df[[flag, value]].copy()
    data[flag] = data[flag].astype(bool).map({True: true_label, False: false_label})

    fig = px.box(
        data,
        x=flag,
        y=value,
        color=flag,
        title=title,
        category_orders={flag: [false_label, true_label]},
        color_discrete_map={false_label: PRIMARY_COLOR, true_label: SECONDARY_COLOR},
    )
    fig.update_layout(showlegend=False, margin=dict(l=10, r=10, t=50, b=10))
    return fig


def fitted_vs_actual_chart(comparison: pd.DataFrame, title: str = "Fitted vs actual") -> go.Figure:
    """Fitted values against actual response, with the y = x reference line."""
    _require_columns(comparison, ["actual", "fitted"])
    fig = scatter_chart(comparison, x="actual", y="fitted", title=title, opacity=0.3)
    lo = float(min(comparison["actual"].min(), comparison["fitted"].min()))
    hi = float(max(comparison["actual"].max(), comparison["fitted"].max()))
    fig.add_trace(go.Scatter(
        x=[lo, hi],
        y=[lo, hi],
        mode="lines",
        name="Perfect fit",
        line=dict(color="gray", dash="dash"),
    ))
    return fig
