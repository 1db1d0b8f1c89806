"""Render a coverage trend as a PNG line chart.

Uses matplotlib's object API (``Figure`` + Agg canvas) rather than pyplot,
so concurrent renders in the server threadpool share no global figure state.
"""

import io

import matplotlib.dates as mdates
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from ..trend import TrendSeries

_DPI = 100
_LINE_COLOR = "#1f77b4"
_FILL_COLOR = "#aec7e8"


def render_trend_chart(series: TrendSeries, width: int = 500, height: int = 200) -> bytes:
    """Draw *series* and return the PNG bytes.

    Points are plotted in timestamp order regardless of the order they
    appear in the series. An empty series yields a placeholder chart.
    """
    fig = Figure(figsize=(width / _DPI, height / _DPI), dpi=_DPI, facecolor="white")
    FigureCanvasAgg(fig)
    ax = fig.add_subplot(111)
    ax.set_title(series.title, loc="left", fontsize=9)

    points = series.sorted_points()
    if points:
        xs = [p.timestamp for p in points]
        ys = [p.coverage_percent for p in points]
        ax.fill_between(xs, ys, 0, color=_FILL_COLOR, alpha=0.5, linewidth=0)
        ax.plot(xs, ys, color=_LINE_COLOR, linewidth=2)
        ax.scatter(xs, ys, s=8, color=_LINE_COLOR, zorder=3)
        ax.set_ylim(0, max(100.0, max(ys)))
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y-%m-%d"))
        ax.tick_params(axis="x", labelsize=7, labelrotation=20)
    else:
        ax.set_ylim(0, 100)
        ax.set_xticks([])
        ax.text(
            0.5,
            0.5,
            "No coverage data",
            ha="center",
            va="center",
            color="grey",
            transform=ax.transAxes,
        )

    ax.tick_params(axis="y", labelsize=7)
    ax.set_ylabel("%", fontsize=8)
    fig.subplots_adjust(left=0.1, right=0.97, top=0.85, bottom=0.25)

    buf = io.BytesIO()
    fig.savefig(buf, format="png")
    return buf.getvalue()
