"""Rendering collaborators: the PNG trend chart and the SVG coverage badge."""

from .badge import coverage_color, render_badge, render_coverage_badge
from .chart import render_trend_chart

__all__ = ["coverage_color", "render_badge", "render_coverage_badge", "render_trend_chart"]
