"""Flat SVG badges in the usual two-part ``label | value`` style.

Built as a plain SVG string with no external dependencies, so it can be
served directly or embedded in a README.
"""

from typing import Optional
from xml.sax.saxutils import escape

from ..models import format_percent

UNKNOWN = "unknown"

# (minimum percent, colour), checked top to bottom
_COLOR_STEPS = (
    (90.0, "#4c1"),
    (75.0, "#97ca00"),
    (60.0, "#dfb317"),
    (40.0, "#fe7d37"),
)
_RED = "#e05d44"
_GREY = "#9f9f9f"

_CHAR_WIDTH = 6.5
_PADDING = 10


def coverage_color(percent: Optional[float]) -> str:
    """Colour policy: greener as coverage rises, grey when unknown."""
    if percent is None:
        return _GREY
    for minimum, color in _COLOR_STEPS:
        if percent >= minimum:
            return color
    return _RED


def _text_width(text: str) -> int:
    return int(len(text) * _CHAR_WIDTH + _PADDING)


def render_badge(label: str, value: str, color: str) -> str:
    """Return an SVG document for a ``label | value`` badge."""
    label_w = _text_width(label)
    value_w = _text_width(value)
    total_w = label_w + value_w
    label_text = escape(label)
    value_text = escape(value)

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{total_w}" height="20" '
        f'role="img" aria-label="{label_text}: {value_text}">'
        f"<title>{label_text}: {value_text}</title>"
        '<linearGradient id="s" x2="0" y2="100%">'
        '<stop offset="0" stop-color="#bbb" stop-opacity=".1"/>'
        '<stop offset="1" stop-opacity=".1"/>'
        "</linearGradient>"
        f'<clipPath id="r"><rect width="{total_w}" height="20" rx="3" fill="#fff"/></clipPath>'
        '<g clip-path="url(#r)">'
        f'<rect width="{label_w}" height="20" fill="#555"/>'
        f'<rect x="{label_w}" width="{value_w}" height="20" fill="{color}"/>'
        f'<rect width="{total_w}" height="20" fill="url(#s)"/>'
        "</g>"
        '<g fill="#fff" text-anchor="middle" '
        'font-family="Verdana,Geneva,DejaVu Sans,sans-serif" font-size="11">'
        f'<text x="{label_w / 2}" y="14">{label_text}</text>'
        f'<text x="{label_w + value_w / 2}" y="14">{value_text}</text>'
        "</g>"
        "</svg>"
    )


def render_coverage_badge(percent: Optional[float], label: str = "coverage") -> str:
    """Badge for the latest coverage percent, or ``unknown`` when there is none."""
    value = UNKNOWN if percent is None else f"{format_percent(percent)}%"
    return render_badge(label, value, coverage_color(percent))
