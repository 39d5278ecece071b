"""Vector previews of library items.

Pure functions from an element sequence to an SVG drawing. Source values are
read defensively: any field may be missing or of the wrong type, so every
numeric read falls back to a default and every color read falls back to a
safe color.
"""

import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from xml.sax.saxutils import escape, quoteattr

from src.modules.libraries.domain.documents import finite_number

DEFAULT_BOUNDS = (0.0, 0.0, 120.0, 80.0)
DEFAULT_PADDING = 12.0
DEFAULT_MIN_WIDTH = 40.0
DEFAULT_MIN_HEIGHT = 30.0
DEFAULT_TEXT_MAX_CHARS = 24

DEFAULT_STROKE = "#1e1e1e"
DEFAULT_FILL = "transparent"
STROKE_WIDTH_RANGE = (0.8, 6.0)
FONT_SIZE_RANGE = (8.0, 48.0)
DEFAULT_FONT_SIZE = 20.0
CORNER_RADIUS = 8.0

POLYLINE_TYPES = frozenset({"line", "arrow", "freedraw"})

_COLOR_PATTERNS = (
    re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"),
    re.compile(r"^(?:rgb|rgba|hsl|hsla)\(\s*[-\d.%,\s/]+\)$"),
    re.compile(r"^[a-zA-Z]{3,20}$"),
)


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class PreviewDrawing:
    """SVG rendition of one element sequence."""

    bounds: Bounds
    view_box: Bounds
    markup: str


# ----------------------------------------------------------------------------
# Defensive readers
# ----------------------------------------------------------------------------


def read_number(element: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    number = finite_number(element.get(key))
    return default if number is None else number


def read_color(element: Mapping[str, Any], key: str, default: str) -> str:
    value = element.get(key)
    if not isinstance(value, str):
        return default
    value = value.strip()
    if any(pattern.match(value) for pattern in _COLOR_PATTERNS):
        return value
    return default


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def read_points(element: Mapping[str, Any]) -> list[tuple[float, float]]:
    """Points resolved to absolute coordinates.

    Malformed pairs and points whose absolute position overflows are skipped.
    """
    raw_points = element.get("points")
    if not isinstance(raw_points, list | tuple):
        return []
    x = read_number(element, "x")
    y = read_number(element, "y")
    resolved: list[tuple[float, float]] = []
    for point in raw_points:
        if not isinstance(point, list | tuple) or len(point) < 2:
            continue
        px, py = finite_number(point[0]), finite_number(point[1])
        if px is None or py is None:
            continue
        ax, ay = x + px, y + py
        if math.isfinite(ax) and math.isfinite(ay):
            resolved.append((ax, ay))
    return resolved


# ----------------------------------------------------------------------------
# Bounds
# ----------------------------------------------------------------------------


def compute_bounds(elements: Iterable[Mapping[str, Any]]) -> Bounds:
    """Bounding box of all corners and resolved points.

    Falls back to DEFAULT_BOUNDS when nothing finite is found or the extent
    itself overflows.
    """
    xs: list[float] = []
    ys: list[float] = []
    for element in elements:
        if not isinstance(element, Mapping):
            continue
        x = read_number(element, "x", math.nan)
        y = read_number(element, "y", math.nan)
        if math.isfinite(x) and math.isfinite(y):
            xs.append(x)
            ys.append(y)
            far_x = x + read_number(element, "width")
            far_y = y + read_number(element, "height")
            if math.isfinite(far_x) and math.isfinite(far_y):
                xs.append(far_x)
                ys.append(far_y)
        for px, py in read_points(element):
            xs.append(px)
            ys.append(py)

    if not xs or not ys:
        return Bounds(*DEFAULT_BOUNDS)
    bounds = Bounds(min(xs), min(ys), max(xs), max(ys))
    if not (math.isfinite(bounds.width) and math.isfinite(bounds.height)):
        return Bounds(*DEFAULT_BOUNDS)
    return bounds


def compute_view_box(
    bounds: Bounds,
    padding: float = DEFAULT_PADDING,
    min_width: float = DEFAULT_MIN_WIDTH,
    min_height: float = DEFAULT_MIN_HEIGHT,
) -> Bounds:
    """Grow bounds to the minimum size around their center, then pad."""
    cx = bounds.min_x + bounds.width / 2
    cy = bounds.min_y + bounds.height / 2
    half_w = max(bounds.width, min_width) / 2 + padding
    half_h = max(bounds.height, min_height) / 2 + padding
    return Bounds(cx - half_w, cy - half_h, cx + half_w, cy + half_h)


# ----------------------------------------------------------------------------
# Per-element reconstruction
# ----------------------------------------------------------------------------


def _fmt(value: float) -> str:
    # non-finite coordinates (overflowed sums) collapse to the origin
    if not math.isfinite(value):
        return "0"
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _style(element: Mapping[str, Any], filled: bool = True) -> str:
    stroke = read_color(element, "strokeColor", DEFAULT_STROKE)
    fill = read_color(element, "backgroundColor", DEFAULT_FILL) if filled else "none"
    stroke_width = clamp(read_number(element, "strokeWidth", 1.0), *STROKE_WIDTH_RANGE)
    opacity = clamp(read_number(element, "opacity", 100.0), 0.0, 100.0) / 100
    return (
        f"stroke={quoteattr(stroke)} fill={quoteattr(fill)} "
        f'stroke-width="{_fmt(stroke_width)}" opacity="{_fmt(opacity)}"'
    )


def _box(element: Mapping[str, Any]) -> tuple[float, float, float, float]:
    """Normalized (x, y, w, h); negative sizes flip the origin."""
    x = read_number(element, "x")
    y = read_number(element, "y")
    w = read_number(element, "width")
    h = read_number(element, "height")
    if w < 0:
        x, w = x + w, -w
    if h < 0:
        y, h = y + h, -h
    return x, y, w, h


def _render_ellipse(element: Mapping[str, Any]) -> str:
    x, y, w, h = _box(element)
    return (
        f'<ellipse cx="{_fmt(x + w / 2)}" cy="{_fmt(y + h / 2)}" '
        f'rx="{_fmt(w / 2)}" ry="{_fmt(h / 2)}" {_style(element)} />'
    )


def _render_diamond(element: Mapping[str, Any]) -> str:
    x, y, w, h = _box(element)
    points = (
        (x + w / 2, y),
        (x + w, y + h / 2),
        (x + w / 2, y + h),
        (x, y + h / 2),
    )
    return f'<polygon points="{_points(points)}" {_style(element)} />'


def _render_polyline(element: Mapping[str, Any]) -> str:
    points = read_points(element)
    if not points:
        x = read_number(element, "x")
        y = read_number(element, "y")
        points = [
            (x, y),
            (x + read_number(element, "width"), y + read_number(element, "height")),
        ]
    return (
        f'<polyline points="{_points(points)}" {_style(element, filled=False)} '
        'stroke-linecap="round" stroke-linejoin="round" />'
    )


def _render_text(
    element: Mapping[str, Any], max_chars: int = DEFAULT_TEXT_MAX_CHARS
) -> str:
    raw_text = element.get("text")
    label = " ".join(raw_text.split()) if isinstance(raw_text, str) else ""
    if len(label) > max_chars:
        label = label[: max_chars - 1] + "…"
    font_size = clamp(read_number(element, "fontSize", DEFAULT_FONT_SIZE), *FONT_SIZE_RANGE)
    x = read_number(element, "x")
    y = read_number(element, "y") + font_size
    fill = read_color(element, "strokeColor", DEFAULT_STROKE)
    opacity = clamp(read_number(element, "opacity", 100.0), 0.0, 100.0) / 100
    return (
        f'<text x="{_fmt(x)}" y="{_fmt(y)}" font-size="{_fmt(font_size)}" '
        f'fill={quoteattr(fill)} opacity="{_fmt(opacity)}" '
        f'font-family="Virgil, Segoe UI Emoji, sans-serif">{escape(label)}</text>'
    )


def _render_rectangle(element: Mapping[str, Any]) -> str:
    x, y, w, h = _box(element)
    radius = min(CORNER_RADIUS, w / 4, h / 4)
    return (
        f'<rect x="{_fmt(x)}" y="{_fmt(y)}" width="{_fmt(w)}" height="{_fmt(h)}" '
        f'rx="{_fmt(radius)}" {_style(element)} />'
    )


def _points(points: Iterable[tuple[float, float]]) -> str:
    return " ".join(f"{_fmt(px)},{_fmt(py)}" for px, py in points)


RENDERERS: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "ellipse": _render_ellipse,
    "diamond": _render_diamond,
    **{element_type: _render_polyline for element_type in POLYLINE_TYPES},
}


def render_element(
    element: Mapping[str, Any], text_max_chars: int = DEFAULT_TEXT_MAX_CHARS
) -> str:
    element_type = element.get("type")
    if element_type == "text":
        return _render_text(element, text_max_chars)
    renderer = RENDERERS.get(element_type) if isinstance(element_type, str) else None
    # unknown types fall back to a rounded rectangle
    return (renderer or _render_rectangle)(element)


def render_preview(
    elements: Sequence[Mapping[str, Any]],
    padding: float = DEFAULT_PADDING,
    min_width: float = DEFAULT_MIN_WIDTH,
    min_height: float = DEFAULT_MIN_HEIGHT,
    text_max_chars: int = DEFAULT_TEXT_MAX_CHARS,
) -> PreviewDrawing:
    """Render an element sequence as a standalone SVG document."""
    shapes = [e for e in elements if isinstance(e, Mapping)]
    bounds = compute_bounds(shapes)
    view_box = compute_view_box(bounds, padding, min_width, min_height)
    body = "".join(render_element(e, text_max_chars) for e in shapes)
    markup = (
        '<svg xmlns="http://www.w3.org/2000/svg" '
        f'viewBox="{_fmt(view_box.min_x)} {_fmt(view_box.min_y)} '
        f'{_fmt(view_box.width)} {_fmt(view_box.height)}">'
        f"{body}</svg>"
    )
    return PreviewDrawing(bounds=bounds, view_box=view_box, markup=markup)
