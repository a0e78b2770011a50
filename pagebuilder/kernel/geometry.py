"""
Page Builder Kernel -- Arc Geometry

Pure functions for the curved college name and the responsive page scale.
No state, no IO. Same input → byte-identical output.
"""

from __future__ import annotations

from dataclasses import dataclass

from pagebuilder.kernel.types import DEFAULT_ARC_DEPTH, format_number

PAGE_WIDTH = 794  # A4 at 96 dpi
PAGE_MARGIN = 80


@dataclass(frozen=True)
class ArcSpan:
    """Fixed anchors of the arc and its horizontal radius, in SVG units."""

    start_x: int = 50
    end_x: int = 550
    baseline_y: int = 160
    radius_x: int = 250


DEFAULT_SPAN = ArcSpan()


def arc_path(depth: int | float = DEFAULT_ARC_DEPTH, span: ArcSpan = DEFAULT_SPAN) -> str:
    """
    SVG path for an elliptical arc between the fixed anchors.
    `depth` is used directly as the ellipse's vertical radius.
    """
    return (
        f"M {span.start_x},{span.baseline_y} "
        f"A {span.radius_x},{format_number(depth)} 0 0,1 "
        f"{span.end_x},{span.baseline_y}"
    )


def compute_scale(
    container_width: int | float,
    page_width: int | float = PAGE_WIDTH,
    margin: int | float = PAGE_MARGIN,
) -> float:
    """Fit the page into the container. Never upscales past 1, never flips below 0."""
    return max(0.0, min(1.0, (container_width - margin) / page_width))


def scale_transform(scale: float) -> str:
    return f"scale({format_number(scale)})"
