r"""Parametric jersey silhouette.

The outline is a 13 point polygon with a stepped shoulder, an armhole notch
and a V collar.  Each style only changes five dimensions::

          x = aw            x = W - aw
          +------\     /------+        y = H
          |       \   /       |
          |        \ /  collar|
    +-----+         V         +-----+  y = H - shoulder_drop
    |                               |
    |                               |
    +-------------------------------+  y = 0
  x = 0                           x = W

The armhole notch runs from ``H - shoulder_drop`` down to
``H - armhole_depth`` along ``x = aw`` (and ``x = W - aw``) and back up, so
it encloses no area; :func:`plaquecad.geom.clean_polygon` removes it before
the outline is offset or extruded.

Points are listed from the bottom-left corner along the bottom edge first.
That is a positive (counter-clockwise) signed area in the y-up frame used
throughout plaquecad.
"""

from __future__ import annotations

from typing import Dict, NamedTuple

from plaquecad.geom import Polygon

JERSEY_WIDTH = 100.0
JERSEY_HEIGHT = 120.0


class SilhouetteDimensions(NamedTuple):
    shoulder_drop: float
    armhole_width: float
    armhole_depth: float
    collar_width: float
    collar_depth: float


STYLE_DIMENSIONS: Dict[str, SilhouetteDimensions] = {
    'NBA Modern': SilhouetteDimensions(14.0, 18.0, 24.0, 20.0, 12.0),
    'College': SilhouetteDimensions(14.0, 22.0, 24.0, 16.0, 10.0),
    'Retro': SilhouetteDimensions(18.0, 18.0, 30.0, 16.0, 10.0),
}

#: Used for any style not in :data:`STYLE_DIMENSIONS`.
DEFAULT_DIMENSIONS = SilhouetteDimensions(14.0, 18.0, 24.0, 16.0, 10.0)

STYLES = tuple(STYLE_DIMENSIONS)


def silhouette_dimensions(style: str) -> SilhouetteDimensions:
    """Return the dimensions for ``style``, or :data:`DEFAULT_DIMENSIONS`."""

    return STYLE_DIMENSIONS.get(style, DEFAULT_DIMENSIONS)


def jersey_silhouette(style: str, width: float = JERSEY_WIDTH,
                      height: float = JERSEY_HEIGHT) -> Polygon:
    """Return the 13 point jersey outline for ``style``."""

    sd, aw, ad, cw, cd = silhouette_dimensions(style)
    w, h = float(width), float(height)
    return [
        (0.0, 0.0),
        (w, 0.0),
        (w, h - sd),
        (w - aw, h - sd),
        (w - aw, h - ad),
        (w - aw, h),
        (w / 2 + cw, h),
        (w / 2, h - cd),
        (w / 2 - cw, h),
        (aw, h),
        (aw, h - ad),
        (aw, h - sd),
        (0.0, h - sd),
    ]


__all__ = [
    'JERSEY_WIDTH',
    'JERSEY_HEIGHT',
    'SilhouetteDimensions',
    'STYLE_DIMENSIONS',
    'DEFAULT_DIMENSIONS',
    'STYLES',
    'silhouette_dimensions',
    'jersey_silhouette',
]
