"""Bezier curve sampling.

Glyph outlines are made of line, quadratic and cubic Bezier segments.  The
samplers here turn one curve segment into a fixed number of polyline
points.  The start point is implied by the caller's cursor and is *not*
returned; the end point is always the last sample.
"""

from __future__ import annotations

from typing import List

from plaquecad.geom import Point2D

BEZIER_STEPS = 8


def sample_quadratic(p0: Point2D, p1: Point2D, p2: Point2D,
                     steps: int = BEZIER_STEPS) -> List[Point2D]:
    """Sample a quadratic Bezier from ``p0`` through control ``p1`` to ``p2``."""

    steps = max(1, int(steps))
    samples: List[Point2D] = []
    for i in range(1, steps + 1):
        t = i / steps
        mt = 1.0 - t
        a = mt * mt
        b = 2.0 * mt * t
        c = t * t
        samples.append((a * p0[0] + b * p1[0] + c * p2[0],
                        a * p0[1] + b * p1[1] + c * p2[1]))
    return samples


def sample_cubic(p0: Point2D, p1: Point2D, p2: Point2D, p3: Point2D,
                 steps: int = BEZIER_STEPS) -> List[Point2D]:
    """Sample a cubic Bezier from ``p0`` via controls ``p1``, ``p2`` to ``p3``."""

    steps = max(1, int(steps))
    samples: List[Point2D] = []
    for i in range(1, steps + 1):
        t = i / steps
        mt = 1.0 - t
        a = mt * mt * mt
        b = 3.0 * mt * mt * t
        c = 3.0 * mt * t * t
        d = t * t * t
        samples.append((a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
                        a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1]))
    return samples


__all__ = ['BEZIER_STEPS', 'sample_quadratic', 'sample_cubic']
