"""
Arc fitting over feature point triples.

Every unordered triple of feature points (i < j < k) whose triangle has no
angle outside (min_angle, max_angle) is fitted with its circumscribed circle.
The arc runs from the first point's angle to the third point's angle as seen
from the center; the middle point only takes part in the angle test.

The enumeration is brute force, O(n^3), and near-identical arcs from
different triples are not merged. Triples are evaluated in numpy batches
so memory stays bounded for large feature sets.
"""

import itertools
import math

import numpy as np

from primextract.geometry import angle_from, distance, triangle_angle
from primextract.models import Arc, Point2D
from primextract.tracer import get_tracer, trace


def triangle_is_plausible(p1, p2, p3, min_angle=30.0, max_angle=150.0):
    """Check that all three internal angles lie strictly inside (min_angle, max_angle)."""
    angles = (
        triangle_angle(p1, p2, p3),
        triangle_angle(p2, p3, p1),
        triangle_angle(p3, p1, p2),
    )
    return all(min_angle < a < max_angle for a in angles)


def circumcircle(p1, p2, p3, tolerance=1e-6):
    """
    Circumscribed circle of three points.
    
    Returns (center, radius), or None when the points are collinear within
    tolerance.
    """
    x1, y1 = p1.x, p1.y
    x2, y2 = p2.x, p2.y
    x3, y3 = p3.x, p3.y
    
    a = x1 * (y2 - y3) - y1 * (x2 - x3) + x2 * y3 - x3 * y2
    if abs(a) <= tolerance:
        return None
    
    s1 = x1 * x1 + y1 * y1
    s2 = x2 * x2 + y2 * y2
    s3 = x3 * x3 + y3 * y3
    b = s1 * (y3 - y2) + s2 * (y1 - y3) + s3 * (y2 - y1)
    c = s1 * (x2 - x3) + s2 * (x3 - x1) + s3 * (x1 - x2)
    
    center = Point2D(x=-b / (2 * a), y=-c / (2 * a))
    return center, distance(p1, center)


def fit_arc(p1, p2, p3, min_angle=30.0, max_angle=150.0, tolerance=1e-6):
    """Fit a single triple. Returns an Arc or None if the triple is rejected."""
    if not triangle_is_plausible(p1, p2, p3, min_angle, max_angle):
        return None
    
    fitted = circumcircle(p1, p2, p3, tolerance)
    if fitted is None:
        return None
    
    center, radius = fitted
    return Arc(
        center=center,
        radius=radius,
        start_angle=angle_from(center, p1),
        end_angle=angle_from(center, p3),
    )


@trace(label="fit_arcs", arg_names=["points"])
def fit_arcs(points, config):
    """
    Fit arcs to all plausible triples of feature points.
    
    Returns an empty list for fewer than three points. Output order follows
    lexicographic (i, j, k) triple order.
    """
    tracer = get_tracer()
    params = config.arc
    
    n = len(points)
    if n < 3:
        return []
    
    coords = np.array([[p.x, p.y] for p in points], dtype=np.float64)
    triples = itertools.combinations(range(n), 3)
    
    arcs = []
    total = 0
    rejected_collinear = 0
    
    while True:
        batch = np.fromiter(
            itertools.chain.from_iterable(itertools.islice(triples, params.batch_size)),
            dtype=np.intp,
        ).reshape(-1, 3)
        if len(batch) == 0:
            break
        
        total += len(batch)
        batch_arcs, collinear = _fit_batch(
            coords[batch[:, 0]], coords[batch[:, 1]], coords[batch[:, 2]], params
        )
        arcs.extend(batch_arcs)
        rejected_collinear += collinear
    
    tracer.event(f"Arcs: {len(arcs)} from {total} triples")
    if rejected_collinear:
        tracer.event(f"Skipped {rejected_collinear} collinear triples", level="DEBUG")
    
    return arcs


def _interior_angle(adjacent1, adjacent2, opposite):
    """Vectorised law of cosines, in degrees, NaN where a side is zero."""
    with np.errstate(divide="ignore", invalid="ignore"):
        cos = (adjacent1 ** 2 + adjacent2 ** 2 - opposite ** 2) / (2 * adjacent1 * adjacent2)
        return np.degrees(np.arccos(np.clip(cos, -1.0, 1.0)))


def _fit_batch(p1, p2, p3, params):
    """Fit one batch of triples given as three (N, 2) coordinate arrays."""
    side_a = np.hypot(*(p2 - p3).T)  # opposite p1
    side_b = np.hypot(*(p1 - p3).T)  # opposite p2
    side_c = np.hypot(*(p1 - p2).T)  # opposite p3
    
    angles = np.stack([
        _interior_angle(side_b, side_c, side_a),
        _interior_angle(side_a, side_c, side_b),
        _interior_angle(side_a, side_b, side_c),
    ])
    
    # NaN angles (zero-length sides) fail both comparisons
    plausible = np.all((angles > params.min_angle) & (angles < params.max_angle), axis=0)
    plausible &= (side_a > 0) & (side_b > 0) & (side_c > 0)
    
    x1, y1 = p1.T
    x2, y2 = p2.T
    x3, y3 = p3.T
    
    a = x1 * (y2 - y3) - y1 * (x2 - x3) + x2 * y3 - x3 * y2
    non_collinear = np.abs(a) > params.collinear_tolerance
    keep = plausible & non_collinear
    
    if not keep.any():
        return [], int(np.count_nonzero(plausible & ~non_collinear))
    
    x1, y1, x2, y2, x3, y3, a = (v[keep] for v in (x1, y1, x2, y2, x3, y3, a))
    
    s1 = x1 * x1 + y1 * y1
    s2 = x2 * x2 + y2 * y2
    s3 = x3 * x3 + y3 * y3
    b = s1 * (y3 - y2) + s2 * (y1 - y3) + s3 * (y2 - y1)
    c = s1 * (x2 - x3) + s2 * (x3 - x1) + s3 * (x1 - x2)
    
    cx = -b / (2 * a)
    cy = -c / (2 * a)
    radius = np.hypot(x1 - cx, y1 - cy)
    start = np.arctan2(y1 - cy, x1 - cx)
    end = np.arctan2(y3 - cy, x3 - cx)
    
    arcs = [
        Arc(
            center=Point2D(x=float(x), y=float(y)),
            radius=float(r),
            start_angle=float(s),
            end_angle=float(e),
        )
        for x, y, r, s, e in zip(cx, cy, radius, start, end)
        if r > 0 and math.isfinite(r)
    ]
    
    return arcs, int(np.count_nonzero(plausible & ~non_collinear))
