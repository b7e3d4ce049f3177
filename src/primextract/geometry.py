"""
Plane geometry helpers shared by the detectors.

All functions take and return plain floats or Point2D/Line/Circle models.
"""

import math

from primextract.models import Point2D


def distance(p1, p2):
    """Euclidean distance between two points."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def triangle_angle(p1, p2, p3):
    """
    Internal angle at p1 of the triangle (p1, p2, p3), in degrees.
    
    Uses the law of cosines with the cosine clamped to [-1, 1].
    Returns 0 for a triangle with a zero-length side.
    """
    a = distance(p2, p3)
    b = distance(p1, p3)
    c = distance(p1, p2)
    
    if a == 0 or b == 0 or c == 0:
        return 0.0
    
    cos_a = (b * b + c * c - a * a) / (2 * b * c)
    cos_a = max(-1.0, min(1.0, cos_a))
    
    return math.degrees(math.acos(cos_a))


def point_line_distance(point, line):
    """
    Perpendicular distance from point to the infinite line through `line`.
    
    A zero-length line falls back to the distance to its start point.
    """
    dx = line.end.x - line.start.x
    dy = line.end.y - line.start.y
    norm = math.hypot(dx, dy)
    
    if norm == 0:
        return distance(point, line.start)
    
    cross = dy * point.x - dx * point.y + line.end.x * line.start.y - line.end.y * line.start.x
    return abs(cross) / norm


def is_point_on_line(point, line, tolerance=2.0):
    """Check if point lies within tolerance of the line."""
    return point_line_distance(point, line) <= tolerance


def is_point_on_circle(point, circle, tolerance=2.0):
    """Check if point lies within tolerance of the circle's perimeter."""
    return abs(distance(point, circle.center) - circle.radius) <= tolerance


def angle_from(center, point):
    """atan2 angle of point as seen from center, in radians."""
    return math.atan2(point.y - center.y, point.x - center.x)


def as_point(xy):
    """Build a Point2D from any (x, y) pair."""
    return Point2D(x=float(xy[0]), y=float(xy[1]))
