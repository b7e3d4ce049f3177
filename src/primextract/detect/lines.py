"""
Straight line segment extraction with Canny edges and probabilistic Hough.
"""

import cv2
import numpy as np

from primextract.geometry import as_point
from primextract.io.image_buffer import to_gray
from primextract.models import Line
from primextract.tracer import get_tracer, trace


@trace(label="detect_lines")
def detect_lines(image, features, config):
    """
    Detect line segments.
    
    `features` is accepted so corner-guided filtering can be added without
    changing the pipeline; it is not consulted.
    """
    params = config.line
    
    gray = to_gray(image)
    edges = cv2.Canny(gray, params.canny_low, params.canny_high)
    
    segments = cv2.HoughLinesP(
        edges,
        params.rho,
        params.theta,
        params.threshold,
        minLineLength=params.min_line_length,
        maxLineGap=params.max_line_gap,
    )
    
    if segments is None:
        return []
    
    lines = [
        Line(start=as_point((x1, y1)), end=as_point((x2, y2)))
        for x1, y1, x2, y2 in np.asarray(segments).reshape(-1, 4)
    ]
    get_tracer().event(f"Line segments: {len(lines)}")
    
    return lines
