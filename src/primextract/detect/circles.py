"""
Full circle extraction with the Hough gradient transform.
"""

import cv2
import numpy as np

from primextract.geometry import as_point
from primextract.io.image_buffer import to_gray
from primextract.models import Circle
from primextract.tracer import get_tracer, trace


@trace(label="detect_circles")
def detect_circles(image, config):
    """Detect circles whose radius lies in [min_radius, max_radius]."""
    params = config.circle
    
    gray = to_gray(image)
    kernel = (params.blur_kernel, params.blur_kernel)
    blurred = cv2.GaussianBlur(gray, kernel, params.blur_sigma, sigmaY=params.blur_sigma)
    
    detected = cv2.HoughCircles(
        blurred,
        cv2.HOUGH_GRADIENT,
        params.dp,
        params.min_dist,
        param1=params.param1,
        param2=params.param2,
        minRadius=params.min_radius,
        maxRadius=params.max_radius,
    )
    
    if detected is None:
        return []
    
    # A zero radius can only come from a degenerate accumulator peak
    circles = [
        Circle(center=as_point((x, y)), radius=float(r))
        for x, y, r in np.asarray(detected).reshape(-1, 3)
        if r > 0
    ]
    get_tracer().event(f"Circles: {len(circles)}")
    
    return circles
