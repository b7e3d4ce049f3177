"""
Corner feature extraction.

Salient points are picked from a normalised Harris response image; they feed
the arc fitter and are handed to the line detector.
"""

import cv2
import numpy as np

from primextract.geometry import as_point
from primextract.io.image_buffer import to_gray
from primextract.tracer import get_tracer, trace


@trace(label="detect_features")
def detect_features(image, config):
    """
    Detect corner-like feature points.
    
    Returns at most config.corner.max_corners Point2D values in the order
    goodFeaturesToTrack reports them (strongest first). An image with no
    qualifying corners yields an empty list.
    """
    tracer = get_tracer()
    params = config.corner
    
    gray = to_gray(image)
    blurred = cv2.GaussianBlur(gray, (params.blur_kernel, params.blur_kernel), 0)
    
    response = cv2.cornerHarris(blurred, params.block_size, params.ksize, params.k)
    normalized = cv2.normalize(response, None, 0, 255, cv2.NORM_MINMAX, cv2.CV_8U)
    
    corners = cv2.goodFeaturesToTrack(
        normalized,
        params.max_corners,
        params.quality_level,
        params.min_distance,
    )
    
    if corners is None:
        tracer.event("No corners above quality threshold")
        return []
    
    points = [as_point(xy) for xy in np.asarray(corners).reshape(-1, 2)]
    tracer.event(f"Feature points: {len(points)}")
    
    return points
