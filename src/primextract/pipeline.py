"""
Main pipeline orchestrator for primextract.

Runs the detector stages over one raw pixel buffer and assembles the
GeometricPrimitives aggregate.
"""

from primextract.config import DetectorConfig
from primextract.detect.arcs import fit_arcs
from primextract.detect.circles import detect_circles
from primextract.detect.features import detect_features
from primextract.detect.lines import detect_lines
from primextract.geometry import is_point_on_circle, is_point_on_line
from primextract.io.image_buffer import is_empty_image, to_image
from primextract.models import GeometricPrimitives
from primextract.tracer import get_tracer, trace


class PrimitiveDetector:
    """
    Extracts lines, circles and arcs from raw images.
    
    Holds only the immutable detector configuration, so one instance can be
    shared by any number of concurrent process_image calls.
    """
    
    def __init__(self, config=None):
        self._config = config if config is not None else DetectorConfig()
    
    @property
    def config(self):
        return self._config
    
    def process_image(self, buffer, width, height, channels):
        """Extract primitives from a raw buffer. See process_image()."""
        return process_image(buffer, width, height, channels, config=self._config)


@trace(label="process_image", arg_names=["width", "height", "channels"])
def process_image(buffer, width, height, channels, config=None):
    """
    Extract geometric primitives from a raw pixel buffer.
    
    Args:
        buffer: row-major, channel-interleaved uint8 pixels
        width, height: image size in pixels
        channels: 1 (gray), 3 (BGR) or 4 (BGRA)
        config: DetectorConfig (defaults if omitted)
    
    Returns:
        GeometricPrimitives; empty for a zero-area image
    
    Raises InvalidFormatError for a malformed buffer. Failures inside the
    signal library propagate unchanged.
    """
    tracer = get_tracer()
    
    if config is None:
        config = DetectorConfig()
    
    with tracer.span("adapt", module="pipeline"):
        image = to_image(buffer, width, height, channels)
    
    if is_empty_image(image):
        tracer.event("Empty image, nothing to extract")
        return GeometricPrimitives()
    
    with tracer.span("features", module="pipeline"):
        features = detect_features(image, config)
    
    with tracer.span("lines", module="pipeline"):
        lines = detect_lines(image, features, config)
    
    with tracer.span("circles", module="pipeline"):
        circles = detect_circles(image, config)
    
    with tracer.span("arcs", module="pipeline"):
        arcs = fit_arcs(features, config)
    
    primitives = GeometricPrimitives(lines=lines, circles=circles, arcs=arcs)
    
    if tracer.is_enabled_for("DEBUG"):
        _report_feature_support(features, primitives)
    
    tracer.event(
        f"Extraction complete: {len(lines)} lines, {len(circles)} circles, {len(arcs)} arcs"
    )
    
    return primitives


def _report_feature_support(features, primitives):
    """Log how many feature points lie on a detected line or circle."""
    on_line = sum(
        1 for p in features if any(is_point_on_line(p, line) for line in primitives.lines)
    )
    on_circle = sum(
        1 for p in features if any(is_point_on_circle(p, c) for c in primitives.circles)
    )
    get_tracer().event(
        f"Feature support: {on_line}/{len(features)} on lines, "
        f"{on_circle}/{len(features)} on circles",
        level="DEBUG",
    )
