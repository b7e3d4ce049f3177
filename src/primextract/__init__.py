"""Extraction of lines, circles and arcs from raw raster images."""

from primextract.config import DetectorConfig, load_config
from primextract.exceptions import (
    BoundaryMisuseError, ConfigurationError, InvalidFormatError, PrimitiveExtractionError,
)
from primextract.models import Arc, Circle, GeometricPrimitives, Line, Point2D
from primextract.pipeline import PrimitiveDetector, process_image

__version__ = "0.1.0"

__all__ = [
    "Arc",
    "BoundaryMisuseError",
    "Circle",
    "ConfigurationError",
    "DetectorConfig",
    "GeometricPrimitives",
    "InvalidFormatError",
    "Line",
    "Point2D",
    "PrimitiveDetector",
    "PrimitiveExtractionError",
    "load_config",
    "process_image",
]
