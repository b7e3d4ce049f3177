"""Pytest fixtures for primextract tests."""

import math
import tempfile

import cv2
import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def circle_image():
    """200x200 grayscale image with a dark disc of radius 40 centered at (100, 100)."""
    img = np.full((200, 200), 255, dtype=np.uint8)
    cv2.circle(img, (100, 100), 40, 0, -1)
    return img


@pytest.fixture
def line_image():
    """200x200 grayscale image with a single 100px horizontal line."""
    img = np.full((200, 200), 255, dtype=np.uint8)
    cv2.line(img, (50, 100), (150, 100), 0, 2)
    return img


@pytest.fixture
def rectangle_image():
    """A BGR image with a black rectangle outline, rich in corners."""
    img = np.ones((200, 300, 3), dtype=np.uint8) * 255
    cv2.rectangle(img, (50, 50), (250, 150), (0, 0, 0), 2)
    return img


@pytest.fixture
def uniform_image():
    """A constant gray image with no structure at all."""
    return np.full((120, 160), 128, dtype=np.uint8)


@pytest.fixture
def noise_image():
    """Random noise, which produces far more corner candidates than the cap."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(200, 200), dtype=np.uint8)


@pytest.fixture
def default_config():
    """Create default detector configuration."""
    from primextract.config import DetectorConfig
    return DetectorConfig()


@pytest.fixture
def equilateral_points():
    """Vertices of an equilateral triangle inscribed in a radius-25 circle at the origin."""
    from primextract.models import Point2D
    
    radius = 25.0
    return [
        Point2D(x=radius * math.cos(math.radians(a)), y=radius * math.sin(math.radians(a)))
        for a in (90.0, 210.0, 330.0)
    ]


@pytest.fixture
def disable_tracer():
    """Make sure the global tracer is off again after the test."""
    yield
    from primextract.tracer import configure_tracer
    configure_tracer(enabled=False)


@pytest.fixture
def image_args():
    """Split an image into process_image arguments (buffer, width, height, channels)."""
    def split(img):
        height, width = img.shape[:2]
        channels = 1 if img.ndim == 2 else img.shape[2]
        return img.tobytes(), width, height, channels
    return split
