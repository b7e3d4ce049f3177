"""
Opaque-handle interface for callers that cannot hold Python objects.

Detectors and results live in a registry keyed by integer handles. A caller
creates a detector, runs images through it, reads results back by index and
releases every handle exactly once. The context managers at the bottom give
scoped acquisition with release on every exit path.

Index accessors do no bounds checking; an out-of-range index is caller
misuse. Handle misuse (unknown, released or wrong kind) raises
BoundaryMisuseError.
"""

import itertools
from contextlib import contextmanager

from primextract.exceptions import BoundaryMisuseError
from primextract.models import GeometricPrimitives
from primextract.pipeline import PrimitiveDetector
from primextract.tracer import get_tracer


class HandleRegistry:
    """Maps integer handles to owned objects."""
    
    def __init__(self):
        self._objects = {}
        self._ids = itertools.count(1)
    
    def register(self, obj):
        handle = next(self._ids)
        self._objects[handle] = obj
        return handle
    
    def get(self, handle, kind):
        """Return the object behind handle, checking it is a live `kind`."""
        obj = self._objects.get(handle)
        if obj is None:
            raise BoundaryMisuseError("Unknown or released handle", handle=handle)
        if not isinstance(obj, kind):
            raise BoundaryMisuseError(
                f"Handle refers to {type(obj).__name__}, expected {kind.__name__}",
                handle=handle,
            )
        return obj
    
    def release(self, handle, kind):
        """Drop ownership of handle. Releasing twice is misuse."""
        self.get(handle, kind)
        # a concurrent release may have won since the check
        if self._objects.pop(handle, None) is None:
            raise BoundaryMisuseError("Handle already released", handle=handle)
    
    def __len__(self):
        return len(self._objects)


_registry = HandleRegistry()


def create_detector(config=None):
    """Allocate a detector with the given (or default) configuration."""
    handle = _registry.register(PrimitiveDetector(config))
    get_tracer().event(f"Created detector handle {handle}", level="DEBUG")
    return handle


def process_image(detector, buffer, width, height, channels):
    """Run a detector over a raw buffer and return a result handle."""
    primitives = _registry.get(detector, PrimitiveDetector).process_image(
        buffer, width, height, channels
    )
    return _registry.register(primitives)


def line_count(result):
    return len(_result(result).lines)


def line(result, index):
    return _result(result).lines[index]


def circle_count(result):
    return len(_result(result).circles)


def circle(result, index):
    return _result(result).circles[index]


def arc_count(result):
    return len(_result(result).arcs)


def arc(result, index):
    return _result(result).arcs[index]


def destroy_result(result):
    _registry.release(result, GeometricPrimitives)


def destroy_detector(detector):
    _registry.release(detector, PrimitiveDetector)
    get_tracer().event(f"Destroyed detector handle {detector}", level="DEBUG")


def live_handle_count():
    """Number of handles not yet released."""
    return len(_registry)


def _result(handle):
    return _registry.get(handle, GeometricPrimitives)


@contextmanager
def detector_session(config=None):
    """Yield a detector handle that is destroyed when the block exits."""
    handle = create_detector(config)
    try:
        yield handle
    finally:
        destroy_detector(handle)


@contextmanager
def result_session(detector, buffer, width, height, channels):
    """Yield a result handle for one image, destroyed when the block exits."""
    handle = process_image(detector, buffer, width, height, channels)
    try:
        yield handle
    finally:
        destroy_result(handle)
