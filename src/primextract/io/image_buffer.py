"""
Conversion between raw pixel buffers and OpenCV images.

Buffers are row-major and channel-interleaved (standard raster layout) with
one byte per sample. Images are uint8 numpy arrays shaped (H, W) for a single
channel and (H, W, C) otherwise, with colour channels in OpenCV's BGR(A) order.
"""

import cv2
import numpy as np

from primextract.exceptions import InvalidFormatError
from primextract.tracer import get_tracer


SUPPORTED_CHANNELS = (1, 3, 4)


def to_image(buffer, width, height, channels):
    """
    Wrap a pixel buffer as an image.
    
    Accepts bytes, bytearray, memoryview or a uint8 numpy array. Bytes past
    width*height*channels are ignored. The returned image owns a copy of the
    pixel data.
    
    Raises InvalidFormatError for an unsupported channel count, negative
    dimensions, or a buffer that is too short.
    """
    if channels not in SUPPORTED_CHANNELS:
        raise InvalidFormatError(
            f"Unsupported channel count {channels}, expected one of {SUPPORTED_CHANNELS}",
            width=width, height=height, channels=channels,
        )
    
    if width < 0 or height < 0:
        raise InvalidFormatError(
            f"Negative image size {width}x{height}",
            width=width, height=height, channels=channels,
        )
    
    if isinstance(buffer, np.ndarray):
        data = np.asarray(buffer, dtype=np.uint8).reshape(-1)
    else:
        data = np.frombuffer(buffer, dtype=np.uint8)
    expected = width * height * channels
    
    if data.size < expected:
        raise InvalidFormatError(
            f"Buffer holds {data.size} bytes, {width}x{height}x{channels} needs {expected}",
            width=width, height=height, channels=channels, buffer_length=int(data.size),
        )
    
    shape = (height, width) if channels == 1 else (height, width, channels)
    image = data[:expected].reshape(shape).copy()
    
    get_tracer().event(f"Adapted buffer: {width}x{height}x{channels}", level="DEBUG")
    
    return image


def to_buffer(image):
    """
    Serialize an image back to a raw buffer.
    
    Contiguous images are dumped directly; strided views (ROIs, slices) are
    emitted one row at a time.
    """
    if image.flags.c_contiguous:
        return image.tobytes()
    
    return b"".join(np.ascontiguousarray(row).tobytes() for row in image)


def is_empty_image(image):
    """True for a missing or zero-area image."""
    return image is None or image.size == 0


def to_gray(image):
    """Convert a 1, 3 or 4 channel image to a single-channel image."""
    if image.ndim == 2:
        return image
    
    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0]
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
