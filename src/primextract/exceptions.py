"""Exceptions raised by primextract."""

from typing import Optional


class PrimitiveExtractionError(Exception):
    """Base exception for all primextract errors.
    
    Attributes:
        message: Human-readable error description
        error_code: Optional error code for programmatic handling
    """
    
    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
    
    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class InvalidFormatError(PrimitiveExtractionError):
    """Pixel buffer and declared geometry do not describe a valid image.
    
    Attributes:
        width, height, channels: The declared image geometry
        buffer_length: Number of bytes actually supplied
    """
    
    def __init__(
        self,
        message: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        channels: Optional[int] = None,
        buffer_length: Optional[int] = None,
    ):
        super().__init__(message, error_code="INVALID_FORMAT")
        self.width = width
        self.height = height
        self.channels = channels
        self.buffer_length = buffer_length


class ConfigurationError(PrimitiveExtractionError):
    """Configuration file cannot be used.
    
    Attributes:
        config_path: The file that was being loaded
    """
    
    def __init__(self, message: str, config_path: Optional[str] = None):
        super().__init__(message, error_code="CONFIG_ERROR")
        self.config_path = config_path


class BoundaryMisuseError(PrimitiveExtractionError):
    """A handle was used after release, released twice, or is of the wrong kind."""
    
    def __init__(self, message: str, handle: Optional[int] = None):
        super().__init__(message, error_code="BOUNDARY_MISUSE")
        self.handle = handle
    
    def __str__(self) -> str:
        if self.handle is not None:
            return f"{super().__str__()} (handle: {self.handle})"
        return super().__str__()
