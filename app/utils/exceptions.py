"""
Error kinds raised while relaying an image.

Every steady-state failure is an ``ImageRelayError`` so the watch loop can
log it and move on to the next event.
"""

from pathlib import Path
from typing import Optional


class ImageRelayError(Exception):
    """Base exception for Image Relay."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(self.message)


class ConfigError(ImageRelayError):
    """Raised when the configuration file cannot be read or validated."""


class FileReadError(ImageRelayError):
    """Raised when a source file cannot be opened or read."""


class UploadTransportError(ImageRelayError):
    """Raised when the request never produced a response."""


class ApiResponseError(ImageRelayError):
    """Raised when the API answers with anything other than HTTP 200."""

    def __init__(self, status_code: int, body: str, path: Optional[Path] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API returned {status_code}: {body}", path=path)


class OutputWriteError(ImageRelayError):
    """Raised when the API result cannot be written to the processed directory."""


class RelocationError(ImageRelayError):
    """Raised when a processed original cannot be archived."""
