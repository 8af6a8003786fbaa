"""
Errors that abort an extraction request.

Navigation and parsing problems are recovered locally and never show up
here; only failures that leave nothing to work with are raised.
"""


class ExtractionError(Exception):
    """Base class for fatal extraction failures."""


class BrowserSetupError(ExtractionError):
    """Browser process or context could not be created."""


class CaptureError(ExtractionError):
    """The full-page screenshot could not be taken."""


class InferenceError(ExtractionError):
    """The vision inference service gave no usable response."""
