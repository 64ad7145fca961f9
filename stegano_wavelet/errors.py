from __future__ import annotations


class StegoError(Exception):
    """Base class for every error raised by stegano_wavelet."""


class DimensionError(StegoError, ValueError):
    """Grid dimensions are incompatible with the transform or block layout."""


class CapacityError(StegoError, ValueError):
    """The secret needs more detail blocks than the cover can hold."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Secret needs {required} detail blocks but the cover only has {available}"
        )


class NoCandidateError(StegoError, RuntimeError):
    """A nearest-block search ran against an empty candidate pool."""


class KeyMismatchError(StegoError, ValueError):
    """Key data does not fit the image it is applied to."""


class KeyFormatError(StegoError, ValueError):
    """Serialized key data is malformed."""


class UnsupportedFormatError(StegoError, ValueError):
    """Image file extension is not a supported lossless format."""
