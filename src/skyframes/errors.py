from __future__ import annotations


class FrameConversionError(ValueError):
    """A frame conversion was requested that the pipeline does not support."""


class InvalidFrameError(FrameConversionError):
    """Frame tag outside the enumeration, or a projected frame (NDC/WINDOW)."""


class BackwardConversionError(FrameConversionError):
    """Destination frame precedes the origin frame."""


class InvalidOriginError(ValueError):
    """Origin tag outside the enumeration or not accepted by the operation."""


class NumericContractError(RuntimeError):
    """Non-finite output, or an at-infinity direction that lost unit length.

    Indicates corrupted upstream state (bad ephemeris, bad time); never
    caught inside the package.
    """
