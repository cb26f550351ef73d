"""Error types raised while turning an image into a pattern roller mesh."""

from __future__ import annotations


class RollerError(ValueError):
    """Base class for every failure the roller pipeline reports."""


class InvalidDimension(RollerError):
    pass


class ConflictingParameters(RollerError):
    pass


class InvalidPinSize(RollerError):
    pass


class ChannelTooLarge(RollerError):
    pass


class NonManifoldMesh(RollerError):
    pass


class InconsistentWinding(RollerError):
    pass


class ImageDecodeFailure(RollerError):
    pass


class IOFailure(RollerError):
    pass
