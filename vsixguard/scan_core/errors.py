"""Exceptions raised when a bundle cannot be analysed."""


class VsixGuardError(Exception):
    """Base class for scanner failures."""


class InvalidBundleError(VsixGuardError):
    """The given path is not a readable .vsix bundle."""


class ExtractionError(VsixGuardError):
    """No available tool could unpack the bundle."""
