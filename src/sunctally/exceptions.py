"""Exception classes for sunctally."""


class SuncTallyError(Exception):
    """Base class for sunctally exceptions."""


class HarnessError(SuncTallyError):
    """Raised when a harness cannot be launched or exits abnormally."""


class RegistryError(SuncTallyError):
    """Raised when a function registry file cannot be loaded."""
