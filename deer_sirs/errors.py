"""Exception types shared across the package."""


class ConfigurationError(ValueError):
    """Raised for a missing, malformed or out-of-range input.

    Always raised before any integration starts.
    """


class NumericalWarning(UserWarning):
    """Issued when a result is usable but numerically suspect."""
