"""Exceptions raised by the cache simulator.

Every error derives from `CacheSimError` so the command line entry point can
report any of them with a single handler. Each one also derives from the
builtin exception it specialises (ValueError / IndexError) so callers that
only know the builtin types still catch them.
"""


class CacheSimError(Exception):
    """Base class for simulator errors."""


class ConfigError(CacheSimError, ValueError):
    """Invalid or inconsistent cache geometry."""


class AddressOutOfRange(CacheSimError, IndexError):
    """Address does not fit in the configured address width."""

    def __init__(self, address, address_width: int):
        self.address = address
        self.address_width = address_width
        super().__init__(
            f"address {address!r} out of range [0, {(1 << address_width) - 1}] "
            f"for a {address_width}-bit address space"
        )


class TraceFormatError(CacheSimError, ValueError):
    """Malformed or empty address trace."""

    def __init__(self, message: str, line_number=None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


__all__ = ["CacheSimError", "ConfigError", "AddressOutOfRange", "TraceFormatError"]
