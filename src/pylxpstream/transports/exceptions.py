"""Transport-specific exceptions.

This module provides exception classes for the dongle byte stream,
allowing callers to tell connection loss apart from slow or broken reads.

All transport exceptions inherit from
:class:`~pylxpstream.exceptions.LuxpowerStreamError` so callers can use a
single ``except LuxpowerStreamError`` to catch both decode and transport
failures.
"""

from __future__ import annotations

from pylxpstream.exceptions import LuxpowerStreamError


class TransportError(LuxpowerStreamError):
    """Base exception for all transport errors."""

    pass


class TransportConnectionError(TransportError):
    """Failed to connect to the dongle, or the dongle closed the connection."""

    pass


class TransportTimeoutError(TransportError):
    """No data arrived within the configured timeout."""

    pass


class TransportReadError(TransportError):
    """Failed to read data from the dongle."""

    pass


__all__ = [
    "TransportConnectionError",
    "TransportError",
    "TransportReadError",
    "TransportTimeoutError",
]
