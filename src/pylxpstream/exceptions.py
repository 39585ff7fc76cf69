"""Exceptions raised by pylxpstream.

Every exception inherits from :class:`LuxpowerStreamError` so callers can
catch anything raised by the package with a single ``except`` clause.

Frame errors are scoped to one frame: they never leave state behind, so a
caller can log (or silently drop) the offending buffer and carry on with the
next one.
"""

from __future__ import annotations


class LuxpowerStreamError(Exception):
    """Base exception for all pylxpstream errors."""

    pass


class FrameError(LuxpowerStreamError):
    """Base exception for a frame that was rejected during decoding.

    Attributes:
        kind: Stable identifier of the failure, used as a metrics label.
        frame_length: Number of bytes received for the frame, if known.
    """

    kind: str = "frame_error"

    def __init__(self, message: str, frame_length: int | None = None) -> None:
        self.frame_length = frame_length
        super().__init__(message)


class HeaderPrefixMismatch(FrameError):
    """The frame does not start with the 0x1AA1 magic prefix."""

    kind = "header_prefix_mismatch"

    def __init__(self, prefix: int, frame_length: int | None = None) -> None:
        self.prefix = prefix
        super().__init__(f"Invalid header prefix: 0x{prefix:04X}", frame_length)


class LengthMismatch(FrameError):
    """The declared packet length disagrees with the bytes received."""

    kind = "length_mismatch"

    def __init__(self, declared: int, received: int) -> None:
        self.declared = declared
        self.received = received
        super().__init__(
            f"Invalid length: header declares {declared}, "
            f"received {received} bytes (expected {received - 6})",
            received,
        )


class UnsupportedDeviceFunction(FrameError):
    """The translated sub-header carries something other than read-input."""

    kind = "unsupported_device_function"

    def __init__(self, device_function: int, frame_length: int | None = None) -> None:
        self.device_function = device_function
        super().__init__(
            f"Unsupported device function: 0x{device_function:02X}", frame_length
        )


class UnrecognizedFrame(FrameError):
    """The (register, packet_length) pair is not a known telemetry block."""

    kind = "unrecognized_frame"

    def __init__(
        self, register: int, packet_length: int, frame_length: int | None = None
    ) -> None:
        self.register = register
        self.packet_length = packet_length
        super().__init__(
            f"Unrecognized frame: register={register}, packet_length={packet_length}",
            frame_length,
        )


class TruncatedFrame(FrameError):
    """Not enough bytes remain to fill the selected structure."""

    kind = "truncated_frame"

    def __init__(
        self,
        structure: str,
        required: int,
        available: int,
        frame_length: int | None = None,
    ) -> None:
        self.structure = structure
        self.required = required
        self.available = available
        super().__init__(
            f"Truncated frame: {structure} needs {required} bytes, {available} available",
            frame_length,
        )


class SinkError(LuxpowerStreamError):
    """A record could not be delivered to a downstream sink."""

    def __init__(self, sink: str, message: str) -> None:
        self.sink = sink
        super().__init__(f"{sink}: {message}")


__all__ = [
    "FrameError",
    "HeaderPrefixMismatch",
    "LengthMismatch",
    "LuxpowerStreamError",
    "SinkError",
    "TruncatedFrame",
    "UnrecognizedFrame",
    "UnsupportedDeviceFunction",
]
