"""WiFi dongle TCP byte stream.

This module provides the DongleStream class, which holds the persistent
TCP connection to the inverter's WiFi dongle (typically port 8000) and
hands each received buffer to the caller as one frame.

The dongle pushes heartbeat and telemetry frames on its own; this client
only listens. Each socket read is treated as exactly one frame, there is
no reassembly of frames split across reads.

IMPORTANT: Single-Client Limitation
------------------------------------
The WiFi dongle supports only ONE concurrent TCP connection.
Running multiple clients causes connection errors and data loss.
Disable other integrations (Solar Assistant, lxp-bridge) before using.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from pylxpstream.constants import DEFAULT_PORT, DEFAULT_READ_SIZE, DEFAULT_TIMEOUT

from .exceptions import (
    TransportConnectionError,
    TransportReadError,
    TransportTimeoutError,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_READ_TIMEOUT = 300.0  # Dongle sends a heartbeat well within this


class DongleStream:
    """Persistent TCP stream from a LuxPower/EG4 WiFi dongle.

    Example:
        async with DongleStream("192.168.1.100") as stream:
            async for frame in stream.frames():
                result = decode_frame(frame)
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        read_timeout: float | None = DEFAULT_READ_TIMEOUT,
        connection_retries: int = 3,
        read_size: int = DEFAULT_READ_SIZE,
    ) -> None:
        """Initialize the dongle stream.

        Args:
            host: IP address or hostname of the WiFi dongle
            port: TCP port (default 8000)
            timeout: Connection timeout in seconds
            read_timeout: Maximum seconds to wait for one frame (None = forever)
            connection_retries: Number of connection attempts with backoff
            read_size: Maximum bytes taken by one read
        """
        self._host = host
        self._port = port
        self._timeout = timeout
        self._read_timeout = read_timeout
        self._connection_retries = connection_retries
        self._read_size = read_size
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._connected = False

    @property
    def host(self) -> str:
        """Get the dongle host address."""
        return self._host

    @property
    def port(self) -> int:
        """Get the dongle TCP port."""
        return self._port

    @property
    def is_connected(self) -> bool:
        """True while the TCP connection is open."""
        return self._connected

    async def __aenter__(self) -> DongleStream:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    async def connect(self) -> None:
        """Open the TCP connection to the dongle with retry and backoff.

        Retries with exponential backoff (1s, 2s, 4s, ...) since the dongle
        may still be holding a previous connection open.

        Raises:
            TransportConnectionError: If all connection attempts fail
        """
        last_error: Exception | None = None
        retry_delay = 1.0

        for attempt in range(self._connection_retries):
            try:
                if attempt > 0:
                    _LOGGER.info(
                        "Connection retry %d/%d to %s:%s (waiting %.1fs)...",
                        attempt,
                        self._connection_retries - 1,
                        self._host,
                        self._port,
                        retry_delay,
                    )
                    await asyncio.sleep(retry_delay)
                    retry_delay *= 2

                self._reader, self._writer = await asyncio.wait_for(
                    asyncio.open_connection(self._host, self._port),
                    timeout=self._timeout,
                )
                self._connected = True
                _LOGGER.info(
                    "Connected to dongle at %s:%s%s",
                    self._host,
                    self._port,
                    f" after {attempt} retries" if attempt > 0 else "",
                )
                return

            except TimeoutError as err:
                last_error = err
                _LOGGER.warning(
                    "Timeout connecting to dongle at %s:%s (attempt %d/%d)",
                    self._host,
                    self._port,
                    attempt + 1,
                    self._connection_retries,
                )
            except OSError as err:
                last_error = err
                _LOGGER.warning(
                    "Connection failed to %s:%s: %s (attempt %d/%d)",
                    self._host,
                    self._port,
                    err,
                    attempt + 1,
                    self._connection_retries,
                )

        if isinstance(last_error, TimeoutError):
            raise TransportConnectionError(
                f"Timeout connecting to {self._host}:{self._port} after "
                f"{self._connection_retries} attempts"
            ) from last_error
        raise TransportConnectionError(
            f"Failed to connect to {self._host}:{self._port} after "
            f"{self._connection_retries} attempts: {last_error}. "
            "Check that no other client is connected (dongle allows only ONE connection)."
        ) from last_error

    async def disconnect(self) -> None:
        """Close the TCP connection.

        Uses a timeout on wait_closed() so a stuck connection cannot hang
        shutdown.
        """
        if self._writer:
            try:
                self._writer.close()
                await asyncio.wait_for(self._writer.wait_closed(), timeout=5.0)
            except TimeoutError:
                _LOGGER.warning(
                    "Timeout waiting for connection close to %s:%s",
                    self._host,
                    self._port,
                )
            except OSError as err:
                _LOGGER.debug("Error closing dongle connection: %s", err)

        self._reader = None
        self._writer = None
        self._connected = False
        _LOGGER.debug("Dongle stream disconnected from %s:%s", self._host, self._port)

    def _mark_disconnected(self) -> None:
        self._connected = False
        self._reader = None
        if self._writer:
            self._writer.close()
        self._writer = None

    async def read_frame(self) -> bytes:
        """Read one frame (one socket read) from the dongle.

        Returns:
            The bytes received by a single read

        Raises:
            TransportConnectionError: If not connected or the dongle closed
                the connection
            TransportTimeoutError: If nothing arrived within read_timeout
            TransportReadError: On socket errors
        """
        if not self._connected or self._reader is None:
            raise TransportConnectionError("Stream not connected")

        try:
            data = await asyncio.wait_for(
                self._reader.read(self._read_size),
                timeout=self._read_timeout,
            )
        except TimeoutError as err:
            raise TransportTimeoutError(
                f"No data from dongle at {self._host}:{self._port} "
                f"within {self._read_timeout}s"
            ) from err
        except OSError as err:
            _LOGGER.error("Socket error reading from dongle: %s", err)
            self._mark_disconnected()
            raise TransportReadError(f"Socket error: {err}") from err

        if not data:
            self._mark_disconnected()
            raise TransportConnectionError(
                f"Dongle at {self._host}:{self._port} closed the connection"
            )

        _LOGGER.debug("%d -> %s", len(data), data.hex())
        return data

    async def frames(self) -> AsyncIterator[bytes]:
        """Yield frames until the dongle closes the connection.

        Timeouts and socket errors propagate to the caller.

        Raises:
            TransportConnectionError: If the stream was never connected
        """
        if not self._connected:
            raise TransportConnectionError("Stream not connected")

        while True:
            try:
                yield await self.read_frame()
            except TransportConnectionError:
                _LOGGER.info("Dongle stream from %s:%s ended", self._host, self._port)
                return


__all__ = [
    "DEFAULT_READ_TIMEOUT",
    "DongleStream",
]
