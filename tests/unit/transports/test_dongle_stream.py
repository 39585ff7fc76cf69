"""Unit tests for the WiFi dongle TCP stream."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pylxpstream.constants import DEFAULT_PORT
from pylxpstream.transports.dongle import DEFAULT_READ_TIMEOUT, DongleStream
from pylxpstream.transports.exceptions import (
    TransportConnectionError,
    TransportReadError,
    TransportTimeoutError,
)


def _mock_connection(*reads: bytes | Exception) -> tuple[AsyncMock, MagicMock]:
    mock_reader = AsyncMock()
    mock_reader.read = AsyncMock(side_effect=list(reads))
    mock_writer = MagicMock()
    mock_writer.close = MagicMock()
    mock_writer.wait_closed = AsyncMock()
    return mock_reader, mock_writer


class TestDongleStream:
    """Tests for DongleStream initialization and properties."""

    def test_init_default_values(self) -> None:
        """Test initialization with default values."""
        stream = DongleStream(host="192.168.1.100")

        assert stream.host == "192.168.1.100"
        assert stream.port == DEFAULT_PORT
        assert stream._read_timeout == DEFAULT_READ_TIMEOUT
        assert stream.is_connected is False

    def test_init_custom_values(self) -> None:
        """Test initialization with custom values."""
        stream = DongleStream(host="192.168.1.200", port=9000, timeout=15.0, read_timeout=None)

        assert stream.port == 9000
        assert stream._timeout == 15.0
        assert stream._read_timeout is None


class TestDongleConnection:
    """Tests for dongle connection handling."""

    @pytest.mark.asyncio
    async def test_connect_success(self) -> None:
        """Test successful connection."""
        stream = DongleStream(host="192.168.1.100")

        with patch("asyncio.open_connection", return_value=_mock_connection()):
            await stream.connect()

        assert stream.is_connected is True

    @pytest.mark.asyncio
    async def test_connect_timeout(self) -> None:
        """Test connection timeout."""
        stream = DongleStream(host="192.168.1.100", timeout=1.0, connection_retries=1)

        with (
            patch("asyncio.open_connection", side_effect=TimeoutError("Connection timed out")),
            pytest.raises(TransportConnectionError) as exc_info,
        ):
            await stream.connect()

        assert "Timeout" in str(exc_info.value)
        assert stream.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_refused(self) -> None:
        """Test connection refused."""
        stream = DongleStream(host="192.168.1.100", connection_retries=1)

        with (
            patch("asyncio.open_connection", side_effect=ConnectionRefusedError()),
            pytest.raises(TransportConnectionError) as exc_info,
        ):
            await stream.connect()

        assert "Failed to connect" in str(exc_info.value)
        assert stream.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_retries_with_backoff(self) -> None:
        """Test a failed attempt is retried after a delay."""
        stream = DongleStream(host="192.168.1.100", connection_retries=3)

        with (
            patch(
                "asyncio.open_connection",
                side_effect=[ConnectionRefusedError(), _mock_connection()],
            ),
            patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
        ):
            await stream.connect()

        assert stream.is_connected is True
        mock_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_context_manager(self) -> None:
        """Test async context manager connects and disconnects."""
        stream = DongleStream(host="192.168.1.100")
        reader, writer = _mock_connection()

        with patch("asyncio.open_connection", return_value=(reader, writer)):
            async with stream:
                assert stream.is_connected is True

        assert stream.is_connected is False
        writer.close.assert_called_once()


class TestDongleRead:
    """Tests for frame reads."""

    @pytest.mark.asyncio
    async def test_read_frame(self, heartbeat_frame: bytes) -> None:
        """Test one read returns one frame."""
        stream = DongleStream(host="192.168.1.100")

        with patch("asyncio.open_connection", return_value=_mock_connection(heartbeat_frame)):
            await stream.connect()
            assert await stream.read_frame() == heartbeat_frame

    @pytest.mark.asyncio
    async def test_read_not_connected(self) -> None:
        """Test reading before connect() raises."""
        stream = DongleStream(host="192.168.1.100")

        with pytest.raises(TransportConnectionError, match="not connected"):
            await stream.read_frame()

    @pytest.mark.asyncio
    async def test_read_eof(self) -> None:
        """Test an empty read marks the stream disconnected."""
        stream = DongleStream(host="192.168.1.100")

        with patch("asyncio.open_connection", return_value=_mock_connection(b"")):
            await stream.connect()
            with pytest.raises(TransportConnectionError, match="closed the connection"):
                await stream.read_frame()

        assert stream.is_connected is False

    @pytest.mark.asyncio
    async def test_read_socket_error(self) -> None:
        """Test socket errors raise TransportReadError."""
        stream = DongleStream(host="192.168.1.100")

        with patch(
            "asyncio.open_connection",
            return_value=_mock_connection(ConnectionResetError("reset")),
        ):
            await stream.connect()
            with pytest.raises(TransportReadError):
                await stream.read_frame()

        assert stream.is_connected is False

    @pytest.mark.asyncio
    async def test_read_timeout(self) -> None:
        """Test a silent dongle raises TransportTimeoutError."""
        stream = DongleStream(host="192.168.1.100")

        with patch("asyncio.open_connection", return_value=_mock_connection(TimeoutError())):
            await stream.connect()
            with pytest.raises(TransportTimeoutError):
                await stream.read_frame()

        assert stream.is_connected is True


class TestDongleFrames:
    """Tests for the frames() iterator."""

    @pytest.mark.asyncio
    async def test_frames_until_eof(self, heartbeat_frame: bytes, section1_frame: bytes) -> None:
        """Test frames are yielded in order until the dongle closes."""
        stream = DongleStream(host="192.168.1.100")

        with patch(
            "asyncio.open_connection",
            return_value=_mock_connection(heartbeat_frame, section1_frame, b""),
        ):
            await stream.connect()
            frames = [frame async for frame in stream.frames()]

        assert frames == [heartbeat_frame, section1_frame]

    @pytest.mark.asyncio
    async def test_frames_not_connected(self) -> None:
        """Test iterating an unconnected stream raises."""
        stream = DongleStream(host="192.168.1.100")

        with pytest.raises(TransportConnectionError):
            async for _ in stream.frames():
                pass

    @pytest.mark.asyncio
    async def test_frames_propagates_read_errors(self) -> None:
        """Test socket errors end iteration with an exception."""
        stream = DongleStream(host="192.168.1.100")

        with patch(
            "asyncio.open_connection",
            return_value=_mock_connection(OSError("broken pipe")),
        ):
            await stream.connect()
            with pytest.raises(TransportReadError):
                async for _ in stream.frames():
                    pass
