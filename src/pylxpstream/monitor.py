"""Frame monitor: reads the dongle stream, decodes frames, feeds sinks.

The reader task pushes each received buffer onto a bounded queue, so a slow
sink applies back-pressure to the socket instead of piling up unbounded
work. A fixed pool of worker tasks decodes buffers and writes the records
to every sink. Decode and sink failures are logged and counted in
MonitorStats; they never stop the monitor.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from pylxpstream.exceptions import FrameError
from pylxpstream.protocol.decoder import DecodeResult, decode_frame
from pylxpstream.protocol.record import TelemetryRecord
from pylxpstream.sinks.base import RecordSink
from pylxpstream.transports.dongle import DongleStream

_LOGGER = logging.getLogger(__name__)


@dataclass
class MonitorStats:
    """Counters describing what the monitor has processed."""

    frames_received: int = 0
    records_decoded: int = 0
    frames_unhandled: int = 0
    frames_rejected: Counter[str] = field(default_factory=Counter)
    sink_failures: Counter[str] = field(default_factory=Counter)

    @property
    def total_rejected(self) -> int:
        """Number of frames discarded by decode errors."""
        return sum(self.frames_rejected.values())


class FrameMonitor:
    """Drive frames from a DongleStream through the decoder into sinks.

    Example:
        async with DongleStream(host) as stream:
            monitor = FrameMonitor(stream, [InfluxDBSink(influx_config)])
            await monitor.run()
    """

    def __init__(
        self,
        stream: DongleStream,
        sinks: Sequence[RecordSink] = (),
        *,
        queue_size: int = 64,
        workers: int = 2,
    ) -> None:
        """Initialize the monitor.

        Args:
            stream: Connected dongle stream
            sinks: Destinations for decoded records
            queue_size: Frames buffered between the reader and the workers
            workers: Number of concurrent decode workers
        """
        self._stream = stream
        self._sinks = list(sinks)
        self._queue: asyncio.Queue[bytes] = asyncio.Queue(maxsize=queue_size)
        self._worker_count = workers
        self._reader_task: asyncio.Task[None] | None = None
        self._stopping = False
        self.stats = MonitorStats()

    @property
    def sinks(self) -> list[RecordSink]:
        """Configured sinks."""
        return self._sinks

    async def process_frame(self, frame: bytes) -> DecodeResult | None:
        """Decode one buffer and deliver its record to every sink.

        Returns:
            The decode result, or None if the frame was rejected
        """
        try:
            result = decode_frame(frame)
        except FrameError as err:
            self.stats.frames_rejected[err.kind] += 1
            _LOGGER.warning(
                "Discarded frame (%s): %s [%d bytes: %s]",
                err.kind,
                err,
                len(frame),
                frame[:40].hex(),
            )
            return None

        if result.record is None:
            self.stats.frames_unhandled += 1
            _LOGGER.debug(
                "Unhandled function 0x%02X (%s) from %s",
                result.header.function,
                result.header.function_name,
                result.header.dongle_serial,
            )
            return result

        if result.translated is not None:
            _LOGGER.debug("%s\n%s", result.header.describe(), result.translated.describe())
        self.stats.records_decoded += 1
        await self._publish(result.record)
        return result

    async def _publish(self, record: TelemetryRecord) -> None:
        if not self._sinks:
            return

        outcomes = await asyncio.gather(
            *(sink.write(record) for sink in self._sinks),
            return_exceptions=True,
        )
        for sink, outcome in zip(self._sinks, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                self.stats.sink_failures[sink.name] += 1
                _LOGGER.error(
                    "Sink %s failed for %s: %s", sink.name, record.serial_number, outcome
                )

    async def _read_loop(self) -> None:
        async for frame in self._stream.frames():
            self.stats.frames_received += 1
            await self._queue.put(frame)

    async def _worker(self) -> None:
        while True:
            frame = await self._queue.get()
            try:
                await self.process_frame(frame)
            finally:
                self._queue.task_done()

    async def run(self) -> MonitorStats:
        """Process frames until the stream ends or stop() is called.

        Frames already queued when the stream ends are still processed.
        Transport errors from the stream propagate to the caller.

        Returns:
            Final statistics
        """
        self._stopping = False
        workers = [
            asyncio.create_task(self._worker(), name=f"lxp-decode-{index}")
            for index in range(self._worker_count)
        ]
        self._reader_task = asyncio.create_task(self._read_loop(), name="lxp-reader")
        try:
            try:
                await self._reader_task
            except asyncio.CancelledError:
                if not self._stopping:
                    raise
            await self._queue.join()
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            self._reader_task = None

        _LOGGER.info(
            "Monitor finished: %d frames, %d records, %d unhandled, %d rejected",
            self.stats.frames_received,
            self.stats.records_decoded,
            self.stats.frames_unhandled,
            self.stats.total_rejected,
        )
        return self.stats

    def stop(self) -> None:
        """Stop reading; run() returns once queued frames are processed."""
        self._stopping = True
        if self._reader_task is not None:
            self._reader_task.cancel()

    async def close(self) -> None:
        """Close every sink."""
        for sink in self._sinks:
            try:
                await sink.close()
            except Exception as err:  # noqa: BLE001
                _LOGGER.warning("Error closing sink %s: %s", sink.name, err)


__all__ = [
    "FrameMonitor",
    "MonitorStats",
]
