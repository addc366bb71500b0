"""SBS-1 feed connector: one TCP stream per station, framed into report lines."""

from __future__ import annotations

import asyncio
import contextlib
from datetime import datetime, timezone
import logging
import random
from typing import AsyncIterator, Awaitable, Callable

from waxmoth.config import settings
from waxmoth.ingestors.sbs1 import Message, SbsParseError, parse_sbs_message
from waxmoth.models.stations import StationStatus

logger = logging.getLogger("waxmoth.ingestors.feed")

MessageSink = Callable[[Message], Awaitable[None]]


def parse_address(address: str) -> tuple[str, int]:
    """Split a ``host:port`` station address."""

    host, sep, port = address.strip().rpartition(":")
    host = host.strip("[]")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Station address must be host:port, got {address!r}")
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"Station port out of range in {address!r}")
    return host, port_number


class FeedConnector:
    """Maintain a long-running connection to one SBS-1 station.

    Every non-empty line is trimmed, parsed and handed to ``sink``. Lines the
    parser rejects are logged and skipped. Connection failures are retried
    with exponential backoff and jitter unless ``reconnect`` is off, in which
    case the first failure ends the connector.
    """

    def __init__(
        self,
        *,
        address: str,
        sink: MessageSink,
        reconnect: bool | None = None,
        backoff_initial: float | None = None,
        backoff_max: float | None = None,
        max_retries: int | None = None,
        connect_timeout: float | None = None,
        line_source: Callable[[], AsyncIterator[bytes | str]] | None = None,
        stop_on_source: bool = False,
    ) -> None:
        self.station = address
        self.sink = sink
        self.reconnect = settings.feed_reconnect if reconnect is None else reconnect
        self.backoff_initial = (
            settings.feed_backoff_initial if backoff_initial is None else backoff_initial
        )
        self.backoff_max = settings.feed_backoff_max if backoff_max is None else backoff_max
        self.max_retries = max_retries
        self.connect_timeout = (
            settings.feed_connect_timeout if connect_timeout is None else connect_timeout
        )
        self.line_source = line_source
        self.stop_on_source = stop_on_source

        self.host: str | None = None
        self.port: int | None = None
        if line_source is None:
            self.host, self.port = parse_address(address)

        self.connected = False
        self.running = False
        self.connect_attempts = 0
        self.lines_read = 0
        self.messages_parsed = 0
        self.parse_errors = 0
        self.last_error: str | None = None
        self.last_message_at: datetime | None = None
        self._session_lines = 0

    def backoff_delay(self, failures: int) -> float:
        """Delay before the next attempt after ``failures`` consecutive failures."""

        base = min(self.backoff_initial * 2 ** max(failures - 1, 0), self.backoff_max)
        return base * random.uniform(0.5, 1.0)

    async def run(self) -> None:
        """Run the feed until cancelled, retries are exhausted or reconnect is off."""

        self.running = True
        failures = 0
        try:
            while True:
                self._session_lines = 0
                try:
                    if self.line_source:
                        await self._consume_lines(self.line_source)
                        if self.stop_on_source:
                            return
                    else:
                        await self._connect_and_stream()
                        self.last_error = "connection closed by station"
                except asyncio.CancelledError:
                    logger.info("Feed %s cancelled", self.station)
                    raise
                except Exception as exc:
                    self.last_error = str(exc) or exc.__class__.__name__
                    logger.warning("Feed %s error: %s", self.station, self.last_error)
                finally:
                    self.connected = False

                if not self.reconnect:
                    logger.warning("Feed %s stopped; reconnect is disabled", self.station)
                    return

                failures = 0 if self._session_lines else failures + 1
                if self.max_retries is not None and failures > self.max_retries:
                    logger.error(
                        "Feed %s giving up after %s failed attempts", self.station, failures
                    )
                    return

                delay = self.backoff_delay(max(failures, 1))
                logger.info("Feed %s reconnecting in %.1fs", self.station, delay)
                await asyncio.sleep(delay)
        finally:
            self.running = False

    async def _consume_lines(self, source: Callable[[], AsyncIterator[bytes | str]]) -> None:
        async for line in source():
            await self._handle_line(line)

    async def _connect_and_stream(self) -> None:
        self.connect_attempts += 1
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(self.host, self.port), timeout=self.connect_timeout
        )
        self.connected = True
        self.last_error = None
        logger.info("Connected to station %s", self.station)
        try:
            while True:
                data = await reader.readline()
                if not data:
                    break
                await self._handle_line(data)
        finally:
            writer.close()
            with contextlib.suppress(Exception):  # pragma: no cover - best effort close
                await writer.wait_closed()
            logger.info("Connection to station %s closed", self.station)

    async def _handle_line(self, data: bytes | str) -> None:
        record = data.strip()
        if not record:
            return

        self.lines_read += 1
        self._session_lines += 1
        try:
            message = parse_sbs_message(self.station, record)
        except SbsParseError as exc:
            self.parse_errors += 1
            logger.warning(
                "Failed to parse report from %s: %r (%s)", self.station, record, exc
            )
            return

        self.messages_parsed += 1
        self.last_message_at = datetime.now(tz=timezone.utc)
        await self.sink(message)

    def status(self, aircraft_count: int = 0) -> StationStatus:
        return StationStatus(
            station=self.station,
            connected=self.connected,
            running=self.running,
            connect_attempts=self.connect_attempts,
            lines_read=self.lines_read,
            messages_parsed=self.messages_parsed,
            parse_errors=self.parse_errors,
            last_error=self.last_error,
            last_message_at=self.last_message_at,
            aircraft_count=aircraft_count,
        )


__all__ = ["FeedConnector", "MessageSink", "parse_address"]
