"""Fan-in of every feed connector into a single aggregation consumer."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from waxmoth.config import settings
from waxmoth.ingestors.feed import FeedConnector
from waxmoth.ingestors.sbs1 import Message
from waxmoth.models.stations import StationStatus
from waxmoth.services.aggregator import AggregationEngine

logger = logging.getLogger("waxmoth.feed_service")

_STOP = object()


class FeedService:
    """Own the connectors, the merge queue and the consumer task.

    Connectors only ever enqueue. The consumer is the sole caller of
    ``engine.accept`` and handles one message at a time.
    """

    def __init__(
        self,
        engine: AggregationEngine,
        *,
        stations: Iterable[str] = (),
        queue_size: int | None = None,
        **connector_options: Any,
    ) -> None:
        self.engine = engine
        size = settings.feed_queue_size if queue_size is None else queue_size
        self.queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max(size, 0))
        connector_options.setdefault("max_retries", settings.feed_max_retries)
        self.connectors: list[FeedConnector] = [
            FeedConnector(address=address, sink=self.submit, **connector_options)
            for address in stations
        ]
        self._connector_tasks: list[asyncio.Task] = []
        self._consumer_task: asyncio.Task | None = None

    @property
    def started(self) -> bool:
        return self._consumer_task is not None

    async def submit(self, message: Message) -> None:
        await self.queue.put(message)

    def add_connector(self, connector: FeedConnector) -> None:
        self.connectors.append(connector)
        if self.started:
            self._start_connector(connector)

    def start(self) -> None:
        if self.started:
            raise RuntimeError("Feed service already started")

        self._consumer_task = asyncio.create_task(self._consume(), name="waxmoth-consumer")
        for connector in self.connectors:
            self._start_connector(connector)
        logger.info("Feed service started with %s station(s)", len(self.connectors))

    def _start_connector(self, connector: FeedConnector) -> None:
        task = asyncio.create_task(connector.run(), name=f"waxmoth-feed-{connector.station}")
        self._connector_tasks.append(task)

    async def _consume(self) -> None:
        while True:
            item = await self.queue.get()
            try:
                if item is _STOP:
                    return
                try:
                    self.engine.accept(item)
                except Exception:
                    logger.exception("Failed to aggregate message %r", item)
            finally:
                self.queue.task_done()

    async def join(self) -> None:
        """Wait for every connector to finish on its own (replays, exhausted retries)."""

        await asyncio.gather(*self._connector_tasks, return_exceptions=True)

    async def stop(self) -> None:
        """Stop the connectors, then drain queued messages into the engine."""

        if self._consumer_task is None:
            return

        for task in self._connector_tasks:
            task.cancel()
        results = await asyncio.gather(*self._connector_tasks, return_exceptions=True)
        for task, result in zip(self._connector_tasks, results):
            if isinstance(result, Exception):
                logger.warning("Feed task %s ended with error: %s", task.get_name(), result)
        self._connector_tasks = []

        await self.queue.put(_STOP)
        await self._consumer_task
        self._consumer_task = None
        logger.info(
            "Feed service stopped; accepted=%s duplicates=%s",
            self.engine.accepted,
            self.engine.duplicates,
        )

    def statuses(self) -> list[StationStatus]:
        counts = self.engine.registry.station_counts()
        return [
            connector.status(aircraft_count=counts.get(connector.station, 0))
            for connector in self.connectors
        ]


__all__ = ["FeedService"]
