"""
Product Service event publishing base classes and interfaces.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional


class EventPublishError(RuntimeError):
    """An event could not be turned into a publishable record.

    Raised for construction or serialization faults, never for broker
    delivery failures, which are only logged.
    """


class EventPublisher(ABC):
    """Abstract base class for keyed record publishers"""

    @abstractmethod
    async def send(
        self, topic: str, key: str, value: bytes
    ) -> Optional["asyncio.Future"]:
        """Enqueue a record and return its delivery future.

        Returns ``None`` when the publisher runs in degraded mode and the
        record was not handed to the broker.
        """
        pass

    @abstractmethod
    async def flush(self) -> None:
        """Wait until every enqueued record has been handed to the broker"""
        pass
