"""
Order Service event consumption base classes and errors.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class MalformedMessageError(ValueError):
    """A record could not be decoded into a product envelope.

    Never retried: redelivering the same bytes cannot succeed.
    """


class TransientTransportError(RuntimeError):
    """A fault expected to clear on its own (broker hiccup, lost connection)"""


class ReconcileOutcome(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    REJECTED = "rejected"


class RecordHandler(ABC):
    """Handles one raw record taken off a topic"""

    @abstractmethod
    async def process(
        self,
        raw: bytes,
        key: Optional[bytes] = None,
        partition: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ReconcileOutcome:
        pass
