"""
srs_forecast.item
-----------------

This module defines the ReviewableItem class.

Classes:
    ReviewableItem: Represents a flashcard-style study item scheduled with the SM-2 family algorithm.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import time
from typing import TypedDict
from typing_extensions import Self
from srs_forecast.state import State

DEFAULT_INTERVAL = 1
DEFAULT_EASE_FACTOR = 2.5


def to_utc(value: datetime) -> datetime:
    """
    Returns the datetime in UTC. Naive datetimes are taken to be UTC.
    """

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ReviewableItemDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ReviewableItem object.
    """

    item_id: int
    interval: float
    ease_factor: float
    next_review_at: str
    last_reviewed_at: str | None


@dataclass(init=False)
class ReviewableItem:
    """
    Represents a reviewable study item.

    Attributes:
        item_id: The id of the item. Defaults to the epoch milliseconds of when the item was created.
        interval: Number of days until the next review.
        ease_factor: Multiplier governing how quickly intervals grow.
        next_review_at: The date and time when the item is due next.
        last_reviewed_at: The date and time of the item's last review.
    """

    item_id: int
    interval: float
    ease_factor: float
    next_review_at: datetime
    last_reviewed_at: datetime | None

    def __init__(
        self,
        item_id: int | None = None,
        interval: float = DEFAULT_INTERVAL,
        ease_factor: float = DEFAULT_EASE_FACTOR,
        next_review_at: datetime | None = None,
        last_reviewed_at: datetime | None = None,
    ) -> None:
        if item_id is None:
            # epoch milliseconds of when the item was created
            item_id = int(datetime.now(timezone.utc).timestamp() * 1000)
            # wait 1ms to prevent potential item_id collision on next item creation
            time.sleep(0.001)
        self.item_id = item_id

        self.interval = interval
        self.ease_factor = ease_factor

        if next_review_at is None:
            next_review_at = datetime.now(timezone.utc)
        self.next_review_at = to_utc(next_review_at)

        if last_reviewed_at is not None:
            last_reviewed_at = to_utc(last_reviewed_at)
        self.last_reviewed_at = last_reviewed_at

    @property
    def state(self) -> State:
        """
        The item's learning state, derived from its interval.
        """

        if self.interval > 1:
            return State.Review
        return State.Learning

    def is_due(self, now: datetime | None = None) -> bool:
        """
        Whether the item is due for review at the given date and time.

        Args:
            now: The date and time to check against. Defaults to the current UTC time.
                Naive datetimes are taken to be UTC.

        Returns:
            bool: True if `now` is at or after the item's next review date.
        """

        if now is None:
            now = datetime.now(timezone.utc)

        return to_utc(now) >= self.next_review_at

    def to_dict(self) -> ReviewableItemDict:
        """
        Returns a JSON-serializable dictionary representation of the ReviewableItem object.

        This method is specifically useful for storing ReviewableItem objects in a database.

        Returns:
            A dictionary representation of the ReviewableItem object.
        """

        return {
            "item_id": self.item_id,
            "interval": self.interval,
            "ease_factor": self.ease_factor,
            "next_review_at": self.next_review_at.isoformat(),
            "last_reviewed_at": (
                self.last_reviewed_at.isoformat() if self.last_reviewed_at else None
            ),
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewableItemDict) -> Self:
        """
        Creates a ReviewableItem object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing ReviewableItem object.

        Returns:
            A ReviewableItem object created from the provided dictionary.
        """

        return cls(
            item_id=int(source_dict["item_id"]),
            interval=source_dict["interval"],
            ease_factor=float(source_dict["ease_factor"]),
            next_review_at=datetime.fromisoformat(source_dict["next_review_at"]),
            last_reviewed_at=(
                datetime.fromisoformat(source_dict["last_reviewed_at"])
                if source_dict["last_reviewed_at"]
                else None
            ),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the ReviewableItem object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the ReviewableItem object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a ReviewableItem object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing ReviewableItem object.

        Returns:
            Self: A ReviewableItem object created from the JSON string.
        """

        source_dict: ReviewableItemDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["ReviewableItem", "to_utc"]
