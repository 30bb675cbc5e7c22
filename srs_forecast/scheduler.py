"""
srs_forecast.scheduler
----------------------

This module defines the Scheduler class as well as the various constants used in its calculations.

Classes:
    Scheduler: The SM-2 family spaced-repetition scheduler.
"""

from __future__ import annotations
from collections.abc import Iterable
from datetime import datetime, timezone, timedelta
from copy import copy
from dataclasses import dataclass
import json
import logging
import math
from typing import TypedDict
from typing_extensions import Self
from srs_forecast.item import ReviewableItem, DEFAULT_EASE_FACTOR, to_utc
from srs_forecast.rating import Rating
from srs_forecast.review_log import ReviewLog

logger = logging.getLogger(__name__)

MINIMUM_EASE_FACTOR = 1.3
GRADUATING_INTERVAL = 6
PASSING_QUALITY = 3
MAX_QUALITY = 5

DEFAULT_DECK_SIZE = 30


class SchedulerDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Scheduler object.
    """

    initial_ease_factor: float
    minimum_ease_factor: float
    graduating_interval: int
    passing_quality: float


class IntervalPreview(TypedDict):
    """
    Candidate next intervals, in days, for each of the three review buttons.
    """

    forgot: int
    good: int
    easy: int


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(init=False)
class Scheduler:
    """
    The SM-2 family scheduler.

    Enables the reviewing and future scheduling of items. Unlike textbook SM-2, a failed
    review resets the interval but leaves the ease factor untouched.

    Attributes:
        initial_ease_factor: The ease factor given to newly created items.
        minimum_ease_factor: The floor that successful reviews never push the ease factor below.
        graduating_interval: The interval, in days, an item gets on its first successful review.
        passing_quality: The lowest quality that counts as a successful recall.
    """

    initial_ease_factor: float
    minimum_ease_factor: float
    graduating_interval: int
    passing_quality: float

    def __init__(
        self,
        initial_ease_factor: float = DEFAULT_EASE_FACTOR,
        minimum_ease_factor: float = MINIMUM_EASE_FACTOR,
        graduating_interval: int = GRADUATING_INTERVAL,
        passing_quality: float = PASSING_QUALITY,
    ) -> None:
        self._validate_parameters(
            initial_ease_factor=initial_ease_factor,
            minimum_ease_factor=minimum_ease_factor,
            graduating_interval=graduating_interval,
        )

        self.initial_ease_factor = initial_ease_factor
        self.minimum_ease_factor = minimum_ease_factor
        self.graduating_interval = graduating_interval
        self.passing_quality = passing_quality

    def _validate_parameters(
        self,
        *,
        initial_ease_factor: float,
        minimum_ease_factor: float,
        graduating_interval: int,
    ) -> None:
        error_messages = []

        if minimum_ease_factor < 1.0:
            error_messages.append(
                f"minimum_ease_factor = {minimum_ease_factor} must be at least 1.0"
            )
        if initial_ease_factor < minimum_ease_factor:
            error_messages.append(
                f"initial_ease_factor = {initial_ease_factor} is below minimum_ease_factor = {minimum_ease_factor}"
            )
        if graduating_interval < 1:
            error_messages.append(
                f"graduating_interval = {graduating_interval} must be at least 1 day"
            )

        if len(error_messages) > 0:
            raise ValueError(
                "One or more parameters are out of bounds:\n"
                + "\n".join(error_messages)
            )

    def new_item(
        self, item_id: int | None = None, now: datetime | None = None
    ) -> ReviewableItem:
        """
        Creates a new item that is due immediately.
        """

        return ReviewableItem(
            item_id=item_id,
            ease_factor=self.initial_ease_factor,
            next_review_at=now,
        )

    def review_item(
        self,
        item: ReviewableItem,
        quality: Rating | float,
        review_datetime: datetime | None = None,
    ) -> ReviewableItem:
        """
        Reviews an item with a given recall quality at a given time.

        Qualities outside of 0-5 are not rejected: they are extrapolated with the same formulas.

        Args:
            item: The item being reviewed.
            quality: The recall-quality grade, typically one of Rating.Forgot, Rating.Good or Rating.Easy.
            review_datetime: The date and time of the review. Naive datetimes are taken to be UTC.

        Returns:
            ReviewableItem: A reviewed copy of the item; the argument is left untouched.
        """

        if review_datetime is None:
            review_datetime = datetime.now(timezone.utc)
        else:
            review_datetime = to_utc(review_datetime)

        item = copy(item)

        next_interval, next_ease_factor = self._next_interval_and_ease(
            interval=item.interval, ease_factor=item.ease_factor, quality=quality
        )

        # all reviews made on the same day converge on the same due date
        next_review_at = review_datetime + timedelta(days=next_interval)
        next_review_at = next_review_at.replace(
            hour=0, minute=0, second=0, microsecond=0
        )

        item.interval = next_interval
        item.ease_factor = next_ease_factor
        item.next_review_at = next_review_at
        item.last_reviewed_at = review_datetime

        logger.debug(
            "Reviewed item %s with quality %s: interval=%s ease_factor=%.2f due=%s",
            item.item_id,
            quality,
            next_interval,
            next_ease_factor,
            next_review_at.isoformat(),
        )

        return item

    def preview_intervals(self, item: ReviewableItem) -> IntervalPreview:
        """
        Computes the interval each review button would produce, without reviewing the item.

        Args:
            item: The item about to be reviewed.

        Returns:
            IntervalPreview: The next interval in days for Forgot, Good and Easy.
        """

        forgot, good, easy = (
            self._next_interval_and_ease(
                interval=item.interval, ease_factor=item.ease_factor, quality=rating
            )[0]
            for rating in (Rating.Forgot, Rating.Good, Rating.Easy)
        )

        return {"forgot": forgot, "good": good, "easy": easy}

    def reschedule_item(
        self, item: ReviewableItem, review_logs: list[ReviewLog]
    ) -> ReviewableItem:
        """
        Reschedules the given item by replaying its review logs on a fresh copy with the current scheduler.

        Args:
            item: The item to be rescheduled.
            review_logs: A list of that item's review logs (order doesn't matter).

        Returns:
            ReviewableItem: A new item that has been rescheduled with this scheduler.

        Raises:
            ValueError: If any of the review logs belong to another item.
        """

        for review_log in review_logs:
            if review_log.item_id != item.item_id:
                raise ValueError(
                    f"ReviewLog item_id {review_log.item_id} does not match ReviewableItem item_id {item.item_id}"
                )

        review_logs = sorted(review_logs, key=lambda log: log.review_datetime)

        rescheduled_item = ReviewableItem(
            item_id=item.item_id,
            ease_factor=self.initial_ease_factor,
            next_review_at=item.next_review_at,
        )

        for review_log in review_logs:
            rescheduled_item = self.review_item(
                item=rescheduled_item,
                quality=review_log.quality,
                review_datetime=review_log.review_datetime,
            )

        return rescheduled_item

    def to_dict(self) -> SchedulerDict:
        """
        Returns a dictionary representation of the Scheduler object.

        Returns:
            SchedulerDict: A dictionary representation of the Scheduler object.
        """

        return {
            "initial_ease_factor": self.initial_ease_factor,
            "minimum_ease_factor": self.minimum_ease_factor,
            "graduating_interval": self.graduating_interval,
            "passing_quality": self.passing_quality,
        }

    @classmethod
    def from_dict(cls, source_dict: SchedulerDict) -> Self:
        """
        Creates a Scheduler object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the provided dictionary.
        """

        return cls(
            initial_ease_factor=source_dict["initial_ease_factor"],
            minimum_ease_factor=source_dict["minimum_ease_factor"],
            graduating_interval=source_dict["graduating_interval"],
            passing_quality=source_dict["passing_quality"],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Scheduler object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Scheduler object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Scheduler object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the JSON string.
        """

        source_dict: SchedulerDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)

    def _next_ease_factor(self, *, ease_factor: float, quality: float) -> float:
        penalty = MAX_QUALITY - quality
        next_ease_factor = ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02))

        return max(self.minimum_ease_factor, next_ease_factor)

    def _next_interval_and_ease(
        self, *, interval: float, ease_factor: float, quality: float
    ) -> tuple[int, float]:
        if quality < self.passing_quality:
            # forgetting resets the interval but keeps the ease factor
            return 1, ease_factor

        next_ease_factor = self._next_ease_factor(
            ease_factor=ease_factor, quality=quality
        )

        if interval == 1:
            next_interval = self.graduating_interval
        else:
            next_interval = _round_half_up(interval * next_ease_factor)

        # must be at least 1 day long
        next_interval = max(next_interval, 1)

        return next_interval, next_ease_factor


def get_due_items(
    items: Iterable[ReviewableItem],
    now: datetime | None = None,
    limit: int | None = DEFAULT_DECK_SIZE,
    include_all: bool = False,
) -> list[ReviewableItem]:
    """
    Builds a study deck from a collection of items.

    Args:
        items: The candidate items.
        now: The date and time the deck is built at. Defaults to the current UTC time.
        limit: Maximum number of due items returned, or None for no cap.
        include_all: Return every item, due or not, with no cap.

    Returns:
        list[ReviewableItem]: The selected items, earliest due first.
    """

    if now is None:
        now = datetime.now(timezone.utc)

    if include_all:
        return sorted(items, key=lambda item: item.next_review_at)

    deck = sorted(
        (item for item in items if item.is_due(now)),
        key=lambda item: item.next_review_at,
    )

    if limit is not None:
        deck = deck[:limit]

    return deck


def format_interval(days: float) -> str:
    """
    Formats an interval in days as a short label such as "6d", "3mo" or "1.5y".
    """

    if days < 1:
        return "<1d"
    if days < 31:
        return f"{days:g}d"
    if days < 365:
        return f"{_round_half_up(days / 30.44)}mo"
    return f"{days / 365.25:.1f}".removesuffix(".0") + "y"


__all__ = ["Scheduler", "get_due_items", "format_interval"]
