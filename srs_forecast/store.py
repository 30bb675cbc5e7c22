"""
srs_forecast.store
------------------

The seam between the scheduler and whatever persists reviewable items.

Concurrency control over the backing store (two simultaneous reviews of the same item)
is the store implementation's responsibility.
"""

from __future__ import annotations
from datetime import datetime, timezone
import logging
from typing import Protocol
from srs_forecast.item import ReviewableItem
from srs_forecast.rating import Rating
from srs_forecast.review_log import ReviewLog
from srs_forecast.scheduler import Scheduler

logger = logging.getLogger(__name__)


class ItemNotFoundError(LookupError):
    """
    Raised when a review is submitted for an item the store does not hold.
    """


class ReviewItemStore(Protocol):
    def get(self, item_id: int) -> ReviewableItem | None: ...

    def update(self, item: ReviewableItem) -> None: ...


def submit_review(
    store: ReviewItemStore,
    item_id: int,
    quality: Rating | float,
    scheduler: Scheduler | None = None,
    review_datetime: datetime | None = None,
) -> tuple[ReviewableItem, ReviewLog]:
    """
    Reviews a stored item and persists the result.

    Args:
        store: Where the item is read from and written back to.
        item_id: The id of the item being reviewed.
        quality: The recall-quality grade.
        scheduler: The scheduler to review with. Defaults to Scheduler().
        review_datetime: The date and time of the review. Defaults to the current UTC time.

    Returns:
        tuple[ReviewableItem, ReviewLog]: The updated item and its review log.

    Raises:
        ItemNotFoundError: If the store has no item with this id.
    """

    item = store.get(item_id)
    if item is None:
        raise ItemNotFoundError(f"ReviewableItem {item_id} not found")

    if scheduler is None:
        scheduler = Scheduler()

    if review_datetime is None:
        review_datetime = datetime.now(timezone.utc)

    updated_item = scheduler.review_item(
        item=item, quality=quality, review_datetime=review_datetime
    )
    store.update(updated_item)

    logger.info("Stored review of item %s (quality %s)", item_id, quality)

    review_log = ReviewLog(
        item_id=updated_item.item_id,
        quality=quality,
        review_datetime=updated_item.last_reviewed_at,
    )

    return updated_item, review_log


__all__ = ["ItemNotFoundError", "ReviewItemStore", "submit_review"]
