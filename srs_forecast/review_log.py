"""
srs_forecast.review_log
-----------------------

This module defines the ReviewLog class.

Classes:
    ReviewLog: Represents the log entry of a ReviewableItem that has been reviewed.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict
import json
from typing_extensions import Self


class ReviewLogDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ReviewLog object.
    """

    item_id: int
    quality: float
    review_datetime: str


@dataclass
class ReviewLog:
    """
    Represents the log entry of a ReviewableItem object that has been reviewed.

    Attributes:
        item_id: The id of the item being reviewed.
        quality: The recall-quality grade given to the item during the review.
        review_datetime: The date and time of the review.
    """

    item_id: int
    quality: float
    review_datetime: datetime

    def to_dict(self) -> ReviewLogDict:
        """
        Returns a dictionary representation of the ReviewLog object.
        """

        return {
            "item_id": self.item_id,
            "quality": self.quality,
            "review_datetime": self.review_datetime.isoformat(),
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewLogDict) -> Self:
        """
        Creates a ReviewLog object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing ReviewLog object.

        Returns:
            Self: A ReviewLog object created from the provided dictionary.
        """

        return cls(
            item_id=int(source_dict["item_id"]),
            quality=source_dict["quality"],
            review_datetime=datetime.fromisoformat(source_dict["review_datetime"]),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the ReviewLog object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the ReviewLog object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a ReviewLog object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing ReviewLog object.

        Returns:
            Self: A ReviewLog object created from the JSON string.
        """

        source_dict: ReviewLogDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["ReviewLog"]
