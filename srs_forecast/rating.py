from enum import IntEnum


class Rating(IntEnum):
    """
    Enum representing the three recall-quality grades offered when reviewing an item.

    Grades live on the 0-5 SM-2 quality scale.
    """

    Forgot = 0
    Good = 3
    Easy = 5


__all__ = ["Rating"]
