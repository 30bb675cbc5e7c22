from enum import IntEnum


class State(IntEnum):
    """
    Enum representing the learning state of a ReviewableItem object.
    """

    Learning = 1
    Review = 2


__all__ = ["State"]
