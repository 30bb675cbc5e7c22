"""
srs-forecast
------------

Spaced-repetition review scheduling (SM-2 family) and adaptive proficiency forecasting
(Holt's linear and damped trend models) for study applications.
"""

from srs_forecast.scheduler import Scheduler, get_due_items, format_interval
from srs_forecast.state import State
from srs_forecast.item import ReviewableItem
from srs_forecast.rating import Rating
from srs_forecast.review_log import ReviewLog
from srs_forecast.store import ItemNotFoundError, ReviewItemStore, submit_review
from srs_forecast.forecasting import Forecaster, HoltParameters, TrendModel, forecast
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from srs_forecast.proficiency import (
        ProficiencyForecast,
        ProficiencyForecaster,
        ScorePoint,
        SubskillPoint,
        get_proficiency_forecast,
    )

_PROFICIENCY_NAMES = (
    "ProficiencyForecast",
    "ProficiencyForecaster",
    "ScorePoint",
    "SubskillPoint",
    "get_proficiency_forecast",
)


# lazy load the proficiency module due to its pandas dependency
def __getattr__(name: str) -> object:
    if name in _PROFICIENCY_NAMES:
        from srs_forecast import proficiency

        return getattr(proficiency, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Scheduler",
    "State",
    "ReviewableItem",
    "Rating",
    "ReviewLog",
    "ItemNotFoundError",
    "ReviewItemStore",
    "submit_review",
    "get_due_items",
    "format_interval",
    "Forecaster",
    "HoltParameters",
    "TrendModel",
    "forecast",
    *_PROFICIENCY_NAMES,
]
