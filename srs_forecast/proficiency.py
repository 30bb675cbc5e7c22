"""
srs_forecast.proficiency
------------------------

This module turns a user's dated assessment history into calendar-dated proficiency forecasts.

Classes:
    ScorePoint: An overall proficiency score at a point in time.
    SubskillPoint: Grammar, phrasing and vocabulary scores at a point in time.
    ProficiencyForecast: The projected overall and subskill curves.
    ProficiencyForecaster: Translates a calendar horizon into a forecast over the user's pace of entries.
"""

from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
import json
import logging
import math
from typing import TypedDict
import pandas as pd
from typing_extensions import Self
from srs_forecast.forecasting import Forecaster, ForecasterDict
from srs_forecast.item import to_utc

logger = logging.getLogger(__name__)

MIN_ENTRIES_FOR_FORECAST = 7
DEFAULT_PREDICTION_DAYS = 30
MIN_PACE_IN_DAYS = 0.1

SUBSKILLS = ("grammar", "phrasing", "vocabulary")


class ScorePointDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ScorePoint object.
    """

    date: str
    score: float


class SubskillPointDict(TypedDict):
    """
    JSON-serializable dictionary representation of a SubskillPoint object.
    """

    date: str
    grammar: float
    phrasing: float
    vocabulary: float


class ProficiencyForecasterDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ProficiencyForecaster object.
    """

    forecaster: ForecasterDict
    min_entries_for_forecast: int
    default_horizon_days: float


@dataclass
class ScorePoint:
    """
    An overall proficiency score at a point in time.

    Attributes:
        date: When the score was assessed, or the projected date of a forecast point.
        score: The score on a 0-100 scale.
    """

    date: datetime
    score: float

    def to_dict(self) -> ScorePointDict:
        """
        Returns a JSON-serializable dictionary representation of the ScorePoint object.
        """

        return {"date": self.date.isoformat(), "score": self.score}

    @classmethod
    def from_dict(cls, source_dict: ScorePointDict) -> Self:
        """
        Creates a ScorePoint object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing ScorePoint object.

        Returns:
            Self: A ScorePoint object created from the provided dictionary.
        """

        return cls(
            date=datetime.fromisoformat(source_dict["date"]),
            score=float(source_dict["score"]),
        )


@dataclass
class SubskillPoint:
    """
    Grammar, phrasing and vocabulary scores at a point in time.
    """

    date: datetime
    grammar: float
    phrasing: float
    vocabulary: float

    def to_dict(self) -> SubskillPointDict:
        """
        Returns a JSON-serializable dictionary representation of the SubskillPoint object.
        """

        return {
            "date": self.date.isoformat(),
            "grammar": self.grammar,
            "phrasing": self.phrasing,
            "vocabulary": self.vocabulary,
        }

    @classmethod
    def from_dict(cls, source_dict: SubskillPointDict) -> Self:
        """
        Creates a SubskillPoint object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing SubskillPoint object.

        Returns:
            Self: A SubskillPoint object created from the provided dictionary.
        """

        return cls(
            date=datetime.fromisoformat(source_dict["date"]),
            grammar=float(source_dict["grammar"]),
            phrasing=float(source_dict["phrasing"]),
            vocabulary=float(source_dict["vocabulary"]),
        )


@dataclass
class ProficiencyForecast:
    """
    Projected proficiency curves.

    Attributes:
        predicted_overall: Projected overall scores, one per expected future entry.
        predicted_subskills: Projected subskill scores sharing the dates of predicted_overall.
    """

    predicted_overall: list[ScorePoint] = field(default_factory=list)
    predicted_subskills: list[SubskillPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, list]:
        """
        Returns a JSON-serializable dictionary representation of the ProficiencyForecast object.
        """

        return {
            "predicted_overall": [point.to_dict() for point in self.predicted_overall],
            "predicted_subskills": [
                point.to_dict() for point in self.predicted_subskills
            ],
        }


@dataclass
class SubskillSummary:
    """
    Mean score per subskill and the subskill with the lowest mean.
    """

    grammar: float
    phrasing: float
    vocabulary: float
    weakest_skill: str


def _subskill_frame(subskill_series: Sequence[SubskillPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "date": point.date,
                "grammar": point.grammar,
                "phrasing": point.phrasing,
                "vocabulary": point.vocabulary,
            }
            for point in subskill_series
        ],
        columns=["date", *SUBSKILLS],
    )


def overall_scores(subskill_series: Sequence[SubskillPoint]) -> list[ScorePoint]:
    """
    Derives the overall score of each entry as the mean of its three subskill scores.
    """

    frame = _subskill_frame(subskill_series)
    means = frame[list(SUBSKILLS)].mean(axis=1)

    return [
        ScorePoint(date=point.date, score=float(score))
        for point, score in zip(subskill_series, means)
    ]


def summarize_subskills(subskill_series: Sequence[SubskillPoint]) -> SubskillSummary:
    """
    Averages each subskill over the whole history and names the weakest one.

    An empty history has zero averages and a weakest skill of "N/A". When several subskills
    share the lowest mean, the last of grammar, phrasing and vocabulary is named.
    """

    if len(subskill_series) == 0:
        return SubskillSummary(
            grammar=0.0, phrasing=0.0, vocabulary=0.0, weakest_skill="N/A"
        )

    means = _subskill_frame(subskill_series)[list(SUBSKILLS)].mean()

    return SubskillSummary(
        grammar=float(means["grammar"]),
        phrasing=float(means["phrasing"]),
        vocabulary=float(means["vocabulary"]),
        # the last subskill wins ties
        weakest_skill=str(means[::-1].idxmin()),
    )


@dataclass(init=False)
class ProficiencyForecaster:
    """
    Forecasts proficiency over a calendar horizon.

    The horizon in days is converted to a number of future entries from the user's average
    pace, so a user who writes every other day gets half as many projected points as a daily user.

    Attributes:
        forecaster: The trend forecaster applied to each score series.
        min_entries_for_forecast: Histories shorter than this are not forecast at all.
        default_horizon_days: Calendar horizon used when none is given.
    """

    forecaster: Forecaster
    min_entries_for_forecast: int
    default_horizon_days: float

    def __init__(
        self,
        forecaster: Forecaster | None = None,
        min_entries_for_forecast: int = MIN_ENTRIES_FOR_FORECAST,
        default_horizon_days: float = DEFAULT_PREDICTION_DAYS,
    ) -> None:
        error_messages = []
        if min_entries_for_forecast < 2:
            error_messages.append(
                f"min_entries_for_forecast = {min_entries_for_forecast} must be at least 2"
            )
        if default_horizon_days <= 0:
            error_messages.append(
                f"default_horizon_days = {default_horizon_days} must be positive"
            )
        if len(error_messages) > 0:
            raise ValueError(
                "One or more parameters are out of bounds:\n"
                + "\n".join(error_messages)
            )

        if forecaster is None:
            forecaster = Forecaster()
        self.forecaster = forecaster
        self.min_entries_for_forecast = min_entries_for_forecast
        self.default_horizon_days = default_horizon_days

    def to_dict(self) -> ProficiencyForecasterDict:
        """
        Returns a dictionary representation of the ProficiencyForecaster object.

        Returns:
            ProficiencyForecasterDict: A dictionary representation of the ProficiencyForecaster object.
        """

        return {
            "forecaster": self.forecaster.to_dict(),
            "min_entries_for_forecast": self.min_entries_for_forecast,
            "default_horizon_days": self.default_horizon_days,
        }

    @classmethod
    def from_dict(cls, source_dict: ProficiencyForecasterDict) -> Self:
        """
        Creates a ProficiencyForecaster object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing ProficiencyForecaster object.

        Returns:
            Self: A ProficiencyForecaster object created from the provided dictionary.
        """

        return cls(
            forecaster=Forecaster.from_dict(source_dict["forecaster"]),
            min_entries_for_forecast=source_dict["min_entries_for_forecast"],
            default_horizon_days=source_dict["default_horizon_days"],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the ProficiencyForecaster object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the ProficiencyForecaster object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a ProficiencyForecaster object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing ProficiencyForecaster object.

        Returns:
            Self: A ProficiencyForecaster object created from the JSON string.
        """

        source_dict: ProficiencyForecasterDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)

    def average_time_between_entries(
        self, historical_scores: Sequence[ScorePoint]
    ) -> timedelta:
        """
        Mean elapsed time between consecutive entries.
        """

        dates = pd.Series(
            pd.to_datetime([point.date for point in historical_scores], utc=True)
        )
        average = dates.diff().dropna().mean()
        if pd.isna(average):
            return timedelta(0)

        return average.to_pytimedelta()

    def entries_to_forecast(
        self, average_time_between_entries: timedelta, horizon_days: float
    ) -> int:
        """
        Number of future entries expected within `horizon_days` at the given pace.
        """

        pace_in_days = max(
            MIN_PACE_IN_DAYS, average_time_between_entries / timedelta(days=1)
        )

        return math.ceil(horizon_days / pace_in_days)

    def get_proficiency_forecast(
        self,
        historical_scores: Sequence[ScorePoint],
        subskill_series: Sequence[SubskillPoint],
        horizon_days: float | None = None,
    ) -> ProficiencyForecast:
        """
        Forecasts the overall score and each subskill over a calendar horizon.

        Args:
            historical_scores: Chronological overall scores, one per assessed entry.
            subskill_series: Chronological subskill scores, one per assessed entry.
            horizon_days: How many days ahead to project. Defaults to default_horizon_days.

        Returns:
            ProficiencyForecast: Empty when there are fewer than min_entries_for_forecast scores.
        """

        if horizon_days is None:
            horizon_days = self.default_horizon_days

        if len(historical_scores) < self.min_entries_for_forecast:
            logger.debug(
                "Skipping proficiency forecast: %d entries, %d required",
                len(historical_scores),
                self.min_entries_for_forecast,
            )
            return ProficiencyForecast()

        # naive dates are taken to be UTC so mixed histories can be ordered
        historical_scores = sorted(
            (
                ScorePoint(date=to_utc(point.date), score=point.score)
                for point in historical_scores
            ),
            key=lambda point: point.date,
        )
        subskill_series = sorted(
            (
                SubskillPoint(
                    date=to_utc(point.date),
                    grammar=point.grammar,
                    phrasing=point.phrasing,
                    vocabulary=point.vocabulary,
                )
                for point in subskill_series
            ),
            key=lambda point: point.date,
        )

        average = self.average_time_between_entries(historical_scores)
        entries = self.entries_to_forecast(average, horizon_days)
        last_entry_date = historical_scores[-1].date

        predicted_scores = self.forecaster.forecast(
            [point.score for point in historical_scores], entries
        )
        predicted_overall = [
            ScorePoint(date=last_entry_date + (i + 1) * average, score=score)
            for i, score in enumerate(predicted_scores)
        ]

        predicted_subskills = []
        if len(subskill_series) > 0:
            frame = _subskill_frame(subskill_series)
            predictions = {
                skill: self.forecaster.forecast(frame[skill].tolist(), entries)
                for skill in SUBSKILLS
            }
            predicted_subskills = [
                SubskillPoint(
                    date=point.date,
                    grammar=predictions["grammar"][i],
                    phrasing=predictions["phrasing"][i],
                    vocabulary=predictions["vocabulary"][i],
                )
                for i, point in enumerate(predicted_overall)
            ]

        logger.debug(
            "Forecast %d entries over %s days at an average of %s between entries",
            entries,
            horizon_days,
            average,
        )

        return ProficiencyForecast(
            predicted_overall=predicted_overall,
            predicted_subskills=predicted_subskills,
        )


_default_proficiency_forecaster = ProficiencyForecaster()


def get_proficiency_forecast(
    historical_scores: Sequence[ScorePoint],
    subskill_series: Sequence[SubskillPoint],
    horizon_days: float = DEFAULT_PREDICTION_DAYS,
) -> ProficiencyForecast:
    """
    Forecasts proficiency over a calendar horizon with the default ProficiencyForecaster.
    """

    return _default_proficiency_forecaster.get_proficiency_forecast(
        historical_scores, subskill_series, horizon_days
    )


__all__ = [
    "ScorePoint",
    "SubskillPoint",
    "ProficiencyForecast",
    "ProficiencyForecaster",
    "SubskillSummary",
    "get_proficiency_forecast",
    "overall_scores",
    "summarize_subskills",
]
