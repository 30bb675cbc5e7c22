"""
srs_forecast.forecasting
------------------------

This module defines the Forecaster class, which projects a series of proficiency scores forward in time.

The model is chosen from the amount of available history:

* fewer than 2 scores: no trend can be established, the last score is repeated.
* fewer than `min_entries_for_damped_model` scores: Holt's linear trend, whose projection
  is bent by a diminishing-returns factor as it nears the top of the 0-100 scale.
* otherwise: Holt's damped trend, which flattens growth geometrically.

The smoothing parameters are not fixed. For each series they are chosen by a grid search that
minimizes the in-sample mean squared error of one-step-ahead forecasts.
"""

from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
import json
import logging
import math
from typing import TypedDict
import numpy as np
from typing_extensions import Self

logger = logging.getLogger(__name__)

MIN_ENTRIES_FOR_DAMPED_MODEL = 20
DIFFICULTY_EXPONENT = 1.5

SCORE_MIN = 0.0
SCORE_MAX = 100.0

ALPHA_GRID = tuple(i / 10 for i in range(1, 10))
BETA_GRID = tuple(j / 10 for j in range(1, 10))
PHI_GRID = tuple((80 + p) / 100 for p in range(20))


class TrendModel(Enum):
    """
    Enum representing the exponential-smoothing model used for a forecast.
    """

    Linear = "linear"
    Damped = "damped"


@dataclass(frozen=True)
class HoltParameters:
    """
    Smoothing parameters selected for a series.

    Attributes:
        alpha: Level smoothing parameter.
        beta: Trend smoothing parameter.
        phi: Trend damping parameter, 1.0 for the undamped linear model.
        mse: In-sample mean squared error of one-step-ahead forecasts with these parameters.
    """

    alpha: float
    beta: float
    phi: float
    mse: float


class ForecasterDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Forecaster object.
    """

    min_entries_for_damped_model: int
    difficulty_exponent: float


def _smooth(
    data: Sequence[float], alpha: float, beta: float, phi: float
) -> tuple[float, float, list[float]]:
    """
    Runs the Holt recurrence over the series.

    Returns the final level, the final trend and the one-step-ahead forecasts made for data[1:].
    """

    level = data[0]
    trend = data[1] - data[0]
    one_step_forecasts = []

    for value in data[1:]:
        one_step_forecasts.append(level + phi * trend)
        last_level = level
        level = alpha * value + (1 - alpha) * (last_level + phi * trend)
        trend = beta * (level - last_level) + (1 - beta) * phi * trend

    return level, trend, one_step_forecasts


def _mean_squared_error(actuals: Sequence[float], forecasts: Sequence[float]) -> float:
    if len(actuals) != len(forecasts) or len(actuals) == 0:
        return math.inf

    errors = np.asarray(actuals, dtype=np.float64) - np.asarray(
        forecasts, dtype=np.float64
    )

    return float(np.mean(errors**2))


@dataclass(init=False)
class Forecaster:
    """
    The adaptive trend forecaster.

    Attributes:
        min_entries_for_damped_model: Series at least this long are forecast with the damped trend model.
        difficulty_exponent: Exponent of the diminishing-returns factor applied to linear projections.
    """

    min_entries_for_damped_model: int
    difficulty_exponent: float

    def __init__(
        self,
        min_entries_for_damped_model: int = MIN_ENTRIES_FOR_DAMPED_MODEL,
        difficulty_exponent: float = DIFFICULTY_EXPONENT,
    ) -> None:
        error_messages = []
        if min_entries_for_damped_model < 2:
            error_messages.append(
                f"min_entries_for_damped_model = {min_entries_for_damped_model} must be at least 2"
            )
        if difficulty_exponent <= 0:
            error_messages.append(
                f"difficulty_exponent = {difficulty_exponent} must be positive"
            )
        if len(error_messages) > 0:
            raise ValueError(
                "One or more parameters are out of bounds:\n"
                + "\n".join(error_messages)
            )

        self.min_entries_for_damped_model = min_entries_for_damped_model
        self.difficulty_exponent = difficulty_exponent

    def select_model(self, data: Sequence[float]) -> TrendModel | None:
        """
        Picks the model for a series, or None if the series is too short to carry a trend.
        """

        if len(data) < 2:
            return None
        if len(data) < self.min_entries_for_damped_model:
            return TrendModel.Linear
        return TrendModel.Damped

    def fit(self, data: Sequence[float], model: TrendModel) -> HoltParameters:
        """
        Grid-searches the smoothing parameters that minimize in-sample MSE.

        Ties keep the first combination found, iterating alpha, beta and phi in ascending order.

        Args:
            data: The historical series, at least 2 values long.
            model: The model whose parameters are searched. Only the damped model searches phi.

        Returns:
            HoltParameters: The best parameters and their error.
        """

        phi_grid = PHI_GRID if model == TrendModel.Damped else (1.0,)
        actuals = data[1:]

        best = HoltParameters(alpha=0.5, beta=0.5, phi=0.9, mse=math.inf)
        for alpha in ALPHA_GRID:
            for beta in BETA_GRID:
                for phi in phi_grid:
                    _, _, one_step_forecasts = _smooth(data, alpha, beta, phi)
                    mse = _mean_squared_error(actuals, one_step_forecasts)
                    if mse < best.mse:
                        best = HoltParameters(alpha=alpha, beta=beta, phi=phi, mse=mse)

        return best

    def forecast(self, data: Sequence[float], horizon: int) -> list[float]:
        """
        Projects a series of scores `horizon` steps ahead.

        Args:
            data: Chronological scores on a 0-100 scale.
            horizon: Number of future points to produce.

        Returns:
            list[float]: Exactly `horizon` projected scores (none if horizon is not positive).
        """

        data = [float(value) for value in data]
        horizon = max(0, horizon)

        model = self.select_model(data)
        if model is None:
            last_value = data[-1] if data else 0.0
            return [last_value] * horizon

        parameters = self.fit(data, model)
        level, trend, _ = _smooth(
            data, parameters.alpha, parameters.beta, parameters.phi
        )

        logger.debug(
            "Forecasting %d points with %s model (alpha=%.1f beta=%.1f phi=%.2f mse=%.4f) over %d entries",
            horizon,
            model.value,
            parameters.alpha,
            parameters.beta,
            parameters.phi,
            parameters.mse,
            len(data),
        )

        if model == TrendModel.Linear:
            projection = self._project_linear(level=level, trend=trend, horizon=horizon)
        else:
            projection = self._project_damped(
                level=level, trend=trend, phi=parameters.phi, horizon=horizon
            )

        return np.clip(projection, SCORE_MIN, SCORE_MAX).tolist()

    def _project_linear(self, *, level: float, trend: float, horizon: int) -> list[float]:
        projection = []
        for i in range(1, horizon + 1):
            raw_projection = level + i * trend
            # growth slows as the projection approaches the top of the scale
            headroom = max(0.0, SCORE_MAX - max(0.0, raw_projection)) / SCORE_MAX
            difficulty_factor = headroom**self.difficulty_exponent
            projection.append(level + i * (trend * difficulty_factor))

        return projection

    def _project_damped(
        self, *, level: float, trend: float, phi: float, horizon: int
    ) -> list[float]:
        projection = []
        damped_trend_sum = 0.0
        for i in range(1, horizon + 1):
            damped_trend_sum += phi**i
            projection.append(level + damped_trend_sum * trend)

        return projection

    def to_dict(self) -> ForecasterDict:
        """
        Returns a dictionary representation of the Forecaster object.

        Returns:
            ForecasterDict: A dictionary representation of the Forecaster object.
        """

        return {
            "min_entries_for_damped_model": self.min_entries_for_damped_model,
            "difficulty_exponent": self.difficulty_exponent,
        }

    @classmethod
    def from_dict(cls, source_dict: ForecasterDict) -> Self:
        """
        Creates a Forecaster object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Forecaster object.

        Returns:
            Self: A Forecaster object created from the provided dictionary.
        """

        return cls(
            min_entries_for_damped_model=source_dict["min_entries_for_damped_model"],
            difficulty_exponent=source_dict["difficulty_exponent"],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Forecaster object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Forecaster object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Forecaster object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Forecaster object.

        Returns:
            Self: A Forecaster object created from the JSON string.
        """

        source_dict: ForecasterDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


_default_forecaster = Forecaster()


def forecast(data: Sequence[float], horizon: int) -> list[float]:
    """
    Projects a series of scores `horizon` steps ahead with the default Forecaster.
    """

    return _default_forecaster.forecast(data, horizon)


__all__ = ["Forecaster", "HoltParameters", "TrendModel", "forecast"]
