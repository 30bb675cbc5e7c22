from srs_forecast.proficiency import (
    ProficiencyForecaster,
    ScorePoint,
    SubskillPoint,
    get_proficiency_forecast,
    overall_scores,
    summarize_subskills,
)
from srs_forecast.forecasting import Forecaster

from datetime import datetime, timedelta, timezone
import json
import pytest

START = datetime(2024, 3, 1, 9, 0, 0, 0, timezone.utc)


def make_history(num_entries, step=timedelta(days=1), start=START):
    """
    builds matching overall and subskill histories, one entry per `step`
    """

    subskill_series = [
        SubskillPoint(
            date=start + i * step,
            grammar=40.0,
            phrasing=30.0 + 3 * i,
            vocabulary=50.0 + i,
        )
        for i in range(num_entries)
    ]

    return overall_scores(subskill_series), subskill_series


class TestProficiencyForecast:
    def test_too_few_entries(self):
        historical_scores, subskill_series = make_history(6)

        result = get_proficiency_forecast(historical_scores, subskill_series, 30)

        assert result.predicted_overall == []
        assert result.predicted_subskills == []

        result = get_proficiency_forecast([], [], 30)
        assert result.predicted_overall == []

    def test_minimum_entries(self):
        historical_scores, subskill_series = make_history(7)

        result = get_proficiency_forecast(historical_scores, subskill_series, 30)

        assert len(result.predicted_overall) == 30

    def test_daily_pace(self):
        historical_scores, subskill_series = make_history(10)
        last_entry_date = historical_scores[-1].date

        result = get_proficiency_forecast(historical_scores, subskill_series, 30)

        assert len(result.predicted_overall) == 30
        assert len(result.predicted_subskills) == 30
        assert result.predicted_overall[0].date == last_entry_date + timedelta(days=1)
        assert result.predicted_overall[-1].date == last_entry_date + timedelta(days=30)

        # subskill points share the dates of the overall points
        for overall_point, subskill_point in zip(
            result.predicted_overall, result.predicted_subskills
        ):
            assert overall_point.date == subskill_point.date

    def test_slower_pace_means_fewer_points(self):
        historical_scores, subskill_series = make_history(10, step=timedelta(days=2))
        last_entry_date = historical_scores[-1].date

        result = get_proficiency_forecast(historical_scores, subskill_series, 30)

        assert len(result.predicted_overall) == 15
        assert result.predicted_overall[0].date == last_entry_date + timedelta(days=2)

    def test_irregular_pace(self):
        days = (0, 1, 3, 4, 6, 7, 9)
        historical_scores = [
            ScorePoint(date=START + timedelta(days=day), score=50.0 + day)
            for day in days
        ]

        result = get_proficiency_forecast(historical_scores, [], 30)

        # 9 days over 6 gaps is an average of 1.5 days between entries
        assert len(result.predicted_overall) == 20
        assert result.predicted_overall[0].date == START + timedelta(days=10.5)

    def test_pace_floor(self):
        historical_scores, subskill_series = make_history(10, step=timedelta(hours=1))
        last_entry_date = historical_scores[-1].date

        result = get_proficiency_forecast(historical_scores, subskill_series, 1)

        # the pace is floored at a tenth of a day, but dates follow the real average
        assert len(result.predicted_overall) == 10
        assert result.predicted_overall[0].date == last_entry_date + timedelta(hours=1)

    def test_subskills_forecast_independently(self):
        historical_scores, subskill_series = make_history(12)

        result = get_proficiency_forecast(historical_scores, subskill_series, 10)

        for point in result.predicted_subskills:
            assert point.grammar == pytest.approx(40.0)

        phrasing = [point.phrasing for point in result.predicted_subskills]
        assert phrasing[0] > subskill_series[-1].phrasing - 1
        assert phrasing[1] > phrasing[0]

        # each subskill matches a standalone forecast of its own series
        vocabulary = Forecaster().forecast(
            [point.vocabulary for point in subskill_series], 10
        )
        assert [point.vocabulary for point in result.predicted_subskills] == vocabulary

    def test_scores_in_range(self):
        historical_scores, subskill_series = make_history(25)

        result = get_proficiency_forecast(historical_scores, subskill_series, 60)

        for point in result.predicted_overall:
            assert 0 <= point.score <= 100
        for point in result.predicted_subskills:
            assert 0 <= point.grammar <= 100
            assert 0 <= point.phrasing <= 100
            assert 0 <= point.vocabulary <= 100

    def test_without_subskills(self):
        historical_scores, _ = make_history(10)

        result = get_proficiency_forecast(historical_scores, [], 30)

        assert len(result.predicted_overall) == 30
        assert result.predicted_subskills == []

    def test_unsorted_history(self):
        historical_scores, subskill_series = make_history(10)

        in_order = get_proficiency_forecast(historical_scores, subskill_series, 30)
        reversed_order = get_proficiency_forecast(
            list(reversed(historical_scores)), list(reversed(subskill_series)), 30
        )

        assert in_order.to_dict() == reversed_order.to_dict()

    def test_default_horizon(self):
        historical_scores, subskill_series = make_history(10)

        assert len(get_proficiency_forecast(historical_scores, subskill_series).predicted_overall) == 30

        proficiency_forecaster = ProficiencyForecaster(default_horizon_days=14)
        result = proficiency_forecaster.get_proficiency_forecast(
            historical_scores, subskill_series
        )
        assert len(result.predicted_overall) == 14

    def test_custom_entry_gate(self):
        historical_scores, subskill_series = make_history(3)
        proficiency_forecaster = ProficiencyForecaster(min_entries_for_forecast=3)

        result = proficiency_forecaster.get_proficiency_forecast(
            historical_scores, subskill_series, 5
        )

        assert len(result.predicted_overall) == 5

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            ProficiencyForecaster(min_entries_for_forecast=1)

        with pytest.raises(ValueError):
            ProficiencyForecaster(default_horizon_days=0)

    def test_mixed_naive_and_aware_history(self):
        historical_scores, subskill_series = make_history(10)

        # the same instants, with every other date stripped of its timezone
        mixed_scores = [
            ScorePoint(date=point.date.replace(tzinfo=None), score=point.score)
            if i % 2 == 0
            else point
            for i, point in enumerate(historical_scores)
        ]
        mixed_subskills = [
            SubskillPoint(
                date=point.date.replace(tzinfo=None),
                grammar=point.grammar,
                phrasing=point.phrasing,
                vocabulary=point.vocabulary,
            )
            if i % 2 == 1
            else point
            for i, point in enumerate(subskill_series)
        ]

        expected = get_proficiency_forecast(historical_scores, subskill_series, 5)
        result = get_proficiency_forecast(
            list(reversed(mixed_scores)), list(reversed(mixed_subskills)), 5
        )

        assert result.to_dict() == expected.to_dict()
        assert all(point.date.tzinfo == timezone.utc for point in result.predicted_overall)

    def test_ProficiencyForecaster_serialize(self):
        proficiency_forecaster = ProficiencyForecaster(
            forecaster=Forecaster(min_entries_for_damped_model=12),
            min_entries_for_forecast=5,
            default_horizon_days=14,
        )

        proficiency_forecaster_dict = proficiency_forecaster.to_dict()
        assert type(json.dumps(proficiency_forecaster_dict)) is str
        assert proficiency_forecaster_dict["forecaster"]["min_entries_for_damped_model"] == 12

        copied_forecaster = ProficiencyForecaster.from_dict(proficiency_forecaster_dict)
        assert copied_forecaster == proficiency_forecaster

        copied_forecaster = ProficiencyForecaster.from_json(
            proficiency_forecaster.to_json(indent=2)
        )
        assert copied_forecaster == proficiency_forecaster
        assert copied_forecaster.forecaster.min_entries_for_damped_model == 12

    def test_serialize(self):
        historical_scores, subskill_series = make_history(8)

        result = get_proficiency_forecast(historical_scores, subskill_series, 3)
        result_dict = result.to_dict()

        assert type(json.dumps(result_dict)) is str
        assert result_dict["predicted_overall"][0]["date"] == (
            START + timedelta(days=8)
        ).isoformat()
        assert set(result_dict["predicted_subskills"][0]) == {
            "date",
            "grammar",
            "phrasing",
            "vocabulary",
        }

        point = result.predicted_overall[0]
        assert ScorePoint.from_dict(point.to_dict()) == point

        subskill_point = result.predicted_subskills[0]
        assert SubskillPoint.from_dict(subskill_point.to_dict()) == subskill_point


class TestSubskillSummary:
    def test_summarize(self):
        subskill_series = [
            SubskillPoint(date=START, grammar=60, phrasing=50, vocabulary=80),
            SubskillPoint(date=START + timedelta(days=1), grammar=70, phrasing=60, vocabulary=90),
        ]

        summary = summarize_subskills(subskill_series)

        assert summary.grammar == pytest.approx(65)
        assert summary.phrasing == pytest.approx(55)
        assert summary.vocabulary == pytest.approx(85)
        assert summary.weakest_skill == "phrasing"

    def test_summarize_ties(self):
        subskill_series = [
            SubskillPoint(date=START, grammar=50, phrasing=50, vocabulary=50),
        ]

        # the last of the tied subskills is named
        assert summarize_subskills(subskill_series).weakest_skill == "vocabulary"

        subskill_series = [
            SubskillPoint(date=START, grammar=40, phrasing=40, vocabulary=60),
        ]

        assert summarize_subskills(subskill_series).weakest_skill == "phrasing"

    def test_summarize_empty(self):
        summary = summarize_subskills([])

        assert summary.weakest_skill == "N/A"
        assert summary.grammar == 0.0

    def test_overall_scores(self):
        subskill_series = [
            SubskillPoint(date=START, grammar=60, phrasing=50, vocabulary=80),
            SubskillPoint(date=START + timedelta(days=1), grammar=70, phrasing=60, vocabulary=90),
        ]

        scores = overall_scores(subskill_series)

        assert [point.date for point in scores] == [START, START + timedelta(days=1)]
        assert scores[0].score == pytest.approx(190 / 3)
        assert scores[1].score == pytest.approx(220 / 3)


class TestPackage:
    def test_lazy_exports(self):
        import srs_forecast
        from srs_forecast import proficiency

        assert srs_forecast.ProficiencyForecaster is proficiency.ProficiencyForecaster
        assert srs_forecast.get_proficiency_forecast is proficiency.get_proficiency_forecast

        with pytest.raises(AttributeError):
            srs_forecast.not_a_real_name
