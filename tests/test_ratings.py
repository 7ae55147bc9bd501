from __future__ import annotations

from datetime import date, datetime

import pytest

from apkstore.catalog import average_rating, rounded_stars
from apkstore.dashboard import compare, daily_trend
from apkstore.reviews import parse_rating, validate_review


def test_average_of_sample_reviews():
    avg = average_rating([5, 4, 3, 4, 5])
    assert avg == pytest.approx(4.2)
    assert rounded_stars(avg) == 4


def test_average_without_reviews_is_zero():
    assert average_rating([]) == 0.0
    assert rounded_stars(0.0) == 0


@pytest.mark.parametrize("avg, stars", [(4.5, 5), (2.5, 3), (2.49, 2), (5.0, 5), (1.0, 1)])
def test_rounded_stars_rounds_halves_up(avg, stars):
    assert rounded_stars(avg) == stars


def test_review_validation_order():
    assert validate_review(0, "", "") == "Please select a rating"
    assert validate_review(6, "Ann", "Nice") == "Please select a rating"
    assert validate_review(3, "  ", "Nice") == "Please enter your name"
    assert validate_review(3, "Ann", " ") == "Please enter a comment"
    assert validate_review(3, "Ann", "Nice") is None


def test_parse_rating_falls_back_to_zero():
    assert parse_rating("4") == 4
    assert parse_rating("") == 0
    assert parse_rating("abc") == 0
    assert parse_rating(None) == 0


def test_compare_week_over_week():
    grew = compare(6, 4)
    assert grew.value == 2
    assert grew.percentage == 50.0
    assert grew.is_positive

    shrank = compare(1, 4)
    assert shrank.value == -3
    assert shrank.percentage == -75.0
    assert not shrank.is_positive

    assert compare(3, 0).percentage == 100.0
    assert compare(0, 0).percentage == 0.0


def test_daily_trend_buckets_last_seven_days():
    today = date(2026, 10, 19)
    stamps = [
        datetime(2026, 10, 19, 9, 0),
        datetime(2026, 10, 19, 23, 59),
        datetime(2026, 10, 13, 0, 1),
        datetime(2026, 10, 12, 12, 0),  # outside the window
    ]
    trend = daily_trend(stamps, today)
    assert len(trend) == 7
    assert trend[0] == (date(2026, 10, 13), 1)
    assert trend[-1] == (today, 2)
    assert sum(count for _, count in trend) == 3
