"""Tests for response latency aggregation and timestamp coercion."""

from datetime import UTC, datetime

import pytest

from conv_analytics.analytics.timing import average_response_ms, round_half_up
from conv_analytics.conversation.models import to_ms
from tests.utils.factories import MessageFactory as mf


class TestAverageResponse:
    """Tests for average_response_ms."""

    def test_single_exchange(self):
        assert average_response_ms([mf.user("hi", at=0), mf.bot("hello", at=1000)]) == 1000

    def test_no_bot_reply(self):
        assert average_response_ms([mf.user("hi", at=0), mf.user("anyone?", at=5000)]) is None

    def test_empty(self):
        assert average_response_ms([]) is None

    def test_sorts_by_timestamp(self):
        """Input order does not matter, timestamps do."""
        messages = [mf.bot("reply", at=5000), mf.user("question", at=1000)]
        assert average_response_ms(messages) == 4000

    def test_bot_before_user_is_not_a_reply(self):
        messages = [mf.bot("welcome", at=0), mf.user("thanks", at=100)]
        assert average_response_ms(messages) is None

    def test_consecutive_users_share_reply(self):
        messages = [mf.user("a", at=0), mf.user("b", at=500), mf.bot("c", at=1000)]
        assert average_response_ms(messages) == 750

    def test_trailing_user_ignored(self):
        messages = [mf.user("a", at=0), mf.bot("b", at=100), mf.user("c", at=200)]
        assert average_response_ms(messages) == 100

    def test_averages_multiple_exchanges(self):
        assert average_response_ms(mf.exchange(turns=3, gap_ms=250)) == 250

    def test_missing_timestamps_count_as_zero(self):
        assert average_response_ms([mf.user("a"), mf.bot("b")]) == 0

    def test_infinite_timestamps_count_as_zero(self):
        assert average_response_ms([mf.user("a", at=0), mf.bot("b", at=float("inf"))]) == 0

    def test_overflowing_total_is_zero(self):
        messages = [
            mf.user("a", at=-1e308),
            mf.bot("b", at=1e308),
            mf.user("c", at=1e308),
            mf.bot("d", at=1.7e308),
        ]
        assert average_response_ms(messages) == 0

    def test_rounds_half_up(self):
        messages = [
            mf.user("a", at=0),
            mf.bot("b", at=1),
            mf.user("c", at=10),
            mf.bot("d", at=12),
        ]
        assert average_response_ms(messages) == 2


class TestRoundHalfUp:
    """Tests for round_half_up."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (-2.5, -2), (13.3, 13)],
    )
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_is_zero(self, value):
        assert round_half_up(value) == 0


class TestToMs:
    """Tests for timestamp coercion."""

    def test_firestore_seconds(self):
        assert to_ms({"seconds": 5, "nanoseconds": 123}) == 5000

    def test_datetime(self):
        assert to_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)) == 1000

    def test_number_is_epoch_ms(self):
        assert to_ms(1500) == 1500

    def test_numeric_string(self):
        assert to_ms("1500") == 1500

    @pytest.mark.parametrize(
        "value",
        [None, 0, "", "garbage", {"seconds": "5"}, {"foo": 1}, [], float("nan"), object()],
    )
    def test_malformed_is_zero(self, value):
        assert to_ms(value) == 0

    @pytest.mark.parametrize(
        "value",
        [
            "Infinity",
            "-inf",
            float("inf"),
            float("-inf"),
            10**400,
            {"seconds": 10**400},
            {"seconds": float("inf")},
            {"seconds": 1e306},
        ],
    )
    def test_non_finite_or_overflowing_is_zero(self, value):
        assert to_ms(value) == 0
