"""
Presenter and Password Reset Tests
View derivation for the ticker card and the simulated reset dialog.
"""

import pytest

from conftest import TEST_TOPIC
from ticker.errors import ValidationError
from ticker.formatting import PLACEHOLDER
from ticker.schemas.feed import ConnectionState, FeedStatus
from ticker.services.password_reset import (
    RESET_ACK_MESSAGE, RESET_MISSING_FIELDS_MESSAGE, submit_password_reset
)
from ticker.services.presenter import DOT_CONNECTED, DOT_ERROR, DOT_IDLE, build_feed_view


def make_state(**fields) -> ConnectionState:
    return ConnectionState(subscription_topic=TEST_TOPIC, **fields)


class TestBuildFeedView:

    def test_connected_view(self):
        view = build_feed_view(make_state(
            status=FeedStatus.CONNECTED, latest_price=1.0850, latest_timestamp=1700000000000
        ))
        assert view.badge == "Connected"
        assert view.dot_class == DOT_CONNECTED
        assert view.connected is True
        assert view.price_text == "1.08500"
        assert view.local_time != PLACEHOLDER
        assert view.error is None
        assert view.topic == TEST_TOPIC

    def test_error_wins(self):
        view = build_feed_view(make_state(status=FeedStatus.ERRORING, last_error="blocked"))
        assert view.badge == "Error"
        assert view.dot_class == DOT_ERROR
        assert view.error == "blocked"

    @pytest.mark.parametrize("status", [FeedStatus.DISCONNECTED, FeedStatus.CONNECTING])
    def test_not_connected_shows_connecting(self, status):
        view = build_feed_view(make_state(status=status))
        assert view.badge == "Connecting"
        assert view.dot_class == DOT_IDLE
        assert view.price_text == PLACEHOLDER
        assert view.local_time == PLACEHOLDER

    def test_falsy_timestamp_shows_placeholder(self):
        view = build_feed_view(make_state(latest_timestamp=0))
        assert view.local_time == PLACEHOLDER

    def test_invalid_timestamp_shows_placeholder(self):
        view = build_feed_view(make_state(latest_timestamp="yesterday-ish"))
        assert view.local_time == PLACEHOLDER


class TestPasswordReset:

    @pytest.mark.parametrize("email,username", [
        (None, None),
        ("", ""),
        ("  ", None),
    ])
    def test_missing_fields(self, email, username):
        with pytest.raises(ValidationError) as exc_info:
            submit_password_reset(email, username)
        assert exc_info.value.message == RESET_MISSING_FIELDS_MESSAGE
        assert exc_info.value.error_code == "VALIDATION_ERROR"

    @pytest.mark.parametrize("email,username", [
        ("name@company.com", None),
        (None, "anita"),
        ("name@company.com", "anita"),
    ])
    def test_acknowledged(self, email, username):
        outcome = submit_password_reset(email, username)
        assert outcome.message == RESET_ACK_MESSAGE
        assert outcome.close_after_ms == 900
