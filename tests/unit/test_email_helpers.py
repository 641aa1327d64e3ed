"""Unit tests for email lifecycle event logging."""

from __future__ import annotations

import json
import typing as typ

import pytest

from flowmetrics.amplitude import create_amplitude_receiver
from flowmetrics.common.time import now_ms
from flowmetrics.email import (
    anonymize_email_domain,
    get_header_value,
    log_email_event_from_message,
    log_email_event_sent,
)
from flowmetrics.metrics_log import MetricsLog
from tests.helpers.sinks import FakeLogger, RecordingReceiver


def _info_fields(logger: FakeLogger) -> list[dict[str, typ.Any]]:
    return [
        json.loads(message.partition(" ")[2])
        for level, message, _, _ in logger.calls
        if level == "INFO"
    ]


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Return a logger that records calls."""
    return FakeLogger()


@pytest.fixture
def metrics_log(fake_logger: FakeLogger) -> MetricsLog:
    """Return a MetricsLog bound to the fake logger."""
    return MetricsLog("test", logger=fake_logger)


@pytest.fixture
def receiver() -> RecordingReceiver:
    """Return a receiver that records Amplitude calls."""
    return RecordingReceiver()


class TestGetHeaderValue:
    """Tests for get_header_value."""

    def test_reads_mail_headers(self) -> None:
        """Headers nested under mail are read first."""
        message = {
            "mail": {"headers": [{"name": "content-language", "value": "en-US"}]}
        }

        assert get_header_value("Content-Language", message) == "en-US"

    def test_reads_header_list(self) -> None:
        """A list of name/value headers is searched."""
        message = {"headers": [{"name": "content-language", "value": "ru"}]}

        assert get_header_value("Content-Language", message) == "ru"

    def test_mapping_headers_are_case_insensitive(self) -> None:
        """Header mappings match names regardless of case."""
        message = {"headers": {"cOnTeNt-LaNgUaGe": "ru"}}

        assert get_header_value("Content-Language", message) == "ru"

    @pytest.mark.parametrize(
        "message",
        [{}, {"headers": None}, {"headers": []}, {"headers": {"X-Uid": "u"}}],
    )
    def test_missing_header_is_none(self, message: dict[str, typ.Any]) -> None:
        """Absent headers return None."""
        assert get_header_value("Content-Language", message) is None


@pytest.mark.parametrize(
    ("email", "expected"),
    [
        ("user@gmail.com", "gmail.com"),
        ("user@YAHOO.com", "yahoo.com"),
        ("user@example.domain", "other"),
        ("not-an-email", "other"),
    ],
)
def test_anonymize_email_domain(email: str, expected: str) -> None:
    """Only popular domains survive anonymization."""
    assert anonymize_email_domain(email) == expected


class TestLogEmailEventSent:
    """Tests for log_email_event_sent."""

    def test_logs_locale_from_headers(
        self,
        metrics_log: MetricsLog,
        fake_logger: FakeLogger,
        receiver: RecordingReceiver,
    ) -> None:
        """The locale is read from headers case-insensitively."""
        message = {
            "email": "user@example.domain",
            "template": "verifyEmail",
            "headers": {"cOnTeNt-LaNgUaGe": "ru"},
        }

        log_email_event_sent(metrics_log, message, receive_event=receiver)

        (fields,) = _info_fields(fake_logger)
        assert fields["locale"] == "ru"

    def test_logs_one_line_per_recipient(
        self,
        metrics_log: MetricsLog,
        fake_logger: FakeLogger,
        receiver: RecordingReceiver,
    ) -> None:
        """Every CC recipient produces its own emailEvent line."""
        message = {
            "email": "user@example.domain",
            "ccEmails": ["noreply@gmail.com", "noreply@yahoo.com"],
            "template": "verifyEmail",
        }

        log_email_event_sent(metrics_log, message, receive_event=receiver)

        domains = [fields["domain"] for fields in _info_fields(fake_logger)]
        assert domains == ["other", "gmail.com", "yahoo.com"]
        assert len(receiver.calls) == 1

    def test_calls_amplitude_with_header_values(
        self, metrics_log: MetricsLog, receiver: RecordingReceiver
    ) -> None:
        """The Amplitude call carries locale, device, service, uid and flow."""
        message = {
            "email": "foo@example.com",
            "ccEmails": ["bar@example.com", "baz@example.com"],
            "template": "verifyEmail",
            "headers": [
                {"name": "Content-Language", "value": "aaa"},
                {"name": "X-Device-Id", "value": "bbb"},
                {"name": "X-Flow-Id", "value": "ccc"},
                {"name": "X-Service-Id", "value": "ddd"},
                {"name": "X-Uid", "value": "eee"},
            ],
        }
        before = now_ms()

        log_email_event_sent(metrics_log, message, receive_event=receiver)

        ((event_name, request, data, metrics_context),) = receiver.calls
        assert event_name == "email.verifyEmail.sent"
        assert request == {
            "app": {"locale": "aaa", "ua": {}},
            "auth": {},
            "query": {},
            "payload": {},
        }
        assert data == {"device_id": "bbb", "service": "ddd", "uid": "eee"}
        assert metrics_context["flow_id"] == "ccc"
        assert metrics_context["time"] >= before


class TestLogEmailEventFromMessage:
    """Tests for log_email_event_from_message."""

    def test_calls_amplitude_for_bounce(
        self,
        metrics_log: MetricsLog,
        fake_logger: FakeLogger,
        receiver: RecordingReceiver,
    ) -> None:
        """Bounce notifications log an emailEvent and an Amplitude event."""
        message = {
            "email": "foo@example.com",
            "headers": [
                {"name": "Content-Language", "value": "a"},
                {"name": "X-Device-Id", "value": "b"},
                {"name": "X-Flow-Id", "value": "c"},
                {"name": "X-Service-Id", "value": "d"},
                {"name": "X-Template-Name", "value": "verifyLoginEmail"},
                {"name": "X-Uid", "value": "e"},
            ],
        }

        log_email_event_from_message(
            metrics_log, message, "bounced", "gmail.com", receive_event=receiver
        )

        ((event_name, request, data, metrics_context),) = receiver.calls
        assert event_name == "email.verifyLoginEmail.bounced"
        assert request["app"] == {"locale": "a", "ua": {}}
        assert data == {"device_id": "b", "service": "d", "uid": "e"}
        assert metrics_context["flow_id"] == "c"
        assert _info_fields(fake_logger) == [
            {
                "template": "verifyLoginEmail",
                "type": "bounced",
                "domain": "gmail.com",
                "flow_id": "c",
                "locale": "a",
            }
        ]

    def test_without_template_is_ignored(
        self,
        metrics_log: MetricsLog,
        fake_logger: FakeLogger,
        receiver: RecordingReceiver,
    ) -> None:
        """Messages without X-Template-Name are not logged."""
        log_email_event_from_message(
            metrics_log, {"headers": []}, "bounced", "other", receive_event=receiver
        )

        assert fake_logger.calls == []
        assert receiver.calls == []


class TestReceiverBinding:
    """The Amplitude receiver is bound once and reused."""

    def test_receiver_is_reused_across_messages(
        self,
        metrics_log: MetricsLog,
        fake_logger: FakeLogger,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Later environment changes do not alter the bound app version."""
        monkeypatch.setenv("FLOWMETRICS_SERVICE_VERSION", "1.96.0")
        receive_event = create_amplitude_receiver(metrics_log)
        message = {
            "email": "user@gmail.com",
            "template": "verifyEmail",
            "headers": {"X-Uid": "uid"},
        }

        log_email_event_sent(metrics_log, message, receive_event=receive_event)
        monkeypatch.setenv("FLOWMETRICS_SERVICE_VERSION", "1.97.0")
        log_email_event_sent(metrics_log, message, receive_event=receive_event)

        app_versions = [
            fields["app_version"]
            for fields in _info_fields(fake_logger)
            if "app_version" in fields
        ]
        assert app_versions == ["96", "96"]

    def test_same_receiver_sees_every_message(
        self, metrics_log: MetricsLog, receiver: RecordingReceiver
    ) -> None:
        """Sent and bounce notifications share one receiver."""
        log_email_event_sent(
            metrics_log,
            {"email": "user@gmail.com", "template": "verifyEmail"},
            receive_event=receiver,
        )
        log_email_event_from_message(
            metrics_log,
            {"headers": {"X-Template-Name": "verifyLoginEmail"}},
            "bounced",
            "gmail.com",
            receive_event=receiver,
        )

        assert [call[0] for call in receiver.calls] == [
            "email.verifyEmail.sent",
            "email.verifyLoginEmail.bounced",
        ]
