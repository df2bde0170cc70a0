"""Shared fixtures for Gmail OTP reader tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from gmail_otp.core.models import AcquisitionConfig
from helpers import RecordingSleep, encode


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """A sleep replacement that never blocks."""
    return RecordingSleep()


@pytest.fixture
def fast_config() -> Callable[..., AcquisitionConfig]:
    """Factory for AcquisitionConfig with a short budget and no delay."""

    def _factory(**overrides: Any) -> AcquisitionConfig:
        values: dict[str, Any] = {
            "query": "OTP",
            "max_attempts": 3,
            "attempt_delay_seconds": 0.0,
        }
        values.update(overrides)
        return AcquisitionConfig(**values)

    return _factory


@pytest.fixture
def raw_multipart_message() -> dict[str, Any]:
    """Raw Gmail API response for a multipart/mixed email with alternative body and attachment."""
    return {
        "id": "msg_otp_001",
        "threadId": "thread_001",
        "labelIds": ["INBOX", "UNREAD"],
        "snippet": "Your one-time code is 482910",
        "internalDate": "1705314600000",
        "payload": {
            "mimeType": "multipart/mixed",
            "headers": [
                {"name": "Subject", "value": "Your OTP code 731005"},
                {"name": "From", "value": "Bank <no-reply@bank.example>"},
                {"name": "To", "value": "tester@example.com"},
            ],
            "body": {"size": 0},
            "parts": [
                {
                    "mimeType": "multipart/alternative",
                    "body": {"size": 0},
                    "parts": [
                        {
                            "mimeType": "text/plain",
                            "body": {"data": encode("Your one-time code is 482910.\n")},
                        },
                        {
                            "mimeType": "text/html",
                            "body": {"data": encode("<p>Your one-time code is <b>482910</b></p>")},
                        },
                    ],
                },
                {
                    "mimeType": "text/plain",
                    "filename": "terms.txt",
                    "body": {"attachmentId": "att_1", "size": 120},
                },
            ],
        },
    }
