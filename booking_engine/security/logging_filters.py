"""Logging filters that scrub sensitive content."""

from __future__ import annotations

import logging
import re

_TOKEN_PATTERN = re.compile(r"(Authorization: Bearer\s+)[\w\.-]+", re.IGNORECASE)
_PHONE_PATTERN = re.compile(r"\+?\d[\d\s().-]{6,}(\d{4})")


def _scrub(text: str) -> str:
    text = _TOKEN_PATTERN.sub(r"\1**REDACTED**", text)
    return _PHONE_PATTERN.sub(r"***\1", text)


class SensitiveFilter(logging.Filter):
    """Redact bearer tokens and mask phone numbers down to their last four digits."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _scrub(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(
                _scrub(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


__all__ = ["SensitiveFilter"]
