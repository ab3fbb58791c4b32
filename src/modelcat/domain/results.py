"""Outcome values for runtime lookups that did not produce a result."""

from __future__ import annotations

from enum import StrEnum


class LookupMiss(StrEnum):
    NOT_FOUND = "not_found"
    INVALID_FORMAT = "invalid_format"
    UNKNOWN_PROVIDER = "unknown_provider"
    NO_MATCH = "no_match"
