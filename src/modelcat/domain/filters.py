"""Compile allow/deny pattern specifications into a ``(provider, id)`` matcher.

Patterns are plain strings or compiled regular expressions. A string without
``*`` matches exactly; ``*`` is a wildcard for any run of characters and the
pattern is anchored at both ends. Regular expressions must match the whole
model id. ``deny`` always wins over ``allow``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final, Literal

from modelcat.domain.model.registry import normalize_provider_id

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

log = getLogger(__name__)

ALL: Final = "all"

type FilterPattern = str | re.Pattern[str]
type ProviderPatterns = Sequence[FilterPattern] | Literal["all"]
type PatternsByProvider = Mapping[str, ProviderPatterns]


@dataclass(frozen=True, slots=True)
class FilterSpec:
    allow: Literal["all"] | PatternsByProvider = ALL
    deny: PatternsByProvider = field(default_factory=dict[str, "ProviderPatterns"])

    def compile(
        self, known_provider_ids: Collection[str]
    ) -> tuple[CompiledFilter, list[FilterWarning]]:
        return compile_filters(self.allow, self.deny, known_provider_ids)


@dataclass(frozen=True, slots=True)
class FilterWarning:
    provider: str
    section: str
    message: str

    def __str__(self) -> str:
        return f"filters.{self.section}.{self.provider}: {self.message}"


@dataclass(frozen=True, slots=True)
class PatternMatcher:
    """Any-of matcher over one provider's pattern list."""

    exact: frozenset[str] = frozenset()
    globs: tuple[re.Pattern[str], ...] = ()
    regexes: tuple[re.Pattern[str], ...] = ()
    match_all: bool = False

    @classmethod
    def compile(cls, patterns: ProviderPatterns) -> PatternMatcher:
        if patterns == ALL:
            return cls(match_all=True)
        exact: set[str] = set()
        globs: list[re.Pattern[str]] = []
        regexes: list[re.Pattern[str]] = []
        for pattern in patterns:
            if isinstance(pattern, re.Pattern):
                regexes.append(pattern)
            elif "*" in pattern:
                globs.append(glob_to_regex(pattern))
            else:
                exact.add(pattern)
        return cls(exact=frozenset(exact), globs=tuple(globs), regexes=tuple(regexes))

    def __call__(self, model_id: str) -> bool:
        if self.match_all or model_id in self.exact:
            return True
        if any(glob.fullmatch(model_id) for glob in self.globs):
            return True
        return any(regex.fullmatch(model_id) for regex in self.regexes)


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")), re.DOTALL)


@dataclass(frozen=True, slots=True)
class CompiledFilter:
    """Pure ``(provider, model_id) -> bool`` predicate.

    ``allow`` is ``None`` when every provider is allowed. Otherwise only the
    listed providers are visible, each through its own matcher.
    """

    allow: Mapping[str, PatternMatcher] | None = None
    deny: Mapping[str, PatternMatcher] = field(default_factory=dict[str, PatternMatcher])

    @property
    def allows_everything(self) -> bool:
        return self.allow is None and not self.deny

    def allows_provider(self, provider: str) -> bool:
        return self.allow is None or provider in self.allow

    def __call__(self, provider: str, model_id: str) -> bool:
        if self.allow is not None:
            matcher = self.allow.get(provider)
            if matcher is None or not matcher(model_id):
                return False
        denied = self.deny.get(provider)
        return denied is None or not denied(model_id)


ALLOW_ALL: Final[CompiledFilter] = CompiledFilter()


def compile_filters(
    allow: Literal["all"] | PatternsByProvider,
    deny: PatternsByProvider,
    known_provider_ids: Collection[str],
) -> tuple[CompiledFilter, list[FilterWarning]]:
    """Compile ``allow``/``deny`` for the providers in ``known_provider_ids``.

    Patterns for unknown providers are dropped with a warning. An allow map
    that is empty, or becomes empty once unknown providers are dropped,
    allows everything.
    """

    warnings: list[FilterWarning] = []
    allow_matchers: dict[str, PatternMatcher] | None = None
    if allow != ALL:
        allow_matchers = _compile_section(allow, "allow", known_provider_ids, warnings) or None
    deny_matchers = _compile_section(deny, "deny", known_provider_ids, warnings)

    for warning in warnings:
        log.warning("Ignoring filter entry %s", warning)
    return CompiledFilter(allow=allow_matchers, deny=deny_matchers), warnings


def _compile_section(
    section: PatternsByProvider,
    name: str,
    known_provider_ids: Collection[str],
    warnings: list[FilterWarning],
) -> dict[str, PatternMatcher]:
    compiled: dict[str, PatternMatcher] = {}
    for raw_provider, patterns in section.items():
        provider = normalize_provider_id(raw_provider)
        if provider is None:
            warnings.append(FilterWarning(str(raw_provider), name, "invalid provider id"))
            continue
        if provider not in known_provider_ids:
            warnings.append(FilterWarning(provider, name, "unknown provider"))
            continue
        valid = _valid_patterns(provider, name, patterns, warnings)
        compiled[provider] = PatternMatcher.compile(valid)
    return compiled


def _valid_patterns(
    provider: str,
    section: str,
    patterns: ProviderPatterns,
    warnings: list[FilterWarning],
) -> ProviderPatterns:
    if patterns == ALL:
        return ALL
    if isinstance(patterns, str):
        patterns = (patterns,)
    valid: list[FilterPattern] = []
    for pattern in patterns:
        if isinstance(pattern, re.Pattern) or (isinstance(pattern, str) and pattern):
            valid.append(pattern)
        else:
            warnings.append(FilterWarning(provider, section, f"invalid pattern {pattern!r}"))
    return tuple(valid)
