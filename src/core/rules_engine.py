"""Keyword rule compilation and matching logic (core domain).

Rules come from free-form configuration text, so compilation is fail-soft:
any input yields a (possibly empty) rule list and bad lines are only logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
import re
from typing import Iterable, List, Optional, Tuple

LOGGER = logging.getLogger(__name__)

COMMENT_PREFIX = "//"
RESPONSE_SEPARATOR = "==="


@dataclass(frozen=True)
class BlockRule:
    """A pattern whose match counts as a violation."""

    pattern: re.Pattern


@dataclass(frozen=True)
class ResponseRule:
    """A pattern answered with a canned response instead of being relayed."""

    pattern: re.Pattern
    response: str


def _rule_lines(config_text: Optional[str]) -> Iterable[str]:
    if not config_text:
        return []
    lines = (line.strip() for line in str(config_text).split("\n"))
    return [line for line in lines if line and not line.startswith(COMMENT_PREFIX)]


# Oversized repeat counts raise OverflowError and deep nesting RecursionError.
COMPILE_ERRORS = (re.error, OverflowError, RecursionError)


def _compile(pattern: str, source: str) -> Optional[re.Pattern]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except COMPILE_ERRORS as exc:
        LOGGER.warning("Skipping invalid pattern in %s: %r (%s)", source, pattern[:80], exc)
        return None


def _is_valid(pattern: str) -> bool:
    try:
        re.compile(pattern, re.IGNORECASE)
    except COMPILE_ERRORS:
        return False
    return True


def _split_response(line: str) -> Optional[Tuple[str, str]]:
    parts = line.split(RESPONSE_SEPARATOR)
    if len(parts) != 2:
        return None
    raw_pattern, response = parts[0].strip(), parts[1].strip()
    if not raw_pattern or not response:
        return None
    return raw_pattern, response


@lru_cache(maxsize=32)
def _compile_block_rules(config_text: str) -> Tuple[BlockRule, ...]:
    compiled: List[BlockRule] = []
    for line in _rule_lines(config_text):
        pattern = _compile(line, "block keywords")
        if pattern is not None:
            compiled.append(BlockRule(pattern=pattern))
    return tuple(compiled)


@lru_cache(maxsize=32)
def _compile_response_rules(config_text: str) -> Tuple[ResponseRule, ...]:
    compiled: List[ResponseRule] = []
    for line in _rule_lines(config_text):
        fields = _split_response(line)
        if fields is None:
            continue
        raw_pattern, response = fields
        pattern = _compile(raw_pattern, "auto replies")
        if pattern is not None:
            compiled.append(ResponseRule(pattern=pattern, response=response))
    return tuple(compiled)


def compile_block_rules(config_text: Optional[str]) -> List[BlockRule]:
    """Compile newline-delimited block patterns, one regex per line.

    Compiled sets are cached per configuration text, so the same text is only
    compiled (and its bad lines only reported) once.
    """

    return list(_compile_block_rules(str(config_text or "")))


def compile_response_rules(config_text: Optional[str]) -> List[ResponseRule]:
    """Compile ``pattern===response`` lines; malformed lines are skipped."""

    return list(_compile_response_rules(str(config_text or "")))


def invalid_block_patterns(config_text: Optional[str]) -> List[str]:
    """Return the block lines that were skipped because they do not compile."""

    return [line for line in _rule_lines(config_text) if not _is_valid(line)]


def invalid_response_patterns(config_text: Optional[str]) -> List[str]:
    """Return the well-formed response lines whose pattern does not compile."""

    invalid = []
    for line in _rule_lines(config_text):
        fields = _split_response(line)
        if fields is not None and not _is_valid(fields[0]):
            invalid.append(line)
    return invalid


def first_block_match(text: str, rules: Iterable[BlockRule]) -> Optional[BlockRule]:
    for rule in rules:
        if rule.pattern.search(text):
            return rule
    return None


def first_response_match(text: str, rules: Iterable[ResponseRule]) -> Optional[ResponseRule]:
    for rule in rules:
        if rule.pattern.search(text):
            return rule
    return None
