"""Ordered substring rule tables.

A rule table is a list of ``(keywords, label)`` pairs evaluated in declaration
order against a corpus of lower-cased names. The first rule with any keyword
contained in any name wins.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")

Rule = tuple[tuple[str, ...], T]


def rule_matches(keywords: Sequence[str], corpus: Iterable[str]) -> bool:
    return any(keyword in name for name in corpus for keyword in keywords)


def first_match(rules: Sequence[Rule], corpus: Iterable[str], default: T | None = None) -> T | None:
    names = [name.lower() for name in corpus]
    for keywords, label in rules:
        if rule_matches(keywords, names):
            return label
    return default


def all_matches(rules: Sequence[Rule], corpus: Iterable[str]) -> list[T]:
    """Return every matching label once, in rule order."""
    names = [name.lower() for name in corpus]
    labels: list[T] = []
    for keywords, label in rules:
        if label not in labels and rule_matches(keywords, names):
            labels.append(label)
    return labels
