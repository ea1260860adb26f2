from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

Extractor = Callable[[str], Optional[Any]]


@dataclass(frozen=True)
class Strategy:
    name: str
    fn: Extractor

    def __call__(self, text: str) -> Optional[Any]:
        return self.fn(text)


@dataclass(frozen=True)
class StrategyHit:
    value: Any
    method: str


def first_match(strategies: Sequence[Strategy], text: Optional[str]) -> Optional[StrategyHit]:
    """Try each strategy in order; the first non-empty result wins (no weighting)."""
    if not text:
        return None
    for strategy in strategies:
        value = strategy(text)
        if value is not None and value != "":
            return StrategyHit(value=value, method=strategy.name)
    return None


def regex_strategy(
    name: str,
    pattern: str,
    *,
    flags: int = re.IGNORECASE,
    group: int = 1,
    post: Optional[Callable[[re.Match], Optional[Any]]] = None,
) -> Strategy:
    """Strategy backed by a single `re.search`; `post` may reshape or reject the match."""
    compiled = re.compile(pattern, flags)

    def _run(text: str) -> Optional[Any]:
        m = compiled.search(text)
        if not m:
            return None
        if post is not None:
            return post(m)
        value = m.group(group)
        return value.strip() if value else None

    return Strategy(name=name, fn=_run)
