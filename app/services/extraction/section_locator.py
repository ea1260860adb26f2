"""
Clause boundaries of a Vietnamese service contract.

Articles are headed "ĐIỀU N" at the start of a line; subsections are "N.M" at
the start of a line. The index is built once per document and serves bounded
sub-texts by name so later extractors never scan across unrelated clauses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from app.core.config import settings

ARTICLE_RE = re.compile(r"^[ \t]*ĐIỀU[ \t]*(\d+)\b", re.IGNORECASE | re.MULTILINE)
SUBSECTION_RE = re.compile(r"^[ \t]*(\d+)\.(\d+)\.?(?=\s)", re.MULTILINE)

PARTY_B_MARKER = r"B[êÊ]N\s*B"


@dataclass
class SectionIndex:
    text: str
    max_span: int = 3000
    articles: Dict[str, Tuple[int, int]] = field(default_factory=dict)
    subsections: Dict[str, Tuple[int, int]] = field(default_factory=dict)

    @classmethod
    def build(cls, text: str, max_span: Optional[int] = None) -> "SectionIndex":
        index = cls(text=text or "", max_span=max_span or settings.SECTION_MAX_SPAN)
        index._scan()
        return index

    def _scan(self) -> None:
        article_starts: List[Tuple[str, int]] = [(m.group(1), m.start()) for m in ARTICLE_RE.finditer(self.text)]
        sub_starts: List[Tuple[str, int]] = [
            (f"{m.group(1)}.{m.group(2)}", m.start()) for m in SUBSECTION_RE.finditer(self.text)
        ]

        for i, (name, start) in enumerate(article_starts):
            end = article_starts[i + 1][1] if i + 1 < len(article_starts) else len(self.text)
            # first occurrence wins; later ones are usually cross-references
            self.articles.setdefault(name, (start, end))

        boundaries = sorted([s for _, s in article_starts] + [s for _, s in sub_starts])
        for name, start in sub_starts:
            following = [b for b in boundaries if b > start]
            end = following[0] if following else len(self.text)
            self.subsections.setdefault(name, (start, end))

    # -------------------------------------------------
    # Lookup
    # -------------------------------------------------
    def _slice(self, bounds: Optional[Tuple[int, int]]) -> Optional[str]:
        if bounds is None:
            return None
        start, end = bounds
        return self.text[start:min(end, start + self.max_span)]

    def has_section(self, number: str) -> bool:
        return str(number) in self.articles

    def section(self, number: str) -> Optional[str]:
        """Text of "ĐIỀU <number>" up to the next article, or None when the clause is absent."""
        return self._slice(self.articles.get(str(number)))

    def subsection(self, name: str) -> Optional[str]:
        """Text of subsection "3.3" up to the next heading of any level."""
        return self._slice(self.subsections.get(name))

    def section_or_document(self, number: str) -> str:
        return self.section(number) or self.text


def locate(text: str, start_marker: str, end_marker: Optional[str] = None, max_span: int = 3000) -> Optional[str]:
    """Substring from `start_marker` to `end_marker` (exclusive), or `max_span` chars when no end is found."""
    start = re.search(start_marker, text, re.IGNORECASE)
    if not start:
        return None
    limit = min(len(text), start.start() + max_span)
    if end_marker:
        end = re.compile(end_marker, re.IGNORECASE).search(text, start.end(), limit)
        if end:
            limit = end.start()
    return text[start.start():limit]


def window_after(text: str, marker: str, size: int) -> Optional[str]:
    """Bounded lookahead window beginning at the first `marker` match."""
    m = re.search(marker, text, re.IGNORECASE)
    if not m:
        return None
    return text[m.start():m.start() + size]


def party_b_window(text: str, size: Optional[int] = None) -> Optional[str]:
    return window_after(text, PARTY_B_MARKER, size or settings.PARTY_B_WINDOW)
