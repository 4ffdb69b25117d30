"""
Records passed between the locator, the enricher and the aggregator.

Field names are snake_case in Python; ``model_dump(by_alias=True)`` gives the
camelCase payload the web client reads (``surahNo``, ``rootCount`` …).
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True,
                              frozen=True)


def verse_key(surah_no: int, ayah_no: int) -> str:
    """Composite ``"surah:ayah"`` key used by the token table."""
    return f"{surah_no}:{ayah_no}"


def parse_verse_key(key: str) -> Tuple[int, int]:
    """Inverse of :func:`verse_key`; raises ``ValueError`` on malformed keys."""
    surah, sep, ayah = key.partition(":")
    if not sep:
        raise ValueError(f"malformed verse key {key!r}")
    return int(surah), int(ayah)


# ---------------------------------------------------------------------------
# Corpus records
# ---------------------------------------------------------------------------

class Verse(_Record):
    surah_no: int
    ayah_no: int
    global_id: int
    text: str
    page: Optional[int] = None
    juz: Optional[int] = None

    @property
    def key(self) -> str:
        return verse_key(self.surah_no, self.ayah_no)


class Token(_Record):
    position: int
    surface: str
    surface_uthmani: str
    normalized_surface: str
    plain_surface: Optional[str] = None
    root: Optional[str] = None


class EnrichedVerse(Verse):
    surah_name: str = ""
    root_count: int = 0
    target_tokens: List[Token] = Field(default_factory=list)
    all_tokens: List[Token] = Field(default_factory=list)
    other_roots: List[str] = Field(default_factory=list)


class SearchResult(_Record):
    root: str
    verses: List[EnrichedVerse] = Field(default_factory=list)
    # may be NaN or missing; statistics.safe_total() falls back to the verse counts
    total_occurrences: Optional[Union[int, float]] = 0

    @property
    def is_empty(self) -> bool:
        return not self.verses


# ---------------------------------------------------------------------------
# Statistics payload
# ---------------------------------------------------------------------------

class FormCount(_Record):
    form: str
    count: int


class TimelinePoint(_Record):
    order: int
    surah_no: int
    surah: str
    count: int


class Era(_Record):
    meccan: int = 0
    medinan: int = 0


class NetworkNode(_Record):
    id: str
    group: int
    radius: float


class NetworkLink(_Record):
    source: str
    target: str
    value: int


class Network(_Record):
    nodes: List[NetworkNode] = Field(default_factory=list)
    links: List[NetworkLink] = Field(default_factory=list)


class MatrixCell(_Record):
    x: str
    y: str
    value: int


class Statistics(_Record):
    total_occurrences: Union[int, float]
    total_ayahs: int
    unique_surahs: int
    surah_distribution: Dict[int, int]
    juz_distribution: Dict[int, int]
    page_distribution: Dict[int, int]
    top_accompanying_roots: List[Tuple[str, int]]
    average_occurrences_per_ayah: str
    forms: List[FormCount]
    timeline: List[TimelinePoint]
    era: Era
    network: Network
    matrix: List[MatrixCell]

    def cell(self, x: str, y: str) -> int:
        """Matrix value for the ordered pair (*x*, *y*)."""
        for c in self.matrix:
            if c.x == x and c.y == y:
                return c.value
        raise KeyError((x, y))
