# quran_roots/statistics.py
#
#  ▸ Aggregate a SearchResult into the figures the dashboard charts:
#       • surah / juz / page distributions
#       • word forms of the root (top 20)
#       • revelation timeline and Meccan/Medinan split
#       • co-occurring roots as a star network and a small matrix
#
#    Two co-occurrence measures live side by side and must not be merged:
#    the network counts verses a root shares with the target, the matrix
#    intersects verse-id sets between every pair of its roots.
#
# ---------------------------------------------------------------------------
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Set, Tuple, Union

from .arabic import is_lexical_root
from .models import (Era, FormCount, MatrixCell, Network, NetworkLink, NetworkNode,
                     SearchResult, Statistics, TimelinePoint)
from .surah_metadata import DEFAULT_METADATA, MECCAN, MEDINAN, SurahMetadata

TOP_FORMS          = 20
TOP_NETWORK_ROOTS  = 15
TOP_MATRIX_ROOTS   = 6


def safe_total(result: SearchResult) -> Union[int, float]:
    """``totalOccurrences`` if it is a finite number, else Σ rootCount."""
    total = result.total_occurrences
    if isinstance(total, (int, float)) and not isinstance(total, bool) and math.isfinite(total):
        return total
    return sum(v.root_count for v in result.verses)


def format_average(total: Union[int, float], verse_count: int) -> str:
    """Two-decimal average of the float quotient, like the web client's ``toFixed(2)``.

    Halves round up on the exact binary value, so 201/200 (stored as
    1.00499…) gives "1.00".
    """
    if verse_count <= 0 or not math.isfinite(total):
        return "0.00"
    avg = Decimal(total / verse_count)
    return str(avg.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _top(counter: Dict[str, int], n: int) -> List[Tuple[str, int]]:
    # sorted() is stable: equal counts keep first-seen order
    return sorted(counter.items(), key=lambda kv: kv[1], reverse=True)[:n]


def compute(result: SearchResult,
            metadata: Optional[SurahMetadata] = None) -> Optional[Statistics]:
    """Statistics for *result*, or None when it holds no verses."""
    verses = result.verses
    if not verses:
        return None
    metadata = DEFAULT_METADATA if metadata is None else metadata

    total  = safe_total(result)
    target = result.root

    surah_dist: Dict[int, int] = {}
    juz_dist:   Dict[int, int] = {}
    page_dist:  Dict[int, int] = {}
    forms:      Dict[str, int] = {}
    timeline:   Dict[int, int] = {}
    era = {MECCAN: 0, MEDINAN: 0}
    accompanying: Dict[str, int] = {}

    for v in verses:
        surah_dist[v.surah_no] = surah_dist.get(v.surah_no, 0) + v.root_count

        meta = metadata.get(v.surah_no)
        if meta is not None:
            timeline[meta.revelation_order] = timeline.get(meta.revelation_order, 0) + v.root_count
            if meta.type in era:
                era[meta.type] += v.root_count

        for t in v.target_tokens:
            form = t.plain_surface or t.surface_uthmani or t.surface
            forms[form] = forms.get(form, 0) + 1

        for other in v.other_roots:
            clean = other.strip() if other else ""
            if is_lexical_root(clean):
                accompanying[clean] = accompanying.get(clean, 0) + 1

        # one per verse, whatever the root count
        if v.juz is not None:
            juz_dist[v.juz] = juz_dist.get(v.juz, 0) + 1
        if v.page is not None:
            page_dist[v.page] = page_dist.get(v.page, 0) + 1

    top_roots = _top(accompanying, TOP_NETWORK_ROOTS)

    return Statistics(
        total_occurrences=total,
        total_ayahs=len(verses),
        unique_surahs=len(surah_dist),
        surah_distribution=surah_dist,
        juz_distribution=juz_dist,
        page_distribution=page_dist,
        top_accompanying_roots=top_roots,
        average_occurrences_per_ayah=format_average(total, len(verses)),
        forms=[FormCount(form=f, count=c) for f, c in _top(forms, TOP_FORMS)],
        timeline=_timeline(timeline, metadata),
        era=Era(meccan=era[MECCAN], medinan=era[MEDINAN]),
        network=build_network(target, total, top_roots),
        matrix=build_matrix(result, [target] + [r for r, _ in top_roots[:TOP_MATRIX_ROOTS]]),
    )


def _timeline(counts: Dict[int, int], metadata: SurahMetadata) -> List[TimelinePoint]:
    points = []
    for order in sorted(counts):
        info = metadata.by_revelation_order(order)
        points.append(TimelinePoint(
            order=order,
            surah_no=info.surah_no if info else 0,
            surah=info.name if info else f"Surah {order}",
            count=counts[order],
        ))
    return points


def build_network(target: str, total: Union[int, float],
                  top_roots: List[Tuple[str, int]]) -> Network:
    """Star graph: the target in the middle, one link per co-occurring root."""
    nodes = [NetworkNode(id=target, group=1, radius=20 + total / 5)]
    nodes += [NetworkNode(id=root, group=2, radius=10 + count / 2) for root, count in top_roots]
    links = [NetworkLink(source=target, target=root, value=count) for root, count in top_roots]
    return Network(nodes=nodes, links=links)


def build_matrix(result: SearchResult, roots: List[str]) -> List[MatrixCell]:
    """Pairwise co-occurrence of *roots* over the verses of *result* only.

    The first root is the search target, present in every verse.
    """
    target = roots[0]
    sets: Dict[str, Set[str]] = {r: set() for r in roots}
    for v in result.verses:
        sets[target].add(v.key)
        for other in v.other_roots:
            clean = other.strip() if other else ""
            if clean in sets:
                sets[clean].add(v.key)

    cells: List[MatrixCell] = []
    for a in roots:
        for b in roots:
            value = len(sets[a]) if a == b else len(sets[a] & sets[b])
            cells.append(MatrixCell(x=a, y=b, value=value))
    return cells
