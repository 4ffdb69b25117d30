#!/usr/bin/env python3
"""
Whole-corpus root statistics, precomputed for the dashboard.

Writes a JSON snapshot (counts, roots per surah, hapax legomena, lexical
density …) and optionally a CSV <root, count, forms> sorted by frequency.
Only lexical roots (three letters or more) are counted.

Usage:
    python -m quran_roots.corpus_stats  --db data/quran_roots.sqlite  [--out global_stats.json] [--csv roots_counts.csv]
    python -m quran_roots.corpus_stats  --db data/quran_roots.sqlite  --length 4
    python -m quran_roots.corpus_stats  --db data/quran_roots.sqlite  --surah 2
    python -m quran_roots.corpus_stats  --db data/quran_roots.sqlite  --ayah 262
"""
from __future__ import annotations

import argparse
import csv
import json
import sys
from collections import Counter, defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from .arabic import is_lexical_root, root_length
from .config import Settings
from .errors import InvalidInput, QuranRootsError, UpstreamUnavailable
from .models import parse_verse_key, verse_key
from .store import CorpusStore
from .surah_metadata import DEFAULT_METADATA, SurahMetadata

TOP_SURAHS_BY_ROOTS  = 10
TOP_UNIQUE_TO_SURAH  = 5
TOP_LEXICAL_DENSITY  = 5
TOP_ROOTS            = 10
MAX_HAPAX            = 50
TOP_SURAH_ROOTS      = 10
SURAH_COUNT          = 114


def extract_roots(store: CorpusStore) -> Tuple[Counter, Dict[str, Counter], Dict[int, Counter]]:
    """
    Return (counter, forms, per_surah) where
        • counter maps root ➜ frequency,
        • forms maps root ➜ Counter (surface form ➜ occurrences), and
        • per_surah maps surah number ➜ Counter (root ➜ occurrences).
    Only tokens whose root has three letters or more are counted.
    """
    counter: Counter = Counter()
    forms: Dict[str, Counter] = {}
    per_surah: Dict[int, Counter] = defaultdict(Counter)
    for row in store.root_tokens():
        root = row["root"]
        if not is_lexical_root(root):
            continue
        try:
            surah, _ = parse_verse_key(row["ayah_id"])
        except ValueError:
            continue
        counter[root] += 1
        forms.setdefault(root, Counter())[row["token_uthmani"]] += 1
        per_surah[surah][root] += 1
    return counter, forms, dict(per_surah)


def global_statistics(store: CorpusStore) -> Dict[str, Any]:
    """Snapshot of corpus-wide figures, as served by the global statistics page."""
    counter, _, per_surah = extract_roots(store)
    total_ayahs, total_surahs = store.count_verses()

    roots_per_surah = sorted(
        ({"surah_no": s, "distinct_roots": len(c)} for s, c in per_surah.items()),
        key=lambda d: (-d["distinct_roots"], d["surah_no"]),
    )[:TOP_SURAHS_BY_ROOTS]

    # roots found in a single surah only
    surahs_of_root: Dict[str, Set[int]] = defaultdict(set)
    for s, c in per_surah.items():
        for root in c:
            surahs_of_root[root].add(s)
    unique_counts: Counter = Counter(
        next(iter(surahs)) for surahs in surahs_of_root.values() if len(surahs) == 1
    )
    unique_to_surah = [
        {"surah_no": s, "unique_roots_count": n}
        for s, n in sorted(unique_counts.items(), key=lambda t: (-t[1], t[0]))[:TOP_UNIQUE_TO_SURAH]
    ]

    length_dist: Counter = Counter(root_length(r) for r in counter)
    density = sorted(
        ({"surah_no": s, "density": len(c) / sum(c.values()), "distinct_roots": len(c)}
         for s, c in per_surah.items()),
        key=lambda d: (-d["density"], d["surah_no"]),
    )[:TOP_LEXICAL_DENSITY]

    ranked = sorted(counter.items(), key=lambda t: (-t[1], t[0]))
    return {
        "totalAyahs": total_ayahs,
        "totalSurahs": total_surahs,
        "totalRoots": len(counter),
        "totalWords": sum(counter.values()),
        "rootsPerSurah": roots_per_surah,
        "uniqueToSurah": unique_to_surah,
        "rootLength": [{"len": n, "count": length_dist[n]} for n in sorted(length_dist)],
        "hapaxRoots": [{"root": r, "count": c} for r, c in sorted(counter.items()) if c == 1][:MAX_HAPAX],
        "topRoots": [{"root": r, "count": c} for r, c in ranked[:TOP_ROOTS]],
        "lexicalDensity": density,
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }


def roots_by_length(store: CorpusStore, length: int) -> Dict[str, Any]:
    """Roots whose letter count (diacritics aside) equals *length*, most frequent first."""
    if not isinstance(length, int) or length < 1:
        raise InvalidInput("Invalid length")
    counter: Counter = Counter(row["root"] for row in store.root_tokens())
    roots = sorted(
        ({"root": r, "count": c} for r, c in counter.items() if root_length(r) == length),
        key=lambda d: (-d["count"], d["root"]),
    )
    return {
        "roots": roots,
        "summary": {
            "total_occurrences": sum(d["count"] for d in roots),
            "total_roots": len(roots),
        },
    }


def write_csv(counter: Counter, forms: Dict[str, Counter], dest: Path) -> None:
    """
    Write <root,count,forms> rows to *dest*, sorted by descending count then α‑order.
    The *forms* column lists each surface form followed by its frequency in
    parentheses, e.g.  رَحْمٰن(3);رَحِيم(2).
    """
    with dest.open("w", newline="", encoding="utf-8") as fh:
        w = csv.writer(fh)
        w.writerow(["root", "count", "forms"])
        for root, cnt in sorted(counter.items(), key=lambda t: (-t[1], t[0])):
            fc = forms.get(root, Counter())
            form_list = ";".join(
                f"{form}({n})"
                for form, n in sorted(fc.items(), key=lambda t: (-t[1], t[0]))
            )
            w.writerow([root, cnt, form_list])


# ---------------------------------------------------------------------------
# Surah profile and verse detail
# ---------------------------------------------------------------------------

def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def surah_profile(store: CorpusStore, surah_no: int,
                  metadata: SurahMetadata = DEFAULT_METADATA) -> Dict[str, Any]:
    """
    Verses of one surah with their lexical roots:
        • roots    – per-verse root counts, in verse order,
        • topRoots – the surah's ten most frequent roots, and
        • uniqueRoots – roots that occur in no other surah.
    """
    if not _positive_int(surah_no) or surah_no > SURAH_COUNT:
        raise InvalidInput("Invalid Surah Number")

    per_verse: Dict[Tuple[int, int], Counter] = defaultdict(Counter)
    surahs_of_root: Dict[str, Set[int]] = defaultdict(set)
    for row in store.root_tokens():
        root = row["root"]
        if not is_lexical_root(root):
            continue
        try:
            key = parse_verse_key(row["ayah_id"])
        except ValueError:
            continue
        surahs_of_root[root].add(key[0])
        if key[0] == surah_no:
            per_verse[key][root] += 1

    totals: Counter = Counter()
    for counts in per_verse.values():
        totals.update(counts)
    by_count = lambda t: (-t[1], t[0])

    info = metadata.get(surah_no)
    return {
        "number": surah_no,
        "name": metadata.surah_name(surah_no),
        "revelationOrder": info.revelation_order if info else None,
        "type": info.type if info else None,
        "ayahs": [v.model_dump(by_alias=True) for v in store.verses_of_surah(surah_no)],
        "roots": [
            {"ayah_id": verse_key(*key), "root": root, "count": n}
            for key in sorted(per_verse)
            for root, n in sorted(per_verse[key].items(), key=by_count)
        ],
        "stats": {
            "topRoots": [{"root": r, "frequency": n}
                         for r, n in sorted(totals.items(), key=by_count)[:TOP_SURAH_ROOTS]],
            "uniqueRoots": sorted(r for r in totals if surahs_of_root[r] == {surah_no}),
        },
    }


def verse_detail(store: CorpusStore, global_id: int,
                 metadata: SurahMetadata = DEFAULT_METADATA) -> Optional[Dict[str, Any]]:
    """One verse, by its running number, with every token; None if absent."""
    if not _positive_int(global_id):
        raise InvalidInput("Invalid ayah id")
    verse = store.verse_by_id(global_id)
    if verse is None:
        return None
    return {
        "id": verse.global_id,
        "surahNo": verse.surah_no,
        "ayahNo": verse.ayah_no,
        "surahName": metadata.surah_name(verse.surah_no),
        "text": verse.text,
        "tokens": [t.model_dump(by_alias=True) for _, t in store.fetch_tokens([verse.key])],
        "page": verse.page,
        "juz": verse.juz,
    }

# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()
    ap = argparse.ArgumentParser(description="Precompute whole-corpus root statistics.")
    ap.add_argument("--db",     default=settings.db_path, help="Path to the corpus SQLite database")
    ap.add_argument("--out",    help="Write the JSON snapshot to this file (default: stdout)")
    ap.add_argument("--csv",    help="Also write <root,count,forms> CSV here")
    what = ap.add_mutually_exclusive_group()
    what.add_argument("--length", type=int, help="List roots of this length instead")
    what.add_argument("--surah",  type=int, help="Profile of one surah instead")
    what.add_argument("--ayah",   type=int, help="One verse (running number 1..6236) with its tokens")
    args = ap.parse_args(argv)

    try:
        with CorpusStore.open(args.db, timeout=settings.db_timeout) as store:
            if args.length is not None:
                payload = roots_by_length(store, args.length)
            elif args.surah is not None:
                payload = surah_profile(store, args.surah)
            elif args.ayah is not None:
                payload = verse_detail(store, args.ayah)
                if payload is None:
                    print(f"[ERROR] Ayah {args.ayah} not found", file=sys.stderr)
                    return 1
            else:
                payload = global_statistics(store)
            if args.csv:
                counter, forms, _ = extract_roots(store)
                write_csv(counter, forms, Path(args.csv))
                print(f"[OK] Wrote {len(counter):,} distinct roots → {args.csv}", file=sys.stderr)
    except InvalidInput as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except UpstreamUnavailable as exc:
        print(f"[ERROR] The corpus store is unavailable, try again later. ({exc})", file=sys.stderr)
        return 2
    except QuranRootsError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.out:
        Path(args.out).write_text(text + "\n", encoding="utf-8")
        print(f"[OK] Stats saved to {args.out}", file=sys.stderr)
    else:
        sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
