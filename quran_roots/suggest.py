#!/usr/bin/env python3
"""
Autocomplete index: every root plus a word → root map.

Built once from the corpus store and saved as ``word_index.json``:

    {"roots": ["ابو", "ابل", ...], "words": {"الرحمن": "رحم", ...}}

Queries are answered from memory; the store is never touched again.

Usage:
    python -m quran_roots.suggest  --db data/quran_roots.sqlite  [--out data/word_index.json]
"""
from __future__ import annotations

import argparse
import bisect
import json
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .arabic import normalize
from .config import Settings
from .errors import QuranRootsError, UpstreamUnavailable
from .store import CorpusStore

MIN_PREFIX  = 2
MAX_RESULTS = 10


class SuggestionIndex:
    def __init__(self, roots: Iterable[str], words: Dict[str, str]) -> None:
        self.roots: List[str] = sorted(set(roots))
        self.words: Dict[str, str] = dict(words)
        self._word_keys: List[str] = sorted(self.words)

    # -----------------------------------------------------------------------
    # Build / persist
    # -----------------------------------------------------------------------

    @classmethod
    def build(cls, pairs: Iterable[Tuple[str, str]]) -> "SuggestionIndex":
        """Index ``(surface, root)`` pairs.

        A word spelled the same under two roots keeps the last root seen.
        """
        words: Dict[str, str] = {}
        roots = set()
        for surface, root in pairs:
            word = normalize(surface or "")
            clean_root = normalize(root or "")
            if word and clean_root:
                words[word] = clean_root
                roots.add(clean_root)
        return cls(roots, words)

    @classmethod
    def from_store(cls, store: CorpusStore) -> "SuggestionIndex":
        return cls.build(store.word_root_pairs())

    def to_dict(self) -> Dict[str, object]:
        return {"roots": self.roots, "words": self.words}

    def save(self, path: str | Path) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), ensure_ascii=False,
                                         separators=(",", ":")), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path) -> "SuggestionIndex":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(data.get("roots", []), data.get("words", {}))

    # -----------------------------------------------------------------------
    # Query
    # -----------------------------------------------------------------------

    def query(self, prefix: str) -> List[str]:
        """Up to ten roots for *prefix*: root matches first, then word matches."""
        prefix = (prefix or "").strip()
        if len(prefix) < MIN_PREFIX:
            return []

        out: List[str] = []
        for root in _starting_with(self.roots, prefix):
            if root not in out:
                out.append(root)
                if len(out) >= MAX_RESULTS:
                    return out

        word_prefix = normalize(prefix)
        if not word_prefix:
            return out
        for word in _starting_with(self._word_keys, word_prefix):
            root = self.words[word]
            if root not in out:
                out.append(root)
                if len(out) >= MAX_RESULTS:
                    break
        return out

    def __len__(self) -> int:
        return len(self.words)


def _starting_with(sorted_keys: List[str], prefix: str) -> Iterable[str]:
    i = bisect.bisect_left(sorted_keys, prefix)
    while i < len(sorted_keys) and sorted_keys[i].startswith(prefix):
        yield sorted_keys[i]
        i += 1

# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()
    ap = argparse.ArgumentParser(description="Build the autocomplete word → root index.")
    ap.add_argument("--db",  default=settings.db_path, help="Path to the corpus SQLite database")
    ap.add_argument("--out", default=settings.index_path, help="Where to write word_index.json")
    args = ap.parse_args(argv)

    try:
        with CorpusStore.open(args.db, timeout=settings.db_timeout) as store:
            index = SuggestionIndex.from_store(store)
    except UpstreamUnavailable as exc:
        print(f"[ERROR] The corpus store is unavailable, try again later. ({exc})", file=sys.stderr)
        return 2
    except QuranRootsError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    index.save(out)
    print(f"[OK] {len(index):,} words, {len(index.roots):,} roots → {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
