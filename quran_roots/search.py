#!/usr/bin/env python3
# quran_roots/search.py
#
#  ▸ Find every verse that contains a given root and attach its tokens.
#
#       locate()   root → verses, counted and sorted in Quranic order
#       enrich()   verses → target tokens, all tokens, co-occurring roots
#       resolve()  user input → SearchResult; the input is tried as a root
#                  first, then as a word whose root is looked up
#
# ---------------------------------------------------------------------------
from __future__ import annotations

import argparse
import json
import logging
import sys
import warnings
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import statistics
from .arabic import buck2arabic, is_lexical_root, looks_like_buckwalter, normalize
from .cache import Cache, TTLCache
from .config import Settings, configure_logging
from .errors import DataInconsistency, InvalidInput, QuranRootsError, UpstreamUnavailable
from .models import EnrichedVerse, SearchResult, Token, Verse, parse_verse_key
from .store import DEFAULT_BATCH_SIZE, CorpusStore
from .suggest import SuggestionIndex
from .surah_metadata import DEFAULT_METADATA, SurahMetadata

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "لا توجد نتائج لهذا الجذر"


def _inconsistent(message: str) -> None:
    logger.warning(message)
    warnings.warn(message, DataInconsistency, stacklevel=3)

# ---------------------------------------------------------------------------
# Verse locator
# ---------------------------------------------------------------------------

def _count_by_verse(store: CorpusStore, root: str) -> Dict[Tuple[int, int], int]:
    counts: Dict[Tuple[int, int], int] = {}
    for ayah_id, count in store.count_root_by_verse(root):
        try:
            key = parse_verse_key(ayah_id)
        except ValueError:
            _inconsistent(f"token row has malformed ayah_id {ayah_id!r}; skipped")
            continue
        counts[key] = counts.get(key, 0) + count
    return counts


def find_verses(store: CorpusStore, root: str,
                batch_size: int = DEFAULT_BATCH_SIZE) -> List[Tuple[Verse, int]]:
    """``[(verse, root_count)]`` for *root*, ascending by (surah, ayah)."""
    counts = _count_by_verse(store, root)
    if not counts:
        return []

    fetched = store.fetch_verses(sorted(counts), batch_size)

    by_key: Dict[Tuple[int, int], Verse] = {}
    for v in fetched:
        by_key.setdefault((v.surah_no, v.ayah_no), v)

    for surah, ayah in sorted(set(counts) - set(by_key)):
        _inconsistent(f"root {root!r} has tokens in {surah}:{ayah}, "
                      "which the ayah table does not contain; skipped")

    return [(by_key[k], counts[k]) for k in sorted(by_key)]


def locate(store: CorpusStore, root: str, *,
           batch_size: int = DEFAULT_BATCH_SIZE,
           metadata: SurahMetadata = DEFAULT_METADATA) -> SearchResult:
    """Every verse containing *root*, enriched with its tokens."""
    located = find_verses(store, root, batch_size)
    verses = enrich(store, located, root, metadata=metadata)
    logger.debug("root %s: %d verses", root, len(verses))
    return SearchResult(
        root=root,
        verses=verses,
        total_occurrences=sum(v.root_count for v in verses),
    )

# ---------------------------------------------------------------------------
# Token enricher
# ---------------------------------------------------------------------------

def enrich(store: CorpusStore, located: Sequence[Tuple[Verse, int]], target_root: str,
           *, metadata: SurahMetadata = DEFAULT_METADATA) -> List[EnrichedVerse]:
    """Attach target tokens, all tokens and co-occurring roots to each verse.

    All tokens are fetched with one ``IN`` query; verse order is preserved.
    """
    if not located:
        return []

    tokens_by_verse: Dict[str, List[Token]] = defaultdict(list)
    for ayah_id, token in store.fetch_tokens([v.key for v, _ in located]):
        tokens_by_verse[ayah_id].append(token)

    enriched: List[EnrichedVerse] = []
    for verse, count in located:
        tokens = sorted(tokens_by_verse.get(verse.key, []), key=lambda t: t.position)
        other_roots: List[str] = []
        for t in tokens:
            if (t.root and t.root != target_root and is_lexical_root(t.root)
                    and t.root not in other_roots):
                other_roots.append(t.root)
        enriched.append(EnrichedVerse(
            **verse.model_dump(),
            surah_name=metadata.surah_name(verse.surah_no),
            root_count=count,
            target_tokens=[t for t in tokens if t.root == target_root],
            all_tokens=tokens,
            other_roots=other_roots,
        ))
    return enriched

# ---------------------------------------------------------------------------
# Root resolver
# ---------------------------------------------------------------------------

def resolve(store: CorpusStore, raw_input: Any, *,
            batch_size: int = DEFAULT_BATCH_SIZE,
            metadata: SurahMetadata = DEFAULT_METADATA) -> SearchResult:
    """Search by root, falling back to the root of a matching word.

    Raises :class:`InvalidInput` for blank input; an unknown root or word
    yields an empty result.
    """
    if not isinstance(raw_input, str) or not raw_input.strip():
        raise InvalidInput()
    query = raw_input.strip()

    root = buck2arabic(query) if looks_like_buckwalter(query) else query
    result = locate(store, root, batch_size=batch_size, metadata=metadata)
    if not result.is_empty:
        return result

    logger.info("No root matches for %r, trying word → root inference", query)
    found = store.find_root_for_word(normalize(query))
    if found:
        logger.info("Inferred root %r from word %r", found, query)
        result = locate(store, found, batch_size=batch_size, metadata=metadata)
        if not result.is_empty:
            return result

    return SearchResult(root=query, verses=[], total_occurrences=0)

# ---------------------------------------------------------------------------
# Service façade (what the HTTP layer calls)
# ---------------------------------------------------------------------------

def _cache_key(query: Any) -> str:
    return query.strip() if isinstance(query, str) else repr(query)


class RootSearchService:
    """Search, statistics and suggestions behind an optional result cache."""

    def __init__(self, store: CorpusStore, *,
                 index: Optional[SuggestionIndex] = None,
                 cache: Optional[Cache] = None,
                 cache_ttl: float = 3600,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 metadata: SurahMetadata = DEFAULT_METADATA) -> None:
        self.store = store
        self.index = index
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.batch_size = batch_size
        self.metadata = metadata

    @classmethod
    def from_settings(cls, settings: Settings) -> "RootSearchService":
        store = CorpusStore.open(settings.db_path, timeout=settings.db_timeout)
        index = None
        if Path(settings.index_path).is_file():
            index = SuggestionIndex.load(settings.index_path)
        return cls(store, index=index, cache=TTLCache(), cache_ttl=settings.cache_ttl,
                   batch_size=settings.batch_size)

    def _cached(self, key: str, compute):
        if self.cache is not None:
            hit = self.cache.get(key)
            if hit is not None:
                return hit
        value = compute()
        if self.cache is not None:
            self.cache.set(key, value, self.cache_ttl)
        return value

    def search(self, root: str) -> SearchResult:
        return self._cached(f"search:{_cache_key(root)}",
                            lambda: resolve(self.store, root, batch_size=self.batch_size,
                                            metadata=self.metadata))

    def statistics(self, root: str) -> Dict[str, Any]:
        """``{root, statistics}`` payload; statistics is None when nothing matched."""
        stats = self._cached(f"stats:{_cache_key(root)}",
                             lambda: statistics.compute(self.search(root), self.metadata))
        if stats is None:
            return {"root": root, "statistics": None, "message": NO_RESULTS_MESSAGE}
        return {"root": root, "statistics": stats}

    def suggest(self, prefix: str) -> List[str]:
        if self.index is None:
            self.index = SuggestionIndex.from_store(self.store)
        return self.index.query(prefix)

    def close(self) -> None:
        self.store.close()

# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _dump(payload: Any, out: Optional[str]) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if out:
        Path(out).write_text(text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()
    ap = argparse.ArgumentParser(description="Search the Quran by root (Arabic or Buckwalter) or by word.")
    ap.add_argument("--db", default=settings.db_path, help="Path to the corpus SQLite database")
    ap.add_argument("--index", default=settings.index_path, help="Path to word_index.json")
    ap.add_argument("--batch-size", type=int, default=settings.batch_size,
                    help="Verse keys per lookup query")
    ap.add_argument("--out", help="Write results to JSON file")
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("search", help="Verses containing a root").add_argument("query")
    sub.add_parser("stats", help="Statistics for a root").add_argument("query")
    sub.add_parser("suggest", help="Autocomplete a root or word").add_argument("prefix")
    args = ap.parse_args(argv)

    configure_logging(settings.log_level)

    service: Optional[RootSearchService] = None
    try:
        service = RootSearchService.from_settings(
            Settings(db_path=args.db, index_path=args.index, batch_size=args.batch_size,
                     cache_ttl=settings.cache_ttl, db_timeout=settings.db_timeout,
                     log_level=settings.log_level))
        if args.command == "suggest":
            _dump(service.suggest(args.prefix), args.out)
            return 0
        if args.command == "search":
            result = service.search(args.query)
            if result.is_empty:
                print(f"[INFO] No matches for {args.query}", file=sys.stderr)
            _dump(result.model_dump(by_alias=True), args.out)
            return 0
        payload = service.statistics(args.query)
        if payload["statistics"] is not None:
            payload["statistics"] = payload["statistics"].model_dump(by_alias=True)
        _dump(payload, args.out)
        return 0
    except InvalidInput as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except UpstreamUnavailable as exc:
        logger.error("%s", exc)
        print("[ERROR] The corpus store is unavailable, try again later.", file=sys.stderr)
        return 2
    except QuranRootsError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    finally:
        if service is not None:
            service.close()


if __name__ == "__main__":
    sys.exit(main())
