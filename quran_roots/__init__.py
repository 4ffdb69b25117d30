"""Root search and corpus analytics over the root-annotated Quran text."""
from __future__ import annotations

from .arabic import normalize
from .errors import DataInconsistency, InvalidInput, QuranRootsError, UpstreamUnavailable
from .models import EnrichedVerse, SearchResult, Statistics, Token, Verse
from .search import RootSearchService, enrich, locate, resolve
from .statistics import compute
from .store import CorpusStore
from .suggest import SuggestionIndex
from .surah_metadata import SurahMetadata

__version__ = "0.1.0"

__all__ = [
    "CorpusStore", "DataInconsistency", "EnrichedVerse", "InvalidInput",
    "QuranRootsError", "RootSearchService", "SearchResult", "Statistics",
    "SuggestionIndex", "SurahMetadata", "Token", "UpstreamUnavailable", "Verse",
    "compute", "enrich", "locate", "normalize", "resolve",
]
