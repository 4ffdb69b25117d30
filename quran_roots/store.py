# quran_roots/store.py
#
#  ▸ Read-only access to the root-annotated corpus kept in SQLite.
#
#    Tables (see SCHEMA):
#       • ayah   – one row per verse, composite key (surah_no, ayah_no)
#       • token  – one row per word, keyed by ayah_id "surah:ayah" + pos
#       • token_detail – view adding nothing but a stable column order;
#         the enricher reads from it
#
#    Hosted SQLite flavours cap both the number of bound parameters and the
#    expression depth, so verse lookups by composite key go out in batches.
#
# ---------------------------------------------------------------------------
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import UpstreamUnavailable
from .models import Token, Verse

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50

SCHEMA = """
CREATE TABLE IF NOT EXISTS ayah (
    global_ayah  INTEGER PRIMARY KEY,
    surah_no     INTEGER NOT NULL,
    ayah_no      INTEGER NOT NULL,
    text_uthmani TEXT    NOT NULL,
    page         INTEGER,
    juz          INTEGER,
    UNIQUE (surah_no, ayah_no)
);
CREATE TABLE IF NOT EXISTS token (
    ayah_id          TEXT    NOT NULL,
    pos              INTEGER NOT NULL,
    token            TEXT    NOT NULL,
    token_uthmani    TEXT    NOT NULL,
    token_norm       TEXT    NOT NULL,
    token_plain_norm TEXT,
    root             TEXT,
    PRIMARY KEY (ayah_id, pos)
);
CREATE INDEX IF NOT EXISTS idx_token_root ON token (root);
CREATE INDEX IF NOT EXISTS idx_token_norm ON token (token_norm);
CREATE VIEW IF NOT EXISTS token_detail AS
    SELECT ayah_id, pos, token, token_uthmani, token_norm, token_plain_norm, root
    FROM token;
"""

# (ayah_id, count) as returned by count_root_by_verse
VerseCount = Tuple[str, int]


def create_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA)


def batched(items: Sequence, size: int) -> Iterator[Sequence]:
    """Yield consecutive slices of *items* holding at most *size* elements."""
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    for i in range(0, len(items), size):
        yield items[i:i + size]


class CorpusStore:
    """Thin query layer over a SQLite connection.

    Every ``sqlite3`` failure surfaces as :class:`UpstreamUnavailable`.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self.queries = 0     # statements issued, handy when tuning batch sizes

    @classmethod
    def open(cls, db_path: str | Path, timeout: float = 5.0) -> "CorpusStore":
        """Open an existing database read-only."""
        path = Path(db_path)
        if not path.is_file():
            raise UpstreamUnavailable(f"corpus database not found: {path}")
        try:
            conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True,
                                   timeout=timeout, check_same_thread=False)
        except sqlite3.Error as exc:
            raise UpstreamUnavailable(f"cannot open corpus database {path}: {exc}") from exc
        logger.info("Connected to corpus database %s", path)
        return cls(conn)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "CorpusStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -----------------------------------------------------------------------

    def execute(self, sql: str, params: Sequence = ()) -> List[sqlite3.Row]:
        self.queries += 1
        try:
            return self.conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            logger.error("Query failed: %s", exc)
            raise UpstreamUnavailable(f"corpus store query failed: {exc}") from exc

    # -----------------------------------------------------------------------
    # Verse locator
    # -----------------------------------------------------------------------

    def count_root_by_verse(self, root: str) -> List[VerseCount]:
        """``[(ayah_id, count)]`` for every verse holding a token of *root*."""
        rows = self.execute(
            "SELECT ayah_id, COUNT(*) AS root_count FROM token "
            "WHERE root = ? GROUP BY ayah_id",
            [root],
        )
        return [(r["ayah_id"], r["root_count"]) for r in rows]

    def fetch_verses(self, keys: Sequence[Tuple[int, int]],
                     batch_size: int = DEFAULT_BATCH_SIZE) -> List[Verse]:
        """Verse rows for the composite *keys*, one OR-of-AND query per batch.

        Rows come back concatenated in batch order; callers sort.
        """
        verses: List[Verse] = []
        for chunk in batched(list(keys), batch_size):
            where = " OR ".join(["(surah_no = ? AND ayah_no = ?)"] * len(chunk))
            params = [n for key in chunk for n in key]
            rows = self.execute(
                "SELECT global_ayah, surah_no, ayah_no, text_uthmani, page, juz "
                f"FROM ayah WHERE {where} ORDER BY surah_no, ayah_no",
                params,
            )
            verses.extend(_row_to_verse(r) for r in rows)
        return verses

    # -----------------------------------------------------------------------
    # Token enricher
    # -----------------------------------------------------------------------

    def fetch_tokens(self, ayah_ids: Sequence[str]) -> List[Tuple[str, Token]]:
        """All tokens of the given verses in a single ``IN`` query."""
        if not ayah_ids:
            return []
        placeholders = ",".join("?" * len(ayah_ids))
        rows = self.execute(
            "SELECT ayah_id, pos, token, token_uthmani, token_norm, token_plain_norm, root "
            f"FROM token_detail WHERE ayah_id IN ({placeholders}) ORDER BY ayah_id, pos",
            ayah_ids,
        )
        return [(r["ayah_id"], _row_to_token(r)) for r in rows]

    # -----------------------------------------------------------------------
    # Root resolver
    # -----------------------------------------------------------------------

    def find_root_for_word(self, normalized: str) -> Optional[str]:
        """Root of the first token whose normalized surface is or starts with *normalized*.

        Exact matches win over prefix matches; ties go to canonical order
        (surah, ayah, position).
        """
        if not normalized:
            return None
        rows = self.execute(
            """
            SELECT root FROM token
            WHERE root IS NOT NULL AND root != ''
              AND substr(token_norm, 1, length(?)) = ?
            ORDER BY token_norm != ?,
                     CAST(substr(ayah_id, 1, instr(ayah_id, ':') - 1) AS INTEGER),
                     CAST(substr(ayah_id, instr(ayah_id, ':') + 1) AS INTEGER),
                     pos
            LIMIT 1
            """,
            [normalized, normalized, normalized],
        )
        return rows[0]["root"] if rows else None

    # -----------------------------------------------------------------------
    # Surah profile and verse detail
    # -----------------------------------------------------------------------

    def verses_of_surah(self, surah_no: int) -> List[Verse]:
        rows = self.execute(
            "SELECT global_ayah, surah_no, ayah_no, text_uthmani, page, juz "
            "FROM ayah WHERE surah_no = ? ORDER BY ayah_no",
            [surah_no],
        )
        return [_row_to_verse(r) for r in rows]

    def verse_by_id(self, global_id: int) -> Optional[Verse]:
        rows = self.execute(
            "SELECT global_ayah, surah_no, ayah_no, text_uthmani, page, juz "
            "FROM ayah WHERE global_ayah = ?",
            [global_id],
        )
        return _row_to_verse(rows[0]) if rows else None

    # -----------------------------------------------------------------------
    # Offline jobs: suggestion index, corpus statistics
    # -----------------------------------------------------------------------

    def word_root_pairs(self) -> List[Tuple[str, str]]:
        """Distinct ``(token, root)`` pairs, in canonical corpus order."""
        rows = self.execute(
            """
            SELECT token, root FROM token
            WHERE root IS NOT NULL AND length(root) > 0
            ORDER BY CAST(substr(ayah_id, 1, instr(ayah_id, ':') - 1) AS INTEGER),
                     CAST(substr(ayah_id, instr(ayah_id, ':') + 1) AS INTEGER),
                     pos
            """
        )
        seen = set()
        pairs: List[Tuple[str, str]] = []
        for r in rows:
            pair = (r["token"], r["root"])
            if pair not in seen:
                seen.add(pair)
                pairs.append(pair)
        return pairs

    def root_tokens(self) -> Iterable[sqlite3.Row]:
        """Every annotated token as ``(ayah_id, token_uthmani, root)`` rows."""
        return self.execute(
            "SELECT ayah_id, token_uthmani, root FROM token "
            "WHERE root IS NOT NULL AND root != ''"
        )

    def count_verses(self) -> Tuple[int, int]:
        """``(verses, distinct surahs)`` in the ayah table."""
        row = self.execute(
            "SELECT COUNT(*) AS ayahs, COUNT(DISTINCT surah_no) AS surahs FROM ayah"
        )[0]
        return row["ayahs"], row["surahs"]


def _row_to_verse(r: sqlite3.Row) -> Verse:
    return Verse(surah_no=r["surah_no"], ayah_no=r["ayah_no"], global_id=r["global_ayah"],
                 text=r["text_uthmani"], page=r["page"], juz=r["juz"])


def _row_to_token(r: sqlite3.Row) -> Token:
    return Token(
        position=r["pos"],
        surface=r["token"],
        surface_uthmani=r["token_uthmani"],
        normalized_surface=r["token_norm"],
        plain_surface=r["token_plain_norm"],
        root=r["root"] or None,
    )
