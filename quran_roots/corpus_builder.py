#!/usr/bin/env python3
# quran_roots/corpus_builder.py
#
#  ▸ Build the SQLite corpus store from a Quran morphology TSV file and the
#    Tanzil Uthmani XML.  Works with either:
#       • quranic‑corpus‑morphology‑0.4.txt  (old format, Buckwalter)
#       • quran‑morphology.txt by mustafa0x   (new format, Arabic)
#
#    Differences handled automatically:
#       • Location field may be wrapped in parentheses or bare.
#       • Surface forms and "ROOT:" tags may be Arabic or Buckwalter.
#       • Segments (prefix/stem/suffix) are glued back into one word token;
#         the first ROOT: tag of the word is its root.
#
#    Page and juz numbers come from Tanzil's quran-data.xml when supplied.
#
# ---------------------------------------------------------------------------
from __future__ import annotations

import argparse
import re
import sqlite3
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from lxml import etree   # pip install lxml>=5.2

from .arabic import buck2arabic, buck2arabic_text, normalize, plain_form, simple_spelling
from .models import Token, Verse, verse_key
from .store import create_schema
from .surah_metadata import QuranData, load_quran_data

# Location:  either "(2:4:1:1)\t…"   or   "2:4:1:1\t…"
_LOC_PATT = re.compile(r"^\(?([0-9]+):([0-9]+):([0-9]+)(?::([0-9]+))?\)?$")


def make_token(position: int, surface: str, root: Optional[str] = None,
               surface_uthmani: Optional[str] = None) -> Token:
    """Token with its simple, normalized and plain forms precomputed.

    *surface* may be Uthmani script, as in the morphology files; it is then
    also kept as the Uthmani surface and folded to simple spelling for the
    forms users search and autocomplete on.
    """
    uthmani = surface_uthmani or surface
    simple = simple_spelling(surface)
    return Token(
        position=position,
        surface=simple,
        surface_uthmani=uthmani,
        normalized_surface=normalize(simple),
        plain_surface=plain_form(uthmani),
        root=root or None,
    )

# ---------------------------------------------------------------------------
# Morphology TSV
# ---------------------------------------------------------------------------

@dataclass
class _Word:
    surah: int
    ayah: int
    position: int
    parts: List[str] = field(default_factory=list)
    root: Optional[str] = None


def _to_arabic(value: str, root: bool = False) -> str:
    if not value.isascii():
        return value
    return buck2arabic(value) if root else buck2arabic_text(value)


def iter_morphology(morph_path: Path) -> Iterator[Tuple[str, Token]]:
    """Yield ``(ayah_id, token)`` for every word of the morphology file."""
    current: Optional[_Word] = None

    def _flush(w: _Word) -> Tuple[str, Token]:
        return verse_key(w.surah, w.ayah), make_token(w.position, "".join(w.parts), w.root)

    with morph_path.open(encoding="utf-8") as fh:
        for line in fh:
            if not line or line[0] in "#\r\n":
                continue  # comments & blanks

            fields = line.rstrip("\n").split("\t")
            if len(fields) < 2:
                continue
            m = _LOC_PATT.match(fields[0].strip())
            if not m:
                continue  # header row or malformed location
            sura, ayah, word = (int(g) for g in m.groups()[:3])

            if current is None or (current.surah, current.ayah, current.position) != (sura, ayah, word):
                if current is not None:
                    yield _flush(current)
                current = _Word(sura, ayah, word)

            current.parts.append(_to_arabic(fields[1]))
            if current.root is None and len(fields) >= 4:
                for tag in fields[3].split("|"):
                    if tag.upper().startswith("ROOT:"):
                        current.root = _to_arabic(tag.split(":", 1)[1], root=True)
                        break

    if current is not None:
        yield _flush(current)

# ---------------------------------------------------------------------------
# Uthmani XML
# ---------------------------------------------------------------------------

def iter_verses(xml_path: Path, quran_data: Optional[QuranData] = None) -> Iterator[Verse]:
    """Yield every ``<aya>`` of the Tanzil XML in document order."""
    tree = etree.parse(str(xml_path))
    global_id = 0
    for sura in tree.xpath("/quran/sura"):
        s = int(sura.get("index"))
        for aya in sura.xpath("aya"):
            a = int(aya.get("index"))
            global_id += 1
            yield Verse(
                surah_no=s, ayah_no=a, global_id=global_id, text=aya.get("text"),
                page=quran_data.pages.number_for(s, a) if quran_data else None,
                juz=quran_data.juzs.number_for(s, a) if quran_data else None,
            )

# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

def write_corpus(conn: sqlite3.Connection, verses: Iterable[Verse],
                 tokens: Iterable[Tuple[str, Token]]) -> Tuple[int, int]:
    """Create the schema and insert *verses* and *tokens*; returns the row counts."""
    create_schema(conn)
    verse_rows = [(v.global_id, v.surah_no, v.ayah_no, v.text, v.page, v.juz) for v in verses]
    token_rows = [
        (ayah_id, t.position, t.surface, t.surface_uthmani, t.normalized_surface,
         t.plain_surface, t.root)
        for ayah_id, t in tokens
    ]
    with conn:
        conn.executemany(
            "INSERT OR REPLACE INTO ayah (global_ayah, surah_no, ayah_no, text_uthmani, page, juz) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            verse_rows,
        )
        conn.executemany(
            "INSERT OR REPLACE INTO token (ayah_id, pos, token, token_uthmani, token_norm, "
            "token_plain_norm, root) VALUES (?, ?, ?, ?, ?, ?, ?)",
            token_rows,
        )
    return len(verse_rows), len(token_rows)


def build_database(morph_path: Path, xml_path: Path, db_path: Path,
                   data_path: Optional[Path] = None) -> Tuple[int, int]:
    quran_data = load_quran_data(data_path) if data_path else None
    db_path.parent.mkdir(parents=True, exist_ok=True)
    if db_path.exists():
        db_path.unlink()
    conn = sqlite3.connect(str(db_path))
    try:
        return write_corpus(conn, iter_verses(xml_path, quran_data), iter_morphology(morph_path))
    finally:
        conn.close()

# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Build the corpus SQLite store from morphology TSV + Uthmani XML.")
    ap.add_argument("--morph", default="data/quran-morphology.txt",
                    help="Path to morphology TSV")
    ap.add_argument("--xml",   default="data/quran-uthmani.xml",
                    help="Path to Uthmani Quran XML")
    ap.add_argument("--data",  help="Path to Tanzil quran-data.xml (pages, juz)")
    ap.add_argument("--db",    default="data/quran_roots.sqlite",
                    help="Output SQLite database (replaced if present)")
    args = ap.parse_args(argv)

    print(f"[INFO] Building {args.db} …")
    n_verses, n_tokens = build_database(Path(args.morph), Path(args.xml), Path(args.db),
                                        Path(args.data) if args.data else None)
    print(f"[OK] {n_verses:,} verses, {n_tokens:,} tokens → {args.db}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
