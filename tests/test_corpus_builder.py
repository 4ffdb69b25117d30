import sqlite3

import pytest

from quran_roots.corpus_builder import build_database, iter_morphology, iter_verses, main
from quran_roots.search import locate, resolve
from quran_roots.suggest import SuggestionIndex
from quran_roots.store import CorpusStore
from quran_roots.surah_metadata import load_quran_data

NEW_FORMAT = """\
# quran-morphology.txt (Arabic)
1:1:1:1\tبِ\tP\tP|PREF|LEM:ب
1:1:1:2\tسْمِ\tN\tROOT:سمو|LEM:اسْم|M|GEN
1:1:2:1\tٱللَّهِ\tN\tPN|ROOT:اله|LEM:اللَّه|GEN
1:1:3:1\tٱل\tP\tDET|PREF|LEM:ال
1:1:3:2\tرَّحْمَٰنِ\tADJ\tROOT:رحم|LEM:رَحْمٰن|MS|GEN
1:2:1:1\tٱل\tP\tDET|PREF|LEM:ال
1:2:1:2\tْحَمْدُ\tN\tROOT:حمد|LEM:حَمْد|M|NOM
2:1:1:1\tالٓمٓ\tINL\tINL
"""

OLD_FORMAT = """\
# PLEASE DO NOT REMOVE OR CHANGE THIS COPYRIGHT BLOCK
LOCATION\tFORM\tTAG\tFEATURES
(1:1:1:1)\tbi\tP\tPREFIX|bi+
(1:1:1:2)\tsomi\tN\tSTEM|POS:N|LEM:{som|ROOT:smw|M|GEN
(1:1:3:1)\tAl\tDET\tPREFIX|Al+
(1:1:3:2)\tr~aHoma`ni\tADJ\tSTEM|POS:ADJ|LEM:r~aHoma`n|ROOT:rHm|MS|GEN
"""

UTHMANI_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<quran>
  <sura index="1" name="الفاتحة">
    <aya index="1" text="بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ"/>
    <aya index="2" text="ٱلْحَمْدُ لِلَّهِ رَبِّ ٱلْعَٰلَمِينَ"/>
  </sura>
  <sura index="2" name="البقرة">
    <aya index="1" text="الٓمٓ"/>
  </sura>
</quran>
"""

QURAN_DATA_XML = """\
<?xml version="1.0" encoding="utf-8"?>
<quran>
  <suras alias="chapters">
    <sura index="1" ayas="7" start="0" name="الفاتحة" tname="Al-Faatiha" type="Meccan" order="5"/>
    <sura index="2" ayas="286" start="7" name="البقرة" tname="Al-Baqara" type="Medinan" order="87"/>
  </suras>
  <juzs alias="parts">
    <juz index="1" sura="1" aya="1"/>
    <juz index="2" sura="2" aya="142"/>
  </juzs>
  <pages>
    <page index="1" sura="1" aya="1"/>
    <page index="2" sura="2" aya="1"/>
  </pages>
</quran>
"""


@pytest.fixture
def sources(tmp_path):
    morph = tmp_path / "quran-morphology.txt"
    morph.write_text(NEW_FORMAT, encoding="utf-8")
    xml = tmp_path / "quran-uthmani.xml"
    xml.write_text(UTHMANI_XML, encoding="utf-8")
    data = tmp_path / "quran-data.xml"
    data.write_text(QURAN_DATA_XML, encoding="utf-8")
    return morph, xml, data


class TestMorphology:
    def test_segments_joined_into_words(self, sources):
        morph, _, _ = sources
        words = list(iter_morphology(morph))
        assert [(a, t.position) for a, t in words] == [
            ("1:1", 1), ("1:1", 2), ("1:1", 3), ("1:2", 1), ("2:1", 1),
        ]
        assert words[0][1].surface == "بِسْمِ"
        assert words[2][1].surface.startswith("الر")
        assert words[2][1].surface_uthmani.startswith("ٱلر")

    def test_root_and_forms(self, sources):
        morph, _, _ = sources
        words = [t for _, t in iter_morphology(morph)]
        assert [t.root for t in words] == ["سمو", "اله", "رحم", "حمد", None]
        assert words[2].normalized_surface == "الرحمن"
        assert words[2].plain_surface == "ٱلرحمٰن"

    def test_buckwalter_format(self, tmp_path):
        morph = tmp_path / "quranic-corpus-morphology-0.4.txt"
        morph.write_text(OLD_FORMAT, encoding="utf-8")
        words = [t for _, t in iter_morphology(morph)]
        assert [t.root for t in words] == ["سمو", "رحم"]
        assert words[0].normalized_surface == "بسم"
        assert words[1].normalized_surface == "الرحمن"


class TestVerses:
    def test_global_ids_follow_document_order(self, sources):
        _, xml, _ = sources
        verses = list(iter_verses(xml))
        assert [(v.surah_no, v.ayah_no, v.global_id) for v in verses] == [
            (1, 1, 1), (1, 2, 2), (2, 1, 3),
        ]
        assert verses[0].page is None

    def test_pages_and_juz(self, sources):
        _, xml, data = sources
        verses = list(iter_verses(xml, load_quran_data(data)))
        assert [(v.page, v.juz) for v in verses] == [(1, 1), (1, 1), (2, 1)]


class TestBuildDatabase:
    def test_round_trip_through_search(self, sources, tmp_path):
        morph, xml, data = sources
        db = tmp_path / "out" / "quran_roots.sqlite"
        assert build_database(morph, xml, db, data) == (3, 5)
        with CorpusStore.open(db) as store:
            result = locate(store, "رحم")
        assert [v.key for v in result.verses] == ["1:1"]
        assert result.verses[0].other_roots == ["سمو", "اله"]
        assert result.verses[0].page == 1

    def test_replaces_existing_database(self, sources, tmp_path):
        morph, xml, _ = sources
        db = tmp_path / "quran_roots.sqlite"
        build_database(morph, xml, db)
        build_database(morph, xml, db)
        conn = sqlite3.connect(str(db))
        try:
            assert conn.execute("SELECT COUNT(*) FROM token").fetchone()[0] == 5
        finally:
            conn.close()

    def test_cli(self, sources, tmp_path, capsys):
        morph, xml, data = sources
        db = tmp_path / "cli.sqlite"
        assert main(["--morph", str(morph), "--xml", str(xml), "--data", str(data),
                     "--db", str(db)]) == 0
        assert "[OK] 3 verses, 5 tokens" in capsys.readouterr().out


class TestBuiltCorpusSearch:
    """Words typed with a plain keyboard find roots in a built corpus."""

    @pytest.fixture
    def built(self, sources, tmp_path):
        morph, xml, data = sources
        db = tmp_path / "quran_roots.sqlite"
        build_database(morph, xml, db, data)
        with CorpusStore.open(db) as store:
            yield store

    def test_token_norm_uses_plain_alef(self, built):
        rows = built.execute("SELECT token_norm FROM token ORDER BY ayah_id, pos")
        assert [r["token_norm"] for r in rows] == ["بسم", "الله", "الرحمن", "الحمد", "الم"]

    def test_uthmani_spelling_kept(self, built):
        token = next(t for _, t in built.fetch_tokens(["1:1"]) if t.position == 3)
        assert token.surface_uthmani.startswith("ٱل")
        assert token.plain_surface == "ٱلرحمٰن"

    def test_word_resolves_like_its_root(self, built):
        by_word = resolve(built, "الرحمن")
        assert by_word.root == "رحم"
        assert by_word == resolve(built, "رحم")
        assert resolve(built, "الحمد").root == "حمد"

    def test_word_suggestions(self, built):
        index = SuggestionIndex.from_store(built)
        assert index.query("الرح") == ["رحم"]
        assert index.query("ال") == ["اله", "حمد", "رحم"]
