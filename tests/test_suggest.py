import json

import pytest

from quran_roots.suggest import MAX_RESULTS, SuggestionIndex, main


@pytest.fixture
def index(store):
    return SuggestionIndex.from_store(store)


class TestQuery:
    @pytest.mark.parametrize("prefix", ["", " ", "ا", " ا ", None])
    def test_short_prefix(self, index, prefix):
        assert index.query(prefix) == []

    def test_root_prefix(self, index):
        assert index.query("رح") == ["رحم"]

    def test_roots_before_words(self, index):
        # "اله" matches as a root, "رحم" only through "الرحمن" / "الرحيم"
        assert index.query("ال") == ["اله", "رحم"]

    def test_diacritics_in_prefix(self, index):
        assert index.query("الرَّ") == ["رحم"]

    def test_no_duplicates(self, index):
        out = index.query("ال")
        assert len(out) == len(set(out))

    def test_unknown(self, index):
        assert index.query("zz") == []

    def test_capped(self):
        roots = [f"كت{chr(0x0627 + i)}" for i in range(MAX_RESULTS + 5)]
        index = SuggestionIndex(roots, {})
        assert index.query("كت") == sorted(roots)[:MAX_RESULTS]


class TestBuild:
    def test_normalizes_words_and_roots(self):
        index = SuggestionIndex.build([("الرَّحْمَنِ", "رحم"), ("كِتَابٌ", "كتب")])
        assert index.words == {"الرحمن": "رحم", "كتاب": "كتب"}
        assert index.roots == ["رحم", "كتب"]

    def test_last_root_wins(self):
        index = SuggestionIndex.build([("عين", "عين"), ("عين", "عون")])
        assert index.words["عين"] == "عون"

    def test_skips_missing_roots(self):
        index = SuggestionIndex.build([("على", None), ("", "كتب")])
        assert len(index) == 0
        assert index.roots == []

    def test_from_store_skips_unannotated_tokens(self, index):
        assert "على" not in index.words
        assert index.words["الله"] == "اله"


class TestPersistence:
    def test_save_and_load(self, index, tmp_path):
        path = tmp_path / "word_index.json"
        index.save(path)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert set(data) == {"roots", "words"}
        assert data["roots"] == sorted(data["roots"])
        loaded = SuggestionIndex.load(path)
        assert loaded.query("ال") == index.query("ال")

    def test_cli(self, db_file, tmp_path, capsys):
        out = tmp_path / "data" / "word_index.json"
        assert main(["--db", str(db_file), "--out", str(out)]) == 0
        assert "[OK]" in capsys.readouterr().out
        assert SuggestionIndex.load(out).query("رح") == ["رحم"]

    def test_cli_missing_database(self, tmp_path, capsys):
        out = tmp_path / "word_index.json"
        assert main(["--db", str(tmp_path / "nope.sqlite"), "--out", str(out)]) == 2
        assert "unavailable" in capsys.readouterr().err
        assert not out.exists()
