import random
import sqlite3

import pytest

from quran_roots.corpus_builder import make_token, write_corpus
from quran_roots.models import Verse
from quran_roots.store import CorpusStore

# (surah, ayah, page, juz, uthmani text, [(simple surface, uthmani surface, root)])
FIXTURE = [
    (1, 1, 1, 1, "بِسْمِ ٱللَّهِ ٱلرَّحْمَٰنِ ٱلرَّحِيمِ", [
        ("بِسْمِ", "بِسْمِ", "سمو"),
        ("اللَّهِ", "ٱللَّهِ", "اله"),
        ("الرَّحْمَنِ", "ٱلرَّحْمَٰنِ", "رحم"),
        ("الرَّحِيمِ", "ٱلرَّحِيمِ", "رحم"),
    ]),
    (1, 3, 1, 1, "ٱلرَّحْمَٰنِ ٱلرَّحِيمِ", [
        ("الرَّحْمَنِ", "ٱلرَّحْمَٰنِ", "رحم"),
        ("الرَّحِيمِ", "ٱلرَّحِيمِ", "رحم"),
    ]),
    (2, 7, 3, 1, "خَتَمَ ٱللَّهُ عَلَىٰ قُلُوبِهِمْ", [
        ("خَتَمَ", "خَتَمَ", "ختم"),
        ("اللَّهُ", "ٱللَّهُ", "اله"),
        ("عَلَى", "عَلَىٰ", None),
        ("قُلُوبِهِمْ", "قُلُوبِهِمْ", "قلب"),
    ]),
    (2, 163, 24, 2, "وَإِلَٰهُكُمْ إِلَٰهٌ وَٰحِدٌ لَّآ إِلَٰهَ إِلَّا هُوَ ٱلرَّحْمَٰنُ ٱلرَّحِيمُ", [
        ("وَإِلَهُكُمْ", "وَإِلَٰهُكُمْ", "اله"),
        ("إِلَهٌ", "إِلَٰهٌ", "اله"),
        ("وَاحِدٌ", "وَٰحِدٌ", "وحد"),
        ("لَا", "لَّآ", None),
        ("إِلَهَ", "إِلَٰهَ", "اله"),
        ("إِلَّا", "إِلَّا", None),
        ("هُوَ", "هُوَ", "هو"),
        ("الرَّحْمَنُ", "ٱلرَّحْمَٰنُ", "رحم"),
        ("الرَّحِيمُ", "ٱلرَّحِيمُ", "رحم"),
    ]),
    (19, 45, 309, 16, "أَن يَمَسَّكَ عَذَابٌ مِّنَ ٱلرَّحْمَٰنِ", [
        ("أَن", "أَن", None),
        ("يَمَسَّكَ", "يَمَسَّكَ", "مسس"),
        ("عَذَابٌ", "عَذَابٌ", "عذب"),
        ("مِنَ", "مِّنَ", None),
        ("الرَّحْمَنِ", "ٱلرَّحْمَٰنِ", "رحم"),
    ]),
    (112, 1, 604, 30, "قُلْ هُوَ ٱللَّهُ أَحَدٌ", [
        ("قُلْ", "قُلْ", "قول"),
        ("هُوَ", "هُوَ", "هو"),
        ("اللَّهُ", "ٱللَّهُ", "اله"),
        ("أَحَدٌ", "أَحَدٌ", "احد"),
    ]),
]


def fixture_rows():
    verses, tokens = [], []
    for gid, (s, a, page, juz, text, words) in enumerate(FIXTURE, start=1):
        verses.append(Verse(surah_no=s, ayah_no=a, global_id=gid, text=text, page=page, juz=juz))
        for pos, (simple, uthmani, root) in enumerate(words, start=1):
            tokens.append((f"{s}:{a}", make_token(pos, simple, root, surface_uthmani=uthmani)))
    return verses, tokens


@pytest.fixture
def store():
    conn = sqlite3.connect(":memory:")
    write_corpus(conn, *fixture_rows())
    s = CorpusStore(conn)
    yield s
    s.close()


@pytest.fixture
def db_file(tmp_path):
    path = tmp_path / "quran_roots.sqlite"
    conn = sqlite3.connect(str(path))
    write_corpus(conn, *fixture_rows())
    conn.close()
    return path


def synthetic_store(n_verses, root="كتب", shuffle_seed=7):
    """Store where *root* appears once in each of *n_verses* verses.

    Rows are inserted out of canonical order so that sorting is exercised.
    """
    keys = [(1 + i // 40, 1 + i % 40) for i in range(n_verses)]
    rng = random.Random(shuffle_seed)
    rng.shuffle(keys)
    verses, tokens = [], []
    for gid, (s, a) in enumerate(keys, start=1):
        verses.append(Verse(surah_no=s, ayah_no=a, global_id=gid, text=f"آية {s}:{a}",
                            page=s, juz=1))
        tokens.append((f"{s}:{a}", make_token(1, "كَتَبَ", root)))
        tokens.append((f"{s}:{a}", make_token(2, "عِلْمٌ", "علم")))
    conn = sqlite3.connect(":memory:")
    write_corpus(conn, verses, tokens)
    return CorpusStore(conn)


@pytest.fixture
def make_synthetic_store():
    stores = []

    def _make(n_verses, **kwargs):
        s = synthetic_store(n_verses, **kwargs)
        stores.append(s)
        return s

    yield _make
    for s in stores:
        s.close()
