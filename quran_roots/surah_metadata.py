# quran_roots/surah_metadata.py
#
#  ▸ Read-only surah lookup: Arabic name, revelation order and era.
#    The built-in table follows the Tanzil metadata; the same information
#    (plus juz/page boundaries) can be loaded from Tanzil's quran-data.xml.
#
# ---------------------------------------------------------------------------
from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from lxml import etree   # pip install lxml>=5.2

MECCAN  = "Meccan"
MEDINAN = "Medinan"


@dataclass(frozen=True)
class SurahInfo:
    surah_no: int
    name: str
    revelation_order: int
    type: str            # MECCAN | MEDINAN


# surahNo: (name, revelation order, era)
_SURAHS: Dict[int, Tuple[str, int, str]] = {
    1: ("الفاتحة", 5, MECCAN),
    2: ("البقرة", 87, MEDINAN),
    3: ("آل عمران", 89, MEDINAN),
    4: ("النساء", 92, MEDINAN),
    5: ("المائدة", 112, MEDINAN),
    6: ("الأنعام", 55, MECCAN),
    7: ("الأعراف", 39, MECCAN),
    8: ("الأنفال", 88, MEDINAN),
    9: ("التوبة", 113, MEDINAN),
    10: ("يونس", 51, MECCAN),
    11: ("هود", 52, MECCAN),
    12: ("يوسف", 53, MECCAN),
    13: ("الرعد", 96, MEDINAN),
    14: ("إبراهيم", 72, MECCAN),
    15: ("الحجر", 54, MECCAN),
    16: ("النحل", 70, MECCAN),
    17: ("الإسراء", 50, MECCAN),
    18: ("الكهف", 69, MECCAN),
    19: ("مريم", 44, MECCAN),
    20: ("طه", 45, MECCAN),
    21: ("الأنبياء", 73, MECCAN),
    22: ("الحج", 103, MEDINAN),
    23: ("المؤمنون", 74, MECCAN),
    24: ("النور", 102, MEDINAN),
    25: ("الفرقان", 42, MECCAN),
    26: ("الشعراء", 47, MECCAN),
    27: ("النمل", 48, MECCAN),
    28: ("القصص", 49, MECCAN),
    29: ("العنكبوت", 85, MECCAN),
    30: ("الروم", 84, MECCAN),
    31: ("لقمان", 57, MECCAN),
    32: ("السجدة", 75, MECCAN),
    33: ("الأحزاب", 90, MEDINAN),
    34: ("سبأ", 58, MECCAN),
    35: ("فاطر", 43, MECCAN),
    36: ("يس", 41, MECCAN),
    37: ("الصافات", 56, MECCAN),
    38: ("ص", 38, MECCAN),
    39: ("الزمر", 59, MECCAN),
    40: ("غافر", 60, MECCAN),
    41: ("فصلت", 61, MECCAN),
    42: ("الشورى", 62, MECCAN),
    43: ("الزخرف", 63, MECCAN),
    44: ("الدخان", 64, MECCAN),
    45: ("الجاثية", 65, MECCAN),
    46: ("الأحقاف", 66, MECCAN),
    47: ("محمد", 95, MEDINAN),
    48: ("الفتح", 111, MEDINAN),
    49: ("الحجرات", 106, MEDINAN),
    50: ("ق", 34, MECCAN),
    51: ("الذاريات", 67, MECCAN),
    52: ("الطور", 76, MECCAN),
    53: ("النجم", 23, MECCAN),
    54: ("القمر", 37, MECCAN),
    55: ("الرحمن", 97, MEDINAN),
    56: ("الواقعة", 46, MECCAN),
    57: ("الحديد", 94, MEDINAN),
    58: ("المجادلة", 105, MEDINAN),
    59: ("الحشر", 101, MEDINAN),
    60: ("الممتحنة", 91, MEDINAN),
    61: ("الصف", 109, MEDINAN),
    62: ("الجمعة", 110, MEDINAN),
    63: ("المنافقون", 104, MEDINAN),
    64: ("التغابن", 108, MEDINAN),
    65: ("الطلاق", 99, MEDINAN),
    66: ("التحريم", 107, MEDINAN),
    67: ("الملك", 77, MECCAN),
    68: ("القلم", 2, MECCAN),
    69: ("الحاقة", 78, MECCAN),
    70: ("المعارج", 79, MECCAN),
    71: ("نوح", 71, MECCAN),
    72: ("الجن", 40, MECCAN),
    73: ("المزمل", 3, MECCAN),
    74: ("المدثر", 4, MECCAN),
    75: ("القيامة", 31, MECCAN),
    76: ("الإنسان", 98, MEDINAN),
    77: ("المرسلات", 33, MECCAN),
    78: ("النبأ", 80, MECCAN),
    79: ("النازعات", 81, MECCAN),
    80: ("عبس", 24, MECCAN),
    81: ("التكوير", 7, MECCAN),
    82: ("الإنفطار", 82, MECCAN),
    83: ("المطففين", 86, MECCAN),
    84: ("الانشقاق", 83, MECCAN),
    85: ("البروج", 27, MECCAN),
    86: ("الطارق", 36, MECCAN),
    87: ("الأعلى", 8, MECCAN),
    88: ("الغاشية", 68, MECCAN),
    89: ("الفجر", 10, MECCAN),
    90: ("البلد", 35, MECCAN),
    91: ("الشمس", 26, MECCAN),
    92: ("الليل", 9, MECCAN),
    93: ("الضحى", 11, MECCAN),
    94: ("الشرح", 12, MECCAN),
    95: ("التين", 28, MECCAN),
    96: ("العلق", 1, MECCAN),
    97: ("القدر", 25, MECCAN),
    98: ("البينة", 100, MEDINAN),
    99: ("الزلزلة", 93, MEDINAN),
    100: ("العاديات", 14, MECCAN),
    101: ("القارعة", 30, MECCAN),
    102: ("التكاثر", 16, MECCAN),
    103: ("العصر", 13, MECCAN),
    104: ("الهمزة", 32, MECCAN),
    105: ("الفيل", 19, MECCAN),
    106: ("قريش", 29, MECCAN),
    107: ("الماعون", 17, MECCAN),
    108: ("الكوثر", 15, MECCAN),
    109: ("الكافرون", 18, MECCAN),
    110: ("النصر", 114, MEDINAN),
    111: ("المسد", 6, MECCAN),
    112: ("الإخلاص", 22, MECCAN),
    113: ("الفلق", 20, MECCAN),
    114: ("الناس", 21, MECCAN),
}


class SurahMetadata(Mapping[int, SurahInfo]):
    """``surahNo -> SurahInfo`` lookup; missing surahs are simply absent."""

    def __init__(self, entries: Optional[Mapping[int, SurahInfo]] = None) -> None:
        if entries is None:
            entries = {no: SurahInfo(no, name, order, era)
                       for no, (name, order, era) in _SURAHS.items()}
        self._by_no: Dict[int, SurahInfo] = dict(entries)
        self._by_order: Dict[int, SurahInfo] = {
            info.revelation_order: info for info in self._by_no.values()
        }

    def __getitem__(self, surah_no: int) -> SurahInfo:
        return self._by_no[surah_no]

    def __iter__(self) -> Iterator[int]:
        return iter(self._by_no)

    def __len__(self) -> int:
        return len(self._by_no)

    def by_revelation_order(self, order: int) -> Optional[SurahInfo]:
        return self._by_order.get(order)

    def surah_name(self, surah_no: int) -> str:
        info = self._by_no.get(surah_no)
        return info.name if info else f"سورة {surah_no}"


DEFAULT_METADATA = SurahMetadata()

# ---------------------------------------------------------------------------
# Tanzil quran-data.xml
# ---------------------------------------------------------------------------

class Boundaries:
    """Juz or page numbering from ``(index, sura, aya)`` start markers."""

    def __init__(self, starts: List[Tuple[int, int, int]]) -> None:
        self._starts = sorted(starts, key=lambda s: (s[1], s[2]))
        self._keys = [(s, a) for _, s, a in self._starts]

    def __len__(self) -> int:
        return len(self._starts)

    def number_for(self, surah_no: int, ayah_no: int) -> Optional[int]:
        """Index of the division the verse falls in (None before the first)."""
        i = bisect_right(self._keys, (surah_no, ayah_no))
        return self._starts[i - 1][0] if i else None


@dataclass
class QuranData:
    surahs: SurahMetadata
    juzs: Boundaries
    pages: Boundaries


def load_quran_data(xml_path: str | Path) -> QuranData:
    """Parse Tanzil's ``quran-data.xml`` (suras, juzs and pages sections)."""
    tree = etree.parse(str(xml_path))

    entries: Dict[int, SurahInfo] = {}
    for node in tree.xpath("/quran/suras/sura"):
        no = int(node.get("index"))
        entries[no] = SurahInfo(no, node.get("name"),
                                int(node.get("order")), node.get("type"))

    def _starts(xpath: str) -> List[Tuple[int, int, int]]:
        return [(int(n.get("index")), int(n.get("sura")), int(n.get("aya")))
                for n in tree.xpath(xpath)]

    return QuranData(
        surahs=SurahMetadata(entries),
        juzs=Boundaries(_starts("/quran/juzs/juz")),
        pages=Boundaries(_starts("/quran/pages/page")),
    )
