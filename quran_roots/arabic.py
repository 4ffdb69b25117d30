# quran_roots/arabic.py
#
#  ▸ Arabic text helpers shared by the search engine, the suggestion index
#    and the corpus builder:
#       • diacritic stripping / normalization for comparisons
#       • the "plain" surface form used to bucket word forms
#       • Buckwalter transliteration ⇄ Arabic for roots typed in ASCII
#
# ---------------------------------------------------------------------------
from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Diacritics
# ---------------------------------------------------------------------------

# Tanwin, harakat, shadda, sukun … (U+064B–U+065F) and the superscript alef.
_TASHKEEL_RX = re.compile(r"[\u064B-\u065F\u0670]")

# Same marks plus tatweel – what the word index and the resolver compare on.
_NORMALIZE_RX = re.compile(r"[\u064B-\u065F\u0670\u0640]")

# Harakat and Quranic annotation signs; keeps the superscript alef and every
# letter so that orthographic variants stay apart.
_PLAIN_RX = re.compile(r"[\u064B-\u065F\u0640\u06D6-\u06ED]")

# Small high/low Quranic signs (U+06D6–U+06ED) have no place in simple spelling.
_UTHMANI_SIGNS_RX = re.compile(r"[\u06D6-\u06ED]")

ALEF_WASLA = "\u0671"
ALEF       = "\u0627"

MIN_ROOT_LENGTH = 3


def normalize(text: str) -> str:
    """Strip tashkeel, the superscript alef and tatweel from *text*."""
    return _NORMALIZE_RX.sub("", text)


def strip_diacritics(text: str) -> str:
    """Strip tashkeel and the superscript alef (tatweel is kept)."""
    return _TASHKEEL_RX.sub("", text)


def plain_form(text: str) -> str:
    """Vowel-less surface form that still preserves the Uthmani orthography."""
    return _PLAIN_RX.sub("", text)


def simple_spelling(text: str) -> str:
    """Fold Uthmani script towards the simple (imlaei) spelling users type.

    Alef wasla becomes a plain alef and Quranic annotation signs go; the
    superscript alef is left for :func:`normalize` to drop.
    """
    return _UTHMANI_SIGNS_RX.sub("", text.replace(ALEF_WASLA, ALEF))


def root_length(root: str | None) -> int:
    """Number of letters in *root* once trimmed and stripped of diacritics."""
    if not root:
        return 0
    return len(strip_diacritics(root.strip()))


def is_lexical_root(root: str | None) -> bool:
    """Roots shorter than three letters are particles/pronoun stems."""
    return root_length(root) >= MIN_ROOT_LENGTH

# ---------------------------------------------------------------------------
# Buckwalter transliteration ⇄ Arabic
# ---------------------------------------------------------------------------

# One‑to‑one Buckwalter → Arabic map for root letters (28 consonants, the
# hamza forms found in corpus ROOT: tags, and ta‑marbuta).
_BUCK2AR_MAP: dict[str, str] = {
    "'": "ء", '>': 'أ', '<': 'إ', '&': 'ؤ', '}': 'ئ', '|': 'آ',
    'A': 'ا', 'b': 'ب', 't': 'ت', 'v': 'ث', 'j': 'ج', 'H': 'ح', 'x': 'خ',
    'd': 'د', '*': 'ذ', 'r': 'ر', 'z': 'ز', 's': 'س', '$': 'ش', 'S': 'ص',
    'D': 'ض', 'T': 'ط', 'Z': 'ظ', 'E': 'ع', 'g': 'غ', 'f': 'ف', 'q': 'ق',
    'k': 'ك', 'l': 'ل', 'm': 'م', 'n': 'ن', 'h': 'ه', 'w': 'و', 'y': 'ي',
    'Y': 'ى', 'p': 'ة',
}
_BUCK2AR = str.maketrans(_BUCK2AR_MAP)
_AR2BUCK = {v: k for k, v in _BUCK2AR_MAP.items()}

# Vowels and signs found in Buckwalter-encoded surface forms (corpus 0.4).
_BUCK_MARKS: dict[str, str] = {
    'a': '\u064E', 'u': '\u064F', 'i': '\u0650', 'o': '\u0652', '~': '\u0651',
    'F': '\u064B', 'N': '\u064C', 'K': '\u064D', '`': '\u0670', '{': '\u0671',
    '_': '\u0640', '^': '\u0653', '#': '\u0654',
}
_BUCKTEXT2AR = str.maketrans({**_BUCK2AR_MAP, **_BUCK_MARKS})


def buck2arabic(bw: str) -> str:
    """Translate a Buckwalter root to Arabic letters.

    Buckwalter is case-sensitive (``H`` is ح, ``h`` is ه), so the input is
    used verbatim.
    """
    return bw.translate(_BUCK2AR)


def arabic2buck(ar: str) -> str:
    """Translate an Arabic root to Buckwalter (best‑effort)."""
    return ''.join(_AR2BUCK.get(ch, ch) for ch in ar)


def looks_like_buckwalter(text: str) -> bool:
    """ASCII input made only of Buckwalter root letters (e.g. ``rHm``)."""
    return bool(text) and text.isascii() and all(ch in _BUCK2AR_MAP for ch in text)


def buck2arabic_text(bw: str) -> str:
    """Translate a vocalised Buckwalter word (e.g. ``r~aHoma`ni``)."""
    return bw.translate(_BUCKTEXT2AR)
