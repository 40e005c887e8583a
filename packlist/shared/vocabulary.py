"""
Canonicalization tables.

Each vocabulary maps a canonical value to the surface forms accepted for it
(English and Dutch). Lookups go through the single functions below so that
language coverage stays declarative: adding a synonym is a data change.
"""

import re
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from packlist.shared.text import fold

# =============================================================================
# Months
# =============================================================================

MONTHS_EN: Tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

MONTH_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "Jan": ("january", "januari", "jan"),
    "Feb": ("february", "februari", "feb"),
    "Mar": ("march", "maart", "mar", "mrt"),
    "Apr": ("april", "apr"),
    "May": ("may", "mei"),
    "Jun": ("june", "juni", "jun"),
    "Jul": ("july", "juli", "jul"),
    "Aug": ("august", "augustus", "aug"),
    "Sep": ("september", "sept", "sep"),
    "Oct": ("october", "oktober", "oct", "okt"),
    "Nov": ("november", "nov"),
    "Dec": ("december", "dec"),
}

# =============================================================================
# Countries (canonical English name -> accepted forms)
# =============================================================================

COUNTRY_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "Vietnam": ("vietnam", "viet nam"),
    "Indonesia": ("indonesia", "indonesie", "bali"),
    "Thailand": ("thailand",),
    "Malaysia": ("malaysia", "maleisie"),
    "Philippines": ("philippines", "filipijnen", "the philippines"),
    "Laos": ("laos",),
    "Cambodia": ("cambodia", "cambodja"),
    "Myanmar": ("myanmar", "birma", "burma"),
    "Singapore": ("singapore", "singapur"),
    "Sri Lanka": ("sri lanka",),
    "India": ("india",),
    "Nepal": ("nepal",),
    "Japan": ("japan",),
    "South Korea": ("south korea", "zuid-korea", "zuid korea", "korea"),
    "China": ("china",),
    "Taiwan": ("taiwan",),
    "Australia": ("australia", "australie"),
    "New Zealand": ("new zealand", "nieuw-zeeland", "nieuw zeeland"),
    "Mexico": ("mexico",),
    "Guatemala": ("guatemala",),
    "Costa Rica": ("costa rica",),
    "Colombia": ("colombia", "colombie"),
    "Peru": ("peru",),
    "Bolivia": ("bolivia",),
    "Chile": ("chile", "chili"),
    "Argentina": ("argentina", "argentinie"),
    "Brazil": ("brazil", "brazilie"),
    "Ecuador": ("ecuador",),
    "United States": ("united states", "verenigde staten", "usa", "amerika"),
    "Canada": ("canada",),
    "Iceland": ("iceland", "ijsland"),
    "Norway": ("norway", "noorwegen"),
    "Sweden": ("sweden", "zweden"),
    "Scotland": ("scotland", "schotland"),
    "Ireland": ("ireland", "ierland"),
    "Portugal": ("portugal",),
    "Spain": ("spain", "spanje"),
    "France": ("france", "frankrijk"),
    "Italy": ("italy", "italie"),
    "Greece": ("greece", "griekenland"),
    "Croatia": ("croatia", "kroatie"),
    "Albania": ("albania", "albanie"),
    "Turkey": ("turkey", "turkije"),
    "Georgia": ("georgia", "georgie"),
    "Morocco": ("morocco", "marokko"),
    "Egypt": ("egypt", "egypte"),
    "Tanzania": ("tanzania",),
    "Kenya": ("kenya", "kenia"),
    "South Africa": ("south africa", "zuid-afrika", "zuid afrika"),
    "Namibia": ("namibia", "namibie"),
    "Netherlands": ("netherlands", "nederland", "holland"),
}

# =============================================================================
# Activities (canonical tag -> accepted forms)
# =============================================================================

ACTIVITY_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "surfing": ("surf", "surfen", "surfing", "kitesurf", "kitesurfen"),
    "hiking": ("hike", "hiken", "hiking", "wandelen", "wandel", "trek", "trekking", "hut-to-hut"),
    "diving": ("duik", "duiken", "scuba", "diving", "snorkel", "snorkelen", "snorkeling"),
    "city": ("city", "stad", "citytrip", "urban", "sightseeing", "stedentrip"),
    "camping": ("camping", "kamperen", "wildkamperen", "camp", "bivak"),
    "snow": ("snow", "ski", "skien", "skiing", "snowboard", "snowboarden", "wintersport"),
    "swimming": ("zwem", "zwemmen", "swim", "swimming"),
    "running": ("hardlopen", "run", "running"),
    "climbing": ("klimmen", "climb", "climbing", "boulder", "boulderen"),
    "boat": ("boat", "boot", "varen", "sailing", "zeilen", "kayak", "kajak", "eilandhoppen", "island hopping"),
}

# Catalog tags meaning "applies to every trip"
GENERIC_ACTIVITY_TAGS = frozenset({"all", "alle", "generic", "algemeen"})

# Prefix matching only for forms at least this long ("run" must not match "runway")
_MIN_PREFIX_LEN = 4

# Free-text scanning lets only longer forms absorb suffixes ("boot" must not match "boots")
_MIN_SUFFIX_LEN = 5


def _reverse_index(table: Dict[str, Tuple[str, ...]]) -> Dict[str, str]:
    index: Dict[str, str] = {}
    for canonical, forms in table.items():
        index.setdefault(fold(canonical), canonical)
        for form in forms:
            index.setdefault(fold(form), canonical)
    return index


_MONTH_INDEX = _reverse_index(MONTH_SYNONYMS)
_COUNTRY_INDEX = _reverse_index(COUNTRY_SYNONYMS)
_ACTIVITY_INDEX = _reverse_index(ACTIVITY_SYNONYMS)


# =============================================================================
# Lookup functions
# =============================================================================


def month_abbrev(name: Optional[str]) -> Optional[str]:
    """
    Normalize a free-form month name to a 3-letter English abbreviation.

    Falls back to matching the first three letters against the English
    abbreviations ("Sept." -> "Sep").
    """
    key = fold(name).rstrip(".")
    if not key:
        return None
    if key in _MONTH_INDEX:
        return _MONTH_INDEX[key]
    head = key[:3]
    for abbrev in MONTHS_EN:
        if abbrev.lower() == head:
            return abbrev
    return None


def month_number(abbrev: Optional[str]) -> Optional[int]:
    """1-based month number of an English abbreviation, or None."""
    if not abbrev:
        return None
    try:
        return MONTHS_EN.index(abbrev) + 1
    except ValueError:
        return None


def canonical_country(name: Optional[str]) -> Optional[str]:
    """Canonical English country name; unknown names are returned trimmed."""
    if name is None:
        return None
    stripped = str(name).strip()
    if not stripped:
        return None
    return _COUNTRY_INDEX.get(fold(stripped), stripped)


def country_key(name: Optional[str]) -> str:
    """Folded canonical country used for matching."""
    return fold(canonical_country(name))


def canonical_activity(token: Optional[str]) -> str:
    """
    Map an activity token to its canonical tag.

    Exact surface forms win; otherwise each word of the token is checked
    (exactly, then by prefix for longer forms). Unknown tokens are returned
    folded so catalog-only tags still compare equal to themselves.
    """
    t = fold(token)
    if not t:
        return ""
    if t in GENERIC_ACTIVITY_TAGS:
        return t
    if t in _ACTIVITY_INDEX:
        return _ACTIVITY_INDEX[t]

    words = re.split(r"[\s_]+", t)
    for word in words:
        if word in _ACTIVITY_INDEX:
            return _ACTIVITY_INDEX[word]
    for word in words:
        for form, canonical in _ACTIVITY_INDEX.items():
            if len(form) >= _MIN_PREFIX_LEN and word.startswith(form):
                return canonical
    return t


def canonical_activities(tokens: Iterable[str]) -> List[str]:
    """Canonicalize and de-duplicate, keeping first-seen order."""
    out: List[str] = []
    for token in tokens:
        canonical = canonical_activity(token)
        if canonical and canonical not in out:
            out.append(canonical)
    return out


def _form_pattern(form: str, allow_suffix: bool) -> str:
    escaped = re.escape(fold(form)).replace(r"\ ", r"\s+")
    suffix = r"\w*" if allow_suffix and len(form) >= _MIN_SUFFIX_LEN else r"\b"
    return rf"\b{escaped}{suffix}"


def compile_vocabulary(
    table: Dict[str, Tuple[str, ...]],
    allow_suffix: bool = False,
) -> List[Tuple[str, Pattern[str]]]:
    """
    Compile one regex per canonical value for scanning folded free text.

    Args:
        table: Canonical value -> surface forms
        allow_suffix: Let longer forms match inflected words ("kayak" -> "kayaking")

    Returns:
        List of (canonical, compiled pattern) in table order
    """
    compiled = []
    for canonical, forms in table.items():
        ordered = sorted({fold(f) for f in forms}, key=len, reverse=True)
        alternatives = "|".join(_form_pattern(f, allow_suffix) for f in ordered)
        compiled.append((canonical, re.compile(alternatives)))
    return compiled
