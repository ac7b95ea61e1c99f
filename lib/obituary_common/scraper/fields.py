"""
Date and location recovery from text around an obituary name.

All date helpers accept German ``D.M.YYYY`` notation and return zero-padded
ISO dates (``YYYY-MM-DD``). Patterns are tried in order and the first valid
match wins.
"""

import re
from datetime import date

_DATE = r"(\d{1,2})\.(\d{1,2})\.(\d{4})"

DEATH_DATE_PATTERNS = (
    re.compile(r"[†✝]\s*" + _DATE),
    re.compile(r"gestorben\s*(?:am\s*)?" + _DATE, re.IGNORECASE),
    re.compile(r"verstorben\s*(?:am\s*)?" + _DATE, re.IGNORECASE),
    re.compile(r"[-–]\s*" + _DATE + r"\s*$"),
)

BIRTH_DATE_PATTERNS = (
    re.compile(r"\\?\*\s*" + _DATE),
    re.compile(r"geboren\s*(?:am\s*)?" + _DATE, re.IGNORECASE),
    re.compile(r"geb\.\s*" + _DATE, re.IGNORECASE),
)

# "Neu-Ulm", "Bad Hersfeld", "Frankfurt am Main"
_PLACE = (
    r"((?:Bad\s+)?[A-ZÄÖÜ][a-zäöüß]+(?:-[A-ZÄÖÜ][a-zäöüß]+)*"
    r"(?:\s+(?:am|an der|im)\s+[A-ZÄÖÜ][a-zäöüß]+)?)"
)

LOCATION_PATTERNS = (
    re.compile(r"\b(?:wohnhaft in|aus|in)\s+" + _PLACE),
    re.compile(r"\b(\d{5})\s+" + _PLACE),
)

# Capitalized nouns that commonly follow "in" in obituary wording
LOCATION_STOPWORDS = frozenset(
    {
        "Liebe",
        "Dankbarkeit",
        "Trauer",
        "Erinnerung",
        "Gedenken",
        "Stille",
        "Frieden",
        "Gott",
        "Memoriam",
    }
)

SOURCE_LOCATIONS: dict[str, str | None] = {
    # Major cities
    "Tagesspiegel": "Berlin",
    "Hamburger Abendblatt": "Hamburg",
    "Süddeutsche Zeitung": "München",
    "Münchner Merkur": "München",
    "Erzbistum München": "München",
    "Kölner Stadt-Anzeiger": "Köln",
    "Frankfurter Allgemeine": "Frankfurt",
    "Frankfurter Rundschau": "Frankfurt",
    "Stuttgarter Zeitung": "Stuttgart",
    "Rheinische Post": "Düsseldorf",
    "Ruhr Nachrichten": "Dortmund",
    "WAZ": "Essen",
    "Weser Kurier": "Bremen",
    "Nürnberger Nachrichten": "Nürnberg",
    "Niederrhein Nachrichten": "Duisburg",
    "Trauer NRW": "Bochum",
    "Wuppertaler Rundschau": "Wuppertal",
    "Neue Westfälische": "Bielefeld",
    "General-Anzeiger Bonn": "Bonn",
    "Westfälische Nachrichten": "Münster",
    "Mannheimer Morgen": "Mannheim",
    "BNN Karlsruhe": "Karlsruhe",
    "Augsburger Allgemeine": "Augsburg",
    # Regional
    "Rhein-Zeitung": "Koblenz",
    "Heidenheimer Zeitung": "Heidenheim",
    "Mainpost": "Würzburg",
    "VRM Trauer": "Mainz",
    "Die Glocke": "Oelde",
    "Saarbrücker Zeitung": "Saarbrücken",
    "HNA": "Kassel",
    "Freie Presse": "Chemnitz",
    "Trierischer Volksfreund": "Trier",
    "Hersfelder Zeitung": "Bad Hersfeld",
    "Kreiszeitung": "Syke",
    "WLZ": "Korbach",
    "Fränkische Nachrichten": "Tauberbischofsheim",
    "SVZ": "Schwerin",
    # National portals have no typical city
    "Trauerfall.de": None,
    "Trauer-Anzeigen.de": None,
    # Funeral homes
    "Bestattung Kinelly": "Pinkafeld",
    "Nicklaus Bestattungen": "Würzburg",
}


def _to_iso(day: str, month: str, year: str) -> str | None:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def _first_date(text: str, patterns) -> str | None:
    for pattern in patterns:
        for match in pattern.finditer(text):
            iso = _to_iso(*match.groups())
            if iso:
                return iso
    return None


def extract_death_date(text: str) -> str | None:
    """
    Find a death date.

    Tries, in order: a death cross (``†``/``✝``) followed by a date,
    ``gestorben (am)``, ``verstorben (am)``, and a ``- D.M.YYYY`` ending the text.

    Args:
        text: Text surrounding a name

    Returns:
        ISO date or None
    """
    if not text:
        return None
    return _first_date(text, DEATH_DATE_PATTERNS)


def extract_birth_date(text: str) -> str | None:
    """
    Find a birth date.

    Tries, in order: an asterisk (optionally markdown-escaped) followed by a
    date, ``geboren (am)``, and ``geb.``.

    Args:
        text: Text surrounding a name

    Returns:
        ISO date or None
    """
    if not text:
        return None
    return _first_date(text, BIRTH_DATE_PATTERNS)


def extract_location_from_text(text: str) -> str | None:
    """
    Find a place name.

    Tries an ``aus``/``in``/``wohnhaft in`` phrase first, then a German
    five-digit postal code followed by a place name.

    Args:
        text: Text surrounding a name

    Returns:
        Place name or None
    """
    if not text:
        return None
    for pattern in LOCATION_PATTERNS:
        for match in pattern.finditer(text):
            place = match.groups()[-1]
            if place.split()[0] not in LOCATION_STOPWORDS:
                return place
    return None


def location_from_source(source_name: str) -> str | None:
    """Typical city for a source, None for national portals and unknown sources."""
    return SOURCE_LOCATIONS.get(source_name)
