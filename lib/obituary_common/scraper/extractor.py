"""
Obituary extraction from scraped markdown.

Extraction is best-effort text pattern matching. A fixed, ordered set of
rules scans the whole page; every rule yields names in the same shape and
all rules share one case-insensitive set of names already emitted, so the
first rule to see a name decides which variant of the candidate is kept.
"""

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime

from obituary_common.constants import (
    CONTEXT_CHARS_AFTER,
    CONTEXT_CHARS_BEFORE,
    MIN_NAME_LENGTH,
)
from obituary_common.scraper.fields import (
    extract_birth_date,
    extract_death_date,
    extract_location_from_text,
    location_from_source,
)
from obituary_common.scraper.models import ScrapedObituary

logger = logging.getLogger(__name__)

# Horizontal whitespace only; a name never spans lines
_WS = r"[^\S\n]+"

NAME_PATTERN = r"[A-ZÄÖÜ][a-zäöüß]+(?:" + _WS + r"[A-ZÄÖÜ][a-zäöüß-]+)+"
NAME_RE = re.compile(NAME_PATTERN)

TRAUERANZEIGE_RE = re.compile(
    r"Traueranzeige" + _WS + r"von" + _WS + r"(" + NAME_PATTERN + r")" + _WS + r"von" + _WS + r"\S"
)
IMAGE_ALT_RE = re.compile(r"\[!\[([^\]\n]+)\]\(")
BOLD_NAME_RE = re.compile(r"\*\*(" + NAME_PATTERN + r")\*\*")
HEADER_RE = re.compile(r"^#{1,4}" + _WS + r"(.+?)[^\S\n]*#*[^\S\n]*$", re.MULTILINE)

_ALT_PREFIX_RE = re.compile(r"^Traueranzeige\s+von\s+", re.IGNORECASE)
_ATTRIBUTION_RE = re.compile(r"\s+von\s+.+$", re.IGNORECASE)

# Alt texts of candle and picture widgets
IMAGE_ALT_EXCLUDED = ("kerze", "bild", "foto")

# Portal navigation headers
HEADER_BOILERPLATE = (
    "traueranzeige",
    "trauerhilfe",
    "trauerfälle",
    "trauerfall",
    "nachruf",
    "kondolenz",
    "gedenken",
    "kerzen",
    "trauerchat",
    "ratgeber",
)

BLACKLIST = frozenset(
    {
        "prominente trauerfälle",
        "aktuelle traueranzeigen",
        "weitere trauerfälle",
        "neueste kerzen",
        "unsere trauerchats",
        "trauerhilfe",
        "trauervideos",
        "trauerhilfe live-chat",
        "anzeige aufgeben",
        "kai sender",
        "traueranzeigen",
        "fragen & antworten",
        "die trauerphasen",
        "trauernde geschwister",
        "die sterbehilfe",
        "die palliativstation",
        "das hospiz",
        "meinungen der teilnehmer",
        "expertenchat jeden",
        "traueranzeige aufgeben",
    }
)

_UTILITY_WORDS_RE = re.compile(
    r"kerze|bild|chat|hilfe|video|anzeige|telefon|forum|ratgeber", re.IGNORECASE
)
_NON_PERSON_RE = re.compile(
    r"GmbH|\bAG\b|e\.\s?V\.|Stiftung|Verein|Gemeinde|Landkreis|Firma|Institut"
    r"|Bestattung|Friedhof|Krankenhaus|Klinik|Testanzeige|Musteranzeige|Beispiel"
)


@dataclass(frozen=True)
class NameMatch:
    """A name found by a rule with its span in the page."""

    name: str
    start: int
    end: int


@dataclass(frozen=True)
class PatternRule:
    """
    One extraction rule.

    Attributes:
        name: Rule identifier used in logs
        find: Yields name matches over the full page
        uses_context: Recover dates and location from the text around the match
    """

    name: str
    find: Callable[[str], Iterator[NameMatch]]
    uses_context: bool = False


def find_traueranzeige_names(markdown: str) -> Iterator[NameMatch]:
    """Names in "Traueranzeige von <Name> von <Source>" phrases."""
    for match in TRAUERANZEIGE_RE.finditer(markdown):
        yield NameMatch(match.group(1), match.start(1), match.end(1))


def find_image_alt_names(markdown: str) -> Iterator[NameMatch]:
    """Names used as alt text of linked images: ``[![Name](...)](...)``."""
    for match in IMAGE_ALT_RE.finditer(markdown):
        alt = match.group(1).strip()
        lowered = alt.lower()
        if any(word in lowered for word in IMAGE_ALT_EXCLUDED):
            continue
        name = _ATTRIBUTION_RE.sub("", _ALT_PREFIX_RE.sub("", alt)).strip()
        if NAME_RE.fullmatch(name):
            yield NameMatch(name, match.start(1), match.end(1))


def find_bold_names(markdown: str) -> Iterator[NameMatch]:
    """Names wrapped in markdown bold: ``**Name**``."""
    for match in BOLD_NAME_RE.finditer(markdown):
        yield NameMatch(match.group(1), match.start(), match.end())


def find_header_names(markdown: str) -> Iterator[NameMatch]:
    """Headers (levels 1-4) consisting only of a name."""
    for match in HEADER_RE.finditer(markdown):
        text = match.group(1).strip()
        lowered = text.lower()
        if any(word in lowered for word in HEADER_BOILERPLATE):
            continue
        if NAME_RE.fullmatch(text):
            yield NameMatch(text, match.start(1), match.end(1))


RULES: tuple[PatternRule, ...] = (
    PatternRule("traueranzeige", find_traueranzeige_names),
    PatternRule("image_alt", find_image_alt_names),
    PatternRule("bold_name", find_bold_names, uses_context=True),
    PatternRule("header", find_header_names),
)


def is_valid_name(name: str) -> bool:
    """
    Check a matched string against the boilerplate filters.

    Args:
        name: Candidate name

    Returns:
        True if the string looks like a person's name
    """
    if not name or len(name) < MIN_NAME_LENGTH:
        return False
    if name.lower() in BLACKLIST:
        return False
    parts = [part for part in name.split() if len(part) > 1]
    if len(parts) < 2:
        return False
    if _UTILITY_WORDS_RE.search(name):
        return False
    return not _NON_PERSON_RE.search(name)


def context_window(markdown: str, start: int, end: int) -> str:
    """Text from 50 characters before a match to 200 characters after it."""
    return markdown[max(0, start - CONTEXT_CHARS_BEFORE) : end + CONTEXT_CHARS_AFTER]


def build_candidate(
    name: str,
    source: str,
    run_date: str,
    context: str | None = None,
) -> ScrapedObituary:
    """
    Create a candidate, recovering dates and location from ``context`` if given.

    Args:
        name: Person's name
        source: Source display name
        run_date: ISO date of the extraction run
        context: Surrounding text, or None to skip recovery

    Returns:
        ScrapedObituary with run_date as death date when none was found
    """
    death_date = birth_date = location = None
    if context:
        death_date = extract_death_date(context)
        birth_date = extract_birth_date(context)
        location = extract_location_from_text(context)

    return _candidate(name, source, run_date, death_date, birth_date, location)


def _candidate(
    name: str,
    source: str,
    run_date: str,
    death_date: str | None = None,
    birth_date: str | None = None,
    location: str | None = None,
) -> ScrapedObituary:
    return ScrapedObituary(
        name=name,
        death_date=death_date or run_date,
        death_date_estimated=death_date is None,
        birth_date=birth_date,
        location=location or location_from_source(source),
        text=None,
        photo_url=None,
        source=source,
        publication_date=run_date,
    )


def extract_obituaries(
    markdown: str,
    source: str,
    today: date | None = None,
) -> list[ScrapedObituary]:
    """
    Extract candidate obituaries from one page.

    Args:
        markdown: Page content as markdown
        source: Source display name stored on each candidate
        today: Run date used when no death date is found (defaults to today, UTC)

    Returns:
        Candidates in rule order (page order for sources in SOURCE_PARSERS),
        one per case-insensitive name
    """
    if not markdown:
        return []

    run_day = today or datetime.now(UTC).date()
    source_parser = SOURCE_PARSERS.get(source)
    if source_parser is not None:
        obituaries = source_parser(markdown, source, run_day)
        logger.info(f"{source} parser found {len(obituaries)} obituaries")
        return obituaries

    run_date = run_day.isoformat()
    seen_names: set[str] = set()
    obituaries: list[ScrapedObituary] = []

    for rule in RULES:
        found = 0
        for match in rule.find(markdown):
            key = match.name.lower()
            if key in seen_names or not is_valid_name(match.name):
                continue
            seen_names.add(key)

            context = None
            if rule.uses_context:
                context = context_window(markdown, match.start, match.end)
            obituaries.append(build_candidate(match.name, source, run_date, context))
            found += 1

        if found:
            logger.debug(f"Rule {rule.name} found {found} names in {source}")

    logger.info(f"Parser found {len(obituaries)} unique obituaries from {source}")
    return obituaries


# Pages with a fixed entry layout are parsed by source instead of by the
# generic rules. Each parser keeps its own case-insensitive seen-name set.

# "21.01. **Christian Losbichler**, Diakon mit Zivilberuf"
ERZBISTUM_ENTRY_RE = re.compile(
    r"(?<![\d.])(\d{1,2})\.(\d{1,2})\.[^\S\n]*\*\*([^*\n]+)\*\*"
)

# "##### Hedwig Hatraka(93)"
KINELLY_ENTRY_SPLIT_RE = re.compile(r"^#{5}[^\S\n]+", re.MULTILINE)
KINELLY_NAME_RE = re.compile(r"(" + NAME_PATTERN + r")[^\S\n]*(?:\(\d+\))?")

# "# Frieda Müller (84 Jahre)" or "Frieda Müller\n\n(84 Jahre)"
NICKLAUS_ENTRY_RE = re.compile(
    r"^(?:#+" + _WS + r")?(" + NAME_PATTERN + r")\s*\(\d+" + _WS + r"Jahre\)",
    re.MULTILINE,
)
NICKLAUS_BOLD_RE = re.compile(r"\*\*([^*\n]+)\*\*")
NICKLAUS_NOT_PLACE_RE = re.compile(
    r"^(?:Montag|Dienstag|Mittwoch|Donnerstag|Freitag|Samstag|Sonntag|im\s+engsten)",
    re.IGNORECASE,
)
NICKLAUS_LOOKAHEAD_CHARS = 1000


def _infer_year(day: str, month: str, today: date) -> str | None:
    """ISO date for a day and month without year, never later than ``today``."""
    try:
        found = date(today.year, int(month), int(day))
    except ValueError:
        return None
    if found > today:
        try:
            found = found.replace(year=today.year - 1)
        except ValueError:
            return None
    return found.isoformat()


def parse_erzbistum_muenchen(markdown: str, source: str, today: date) -> list[ScrapedObituary]:
    """
    Death notices of clergy: a day and month without year, then the bold name.

    The year is that of the run date, or the year before when the day would
    otherwise lie in the future.
    """
    run_date = today.isoformat()
    seen_names: set[str] = set()
    obituaries = []

    for match in ERZBISTUM_ENTRY_RE.finditer(markdown):
        day, month, name = match.group(1), match.group(2), match.group(3).strip()
        if name.lower() in seen_names or not is_valid_name(name):
            continue
        seen_names.add(name.lower())
        obituaries.append(_candidate(name, source, run_date, _infer_year(day, month, today)))

    return obituaries


def parse_bestattung_kinelly(markdown: str, source: str, today: date) -> list[ScrapedObituary]:
    """
    Funeral home list with one level-5 header per person.

    Entry layout::

        ##### Hedwig Hatraka(93)
        \\* 02.03.1931
        † 14.12.2024
        Pinkafeld
        ![](https://kinelly.at/.../hatraka.jpg)
    """
    run_date = today.isoformat()
    seen_names: set[str] = set()
    obituaries = []

    for entry in KINELLY_ENTRY_SPLIT_RE.split(markdown)[1:]:
        match = KINELLY_NAME_RE.match(entry)
        if not match:
            continue
        name = match.group(1)
        if name.lower() in seen_names or not is_valid_name(name):
            continue
        seen_names.add(name.lower())

        obituaries.append(
            _candidate(
                name,
                source,
                run_date,
                death_date=extract_death_date(entry),
                birth_date=extract_birth_date(entry),
                location=_line_after_death_cross(entry),
            )
        )

    return obituaries


def _line_after_death_cross(entry: str) -> str | None:
    lines = [line.strip() for line in entry.splitlines() if line.strip()]
    for index, line in enumerate(lines[:-1]):
        if "†" in line or "✝" in line:
            following = lines[index + 1]
            if not following.startswith(("[", "!", "#", "*", "\\")):
                return following
            return None
    return None


def parse_nicklaus_bestattungen(markdown: str, source: str, today: date) -> list[ScrapedObituary]:
    """
    Funeral home list showing name and age; there is no death date on the page.

    The place of the funeral (first bold line that is not a weekday date)
    up to the next entry is used as location.
    """
    run_date = today.isoformat()
    seen_names: set[str] = set()
    obituaries = []

    matches = list(NICKLAUS_ENTRY_RE.finditer(markdown))
    for index, match in enumerate(matches):
        name = match.group(1)
        if name.lower() in seen_names or not is_valid_name(name):
            continue
        seen_names.add(name.lower())

        end = match.end() + NICKLAUS_LOOKAHEAD_CHARS
        if index + 1 < len(matches):
            end = min(end, matches[index + 1].start())
        location = _funeral_place(markdown[match.end() : end])
        obituaries.append(_candidate(name, source, run_date, location=location))

    return obituaries


def _funeral_place(text: str) -> str | None:
    for match in NICKLAUS_BOLD_RE.finditer(text):
        place = match.group(1).strip()
        if not place or not place[0].isupper() or any(c.isdigit() for c in place):
            continue
        if NICKLAUS_NOT_PLACE_RE.match(place):
            continue
        return place
    return None


SOURCE_PARSERS: dict[str, Callable[[str, str, date], list[ScrapedObituary]]] = {
    "Erzbistum München": parse_erzbistum_muenchen,
    "Bestattung Kinelly": parse_bestattung_kinelly,
    "Nicklaus Bestattungen": parse_nicklaus_bestattungen,
}
