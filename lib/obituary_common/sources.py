"""
Registry of obituary sources.

Each source is one third-party obituary page. Sources that publish monthly
archives carry an ``archive_url_template`` with a ``{month}`` placeholder
(e.g. ``januar-2025``), so live and historical scraping share one entry.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ObituarySource:
    """
    Static registry entry for one source.

    Attributes:
        id: Stable slug used by callers to select the source
        name: Display name stored on each obituary
        url: Page with the current obituaries
        archive_url_template: Monthly archive URL with a ``{month}`` placeholder
    """

    id: str
    name: str
    url: str
    archive_url_template: str | None = None

    @property
    def supports_archive(self) -> bool:
        return self.archive_url_template is not None

    def archive_url(self, month: str) -> str:
        """
        Resolve the archive page for a month token.

        Args:
            month: Month token as used by the site, e.g. ``januar-2025``

        Returns:
            Archive URL

        Raises:
            ValueError: If the source has no archive or the token is empty
        """
        if not self.archive_url_template:
            raise ValueError(f"Source {self.id} has no monthly archive")
        month = month.strip().lower()
        if not month:
            raise ValueError("month token is required")
        return self.archive_url_template.format(month=month)


def _archive(base: str) -> str:
    return f"{base}/traueranzeigen-suche/monat-{{month}}"


# Sorted by display name so sequential runs start with Augsburger Allgemeine
SOURCES: tuple[ObituarySource, ...] = (
    ObituarySource(
        "augsburg",
        "Augsburger Allgemeine",
        "https://trauer.augsburger-allgemeine.de/traueranzeigen-suche/aktuelle-ausgabe",
        _archive("https://trauer.augsburger-allgemeine.de"),
    ),
    ObituarySource("bestattung-kinelly", "Bestattung Kinelly", "https://kinelly.at/trauerfaelle/"),
    ObituarySource(
        "die-glocke",
        "Die Glocke",
        "https://trauer.die-glocke.de/",
        _archive("https://trauer.die-glocke.de"),
    ),
    ObituarySource(
        "erzbistum-muenchen",
        "Erzbistum München",
        "https://www.erzbistum-muenchen.de/ueber-uns/totentafel",
    ),
    ObituarySource(
        "faz",
        "Frankfurter Allgemeine",
        "https://lebenswege.faz.net/traueranzeigen-suche/aktuelle-ausgabe",
        _archive("https://lebenswege.faz.net"),
    ),
    ObituarySource(
        "rheinmain",
        "Frankfurter Rundschau",
        "https://trauer-rheinmain.de/traueranzeigen-suche/aktuelle-ausgabe",
        _archive("https://trauer-rheinmain.de"),
    ),
    ObituarySource("freie-presse", "Freie Presse", "https://gedenken.freiepresse.de/"),
    ObituarySource(
        "hamburger-trauer",
        "Hamburger Abendblatt",
        "https://hamburgertrauer.de/traueranzeigen-suche/letzte-14-tage/region-hamburger-abendblatt",
        _archive("https://hamburgertrauer.de"),
    ),
    ObituarySource("heimatfriedhof", "Heimatfriedhof.online", "https://heimatfriedhof.online/"),
    ObituarySource(
        "wirtrauern",
        "Kölner Stadt-Anzeiger",
        "https://www.wirtrauern.de/traueranzeigen-suche/letzte-14-tage/region-köln",
        _archive("https://www.wirtrauern.de"),
    ),
    ObituarySource(
        "mannheim",
        "Mannheimer Morgen",
        "https://trauer.mannheimer-morgen.de/traueranzeigen-suche/letzte-14-tage",
        _archive("https://trauer.mannheimer-morgen.de"),
    ),
    ObituarySource(
        "nicklaus",
        "Nicklaus Bestattungen",
        "https://www.nicklaus-bestattungen.de/de/totentafel/",
    ),
    ObituarySource("nordkurier", "Nordkurier", "https://trauer.nordkurier.de"),
    ObituarySource("rz", "Rhein-Zeitung", "https://rz-trauer.de/"),
    ObituarySource(
        "dortmund",
        "Ruhr Nachrichten",
        "https://sich-erinnern.de/traueranzeigen-suche/region-ruhr-nachrichten",
        _archive("https://sich-erinnern.de"),
    ),
    ObituarySource(
        "saarbruecker", "Saarbrücker Zeitung", "https://saarbruecker-zeitung.trauer.de/"
    ),
    ObituarySource(
        "stuttgart",
        "Stuttgarter Zeitung",
        "https://www.stuttgart-gedenkt.de/traueranzeigen-suche/aktuelle-ausgabe",
        _archive("https://www.stuttgart-gedenkt.de"),
    ),
    ObituarySource("trauer-anzeigen", "Trauer-Anzeigen.de", "https://trauer-anzeigen.de/"),
    ObituarySource(
        "nrw",
        "Trauer NRW",
        "https://trauer-in-nrw.de/traueranzeigen-suche/aktuelle-ausgabe",
        _archive("https://trauer-in-nrw.de"),
    ),
    ObituarySource(
        "trauer-de",
        "Trauer.de",
        "https://www.trauer.de/traueranzeigen-suche/region-waz--26--lokalkompass",
    ),
    ObituarySource(
        "trauerundgedenken",
        "Trauer und Gedenken",
        "https://www.trauerundgedenken.de/traueranzeigen-suche/letzte-14-tage",
        _archive("https://www.trauerundgedenken.de"),
    ),
    ObituarySource("trauerfall", "Trauerfall.de", "https://trauerfall.de/"),
    ObituarySource("volksfreund", "Trierischer Volksfreund", "https://volksfreund.trauer.de/"),
    ObituarySource("vrm-trauer", "VRM Trauer", "https://vrm-trauer.de/"),
    ObituarySource(
        "muenster",
        "Westfälische Nachrichten",
        "https://www.trauer.ms/traueranzeigen-suche/aktuelle-ausgabe",
        _archive("https://www.trauer.ms"),
    ),
)

_SOURCES_BY_ID = {source.id: source for source in SOURCES}


def get_source(source_id: str) -> ObituarySource | None:
    """Look up a source by id."""
    return _SOURCES_BY_ID.get(source_id)


def select_sources(source_ids: list[str]) -> tuple[list[ObituarySource], list[str]]:
    """
    Resolve source ids against the registry.

    Known sources are returned in registry order regardless of the order
    of ``source_ids``.

    Args:
        source_ids: Requested source ids

    Returns:
        Tuple of (known sources, unknown ids in request order)
    """
    requested = set(source_ids)
    known = [source for source in SOURCES if source.id in requested]
    unknown = []
    for source_id in source_ids:
        if source_id not in _SOURCES_BY_ID and source_id not in unknown:
            unknown.append(source_id)
    return known, unknown


def archive_sources() -> list[ObituarySource]:
    """Sources with a monthly archive."""
    return [source for source in SOURCES if source.supports_archive]
