"""Sample scraped pages for testing obituary extraction.

Markdown as returned by the scrape API for the kinds of portal pages the
pipeline reads: listing pages with image links, pages with bold names and
inline dates, and header-only pages.
"""

# Listing page of a trauer.de style portal: linked portraits with
# "Traueranzeige von <Name> von <Source>" captions
PORTAL_LISTING_MARKDOWN = """# Traueranzeigen

[![Traueranzeige von Maria Huber von Augsburger Allgemeine](https://cdn.example.de/maria.jpg)](https://trauer.example.de/maria-huber)

Traueranzeige von Maria Huber von Augsburger Allgemeine

[![Kerze für Maria Huber](https://cdn.example.de/kerze.jpg)](https://trauer.example.de/kerzen)

[![Georg Bauer](https://cdn.example.de/georg.jpg)](https://trauer.example.de/georg-bauer)
"""

# Mixed page: bold names with inline dates, a portrait link, a header name
# and portal boilerplate
MIXED_MARKDOWN = """## Aktuelle Traueranzeigen

**Hans Müller** geboren am 01.03.1950 ✝ 14.12.2025

[![Georg Bauer](https://cdn.example.de/georg.jpg)](https://trauer.example.de/georg-bauer)

**Georg Bauer**

## Erika Schmidt

**Kai Sender**
"""

# Single bold name with birth/death line and residence
BOLD_WITH_DETAILS_MARKDOWN = """**Erika Weber**
\\* 05.06.1940 † 02.12.2025
wohnhaft in Bad Hersfeld
"""

# Header-only page
HEADER_ONLY_MARKDOWN = """# Trauerfälle

## Erika Schmidt

## Nachrufe der Woche
"""

# Boilerplate and institutions that look like names
BOILERPLATE_MARKDOWN = """## Trauerhilfe

**Kai Sender**

**Bestattung Meier**

**Anzeige Aufgeben**

## Prominente Trauerfälle
"""

# Candidates MIXED_MARKDOWN yields, in rule order
MIXED_EXPECTED_NAMES = ["Georg Bauer", "Hans Müller", "Erika Schmidt"]

# Erzbistum München totentafel: day and month only, bold name, role
ERZBISTUM_MARKDOWN = """## Totentafel

21.01. **Christian Losbichler**, Diakon mit Zivilberuf

05.01. **Josef Maier**, Pfarrer i. R.

30.12. **Anton Huber**, Ruhestandspfarrer

05.01. **Josef Maier**, Pfarrer i. R.
"""

# Bestattung Kinelly: one level-5 header per person
KINELLY_MARKDOWN = """# Trauerfälle

##### Hedwig Hatraka(93)

\\* 02.03.1931

† 14.12.2024

Oberwart

![](https://kinelly.at/wp-content/uploads/hatraka.jpg)

##### Johann Pfeiffer

\\* 11.07.1948

† 09.12.2024

[Kondolieren](https://kinelly.at/kondolenz/pfeiffer)
"""

# Nicklaus Bestattungen: name with age, funeral place and date in bold
NICKLAUS_MARKDOWN = """# Frieda Müller (84 Jahre)

[![](https://www.nicklaus-bestattungen.de/media/mueller.jpg)](https://www.nicklaus-bestattungen.de/gedenkseite/mueller)

**Friedhof Karlstadt**

**Freitag, 12.12.2025**

Urnenbeisetzung

[Zur Gedenkseite](https://www.nicklaus-bestattungen.de/gedenkseite/mueller)

Walter Schmitt

(77 Jahre)

**Montag, 15.12.2025**

im engsten Familienkreis
"""
