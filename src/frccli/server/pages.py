"""HTML page templates for the web front end.

Pages are assembled from plain strings: a document shell with an inlined
stylesheet, an event ``<header>`` and a ``<main>`` body. Every value that
comes from the API is escaped before it is placed in markup.
"""

from __future__ import annotations

from html import escape
from typing import Any, Mapping, Optional

from frccli.display.labels import id_to_word
from frccli.matches import format_date_range, parse_api_datetime

DEFAULT_STYLES = "assets/styles/default.css"
SCHEDULE_STYLES = "assets/styles/schedule.css"


def generate_html(title: str, body: str, styles: str = "") -> str:
    """Wrap *body* in a complete document with *styles* inlined in the head."""
    return (
        "<!DOCTYPE html>\n<html>\n\t<head>\n"
        f"\t\t<title>{escape(title)}</title>\n"
        f"\t\t<style>\n{styles}\n</style>\n"
        "\t</head>\n\t<body>\n"
        f"{body}\n"
        "\t</body>\n</html>"
    )


def error_suggestions(year: int, event_code: str) -> str:
    """Links to the official event pages and The Blue Alliance."""
    code = escape(event_code)
    links = [
        (f"https://frc-events.firstinspires.org/{year}", f"FRC {year} Year Page"),
        (f"https://frc-events.firstinspires.org/{year}/{code}", f"FRC {year} {code} Event Page"),
        ("https://thebluealliance.com", "The Blue Alliance Home Page"),
        (
            f"https://www.thebluealliance.com/event/{year}{code.lower()}",
            f"The Blue Alliance {year} {code} Event Page",
        ),
    ]
    items = "".join(f'<li><a href="{href}">{text}</a></li>' for href, text in links)
    return f"<ul>{items}</ul>"


def basic_header(year: int, event_code: str) -> str:
    return f"<header><h1>FRC {year} {escape(event_code)}</h1></header>"


def event_header(year: int, event_code: str, event: Mapping[str, Any]) -> str:
    """Event ``<header>`` built from whichever event fields are present.

    The ``<h2>`` carries the name, type and codes; the ``<h3>`` the date
    range with timezone, venue, address and website. Absent fields are
    skipped, so a projected event renders only what was kept.
    """
    parts = [f"<h1>FRC {year} {escape(event_code)}</h1>"]

    titles: list[str] = []
    if "name" in event:
        name = escape(str(event["name"]))
        if event.get("type"):
            name += f" ({escape(id_to_word(str(event['type'])))})"
        titles.append(name)
    codes = _code_line(event)
    if codes:
        titles.append(codes)
    if titles:
        parts.append(f"<h2>{'<br/>'.join(titles)}</h2>")

    details: list[str] = []
    when = _date_line(event)
    if when:
        details.append(escape(when))
    if event.get("venue"):
        details.append(escape(str(event["venue"])))
    location = ", ".join(
        str(event[key]) for key in ("address", "city", "stateprov", "country") if event.get(key)
    )
    if location:
        details.append(escape(location))
    if event.get("website"):
        website = escape(str(event["website"]))
        details.append(f'Website: <a href="{website}">{website}</a>')
    if details:
        parts.append(f"<h3>{'<br/>'.join(details)}</h3>")

    return f"<header>{''.join(parts)}</header>"


def _code_line(event: Mapping[str, Any]) -> str:
    district = event.get("districtCode")
    division = event.get("divisionCode")
    code = event.get("code")
    if code is not None:
        line = f"{code} [Division {division}]" if division is not None else str(code)
    else:
        line = f"Division {division}" if division is not None else ""
    if district is not None:
        line = f"{district} - {line}" if line else str(district)
    return escape(line)


def _date_line(event: Mapping[str, Any]) -> Optional[str]:
    start = event.get("dateStart")
    if not start:
        return None
    end = event.get("dateEnd")
    try:
        line = format_date_range(parse_api_datetime(str(start)), parse_api_datetime(str(end or start)))
    except ValueError:
        line = str(start)
    if event.get("timezone"):
        line += f" ({event['timezone']})"
    return line


def message_page(title: str, header: str, message: str, year: int, event_code: str, styles: str) -> str:
    """A header followed by *message* (already HTML) and the suggestion links."""
    body = f"{header}<main>{message}<br/>\n{error_suggestions(year, event_code)}</main>"
    return generate_html(title, body, styles)
