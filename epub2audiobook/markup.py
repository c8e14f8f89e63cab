"""HTML helpers for chapter documents."""

from bs4 import BeautifulSoup  # type: ignore[import-untyped]


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def get_title_from_title_tag(html: str) -> str:
    """Text of the first ``<title>`` element, or an empty string."""
    title = _soup(html).find("title")
    if title is None:
        return ""
    return title.get_text()


def get_title_from_section_tag(html: str) -> str:
    """``title`` attribute of the first ``<section>``, or an empty string."""
    section = _soup(html).find("section")
    if section is None:
        return ""
    value = section.get("title")
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def html_to_text(html: str) -> str:
    """Concatenated text of ``<body>``; the whole document if there is none."""
    soup = _soup(html)
    body = soup.find("body")
    return (body or soup).get_text()
