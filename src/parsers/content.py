"""Text cleanup for HTML fragments returned by the store API."""

import html
import re

from bs4 import BeautifulSoup
from html_to_markdown import ConversionOptions, convert

BLOCK_BREAKS = {
    "p": "\n\n",
    "h1": "\n\n",
    "h2": "\n\n",
    "h3": "\n\n",
    "h4": "\n\n",
    "h5": "\n\n",
    "h6": "\n\n",
    "div": "\n",
    "ul": "\n",
    "ol": "\n",
}

# Configure markdown conversion for clean MCP output
_md_options = ConversionOptions(
    heading_style="atx",
    code_block_style="fenced",
)


def decode_entities(text: str) -> str:
    """Decode HTML entities and trim surrounding whitespace."""
    if not text:
        return ""
    return html.unescape(text).replace("\u00a0", " ").strip()


def strip_html(fragment: str) -> str:
    """
    Strip tags from an HTML fragment, keeping some structure.

    Block elements become line breaks, list items become bullets and runs of
    blank lines collapse to a single blank line.
    """
    if not fragment:
        return ""

    # Source newlines are layout noise; structure comes from the tags
    soup = BeautifulSoup(re.sub(r"[\r\n]+", " ", fragment), "html.parser")

    for br in soup.find_all("br"):
        br.replace_with("\n")
    for li in soup.find_all("li"):
        li.insert(0, "• ")
        li.append("\n")
    for name, brk in BLOCK_BREAKS.items():
        for tag in soup.find_all(name):
            tag.append(brk)

    text = soup.get_text().replace("\u00a0", " ")
    text = re.sub(r"•\s+", "• ", text)
    text = re.sub(r"\n\s*\n", "\n\n", text)

    return text.strip()


def description_to_markdown(fragment: str) -> str:
    """Convert a product description to Markdown; plain text is only entity-decoded."""
    if not fragment:
        return ""
    if "<" not in fragment:
        return decode_entities(fragment)

    sanitized = fragment.replace("\u00a0", " ").replace("&nbsp;", " ")
    md = convert(sanitized, _md_options)
    md = re.sub(r"\n{3,}", "\n\n", md)  # Max 2 consecutive newlines

    return md.strip()
