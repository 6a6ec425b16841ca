"""
Text and CSS helpers used by the manipulator.
"""

import re
from typing import Dict, Optional, Union

from .dom import Element, Parser
from .dom.document import decode_markup

_WHITESPACE = re.compile(r'\s+')


def trim_newlines(text: str) -> str:
    """
    Remove newlines from a string and collapse whitespace.

    Args:
        text: The string to clean up

    Returns:
        The string on a single line, trimmed
    """
    text = text.replace("\n", " ").replace("\r", " ")
    return _WHITESPACE.sub(" ", text).strip()


def css_string_to_dict(css: Optional[str]) -> Dict[str, str]:
    """
    Convert a CSS declaration list to a dict.

    Statements without a property name are ignored.

    Args:
        css: List of CSS properties separated by ``;``

    Returns:
        name => value pairs of CSS properties, in source order
    """
    styles = {}
    for statement in _WHITESPACE.sub(" ", css or "").split(";"):
        statement = statement.strip()
        if not statement:
            continue
        position = statement.find(":")
        if position <= 0:
            continue
        styles[statement[:position].strip()] = statement[position + 1:].strip()
    return styles


def css_dict_to_string(styles: Dict[str, str]) -> str:
    """
    Convert a dict of CSS properties to a declaration list.

    Args:
        styles: name => value pairs of CSS properties

    Returns:
        List of CSS properties separated by ``;``
    """
    return "".join(f"{key}: {value};" for key, value in styles.items())


def get_body_node_from_html_fragment(html: Union[str, bytes], charset: str = 'UTF-8') -> Element:
    """
    Parse an HTML fragment and return the body element holding it.

    Args:
        html: A fragment of HTML code
        charset: Character set of ``html`` when given as bytes

    Returns:
        The body element of the parsed wrapper document
    """
    html = decode_markup(html, charset)
    document = Parser(charset).parse(f"<html><body>{html}</body></html>")
    return document.body
