"""
DOM implementation for the manipulator.
This package provides the tree the fluent API operates on.
"""

from typing import Union

from .node import Node, NodeType
from .element import Element
from .attr import Attr
from .character_data import CharacterData
from .text import Text, CDATASection
from .comment import Comment
from .document import Document, DocumentType
from .selector_engine import SelectorEngine


class Parser:
    """Parser creating DOM trees from HTML or XML content."""

    def __init__(self, charset: str = 'UTF-8'):
        """
        Initialize the parser.

        Args:
            charset: Character set used when decoding byte input
        """
        self.charset = charset

    def parse(self, html_content: Union[str, bytes]) -> Document:
        """
        Parse HTML content into a Document.

        Args:
            html_content: The HTML content to parse

        Returns:
            The parsed Document
        """
        document = Document(self.charset)
        document.parse_html(html_content)
        return document

    def parse_xml(self, xml_content: Union[str, bytes]) -> Document:
        """
        Parse XML content into a Document.
        """
        document = Document(self.charset, 'application/xml')
        document.parse_xml(xml_content)
        return document


__all__ = [
    'Node', 'NodeType', 'Element', 'Attr', 'CharacterData', 'Text', 'CDATASection',
    'Comment', 'Document', 'DocumentType', 'SelectorEngine', 'Parser'
]
