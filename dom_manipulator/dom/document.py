"""
Document implementation for the DOM.
This module implements the DOM Document interface: node factories, node import
and parsing of HTML (html5lib) and XML markup into the tree.
"""

import logging
import re
from typing import List, Optional, Union
from xml.dom import minidom
from xml.parsers.expat import ExpatError

import html5lib
from bs4 import UnicodeDammit

from .node import Node, NodeType
from .element import Element
from .text import Text, CDATASection
from .comment import Comment
from .selector_engine import default_engine
from .serializer import serialize

logger = logging.getLogger(__name__)

XHTML_NAMESPACE = 'http://www.w3.org/1999/xhtml'

# Elements in which whitespace-only text is significant
WHITESPACE_SENSITIVE_ELEMENTS = {'pre', 'textarea', 'script', 'style'}

# Phrasing elements; whitespace next to them separates words
INLINE_ELEMENTS = {
    'a', 'abbr', 'acronym', 'audio', 'b', 'bdi', 'bdo', 'big', 'br', 'button',
    'canvas', 'cite', 'code', 'data', 'del', 'dfn', 'em', 'embed', 'font', 'i',
    'iframe', 'img', 'input', 'ins', 'kbd', 'label', 'map', 'mark', 'math',
    'meter', 'object', 'output', 'picture', 'progress', 'q', 'ruby', 's', 'samp',
    'select', 'small', 'span', 'strike', 'strong', 'sub', 'sup', 'svg',
    'textarea', 'time', 'tt', 'u', 'var', 'video', 'wbr'
}

_CHARSET_PATTERN = re.compile(r'charset\s*=\s*["\']?([\w.:-]+)', re.IGNORECASE)


def charset_from_content_type(content_type: Optional[str], default: str = 'UTF-8') -> str:
    """
    Extract the charset parameter of a content type.

    Args:
        content_type: A content type such as ``text/html;charset=ISO-8859-1``
        default: Charset used when the type carries none

    Returns:
        The charset name
    """
    if content_type:
        match = _CHARSET_PATTERN.search(content_type)
        if match:
            return match.group(1)
    return default


def decode_markup(content: Union[str, bytes], charset: str = 'UTF-8') -> str:
    """
    Turn markup into text, decoding bytes with ``charset`` as the first guess.
    """
    if isinstance(content, str):
        return content

    dammit = UnicodeDammit(content, [charset], is_html=True)
    if dammit.unicode_markup is None:
        raise ValueError(f"Unable to decode markup using charset {charset}")
    if dammit.original_encoding and dammit.original_encoding.lower() != charset.lower():
        logger.debug(f"Markup decoded as {dammit.original_encoding} instead of {charset}")
    return dammit.unicode_markup


def _is_inline(node: Node) -> bool:
    if node.node_type in (NodeType.TEXT_NODE, NodeType.CDATA_SECTION_NODE):
        return True
    return node.node_type == NodeType.ELEMENT_NODE and node.tag_name.lower() in INLINE_ELEMENTS


def _is_ignorable_whitespace(siblings: List[Node], index: int, inline_parent: bool) -> bool:
    node = siblings[index]
    if node.node_type != NodeType.TEXT_NODE or not node.is_whitespace():
        return False
    if index == 0 or index == len(siblings) - 1:
        return not inline_parent
    return not (_is_inline(siblings[index - 1]) or _is_inline(siblings[index + 1]))


class DocumentType(Node):
    """
    Document type declaration node.
    """

    def __init__(self, name: str, public_id: str = "", system_id: str = "",
                 owner_document: Optional['Document'] = None):
        super().__init__(NodeType.DOCUMENT_TYPE_NODE, owner_document)
        self.name = name
        self.public_id = public_id or ""
        self.system_id = system_id or ""
        self.node_name = name

    def clone_node(self, deep: bool = False) -> 'DocumentType':
        return DocumentType(self.name, self.public_id, self.system_id, self.owner_document)


class Document(Node):
    """
    Document node implementation for the DOM.

    A document owns every node created through its factory methods. Nodes of
    another document must be brought in with :meth:`import_node` first.
    """

    def __init__(self, charset: str = 'UTF-8', content_type: str = 'text/html'):
        """
        Initialize a new, empty Document.

        Args:
            charset: Character set used when decoding byte input
            content_type: ``text/html`` or an XML content type
        """
        super().__init__(NodeType.DOCUMENT_NODE)
        self.node_name = "#document"
        self.charset = charset
        self.content_type = content_type

        # Whitespace-only text is dropped on import when this is False
        self.preserve_white_space = True

    @property
    def is_html(self) -> bool:
        return 'xml' not in self.content_type.lower()

    @property
    def document_element(self) -> Optional[Element]:
        """The root element of the document."""
        for child in self.child_nodes:
            if child.node_type == NodeType.ELEMENT_NODE:
                return child
        return None

    @property
    def doctype(self) -> Optional[DocumentType]:
        """Get the document's DOCTYPE."""
        for child in self.child_nodes:
            if child.node_type == NodeType.DOCUMENT_TYPE_NODE:
                return child
        return None

    @property
    def head(self) -> Optional[Element]:
        return self._root_child('head')

    @property
    def body(self) -> Optional[Element]:
        return self._root_child('body')

    def _root_child(self, tag_name: str) -> Optional[Element]:
        root = self.document_element
        if root is None:
            return None
        for child in root.children:
            if child.tag_name.lower() == tag_name:
                return child
        return None

    def create_element(self, tag_name: str, namespace: Optional[str] = None) -> Element:
        """
        Create a new element with the specified tag name.

        Args:
            tag_name: The tag name of the element
            namespace: Optional namespace URI

        Returns:
            The new element
        """
        return Element(tag_name, namespace, self)

    def create_text_node(self, data: str) -> Text:
        return Text(data, self)

    def create_comment(self, data: str) -> Comment:
        return Comment(data, self)

    def create_cdata_section(self, data: str) -> CDATASection:
        return CDATASection(data, self)

    def create_document_fragment(self) -> Node:
        fragment = Node(NodeType.DOCUMENT_FRAGMENT_NODE, self)
        fragment.node_name = "#document-fragment"
        return fragment

    def create_fragment(self, html: str) -> Node:
        """
        Create a document fragment from an HTML string.

        Args:
            html: The HTML string

        Returns:
            A document fragment containing the parsed HTML
        """
        fragment = self.create_document_fragment()
        parser = html5lib.HTMLParser(tree=html5lib.getTreeBuilder("dom"), namespaceHTMLElements=False)
        parsed = parser.parseFragment(decode_markup(html, self.charset))
        for child in parsed.childNodes:
            self._convert_parsed_nodes(child, fragment)
        if not self.preserve_white_space:
            self.remove_ignorable_whitespace(fragment)
        return fragment

    def import_node(self, node: Node, deep: bool = False) -> Node:
        """
        Copy a node from any document into this one.

        The copy is owned by this document and has no parent. When
        ``preserve_white_space`` is off, a deep copy leaves out the
        whitespace-only text that :meth:`remove_ignorable_whitespace` drops.

        Args:
            node: The node to import
            deep: Whether to import the descendants as well

        Returns:
            The imported copy

        Raises:
            ValueError: If ``node`` is a document
        """
        if node.node_type == NodeType.DOCUMENT_NODE:
            raise ValueError("Document nodes cannot be imported")

        copy = self._copy_node(node, deep)
        if deep and not self.preserve_white_space:
            self.remove_ignorable_whitespace(copy)
        return copy

    def _copy_node(self, node: Node, deep: bool) -> Node:
        node_type = node.node_type

        if node_type == NodeType.ELEMENT_NODE:
            copy = self.create_element(node.tag_name, node.namespace_uri)
            for name, attr in node.attributes.items():
                copy.set_attribute(name, attr.value)
        elif node_type == NodeType.CDATA_SECTION_NODE:
            return self.create_cdata_section(node.data)
        elif node_type == NodeType.TEXT_NODE:
            return self.create_text_node(node.data)
        elif node_type == NodeType.COMMENT_NODE:
            return self.create_comment(node.data)
        elif node_type == NodeType.DOCUMENT_TYPE_NODE:
            return DocumentType(node.name, node.public_id, node.system_id, self)
        elif node_type == NodeType.DOCUMENT_FRAGMENT_NODE:
            copy = self.create_document_fragment()
        else:
            raise ValueError(f"Cannot import node of type {node_type.name}")

        if deep:
            for child in node.child_nodes:
                copy.append_child(self._copy_node(child, deep=True))

        return copy

    def remove_ignorable_whitespace(self, node: Node) -> None:
        """
        Drop whitespace-only text below ``node`` that does not separate content.

        Such text is ignorable between two block-level siblings, and as the
        first or last child of a block-level parent. Next to text or inline
        elements it is kept, as is everything inside pre, textarea, script
        and style.

        Args:
            node: Root of the subtree to clean up
        """
        pending = [node]
        while pending:
            current = pending.pop()
            if (current.node_type == NodeType.ELEMENT_NODE
                    and current.tag_name.lower() in WHITESPACE_SENSITIVE_ELEMENTS):
                continue

            children = current.child_nodes
            inline_parent = _is_inline(current)
            kept = []
            for index, child in enumerate(children):
                if _is_ignorable_whitespace(children, index, inline_parent):
                    child.parent_node = None
                else:
                    kept.append(child)

            current.child_nodes = kept
            pending.extend(child for child in kept if child.child_nodes)

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        """
        Get an element by its ID.
        """
        for node in self.iter_descendants():
            if node.node_type == NodeType.ELEMENT_NODE and node.get_attribute('id') == element_id:
                return node
        return None

    def get_elements_by_tag_name(self, tag_name: str) -> List[Element]:
        """
        Get all elements with the specified tag name, the root included.
        """
        root = self.document_element
        if root is None:
            return []
        matches = root.get_elements_by_tag_name(tag_name)
        if tag_name == '*' or root.tag_name.lower() == tag_name.lower():
            matches.insert(0, root)
        return matches

    def query_selector(self, selector: str) -> Optional[Element]:
        """
        Find the first element matching the specified selector.
        """
        result = self.query_selector_all(selector)
        return result[0] if result else None

    def query_selector_all(self, selector: str) -> List[Element]:
        """
        Find all elements matching the specified selector.

        Args:
            selector: CSS selector string

        Returns:
            List of matching elements in document order
        """
        return default_engine.select(selector, self)

    def parse_html(self, html_content: Union[str, bytes]) -> None:
        """
        Parse a complete HTML document into this (empty) document.

        Args:
            html_content: The HTML content to parse

        Raises:
            ValueError: If the content is None or cannot be decoded
        """
        if html_content is None:
            raise ValueError("Cannot parse None HTML content")

        html_content = decode_markup(html_content, self.charset)
        self._clear()

        logger.debug(f"Parsing HTML content (first 100 chars): {html_content[:100]}...")

        parser = html5lib.HTMLParser(tree=html5lib.getTreeBuilder("dom"), namespaceHTMLElements=False)
        parsed = parser.parse(html_content)
        self._convert_parsed_document(parsed)

        for error in parser.errors:
            logger.debug(f"HTML parse error: {error}")

    def parse_xml(self, xml_content: Union[str, bytes]) -> None:
        """
        Parse an XML document into this (empty) document.

        Args:
            xml_content: The XML content to parse

        Raises:
            ValueError: If the content is None or not well-formed
        """
        if xml_content is None:
            raise ValueError("Cannot parse None XML content")

        self._clear()
        try:
            parsed = minidom.parseString(xml_content)
        except ExpatError as e:
            raise ValueError(f"Error parsing XML: {e}") from e

        self._convert_parsed_document(parsed)

    def _clear(self) -> None:
        for child in list(self.child_nodes):
            self.remove_child(child)

    def _convert_parsed_document(self, parsed_doc) -> None:
        """
        Convert a parsed minidom document to our DOM structure.
        """
        for child in parsed_doc.childNodes:
            self._convert_parsed_nodes(child, self)
        if not self.preserve_white_space:
            self.remove_ignorable_whitespace(self)

        if self.document_element is None:
            logger.warning("No document element found in parsed markup")

    def _convert_parsed_nodes(self, node, parent: Node) -> None:
        """
        Recursively convert parsed minidom nodes to our DOM structure.

        Args:
            node: The parsed node
            parent: The parent node in our DOM structure
        """
        node_type = node.nodeType

        if node_type == node.ELEMENT_NODE:
            element = self._convert_element(node)
            parent.append_child(element)
            for child in node.childNodes:
                self._convert_parsed_nodes(child, element)
        elif node_type == node.TEXT_NODE:
            parent.append_child(self.create_text_node(node.nodeValue))
        elif node_type == node.CDATA_SECTION_NODE:
            parent.append_child(self.create_cdata_section(node.nodeValue))
        elif node_type == node.COMMENT_NODE:
            parent.append_child(self.create_comment(node.nodeValue))
        elif node_type == node.DOCUMENT_TYPE_NODE:
            parent.append_child(DocumentType(node.name, node.publicId, node.systemId, self))
        else:
            logger.debug(f"Skipping parsed node of type {node_type}")

    def _convert_element(self, element) -> Element:
        """
        Convert a parsed minidom element to our Element implementation.
        """
        namespace = element.namespaceURI
        if namespace == XHTML_NAMESPACE:
            namespace = None

        new_element = self.create_element(element.tagName, namespace)
        for name, value in element.attributes.items():
            new_element.set_attribute(name, value)
        return new_element

    def save_html(self, node: Optional[Node] = None) -> str:
        """
        Serialize a node, or the whole document, as HTML.
        """
        if node is not None:
            return serialize(node)
        return self._save(xml=False)

    def save_xml(self, node: Optional[Node] = None) -> str:
        """
        Serialize a node, or the whole document, as XML.
        """
        if node is not None:
            return serialize(node, xml=True)
        return '<?xml version="1.0" encoding="{}"?>\n'.format(self.charset) + self._save(xml=True)

    def _save(self, xml: bool) -> str:
        parts = []
        for child in self.child_nodes:
            parts.append(serialize(child, xml=xml))
            if child.node_type in (NodeType.DOCUMENT_TYPE_NODE, NodeType.ELEMENT_NODE):
                parts.append("\n")
        return "".join(parts)
