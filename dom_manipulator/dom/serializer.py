"""
Markup serialization for DOM trees.
Escaping is delegated to BeautifulSoup's entity substitution helpers.
"""

from typing import List

from bs4.dammit import EntitySubstitution

from .node import Node, NodeType

# Set of HTML5 void elements (no end tag)
HTML5_VOID_ELEMENTS = {
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr'
}

# Elements whose text content is emitted without escaping
HTML5_RAW_TEXT_ELEMENTS = {'script', 'style'}


def serialize(node: Node, xml: bool = False) -> str:
    """
    Serialize a node and its descendants.

    Args:
        node: The node to serialize
        xml: Emit XML (self-closing empty elements, CDATA sections)
            instead of HTML

    Returns:
        The markup string
    """
    parts: List[str] = []
    _serialize_node(node, parts, xml)
    return "".join(parts)


def serialize_children(node: Node, xml: bool = False) -> str:
    """Serialize the children of a node, without the node itself."""
    parts: List[str] = []
    for child in node.child_nodes:
        _serialize_node(child, parts, xml)
    return "".join(parts)


def format_attributes(element: 'Element') -> str:
    """
    Format element attributes as a markup attribute string.

    Returns:
        The attributes, each preceded by a space
    """
    return "".join(
        f" {name}={EntitySubstitution.quoted_attribute_value(EntitySubstitution.substitute_xml(attr.value))}"
        for name, attr in element.attributes.items()
    )


def _serialize_node(node: Node, parts: List[str], xml: bool) -> None:
    node_type = node.node_type

    if node_type == NodeType.ELEMENT_NODE:
        _serialize_element(node, parts, xml)
    elif node_type == NodeType.CDATA_SECTION_NODE:
        if xml:
            parts.append(f"<![CDATA[{node.data}]]>")
        else:
            parts.append(EntitySubstitution.substitute_xml(node.data))
    elif node_type == NodeType.TEXT_NODE:
        parent = node.parent_node
        if (not xml and parent is not None and parent.node_type == NodeType.ELEMENT_NODE
                and parent.tag_name.lower() in HTML5_RAW_TEXT_ELEMENTS):
            parts.append(node.data)
        else:
            parts.append(EntitySubstitution.substitute_xml(node.data))
    elif node_type == NodeType.COMMENT_NODE:
        parts.append(f"<!--{node.data}-->")
    elif node_type == NodeType.DOCUMENT_TYPE_NODE:
        parts.append(f"<!DOCTYPE {node.name}>")
    else:
        # Documents and fragments
        for child in node.child_nodes:
            _serialize_node(child, parts, xml)


def _serialize_element(element: 'Element', parts: List[str], xml: bool) -> None:
    tag = element.tag_name
    parts.append(f"<{tag}{format_attributes(element)}")

    if xml:
        if not element.child_nodes:
            parts.append("/>")
            return
    elif tag.lower() in HTML5_VOID_ELEMENTS:
        parts.append(">")
        return

    parts.append(">")
    for child in element.child_nodes:
        _serialize_node(child, parts, xml)
    parts.append(f"</{tag}>")
