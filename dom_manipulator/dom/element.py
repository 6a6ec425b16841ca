"""
Element implementation for the DOM.
This module implements the DOM Element interface used by the manipulator.
"""

import logging
from typing import Dict, List, Optional, Set

from .node import Node, NodeType
from .attr import Attr

logger = logging.getLogger(__name__)


class Element(Node):
    """
    Element node implementation for the DOM.

    Attributes are kept in insertion order so that serialization is stable.
    """

    def __init__(self,
                 tag_name: str,
                 namespace: Optional[str] = None,
                 owner_document: Optional['Document'] = None):
        """
        Initialize a new Element.

        Args:
            tag_name: Name of the element tag (e.g., "div", "span")
            namespace: Optional namespace URI
            owner_document: The document that owns this element
        """
        super().__init__(NodeType.ELEMENT_NODE, owner_document)

        self.tag_name = tag_name
        self.namespace_uri = namespace
        self.node_name = tag_name

        self.attributes: Dict[str, Attr] = {}

    def __repr__(self) -> str:
        return f"<Element {self.tag_name}>"

    @property
    def local_name(self) -> str:
        return self.tag_name.split(':', 1)[-1]

    @property
    def id(self) -> str:
        """Get or set the ID of the element."""
        return self.get_attribute('id') or ""

    @id.setter
    def id(self, value: str) -> None:
        self.set_attribute('id', value)

    @property
    def class_name(self) -> str:
        """Get or set the class attribute of the element."""
        return self.get_attribute('class') or ""

    @class_name.setter
    def class_name(self, value: str) -> None:
        self.set_attribute('class', value)

    @property
    def class_list(self) -> Set[str]:
        """Get the set of classes applied to this element."""
        return set(self.class_name.split())

    @property
    def style(self) -> Dict[str, str]:
        """Get the inline style of the element as a dict (a copy)."""
        from ..util import css_string_to_dict
        return css_string_to_dict(self.get_attribute('style'))

    @property
    def inner_html(self) -> str:
        """Get or set the markup of the element's children."""
        from .serializer import serialize_children
        return serialize_children(self)

    @inner_html.setter
    def inner_html(self, html: str) -> None:
        for child in list(self.child_nodes):
            self.remove_child(child)

        if self.owner_document is not None and html:
            fragment = self.owner_document.create_fragment(html)
            for child in list(fragment.child_nodes):
                self.append_child(child)

    @property
    def outer_html(self) -> str:
        """Get the markup of the element, including the element itself."""
        from .serializer import serialize
        return serialize(self)

    def has_attribute(self, name: str) -> bool:
        """
        Check if the element has the specified attribute.

        Args:
            name: The attribute name

        Returns:
            True if the attribute exists, False otherwise
        """
        return name in self.attributes

    def get_attribute(self, name: str) -> Optional[str]:
        """
        Get the value of an attribute.

        Args:
            name: The attribute name

        Returns:
            The attribute value, or None if the attribute doesn't exist
        """
        return self.attributes[name].value if name in self.attributes else None

    def get_attribute_node(self, name: str) -> Optional[Attr]:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        """
        Set an attribute value.

        Args:
            name: The attribute name
            value: The attribute value
        """
        value = "" if value is None else str(value)
        if name in self.attributes:
            self.attributes[name].value = value
        else:
            self.attributes[name] = Attr(name, value, self)

    def remove_attribute(self, name: str) -> None:
        """
        Remove an attribute. Missing attributes are ignored.

        Args:
            name: The attribute name
        """
        attr = self.attributes.pop(name, None)
        if attr is not None:
            attr.owner_element = None

    def has_attributes(self) -> bool:
        """Check if the element has any attributes."""
        return bool(self.attributes)

    def get_elements_by_tag_name(self, tag_name: str) -> List['Element']:
        """
        Get all descendant elements with the given tag name.

        Args:
            tag_name: The tag name to match (case-insensitive), "*" matches all

        Returns:
            List of matching elements in document order
        """
        tag_name_lower = tag_name.lower()
        match_all = tag_name == "*"
        return [node for node in self.iter_descendants()
                if node.node_type == NodeType.ELEMENT_NODE
                and (match_all or node.tag_name.lower() == tag_name_lower)]

    def get_elements_by_class_name(self, class_name: str) -> List['Element']:
        """
        Get all descendant elements with the given class name.
        """
        return [node for node in self.iter_descendants()
                if node.node_type == NodeType.ELEMENT_NODE and class_name in node.class_list]

    def matches(self, selector: str) -> bool:
        """
        Check if the element matches a CSS selector.

        Args:
            selector: The CSS selector string

        Returns:
            True if the element matches the selector, False otherwise
        """
        from .selector_engine import default_engine
        return default_engine.matches(self, selector)

    def closest(self, selector: str) -> Optional['Element']:
        """
        Find the closest ancestor element (or self) that matches a selector.

        Args:
            selector: The CSS selector string

        Returns:
            The matching element or None if no match is found
        """
        current: Optional[Node] = self
        while current is not None and current.node_type == NodeType.ELEMENT_NODE:
            if current.matches(selector):
                return current
            current = current.parent_node
        return None

    def query_selector(self, selector: str) -> Optional['Element']:
        """
        Find the first descendant element that matches a selector.
        """
        result = self.query_selector_all(selector)
        return result[0] if result else None

    def query_selector_all(self, selector: str) -> List['Element']:
        """
        Find all descendant elements that match a selector.

        Args:
            selector: The CSS selector string

        Returns:
            List of matching elements in document order
        """
        from .selector_engine import default_engine
        return default_engine.select(selector, self)

    def clone_node(self, deep: bool = False) -> 'Element':
        """
        Clone this element.

        Args:
            deep: Whether to clone child nodes as well

        Returns:
            The cloned element, owned by the same document
        """
        clone = type(self)(self.tag_name, self.namespace_uri, self.owner_document)

        for name, attr in self.attributes.items():
            clone.set_attribute(name, attr.value)

        if deep:
            for child in self.child_nodes:
                clone.append_child(child.clone_node(deep=True))

        return clone
