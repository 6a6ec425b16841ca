"""
jQuery-like manipulation of DOM trees.

A :class:`Manipulator` is an ordered selection of nodes, possibly from several
documents, with a fluent API for inserting, wrapping, cloning and querying
them. Based on the htmlpagedom API by Christoph Singer.
"""

import logging
import re
from typing import Any, Callable, Iterable, Iterator, List, Optional, Union

from .adoption import import_new_node, owner_document_of
from .dom import CDATASection, Comment, Document, Element, Node, NodeType
from .dom.document import charset_from_content_type
from .dom.selector_engine import default_engine
from .dom.serializer import serialize, serialize_children
from .exceptions import (
    DifferentParentsError,
    DocumentNotFoundError,
    EmptySelectionError,
    NoParentElementError,
)
from .util import css_dict_to_string, css_string_to_dict, get_body_node_from_html_fragment

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'text/html;charset=UTF-8'
FRAGMENT_ROOT_TAG = '__tmp__'

_HTML_TAG = re.compile(r'<html\b[^>]*>', re.IGNORECASE)
_BYTES_HTML_TAG = re.compile(rb'<html\b[^>]*>', re.IGNORECASE)

Content = Union[None, str, bytes, Node, Iterable[Node], 'Manipulator']


def _require_parent(node: Node) -> Node:
    if node.parent_node is None:
        raise NoParentElementError(f"{node!r} does not have a parent node")
    return node.parent_node


def _require_parents(nodes: Iterable[Node]) -> None:
    """Check every node has a parent before any of them is moved."""
    for node in nodes:
        _require_parent(node)


def _innermost_element(node: Node) -> Node:
    """Follow first element children down to the deepest one."""
    while True:
        child = node.first_element_child
        if child is None:
            return node
        node = child


class Manipulator:
    """
    An ordered, duplicate-free selection of DOM nodes.

    Content accepted wherever a method takes ``content`` or ``element``:
    markup strings (fragments or full documents), nodes, iterables of nodes
    and other selections.
    """

    def __init__(self, content: Content = None):
        self._nodes: List[Node] = []
        self._node_ids = set()
        self.add(content)

    @classmethod
    def create(cls, content: Content) -> 'Manipulator':
        """
        Create a selection from content, passing selections through unchanged.
        """
        return content if isinstance(content, cls) else cls(content)

    # Selection bookkeeping

    def add(self, content: Content) -> None:
        """
        Add nodes, markup or another selection to this selection
        (but not to the DOM of an already attached node).
        """
        if content is None:
            return
        if isinstance(content, Manipulator):
            self.add_nodes(content)
        elif isinstance(content, Node):
            self.add_node(content)
        elif isinstance(content, (str, bytes)):
            self.add_content(content)
        else:
            self.add_nodes(content)

    def add_node(self, node: Optional[Node]) -> None:
        """
        Add a single node; a document contributes its document element.
        """
        if node is None:
            return
        if node.node_type == NodeType.DOCUMENT_NODE:
            node = node.document_element
            if node is None:
                return
        if id(node) in self._node_ids:
            return
        self._node_ids.add(id(node))
        self._nodes.append(node)

    def add_nodes(self, nodes: Iterable[Node]) -> None:
        for node in list(nodes):
            self.add_node(node)

    def add_document(self, document: Document) -> None:
        self.add_node(document.document_element)

    def add_content(self, content: Union[str, bytes], content_type: Optional[str] = None) -> None:
        """
        Add HTML or XML markup.

        HTML without an ``<html>`` tag is treated as a fragment rather than
        a complete document.

        Args:
            content: The markup to parse
            content_type: Content type of the markup, ``text/html;charset=UTF-8``
                when omitted
        """
        if not content_type:
            content_type = DEFAULT_CONTENT_TYPE
        charset = charset_from_content_type(content_type)
        content_type = content_type.lower()

        html_tag = _BYTES_HTML_TAG if isinstance(content, bytes) else _HTML_TAG
        if content_type.startswith('text/html') and not html_tag.search(content):
            logger.debug(f"Adding HTML fragment ({charset})")
            self.add_html_fragment(content, charset)
        elif 'xml' in content_type:
            logger.debug(f"Adding XML document ({content_type})")
            self.add_xml_content(content, charset)
        else:
            logger.debug(f"Adding HTML document ({content_type})")
            self.add_html_content(content, charset)

    def add_html_content(self, content: Union[str, bytes], charset: str = 'UTF-8') -> None:
        """Parse a complete HTML document and add its root element."""
        document = Document(charset)
        document.parse_html(content)
        self.add_document(document)

    def add_xml_content(self, content: Union[str, bytes], charset: str = 'UTF-8') -> None:
        """Parse an XML document and add its root element."""
        document = Document(charset, 'application/xml')
        document.parse_xml(content)
        self.add_document(document)

    def add_html_fragment(self, content: Union[str, bytes], charset: str = 'UTF-8') -> None:
        """
        Parse an HTML fragment and add its top-level nodes.

        The nodes live under a synthetic root element in a document of their
        own, so operations needing a parent work on them too.
        """
        document = Document(charset)
        document.preserve_white_space = False
        root = document.append_child(document.create_element(FRAGMENT_ROOT_TAG))

        body = document.import_node(get_body_node_from_html_fragment(content, charset), deep=True)
        for child in list(body.child_nodes):
            self.add_node(root.append_child(child))

    def clear(self) -> None:
        """Remove every node from the selection (the DOM is untouched)."""
        self._nodes = []
        self._node_ids = set()

    # Sequence protocol

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes))

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    def __bool__(self) -> bool:
        return bool(self._nodes)

    def __repr__(self) -> str:
        return f"<Manipulator {self._nodes!r}>"

    def count(self) -> int:
        return len(self._nodes)

    def get_node(self, index: int) -> Optional[Node]:
        """The node at ``index``, or None when out of range."""
        if -len(self._nodes) <= index < len(self._nodes):
            return self._nodes[index]
        return None

    def eq(self, index: int) -> 'Manipulator':
        return type(self)(self.get_node(index))

    def first(self) -> 'Manipulator':
        return self.eq(0)

    def last(self) -> 'Manipulator':
        return self.eq(-1)

    def slice(self, start: int = 0, end: Optional[int] = None) -> 'Manipulator':
        return type(self)(self._nodes[start:end])

    def each(self, callback: Callable[['Manipulator', int], Any]) -> List[Any]:
        """
        Call ``callback(selection, index)`` for every node.

        Returns:
            The callback results
        """
        return [callback(type(self)(node), index) for index, node in enumerate(self._nodes)]

    def reduce(self, callback: Callable[['Manipulator', int], Any]) -> 'Manipulator':
        """Keep the nodes for which ``callback`` does not return False."""
        return type(self)([node for index, node in enumerate(self._nodes)
                           if callback(type(self)(node), index) is not False])

    # Traversal

    def filter(self, selector: str) -> 'Manipulator':
        """Nodes of this selection matching a CSS selector."""
        return type(self)([node for node in self._nodes if default_engine.matches(node, selector)])

    def find(self, selector: str) -> 'Manipulator':
        """Descendants of the selected nodes matching a CSS selector."""
        result = type(self)()
        for node in self._nodes:
            result.add_nodes(default_engine.select(selector, node))
        return result

    def children(self, selector: Optional[str] = None) -> 'Manipulator':
        result = type(self)()
        for node in self._nodes:
            result.add_nodes(node.children)
        return result.filter(selector) if selector else result

    def parents(self) -> 'Manipulator':
        """Element ancestors of the first node, closest first."""
        result = type(self)()
        node = self._first_node().parent_node
        while node is not None and node.node_type == NodeType.ELEMENT_NODE:
            result.add_node(node)
            node = node.parent_node
        return result

    def siblings(self) -> 'Manipulator':
        node = self._first_node()
        if node.parent_node is None:
            return type(self)()
        return type(self)([child for child in node.parent_node.children if child is not node])

    def next_all(self) -> 'Manipulator':
        result = type(self)()
        node = self._first_node().next_element_sibling
        while node is not None:
            result.add_node(node)
            node = node.next_element_sibling
        return result

    def previous_all(self) -> 'Manipulator':
        """Preceding element siblings of the first node, closest first."""
        result = type(self)()
        node = self._first_node().previous_element_sibling
        while node is not None:
            result.add_node(node)
            node = node.previous_element_sibling
        return result

    def closest(self, selector: str) -> 'Manipulator':
        result = type(self)()
        for node in self._nodes:
            if node.node_type == NodeType.ELEMENT_NODE:
                result.add_node(node.closest(selector))
        return result

    def _first_node(self) -> Node:
        if not self._nodes:
            raise EmptySelectionError("The current node list is empty.")
        return self._nodes[0]

    # Reading values

    def node_name(self) -> str:
        return self._first_node().node_name

    def attr(self, name: str) -> Optional[str]:
        """Attribute value of the first node, None when it has none."""
        node = self._first_node()
        if node.node_type != NodeType.ELEMENT_NODE:
            return None
        return node.get_attribute(name)

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attr(name)

    def text(self, default: Optional[str] = None) -> str:
        """Text content of the first node."""
        if not self._nodes and default is not None:
            return default
        return self._first_node().text_content

    def html(self, default: Optional[str] = None) -> str:
        """Markup of the first node's children."""
        if not self._nodes and default is not None:
            return default
        node = self._first_node()
        return serialize_children(node, xml=self._is_xml(node))

    def get_inner_html(self) -> str:
        """Alias for :meth:`html`, named after :meth:`set_inner_html`."""
        return self.html()

    def outer_html(self) -> str:
        """Markup of the first node itself."""
        node = self._first_node()
        return serialize(node, xml=self._is_xml(node))

    def get_combined_text(self) -> str:
        """Combined text of every node, descendants included."""
        return "".join(node.text_content for node in self._nodes)

    @staticmethod
    def _is_xml(node: Node) -> bool:
        document = owner_document_of(node)
        return document is not None and not document.is_html

    # Factories

    def create_element(self, name: str, children: Content = '',
                       attributes: Optional[dict] = None) -> Element:
        """
        Create an element in the document of the first node.

        Args:
            name: Tag name
            children: Content appended to the new element
            attributes: Attributes to set on it
        """
        element = self.get_dom_document().create_element(name)
        if children:
            self.create(element).append(children)

        for key, value in (attributes or {}).items():
            element.set_attribute(key, value)

        return element

    def create_comment(self, comment: str) -> Comment:
        return self.get_dom_document().create_comment(comment)

    def create_cdata(self, contents: str) -> CDATASection:
        return self.get_dom_document().create_cdata_section(contents)

    # Inserting content around each selected node

    def after(self, content: Content) -> 'Manipulator':
        """
        Insert content after each node of the selection.
        """
        content = self.create(content)

        _require_parents(self._nodes)
        new_nodes = []
        for index, node in enumerate(self._nodes):
            parent = _require_parent(node)
            reference = node.next_sibling
            for new_node in content:
                new_node = import_new_node(new_node, node, index > 0)
                parent.insert_before(new_node, reference)
                new_nodes.append(new_node)

        content.clear()
        content.add_nodes(new_nodes)

        return self

    def before(self, content: Content) -> 'Manipulator':
        """
        Insert content before each node of the selection.
        """
        content = self.create(content)

        _require_parents(self._nodes)
        new_nodes = []
        for index, node in enumerate(self._nodes):
            parent = _require_parent(node)
            for new_node in content:
                if new_node is not node:
                    new_node = import_new_node(new_node, node, index > 0)
                    parent.insert_before(new_node, node)
                    new_nodes.append(new_node)

        content.clear()
        content.add_nodes(new_nodes)

        return self

    def append(self, content: Content) -> 'Manipulator':
        """
        Insert content as the last children of each node of the selection.
        """
        content = self.create(content)

        new_nodes = []
        for index, node in enumerate(self._nodes):
            for new_node in content:
                new_node = import_new_node(new_node, node, index > 0)
                node.append_child(new_node)
                new_nodes.append(new_node)

        content.clear()
        content.add_nodes(new_nodes)

        return self

    def prepend(self, content: Content) -> 'Manipulator':
        """
        Insert content as the first children of each node of the selection.
        """
        content = self.create(content)

        new_nodes = []
        for index, node in enumerate(self._nodes):
            reference = node.first_child
            for new_node in content:
                new_node = import_new_node(new_node, node, index > 0)
                if new_node is not reference:
                    node.insert_before(new_node, reference)
                new_nodes.append(new_node)

        content.clear()
        content.add_nodes(new_nodes)

        return self

    def replace_with(self, content: Content) -> 'Manipulator':
        """
        Replace each node of the selection with content.

        Returns:
            This selection, now holding the nodes that were replaced
        """
        content = self.create(content)

        _require_parents(self._nodes)
        new_nodes = []
        for index, node in enumerate(self._nodes):
            parent = _require_parent(node)
            reference = node.next_sibling
            for position, new_node in enumerate(content):
                new_node = import_new_node(new_node, node, index > 0)
                if position == 0:
                    parent.replace_child(new_node, node)
                else:
                    parent.insert_before(new_node, reference)
                new_nodes.append(new_node)

        content.clear()
        content.add_nodes(new_nodes)

        return self

    # Inserting the selection around each target

    def append_to(self, element: Content) -> 'Manipulator':
        """
        Insert every node of the selection at the end of each target.

        Returns:
            A new selection of the inserted nodes
        """
        targets = self.create(element)

        new_nodes = []
        for index, target in enumerate(targets):
            for new_node in self:
                if new_node is not target:
                    new_node = import_new_node(new_node, target, index > 0)
                    target.append_child(new_node)
                new_nodes.append(new_node)

        return type(self)(new_nodes)

    def prepend_to(self, element: Content) -> 'Manipulator':
        """
        Insert every node of the selection at the beginning of each target.

        Returns:
            A new selection of the inserted nodes
        """
        targets = self.create(element)

        new_nodes = []
        for index, target in enumerate(targets):
            reference = target.first_child
            for new_node in self:
                new_node = import_new_node(new_node, target, index > 0)
                if new_node is not target:
                    target.insert_before(new_node, reference)
                new_nodes.append(new_node)

        return type(self)(new_nodes)

    def insert_after(self, element: Content) -> 'Manipulator':
        """
        Insert every node of the selection after each target.

        Returns:
            A new selection of the inserted nodes
        """
        targets = self.create(element)

        _require_parents(targets)
        new_nodes = []
        for index, target in enumerate(targets):
            parent = _require_parent(target)
            reference = target.next_sibling
            for new_node in self:
                new_node = import_new_node(new_node, target, index > 0)
                parent.insert_before(new_node, reference)
                new_nodes.append(new_node)

        return type(self)(new_nodes)

    def insert_before(self, element: Content) -> 'Manipulator':
        """
        Insert every node of the selection before each target.

        Returns:
            A new selection of the inserted nodes
        """
        targets = self.create(element)

        _require_parents(targets)
        new_nodes = []
        for index, target in enumerate(targets):
            parent = _require_parent(target)
            for new_node in self:
                new_node = import_new_node(new_node, target, index > 0)
                if new_node is not target:
                    parent.insert_before(new_node, target)
                new_nodes.append(new_node)

        return type(self)(new_nodes)

    def replace_all(self, element: Content) -> 'Manipulator':
        """
        Replace each target with the nodes of the selection.

        Returns:
            A new selection of the inserted nodes
        """
        targets = self.create(element)

        _require_parents(targets)
        new_nodes = []
        for index, target in enumerate(targets):
            parent = _require_parent(target)
            reference = target.next_sibling
            for position, new_node in enumerate(self):
                new_node = import_new_node(new_node, target, index > 0)
                if position == 0:
                    parent.replace_child(new_node, target)
                else:
                    parent.insert_before(new_node, reference)
                new_nodes.append(new_node)

        return type(self)(new_nodes)

    # Wrapping

    def _wrapper_source(self, content: 'Manipulator') -> Node:
        source = content.get_node(0)
        if source is None:
            raise EmptySelectionError("Wrapping content is empty")
        return source

    def wrap(self, wrapping_element: Content) -> 'Manipulator':
        """
        Wrap a copy of the first node of ``wrapping_element`` around each node.

        The wrapping structure must have a single root, e.g.
        ``<div><div></div></div>`` works but ``<div></div><div></div>`` does
        not. The node ends up in the innermost first element of the wrapper.
        """
        content = self.create(wrapping_element)
        source = self._wrapper_source(content)

        _require_parents(self._nodes)

        # Copies are taken before anything moves into the first wrapper
        wrappers = [import_new_node(source, node, index > 0) for index, node in enumerate(self._nodes)]

        new_nodes = []
        for node, wrapper in zip(self._nodes, wrappers):
            parent = _require_parent(node)
            parent.replace_child(wrapper, node)
            _innermost_element(wrapper).append_child(node)
            new_nodes.append(wrapper)

        content.clear()
        content.add_nodes(new_nodes)

        return self

    def wrap_all(self, content: Content) -> 'Manipulator':
        """
        Wrap one copy of the first node of ``content`` around all nodes.

        Raises:
            DifferentParentsError: If the nodes do not share a parent
        """
        content = self.create(content)
        first = self._first_node()
        parent = _require_parent(first)

        for node in self._nodes:
            if node.parent_node is not parent:
                raise DifferentParentsError(
                    "Nodes to be wrapped with wrap_all() must all have the same parent"
                )

        wrapper = import_new_node(self._wrapper_source(content), parent)
        parent.insert_before(wrapper, first)

        content.clear()
        content.add_node(wrapper)

        innermost = _innermost_element(wrapper)
        for node in self._nodes:
            innermost.append_child(node)

        return self

    def wrap_inner(self, content: Content) -> 'Manipulator':
        """
        Wrap a copy of the first node of ``content`` around the children of
        each node. Nodes without children get the wrapper appended.
        """
        content = self.create(content)
        source = self._wrapper_source(content)

        wrappers = [import_new_node(source, node, index > 0) for index, node in enumerate(self._nodes)]

        new_nodes = []
        for node, wrapper in zip(self._nodes, wrappers):
            children = list(node.child_nodes)
            node.insert_before(wrapper, node.first_child)
            innermost = _innermost_element(wrapper)
            for child in children:
                innermost.append_child(child)
            new_nodes.append(wrapper)

        content.clear()
        content.add_nodes(new_nodes)

        return self

    def unwrap(self) -> 'Manipulator':
        """
        Remove the parents of the selected nodes, leaving the nodes in their place.
        """
        parents = type(self)()
        for node in self._nodes:
            parents.add_node(_require_parent(node))

        parents.unwrap_inner()

        return self

    def unwrap_inner(self) -> None:
        """
        Remove the selected nodes, promoting their children to their place.

        Raises:
            NoParentElementError: If a node has no parent element
        """
        for node in self._nodes:
            parent = node.parent_node
            if parent is None or parent.node_type != NodeType.ELEMENT_NODE:
                raise NoParentElementError(f"{node!r} does not have a parent element")

            for child in list(node.child_nodes):
                parent.insert_before(child, node)

            parent.remove_child(node)

    # Other mutations

    def remove(self) -> None:
        """
        Remove the selected nodes from the DOM and empty the selection.
        """
        for node in self._nodes:
            parent = node.parent_node
            if parent is not None and parent.node_type == NodeType.ELEMENT_NODE:
                parent.remove_child(node)
        self.clear()

    def make_empty(self) -> 'Manipulator':
        """Remove all child nodes and text from every selected node."""
        for node in self._nodes:
            node.text_content = ''
        return self

    def make_clone(self) -> 'Manipulator':
        """A new selection holding deep copies of the selected nodes."""
        return type(self)([node.clone_node(deep=True) for node in self._nodes])

    def __copy__(self) -> 'Manipulator':
        return self.make_clone()

    def set_text(self, text: str) -> 'Manipulator':
        """Replace the content of every selected node with text."""
        for node in self._nodes:
            node.text_content = text
        return self

    def set_inner_html(self, content: Content) -> 'Manipulator':
        """
        Replace the children of every selected node with content.
        """
        content = self.create(content)

        for index, node in enumerate(self._nodes):
            node.text_content = ''
            for new_node in content:
                node.append_child(import_new_node(new_node, node, index > 0))

        return self

    def set_attribute(self, name: str, value: str) -> 'Manipulator':
        for node in self._elements():
            node.set_attribute(name, value)
        return self

    def remove_attribute(self, name: str) -> 'Manipulator':
        for node in self._elements():
            node.remove_attribute(name)
        return self

    def _elements(self) -> List[Element]:
        return [node for node in self._nodes if node.node_type == NodeType.ELEMENT_NODE]

    # Classes

    def has_class(self, name: str) -> bool:
        """Whether any selected element has the class."""
        return any(name in node.class_name.split() for node in self._elements())

    def add_class(self, name: str) -> 'Manipulator':
        """Add one or more space-separated classes to each element."""
        names = name.split()
        for node in self._elements():
            classes = node.class_name.split()
            missing = [class_name for class_name in names if class_name not in classes]
            if missing:
                node.set_attribute('class', " ".join(classes + missing))
        return self

    def remove_class(self, name: str) -> 'Manipulator':
        """
        Remove one or more space-separated classes from each element.
        An emptied class attribute is removed.
        """
        names = set(name.split())
        for node in self._elements():
            if not node.has_attribute('class'):
                continue
            classes = [class_name for class_name in node.class_name.split() if class_name not in names]
            if classes:
                node.set_attribute('class', " ".join(classes))
            else:
                node.remove_attribute('class')
        return self

    def toggle_class(self, class_name: str) -> 'Manipulator':
        """
        Add or remove each space-separated class depending on its presence.

        Added classes go last and an emptied attribute is removed, so
        toggling twice gives back the original attribute only when the class
        starts absent. A present class comes back at the end of the list, and
        ``class=""`` comes back as no attribute at all.
        """
        for node in self._nodes:
            selection = type(self)(node)
            for name in class_name.split():
                if selection.has_class(name):
                    selection.remove_class(name)
                else:
                    selection.add_class(name)
        return self

    # Inline styles

    def get_style(self, key: str) -> Optional[str]:
        """CSS property of the first element's inline style."""
        return css_string_to_dict(self.attr('style')).get(key)

    def set_style(self, key: str, value: str) -> 'Manipulator':
        """
        Set a CSS property in every element's inline style. An empty value
        removes the property, and an emptied style attribute is removed.
        """
        for node in self._elements():
            styles = css_string_to_dict(node.get_attribute('style'))
            if value != '':
                styles[key] = value
            else:
                styles.pop(key, None)

            if styles:
                node.set_attribute('style', css_dict_to_string(styles))
            else:
                node.remove_attribute('style')
        return self

    # Documents and rendering

    def is_html_document(self) -> bool:
        """Whether the first node is the root of a complete HTML document."""
        node = self.get_node(0)
        return (node is not None
                and node.node_type == NodeType.ELEMENT_NODE
                and node.owner_document is not None
                and node.owner_document.document_element is node
                and node.node_name.lower() == 'html')

    def get_dom_document(self) -> Document:
        """
        The owner document of the first node.

        Raises:
            DocumentNotFoundError: If the selection is empty or does not
                start with an element that belongs to a document
        """
        node = self.get_node(0)
        if node is not None and node.node_type == NodeType.ELEMENT_NODE and node.owner_document is not None:
            return node.owner_document

        raise DocumentNotFoundError("Unable to get DOM document")

    def merge_to_string(self) -> str:
        """
        Markup of all selected nodes. A complete HTML document is rendered
        whole, doctype included.
        """
        if self.is_html_document():
            return self.get_dom_document().save_html()
        return "".join(serialize(node, xml=self._is_xml(node)) for node in self._nodes)

    def __str__(self) -> str:
        return self.outer_html() if self._nodes else ''
