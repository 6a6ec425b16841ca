"""
Node implementation for the DOM.
This module implements the core of the DOM Node interface used by the manipulator.
"""

from enum import IntEnum
from typing import List, Optional, Iterator


class NodeType(IntEnum):
    """Node type constants of the W3C DOM."""
    ELEMENT_NODE = 1
    ATTRIBUTE_NODE = 2
    TEXT_NODE = 3
    CDATA_SECTION_NODE = 4
    PROCESSING_INSTRUCTION_NODE = 7
    COMMENT_NODE = 8
    DOCUMENT_NODE = 9
    DOCUMENT_TYPE_NODE = 10
    DOCUMENT_FRAGMENT_NODE = 11


# Node types whose content counts towards text_content
TEXT_NODE_TYPES = (NodeType.TEXT_NODE, NodeType.CDATA_SECTION_NODE)


class Node:
    """
    Base Node implementation for the DOM.

    Sibling and first/last child references are derived from ``child_nodes``
    so the tree only ever has one source of truth.
    """

    def __init__(self, node_type: NodeType, owner_document: Optional['Document'] = None):
        """
        Initialize a new Node.

        Args:
            node_type: The type of this node
            owner_document: The document that owns this node
        """
        self.node_type = node_type
        self.owner_document = owner_document

        self.parent_node: Optional['Node'] = None
        self.child_nodes: List['Node'] = []

        # Position in the parent's child_nodes as of the last lookup
        self._parent_index = 0

        self.node_name: str = "#node"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.node_name}>"

    @property
    def node_value(self) -> Optional[str]:
        """Value of the node, None for elements and documents."""
        return None

    @property
    def first_child(self) -> Optional['Node']:
        return self.child_nodes[0] if self.child_nodes else None

    @property
    def last_child(self) -> Optional['Node']:
        return self.child_nodes[-1] if self.child_nodes else None

    def _index_in_parent(self) -> int:
        siblings = self.parent_node.child_nodes
        index = self._parent_index
        if index < len(siblings) and siblings[index] is self:
            return index

        # The child list changed since the last lookup, renumber every sibling
        for index, sibling in enumerate(siblings):
            sibling._parent_index = index
        if self._parent_index < len(siblings) and siblings[self._parent_index] is self:
            return self._parent_index
        raise ValueError("Node not found in its parent's child nodes")

    @property
    def next_sibling(self) -> Optional['Node']:
        if self.parent_node is None:
            return None
        siblings = self.parent_node.child_nodes
        index = self._index_in_parent() + 1
        return siblings[index] if index < len(siblings) else None

    @property
    def previous_sibling(self) -> Optional['Node']:
        if self.parent_node is None:
            return None
        index = self._index_in_parent()
        return self.parent_node.child_nodes[index - 1] if index > 0 else None

    @property
    def child_element_count(self) -> int:
        """Get the number of child elements."""
        return sum(1 for child in self.child_nodes if child.node_type == NodeType.ELEMENT_NODE)

    @property
    def children(self) -> List['Element']:
        """Get a list of child elements."""
        return [child for child in self.child_nodes if child.node_type == NodeType.ELEMENT_NODE]

    @property
    def first_element_child(self) -> Optional['Element']:
        children = self.children
        return children[0] if children else None

    @property
    def last_element_child(self) -> Optional['Element']:
        children = self.children
        return children[-1] if children else None

    @property
    def previous_element_sibling(self) -> Optional['Element']:
        sibling = self.previous_sibling
        while sibling is not None and sibling.node_type != NodeType.ELEMENT_NODE:
            sibling = sibling.previous_sibling
        return sibling

    @property
    def next_element_sibling(self) -> Optional['Element']:
        sibling = self.next_sibling
        while sibling is not None and sibling.node_type != NodeType.ELEMENT_NODE:
            sibling = sibling.next_sibling
        return sibling

    def append_child(self, child: 'Node') -> 'Node':
        """
        Append a child node to this node.

        Args:
            child: The node to append

        Returns:
            The appended node
        """
        if child.parent_node is not None:
            child.parent_node.remove_child(child)

        child.parent_node = self
        child._parent_index = len(self.child_nodes)
        self.child_nodes.append(child)
        return child

    def insert_before(self, new_child: 'Node', reference_child: Optional['Node'] = None) -> 'Node':
        """
        Insert a node before a reference node.

        Args:
            new_child: The node to insert
            reference_child: The reference node to insert before, or None to append

        Returns:
            The inserted node

        Raises:
            ValueError: If the reference node is not a child of this node
        """
        if reference_child is None:
            return self.append_child(new_child)

        if new_child is reference_child:
            return new_child

        if reference_child.parent_node is not self:
            raise ValueError("Reference child not found in child nodes")

        if new_child.parent_node is not None:
            new_child.parent_node.remove_child(new_child)

        # Index is looked up after the removal, which may shift it
        index = reference_child._index_in_parent()
        new_child.parent_node = self
        new_child._parent_index = index
        self.child_nodes.insert(index, new_child)
        return new_child

    def remove_child(self, child: 'Node') -> 'Node':
        """
        Remove a child node from this node.

        Args:
            child: The node to remove

        Returns:
            The removed node

        Raises:
            ValueError: If the node is not a child of this node
        """
        if child.parent_node is not self:
            raise ValueError("Child not found in child nodes")

        del self.child_nodes[child._index_in_parent()]
        child.parent_node = None
        return child

    def replace_child(self, new_child: 'Node', old_child: 'Node') -> 'Node':
        """
        Replace a child node with another node.

        Args:
            new_child: The replacement node
            old_child: The node to replace

        Returns:
            The replaced node
        """
        if old_child.parent_node is not self:
            raise ValueError("Old child not found in child nodes")

        if new_child is old_child:
            return old_child

        reference = old_child.next_sibling
        if reference is new_child:
            reference = new_child.next_sibling

        self.remove_child(old_child)
        self.insert_before(new_child, reference)
        return old_child

    def has_child_nodes(self) -> bool:
        """Check if this node has any child nodes."""
        return len(self.child_nodes) > 0

    def clone_node(self, deep: bool = False) -> 'Node':
        """
        Clone this node.

        Args:
            deep: Whether to clone child nodes as well

        Returns:
            The cloned node, owned by the same document
        """
        clone = Node(self.node_type, self.owner_document)
        clone.node_name = self.node_name

        if deep:
            for child in self.child_nodes:
                clone.append_child(child.clone_node(deep=True))

        return clone

    def contains(self, other: Optional['Node']) -> bool:
        """
        Check if this node is an inclusive ancestor of another node.

        Args:
            other: The node to check

        Returns:
            True if this node contains the other node, False otherwise
        """
        current = other
        while current is not None:
            if current is self:
                return True
            current = current.parent_node
        return False

    def iter_descendants(self) -> Iterator['Node']:
        """Iterate over all descendants in document order."""
        for child in self.child_nodes:
            yield child
            yield from child.iter_descendants()

    @property
    def text_content(self) -> str:
        """
        Get the text content of this node and all its descendants.

        Comments and doctypes do not contribute.
        """
        parts = []
        for child in self.child_nodes:
            if child.node_type in TEXT_NODE_TYPES or child.node_type == NodeType.ELEMENT_NODE:
                parts.append(child.text_content)
        return "".join(parts)

    @text_content.setter
    def text_content(self, text: str) -> None:
        """
        Replace all children with a single text node (none for empty text).

        Args:
            text: The new text content
        """
        for child in list(self.child_nodes):
            self.remove_child(child)

        if text:
            from .text import Text
            self.append_child(Text(text, self.owner_document))
