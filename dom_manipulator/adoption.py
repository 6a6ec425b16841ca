"""
Node adoption.

Decides whether a node about to be attached next to or under a reference node
has to be imported into the reference's document and/or cloned.
"""

import logging

from .dom import Node, NodeType
from .exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)


def owner_document_of(node: Node):
    """The document owning ``node``; a document owns itself."""
    if node.node_type == NodeType.DOCUMENT_NODE:
        return node
    return node.owner_document


def import_new_node(new_node: Node, reference_node: Node, clone: bool = False) -> Node:
    """
    Return a node that can be attached as a child or sibling of ``reference_node``.

    A node from another document is deep-imported into the reference's
    document, which stops preserving whitespace-only text for the import.
    With ``clone`` (every destination after the first in a fan-out insertion)
    the result is deep-cloned so each destination gets its own copy.
    Otherwise the node itself is returned and the caller moves it.

    Args:
        new_node: The node to insert
        reference_node: The node it will be inserted next to or under
        clone: Whether this is a repeated destination

    Returns:
        The node to attach

    Raises:
        DocumentNotFoundError: If the reference node belongs to no document
    """
    document = owner_document_of(reference_node)
    if document is None:
        raise DocumentNotFoundError(f"{reference_node!r} does not belong to a document")

    if owner_document_of(new_node) is not document:
        logger.debug(f"Importing {new_node!r} into {document!r}")
        document.preserve_white_space = False
        new_node = document.import_node(new_node, deep=True)

    if clone:
        new_node = new_node.clone_node(deep=True)

    return new_node
