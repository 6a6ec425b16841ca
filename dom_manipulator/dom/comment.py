"""
Comment node implementation for the DOM.
"""

from typing import Optional
from .node import NodeType
from .character_data import CharacterData


class Comment(CharacterData):
    """
    Comment node implementation for the DOM.
    """

    def __init__(self, data: str, owner_document: Optional['Document'] = None):
        """
        Initialize a comment node.

        Args:
            data: The comment text
            owner_document: The document that owns this node
        """
        super().__init__(NodeType.COMMENT_NODE, data, owner_document)
        self.node_name = "#comment"
