"""
CharacterData implementation for the DOM.
Shared base of text, CDATA section and comment nodes.
"""

from typing import Optional
from .node import Node, NodeType


class CharacterData(Node):
    """
    Node holding a string of character data.
    """

    def __init__(self, node_type: NodeType, data: str, owner_document: Optional['Document'] = None):
        super().__init__(node_type, owner_document)
        self.data = data if data is not None else ""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.data[:20]!r}>"

    @property
    def node_value(self) -> str:
        return self.data

    @node_value.setter
    def node_value(self, value: str) -> None:
        self.data = value if value is not None else ""

    @property
    def text_content(self) -> str:
        return self.data

    @text_content.setter
    def text_content(self, value: str) -> None:
        self.data = value if value is not None else ""

    @property
    def length(self) -> int:
        return len(self.data)

    def _check_offset(self, offset: int) -> None:
        if offset < 0 or offset > self.length:
            raise ValueError(f"Invalid offset {offset} for data of length {self.length}")

    def substring_data(self, offset: int, count: int) -> str:
        """
        Extract a substring from the data.

        Raises:
            ValueError: If the offset is invalid
        """
        self._check_offset(offset)
        return self.data[offset:offset + count]

    def append_data(self, data: str) -> None:
        self.data += data

    def insert_data(self, offset: int, data: str) -> None:
        self._check_offset(offset)
        self.data = self.data[:offset] + data + self.data[offset:]

    def delete_data(self, offset: int, count: int) -> None:
        self._check_offset(offset)
        self.data = self.data[:offset] + self.data[offset + count:]

    def replace_data(self, offset: int, count: int, data: str) -> None:
        self._check_offset(offset)
        self.data = self.data[:offset] + data + self.data[offset + count:]

    def clone_node(self, deep: bool = False) -> 'CharacterData':
        """
        Clone this node. ``deep`` has no effect on character data.
        """
        return type(self)(self.data, self.owner_document)
