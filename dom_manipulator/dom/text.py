"""
Text and CDATA section nodes for the DOM.
"""

from typing import Optional
from .node import NodeType
from .character_data import CharacterData


class Text(CharacterData):
    """
    Text node implementation for the DOM.
    """

    def __init__(self, data: str, owner_document: Optional['Document'] = None):
        super().__init__(NodeType.TEXT_NODE, data, owner_document)
        self.node_name = "#text"

    def is_whitespace(self) -> bool:
        """True when the node holds nothing but whitespace."""
        return not self.data.strip()


class CDATASection(Text):
    """
    CDATA section node. Serialized verbatim in XML output.
    """

    def __init__(self, data: str, owner_document: Optional['Document'] = None):
        super().__init__(data, owner_document)
        self.node_type = NodeType.CDATA_SECTION_NODE
        self.node_name = "#cdata-section"

    def is_whitespace(self) -> bool:
        return False
