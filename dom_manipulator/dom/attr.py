"""
Attr implementation for the DOM.
"""

from typing import Optional

XML_NAMESPACES = {
    'xml': 'http://www.w3.org/XML/1998/namespace',
    'xlink': 'http://www.w3.org/1999/xlink',
    'xmlns': 'http://www.w3.org/2000/xmlns/',
}


class Attr:
    """
    Attribute of an Element node.

    Names keep their case, since XML documents are case sensitive.
    """

    def __init__(self, name: str, value: str, owner_element: Optional['Element'] = None):
        """
        Initialize a new attribute.

        Args:
            name: The attribute name
            value: The attribute value
            owner_element: The element that owns this attribute
        """
        self.name = name
        self.value = value
        self.owner_element = owner_element

        self.prefix: Optional[str] = None
        self.local_name = name
        if ':' in name:
            self.prefix, self.local_name = name.split(':', 1)

        if name == 'xmlns':
            self.namespace_uri = XML_NAMESPACES['xmlns']
        else:
            self.namespace_uri = XML_NAMESPACES.get(self.prefix)

    def __repr__(self) -> str:
        return f"<Attr {self.name}={self.value!r}>"

