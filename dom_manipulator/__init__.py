"""
dom-manipulator - jQuery-like manipulation of HTML and XML documents.

Example:
    >>> from dom_manipulator import Manipulator
    >>> page = Manipulator('<div class="a"><p>Hello</p></div>')
    >>> page.find('p').add_class('greeting').after('<p>World</p>')
"""

from .dom import Document, Parser
from .exceptions import (
    DifferentParentsError,
    DocumentNotFoundError,
    EmptySelectionError,
    ManipulatorError,
    NoParentElementError,
)
from .manipulator import Manipulator
from .util import (
    css_dict_to_string,
    css_string_to_dict,
    get_body_node_from_html_fragment,
    trim_newlines,
)

__version__ = "1.0.0"

__all__ = [
    'Manipulator', 'Document', 'Parser',
    'ManipulatorError', 'NoParentElementError', 'DocumentNotFoundError',
    'DifferentParentsError', 'EmptySelectionError',
    'css_dict_to_string', 'css_string_to_dict', 'get_body_node_from_html_fragment',
    'trim_newlines',
]
