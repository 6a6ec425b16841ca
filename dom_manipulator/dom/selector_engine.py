"""
CSS Selector Engine implementation.
This module matches cssselect parse trees against DOM elements.
"""

import re
import logging
from typing import Any, Dict, List

import cssselect
from cssselect import parser as css

from .node import Node, NodeType

logger = logging.getLogger(__name__)

_ID_SELECTOR = re.compile(r'^#([a-zA-Z0-9_-]+)$')
_CLASS_SELECTOR = re.compile(r'^\.([a-zA-Z0-9_-]+)$')
_TAG_SELECTOR = re.compile(r'^([a-zA-Z0-9_-]+|\*)$')


class SelectorEngine:
    """
    CSS Selector Engine for DOM queries.

    Selectors are parsed with cssselect and the resulting trees are matched
    directly against elements, without an XPath translation step.
    """

    def __init__(self):
        """Initialize the selector engine."""
        self._selector_cache: Dict[str, List[css.Selector]] = {}

    def select(self, selector: str, root_node: Node, include_root: bool = False) -> List['Element']:
        """
        Find all elements matching a CSS selector.

        Args:
            selector: The CSS selector string
            root_node: The root node to search from
            include_root: Whether the root itself may be part of the result

        Returns:
            List of matching elements in document order

        Raises:
            cssselect.SelectorSyntaxError: If the selector cannot be parsed
        """
        candidates = [node for node in root_node.iter_descendants()
                      if node.node_type == NodeType.ELEMENT_NODE]
        if include_root and root_node.node_type == NodeType.ELEMENT_NODE:
            candidates.insert(0, root_node)

        return [element for element in candidates if self.matches(element, selector)]

    def matches(self, element: 'Element', selector: str) -> bool:
        """
        Check if an element matches a CSS selector.

        Args:
            element: The element to check
            selector: The CSS selector

        Returns:
            True if the element matches the selector, False otherwise
        """
        if element.node_type != NodeType.ELEMENT_NODE:
            return False

        simple_result = self._handle_simple_element_match(element, selector)
        if simple_result is not None:
            return simple_result

        for parsed in self._get_parsed_selector(selector):
            if parsed.pseudo_element is not None:
                logger.warning(f"Pseudo-elements never match DOM nodes: ::{parsed.pseudo_element}")
                continue
            if self._matches_tree(element, parsed.parsed_tree):
                return True
        return False

    def _get_parsed_selector(self, selector: str) -> List[css.Selector]:
        """
        Get a parsed selector, using cache if available.
        """
        if selector not in self._selector_cache:
            try:
                self._selector_cache[selector] = cssselect.parse(selector)
            except cssselect.SelectorSyntaxError as e:
                logger.debug(f"Error parsing selector '{selector}': {e}")
                raise
        return self._selector_cache[selector]

    def _handle_simple_element_match(self, element: 'Element', selector: str):
        """
        Match id, class and tag selectors without the full parser.

        Returns:
            True or False, or None if the selector is not simple
        """
        selector = selector.strip()

        match = _ID_SELECTOR.match(selector)
        if match:
            return element.id == match.group(1)

        match = _CLASS_SELECTOR.match(selector)
        if match:
            return match.group(1) in element.class_list

        match = _TAG_SELECTOR.match(selector)
        if match:
            return selector == '*' or element.tag_name.lower() == selector.lower()

        return None

    def _matches_tree(self, element: 'Element', tree: Any) -> bool:
        """
        Match an element against a cssselect selector tree.
        """
        if isinstance(tree, css.Element):
            tag = tree.element
            return tag is None or tag == '*' or element.tag_name.lower() == tag.lower()

        if isinstance(tree, css.Hash):
            return element.id == tree.id and self._matches_tree(element, tree.selector)

        if isinstance(tree, css.Class):
            return tree.class_name in element.class_list and self._matches_tree(element, tree.selector)

        if isinstance(tree, css.Attrib):
            return self._matches_attrib(element, tree) and self._matches_tree(element, tree.selector)

        if isinstance(tree, css.Pseudo):
            return self._matches_pseudo(element, tree.ident.lower()) and self._matches_tree(element, tree.selector)

        if isinstance(tree, css.Function):
            return self._matches_function(element, tree) and self._matches_tree(element, tree.selector)

        if isinstance(tree, css.Negation):
            return (not self._matches_tree(element, tree.subselector)
                    and self._matches_tree(element, tree.selector))

        # :is() and :where()
        selector_list = getattr(tree, 'selector_list', None)
        if selector_list is not None:
            return (any(self._matches_tree(element, sub) for sub in selector_list)
                    and self._matches_tree(element, tree.selector))

        if isinstance(tree, css.CombinedSelector):
            if not self._matches_tree(element, tree.subselector):
                return False
            return self._matches_combinator(element, tree.combinator, tree.selector)

        logger.warning(f"Unsupported selector type: {type(tree).__name__}")
        return False

    def _matches_combinator(self, element: 'Element', combinator: str, selector: Any) -> bool:
        if combinator == ' ':
            parent = element.parent_node
            while parent is not None and parent.node_type == NodeType.ELEMENT_NODE:
                if self._matches_tree(parent, selector):
                    return True
                parent = parent.parent_node
            return False

        if combinator == '>':
            parent = element.parent_node
            return (parent is not None
                    and parent.node_type == NodeType.ELEMENT_NODE
                    and self._matches_tree(parent, selector))

        if combinator == '+':
            previous = element.previous_element_sibling
            return previous is not None and self._matches_tree(previous, selector)

        if combinator == '~':
            sibling = element.previous_element_sibling
            while sibling is not None:
                if self._matches_tree(sibling, selector):
                    return True
                sibling = sibling.previous_element_sibling
            return False

        logger.warning(f"Unknown combinator: {combinator}")
        return False

    def _matches_attrib(self, element: 'Element', tree: css.Attrib) -> bool:
        if not element.has_attribute(tree.attrib):
            return False

        operator = tree.operator
        if operator == 'exists':
            return True

        expected = getattr(tree.value, 'value', tree.value)
        actual = element.get_attribute(tree.attrib)

        if operator == '=':
            return actual == expected
        if operator == '~=':
            return expected in actual.split()
        if operator == '|=':
            return actual == expected or actual.startswith(f"{expected}-")
        if operator == '^=':
            return bool(expected) and actual.startswith(expected)
        if operator == '$=':
            return bool(expected) and actual.endswith(expected)
        if operator == '*=':
            return bool(expected) and expected in actual
        if operator == '!=':
            return actual != expected

        logger.warning(f"Unsupported attribute operator: {operator}")
        return False

    def _matches_pseudo(self, element: 'Element', name: str) -> bool:
        parent = element.parent_node

        if name == 'root':
            return parent is not None and parent.node_type == NodeType.DOCUMENT_NODE
        if name == 'empty':
            return not any(child.node_type in (NodeType.ELEMENT_NODE, NodeType.TEXT_NODE,
                                               NodeType.CDATA_SECTION_NODE)
                           for child in element.child_nodes)

        if parent is None:
            return False

        siblings = parent.children
        same_type = [sibling for sibling in siblings if sibling.tag_name == element.tag_name]

        if name == 'first-child':
            return siblings[0] is element
        if name == 'last-child':
            return siblings[-1] is element
        if name == 'only-child':
            return len(siblings) == 1
        if name == 'first-of-type':
            return same_type[0] is element
        if name == 'last-of-type':
            return same_type[-1] is element
        if name == 'only-of-type':
            return len(same_type) == 1

        logger.warning(f"Unsupported pseudo-class: {name}")
        return False

    def _matches_function(self, element: 'Element', tree: css.Function) -> bool:
        name = tree.name
        parent = element.parent_node
        if parent is None:
            return False

        if name in ('nth-child', 'nth-last-child'):
            siblings = parent.children
        elif name in ('nth-of-type', 'nth-last-of-type'):
            siblings = [sibling for sibling in parent.children if sibling.tag_name == element.tag_name]
        else:
            logger.warning(f"Unsupported pseudo-class function: {name}()")
            return False

        if name.startswith('nth-last'):
            siblings = list(reversed(siblings))

        position = next(index for index, sibling in enumerate(siblings, 1) if sibling is element)
        a, b = css.parse_series(tree.arguments)
        return _matches_series(a, b, position)


def _matches_series(a: int, b: int, position: int) -> bool:
    """True when ``position == a*n + b`` for some n >= 0."""
    if a == 0:
        return position == b
    n, remainder = divmod(position - b, a)
    return remainder == 0 and n >= 0


default_engine = SelectorEngine()
