#!/usr/bin/env python3
"""
dom-manipulator - jQuery-like manipulation of HTML and XML documents

Command line entry point: reads markup, applies the requested changes to the
nodes matching a CSS selector and prints the result.
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from cssselect import SelectorError

from .exceptions import ManipulatorError
from .manipulator import Manipulator
from .utils.config import Config
from .utils.logging import log_exception, setup_logging

logger = logging.getLogger(__name__)


def _assignment(value: str) -> Tuple[str, str]:
    name, sep, assigned = value.partition('=')
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {value!r}")
    return name.strip(), assigned


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="dom-manipulator",
        description="Apply jQuery-like changes to an HTML or XML document"
    )
    parser.add_argument('input', nargs='?', default='-', help='File to read, - for stdin (default)')
    parser.add_argument('-s', '--select', metavar='SELECTOR', help='CSS selector of the nodes to change')
    parser.add_argument('--content-type', help='Content type of the input (default from config)')
    parser.add_argument('--add-class', metavar='CLASSES', help='Add space-separated classes')
    parser.add_argument('--remove-class', metavar='CLASSES', help='Remove space-separated classes')
    parser.add_argument('--toggle-class', metavar='CLASSES', help='Toggle space-separated classes')
    parser.add_argument('--set-attr', metavar='NAME=VALUE', type=_assignment, action='append',
                        default=[], help='Set an attribute (repeatable)')
    parser.add_argument('--remove-attr', metavar='NAME', action='append', default=[],
                        help='Remove an attribute (repeatable)')
    parser.add_argument('--set-style', metavar='KEY=VALUE', type=_assignment, action='append',
                        default=[], help='Set an inline style property, empty VALUE removes it (repeatable)')
    parser.add_argument('--text', help='Replace the content of the nodes with text')
    parser.add_argument('--remove', action='store_true', help='Remove the nodes')
    parser.add_argument('--fragment', action='store_true', help='Print only the selected nodes')
    parser.add_argument('--config', metavar='PATH', default=None, help='Configuration file')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    return parser.parse_args(argv)


def read_input(path: str) -> bytes:
    """Read the raw markup from a file or stdin."""
    if path == '-':
        return sys.stdin.buffer.read()
    with open(path, 'rb') as f:
        return f.read()


def select(document: Manipulator, selector: Optional[str]) -> Manipulator:
    """Nodes of the document matching ``selector``, top-level nodes included."""
    if not selector:
        return Manipulator(document)
    selection = document.filter(selector)
    selection.add(document.find(selector))
    return selection


def apply_changes(selection: Manipulator, args: argparse.Namespace) -> None:
    """Apply the changes requested on the command line to the selection."""
    if args.add_class:
        selection.add_class(args.add_class)
    if args.remove_class:
        selection.remove_class(args.remove_class)
    if args.toggle_class:
        selection.toggle_class(args.toggle_class)
    for name, value in args.set_attr:
        selection.set_attribute(name, value)
    for name in args.remove_attr:
        selection.remove_attribute(name)
    for key, value in args.set_style:
        selection.set_style(key, value)
    if args.text is not None:
        selection.set_text(args.text)
    if args.remove:
        selection.remove()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line."""
    args = parse_arguments(argv)

    config = Config(args.config)
    console_level = "DEBUG" if args.debug else config.get("logging.console_level", "INFO")
    setup_logging(log_file=config.get("logging.file"), console_level=console_level)

    content_type = args.content_type or config.get("parser.content_type")

    try:
        content = read_input(args.input)
        document = Manipulator()
        document.add_content(content, content_type)
        logger.debug(f"Loaded {len(document)} top-level node(s) from {args.input}")

        selection = select(document, args.select)
        logger.info(f"Selected {len(selection)} node(s)")

        apply_changes(selection, args)

        if args.fragment:
            output = selection.merge_to_string()
        else:
            # Removed top-level nodes are still in the selection but detached
            output = Manipulator([node for node in document if node.parent_node is not None]).merge_to_string()
    except (ManipulatorError, SelectorError, OSError, ValueError) as e:
        log_exception(logger, e, "Unable to process input")
        return 1

    sys.stdout.write(output)
    if not output.endswith("\n"):
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
