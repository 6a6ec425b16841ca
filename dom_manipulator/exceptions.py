"""
Errors raised by the manipulator.
"""


class ManipulatorError(Exception):
    """Base class for manipulator errors."""


class NoParentElementError(ManipulatorError, ValueError):
    """An operation that needs a parent was invoked on a parentless node."""


class DocumentNotFoundError(ManipulatorError, RuntimeError):
    """No owning document can be obtained for the selection or node."""


class DifferentParentsError(ManipulatorError, ValueError):
    """Nodes wrapped together do not share a parent."""


class EmptySelectionError(ManipulatorError, ValueError):
    """A value was read from, or content taken out of, an empty selection."""
