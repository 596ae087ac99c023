"""Errors raised by defgen commands.

Every command validates its input before touching the buffer, so any of these
exceptions means no edit was made.
"""


class DefgenError(Exception):
    """Base class for user-facing command failures."""


class NotInDefinitionScope(DefgenError):
    """The cursor is not inside a function or method definition."""


class NotInClassScope(DefgenError):
    """The operation needs a class body and none encloses the cursor."""


class NoSymbolAtPoint(DefgenError):
    """No identifier sits under the cursor."""


class DuplicateArgument(DefgenError):
    """The parameter name already occupies a slot in the parameter list."""


class ArgumentNotFound(DefgenError):
    """The parameter to remove is not in the parameter list."""


class MalformedDefinition(DefgenError):
    """An existing parameter list could not be parsed."""


class EmptyBindingName(DefgenError):
    """A blank name was given for an extracted binding."""


class AlreadyExists(DefgenError):
    """The symbol already resolves to an existing definition."""


class PromptCancelled(DefgenError):
    """The user cancelled an interactive prompt."""
