"""Exceptions raised by the spellplay engine and its collaborators."""


class SpellPlayError(Exception):
    """Base class for all spellplay errors."""


class ValidationError(SpellPlayError):
    """Input rejected before any session state is created."""


class InvariantViolation(SpellPlayError):
    """The engine was driven out of its intended call sequence (programmer error)."""


class PersistenceError(SpellPlayError):
    """A store could not durably save or append a record."""
