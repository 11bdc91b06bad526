"""Exceptions raised by the Klondike engine."""


class KlondikeError(Exception):
    """Base class for engine errors."""


class InvariantViolation(KlondikeError, AssertionError):
    """The engine was driven into (or asked about) an impossible state.

    Raised for a broken 52-card invariant, a malformed move request or a card
    id that is not on the table. These are contract violations by the caller,
    never ordinary game outcomes.
    """
