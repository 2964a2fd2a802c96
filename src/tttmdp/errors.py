"""Exceptions raised by the solvers and their tables."""


class TTTMDPError(Exception):
    pass


class IllegalActionError(TTTMDPError, ValueError):
    """A move that is not legal in the state it was requested for."""


class UnknownStateError(TTTMDPError, KeyError):
    """A state (or state/move pair) that was never initialized in a table or policy."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


class MalformedTransitionModelError(TTTMDPError, RuntimeError):
    """Transition set is empty or its probability mass does not sum to one."""
