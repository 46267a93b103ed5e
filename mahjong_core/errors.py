"""
Error types raised by the game engine.
"""


class MahjongError(Exception):
    """Base class for engine errors"""


class IllegalActionError(MahjongError, ValueError):
    """
    Requested action is not in the current legal-action set.

    Recoverable: the game state is unchanged and the caller should re-query
    the legal actions.
    """

    def __init__(self, message: str, seat: int = None):
        super().__init__(message)
        self.seat = seat


class HandInvariantViolation(MahjongError, RuntimeError):
    """
    Internal consistency failure, e.g. a settled hand outside the 13/14 band.

    Indicates a bug in the state machine, not a user error.
    """


class ControllerError(MahjongError, RuntimeError):
    """
    An AI controller answered with an action that is not legal.

    Raised after the command that handed control to the AI has been applied;
    the game waits on the controller's seat.
    """

    def __init__(self, message: str, seat: int):
        super().__init__(message)
        self.seat = seat
