"""Errors raised when a player action cannot be applied.

Every error is raised before any state is touched, so catching
InvalidAction always leaves the game exactly as it was.
"""


class InvalidAction(Exception):
    """Base class for rejected commands and score sheet updates."""

    kind = "invalid_action"
    message = "invalid action"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class NotYourTurn(InvalidAction):
    kind = "not_your_turn"
    message = "not your turn"


class WrongState(InvalidAction):
    kind = "wrong_state"
    message = "cannot perform this action in this state"


class OutOfBounds(InvalidAction):
    kind = "out_of_bounds"
    message = "die or row index out of bounds"


class AlreadyOccupied(InvalidAction):
    kind = "already_occupied"
    message = "the selected scoring row is already occupied"


class NotSelectable(InvalidAction):
    kind = "not_selectable"
    message = "the bonus row is not selectable"
