# poker/errors.py
import enum


class RoundErrorKind(str, enum.Enum):
    ROUND_NOT_FOUND = "ROUND_NOT_FOUND"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    NOT_PLAYERS_TURN = "NOT_PLAYERS_TURN"
    ROUND_CLOSED = "ROUND_CLOSED"
    INVALID_ACT = "INVALID_ACT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_ROUND = "INVALID_ROUND"
    CONFLICT = "CONFLICT"


# kind -> http status used by the api layer
STATUS_CODES = {
    RoundErrorKind.ROUND_NOT_FOUND: 404,
    RoundErrorKind.PLAYER_NOT_FOUND: 404,
    RoundErrorKind.NOT_PLAYERS_TURN: 409,
    RoundErrorKind.ROUND_CLOSED: 409,
    RoundErrorKind.CONFLICT: 409,
    RoundErrorKind.INVALID_ACT: 400,
    RoundErrorKind.INVALID_AMOUNT: 400,
    RoundErrorKind.INVALID_ROUND: 400,
}


class RoundException(Exception):
    """Every rejection coming out of the round engine.

    `kind` tells callers what went wrong; the message is for humans.
    """

    def __init__(self, kind: RoundErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES.get(self.kind, 400)

    def __repr__(self):
        return f"RoundException({self.kind.value}, {self.message!r})"
