# services/errors.py
from __future__ import annotations


class GameError(Exception):
    """
    База для всіх очікуваних помилок ядра гри.

    `code` - стабільний ключ, по якому фронт розрізняє помилки
    (той самий UPPER_SNAKE, що й у HTTP `detail`), `status` - HTTP-статус,
    яким відповідає транспортний шар.
    """

    code = "GAME_ERROR"
    status = 400

    def __init__(self, message: str | None = None):
        self.message = message or self.code
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {"detail": self.code, "error": self.message}


# ─────────────────────────────────────────────
# NOT FOUND
# ─────────────────────────────────────────────
class NotFound(GameError):
    code = "NOT_FOUND"
    status = 404


class PlayerNotFound(NotFound):
    code = "PLAYER_NOT_FOUND"


class BattleNotFound(NotFound):
    code = "BATTLE_NOT_FOUND"


class ListingNotFound(NotFound):
    code = "LISTING_NOT_FOUND"


class ShopItemNotFound(NotFound):
    code = "SHOP_ITEM_NOT_FOUND"


# ─────────────────────────────────────────────
# INVALID INPUT
# ─────────────────────────────────────────────
class InvalidInput(GameError):
    code = "INVALID_INPUT"
    status = 400


class InvalidClass(InvalidInput):
    code = "INVALID_CLASS"


class InvalidCurrency(InvalidInput):
    code = "INVALID_CURRENCY"


class InvalidMove(InvalidInput):
    code = "INVALID_MOVE"


class InvalidDifficulty(InvalidInput):
    code = "INVALID_DIFFICULTY"


class InvalidOpponent(InvalidInput):
    code = "INVALID_OPPONENT"


class InvalidPrice(InvalidInput):
    code = "INVALID_PRICE"


# ─────────────────────────────────────────────
# PRECONDITION FAILED
# ─────────────────────────────────────────────
class PreconditionFailed(GameError):
    code = "PRECONDITION_FAILED"
    status = 409


class InsufficientEnergy(PreconditionFailed):
    code = "NO_ENERGY"


class InsufficientFunds(PreconditionFailed):
    code = "NOT_ENOUGH_FUNDS"


class ItemNotOwned(PreconditionFailed):
    code = "ITEM_NOT_OWNED"


class ClassChangeUnavailable(PreconditionFailed):
    code = "CLASS_CHANGE_UNAVAILABLE"


class BattleAlreadyFinished(PreconditionFailed):
    code = "BATTLE_ALREADY_FINISHED"


class NoSpecialCharges(PreconditionFailed):
    code = "NO_SPECIAL_CHARGES"


class NotBattleOwner(PreconditionFailed):
    code = "NOT_BATTLE_OWNER"


class OwnListing(PreconditionFailed):
    code = "OWN_LISTING"


class RecordBusy(PreconditionFailed):
    # запис тримає інший воркер довше за blocking_timeout
    code = "RECORD_BUSY"
