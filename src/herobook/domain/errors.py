from __future__ import annotations


class CharacterEngineError(Exception):
    """Base class for every recoverable condition raised by the engine.

    ``code`` is stable and meant for command handlers that map failures to
    user-facing replies.
    """

    code = "ENGINE_ERROR"


class AlreadyExistsError(CharacterEngineError):
    code = "ALREADY_EXISTS"


class NotFoundError(CharacterEngineError):
    code = "NOT_FOUND"


class InvalidArgumentError(CharacterEngineError, ValueError):
    code = "INVALID_ARGUMENT"


class LockedError(CharacterEngineError):
    code = "LOCKED"

    def __init__(self, player_id: str) -> None:
        super().__init__(f"Character update already in progress for {player_id}")
        self.player_id = player_id


class InsufficientQuantityError(CharacterEngineError):
    code = "INSUFFICIENT_QUANTITY"


class MissingMaterialsError(InsufficientQuantityError):
    code = "MISSING_MATERIALS"

    def __init__(self, item_id: str, missing: dict[str, int]) -> None:
        listed = ", ".join(f"{material} x{qty}" for material, qty in sorted(missing.items()))
        super().__init__(f"Missing materials to craft {item_id}: {listed}")
        self.item_id = item_id
        self.missing = dict(missing)


class InsufficientFundsError(CharacterEngineError):
    code = "INSUFFICIENT_FUNDS"


class NotEquippableError(CharacterEngineError):
    code = "NOT_EQUIPPABLE"


class NotConsumableError(CharacterEngineError):
    code = "NOT_CONSUMABLE"


class NotInInventoryError(CharacterEngineError):
    code = "NOT_IN_INVENTORY"


class NothingEquippedError(CharacterEngineError):
    code = "NOTHING_EQUIPPED"


class LevelTooLowError(CharacterEngineError):
    code = "LEVEL_TOO_LOW"

    def __init__(self, message: str, *, required: int) -> None:
        super().__init__(message)
        self.required = int(required)


class DailyLimitReachedError(CharacterEngineError):
    code = "DAILY_LIMIT_REACHED"


class SessionCapReachedError(CharacterEngineError):
    code = "SESSION_CAP_REACHED"


class PersistenceFailureError(CharacterEngineError):
    code = "PERSISTENCE_FAILURE"
