from __future__ import annotations


class PetQuestError(Exception):
    """Base error for PetQuest combat engine exceptions."""


class CombatError(PetQuestError):
    """Raised when the battle engine rejects a request."""


class InsufficientResource(CombatError):
    """Raised when the acting combatant lacks the SP an action costs."""

    def __init__(self, message: str, required: int = 0, available: int = 0) -> None:
        super().__init__(message)
        self.required = required
        self.available = available


class InvalidAction(CombatError):
    """Raised for contract violations: unknown action, wrong turn, battle already over."""


class ExhaustedItemUse(CombatError):
    """Raised when a second item use is attempted within one battle."""


class InvariantViolation(PetQuestError):
    """Raised when a resource pool leaves its legal range. Indicates a bug."""


class ConfigError(PetQuestError):
    """Raised when a configuration file cannot be understood."""


class PersistenceError(PetQuestError):
    """Raised when a call to the persistence boundary fails."""
