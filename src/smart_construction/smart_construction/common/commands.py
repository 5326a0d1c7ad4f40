from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, TypeVar

T = TypeVar("T")


class Command(ABC):
    """Command Pattern: a local state change that knows how to undo itself."""

    @abstractmethod
    def apply(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def revert(self) -> None:
        raise NotImplementedError


class CallbackCommand(Command):
    def __init__(self, apply: Callable[[], None], revert: Callable[[], None]):
        self._apply = apply
        self._revert = revert

    def apply(self) -> None:
        self._apply()

    def revert(self) -> None:
        self._revert()


def run_optimistic(command: Command, persist: Callable[[], T]) -> T:
    """Apply locally, persist, and replay the inverse if persisting fails."""
    command.apply()
    try:
        return persist()
    except Exception:
        command.revert()
        raise
