from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence


class ContainerError(RuntimeError):
    """An identifier resolves to something the container cannot use."""


class NotFoundError(ContainerError, LookupError):
    """Nothing is registered or importable under the requested identifier."""

    def __init__(self, identifier: str, message: str | None = None) -> None:
        self.identifier = identifier
        if message is None:
            message = f"Nothing is registered or importable as '{identifier}'."
        super().__init__(message)


class CircularDependencyError(ContainerError):
    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.chain)}")
