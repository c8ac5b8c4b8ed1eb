from __future__ import annotations

import inspect
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._errors import CircularDependencyError, ContainerError
from ._introspect import (
    dependency_class,
    class_path,
    get_constructor_type_hints,
    is_builtin_type,
    locate,
    non_instantiable_reason,
    token_key,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    Token = type[Any] | str
    Key = type[Any] | str
    Factory = Callable[["Container"], Any]

T = TypeVar("T")

_MISSING: Any = object()


def _describe(key: Key) -> str:
    return key if isinstance(key, str) else class_path(key)


@dataclass(frozen=True)
class Binding:
    factory: Factory
    singleton: bool = False


class Container:
    """Dependency-resolution container.

    - bind identifiers to factories, transient or singleton
    - named scalar parameters for builtin-typed constructor arguments
    - autowiring of unregistered classes from their constructor annotations.

    Identifiers are strings or classes; an importable class is keyed by its
    dotted ``module.qualname`` path, so ``container.get(Logger)`` and
    ``container.get("app.log.Logger")`` refer to the same entry. Classes
    that path does not reach are keyed by the class object.
    """

    def __init__(
        self,
        parameters: Mapping[str, Any] | None = None,
        *,
        strict_parameters: bool = False,
    ) -> None:
        self._bindings: dict[Key, Binding] = {}
        self._instances: dict[Key, Any] = {}
        self._parameters: dict[str, Any] = dict(parameters or {})
        self._resolving: list[Key] = []
        self._lock = threading.RLock()
        self.strict_parameters = strict_parameters

    def set(self, token: Token, factory: Factory, singleton: bool = False) -> None:  # noqa: FBT001, FBT002
        """Bind ``token`` to ``factory``; the factory receives this container.

        Re-binding replaces the previous binding and drops its cached instance.

        Example:
          container.set("db", lambda c: Database(c.get_parameter("dsn")), singleton=True)

        """
        key = token_key(token)
        with self._lock:
            if key in self._bindings:
                logger.debug("Overwriting binding for %s", _describe(key))
            self._bindings[key] = Binding(factory=factory, singleton=singleton)
            self._instances.pop(key, None)

    def singleton(self, token: Token, factory: Factory) -> None:
        self.set(token, factory, singleton=True)

    def set_instance(self, token: Token, instance: object) -> None:
        """Register a pre-built value, returned as-is by every ``get``."""
        with self._lock:
            self._instances[token_key(token)] = instance

    def set_parameter(self, name: str, value: Any) -> None:
        with self._lock:
            self._parameters[name] = value

    def set_parameters(self, parameters: Mapping[str, Any]) -> None:
        with self._lock:
            self._parameters.update(parameters)

    def get_parameter(self, name: str, default: Any = None) -> Any:
        """Return the scalar parameter ``name``, or ``default`` when it is not set."""
        with self._lock:
            return self._parameters.get(name, default)

    def has_parameter(self, name: str) -> bool:
        with self._lock:
            return name in self._parameters

    @overload
    def get(self, token: type[T]) -> T: ...

    @overload
    def get(self, token: str) -> Any: ...

    def get(self, token: Token) -> Any:
        """Resolve ``token`` to a value.

        1. cached singleton instance
        2. registered binding (factory called with this container)
        3. autowiring, when the token names a class.

        Raises ``NotFoundError`` when nothing answers to the token and
        ``ContainerError`` when it names something that cannot be built.
        """
        key = token_key(token)
        with self._lock:
            if key in self._instances:
                return self._instances[key]

            binding = self._bindings.get(key)
            if binding is None:
                return self._autowire(token, key)

            with self._producing(key):
                instance = binding.factory(self)

            if binding.singleton:
                logger.debug("Caching singleton instance for %s", _describe(key))
                self._instances[key] = instance

            return instance

    def has(self, token: Token) -> bool:
        """Whether ``token`` is registered or names a class that autowiring could attempt."""
        key = token_key(token)
        with self._lock:
            if key in self._bindings or key in self._instances:
                return True

        if inspect.isclass(token):
            return True

        try:
            return inspect.isclass(locate(key))
        except ContainerError:
            return False

    def unset(self, token: Token) -> None:
        key = token_key(token)
        with self._lock:
            self._bindings.pop(key, None)
            self._instances.pop(key, None)

    def call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke a public container method by name."""
        if method.startswith("_") or not callable(getattr(type(self), method, None)):
            msg = f"Method '{method}' does not exist in the container."
            raise ContainerError(msg)
        return getattr(self, method)(*args, **kwargs)

    def __getitem__(self, token: Token) -> Any:
        return self.get(token)

    def __setitem__(self, token: Token, factory: Factory) -> None:
        self.set(token, factory)

    def __contains__(self, token: object) -> bool:
        return self.has(token)  # type: ignore[arg-type]

    def __delitem__(self, token: Token) -> None:
        self.unset(token)

    def _autowire(self, token: Token, key: Key) -> Any:
        cls = token if inspect.isclass(token) else locate(key)
        if not inspect.isclass(cls):
            msg = f"'{key}' resolves to {cls!r}, which is not a class."
            raise ContainerError(msg)

        with self._producing(key):
            logger.debug("Autowiring %s", _describe(key))
            return Autowirer(self).build(cls)

    @contextmanager
    def _producing(self, key: Key) -> Iterator[None]:
        if key in self._resolving:
            chain = self._resolving[self._resolving.index(key) :]
            raise CircularDependencyError([_describe(k) for k in (*chain, key)])

        self._resolving.append(key)
        try:
            yield
        finally:
            self._resolving.pop()


class Autowirer:
    """Builds a class by resolving each constructor parameter through a container."""

    def __init__(self, container: Container) -> None:
        self._container = container

    def build(self, cls: type[T]) -> T:
        reason = non_instantiable_reason(cls)
        if reason is not None:
            msg = f"Class {cls.__qualname__} is not instantiable: {reason}."
            raise ContainerError(msg)

        if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
            return cls()

        params = self._constructor_parameters(cls)
        if not params:
            return cls()

        hints = get_constructor_type_hints(cls)
        args, kwargs = [], {}

        for p in params:
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue

            value = self._resolve_parameter(cls, p, hints.get(p.name, p.annotation))
            if p.kind is p.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[p.name] = value

        return cls(*args, **kwargs)

    def _constructor_parameters(self, cls: type) -> list[inspect.Parameter]:
        try:
            return list(inspect.signature(cls).parameters.values())
        except (TypeError, ValueError):
            # Builtin-derived classes expose no class signature; their __init__ may.
            logger.debug("No class signature for %s, trying __init__", cls.__qualname__)

        try:
            # First parameter is self
            return list(inspect.signature(cls.__init__).parameters.values())[1:]
        except (TypeError, ValueError) as e:
            msg = f"Cannot inspect the constructor of {cls.__qualname__}: {e}"
            raise ContainerError(msg) from e

    def _resolve_parameter(self, cls: type, p: inspect.Parameter, annotation: Any) -> Any:
        if annotation is inspect.Parameter.empty:
            msg = f"Cannot resolve parameter '{p.name}' in {cls.__qualname__}: it has no type annotation."
            raise ContainerError(msg)

        if isinstance(annotation, str):
            msg = (
                f"Cannot resolve parameter '{p.name}' in {cls.__qualname__}: "
                f"forward reference '{annotation}' could not be evaluated."
            )
            raise ContainerError(msg)

        if is_builtin_type(annotation):
            return self._resolve_scalar(cls, p)

        dependency = dependency_class(annotation)
        if dependency is None:
            msg = (
                f"Cannot resolve parameter '{p.name}' in {cls.__qualname__}: "
                f"annotation {annotation!r} does not name a class."
            )
            raise ContainerError(msg)

        return self._container.get(dependency)

    def _resolve_scalar(self, cls: type, p: inspect.Parameter) -> Any:
        # Looked up by the parameter's name, not its type.
        value = self._container.get_parameter(p.name, _MISSING)
        if value is not _MISSING:
            return value

        if p.default is not inspect.Parameter.empty:
            return p.default

        if self._container.strict_parameters:
            msg = f"Missing container parameter '{p.name}' required by {cls.__qualname__}."
            raise ContainerError(msg)

        return None
