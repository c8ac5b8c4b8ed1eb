from __future__ import annotations

import builtins
import importlib
import inspect
import logging
import types
import typing
from typing import Any, Literal, Union, get_args, get_origin, get_type_hints

from ._errors import ContainerError, NotFoundError


logger = logging.getLogger(__name__)

_UNION_ORIGINS = (Union, types.UnionType)


def token_key(token: object) -> str | type:
    """Normalise an identifier to the key used by the registry.

    Strings are used as-is. Classes map to their dotted ``module.qualname``
    path (bare name for builtins) when that path leads back to the same
    class; classes it cannot reach (defined in a function, built with
    ``type()``, shadowed) are keyed by the class object itself.
    """
    if isinstance(token, str):
        return token

    if inspect.isclass(token):
        name = class_path(token)
        if "<locals>" in name:
            return token
        try:
            located = locate(name)
        except ContainerError:
            return token
        return name if located is token else token

    msg = f"Identifiers must be strings or classes, got {type(token).__name__}"
    raise TypeError(msg)


def class_path(cls: type) -> str:
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def locate(path: str) -> object:
    """Import the object named by a dotted path.

    Single names are looked up in :mod:`builtins` before being imported as
    modules. Raises ``NotFoundError`` when the path is malformed or names
    nothing, and ``ContainerError`` when a module on the path exists but
    fails to import.
    """
    parts = path.split(".")
    if not all(part.isidentifier() for part in parts):
        raise NotFoundError(path, f"'{path}' is not a valid dotted name.")

    if len(parts) == 1 and hasattr(builtins, path):
        return getattr(builtins, path)

    # Longest importable module prefix wins, the rest is attribute access.
    for split in range(len(parts), 0, -1):
        module_name = ".".join(parts[:split])
        try:
            obj: object = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            if exc.name is None or not _is_module_prefix(exc.name, module_name):
                # The module exists but one of its own imports is missing.
                msg = f"Importing '{module_name}' for '{path}' failed: {exc}"
                raise ContainerError(msg) from exc
            continue
        except Exception as exc:
            msg = f"Importing '{module_name}' for '{path}' failed: {exc}"
            raise ContainerError(msg) from exc

        for attr in parts[split:]:
            try:
                obj = getattr(obj, attr)
            except AttributeError as exc:
                raise NotFoundError(path) from exc
        return obj

    raise NotFoundError(path)


def _is_module_prefix(missing: str, module_name: str) -> bool:
    return module_name == missing or module_name.startswith(f"{missing}.")


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in _UNION_ORIGINS:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def is_builtin_type(annotation: Any) -> bool:
    """Whether an annotation denotes a scalar/builtin value rather than a service."""
    annotation = _unwrap_optional(annotation)
    origin = get_origin(annotation)

    if origin in _UNION_ORIGINS:
        return all(is_builtin_type(arg) for arg in get_args(annotation))
    if origin is Literal:
        return True
    if origin is not None:
        # list[str], dict[str, int], type[Foo] ...
        annotation = origin

    return inspect.isclass(annotation) and annotation.__module__ == "builtins"


def dependency_class(annotation: Any) -> type | None:
    """Return the class a service-typed annotation refers to, or None if it names none."""
    annotation = _unwrap_optional(annotation)
    if annotation is Any:
        return None

    origin = get_origin(annotation)
    if origin is not None and origin not in _UNION_ORIGINS:
        # Repo[int] -> Repo
        annotation = origin

    if inspect.isclass(annotation):
        return annotation
    return None


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: type) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: type) -> bool:
        """Detect whether 'tp' is itself a typing.Protocol (not a class implementing one)."""
        return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False))


def non_instantiable_reason(cls: type) -> str | None:
    if is_protocol(cls):
        return "it is a Protocol"
    if inspect.isabstract(cls):
        abstract = ", ".join(sorted(getattr(cls, "__abstractmethods__", ())))
        return f"it is abstract ({abstract})"
    return None


def constructor_method(cls: type) -> Any:
    """Return the user-defined ``__new__`` or ``__init__`` that shapes ``inspect.signature(cls)``."""
    new = getattr(cls, "__new__", None)
    init = getattr(cls, "__init__", None)
    new = new if inspect.isfunction(new) else None
    init = init if inspect.isfunction(init) else None

    # Same precedence as inspect.signature for classes.
    if "__new__" in cls.__dict__:
        return new
    if "__init__" in cls.__dict__:
        return init
    return new or init


def get_constructor_type_hints(cls: type) -> dict[str, Any]:
    method = constructor_method(cls)
    if method is None:
        return {}

    try:
        return get_type_hints(method)
    except TypeError:
        return {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)

    # Keep every annotation that does evaluate.
    globalns = getattr(method, "__globals__", {})
    hints: dict[str, Any] = {}
    for name, annotation in getattr(method, "__annotations__", {}).items():
        single = types.SimpleNamespace(__annotations__={name: annotation})
        try:
            hints.update(get_type_hints(single, globalns=globalns))
        except (NameError, TypeError):
            continue
    return hints
