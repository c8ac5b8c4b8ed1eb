"""Dependency-resolution container with constructor autowiring.

Bootstrap code registers factories and scalar parameters on a `Container`,
then asks it for services; unregistered classes are built automatically by
resolving their constructor annotations.

Exports:
- `Container`: binding registry, singleton cache, parameters and resolver.
- `Binding`: a registered factory and its singleton flag.
- `ContainerError`: an identifier resolves to something unusable.
- `NotFoundError`: nothing is registered or importable under an identifier.
- `CircularDependencyError`: resolving an identifier requires itself.
- `locate` / `token_key`: dotted-path lookup and identifier normalisation.
"""

from ._container import Binding, Container
from ._errors import CircularDependencyError, ContainerError, NotFoundError
from ._introspect import locate, token_key


__all__ = [
    "Binding",
    "CircularDependencyError",
    "Container",
    "ContainerError",
    "NotFoundError",
    "locate",
    "token_key",
]
