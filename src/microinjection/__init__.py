"""Minimal typed injection registry.

This package provides a small, typed store of injected values for Python. Each slot
is declared as a key class with a default value; containers hold per-key overrides
and are passed explicitly to the objects that need them.

Exports:
- `InjectionKey`: Base class for keys; subclasses carry a value type and a default.
- `InjectionValues`: Container mapping keys to overrides, with default fallback and
  an optional miss handler for unset keys (handy in tests).
- `Injection`: Read-only attribute resolving a key through the owner's container.
- `Injectable`: Protocol for objects exposing an `injection` container.
- `key_property`: Named accessor for one key on `InjectionValues` subclasses.
- `InjectionTypeError`: Raised when a value does not match its key's value type.
"""

from ._injection import Injectable, Injection
from ._keys import InjectionKey, is_injection_key
from ._values import InjectionTypeError, InjectionValues, key_property


__all__ = [
    "Injectable",
    "Injection",
    "InjectionKey",
    "InjectionTypeError",
    "InjectionValues",
    "is_injection_key",
    "key_property",
]
