from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar

from ._keys import InjectionKey, require_key


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Self

    T = TypeVar("T")

    Key = type[InjectionKey[T]]
    Provider = Callable[[], T]
    MissHandler = Callable[[type[InjectionKey[Any]]], object | None]


class InjectionTypeError(TypeError):
    pass


class InjectionValues:
    """Typed store of injected values.

    - get a value by key, falling back to the key's default
    - override a key with a constant or a provider
    - reset a key back to its default
    - optional miss handler for unset keys (meant for tests).

    Containers are handed around by copy: ``copy()`` gives an independent container
    whose later changes never leak back into the original.
    """

    def __init__(self, miss_handler: MissHandler | None = None) -> None:
        self._miss_handler = miss_handler
        self._overrides: dict[type[InjectionKey[Any]], Callable[[], Any]] = {}
        self._lock = threading.RLock()

    @property
    def miss_handler(self) -> MissHandler | None:
        return self._miss_handler

    def get(self, key: Key[T]) -> T:
        """Resolve the value for `key`.

        Resolution order:
        1. stored override (constant or provider)
        2. miss handler result, when configured and not None
        3. the key's default value.

        Miss handler results are never stored and are always type checked; other
        values are checked only when running without ``-O``.
        """
        require_key(key)
        with self._lock:
            provider = self._overrides.get(key)

        if provider is not None:
            value = provider()
            source = "override"
        else:
            value = self._miss_handler(key) if self._miss_handler is not None else None
            if value is not None:
                logger.debug("Miss handler supplied a value for %s", key.key_name())
                if not key.accepts(value):
                    msg = (
                        f"Miss handler for {key.key_name()} returned {type(value).__name__}, "
                        f"expected {_type_repr(key.value_type())}"
                    )
                    raise InjectionTypeError(msg)
                return value

            value = key.get_default_value()
            source = "default value"

        if __debug__ and not key.accepts(value):
            msg = (
                f"{source.capitalize()} for {key.key_name()} returned {type(value).__name__}, "
                f"expected {_type_repr(key.value_type())}"
            )
            raise InjectionTypeError(msg)

        return value

    def set_value(self, key: Key[T], value: T) -> None:
        """Store a constant for `key`, replacing any previous override."""
        require_key(key)
        if not key.accepts(value):
            msg = f"Cannot store {type(value).__name__} for {key.key_name()}, expected {_type_repr(key.value_type())}"
            raise InjectionTypeError(msg)

        self._store(key, lambda: value)

    def set(self, key: Key[T], provider: Provider[T]) -> None:
        """Store a provider for `key`; it is called again on every `get`.

        Example:
          values.set(NowKey, lambda: datetime.now(tz=timezone.utc))

        """
        require_key(key)
        if not callable(provider):
            msg = f"Provider for {key.key_name()} must be callable, got {provider!r}"
            raise TypeError(msg)

        self._store(key, provider)

    def reset_to_default(self, key: Key[Any]) -> None:
        """Drop any override for `key`. Resetting a key that was never set is a no-op."""
        require_key(key)
        with self._lock:
            removed = self._overrides.pop(key, None)

        if removed is not None:
            logger.debug("Reset %s to default", key.key_name())

    def copy(self) -> Self:
        return self.__copy__()

    def _store(self, key: Key[Any], provider: Callable[[], Any]) -> None:
        with self._lock:
            self._overrides[key] = provider
        logger.debug("Stored override for %s", key.key_name())

    def __copy__(self) -> Self:
        cls = type(self)
        clone = cls.__new__(cls)
        clone.__dict__.update(self.__dict__)
        with self._lock:
            clone._overrides = dict(self._overrides)
        clone._lock = threading.RLock()
        return clone

    def __getstate__(self) -> dict[str, Any]:
        state = self.__dict__.copy()
        del state["_lock"]
        with self._lock:
            state["_overrides"] = dict(self._overrides)
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._lock = threading.RLock()

    def __getitem__(self, key: Key[T]) -> T:
        return self.get(key)

    def __setitem__(self, key: Key[T], value: T) -> None:
        self.set_value(key, value)

    def __delitem__(self, key: Key[Any]) -> None:
        self.reset_to_default(key)

    def __repr__(self) -> str:
        with self._lock:
            names = sorted(key.key_name() for key in self._overrides)
        return f"{type(self).__name__}(overrides=[{', '.join(names)}])"


def key_property(key: Key[T], doc: str | None = None) -> property:
    """Named accessor for one key, for use on ``InjectionValues`` subclasses.

    Example:
      class AppValues(InjectionValues):
          timeout = key_property(TimeoutKey)

    """
    require_key(key)

    def fget(self: InjectionValues) -> T:
        return self.get(key)

    def fset(self: InjectionValues, value: T) -> None:
        self.set_value(key, value)

    def fdel(self: InjectionValues) -> None:
        self.reset_to_default(key)

    return property(fget, fset, fdel, doc or f"Injected value for {key.key_name()}.")


def _type_repr(tp: Any) -> str:
    return tp.__name__ if isinstance(tp, type) else repr(tp)
