from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, overload, runtime_checkable

from ._keys import InjectionKey, is_injection_key
from ._values import InjectionValues


if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Self


T = TypeVar("T")


@runtime_checkable
class Injectable(Protocol):
    """Anything exposing an ``injection`` container can host ``Injection`` attributes.

    ``injection`` may be a plain attribute set in ``__init__``, a class attribute or a
    property returning a shared container.
    """

    injection: InjectionValues


class Injection(Generic[T]):
    """Read-only attribute that looks its value up in the owner's ``injection``.

    The path is either a key class or the name of a property on the container::

        class Client:
            timeout = Injection(TimeoutKey)
            base_url = Injection("base_url")

            def __init__(self, injection: InjectionValues) -> None:
                self.injection = injection

    Nothing is cached: every read goes through the instance's current container.
    """

    @overload
    def __init__(self: Injection[T], path: type[InjectionKey[T]]) -> None: ...

    @overload
    def __init__(self: Injection[Any], path: str) -> None: ...

    def __init__(self, path: type[InjectionKey[Any]] | str) -> None:
        self._resolve: Callable[[InjectionValues], Any]
        if is_injection_key(path):
            key = path
            self._resolve = lambda values: values.get(key)
        elif isinstance(path, str) and path.isidentifier():
            name = path
            self._resolve = lambda values: _read_property(values, name)
        else:
            msg = f"Injection path must be an InjectionKey subclass or a property name, got {path!r}"
            raise TypeError(msg)

        self.path = path
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @overload
    def __get__(self, instance: None, owner: type | None = None) -> Self: ...

    @overload
    def __get__(self, instance: object, owner: type | None = None) -> T: ...

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self

        if not isinstance(instance, Injectable):
            msg = f"{type(instance).__name__} has no `injection` attribute; cannot resolve {self._describe()}"
            raise TypeError(msg)

        values = instance.injection
        if not isinstance(values, InjectionValues):
            msg = f"{type(instance).__name__}.injection must be InjectionValues, got {type(values).__name__}"
            raise TypeError(msg)

        return self._resolve(values)

    def __set__(self, instance: object, value: object) -> None:
        msg = f"{self._describe()} is read-only; set the value on the injection container instead"
        raise AttributeError(msg)

    def __delete__(self, instance: object) -> None:
        msg = f"{self._describe()} is read-only; reset the value on the injection container instead"
        raise AttributeError(msg)

    def _describe(self) -> str:
        return f"Injection attribute {self.name!r}" if self.name else f"Injection({self._path_repr()})"

    def _path_repr(self) -> str:
        return self.path if isinstance(self.path, str) else self.path.key_name()

    def __repr__(self) -> str:
        return f"Injection({self._path_repr()})"


def _read_property(values: InjectionValues, name: str) -> Any:
    attr = inspect.getattr_static(type(values), name, None)
    if not isinstance(attr, property) or name in InjectionValues.__dict__:
        msg = f"{type(values).__name__} has no injection property {name!r}"
        raise AttributeError(msg)

    return getattr(values, name)
