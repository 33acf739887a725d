from __future__ import annotations

import inspect
import types
import typing
from typing import Any, ClassVar, Generic, Protocol, TypeVar, Union, cast, get_args, get_origin


T = TypeVar("T")


class InjectionKey(Generic[T]):
    """Base class for injection keys.

    A key stands for one slot in ``InjectionValues``. Subclass it once per slot and
    give it a default, either as a constant::

        class TimeoutKey(InjectionKey[float]):
            default_value = 30.0

    or computed on every unset read::

        class NowKey(InjectionKey[datetime]):
            @classmethod
            def get_default_value(cls) -> datetime:
                return datetime.now(tz=timezone.utc)

    The key class itself is the identity of the slot, so two key classes never share
    a value even when their names and value types coincide.
    """

    default_value: ClassVar[Any]

    def __init_subclass__(cls, *, abstract: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._abstract_key = abstract
        if abstract:
            return

        overrides_provider = cls.get_default_value.__func__ is not InjectionKey.get_default_value.__func__  # type: ignore[attr-defined]
        if not overrides_provider and not hasattr(cls, "default_value"):
            msg = (
                f"Injection key {cls.__qualname__} must define `default_value` "
                "or override `get_default_value()`."
            )
            raise TypeError(msg)

    @classmethod
    def get_default_value(cls) -> T:
        """Value used when nothing is stored for this key."""
        return cast("T", cls.default_value)

    @classmethod
    def key_name(cls) -> str:
        return f"{cls.__module__}.{cls.__qualname__}"

    @classmethod
    def value_type(cls) -> Any:
        """Type of the values stored under this key.

        Taken from the generic parameter (``InjectionKey[str]``), else inferred from a
        constant ``default_value``, else ``Any``.
        """
        for klass in cls.__mro__:
            for base in klass.__dict__.get("__orig_bases__", ()):
                origin = get_origin(base)
                if inspect.isclass(origin) and issubclass(origin, InjectionKey):
                    args = get_args(base)
                    if args and not isinstance(args[0], TypeVar):
                        return args[0]

        default = inspect.getattr_static(cls, "default_value", None)
        if default is not None and not isinstance(default, (classmethod, staticmethod, property)):
            return type(default)

        return Any

    @classmethod
    def accepts(cls, value: object) -> bool:
        """Best-effort check that ``value`` fits the key's value type."""
        return _matches_type(value, cls.value_type())


def is_injection_key(obj: object) -> bool:
    """Whether ``obj`` is a concrete ``InjectionKey`` subclass usable as a slot."""
    return (
        inspect.isclass(obj)
        and issubclass(obj, InjectionKey)
        and obj is not InjectionKey
        and not obj.__dict__.get("_abstract_key", False)
    )


def require_key(obj: object) -> None:
    if not is_injection_key(obj):
        msg = f"Expected a concrete InjectionKey subclass, got {obj!r}"
        raise TypeError(msg)


def _matches_type(value: object, expected: Any) -> bool:  # noqa: PLR0911
    if expected is Any:
        return True

    if expected is None or expected is type(None):
        return value is None

    origin = get_origin(expected)
    if origin is Union or origin is types.UnionType:
        return any(_matches_type(value, arg) for arg in get_args(expected))

    if origin is not None:
        # list[int] and friends are only checked against their container class
        return isinstance(value, origin) if inspect.isclass(origin) else True

    if not inspect.isclass(expected):
        # TypeVar, NewType, Literal and similar constructs are not checked
        return True

    if _is_protocol(expected):
        if not _is_runtime_checkable_protocol(expected):
            return True
        return isinstance(value, expected)

    return isinstance(value, expected)


def _is_runtime_checkable_protocol(tp: type) -> bool:
    try:
        isinstance(None, tp)
    except TypeError:
        return False
    else:
        return True


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: type) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def _is_protocol(tp: type) -> bool:
        """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
        return inspect.isclass(tp) and issubclass(tp, cast("type", Protocol))
