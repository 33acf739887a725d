import copy
import unittest

from microinjection import InjectionKey, InjectionValues, key_property


class AKey(InjectionKey[str]):
    default_value = "a"


class AppValues(InjectionValues):
    a = key_property(AKey)


class TestCopyIsolation(unittest.TestCase):
    original: InjectionValues

    def setUp(self):
        self.original = InjectionValues()

    def test_setting_on_copy_does_not_change_original(self):
        clone = self.original.copy()
        clone.set_value(AKey, "A")

        assert clone.get(AKey) == "A"
        assert self.original.get(AKey) == "a"

    def test_setting_on_original_does_not_change_copy(self):
        clone = self.original.copy()
        self.original.set_value(AKey, "A")

        assert self.original.get(AKey) == "A"
        assert clone.get(AKey) == "a"

    def test_copy_keeps_overrides_present_at_copy_time(self):
        self.original.set_value(AKey, "A")
        clone = self.original.copy()

        assert clone.get(AKey) == "A"

    def test_reset_on_copy_does_not_change_original(self):
        self.original.set_value(AKey, "A")
        clone = self.original.copy()
        clone.reset_to_default(AKey)

        assert clone.get(AKey) == "a"
        assert self.original.get(AKey) == "A"

    def test_copy_module_produces_independent_container(self):
        clone = copy.copy(self.original)
        clone.set_value(AKey, "A")

        assert clone is not self.original
        assert self.original.get(AKey) == "a"


def test_copy_preserves_subclass_and_properties():
    values = AppValues()
    values.a = "A"

    clone = values.copy()
    clone.a = "B"

    assert type(clone) is AppValues
    assert values.a == "A"
    assert clone.a == "B"


def test_copy_preserves_miss_handler():
    calls = []

    def handler(key):
        calls.append(key)

    clone = InjectionValues(miss_handler=handler).copy()

    assert clone.get(AKey) == "a"
    assert calls == [AKey]


def test_copy_shares_provider_functions():
    counter = iter(range(1, 100))
    original = InjectionValues()
    original.set(AKey, lambda: str(next(counter)))

    clone = original.copy()

    assert original.get(AKey) == "1"
    assert clone.get(AKey) == "2"


def test_deepcopy_produces_independent_container():
    values = AppValues()
    values.a = "A"

    clone = copy.deepcopy(values)
    clone.a = "B"

    assert type(clone) is AppValues
    assert values.a == "A"
    assert clone.a == "B"


def test_deepcopy_of_consumer_holding_container():
    class Holder:
        def __init__(self, injection):
            self.injection = injection

    holder = Holder(InjectionValues())
    holder.injection.set_value(AKey, "A")

    clone = copy.deepcopy(holder)
    clone.injection.reset_to_default(AKey)

    assert holder.injection.get(AKey) == "A"
    assert clone.injection.get(AKey) == "a"


def test_deepcopy_keeps_miss_handler_and_providers():
    calls = []

    def handler(key):
        calls.append(key)

    class OtherKey(InjectionKey[int]):
        default_value = 0

    values = InjectionValues(miss_handler=handler)
    values.set(OtherKey, lambda: 7)

    clone = copy.deepcopy(values)

    assert clone.get(OtherKey) == 7
    assert clone.get(AKey) == "a"
    assert calls == [AKey]
