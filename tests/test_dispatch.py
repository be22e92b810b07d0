"""
Tests for bare-name dispatch.

Tests cover:
- Property reads/writes and flag reads/writes by bare name
- Property precedence over same-named flags
- Binding cache population and re-validation
- Identical results with the cache disabled
- supports() capability probing
"""

import gc
import weakref

import pytest
from ehierarchy import (
    Binding,
    Dispatcher,
    EHierarchy,
    NotWritableError,
    RuntimeSettings,
    UnknownAttributeError,
    set_runtime_settings,
)
from ehierarchy.dispatch import _binding_cache, get_cached_binding


class Shared(EHierarchy):
    """Declares 'status' as a property AND a flag, 'ready' as a flag only."""

    def _init(self, config):
        self.declare_property('status', default='idle')
        self.declare_flag('status')
        self.declare_flag('ready')
        self.apply_config(config)
        return True


class Dynamic(EHierarchy):
    """Declares 'mode' as a property or a flag depending on configuration."""

    def _init(self, config):
        if config.extra.get('as_flag'):
            self.declare_flag('mode')
        else:
            self.declare_property('mode', default='manual')
        return True


class TestBareNames:
    """Test attribute-style access."""

    def test_property_read_write(self, entity_cls):
        person = entity_cls(name='ada', first_name='Ada')
        assert person.first_name == 'Ada'

        person.first_name = 'Augusta'
        assert person.first_name == 'Augusta'
        assert person.read_property('first_name') == 'Augusta'

    def test_flag_read_write(self, entity_cls):
        person = entity_cls(name='ada')
        assert person.error is False

        person.error = 1
        assert person.error is True
        assert person.flag('error') is True

    def test_name_is_read_only(self, entity_cls):
        person = entity_cls(name='ada')
        assert person.name == 'ada'
        with pytest.raises(NotWritableError):
            person.name = 'bob'
        assert person.name == 'ada'

    def test_unknown_bare_name(self, entity_cls):
        person = entity_cls(name='ada')
        with pytest.raises(UnknownAttributeError):
            person.nickname
        assert hasattr(person, 'nickname') is False

    def test_undeclared_assignment_is_plain_attribute(self, entity_cls):
        """Names that are not declared are ordinary instance attributes."""
        person = entity_cls(name='ada')
        person.note = 'plain'
        assert person.note == 'plain'
        assert person.has_property('note') is False

    def test_resolve_multi_value_write(self, entity_cls):
        person = entity_cls(name='ada')
        assert person.resolve('sequence', 'a', 'b') is True
        assert person.resolve('sequence') == ['a', 'b']

    def test_resolve_flag(self, entity_cls):
        person = entity_cls(name='ada')
        assert person.resolve('error', True) is True
        assert person.resolve('error') is True
        with pytest.raises(TypeError):
            person.resolve('error', True, False)


class TestPrecedence:
    """Test property-over-flag precedence."""

    def test_property_wins(self):
        obj = Shared(name='shared')
        assert obj.status == 'idle'
        assert Dispatcher.binding_for(obj, 'status') is Binding.PROPERTY

        obj.status = 'busy'
        assert obj.status == 'busy'
        # The flag is untouched and still reachable explicitly
        assert obj.flag('status') is False

    def test_flag_only(self):
        obj = Shared(name='shared')
        assert Dispatcher.binding_for(obj, 'ready') is Binding.FLAG
        obj.ready = True
        assert obj.ready is True


class TestBindingCache:
    """Test memoized resolution."""

    def test_cache_populated_per_type(self, entity_cls):
        person = entity_cls(name='ada')
        assert get_cached_binding(entity_cls, 'first_name') is None

        person.first_name
        assert get_cached_binding(entity_cls, 'first_name') is Binding.PROPERTY

        person.error
        assert get_cached_binding(entity_cls, 'error') is Binding.FLAG

    def test_cached_binding_revalidated_per_instance(self):
        """Instances of one type may declare a name differently."""
        as_property = Dynamic(name='p')
        as_flag = Dynamic(name='f', as_flag=True)

        assert as_property.mode == 'manual'
        assert get_cached_binding(Dynamic, 'mode') is Binding.PROPERTY

        assert as_flag.mode is False
        assert get_cached_binding(Dynamic, 'mode') is Binding.FLAG

        assert as_property.mode == 'manual'

    def test_cache_disabled_gives_same_results(self):
        set_runtime_settings(RuntimeSettings(cache_bindings=False))

        as_property = Dynamic(name='p')
        as_flag = Dynamic(name='f', as_flag=True)

        assert as_property.mode == 'manual'
        assert as_flag.mode is False
        assert get_cached_binding(Dynamic, 'mode') is None

    def test_discarded_types_released(self):
        """The cache does not keep classes alive."""
        def make_scratch():
            class Scratch(EHierarchy):
                def _init(self, config):
                    self.declare_property('value', default=1)
                    return True

            obj = Scratch(name='scratch')
            assert obj.value == 1
            assert get_cached_binding(Scratch, 'value') is Binding.PROPERTY
            obj.terminate()
            return weakref.ref(Scratch)

        scratch_ref = make_scratch()
        gc.collect()

        assert scratch_ref() is None
        assert len(_binding_cache) == 0

    def test_unknown_name_not_cached(self, entity_cls):
        person = entity_cls(name='ada')
        with pytest.raises(UnknownAttributeError):
            person.resolve('nickname')
        assert get_cached_binding(entity_cls, 'nickname') is None


class TestSupports:
    """Test capability probing."""

    def test_native_members(self, entity_cls):
        person = entity_cls(name='ada')
        assert person.supports('terminate') is True
        assert person.supports('children') is True

    def test_declared_before_first_access(self, entity_cls):
        """Declared names are supported before they were ever accessed."""
        person = entity_cls(name='ada')
        assert get_cached_binding(entity_cls, 'last_name') is None

        assert person.supports('last_name') is True
        assert person.supports('read_only') is True
        assert get_cached_binding(entity_cls, 'last_name') is Binding.PROPERTY

    def test_unknown(self, entity_cls):
        person = entity_cls(name='ada')
        assert person.supports('nickname') is False

    def test_probe_does_not_fire_handlers(self):
        calls = []

        class Watched(EHierarchy):
            def _init(self, config):
                self.declare_flag('watched', lambda old, new: calls.append(new) or new)
                return True

        obj = Watched(name='watched')
        assert obj.supports('watched') is True
        assert calls == []
