"""Pytest configuration and shared fixtures."""
import pytest

from ehierarchy import AccessorPair, EHierarchy, ObjectDirectory, clear_binding_cache
import ehierarchy.config as config_module


class Entity(EHierarchy):
    """Sample subclass exercising every accessor style.

    - first_name / last_name: separate generic writer and reader
    - mapping / sequence: unified generic accessor with dict / list storage
    - read_only flag: handler swaps the name writers for one that rejects
      writes and raises the error flag
    """

    def _init(self, config):
        generic = self.generic_accessor
        self.declare_property('first_name', AccessorPair(generic, generic))
        self.declare_property('last_name', AccessorPair(generic, generic))
        self.declare_property('mapping', default={})
        self.declare_property('sequence', default=[])

        self.declare_flag('read_only', self._switch_mode)
        self.declare_flag('error')

        self.apply_config(config)
        return True

    def _switch_mode(self, old_value, new_value):
        writer = self._reject_write if new_value else self.generic_accessor
        for name in ('first_name', 'last_name'):
            self.declare_property(name, AccessorPair(writer, self.generic_accessor))
        return new_value

    def _reject_write(self, name, *values):
        self.error = True
        return False


@pytest.fixture(autouse=True)
def isolated_runtime():
    """Give each test an empty directory, an empty binding cache and default settings."""
    original_objects = dict(ObjectDirectory._objects)
    original_register = list(ObjectDirectory._on_register_callbacks)
    original_unregister = list(ObjectDirectory._on_unregister_callbacks)
    original_settings = config_module._runtime_settings

    ObjectDirectory._objects.clear()
    clear_binding_cache()

    yield

    ObjectDirectory._objects.clear()
    ObjectDirectory._objects.update(original_objects)
    ObjectDirectory._on_register_callbacks[:] = original_register
    ObjectDirectory._on_unregister_callbacks[:] = original_unregister
    config_module._runtime_settings = original_settings
    clear_binding_cache()


@pytest.fixture
def entity_cls():
    """Provide the sample Entity subclass."""
    return Entity


@pytest.fixture
def family():
    """Provide a root -> mid -> leaf chain of entities."""
    root = Entity(name='root')
    mid = Entity(parent=root, name='mid')
    leaf = Entity(parent=mid, name='leaf')
    return root, mid, leaf
