"""
Exception hierarchy for the ehierarchy runtime.

Every failure the runtime reports derives from EHierarchyError so callers can
catch the whole family at once. All of them are local and recoverable except
ConfigurationError, which means no object was created.
"""


class EHierarchyError(Exception):
    """Base class for all runtime errors."""


class ConfigurationError(EHierarchyError):
    """Construction failed (missing name, or the subclass _init refused)."""


class UnknownAttributeError(EHierarchyError, AttributeError):
    """Access to a property (or bare name) that was never declared.

    Also an AttributeError so that getattr()/hasattr() behave normally.
    """

    def __init__(self, name: str, owner: str = ""):
        self.name = name
        self.owner = owner
        where = f" on {owner}" if owner else ""
        super().__init__(f"No property or flag defined by that name ({name}){where}")


class UnknownFlagError(EHierarchyError):
    """Access to a flag that was never declared."""

    def __init__(self, name: str, owner: str = ""):
        self.name = name
        self.owner = owner
        where = f" on {owner}" if owner else ""
        super().__init__(f"No flag defined by that name ({name}){where}")


class NotWritableError(EHierarchyError):
    """The property has no write accessor."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Property {name} doesn't appear to have a write method")


class NotReadableError(EHierarchyError):
    """The property has no read accessor."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Property {name} doesn't appear to have a read method")


class RegistrationConflictError(EHierarchyError):
    """An object with the same fully qualified name is already registered."""

    def __init__(self, full_name: str):
        self.full_name = full_name
        super().__init__(f"An object named {full_name!r} is already registered")


class DeregistrationMissError(EHierarchyError):
    """Deregistering a name the directory does not hold."""

    def __init__(self, full_name: str):
        self.full_name = full_name
        super().__init__(f"No object named {full_name!r} is registered")


class InvalidOperatorError(EHierarchyError):
    """Unrecognized boolean combinator."""

    def __init__(self, op):
        self.op = op
        super().__init__(f"Unknown logical operator {op!r} (expected AND, OR or XOR)")


class NoOperandsError(EHierarchyError):
    """A flag combination had no valid flag names to fold."""


class TerminatedObjectError(EHierarchyError):
    """The object was terminated and can no longer be used."""

    def __init__(self, full_name: str):
        self.full_name = full_name
        super().__init__(f"Object {full_name!r} has been terminated")
