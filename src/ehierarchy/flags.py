"""
Boolean flag register with a rudimentary event protocol.

Flags are named booleans. Each flag may carry an event handler, called as
``handler(old_value, new_value)`` on EVERY access of the flag, reads included,
not only when the value changes. Whatever the handler returns (coerced to
bool) becomes the stored state of the flag, so handlers can veto or re-derive
a value each time it is touched.

Handlers run immediately during register access. A handler that touches
another flag whose handler touches the first one again recurses without
bound; avoiding such loops is up to the handler author.
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from ehierarchy.errors import InvalidOperatorError, NoOperandsError, UnknownFlagError

logger = logging.getLogger(__name__)

EventHandler = Callable[[bool, bool], object]


class FlagOperator(str, Enum):
    """Logical operators accepted by FlagRegister.combine()."""
    AND = "AND"
    OR = "OR"
    XOR = "XOR"

    def apply(self, left: bool, right: bool) -> bool:
        if self is FlagOperator.AND:
            return left and right
        if self is FlagOperator.OR:
            return left or right
        return left != right

    @classmethod
    def parse(cls, op: Union[str, 'FlagOperator']) -> 'FlagOperator':
        try:
            return cls(op)
        except ValueError:
            raise InvalidOperatorError(op) from None


class FlagRegister:
    """Per-instance flag declarations and their current state.

    Attributes:
        handlers: flag name -> event handler (None for plain flags)
        register: flag name -> current state, populated on first touch
    """

    def __init__(self):
        self.handlers: Dict[str, Optional[EventHandler]] = {}
        self.register: Dict[str, bool] = {}

    def declare(self, name: str, handler: Optional[EventHandler] = None) -> None:
        """Declare (or redeclare) a flag. The current state is kept."""
        if handler is not None and not callable(handler):
            raise TypeError(f"Event handler for flag {name} must be callable")
        self.handlers[name] = handler

    def has(self, name: str) -> bool:
        return name in self.handlers

    def names(self) -> List[str]:
        return list(self.handlers)

    def access(self, name: str, value: Optional[object] = None) -> bool:
        """Read a flag, or set it when ``value`` is given.

        The event handler (if any) fires after the read/write and its return
        value becomes the stored state.

        Returns:
            The stored state after the handler ran.

        Raises:
            UnknownFlagError: name is not declared
        """
        self._require(name)

        old_value = self.register.setdefault(name, False)
        if value is not None:
            new_value = bool(value)
            self.register[name] = new_value
        else:
            new_value = old_value

        handler = self.handlers[name]
        if handler is not None:
            self.register[name] = bool(handler(old_value, new_value))

        return self.register[name]

    def peek(self, name: str) -> bool:
        """Get the register value without firing the event handler."""
        self._require(name)
        return self.register.setdefault(name, False)

    def _require(self, name: str) -> None:
        if name not in self.handlers:
            logger.warning(f"No flag defined by that name ({name})")
            raise UnknownFlagError(name)

    def combine(self, op: Union[str, FlagOperator], *names: str) -> bool:
        """Fold the named flags with a logical operator.

        Values come straight from the register (no handlers fire). Unknown
        flag names are logged and skipped.

        Args:
            op: "AND", "OR" or "XOR" (XOR is pairwise inequality, left to right)
            *names: Flags to combine

        Raises:
            InvalidOperatorError: op is not a known operator
            NoOperandsError: none of the names is a declared flag
        """
        operator = FlagOperator.parse(op)

        values = []
        for name in names:
            if name not in self.handlers:
                logger.warning(f"No such flag ({name}) to check, skipping")
                continue
            values.append(self.register.setdefault(name, False))

        if not values:
            raise NoOperandsError(f"No valid flags to combine with {operator.value}: {list(names)}")

        result = values[0]
        for value in values[1:]:
            result = operator.apply(result, value)
        return result
