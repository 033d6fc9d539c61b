"""
Expression function set.

Layout expressions are JSON arrays whose first element names a function,
e.g. ``["equals", ["dataModel", "Root.Status"], "done"]``. Evaluators consume
the context tree to resolve ``dataModel`` and ``component`` lookups; this
module only fixes the set of function names they must support.
"""

from enum import Enum


class ExpressionFunction(str, Enum):
    """Valid functions in layout expressions."""

    INVALID = "INVALID"  # Value for all unknown functions
    DATA_MODEL = "dataModel"  # Lookup in data model (missing indexes filled from context)
    COMPONENT = "component"  # Lookup the simpleBinding value of a component by id
    INSTANCE_CONTEXT = "instanceContext"  # Lookup a few properties from the instance
    IF = "if"
    FRONTEND_SETTINGS = "frontendSettings"
    CONCAT = "concat"
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN_EQ = "greaterThanEq"
    LESS_THAN = "lessThan"
    LESS_THAN_EQ = "lessThanEq"
    GREATER_THAN = "greaterThan"
    AND = "and"
    OR = "or"
    NOT = "not"
    GATEWAY_ACTION = "gatewayAction"  # Action performed in the task before a gateway

    @classmethod
    def parse(cls, name: str) -> "ExpressionFunction":
        """Resolve a function name; unknown names map to INVALID."""
        try:
            function = cls(name)
        except ValueError:
            return cls.INVALID
        return function

    @property
    def is_lookup(self) -> bool:
        """Whether the function reads from the context tree or instance."""
        return self in (
            ExpressionFunction.DATA_MODEL,
            ExpressionFunction.COMPONENT,
            ExpressionFunction.INSTANCE_CONTEXT,
            ExpressionFunction.GATEWAY_ACTION,
        )
