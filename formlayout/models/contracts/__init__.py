"""
Pydantic contracts for layouts, instances and context trees.

    from formlayout.models.contracts import Instance, PageComponent
    from formlayout.models.contracts.layout_components import GroupComponent  # Granular access
"""

from formlayout.models.contracts.component_context import ComponentContext
from formlayout.models.contracts.expressions import ExpressionFunction
from formlayout.models.contracts.instances import (
    DataElement,
    DataElementIdentifier,
    DataType,
    Instance,
    LayoutSetDefinition,
    ProcessElementInfo,
    ProcessState,
)
from formlayout.models.contracts.layout_components import (
    Component,
    ComponentKind,
    GroupComponent,
    LayoutComponent,
    LeafComponent,
    ModelBinding,
    PageComponent,
    RepeatingGroupComponent,
    SubFormComponent,
)

__all__ = [
    "Component",
    "ComponentContext",
    "ComponentKind",
    "DataElement",
    "DataElementIdentifier",
    "DataType",
    "ExpressionFunction",
    "GroupComponent",
    "Instance",
    "LayoutComponent",
    "LayoutSetDefinition",
    "LeafComponent",
    "ModelBinding",
    "PageComponent",
    "ProcessElementInfo",
    "ProcessState",
    "RepeatingGroupComponent",
    "SubFormComponent",
]
