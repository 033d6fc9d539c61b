"""
Layout Component Definitions

Core types for the static layout tree of a form page.

Every component is one of a closed set of shapes, identified by a
ComponentKind tag derived from its ``type``:

- leaf components (Input, TextArea, Header, ...) have no children
- groups ("Group") hold children sharing the parent's row
- repeating groups ("RepeatingGroup") instantiate their children once per
  element of the collection bound under the "group" binding
- sub-forms ("Subform") embed another layout-set once per matching data element

Pages are groups whose id is the page name.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)


# -----------------------------------------------------------------------------
# Kinds
# -----------------------------------------------------------------------------


class ComponentKind(str, Enum):
    """Structural kind of a component, used for builder dispatch."""

    LEAF = "leaf"
    GROUP = "group"
    REPEATING_GROUP = "repeating_group"
    SUBFORM = "subform"


GROUP_TYPE = "Group"
REPEATING_GROUP_TYPE = "RepeatingGroup"
SUBFORM_TYPE = "Subform"
PAGE_TYPE = "Page"

# Binding name that points a repeating group at its collection
GROUP_BINDING = "group"

_TAG_BY_TYPE = {
    GROUP_TYPE: ComponentKind.GROUP.value,
    REPEATING_GROUP_TYPE: ComponentKind.REPEATING_GROUP.value,
    SUBFORM_TYPE: ComponentKind.SUBFORM.value,
}


# -----------------------------------------------------------------------------
# Bindings
# -----------------------------------------------------------------------------


class ModelBinding(BaseModel):
    """
    Reference into a data model.

    ``field`` is a dotted path (``Root.People.Name``) that may carry explicit
    row indexes (``Root.People[0].Name``). ``data_type`` targets another data
    type of the instance instead of the component's own data element.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    field: str = Field(description="Dotted path into the data model")
    data_type: str | None = Field(
        default=None, alias="dataType", description="Data type to read from"
    )

    def __str__(self) -> str:
        return self.field


# -----------------------------------------------------------------------------
# Component Base (shared fields for all components)
# -----------------------------------------------------------------------------


class ComponentBase(BaseModel):
    """Base fields shared by all components.

    Layout properties the core does not interpret (textResourceBindings,
    required, grid, ...) are kept as extra fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    kind: ClassVar[ComponentKind] = ComponentKind.LEAF

    id: str = Field(description="Component identifier, unique within its page")
    type: str = Field(description="Component type")
    page: str = Field(description="Name of the page holding the component")
    data_model_bindings: dict[str, ModelBinding] = Field(
        default_factory=dict,
        alias="dataModelBindings",
        description="Logical binding name -> data model reference",
    )
    hidden: Any = Field(default=None, description="Hidden expression")

    @field_validator("data_model_bindings", mode="before")
    @classmethod
    def coerce_bindings(cls, value: Any) -> Any:
        """Accept plain string bindings as shorthand for {"field": ...}."""
        if value is None:
            return {}
        if isinstance(value, dict):
            return {
                name: {"field": binding} if isinstance(binding, str) else binding
                for name, binding in value.items()
            }
        return value


class LeafComponent(ComponentBase):
    """Component without children (inputs, text, buttons, ...)."""

    kind: ClassVar[ComponentKind] = ComponentKind.LEAF


class GroupComponent(ComponentBase):
    """Non-repeating group; children share the group's row."""

    kind: ClassVar[ComponentKind] = ComponentKind.GROUP

    type: Literal["Group"] = Field(default="Group", description="Component type")
    children: list["LayoutComponent"] = Field(
        default_factory=list, description="Child components"
    )


class RepeatingGroupComponent(ComponentBase):
    """Group whose children repeat once per element of the bound collection."""

    kind: ClassVar[ComponentKind] = ComponentKind.REPEATING_GROUP

    type: Literal["RepeatingGroup"] = Field(
        default="RepeatingGroup", description="Component type"
    )
    children: list["LayoutComponent"] = Field(
        default_factory=list, description="Child components (one set per row)"
    )

    @property
    def group_binding(self) -> ModelBinding | None:
        return self.data_model_bindings.get(GROUP_BINDING)


class SubFormComponent(ComponentBase):
    """Embeds another layout-set once per data element of that set's data type."""

    kind: ClassVar[ComponentKind] = ComponentKind.SUBFORM

    type: Literal["Subform"] = Field(default="Subform", description="Component type")
    layout_set: str = Field(alias="layoutSet", description="Referenced layout-set id")


def _component_tag(value: Any) -> str:
    """Map a raw dict or component instance to its union tag."""
    if isinstance(value, dict):
        component_type = value.get("type")
    else:
        component_type = getattr(value, "type", None)
    return _TAG_BY_TYPE.get(component_type, ComponentKind.LEAF.value)


LayoutComponent = Annotated[
    Union[
        Annotated[LeafComponent, Tag(ComponentKind.LEAF.value)],
        Annotated[GroupComponent, Tag(ComponentKind.GROUP.value)],
        Annotated[RepeatingGroupComponent, Tag(ComponentKind.REPEATING_GROUP.value)],
        Annotated[SubFormComponent, Tag(ComponentKind.SUBFORM.value)],
    ],
    Discriminator(_component_tag),
]


# -----------------------------------------------------------------------------
# Page
# -----------------------------------------------------------------------------


def _assign_page(raw_components: list[Any], page_name: str) -> list[Any]:
    """Fill in ``page`` on raw child dicts (recursively) that do not set it."""
    assigned = []
    for raw in raw_components:
        if isinstance(raw, dict):
            raw = {"page": page_name, **raw}
            if isinstance(raw.get("children"), list):
                raw["children"] = _assign_page(raw["children"], page_name)
        assigned.append(raw)
    return assigned


class PageComponent(GroupComponent):
    """A page of a layout-set. Its id is the page name."""

    type: Literal["Page"] = Field(default="Page", description="Component type")  # type: ignore[assignment]

    @model_validator(mode="before")
    @classmethod
    def default_page_name(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "id" not in data:
            return data
        data = {"page": data["id"], **data}
        if isinstance(data.get("children"), list):
            data["children"] = _assign_page(data["children"], data["id"])
        return data


# Rebuild models for forward references
GroupComponent.model_rebuild()
RepeatingGroupComponent.model_rebuild()
PageComponent.model_rebuild()


# Any component, including pages
Component = Union[
    LeafComponent,
    GroupComponent,
    RepeatingGroupComponent,
    SubFormComponent,
    PageComponent,
]


# -----------------------------------------------------------------------------
# Type Guards (as functions)
# -----------------------------------------------------------------------------


def can_have_children(component: ComponentBase) -> bool:
    """Check if a component kind declares child components."""
    return component.kind in (ComponentKind.GROUP, ComponentKind.REPEATING_GROUP)


def component_children(component: ComponentBase) -> list[ComponentBase]:
    """Declared child components (empty for leaves and sub-forms)."""
    if can_have_children(component):
        return list(component.children)  # type: ignore[attr-defined]
    return []
