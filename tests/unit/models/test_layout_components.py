"""Unit tests for layout component contracts."""

import pytest
from pydantic import TypeAdapter, ValidationError

from formlayout.models.contracts.layout_components import (
    ComponentKind,
    GroupComponent,
    LayoutComponent,
    LeafComponent,
    ModelBinding,
    PageComponent,
    RepeatingGroupComponent,
    SubFormComponent,
    can_have_children,
    component_children,
)


def test_discriminated_union_routes_by_type():
    """LayoutComponent union should route to the right model by type."""
    adapter = TypeAdapter(LayoutComponent)

    assert isinstance(adapter.validate_python({"id": "a", "type": "Input", "page": "p"}), LeafComponent)
    assert isinstance(adapter.validate_python({"id": "g", "type": "Group", "page": "p"}), GroupComponent)
    assert isinstance(
        adapter.validate_python({"id": "r", "type": "RepeatingGroup", "page": "p"}),
        RepeatingGroupComponent,
    )
    assert isinstance(
        adapter.validate_python({"id": "s", "type": "Subform", "page": "p", "layoutSet": "other"}),
        SubFormComponent,
    )


@pytest.mark.parametrize(
    "component_type,kind",
    [
        ("Input", ComponentKind.LEAF),
        ("Header", ComponentKind.LEAF),
        ("Group", ComponentKind.GROUP),
        ("RepeatingGroup", ComponentKind.REPEATING_GROUP),
        ("Subform", ComponentKind.SUBFORM),
    ],
)
def test_kind_follows_type(component_type, kind):
    raw = {"id": "x", "type": component_type, "page": "p", "layoutSet": "other"}

    assert TypeAdapter(LayoutComponent).validate_python(raw).kind is kind


def test_string_bindings_are_coerced():
    component = LeafComponent(
        id="a",
        type="Input",
        page="p",
        dataModelBindings={"simpleBinding": "Root.Name", "list": {"field": "Lines", "dataType": "other"}},
    )

    assert component.data_model_bindings["simpleBinding"] == ModelBinding(field="Root.Name")
    assert component.data_model_bindings["list"].data_type == "other"


def test_repeating_group_binding():
    group = RepeatingGroupComponent(id="r", page="p", data_model_bindings={"group": "Root.Items"})

    assert group.group_binding == ModelBinding(field="Root.Items")
    assert RepeatingGroupComponent(id="r", page="p").group_binding is None


def test_subform_requires_layout_set():
    with pytest.raises(ValidationError):
        SubFormComponent(id="s", page="p")


def test_components_are_frozen():
    component = LeafComponent(id="a", type="Input", page="p")

    with pytest.raises(ValidationError):
        component.id = "b"


def test_page_assigns_page_name_to_nested_children():
    page = PageComponent.model_validate({
        "id": "page1",
        "children": [
            {"id": "g", "type": "Group", "children": [{"id": "a", "type": "Input"}]},
            {"id": "b", "type": "Input", "page": "explicit"},
        ],
    })

    assert page.page == "page1"
    assert page.kind is ComponentKind.GROUP
    assert page.children[0].page == "page1"
    assert page.children[0].children[0].page == "page1"
    assert page.children[1].page == "explicit"


def test_component_children_helpers():
    page = PageComponent.model_validate({
        "id": "p",
        "children": [
            {"id": "r", "type": "RepeatingGroup", "children": [{"id": "a", "type": "Input"}]},
            {"id": "s", "type": "Subform", "layoutSet": "other"},
        ],
    })
    repeating, subform = page.children

    assert can_have_children(repeating)
    assert [child.id for child in component_children(repeating)] == ["a"]
    assert not can_have_children(subform)
    assert component_children(subform) == []
    assert component_children(repeating.children[0]) == []
