"""Unit tests for ComponentContext lookups and rendering."""

from formlayout.models.contracts.component_context import ComponentContext
from formlayout.models.contracts.expressions import ExpressionFunction
from formlayout.models.contracts.instances import DataElementIdentifier
from formlayout.models.contracts.layout_components import LeafComponent, RepeatingGroupComponent, SubFormComponent
from tests.helpers.factories import make_page

ELEMENT = DataElementIdentifier(id="d-main", data_type_id="model")


def _tree() -> ComponentContext:
    """page > [summary, rg(2 rows) > name]"""
    summary = LeafComponent(id="summary", type="Input", page="p")
    name = LeafComponent(id="name", type="Input", page="p")
    group = RepeatingGroupComponent(id="rg", page="p", data_model_bindings={"group": "Items"})
    rows = tuple(ComponentContext(name, ELEMENT, (row,)) for row in range(2))
    return ComponentContext(
        make_page("p", []),
        ELEMENT,
        children=(
            ComponentContext(summary, ELEMENT),
            ComponentContext(group, ELEMENT, (), row_length=2, children=rows),
        ),
    )


def test_descendants_preorder():
    assert [(node.id, node.index_path) for node in _tree().descendants()] == [
        ("summary", ()),
        ("rg", ()),
        ("name", (0,)),
        ("name", (1,)),
    ]


def test_find_exact_row():
    assert _tree().find("name", [1]).index_path == (1,)


def test_find_from_inside_row_reaches_outer_component():
    assert _tree().find("summary", (1,)).id == "summary"


def test_find_without_match_returns_none():
    tree = _tree()

    assert tree.find("missing") is None
    assert tree.find("name", ()) is None


def test_find_does_not_reach_into_subform_contents():
    """page1 > [sf > (car-a) > car1 > name, name]"""
    car_element = DataElementIdentifier(id="car-a", data_type_id="carModel")
    subform = SubFormComponent(id="sf", page="page1", layout_set="car")
    inner_name = LeafComponent(id="name", type="Input", page="car1")
    outer_name = LeafComponent(id="name", type="Input", page="page1")
    car_page = ComponentContext(make_page("car1", []), car_element, children=(ComponentContext(inner_name, car_element),))
    wrapper = ComponentContext(subform, car_element, children=(car_page,))
    page = ComponentContext(
        make_page("page1", []),
        ELEMENT,
        children=(
            ComponentContext(subform, ELEMENT, children=(wrapper,)),
            ComponentContext(outer_name, ELEMENT),
        ),
    )

    assert page.find("name").data_element.id == "d-main"
    assert page.find("sf").data_element.id == "d-main"
    assert wrapper.find("name").data_element.id == "car-a"
    assert [node.id for node in page.descendants()].count("name") == 2

def test_to_dict():
    rendered = _tree().to_dict()

    group = rendered["children"][1]
    assert group["row_length"] == 2
    assert group["children"][1] == {
        "id": "name",
        "type": "Input",
        "page": "p",
        "index_path": [1],
        "data_element_id": "d-main",
    }
    assert "row_length" not in rendered["children"][0]


def test_expression_function_parse():
    assert ExpressionFunction.parse("dataModel") is ExpressionFunction.DATA_MODEL
    assert ExpressionFunction.parse("if") is ExpressionFunction.IF
    assert ExpressionFunction.parse("regexMatch") is ExpressionFunction.INVALID
    assert ExpressionFunction.COMPONENT.is_lookup
    assert not ExpressionFunction.CONCAT.is_lookup
