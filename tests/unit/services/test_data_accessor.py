"""Unit tests for binding path resolution and InstanceDataAccessor."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from formlayout.core.exceptions import DataAccessError, LayoutConfigurationError
from formlayout.models.contracts.instances import DataElementIdentifier
from formlayout.models.contracts.layout_components import ModelBinding
from formlayout.services.data_accessor import (
    DataAccessor,
    InstanceDataAccessor,
    parse_binding_path,
    resolve_path,
)
from tests.helpers.factories import make_instance

MAIN = DataElementIdentifier(id="d-main", data_type_id="model")

FORM_DATA = {
    "Root": {
        "Title": "Household",
        "People": [
            {"Name": "Ada", "Pets": [{"Name": "Rex"}, {"Name": "Tom"}]},
            {"Name": "Bob", "Pets": []},
        ],
        "Empty": [],
        "Nothing": None,
    }
}


class TestParseBindingPath:
    def test_plain_path(self):
        assert parse_binding_path("Root.People.Name") == [("Root", None), ("People", None), ("Name", None)]

    def test_explicit_index(self):
        assert parse_binding_path("Root.People[1].Name") == [("Root", None), ("People", 1), ("Name", None)]

    @pytest.mark.parametrize("path", ["", "Root..Name", "Root.People[x]", "Root.People[1"])
    def test_malformed_paths_raise(self, path):
        with pytest.raises(LayoutConfigurationError):
            parse_binding_path(path)


class TestResolvePath:
    def test_scalar_without_repetition(self):
        assert resolve_path(FORM_DATA, "Root.Title") == "Household"

    def test_collection_at_end_of_path(self):
        assert resolve_path(FORM_DATA, "Root.People") == FORM_DATA["Root"]["People"]

    def test_context_indexes_applied_outermost_first(self):
        assert resolve_path(FORM_DATA, "Root.People.Pets.Name", [0, 1]) == "Tom"

    def test_list_in_middle_without_index_does_not_resolve(self):
        assert not isinstance(resolve_path(FORM_DATA, "Root.People.Name"), str)

    def test_explicit_index_wins_and_stops_inheritance(self):
        assert resolve_path(FORM_DATA, "Root.People[1].Name", [0]) == "Bob"
        assert not isinstance(resolve_path(FORM_DATA, "Root.People[0].Pets.Name", [1, 0]), str)

    def test_index_out_of_range_does_not_resolve(self):
        assert not isinstance(resolve_path(FORM_DATA, "Root.People.Name", [5]), str)

    def test_resolves_attributes_of_objects(self):
        class Person:
            def __init__(self, name):
                self.Name = name

        assert resolve_path({"People": [Person("Ada")]}, "People.Name", [0]) == "Ada"


@pytest.mark.asyncio
class TestInstanceDataAccessor:
    def _accessor(self, **kwargs) -> InstanceDataAccessor:
        instance = make_instance(("d-main", "model"), ("d-extra", "extraModel"))
        return InstanceDataAccessor(instance, **kwargs)

    async def test_satisfies_protocol(self):
        assert isinstance(self._accessor(), DataAccessor)

    async def test_collection_lengths(self):
        accessor = self._accessor(form_data={"d-main": FORM_DATA})

        assert await accessor.get_collection_length(ModelBinding(field="Root.People"), MAIN, ()) == 2
        assert await accessor.get_collection_length(ModelBinding(field="Root.People.Pets"), MAIN, (0,)) == 2
        assert await accessor.get_collection_length(ModelBinding(field="Root.People.Pets"), MAIN, (1,)) == 0
        assert await accessor.get_collection_length(ModelBinding(field="Root.Empty"), MAIN, ()) == 0

    async def test_unresolvable_collection_is_none(self):
        accessor = self._accessor(form_data={"d-main": FORM_DATA})

        assert await accessor.get_collection_length(ModelBinding(field="Root.Missing"), MAIN, ()) is None
        assert await accessor.get_collection_length(ModelBinding(field="Root.Nothing"), MAIN, ()) is None
        assert await accessor.get_collection_length(ModelBinding(field="Root.Title"), MAIN, ()) is None

    async def test_get_model_data(self):
        accessor = self._accessor(form_data={"d-main": FORM_DATA})

        assert await accessor.get_model_data(ModelBinding(field="Root.People.Name"), MAIN, [1]) == "Bob"
        assert await accessor.get_model_data(ModelBinding(field="Root.Missing"), MAIN, []) is None

    async def test_binding_to_other_data_type(self):
        accessor = self._accessor(form_data={"d-main": FORM_DATA, "d-extra": {"Lines": [1, 2, 3]}})
        binding = ModelBinding(field="Lines", data_type="extraModel")

        assert await accessor.get_collection_length(binding, MAIN, (1,)) == 3

    async def test_binding_to_missing_data_type_is_none(self):
        accessor = self._accessor(form_data={"d-main": FORM_DATA})
        binding = ModelBinding(field="Lines", data_type="unknownModel")

        assert await accessor.get_collection_length(binding, MAIN, ()) is None

    async def test_missing_form_data_without_loader_raises(self):
        accessor = self._accessor()

        with pytest.raises(DataAccessError) as exc_info:
            await accessor.get_collection_length(ModelBinding(field="Root.People"), MAIN, ())

        assert exc_info.value.data_element_id == "d-main"

    async def test_loader_called_once_per_element(self):
        loader = AsyncMock(return_value=FORM_DATA)
        accessor = self._accessor(loader=loader)
        binding = ModelBinding(field="Root.People")

        lengths = await asyncio.gather(
            *(accessor.get_collection_length(binding, MAIN, ()) for _ in range(5))
        )

        assert lengths == [2] * 5
        loader.assert_awaited_once_with(MAIN)

    async def test_loader_failure_is_wrapped(self):
        accessor = self._accessor(loader=AsyncMock(side_effect=OSError("connection reset")))

        with pytest.raises(DataAccessError, match="connection reset") as exc_info:
            await accessor.get_form_data(MAIN)

        assert isinstance(exc_info.value.__cause__, OSError)

    async def test_list_data_elements_of_type_keeps_instance_order(self):
        instance = make_instance(("b", "car"), ("x", "model"), ("a", "car"))
        accessor = InstanceDataAccessor(instance)

        elements = accessor.list_data_elements_of_type(instance, "car")

        assert [element.id for element in elements] == ["b", "a"]
