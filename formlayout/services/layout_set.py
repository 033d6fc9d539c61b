"""
Layout Set

A named collection of pages rendered against one default data type.
"""

from typing import Sequence

from formlayout.core.exceptions import LayoutConfigurationError, PageNotFoundError
from formlayout.models.contracts.instances import DataElementIdentifier, DataType, Instance
from formlayout.models.contracts.layout_components import ComponentBase, PageComponent
from formlayout.services.component_lookup import ComponentLookup


class LayoutSet:
    """
    Immutable layout-set: ordered pages, default data type and a component index.

    Raises:
        LayoutConfigurationError: On construction, if the set has no pages or
            a page repeats a page name or component id.
    """

    def __init__(self, id: str, pages: Sequence[PageComponent], data_type: DataType):
        if not pages:
            raise LayoutConfigurationError(f"Layout-set '{id}' has no pages")

        self.id = id
        self.pages: tuple[PageComponent, ...] = tuple(pages)
        self.data_type = data_type
        self.component_lookup = ComponentLookup(id, self.pages)
        self._pages_by_name = {page.id: page for page in self.pages}

    def __repr__(self) -> str:
        return f"LayoutSet(id={self.id!r}, pages={list(self._pages_by_name)!r}, data_type={self.data_type.id!r})"

    @property
    def default_data_type(self) -> DataType:
        return self.data_type

    @property
    def page_names(self) -> list[str]:
        return [page.id for page in self.pages]

    def get_page(self, page_name: str) -> PageComponent:
        try:
            return self._pages_by_name[page_name]
        except KeyError:
            raise PageNotFoundError(self.id, page_name) from None

    def get_component(self, page_name: str, component_id: str) -> ComponentBase:
        return self.component_lookup.get(page_name, component_id)

    def get_default_data_element_id(self, instance: Instance) -> DataElementIdentifier | None:
        """First data element of the set's data type, or None if none exists yet."""
        for data_element in instance.data:
            if data_element.data_type == self.data_type.id:
                return data_element.identifier
        return None
