"""
Component Lookup Index

Flattens every page of a layout-set once, at construction time, so that a
(page, component id) pair resolves to its static component in constant time.
"""

import logging
from typing import Iterable, Sequence

from formlayout.core.exceptions import (
    ComponentNotFoundError,
    LayoutConfigurationError,
    PageNotFoundError,
)
from formlayout.models.contracts.layout_components import (
    ComponentBase,
    PageComponent,
    component_children,
)

logger = logging.getLogger(__name__)


def flatten_components(components: Iterable[ComponentBase]) -> list[ComponentBase]:
    """
    Flatten a component forest depth-first, parents before their children.

    Sibling order is preserved:
        [group(a, b), c] -> [group, a, b, c]
    """
    flat: list[ComponentBase] = []
    for component in components:
        flat.append(component)
        flat.extend(flatten_components(component_children(component)))
    return flat


class ComponentLookup:
    """(page, component id) -> component index for one layout-set."""

    def __init__(self, layout_set_id: str, pages: Sequence[PageComponent]):
        self.layout_set_id = layout_set_id
        self._pages: dict[str, dict[str, ComponentBase]] = {}

        for page in pages:
            if page.id in self._pages:
                raise LayoutConfigurationError(
                    f"Duplicate page '{page.id}' in layout-set '{layout_set_id}'"
                )
            index: dict[str, ComponentBase] = {}
            for component in flatten_components(page.children):
                if component.id in index:
                    raise LayoutConfigurationError(
                        f"Duplicate component id '{component.id}' on page '{page.id}' "
                        f"in layout-set '{layout_set_id}'"
                    )
                if component.page != page.id:
                    raise LayoutConfigurationError(
                        f"Component '{component.id}' declares page '{component.page}' "
                        f"but is placed on page '{page.id}'"
                    )
                index[component.id] = component
            self._pages[page.id] = index

        logger.debug(
            f"Indexed {len(self)} components on {len(self._pages)} pages "
            f"of layout-set '{layout_set_id}'"
        )

    def __len__(self) -> int:
        return sum(len(index) for index in self._pages.values())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        page_name, component_id = key
        return component_id in self._pages.get(page_name, {})

    def get(self, page_name: str, component_id: str) -> ComponentBase:
        """
        Resolve a component by page and id.

        Raises:
            PageNotFoundError: If the page is not part of the layout-set
            ComponentNotFoundError: If the page has no such component
        """
        try:
            index = self._pages[page_name]
        except KeyError:
            raise PageNotFoundError(self.layout_set_id, page_name) from None
        try:
            return index[component_id]
        except KeyError:
            raise ComponentNotFoundError(page_name, component_id) from None

    def components_on(self, page_name: str) -> list[ComponentBase]:
        """All components of a page in flattening order."""
        try:
            return list(self._pages[page_name].values())
        except KeyError:
            raise PageNotFoundError(self.layout_set_id, page_name) from None
