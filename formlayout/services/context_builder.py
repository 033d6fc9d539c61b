"""
Context Builder

Materializes the static component tree of a layout-set into ComponentContext
trees for one instance:

- groups recurse into their children on the same row
- repeating groups ask the data accessor for the length of their "group"
  collection and recurse into their children once per row, appending the row
  index to the index path
- sub-forms restart the recursion at the pages of the referenced layout-set,
  once per data element of that set's data type, with an empty index path

The only suspension points are data accessor calls. Any accessor error aborts
the build; partially built trees are discarded.
"""

import asyncio
import logging
from functools import partial
from typing import Awaitable, Callable, Sequence, TypeVar

from formlayout.models.contracts.component_context import ComponentContext
from formlayout.models.contracts.instances import DataElementIdentifier, Instance
from formlayout.models.contracts.layout_components import (
    ComponentBase,
    ComponentKind,
    GroupComponent,
    RepeatingGroupComponent,
    SubFormComponent,
)
from formlayout.services.data_accessor import DataAccessor
from formlayout.services.layout_set import LayoutSet

logger = logging.getLogger(__name__)

T = TypeVar("T")

LayoutSetResolver = Callable[[str], LayoutSet]


class ContextBuilder:
    """
    Builds context trees for one instance.

    Args:
        resolve_layout_set: Returns the layout-set for an id, raising
            LayoutSetNotFoundError for unknown ids
        instance: Instance whose data elements sub-forms expand over
        data_accessor: Source of collection lengths
        concurrent: Build pages and sub-form data elements concurrently.
            Output order is the same as a sequential build.
    """

    def __init__(
        self,
        resolve_layout_set: LayoutSetResolver,
        instance: Instance,
        data_accessor: DataAccessor,
        concurrent: bool = False,
    ):
        self.resolve_layout_set = resolve_layout_set
        self.instance = instance
        self.data_accessor = data_accessor
        self.concurrent = concurrent

    async def build_pages(
        self,
        layout_set: LayoutSet,
        data_element: DataElementIdentifier,
    ) -> list[ComponentContext]:
        """One context per page of ``layout_set``, rooted at ``data_element``."""
        logger.debug(
            f"Building {len(layout_set.pages)} pages of layout-set '{layout_set.id}' "
            f"for data element {data_element.id}"
        )
        return await self._run_all(
            [partial(self.build, page, data_element) for page in layout_set.pages]
        )

    async def build(
        self,
        component: ComponentBase,
        data_element: DataElementIdentifier,
        index_path: tuple[int, ...] = (),
    ) -> ComponentContext:
        """Build the context subtree for one component occurrence."""
        kind = component.kind

        if kind is ComponentKind.LEAF:
            return ComponentContext(component, data_element, index_path)
        if kind is ComponentKind.GROUP:
            return await self._build_group(component, data_element, index_path)  # type: ignore[arg-type]
        if kind is ComponentKind.REPEATING_GROUP:
            return await self._build_repeating_group(component, data_element, index_path)  # type: ignore[arg-type]
        if kind is ComponentKind.SUBFORM:
            return await self._build_subform(component, data_element)  # type: ignore[arg-type]

        raise TypeError(f"Unhandled component kind {kind!r} for component '{component.id}'")

    async def _build_group(
        self,
        group: GroupComponent,
        data_element: DataElementIdentifier,
        index_path: tuple[int, ...],
    ) -> ComponentContext:
        children = []
        for child in group.children:
            children.append(await self.build(child, data_element, index_path))
        return ComponentContext(group, data_element, index_path, children=tuple(children))

    async def _build_repeating_group(
        self,
        group: RepeatingGroupComponent,
        data_element: DataElementIdentifier,
        index_path: tuple[int, ...],
    ) -> ComponentContext:
        binding = group.group_binding
        if binding is None:
            return ComponentContext(group, data_element, index_path, row_length=None)

        row_length = await self.data_accessor.get_collection_length(
            binding, data_element, index_path
        )

        children = []
        for row in range(row_length or 0):
            row_path = index_path + (row,)
            for child in group.children:
                children.append(await self.build(child, data_element, row_path))

        return ComponentContext(
            group, data_element, index_path, row_length=row_length, children=tuple(children)
        )

    async def _build_subform(
        self,
        subform: SubFormComponent,
        data_element: DataElementIdentifier,
    ) -> ComponentContext:
        # Unknown layout-sets fail here, before any data is read
        layout_set = self.resolve_layout_set(subform.layout_set)
        subform_elements = self.data_accessor.list_data_elements_of_type(
            self.instance, layout_set.data_type.id
        )
        logger.debug(
            f"Sub-form '{subform.id}' expands layout-set '{layout_set.id}' "
            f"for {len(subform_elements)} data elements"
        )

        children = await self._run_all(
            [
                partial(self._build_subform_element, subform, layout_set, element)
                for element in subform_elements
            ]
        )
        return ComponentContext(subform, data_element, children=tuple(children))

    async def _build_subform_element(
        self,
        subform: SubFormComponent,
        layout_set: LayoutSet,
        data_element: DataElementIdentifier,
    ) -> ComponentContext:
        pages = await self.build_pages(layout_set, data_element)
        return ComponentContext(subform, data_element, children=tuple(pages))

    async def _run_all(self, factories: Sequence[Callable[[], Awaitable[T]]]) -> list[T]:
        """Await each factory's result, keeping input order."""
        if not self.concurrent or len(factories) < 2:
            results = []
            for factory in factories:
                results.append(await factory())
            return results

        tasks = [asyncio.ensure_future(factory()) for factory in factories]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
