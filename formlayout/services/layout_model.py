"""
Layout Model

Registry of all layout-sets of an app with one default layout-set. Entry
point for generating component contexts for an instance.
"""

import logging
from typing import Iterator, Sequence

from formlayout.core.exceptions import LayoutConfigurationError, LayoutSetNotFoundError
from formlayout.models.contracts.component_context import ComponentContext
from formlayout.models.contracts.instances import DataElementIdentifier, DataType, Instance
from formlayout.models.contracts.layout_components import (
    ComponentBase,
    ComponentKind,
    component_children,
)
from formlayout.services.component_lookup import flatten_components
from formlayout.services.context_builder import ContextBuilder
from formlayout.services.data_accessor import DataAccessor
from formlayout.services.layout_set import LayoutSet

logger = logging.getLogger(__name__)


class LayoutModel:
    """
    Immutable set of layout-sets plus the default one.

    The default layout-set is ``default_layout_set_id`` when given, otherwise
    the first layout-set.

    Raises:
        LayoutConfigurationError: If no layout-sets are given, ids repeat, or
            sub-forms reference each other in a cycle
        LayoutSetNotFoundError: If ``default_layout_set_id`` is unknown
    """

    def __init__(
        self,
        layout_sets: Sequence[LayoutSet],
        default_layout_set_id: str | None = None,
    ):
        if not layout_sets:
            raise LayoutConfigurationError("A layout model needs at least one layout-set")

        self._layout_sets: dict[str, LayoutSet] = {}
        for layout_set in layout_sets:
            if layout_set.id in self._layout_sets:
                raise LayoutConfigurationError(f"Duplicate layout-set '{layout_set.id}'")
            self._layout_sets[layout_set.id] = layout_set

        if default_layout_set_id is None:
            self._default_layout_set = layout_sets[0]
        else:
            self._default_layout_set = self.get_layout_set(default_layout_set_id)

        self._check_subform_cycles()

    @property
    def default_layout_set(self) -> LayoutSet:
        return self._default_layout_set

    @property
    def layout_sets(self) -> list[LayoutSet]:
        return list(self._layout_sets.values())

    @property
    def default_data_type(self) -> DataType:
        """The data type of the default layout-set."""
        return self._default_layout_set.default_data_type

    def get_default_data_type(self) -> DataType:
        return self.default_data_type

    def get_layout_set(self, layout_set_id: str) -> LayoutSet:
        try:
            return self._layout_sets[layout_set_id]
        except KeyError:
            raise LayoutSetNotFoundError(layout_set_id) from None

    def get_component(self, page_name: str, component_id: str) -> ComponentBase:
        """
        Get a specific component on a page of the default layout-set.

        Raises:
            PageNotFoundError: Unknown page
            ComponentNotFoundError: Unknown component on that page
        """
        return self._default_layout_set.get_component(page_name, component_id)

    def get_components(self) -> Iterator[ComponentBase]:
        """
        All components of the default layout-set, pages included.

        Depth-first pre-order using an explicit stack; children are pushed in
        reverse so siblings come out in declared order.
        """
        stack: list[ComponentBase] = list(reversed(self._default_layout_set.pages))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(component_children(node)))

    def get_default_data_element_id(self, instance: Instance) -> DataElementIdentifier | None:
        return self._default_layout_set.get_default_data_element_id(instance)

    async def generate_component_contexts(
        self,
        instance: Instance,
        data_accessor: DataAccessor,
        *,
        layout_set_id: str | None = None,
        concurrent: bool = False,
    ) -> list[ComponentContext]:
        """
        Generate one ComponentContext per page, taking repeating groups and
        sub-forms into account.

        Returns an empty list when the instance has no data element of the
        layout-set's data type yet.

        Raises:
            LayoutSetNotFoundError: Unknown ``layout_set_id`` or sub-form reference
            Exception: Any data accessor failure, unchanged
        """
        if layout_set_id is None:
            layout_set = self._default_layout_set
        else:
            layout_set = self.get_layout_set(layout_set_id)

        data_element = layout_set.get_default_data_element_id(instance)
        if data_element is None:
            logger.debug(
                f"Instance {instance.id} has no data element of type "
                f"'{layout_set.data_type.id}', no contexts generated"
            )
            return []

        builder = ContextBuilder(
            self.get_layout_set, instance, data_accessor, concurrent=concurrent
        )
        return await builder.build_pages(layout_set, data_element)

    def _subform_references(self, layout_set: LayoutSet) -> list[str]:
        return [
            component.layout_set  # type: ignore[attr-defined]
            for page in layout_set.pages
            for component in flatten_components(page.children)
            if component.kind is ComponentKind.SUBFORM
        ]

    def _check_subform_cycles(self) -> None:
        """Reject layout-sets that embed themselves through sub-forms."""
        finished: set[str] = set()

        def visit(layout_set_id: str, chain: list[str]) -> None:
            if layout_set_id in chain:
                cycle = " -> ".join(chain[chain.index(layout_set_id):] + [layout_set_id])
                raise LayoutConfigurationError(f"Sub-form cycle between layout-sets: {cycle}")
            if layout_set_id in finished:
                return
            for reference in self._subform_references(self._layout_sets[layout_set_id]):
                # Unknown references are reported when contexts are generated
                if reference in self._layout_sets:
                    visit(reference, chain + [layout_set_id])
            finished.add(layout_set_id)

        for layout_set_id in self._layout_sets:
            visit(layout_set_id, [])
