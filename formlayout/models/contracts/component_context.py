"""
Component Context

The dynamic counterpart of a layout component: one node per rendered
occurrence of a component, carrying the row indexes that place it among
repetitions and the data element it reads from.

Context trees are rebuilt per request and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

from formlayout.models.contracts.layout_components import ComponentKind

if TYPE_CHECKING:
    from formlayout.models.contracts.instances import DataElementIdentifier
    from formlayout.models.contracts.layout_components import Component


@dataclass(frozen=True)
class ComponentContext:
    """
    One occurrence of a component in a materialized layout.

    Attributes:
        component: Static component this context was generated from
        data_element: Data element this node and its children read from
        index_path: Row indexes of the enclosing repetitions, outermost first
        row_length: Rows iterated (repeating groups only; None when the
            collection could not be resolved)
        children: Child contexts in declaration / row order
    """

    component: Component
    data_element: DataElementIdentifier
    index_path: tuple[int, ...] = ()
    row_length: int | None = None
    children: tuple[ComponentContext, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.component.id

    def descendants(self) -> Iterator[ComponentContext]:
        """Pre-order iteration over the subtree, excluding self."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(
        self,
        component_id: str,
        index_path: tuple[int, ...] | list[int] = (),
    ) -> ComponentContext | None:
        """
        Resolve a component occurrence in this subtree.

        An exact index path match wins. Otherwise the occurrence whose index
        path is the longest prefix of ``index_path`` is returned, so a
        lookup from inside a repeating row finds a component outside the
        group. Sub-form nodes are matched but not searched below, since their
        contents read from other data elements. Returns None if nothing
        matches.
        """
        wanted = tuple(index_path)
        best: ComponentContext | None = None
        for node in self._same_element_nodes():
            if node.component.id != component_id:
                continue
            if node.index_path == wanted:
                return node
            if wanted[: len(node.index_path)] == node.index_path:
                if best is None or len(node.index_path) > len(best.index_path):
                    best = node
        return best

    def _same_element_nodes(self) -> Iterator[ComponentContext]:
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if node.component.kind is not ComponentKind.SUBFORM:
                stack.extend(reversed(node.children))

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready rendering of the subtree."""
        result: dict[str, Any] = {
            "id": self.component.id,
            "type": self.component.type,
            "page": self.component.page,
            "index_path": list(self.index_path),
            "data_element_id": self.data_element.id,
        }
        if self.row_length is not None:
            result["row_length"] = self.row_length
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result
