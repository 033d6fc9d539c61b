"""
Data Accessor

Read access to the form data of an instance's data elements, as needed by the
context builder (collection lengths) and by expression evaluators (scalar
lookups).

DataAccessor is the protocol the core depends on. InstanceDataAccessor is the
reference implementation: it holds form data already in memory and can lazily
load missing data elements through an async loader (e.g. a storage client).

Binding paths are dotted (``Root.People.Pets.Name``). Each list met on the
way consumes the next index of the context index path, outermost first. An
explicit index in the binding (``Root.People[1].Name``) takes precedence and
stops context indexes from being applied further down the path.
"""

import asyncio
import logging
import re
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Protocol, Sequence, runtime_checkable

from formlayout.core.exceptions import DataAccessError, LayoutConfigurationError
from formlayout.models.contracts.instances import DataElementIdentifier, Instance
from formlayout.models.contracts.layout_components import ModelBinding

logger = logging.getLogger(__name__)

FormDataLoader = Callable[[DataElementIdentifier], Awaitable[Any]]

_SEGMENT_PATTERN = re.compile(r"^(?P<name>[^\[\]]+)(?:\[(?P<index>\d+)\])?$")

# Marks a path that does not resolve (distinct from a stored None)
_MISSING = object()


@runtime_checkable
class DataAccessor(Protocol):
    """Read-only access to instance form data."""

    async def get_collection_length(
        self,
        binding: ModelBinding,
        data_element: DataElementIdentifier,
        index_path: Sequence[int],
    ) -> int | None:
        """Length of the collection at ``binding``, or None if it does not resolve to one."""
        ...

    async def get_model_data(
        self,
        binding: ModelBinding,
        data_element: DataElementIdentifier,
        index_path: Sequence[int],
    ) -> Any:
        """Value at ``binding``, or None if the path does not resolve."""
        ...

    def list_data_elements_of_type(
        self, instance: Instance, type_id: str
    ) -> list[DataElementIdentifier]:
        """Data elements of ``type_id`` in the instance's storage order."""
        ...


# =============================================================================
# Path resolution
# =============================================================================


def parse_binding_path(path: str) -> list[tuple[str, int | None]]:
    """
    Split a binding path into (property, explicit index) segments.

    Raises:
        LayoutConfigurationError: If the path is empty or malformed.
    """
    if not path:
        raise LayoutConfigurationError("Empty data model binding")

    segments: list[tuple[str, int | None]] = []
    for part in path.split("."):
        match = _SEGMENT_PATTERN.match(part)
        if match is None:
            raise LayoutConfigurationError(f"Invalid data model binding '{path}'")
        index = match.group("index")
        segments.append((match.group("name"), int(index) if index is not None else None))
    return segments


def _get_property(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name, _MISSING)
    if value is None or name.startswith("_"):
        return _MISSING
    if isinstance(value, (list, tuple, str, bytes, int, float)):
        return _MISSING
    return getattr(value, name, _MISSING)


def _get_item(value: Any, index: int) -> Any:
    if not isinstance(value, list) or index >= len(value):
        return _MISSING
    return value[index]


def resolve_path(data: Any, path: str, index_path: Sequence[int] = ()) -> Any:
    """
    Walk ``path`` through ``data`` applying context row indexes.

    A list in the middle of the path needs a row index; without one the path
    does not resolve. A list at the end of the path is returned as-is.

    Returns:
        The resolved value, or the module's missing sentinel.
    """
    segments = parse_binding_path(path)
    remaining = list(index_path)
    inherit_indexes = True
    current = data

    for position, (name, explicit_index) in enumerate(segments):
        current = _get_property(current, name)
        if current is _MISSING:
            return _MISSING

        is_last = position == len(segments) - 1
        if explicit_index is not None:
            inherit_indexes = False
            current = _get_item(current, explicit_index)
        elif isinstance(current, list) and not is_last:
            if not inherit_indexes or not remaining:
                return _MISSING
            current = _get_item(current, remaining.pop(0))

        if current is _MISSING:
            return _MISSING

    return current


# =============================================================================
# In-memory / lazily loaded accessor
# =============================================================================


class InstanceDataAccessor:
    """
    DataAccessor over the data elements of one instance.

    Form data can be given up front (``form_data`` keyed by data element id)
    and/or loaded on first use through ``loader``. Loaded data is cached for
    the lifetime of the accessor; concurrent first reads of one element share
    a single load.
    """

    def __init__(
        self,
        instance: Instance,
        form_data: Mapping[str, Any] | None = None,
        loader: FormDataLoader | None = None,
    ):
        self.instance = instance
        self._cache: dict[str, Any] = dict(form_data or {})
        self._loader = loader
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_form_data(self, data_element: DataElementIdentifier) -> Any:
        """
        Form data of a data element.

        Raises:
            DataAccessError: If the element has no data and no loader is set,
                or the loader fails.
        """
        if data_element.id in self._cache:
            return self._cache[data_element.id]

        if self._loader is None:
            raise DataAccessError(
                f"No form data for data element '{data_element.id}'",
                data_element_id=data_element.id,
            )

        lock = self._locks.setdefault(data_element.id, asyncio.Lock())
        async with lock:
            if data_element.id not in self._cache:
                try:
                    data = await self._loader(data_element)
                except DataAccessError:
                    raise
                except Exception as e:
                    raise DataAccessError(
                        f"Failed to load form data for data element '{data_element.id}': {e}",
                        data_element_id=data_element.id,
                    ) from e
                self._cache[data_element.id] = data
                logger.debug(f"Loaded form data for data element {data_element.id}")

        return self._cache[data_element.id]

    def list_data_elements_of_type(
        self, instance: Instance, type_id: str
    ) -> list[DataElementIdentifier]:
        return instance.data_elements_of_type(type_id)

    def _target_element(
        self, binding: ModelBinding, data_element: DataElementIdentifier
    ) -> DataElementIdentifier | None:
        """Data element a binding reads from (its own data type, or the element given)."""
        if binding.data_type is None or binding.data_type == data_element.data_type_id:
            return data_element
        matches = self.list_data_elements_of_type(self.instance, binding.data_type)
        if not matches:
            logger.debug(f"No data element of type '{binding.data_type}' for binding {binding.field}")
            return None
        return matches[0]

    async def _resolve(
        self,
        binding: ModelBinding,
        data_element: DataElementIdentifier,
        index_path: Sequence[int],
    ) -> Any:
        target = self._target_element(binding, data_element)
        if target is None:
            return _MISSING
        # Indexes describe rows of the context's own data element only
        if target != data_element:
            index_path = ()
        data = await self.get_form_data(target)
        return resolve_path(data, binding.field, index_path)

    async def get_collection_length(
        self,
        binding: ModelBinding,
        data_element: DataElementIdentifier,
        index_path: Sequence[int],
    ) -> int | None:
        value = await self._resolve(binding, data_element, index_path)
        if isinstance(value, list):
            return len(value)
        return None

    async def get_model_data(
        self,
        binding: ModelBinding,
        data_element: DataElementIdentifier,
        index_path: Sequence[int],
    ) -> Any:
        value = await self._resolve(binding, data_element, index_path)
        if value is _MISSING:
            return None
        return value
