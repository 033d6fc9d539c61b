"""
Layout loader for reading layout-sets from an app's ui directory.

Expected structure:

    <root>/layout-sets.json            {"sets": [{"id", "dataType", "tasks"}]}
    <root>/applicationmetadata.json    {"dataTypes": [...]}            (optional)
    <root>/<set id>/Settings.json      {"pages": {"order": [...]}}     (optional)
    <root>/<set id>/layouts/<page>.json|.yaml|.yml

Page files hold a flat component list ({"data": {"layout": [...]}}) in which
groups reference their children by id. Child ids of multi-page groups carry
a "<page index>:" prefix, which is ignored.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from formlayout.core.exceptions import LayoutConfigurationError
from formlayout.models.contracts.instances import DataType, Instance, LayoutSetDefinition
from formlayout.models.contracts.layout_components import (
    GROUP_TYPE,
    REPEATING_GROUP_TYPE,
    PageComponent,
)
from formlayout.services.layout_model import LayoutModel
from formlayout.services.layout_set import LayoutSet

logger = logging.getLogger(__name__)

LAYOUT_SETS_FILE = "layout-sets.json"
APPLICATION_METADATA_FILE = "applicationmetadata.json"
SETTINGS_FILE = "Settings.json"
LAYOUTS_DIR = "layouts"
PAGE_SUFFIXES = (".json", ".yaml", ".yml")

CONTAINER_TYPES = (GROUP_TYPE, REPEATING_GROUP_TYPE)

_MULTIPAGE_PREFIX = re.compile(r"^\d+:")


def read_document(path: Path) -> Any:
    """
    Parse a JSON or YAML file.

    Raises:
        LayoutConfigurationError: If the file cannot be read or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LayoutConfigurationError(f"Failed to read {path}: {e}") from e

    try:
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise LayoutConfigurationError(f"Failed to parse {path}: {e}") from e


# =============================================================================
# Metadata
# =============================================================================


def load_layout_set_definitions(root: str | Path) -> list[LayoutSetDefinition]:
    path = Path(root) / LAYOUT_SETS_FILE
    if not path.is_file():
        raise LayoutConfigurationError(f"Missing {LAYOUT_SETS_FILE} in {root}")

    document = read_document(path)
    sets = document.get("sets") if isinstance(document, dict) else None
    if not sets:
        raise LayoutConfigurationError(f"{path} declares no layout-sets")

    try:
        return [LayoutSetDefinition.model_validate(raw) for raw in sets]
    except ValidationError as e:
        raise LayoutConfigurationError(f"Invalid layout-set in {path}: {e}") from e


def load_data_types(root: str | Path) -> dict[str, DataType]:
    """Data types from applicationmetadata.json, keyed by id (empty if the file is absent)."""
    path = Path(root) / APPLICATION_METADATA_FILE
    if not path.is_file():
        return {}

    document = read_document(path)
    raw_types = document.get("dataTypes", []) if isinstance(document, dict) else []
    try:
        data_types = [DataType.model_validate(raw) for raw in raw_types]
    except ValidationError as e:
        raise LayoutConfigurationError(f"Invalid data type in {path}: {e}") from e
    return {data_type.id: data_type for data_type in data_types}


def select_layout_set_for_task(
    definitions: list[LayoutSetDefinition],
    task_id: str | None,
) -> LayoutSetDefinition | None:
    """The layout-set used by a process task, if any."""
    if task_id is None:
        return None
    for definition in definitions:
        if task_id in definition.tasks:
            return definition
    return None


# =============================================================================
# Pages
# =============================================================================


def _child_ids(raw: dict[str, Any]) -> list[str]:
    if raw.get("type") not in CONTAINER_TYPES:
        return []
    child_ids = []
    for child_id in raw.get("children") or []:
        if not isinstance(child_id, str):
            raise LayoutConfigurationError(
                f"Group '{raw.get('id')}' has a child reference that is not a component id: {child_id!r}"
            )
        child_ids.append(_MULTIPAGE_PREFIX.sub("", child_id))
    return child_ids


def parse_page(page_name: str, raw_components: list[Any]) -> PageComponent:
    """
    Build a page tree from a flat component list.

    Raises:
        LayoutConfigurationError: Duplicate ids, unknown or shared child ids,
            cycles, or components failing validation
    """
    by_id: dict[str, dict[str, Any]] = {}
    for raw in raw_components:
        if not isinstance(raw, dict) or "id" not in raw:
            raise LayoutConfigurationError(f"Component without id on page '{page_name}'")
        if raw["id"] in by_id:
            raise LayoutConfigurationError(f"Duplicate component id '{raw['id']}' on page '{page_name}'")
        by_id[raw["id"]] = raw

    parents: dict[str, str] = {}
    for raw in raw_components:
        for child_id in _child_ids(raw):
            if child_id not in by_id:
                raise LayoutConfigurationError(
                    f"Group '{raw['id']}' on page '{page_name}' references unknown component '{child_id}'"
                )
            if child_id in parents:
                raise LayoutConfigurationError(
                    f"Component '{child_id}' on page '{page_name}' is a child of both "
                    f"'{parents[child_id]}' and '{raw['id']}'"
                )
            parents[child_id] = raw["id"]

    nested_count = 0

    def nest(raw: dict[str, Any]) -> dict[str, Any]:
        nonlocal nested_count
        nested_count += 1
        node = {key: value for key, value in raw.items() if key != "children"}
        node["page"] = page_name
        if raw.get("type") in CONTAINER_TYPES:
            node["children"] = [nest(by_id[child_id]) for child_id in _child_ids(raw)]
        elif "children" in raw:
            node["children"] = raw["children"]
        return node

    roots = [nest(raw) for raw in raw_components if raw["id"] not in parents]
    if nested_count != len(by_id):
        raise LayoutConfigurationError(f"Groups on page '{page_name}' reference each other in a cycle")

    try:
        return PageComponent.model_validate({"id": page_name, "children": roots})
    except ValidationError as e:
        raise LayoutConfigurationError(f"Invalid component on page '{page_name}': {e}") from e


def _page_components(document: Any, path: Path) -> list[Any]:
    if isinstance(document, list):
        return document
    if isinstance(document, dict):
        layout = (document.get("data") or {}).get("layout")
        if isinstance(layout, list):
            return layout
    raise LayoutConfigurationError(f"{path} has no data.layout component list")


def _page_order(set_dir: Path) -> list[str] | None:
    path = set_dir / SETTINGS_FILE
    if not path.is_file():
        return None
    document = read_document(path)
    if not isinstance(document, dict):
        return None
    return (document.get("pages") or {}).get("order")


def load_layout_set(root: str | Path, definition: LayoutSetDefinition, data_type: DataType) -> LayoutSet:
    """Load all pages of one layout-set directory."""
    set_dir = Path(root) / definition.id
    layouts_dir = set_dir / LAYOUTS_DIR
    if not layouts_dir.is_dir():
        raise LayoutConfigurationError(f"Layout-set '{definition.id}' has no {LAYOUTS_DIR} directory")

    page_files: dict[str, Path] = {}
    for path in sorted(layouts_dir.iterdir()):
        if path.suffix not in PAGE_SUFFIXES:
            continue
        if path.stem in page_files:
            raise LayoutConfigurationError(
                f"Page '{path.stem}' of layout-set '{definition.id}' is defined more than once"
            )
        page_files[path.stem] = path

    order = _page_order(set_dir)
    if order is None:
        order = list(page_files)
    else:
        for page_name in order:
            if page_name not in page_files:
                raise LayoutConfigurationError(
                    f"Page '{page_name}' listed in {SETTINGS_FILE} of layout-set "
                    f"'{definition.id}' has no layout file"
                )
        for page_name in page_files:
            if page_name not in order:
                logger.warning(
                    f"Skipping page '{page_name}' of layout-set '{definition.id}': not in page order"
                )

    pages = []
    for page_name in order:
        path = page_files[page_name]
        pages.append(parse_page(page_name, _page_components(read_document(path), path)))

    return LayoutSet(definition.id, pages, data_type)


# =============================================================================
# Layout model
# =============================================================================


def _build_layout_model(
    root: str | Path,
    definitions: list[LayoutSetDefinition],
    default_layout_set_id: str | None,
) -> LayoutModel:
    data_types = load_data_types(root)
    layout_sets = []
    for definition in definitions:
        data_type = data_types.get(definition.data_type)
        if data_type is None:
            logger.debug(f"Data type '{definition.data_type}' not in application metadata")
            data_type = DataType(id=definition.data_type)
        layout_sets.append(load_layout_set(root, definition, data_type))

    logger.info(
        f"Loaded {len(layout_sets)} layout-sets from {root}: "
        f"{', '.join(layout_set.id for layout_set in layout_sets)}"
    )
    return LayoutModel(layout_sets, default_layout_set_id)


def load_layout_model(root: str | Path, default_layout_set_id: str | None = None) -> LayoutModel:
    """Load every layout-set under ``root``."""
    return _build_layout_model(root, load_layout_set_definitions(root), default_layout_set_id)


def load_layout_model_for_instance(root: str | Path, instance: Instance) -> LayoutModel:
    """
    Load every layout-set, defaulting to the one used by the instance's current task.

    Falls back to the first declared layout-set when the task has none.
    """
    definitions = load_layout_set_definitions(root)
    selected = select_layout_set_for_task(definitions, instance.current_task_id)
    if selected is None:
        logger.debug(f"No layout-set for task {instance.current_task_id}, using first declared")
    return _build_layout_model(root, definitions, selected.id if selected else None)
