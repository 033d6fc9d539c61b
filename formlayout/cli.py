"""
formlayout CLI

Commands:
  formlayout contexts   - Print the component contexts of an instance as JSON
  formlayout help       - Show help
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from formlayout.config import get_settings
from formlayout.core.exceptions import DataAccessError, LayoutConfigurationError
from formlayout.models.contracts.instances import Instance
from formlayout.services.data_accessor import InstanceDataAccessor
from formlayout.services.layout_loader import load_layout_model_for_instance, read_document

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.effective_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(args: list[str] | None = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if args is None:
        args = sys.argv[1:]

    # No args - show help
    if not args:
        print_help()
        return 0

    command = args[0].lower()

    if command in ("help", "-h", "--help"):
        print_help()
        return 0

    if command == "contexts":
        configure_logging()
        return handle_contexts(args[1:])

    # Unknown command
    print(f"Unknown command: {command}", file=sys.stderr)
    print_help()
    return 1


def print_help() -> None:
    """Print CLI help message."""
    print("""
formlayout - Materialize form layouts against instance data

Usage:
  formlayout <command> [options]

Commands:
  contexts    Print the component context tree of an instance as JSON
  help        Show this help message

Options for contexts:
  <instance.json>        Instance document (process state and data elements)
  --layouts DIR          Directory with layout-sets.json (default: FORMLAYOUT_LAYOUTS_PATH)
  --data ID=FILE         Form data (JSON or YAML) of data element ID; repeatable
  --layout-set ID        Layout-set to render instead of the current task's
  --concurrent           Build pages and sub-forms concurrently

Examples:
  formlayout contexts instance.json --layouts App/ui --data 1f3a...=model.json
""".strip())


def _parse_contexts_args(args: list[str]) -> dict | None:
    options: dict = {"instance": None, "layouts": None, "data": {}, "layout_set": None, "concurrent": False}
    remaining = list(args)
    while remaining:
        arg = remaining.pop(0)
        if arg == "--concurrent":
            options["concurrent"] = True
        elif arg in ("--layouts", "--data", "--layout-set"):
            if not remaining:
                print(f"Missing value for {arg}", file=sys.stderr)
                return None
            value = remaining.pop(0)
            if arg == "--layouts":
                options["layouts"] = value
            elif arg == "--layout-set":
                options["layout_set"] = value
            else:
                element_id, sep, path = value.partition("=")
                if not sep or not element_id or not path:
                    print(f"Expected --data ID=FILE, got: {value}", file=sys.stderr)
                    return None
                options["data"][element_id] = path
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}", file=sys.stderr)
            return None
        elif options["instance"] is None:
            options["instance"] = arg
        else:
            print(f"Unexpected argument: {arg}", file=sys.stderr)
            return None

    if options["instance"] is None:
        print("Missing instance file", file=sys.stderr)
        return None
    return options


def handle_contexts(args: list[str]) -> int:
    options = _parse_contexts_args(args)
    if options is None:
        return 1

    settings = get_settings()
    layouts_path = Path(options["layouts"] or settings.layouts_path)
    concurrent = options["concurrent"] or settings.concurrent_context_build

    try:
        instance = Instance.model_validate(read_document(Path(options["instance"])))
        form_data = {
            element_id: read_document(Path(path)) for element_id, path in options["data"].items()
        }
        layout_model = load_layout_model_for_instance(layouts_path, instance)
        accessor = InstanceDataAccessor(instance, form_data)
        contexts = asyncio.run(
            layout_model.generate_component_contexts(
                instance,
                accessor,
                layout_set_id=options["layout_set"],
                concurrent=concurrent,
            )
        )
    except (LayoutConfigurationError, DataAccessError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: invalid instance document: {e}", file=sys.stderr)
        return 1

    logger.info(f"Generated {len(contexts)} page contexts for instance {instance.id}")
    print(json.dumps([context.to_dict() for context in contexts], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
