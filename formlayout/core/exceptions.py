"""
Core Exceptions

Custom exceptions for the formlayout platform.

Configuration errors (unknown page, component or layout-set) are programming
or deployment errors and are never recoverable for the current request.
Data access errors come from the data accessor and are propagated unchanged
by the context builder.
"""


class LayoutConfigurationError(Exception):
    """
    Raised when the layout definition is inconsistent or a lookup into it fails.

    Callers should treat this as an internal error: the layout files shipped
    with the app do not match what the code asked for.
    """

    def __init__(self, message: str = "Invalid layout configuration"):
        self.message = message
        super().__init__(self.message)


class PageNotFoundError(LayoutConfigurationError):
    """Raised when a page name is not part of a layout-set."""

    def __init__(self, layout_set_id: str, page_name: str):
        self.layout_set_id = layout_set_id
        self.page_name = page_name
        super().__init__(f"Unknown page '{page_name}' in layout-set '{layout_set_id}'")


class ComponentNotFoundError(LayoutConfigurationError):
    """Raised when a (page, component id) pair is not part of a layout-set."""

    def __init__(self, page_name: str, component_id: str):
        self.page_name = page_name
        self.component_id = component_id
        super().__init__(f"Unknown component '{component_id}' on page '{page_name}'")


class LayoutSetNotFoundError(LayoutConfigurationError):
    """Raised when a layout-set id is not registered in the layout model."""

    def __init__(self, layout_set_id: str):
        self.layout_set_id = layout_set_id
        super().__init__(f"Unknown layout-set '{layout_set_id}'")


class DataAccessError(Exception):
    """
    Raised when form data for a data element cannot be loaded.

    Usage:
        try:
            contexts = await layout_model.generate_component_contexts(instance, accessor)
        except DataAccessError:
            # storage failure, map to an internal error / retry at the caller
            ...
    """

    def __init__(self, message: str = "Data access failed", data_element_id: str | None = None):
        self.message = message
        self.data_element_id = data_element_id
        super().__init__(self.message)
