"""
Instance Contract Models

Read-only views of an app instance: its process state and the data elements
stored on it, plus the application data types that layout-sets bind to.
Field aliases follow the camelCase JSON emitted by the storage service.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ==================== DATA TYPES ====================


class DataType(BaseModel):
    """Application data type (one entry of applicationmetadata.json dataTypes)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(description="Data type identifier")
    task_id: str | None = Field(
        default=None, alias="taskId", description="Task the data type belongs to"
    )
    app_logic: dict[str, Any] | None = Field(
        default=None, alias="appLogic", description="Form data settings (classRef etc.)"
    )
    max_count: int = Field(
        default=0, alias="maxCount", ge=0, description="Max elements per instance (0 = unlimited)"
    )
    allowed_content_types: list[str] | None = Field(
        default=None, alias="allowedContentTypes", description="Allowed content types"
    )


class LayoutSetDefinition(BaseModel):
    """One entry of layout-sets.json."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(description="Layout-set identifier (folder name)")
    data_type: str = Field(alias="dataType", description="Default data type id")
    tasks: list[str] = Field(default_factory=list, description="Process tasks using this set")


# ==================== DATA ELEMENTS ====================


class DataElementIdentifier(BaseModel):
    """Stable identity of one data element within an instance."""

    model_config = ConfigDict(frozen=True)

    id: str
    data_type_id: str

    def __str__(self) -> str:
        return self.id


class DataElement(BaseModel):
    """A persisted unit of data on an instance."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(description="Data element guid")
    data_type: str = Field(alias="dataType", description="Data type id")
    content_type: str | None = Field(default=None, alias="contentType")
    created: datetime | None = None
    last_changed: datetime | None = Field(default=None, alias="lastChanged")

    @property
    def identifier(self) -> DataElementIdentifier:
        return DataElementIdentifier(id=self.id, data_type_id=self.data_type)


# ==================== PROCESS ====================


class ProcessElementInfo(BaseModel):
    """Current process element (task)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    element_id: str = Field(alias="elementId")
    name: str | None = None
    task_type: str | None = Field(default=None, alias="altinnTaskType")


class ProcessState(BaseModel):
    """Process state of an instance."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    started: datetime | None = None
    ended: datetime | None = None
    current_task: ProcessElementInfo | None = Field(default=None, alias="currentTask")


# ==================== INSTANCE ====================


class Instance(BaseModel):
    """Read-only view of an app instance."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(description="'{partyId}/{instanceGuid}'")
    app_id: str | None = Field(default=None, alias="appId")
    org: str | None = None
    process: ProcessState | None = None
    data: list[DataElement] = Field(default_factory=list)

    @property
    def current_task_id(self) -> str | None:
        if self.process is None or self.process.current_task is None:
            return None
        return self.process.current_task.element_id

    def data_elements_of_type(self, data_type_id: str) -> list[DataElementIdentifier]:
        """Identifiers of all data elements with the given type, in storage order."""
        return [d.identifier for d in self.data if d.data_type == data_type_id]
