"""
Visualization set models.

Chart sets generated from the knowledge base. JSON and stored items use
camelCase keys (chartType, chartData, createdAt, ...).

Dependencies: pydantic
System role: Visualization API and storage contracts
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with camelCase keys and without unset optional values."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChartType(str, Enum):
    """Chart kinds understood by the frontend."""

    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    RADAR = "radar"
    SCATTER = "scatter"


class ScatterPoint(_CamelModel):
    x: float
    y: float


class ChartDataset(_CamelModel):
    label: str | None = None
    data: list[float | ScatterPoint] = Field(default_factory=list)
    background_color: str | list[str] | None = None
    border_color: str | None = None
    fill: bool | None = None


class ChartData(_CamelModel):
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)


class Visualization(_CamelModel):
    """One chart with its narrative."""

    id: str
    title: str
    description: str = ""
    insights: list[str] = Field(default_factory=list)
    chart_type: ChartType
    chart_data: ChartData
    recommendations: list[str] = Field(default_factory=list)


class VisualizationMetadata(_CamelModel):
    documents_analyzed: int = 0
    files_referenced: int = 0
    processing_time: int = Field(default=0, description="Milliseconds")


class VisualizationSet(_CamelModel):
    """A persisted set of charts produced by one generation call."""

    id: str
    title: str
    description: str = ""
    summary: str = ""
    created_at: str
    visualizations: list[Visualization] = Field(default_factory=list)
    metadata: VisualizationMetadata = Field(default_factory=VisualizationMetadata)


class VisualizationDraftItem(Visualization):
    """Model output for one chart; the id may be missing."""

    id: str | None = None


class VisualizationDraft(_CamelModel):
    """Model output before ids, timestamps and metadata are attached."""

    title: str
    description: str = ""
    summary: str = ""
    visualizations: list[VisualizationDraftItem] = Field(min_length=1)


class VisualizationGenerateResponse(_CamelModel):
    """Response of POST /api/visualize/generate."""

    visualization_set_id: str
    title: str
    summary: str
    visualization_count: int
    created_at: str
    metadata: VisualizationMetadata
