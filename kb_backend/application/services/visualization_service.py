"""
Visualization set service.

Generates chart sets from a broad knowledge base sample plus recent upload
metadata, and reads, lists and deletes stored sets.

Dependencies: kb_backend.boundary.aws, kb_backend.core, fastapi.concurrency
System role: Visualization generation and Visualization Set Store access
"""

import logging
import time
import uuid
from typing import Any

from fastapi.concurrency import run_in_threadpool
from langchain_core.documents import Document

from kb_backend.boundary.aws.knowledge_base import KnowledgeBaseRetriever
from kb_backend.boundary.aws.upload_records import UploadRecordStore
from kb_backend.boundary.aws.visualization_table import VisualizationTable
from kb_backend.configs.query import VisualizationSettings
from kb_backend.core.analysis.file_classifier import extract_json_object
from kb_backend.core.exceptions import StorageError, TableNotFoundError, VisualizationNotFoundError
from kb_backend.core.generation.bedrock_generator import BedrockGenerator
from kb_backend.core.prompts import get_visualization_prompt
from kb_backend.core.time_utils import utc_timestamp
from kb_backend.models.upload import UploadRecord
from kb_backend.models.visualization import (
    ChartData,
    ChartDataset,
    ChartType,
    Visualization,
    VisualizationDraft,
    VisualizationGenerateResponse,
    VisualizationMetadata,
    VisualizationSet,
)

logger = logging.getLogger(__name__)

NO_TABLE_LIST_MESSAGE = "No visualizations table found. Create visualizations to see them here."
NO_TABLE_GET_MESSAGE = "Visualizations table not found. No visualizations have been created yet."
NO_TABLE_DELETE_MESSAGE = "Visualizations table not found. No visualizations exist to delete."


def format_documents(documents: list[Document], excerpt_chars: int) -> str:
    return "\n\n".join(
        f"Document: {document.metadata.get('title') or 'Untitled'}\n{document.page_content[:excerpt_chars]}"
        for document in documents
    )


def format_files(records: list[UploadRecord]) -> str:
    return "\n".join(
        f"File: {record.name or 'Unknown'}, Type: {record.type or record.content_type or 'Unknown'}, "
        f"Topics: {', '.join(record.key_topics) if record.key_topics else 'N/A'}, "
        f"Summary: {record.summary or 'No summary available'}"
        for record in records
    )


def fallback_visualizations() -> tuple[str, str, str, list[Visualization]]:
    """Placeholder set used when the model reply cannot be decoded."""
    chart = Visualization(
        id="fallback-1",
        title="Data Analysis Error",
        description="Visualization could not be generated",
        insights=["Data analysis could not be completed", "Please try again later"],
        chart_type=ChartType.BAR,
        chart_data=ChartData(
            labels=["No Data Available"],
            datasets=[ChartDataset(label="No Data", data=[0], background_color=["#e0e0e0"])],
        ),
        recommendations=["Try again later"],
    )
    return (
        "Healthcare Data Analysis",
        "Automated analysis of healthcare data from knowledge base",
        "Analysis could not be completed successfully",
        [chart],
    )


class VisualizationService:
    """Generate and manage visualization sets."""

    def __init__(
        self,
        retriever: KnowledgeBaseRetriever,
        record_store: UploadRecordStore,
        generator: BedrockGenerator,
        table: VisualizationTable,
        settings: VisualizationSettings | None = None,
        use_prompt_registry: bool = False,
        prompt_label: str | None = None,
    ) -> None:
        self.retriever = retriever
        self.record_store = record_store
        self.generator = generator
        self.table = table
        self.settings = settings or VisualizationSettings()
        self._use_prompt_registry = use_prompt_registry
        self._prompt_label = prompt_label

    async def generate(self) -> VisualizationGenerateResponse:
        """
        Generate, store and summarize a new visualization set.

        Storage failure is logged and does not fail the request.

        Raises:
            RetrievalError: Knowledge base retrieval failed
            StorageError: Upload metadata scan failed
            GenerationError: Model call failed
        """
        started = time.perf_counter()
        set_id = str(uuid.uuid4())
        logger.info(f"{__name__}:generate - START", extra={"visualization_set_id": set_id})

        # Step 1: Sample knowledge base and upload metadata
        documents = await self.retriever.aretrieve(self.settings.retrieval_query)
        records = await run_in_threadpool(self.record_store.scan_records, self.settings.metadata_scan_limit)
        logger.info(
            f"{__name__}:generate - Sampled {len(documents)} documents and {len(records)} records",
            extra={"visualization_set_id": set_id},
        )

        # Step 2: Ask the model for charts
        prompt = get_visualization_prompt(
            use_registry=self._use_prompt_registry,
            label=self._prompt_label,
        ).format(
            documents=format_documents(documents, self.settings.document_excerpt_chars),
            files=format_files(records),
        )
        reply = await self.generator.ainvoke(prompt)

        # Step 3: Decode
        try:
            draft = VisualizationDraft.model_validate(extract_json_object(reply))
            title, description, summary = draft.title, draft.description, draft.summary
            charts = [
                Visualization.model_validate({**chart.model_dump(), "id": chart.id or f"viz-{index}"})
                for index, chart in enumerate(draft.visualizations, start=1)
            ]
        except ValueError as e:
            logger.error(f"{__name__}:generate - Failed to parse model reply: {e}", extra={"visualization_set_id": set_id})
            title, description, summary, charts = fallback_visualizations()

        visualization_set = VisualizationSet(
            id=set_id,
            title=title,
            description=description,
            summary=summary,
            created_at=utc_timestamp(),
            visualizations=charts,
            metadata=VisualizationMetadata(
                documents_analyzed=len(documents),
                files_referenced=len(records),
                processing_time=int((time.perf_counter() - started) * 1000),
            ),
        )

        # Step 4: Store (best effort)
        try:
            await run_in_threadpool(self.table.put, visualization_set.to_json_dict())
        except StorageError as e:
            logger.error(
                f"{__name__}:generate - Visualization set not persisted: {e}",
                extra={"visualization_set_id": set_id},
            )

        logger.info(f"{__name__}:generate - END charts={len(charts)}", extra={"visualization_set_id": set_id})
        return VisualizationGenerateResponse(
            visualization_set_id=visualization_set.id,
            title=visualization_set.title,
            summary=visualization_set.summary,
            visualization_count=len(visualization_set.visualizations),
            created_at=visualization_set.created_at,
            metadata=visualization_set.metadata,
        )

    async def get_set(self, set_id: str) -> dict[str, Any]:
        """
        Fetch a full set document.

        Raises:
            VisualizationNotFoundError: Unknown id or missing table
        """
        try:
            document = await run_in_threadpool(self.table.get, set_id)
        except TableNotFoundError as e:
            raise VisualizationNotFoundError(set_id, NO_TABLE_GET_MESSAGE) from e
        if document is None:
            raise VisualizationNotFoundError(set_id)
        return document

    async def delete_set(self, set_id: str) -> dict[str, str]:
        """
        Delete a set.

        Raises:
            VisualizationNotFoundError: Unknown id or missing table
        """
        try:
            deleted = await run_in_threadpool(self.table.delete, set_id)
        except TableNotFoundError as e:
            raise VisualizationNotFoundError(set_id, NO_TABLE_DELETE_MESSAGE) from e
        if deleted is None:
            raise VisualizationNotFoundError(set_id)

        logger.info(f"{__name__}:delete_set - Deleted", extra={"visualization_set_id": set_id})
        return {
            "message": "Visualization set deleted successfully",
            "id": set_id,
            "timestamp": utc_timestamp(),
        }

    async def list_sets(self) -> dict[str, Any]:
        """List set summaries; a missing table yields an empty list with a message."""
        try:
            summaries = await run_in_threadpool(self.table.list_summaries)
        except TableNotFoundError:
            return {"visualizationSets": [], "count": 0, "message": NO_TABLE_LIST_MESSAGE}
        return {"visualizationSets": summaries, "count": len(summaries)}
