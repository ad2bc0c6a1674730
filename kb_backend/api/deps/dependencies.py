"""
Dependency injection container.

Lazily built, process-wide service instances plus the FastAPI dependency
functions that hand them to routes.

Dependencies: kb_backend.configs, kb_backend.application, kb_backend.boundary
System role: DI container for service injection
"""

import secrets

from fastapi import Depends, Header, HTTPException, status

from kb_backend.application.adapters.chat_history_adapter import ChatHistoryStore
from kb_backend.application.services import IngestionService, QueryService, VisualizationService
from kb_backend.boundary.aws import (
    ChatHistoryTable,
    KnowledgeBaseRetriever,
    KnowledgeBaseSync,
    S3UploadClient,
    UploadRecordStore,
    VisualizationTable,
)
from kb_backend.configs import Settings, get_settings
from kb_backend.core.generation.bedrock_generator import BedrockGenerator
from kb_backend.core.retrieval.history_aware import HistoryAwareRetriever
from kb_backend.core.session.cancellation import CancellationController

API_KEY_SCHEME = "APIKey "


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self.clear()

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def generator(self) -> BedrockGenerator:
        """Get cached Bedrock generator."""
        if self._generator is None:
            self._generator = BedrockGenerator(
                model_id=self.settings.bedrock.model_id,
                region=self.settings.aws.region,
                temperature=self.settings.bedrock.temperature,
            )
        return self._generator

    @property
    def upload_records(self) -> UploadRecordStore:
        if self._upload_records is None:
            self._upload_records = UploadRecordStore(
                table_name=self.settings.s3.dynamodb_table,
                region=self.settings.aws.region,
            )
        return self._upload_records

    @property
    def history_store(self) -> ChatHistoryStore:
        if self._history_store is None:
            self._history_store = ChatHistoryStore(
                ChatHistoryTable(
                    table_name=self.settings.dynamodb.table_name,
                    region=self.settings.aws.region,
                )
            )
        return self._history_store

    @property
    def query_service(self) -> QueryService:
        """Get cached query service (top-K 3 retrieval)."""
        if self._query_service is None:
            retriever = KnowledgeBaseRetriever(
                knowledge_base_id=self.settings.bedrock.knowledge_base_id,
                top_k=self.settings.query.retrieval_top_k,
                region=self.settings.aws.region,
            )
            self._query_service = QueryService(
                history_store=self.history_store,
                retriever=HistoryAwareRetriever(
                    retriever,
                    self.generator.chat_model,
                    use_prompt_registry=self.settings.query.use_prompt_registry,
                    prompt_label=self.settings.query.prompt_label,
                ),
                generator=self.generator,
                settings=self.settings.query,
            )
        return self._query_service

    @property
    def ingestion_service(self) -> IngestionService:
        if self._ingestion_service is None:
            self._ingestion_service = IngestionService(
                blob_store=S3UploadClient(bucket=self.settings.s3.bucket_name, region=self.settings.aws.region),
                record_store=self.upload_records,
                generator=self.generator,
                kb_sync=KnowledgeBaseSync(
                    knowledge_base_id=self.settings.bedrock.knowledge_base_id,
                    data_source_id=self.settings.bedrock.data_source_id,
                    region=self.settings.aws.region,
                ),
                settings=self.settings.s3,
                use_prompt_registry=self.settings.query.use_prompt_registry,
                prompt_label=self.settings.query.prompt_label,
            )
        return self._ingestion_service

    @property
    def visualization_service(self) -> VisualizationService:
        if self._visualization_service is None:
            self._visualization_service = VisualizationService(
                retriever=KnowledgeBaseRetriever(
                    knowledge_base_id=self.settings.bedrock.knowledge_base_id,
                    top_k=self.settings.visualization.retrieval_top_k,
                    region=self.settings.aws.region,
                ),
                record_store=self.upload_records,
                generator=self.generator,
                table=VisualizationTable(
                    table_name=self.settings.dynamodb.visualizations_table,
                    region=self.settings.aws.region,
                ),
                settings=self.settings.visualization,
                use_prompt_registry=self.settings.query.use_prompt_registry,
                prompt_label=self.settings.query.prompt_label,
            )
        return self._visualization_service

    def clear(self) -> None:
        """Clear all cached instances."""
        self._generator: BedrockGenerator | None = None
        self._upload_records: UploadRecordStore | None = None
        self._history_store: ChatHistoryStore | None = None
        self._query_service: QueryService | None = None
        self._ingestion_service: IngestionService | None = None
        self._visualization_service: VisualizationService | None = None


# Global service cache
_service_cache = ServiceCache()
_cancellation_controller = CancellationController()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_query_service() -> QueryService:
    return get_service_cache().query_service


def get_ingestion_service() -> IngestionService:
    return get_service_cache().ingestion_service


def get_visualization_service() -> VisualizationService:
    return get_service_cache().visualization_service


def get_cancellation_controller() -> CancellationController:
    return _cancellation_controller


def verify_api_key(
    api_key: str | None = Header(default=None, alias="api-key"),
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings_dependency),
) -> None:
    """
    Check the shared API key.

    Accepts "api-key: <key>" or "Authorization: APIKey <key>". The check is
    skipped when no key is configured.

    Raises:
        HTTPException(401): Missing or wrong key
    """
    expected = settings.api.key
    if not expected:
        return

    provided = api_key
    if not provided and authorization and authorization.startswith(API_KEY_SCHEME):
        provided = authorization[len(API_KEY_SCHEME):].strip()

    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
