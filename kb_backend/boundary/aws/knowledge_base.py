"""
Bedrock knowledge base access.

KnowledgeBaseRetriever runs similarity retrieval against a Bedrock
knowledge base with exponential-backoff retry on transient AWS errors.
KnowledgeBaseSync starts ingestion (re-index) jobs after uploads.

Dependencies: langchain_aws, boto3, tenacity, fastapi.concurrency
System role: Retriever and re-index trigger
"""

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool
from langchain_aws import AmazonKnowledgeBasesRetriever
from langchain_core.documents import Document
from langchain_core.retrievers import BaseRetriever
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from kb_backend.core.exceptions import RetrievalError

logger = logging.getLogger(__name__)

RETRY_ATTEMPTS = 3


class KnowledgeBaseRetriever:
    """Top-K retrieval from one Bedrock knowledge base."""

    def __init__(
        self,
        knowledge_base_id: str,
        top_k: int,
        region: str = "us-east-1",
        retriever: BaseRetriever | None = None,
    ) -> None:
        """
        Args:
            knowledge_base_id: Bedrock knowledge base id
            top_k: Documents returned per query
            region: AWS region of the knowledge base
            retriever: Pre-built LangChain retriever (tests)
        """
        self._knowledge_base_id = knowledge_base_id
        self._top_k = top_k
        if retriever is None and knowledge_base_id:
            retriever = AmazonKnowledgeBasesRetriever(
                knowledge_base_id=knowledge_base_id,
                retrieval_config={"vectorSearchConfiguration": {"numberOfResults": top_k}},
                region_name=region,
            )
        self._retriever: BaseRetriever | None = retriever

    @property
    def top_k(self) -> int:
        return self._top_k

    @retry(
        retry=retry_if_exception_type((ClientError, BotoCoreError)),
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_exponential_jitter(initial=1, max=10, jitter=2),
        before_sleep=lambda retry_state: logger.warning(
            f"{__name__}:retrieve - Retry {retry_state.attempt_number}/{RETRY_ATTEMPTS} after transient error"
        ),
        reraise=True,
    )
    def _retrieve_with_retry(self, query: str) -> list[Document]:
        return self._retriever.invoke(query)

    def retrieve(self, query: str) -> list[Document]:
        """
        Retrieve the top-K documents for a query.

        Raises:
            RetrievalError: Knowledge base not configured, or retries exhausted
        """
        if self._retriever is None:
            raise RetrievalError("Knowledge base id not configured", query=query)
        try:
            documents = self._retrieve_with_retry(query)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{__name__}:retrieve - Retrieval failed: {type(e).__name__}: {e}")
            raise RetrievalError(f"Knowledge base retrieval failed: {e}", query=query) from e
        logger.info(f"{__name__}:retrieve - Retrieved {len(documents)} documents", extra={"top_k": self._top_k})
        return documents[: self._top_k]

    async def aretrieve(self, query: str) -> list[Document]:
        return await run_in_threadpool(self.retrieve, query)


class KnowledgeBaseSync:
    """Starts Bedrock knowledge base ingestion jobs."""

    def __init__(
        self,
        knowledge_base_id: str,
        data_source_id: str,
        region: str = "us-east-1",
        client: Any | None = None,
    ) -> None:
        self._knowledge_base_id = knowledge_base_id
        self._data_source_id = data_source_id
        self._region = region
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self._knowledge_base_id and self._data_source_id)

    def _bedrock_agent(self) -> Any:
        if self._client is None:
            self._client = boto3.client("bedrock-agent", region_name=self._region)
        return self._client

    def start_ingestion_job(self) -> str | None:
        """
        Start a re-index of the configured data source.

        Returns:
            str | None: Ingestion job id, or None when ids are not configured

        Raises:
            ClientError: If Bedrock rejects the request
        """
        if not self.is_configured:
            logger.warning(
                f"{__name__}:start_ingestion_job - Knowledge base or data source id not configured, skipping sync"
            )
            return None

        response = self._bedrock_agent().start_ingestion_job(
            knowledgeBaseId=self._knowledge_base_id,
            dataSourceId=self._data_source_id,
            description="Sync triggered by file upload",
        )
        job = response.get("ingestionJob", {})
        logger.info(
            f"{__name__}:start_ingestion_job - Ingestion job started",
            extra={"job_id": job.get("ingestionJobId"), "status": job.get("status")},
        )
        return job.get("ingestionJobId")

    async def astart_ingestion_job(self) -> str | None:
        return await run_in_threadpool(self.start_ingestion_job)
