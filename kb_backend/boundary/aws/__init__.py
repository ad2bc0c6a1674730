"""AWS clients: S3, DynamoDB and Bedrock knowledge base."""

from kb_backend.boundary.aws.chat_history_table import ChatHistoryTable
from kb_backend.boundary.aws.knowledge_base import KnowledgeBaseRetriever, KnowledgeBaseSync
from kb_backend.boundary.aws.s3_client import S3UploadClient
from kb_backend.boundary.aws.upload_records import UploadRecordStore
from kb_backend.boundary.aws.visualization_table import VisualizationTable

__all__ = [
    "ChatHistoryTable",
    "KnowledgeBaseRetriever",
    "KnowledgeBaseSync",
    "S3UploadClient",
    "UploadRecordStore",
    "VisualizationTable",
]
