"""Knowledge base query and document ingestion backend."""
