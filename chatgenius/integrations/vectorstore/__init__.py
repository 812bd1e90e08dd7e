# Vector store integration module
from chatgenius.integrations.vectorstore.client import (
    VectorStoreClient,
    VectorStoreError,
    VectorRecord,
    VectorMatch,
)

__all__ = ["VectorStoreClient", "VectorStoreError", "VectorRecord", "VectorMatch"]
