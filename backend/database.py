import os
from pathlib import Path
from services.document_store import DocumentStore

# Singleton instance
_db_client = None

def get_data_dir() -> Path:
    data_dir = os.getenv("DATA_DIR")
    if data_dir:
        return Path(data_dir)
    # data/ lives in the project root (one level up from backend)
    return Path(__file__).parent.parent / "data"

def get_db():
    global _db_client
    if _db_client is not None:
        return _db_client

    _db_client = DocumentStore(get_data_dir())
    return _db_client

def reset_db():
    global _db_client
    _db_client = None
