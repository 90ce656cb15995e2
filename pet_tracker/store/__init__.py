"""文档存储。"""
from pet_tracker.store.base import DocumentStore
from pet_tracker.store.json_store import JsonDocumentStore

__all__ = ["DocumentStore", "JsonDocumentStore"]
