from .base import EntriesAdapter, EntriesAdapterError
from .json_source import JsonFileEntriesAdapter, RemoteJsonEntriesAdapter

__all__ = [
    "EntriesAdapter",
    "EntriesAdapterError",
    "JsonFileEntriesAdapter",
    "RemoteJsonEntriesAdapter",
]
