from .db import initialize_database
from .entries import (
    SourceState,
    get_source_states,
    load_entries,
    prune_sources,
    record_source_error,
    replace_source_entries,
)

__all__ = [
    "SourceState",
    "get_source_states",
    "initialize_database",
    "load_entries",
    "prune_sources",
    "record_source_error",
    "replace_source_entries",
]
