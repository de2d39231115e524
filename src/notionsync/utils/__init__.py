from .chunk import chunk_blocks
from .ids import format_id, normalize_id
from .redact import redact
from .text_split import split_string

__all__ = [
    "chunk_blocks",
    "format_id",
    "normalize_id",
    "redact",
    "split_string",
]
