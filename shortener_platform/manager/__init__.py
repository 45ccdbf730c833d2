"""
Code allocation, deletion pipeline and the manager facade used by handlers.
"""

from .code_generator import BatchItem, BatchResult, generate_short_batch, generate_short_code
from .delete_pipeline import DeletePipeline
from .shortener_manager import ShortenerManager, ShortenResult

__all__ = [
    "BatchItem",
    "BatchResult",
    "DeletePipeline",
    "ShortenerManager",
    "ShortenResult",
    "generate_short_batch",
    "generate_short_code",
]
