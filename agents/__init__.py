# Batch Agents
# Catalog fetching and canonical renaming over scanned files

from .base import BaseAgent
from .fetcher import FetchAgent, first_result
from .renamer import RenameAgent

__all__ = [
    'BaseAgent',
    'FetchAgent',
    'RenameAgent',
    'first_result'
]
