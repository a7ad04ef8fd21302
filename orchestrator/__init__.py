# Tagging Orchestration
# Configuration, logging, interactive session state and background jobs

from .config import ConfigManager
from .logging_setup import setup_logging
from .session import SessionState, EditFields, reduce
from .worker import BackgroundWorker
from .orchestrator import TaggingOrchestrator

__all__ = [
    'ConfigManager',
    'setup_logging',
    'SessionState',
    'EditFields',
    'reduce',
    'BackgroundWorker',
    'TaggingOrchestrator'
]
