#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base class for batch agents.
All agents (Fetcher, Renamer) inherit from this.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import time

import structlog

from utilities.scanner import AudioFile


class BaseAgent(ABC):
    """
    Abstract base class for batch agents.

    Agents process scanned files one at a time:
    - Fetcher: Look up untagged files in a catalog and write tags
    - Renamer: Give tagged files their canonical "Artist - Title" name

    A failure on one file is recorded and the batch moves on.
    """

    def __init__(self, config):
        """
        Initialize agent with configuration.

        Args:
            config: ConfigManager instance
        """
        self.config = config
        self._start_time: Optional[float] = None
        self._log = structlog.get_logger().bind(agent=self.name)

    @property
    @abstractmethod
    def name(self) -> str:
        """Agent name identifier"""
        pass

    @abstractmethod
    def process(self, item: AudioFile) -> Dict[str, Any]:
        """
        Process a single file.

        Args:
            item: Scanned file

        Returns:
            Dictionary with 'path', 'status' ('success', 'skipped', 'failed')
            and details
        """
        pass

    def process_batch(self, items: list, callback=None) -> Dict[str, Any]:
        """
        Process multiple files.

        Args:
            items: List of AudioFile
            callback: Optional callback(item, result, index) called after each item

        Returns:
            Summary of batch processing
        """
        results = {
            "total": len(items),
            "success": 0,
            "failed": 0,
            "skipped": 0,
            "items": []
        }

        self._start_time = time.time()

        for i, item in enumerate(items):
            try:
                result = self.process(item)
            except Exception as e:
                result = {
                    "path": str(item.path),
                    "status": "error",
                    "error": str(e)
                }
                self.log_error(f"Error processing {item.path}: {e}")

            if result.get("status") == "success":
                results["success"] += 1
            elif result.get("status") == "skipped":
                results["skipped"] += 1
            else:
                results["failed"] += 1

            results["items"].append(result)

            if callback:
                callback(item, result, i)

        results["duration"] = time.time() - self._start_time
        return results

    def log(self, message: str, **kw: Any) -> None:
        """Log a message tagged with the agent name"""
        self._log.info(message, **kw)

    def log_error(self, message: str, **kw: Any) -> None:
        """Log an error message"""
        self._log.error(message, **kw)

    def get_config(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        return self.config.get(key, default)
