"""Temporary directories owned by a single daemon instance."""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DIR_PREFIX = "zcash-local-net-"
STDOUT_LOG = "stdout.log"


@dataclass
class InstanceDirectories:
    """Config, log and (optional) data directories of one daemon instance.

    Each directory is a TemporaryDirectory, so it is removed on cleanup()
    or, failing that, when the object is garbage collected.
    """

    config: tempfile.TemporaryDirectory[str]
    logs: tempfile.TemporaryDirectory[str]
    data: tempfile.TemporaryDirectory[str] | None = None

    @classmethod
    def create(cls, needs_data_dir: bool) -> InstanceDirectories:
        """Create the directories for a new instance.

        Args:
            needs_data_dir: Whether the daemon stores chain data on disk

        Returns:
            InstanceDirectories with freshly created directories

        Raises:
            OSError: If a directory cannot be created
        """
        config = tempfile.TemporaryDirectory(prefix=f"{DIR_PREFIX}config-")
        try:
            logs = tempfile.TemporaryDirectory(prefix=f"{DIR_PREFIX}logs-")
            data = (
                tempfile.TemporaryDirectory(prefix=f"{DIR_PREFIX}data-")
                if needs_data_dir
                else None
            )
        except OSError:
            config.cleanup()
            raise
        return cls(config=config, logs=logs, data=data)

    @property
    def config_dir(self) -> Path:
        return Path(self.config.name)

    @property
    def logs_dir(self) -> Path:
        return Path(self.logs.name)

    @property
    def data_dir(self) -> Path | None:
        return Path(self.data.name) if self.data is not None else None

    @property
    def log_path(self) -> Path:
        """Path of the captured stdout log."""
        return self.logs_dir / STDOUT_LOG

    def cleanup(self) -> None:
        """Remove all directories. Safe to call more than once."""
        for tmp in (self.config, self.logs, self.data):
            if tmp is None:
                continue
            try:
                tmp.cleanup()
            except OSError as e:
                logger.warning(f"Failed to remove {tmp.name}: {e}")
