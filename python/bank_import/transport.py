"""
Remote Transport Module

File operations against the remote share that delivers import files.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

from .config import TransportConfig
from .exceptions import TransportError

logger = logging.getLogger(__name__)


class RemoteTransport(ABC):
    """Remote file share."""

    @abstractmethod
    def list_entries(self, remote_dir: str) -> list[str]:
        """List entry names in a remote directory."""
        pass

    @abstractmethod
    def download(self, remote_path: str, local_path: Path) -> None:
        """Copy a remote file to local storage."""
        pass

    @abstractmethod
    def remove(self, remote_path: str) -> None:
        """Delete a remote file."""
        pass

    @abstractmethod
    def upload(self, local_path: Path, remote_path: str) -> None:
        """Copy a local file to the remote share."""
        pass


class MountedDirectoryTransport(RemoteTransport):
    """Remote share mounted into the local filesystem.

    Remote paths are absolute POSIX paths resolved below the mount point.
    """

    def __init__(self, mount_point: Path | str, address: str = ""):
        """Initialize transport.

        Args:
            mount_point: Local directory where the share is mounted
            address: Address of the share, for log messages
        """
        self.mount_point = Path(mount_point)
        self.address = address or str(self.mount_point)

    @classmethod
    def from_config(cls, transport: TransportConfig) -> "MountedDirectoryTransport":
        return cls(transport.mount_point, address=transport.address)

    def _resolve(self, remote_path: str) -> Path:
        relative = PurePosixPath(remote_path.lstrip("/"))
        if ".." in relative.parts:
            raise TransportError(f"Remote path escapes the share: {remote_path}")
        return self.mount_point.joinpath(*relative.parts)

    def list_entries(self, remote_dir: str) -> list[str]:
        directory = self._resolve(remote_dir)
        if not directory.is_dir():
            raise TransportError(f"Remote directory not found: {remote_dir}")
        return [p.name for p in directory.iterdir() if p.is_file()]

    def download(self, remote_path: str, local_path: Path) -> None:
        source = self._resolve(remote_path)
        try:
            local_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, local_path)
        except OSError as e:
            raise TransportError(f"Download of {remote_path} failed: {e}") from e
        logger.info(f"Downloaded {self.address}{remote_path} to {local_path}")

    def remove(self, remote_path: str) -> None:
        try:
            self._resolve(remote_path).unlink()
        except OSError as e:
            raise TransportError(f"Remove of {remote_path} failed: {e}") from e

    def upload(self, local_path: Path, remote_path: str) -> None:
        target = self._resolve(remote_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(local_path, target)
        except OSError as e:
            raise TransportError(f"Upload of {local_path} failed: {e}") from e
        logger.info(f"Uploaded {local_path} to {self.address}{remote_path}")
