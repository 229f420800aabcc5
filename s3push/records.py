"""
Inventory records exchanged between the scanner, the diff and the uploader
"""
import os
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class RemoteObjectRecord:
    key: str
    size: int
    last_modified: datetime


@dataclass(frozen=True)
class LocalFileRecord:
    path: str
    size: int
    last_modified: datetime

    @classmethod
    def from_path(cls, path: str) -> "LocalFileRecord":
        """Stat *path*; mtime becomes an aware UTC datetime comparable with S3's."""
        st = os.stat(path)
        return cls(path, st.st_size, datetime.fromtimestamp(st.st_mtime, tz=timezone.utc))


@dataclass(frozen=True)
class UploadTask:
    remote_key: str
    local_path: str
