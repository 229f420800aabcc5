"""Operations (scan, transfer)"""
from .scanner import list_remote_objects, walk_local_files
from .transfer import upload_all, upload_one

__all__ = [
    "list_remote_objects", "walk_local_files",
    "upload_all", "upload_one",
]
