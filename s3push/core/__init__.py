"""Core functionality"""
from .s3_manager import S3Manager
from .sync_engine import run_sync, decide, needs_upload

__all__ = ["S3Manager", "run_sync", "decide", "needs_upload"]
