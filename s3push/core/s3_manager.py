"""
S3 connection manager: one boto3 client shared by all upload workers
"""
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ProfileNotFound

from .. import config as _cfg
from ..errors import S3PushError, UsageError
from ..utils.logging import log


class S3Manager:
    """
    Wraps a boto3 Session + S3 client.

    The session is only touched while connecting, from the calling thread.
    The client it produces is safe for concurrent, non-overlapping calls, so
    a single manager is handed to every upload worker.
    """

    def __init__(self, client=None):
        self._client = client

    # ── connection ─────────────────────────────────────────────────────────

    def connect(self):
        if self._client is not None:
            return

        session_kw: dict = dict(region_name=_cfg.REGION)
        if _cfg.ACCESS_KEY and _cfg.SECRET_KEY:
            session_kw["aws_access_key_id"] = _cfg.ACCESS_KEY
            session_kw["aws_secret_access_key"] = _cfg.SECRET_KEY
            how = "inline access key"
        elif _cfg.CREDENTIAL_PROFILE:
            session_kw["profile_name"] = _cfg.CREDENTIAL_PROFILE
            how = f"profile {_cfg.CREDENTIAL_PROFILE!r}"
        else:
            how = "default credential chain"

        log(f"[S3] connecting to region {_cfg.REGION} ({how}) …")
        # one pooled connection per upload worker
        client_config = Config(
            connect_timeout=_cfg.CONNECT_TIMEOUT,
            read_timeout=_cfg.READ_TIMEOUT,
            max_pool_connections=max(10, _cfg.MAX_CONCURRENT_UPLOADS),
        )
        try:
            session = boto3.Session(**session_kw)
            self._client = session.client("s3", config=client_config)
        except ProfileNotFound as exc:
            raise UsageError(f"unknown credential profile: {exc}") from exc
        except BotoCoreError as exc:
            raise S3PushError(f"cannot create S3 client: {exc}") from exc
        log("[S3] client ready ✓")

    @property
    def client(self):
        if self._client is None:
            self.connect()
        return self._client

    # ── object ops ─────────────────────────────────────────────────────────

    def list_objects(self, bucket: str, prefix: str,
                     marker: Optional[str] = None) -> dict:
        """One ListObjects page; the raw response dict."""
        kw = dict(Bucket=bucket, Prefix=prefix)
        if marker:
            kw["Marker"] = marker
        return self.client.list_objects(**kw)

    def put_object(self, bucket: str, key: str, local_path: str):
        """Upload the whole file in a single PUT, replacing any existing object."""
        with open(local_path, "rb") as body:
            self.client.put_object(Bucket=bucket, Key=key, Body=body)
