"""
Main sync engine - decision logic and orchestration
"""
from typing import Iterable, Optional

from .. import config as _cfg
from ..core.s3_manager import S3Manager
from ..errors import WalkError
from ..records import LocalFileRecord, RemoteObjectRecord, UploadTask
from ..utils.logging import log, vlog, set_verbose
from ..utils.keys import remote_key_for
from ..operations.scanner import list_remote_objects, walk_local_files
from ..operations.transfer import upload_all


def needs_upload(local: LocalFileRecord, remote: Optional[RemoteObjectRecord]) -> bool:
    """
    True when the local file is missing remotely, has a different size, or is
    newer than the remote copy. A newer remote object counts as up to date.
    """
    if remote is None:
        return True
    return remote.size != local.size or remote.last_modified < local.last_modified


def decide(local_paths: Iterable[str],
           remote_records: Iterable[RemoteObjectRecord],
           local_root: str,
           prefix: str) -> list[UploadTask]:
    """
    Join the local walk with the remote listing on the derived key.
    Returns the uploads to run, in local enumeration order.
    Remote-only objects are never touched.
    """
    remote_by_key = {r.key: r for r in remote_records}
    plan: list[UploadTask] = []

    for path in local_paths:
        key = remote_key_for(path, local_root, prefix)
        try:
            local = LocalFileRecord.from_path(path)
        except OSError as exc:
            raise WalkError(f"cannot stat {path}: {exc}") from exc
        remote = remote_by_key.get(key)

        if needs_upload(local, remote):
            reason = "new" if remote is None else (
                "size" if remote.size != local.size else "newer")
            vlog(f"  [PUSH:{reason}] {key}")
            plan.append(UploadTask(key, path))
        else:
            vlog(f"  [SKIP] {key}")

    return plan


def run_sync(dry_run=False, verbose=False, mgr: Optional[S3Manager] = None) -> int:
    """
    Sync LOCAL_ROOT to s3://BUCKET/PREFIX using the applied config.
    Returns the number of files uploaded. Errors propagate as S3PushError.
    """
    set_verbose(verbose)
    _cfg.validate()

    print(f"\n{'=' * 64}")
    print(f"  Sync  {_cfg.LOCAL_ROOT}")
    print(f"   →   s3://{_cfg.BUCKET}/{_cfg.PREFIX}  ({_cfg.REGION})")
    print(f"{'=' * 64}")
    if dry_run:
        print("  *** DRY-RUN — nothing will be uploaded ***")
    print()

    mgr = mgr or S3Manager()
    mgr.connect()

    # ── 1. Remote inventory (complete before any comparison) ───────────────
    remote_records = list_remote_objects(mgr, _cfg.BUCKET, _cfg.PREFIX)

    # ── 2. Walk + diff ─────────────────────────────────────────────────────
    log("[scan] Comparing local files …")
    plan = decide(walk_local_files(_cfg.LOCAL_ROOT), remote_records,
                  _cfg.LOCAL_ROOT, _cfg.PREFIX)

    if not plan:
        log("Everything is up to date.")
        return 0

    # ── 3. Dispatch ────────────────────────────────────────────────────────
    log(f"Uploading {len(plan)} files (max {_cfg.MAX_CONCURRENT_UPLOADS} concurrent)")
    uploaded = upload_all(mgr, _cfg.BUCKET, plan, _cfg.MAX_CONCURRENT_UPLOADS, dry_run)
    log("done.")
    return uploaded
