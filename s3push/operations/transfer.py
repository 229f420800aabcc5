"""
Upload dispatch: bounded pool of PutObject workers
"""
from concurrent.futures import ThreadPoolExecutor, FIRST_EXCEPTION, wait
from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import UploadError
from ..records import UploadTask
from ..utils.logging import log

if TYPE_CHECKING:
    from ..core.s3_manager import S3Manager


def upload_one(mgr: "S3Manager", bucket: str, task: UploadTask):
    """PUT one file; raise UploadError on any failure."""
    try:
        mgr.put_object(bucket, task.remote_key, task.local_path)
    except (BotoCoreError, ClientError, OSError) as exc:
        raise UploadError(f"upload of {task.local_path} → {task.remote_key} failed: {exc}") from exc
    log(f"{task.remote_key} uploaded.")


def upload_all(mgr: "S3Manager", bucket: str, tasks: list[UploadTask],
               max_concurrency: int, dry_run: bool = False) -> int:
    """
    Upload every task with at most *max_concurrency* PUTs in flight.

    Fail-fast: on the first failure, tasks not yet started are cancelled,
    uploads already running finish, and the first error is re-raised.
    Returns the number of files uploaded.
    """
    if not tasks:
        return 0
    if dry_run:
        for task in tasks:
            log(f"  [PUSH-DRY] {task.local_path} → {task.remote_key}")
        return 0

    with ThreadPoolExecutor(max_workers=max_concurrency,
                            thread_name_prefix="s3push-upload") as pool:
        futures = [pool.submit(upload_one, mgr, bucket, task) for task in tasks]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for fut in pending:
            fut.cancel()

    # leaving the pool waited for in-flight uploads; report the first failure
    for fut in futures:
        if not fut.cancelled() and fut.exception() is not None:
            raise fut.exception()
    return len(futures)
