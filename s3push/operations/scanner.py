"""
Inventory scanning (remote listing and local walk)
"""
import os
from typing import Iterator, TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import ListingError, WalkError
from ..records import RemoteObjectRecord
from ..utils.logging import log, vlog

if TYPE_CHECKING:
    from ..core.s3_manager import S3Manager


def list_remote_objects(mgr: "S3Manager", bucket: str, prefix: str) -> list[RemoteObjectRecord]:
    """
    Page through ListObjects until the response is no longer truncated.
    Returns every object under *prefix* as a flat list.
    """
    records: list[RemoteObjectRecord] = []
    marker = None
    page = 0

    log(f"[scan] Listing s3://{bucket}/{prefix} …")
    while True:
        page += 1
        try:
            response = mgr.list_objects(bucket, prefix, marker)
        except (BotoCoreError, ClientError) as exc:
            raise ListingError(f"listing s3://{bucket}/{prefix} failed: {exc}") from exc

        contents = response.get("Contents", [])
        for obj in contents:
            records.append(RemoteObjectRecord(obj["Key"], int(obj["Size"]), obj["LastModified"]))
        vlog(f"  [scan] page {page}: {len(contents)} object(s)")

        if not response.get("IsTruncated"):
            break

        # NextMarker is only sent when a delimiter was given; otherwise the
        # last key of the page is the continuation point.
        marker = response.get("NextMarker") or (contents[-1]["Key"] if contents else None)
        if not marker:
            raise ListingError(f"listing s3://{bucket}/{prefix} truncated without a marker")

    log(f"[scan] {len(records)} remote object(s) found")
    return records


def _raise_walk_error(exc: OSError):
    raise WalkError(f"cannot read {exc.filename or 'directory'}: {exc.strerror or exc}") from exc


def walk_local_files(root: str) -> Iterator[str]:
    """
    Yield every regular file under *root*, at any depth.
    Paths are *root* joined with the relative path, so each starts with *root*.
    """
    if not os.path.isdir(root):
        raise WalkError(f"local directory does not exist: {root}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            if os.path.isfile(path):
                yield path
