"""
Exception hierarchy for s3push
"""


class S3PushError(Exception):
    """Base class for every error the sync surfaces to the CLI."""
    exit_code = 1


class UsageError(S3PushError):
    """Bad command line or incomplete configuration."""
    exit_code = 2


class PathInvariantError(S3PushError):
    """A walked path does not sit under the sync root (internal bug)."""


class ListingError(S3PushError):
    """The remote ListObjects call failed."""


class WalkError(S3PushError):
    """Local directory enumeration failed."""


class UploadError(S3PushError):
    """A single PutObject failed; aborts the dispatch phase."""
