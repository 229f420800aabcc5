"""
Local path → remote object key mapping
"""
from ..errors import PathInvariantError


def strip_root(local_path: str, local_root: str) -> str:
    """
    Return *local_path* relative to *local_root*.

    The root is removed literally, together with one following separator
    (``/`` or ``\\``) if present. The walker always yields paths built from the
    same root string, so a mismatch here is a bug, not bad input.
    """
    if not local_path.startswith(local_root) or len(local_path) <= len(local_root):
        raise PathInvariantError(f"{local_path!r} is not under sync root {local_root!r}")

    position = len(local_root)
    if local_path[position] in ("/", "\\"):
        position += 1
    return local_path[position:]


def remote_key_for(local_path: str, local_root: str, prefix: str) -> str:
    """Derive the object key for a local file: ``<prefix>/<relative/posix/path>``."""
    relative = strip_root(local_path, local_root).replace("\\", "/")
    return f"{prefix}/{relative}"
