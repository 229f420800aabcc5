"""
Configuration constants for s3push
"""
import os
from pathlib import Path
from typing import Optional

from .errors import UsageError

# ══════════════════════════════════════════════════════════════════════════════
#  DEFAULTS  ── overridden by YAML config or apply_profile()
# ══════════════════════════════════════════════════════════════════════════════

LOCAL_ROOT = "."

BUCKET = ""
PREFIX = ""
REGION = "us-east-1"

# Either an inline key pair or a named profile from ~/.aws/credentials.
# With neither set, boto3's default credential chain is used.
ACCESS_KEY: Optional[str] = None
SECRET_KEY: Optional[str] = None
CREDENTIAL_PROFILE: Optional[str] = None

MAX_CONCURRENT_UPLOADS = 4

# botocore socket timeouts (seconds)
CONNECT_TIMEOUT = 20
READ_TIMEOUT = 60

PROJECT_FILE = ".s3push"


# ══════════════════════════════════════════════════════════════════════════════
#  GLOBAL CONFIG FILE  ── $XDG_CONFIG_HOME/s3push/config.yaml
# ══════════════════════════════════════════════════════════════════════════════

def get_global_config_dir() -> Path:
    """Return the global config directory for s3push."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "s3push"
    if os.name == "nt":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "s3push"
    return Path.home() / ".config" / "s3push"


def load_global_config() -> dict:
    """Load global config from the s3push config directory."""
    cfg_path = get_global_config_dir() / "config.yaml"
    if not cfg_path.is_file():
        return {}
    return load_yaml_file(cfg_path)


# ══════════════════════════════════════════════════════════════════════════════
#  PROJECT CONFIG FILE  ── .s3push (searched upward)
# ══════════════════════════════════════════════════════════════════════════════

def find_s3push(start: Optional[Path] = None) -> Optional[Path]:
    """
    Search upward from *start* (default: cwd) for a .s3push YAML file.
    Returns the Path if found, or None if no .s3push exists in any parent.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / PROJECT_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_yaml_file(path: Path) -> dict:
    """Parse a YAML config file and return its contents as a dict."""
    import yaml

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise UsageError(f"{path}: expected a mapping at the top level")
    return data


def get_profile(data: dict, profile_name: str = "default") -> dict:
    """
    Extract a named profile from a .s3push or config.yaml data dict.
    Falls back to the first profile if the named one is not found.
    Returns a flat profile dict merged with top-level defaults.
    """
    defaults = data.get("defaults") or {}
    profiles = data.get("profiles") or []
    if not profiles:
        return defaults.copy()
    profile = next((p for p in profiles if p.get("name") == profile_name), None)
    if profile is None:
        profile = profiles[0]
    merged = defaults.copy()
    merged.update(profile)
    return merged


# ══════════════════════════════════════════════════════════════════════════════
#  APPLY PROFILE  ── mutates module-level variables
# ══════════════════════════════════════════════════════════════════════════════

def apply_profile(profile: dict):
    """
    Apply a profile dict to the module-level config variables.
    Supports keys: directory, bucket, prefix, region, access_key, secret_key,
                   credential_profile, max_concurrent_uploads.
    """
    global LOCAL_ROOT, BUCKET, PREFIX, REGION
    global ACCESS_KEY, SECRET_KEY, CREDENTIAL_PROFILE, MAX_CONCURRENT_UPLOADS

    if "directory" in profile:
        LOCAL_ROOT = os.path.abspath(os.path.expanduser(str(profile["directory"])))
    if "bucket" in profile:
        BUCKET = str(profile["bucket"])
    if "prefix" in profile:
        PREFIX = str(profile["prefix"]) if profile["prefix"] is not None else ""
    if "region" in profile:
        REGION = str(profile["region"])
    if "access_key" in profile:
        ACCESS_KEY = str(profile["access_key"]) if profile["access_key"] else None
    if "secret_key" in profile:
        SECRET_KEY = str(profile["secret_key"]) if profile["secret_key"] else None
    if "credential_profile" in profile:
        CREDENTIAL_PROFILE = (str(profile["credential_profile"])
                              if profile["credential_profile"] else None)
    if "max_concurrent_uploads" in profile:
        MAX_CONCURRENT_UPLOADS = parse_concurrency(profile["max_concurrent_uploads"])


def parse_concurrency(raw) -> int:
    """Parse a max-concurrent-uploads value; must be a positive integer."""
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise UsageError(f"max concurrent uploads must be an integer, got {raw!r}")
    if value < 1:
        raise UsageError(f"max concurrent uploads must be at least 1, got {value}")
    return value


def validate():
    """Raise UsageError if the applied config cannot drive a sync."""
    missing = [name for name, value in (("bucket", BUCKET),
                                        ("region", REGION),
                                        ("directory", LOCAL_ROOT))
               if not value]
    if missing:
        raise UsageError(f"missing config value(s): {', '.join(missing)}")
    if bool(ACCESS_KEY) != bool(SECRET_KEY):
        raise UsageError("access_key and secret_key must be given together")
