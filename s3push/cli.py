#!/usr/bin/env python3
"""
s3push  —  one-way local directory → S3 prefix sync
====================================================

Uploads every local file that is missing remotely, has a different size,
or is newer than its remote copy. Nothing is ever deleted or downloaded.

Direct usage (credentials inline or from a named AWS profile):
  s3push <directory> <access-key> <secret-key> <region> <bucket> <prefix> <max-concurrent-uploads>
  s3push <directory> <credential-profile> <region> <bucket> <prefix> <max-concurrent-uploads>

Config-file usage:
  init      Create a .s3push config file in the current directory.
  sync      Run the sync using the nearest .s3push config.

Run 's3push <subcommand> --help' for more details.
"""
import sys
import argparse
import traceback
from pathlib import Path
from typing import Optional

USAGE = ("usage: s3push <directory> (<access-key> <secret-key> | <credential-profile>) "
         "<region> <bucket> <prefix> <max-concurrent-uploads>")

SUBCOMMANDS = ("init", "sync")


# ── shared runner ────────────────────────────────────────────────────────────

def _execute(profile: dict, dry_run: bool, verbose: bool):
    """Apply *profile* and run the sync, turning errors into exit codes."""
    from s3push import config as _cfg
    from s3push.core.sync_engine import run_sync
    from s3push.errors import S3PushError
    from s3push.utils.logging import warn

    try:
        _cfg.apply_profile(profile)
        run_sync(dry_run=dry_run, verbose=verbose)
    except KeyboardInterrupt:
        print()
        warn("Interrupted by user. Uploads already finished are kept.")
        sys.exit(130)
    except S3PushError as exc:
        warn(f"Sync failed: {exc}")
        if verbose:
            traceback.print_exc()
        sys.exit(exc.exit_code)


# ── positional (direct) form ─────────────────────────────────────────────────

def profile_from_args(values: list) -> Optional[dict]:
    """
    Map the 7-argument (inline keys) or 6-argument (named profile) form
    to a profile dict. Returns None for any other argument count.
    """
    if len(values) == 7:
        directory, access_key, secret_key, region, bucket, prefix, concurrency = values
        credential_profile = None
    elif len(values) == 6:
        directory, credential_profile, region, bucket, prefix, concurrency = values
        access_key = secret_key = None
    else:
        return None
    return {
        "directory": directory,
        "access_key": access_key,
        "secret_key": secret_key,
        "credential_profile": credential_profile,
        "region": region,
        "bucket": bucket,
        "prefix": prefix,
        "max_concurrent_uploads": concurrency,
    }


def main_direct(argv: list):
    parser = argparse.ArgumentParser(
        prog="s3push",
        usage=USAGE[len("usage: "):],
        description="One-way local directory → S3 prefix sync",
        epilog="Subcommands: init, sync (see 's3push <subcommand> --help').",
    )
    parser.add_argument("args", nargs="*", metavar="ARG")
    parser.add_argument("-n", "--dry-run", action="store_true",
                        help="Preview uploads without sending anything")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show every file considered, not just uploads")
    args = parser.parse_intermixed_args(argv)

    profile = profile_from_args(args.args)
    if profile is None:
        print(USAGE)
        sys.exit(2)

    _execute(profile, args.dry_run, args.verbose)


# ── init ─────────────────────────────────────────────────────────────────────

def _yq(value: str) -> str:
    """Wrap a string in YAML single quotes, escaping embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def _ask(label: str, default: str) -> str:
    if not sys.stdin.isatty():
        return default
    hint = f" [{default}]" if default else ""
    entered = input(f"{label}{hint}: ").strip()
    return entered or default


def cmd_init(args):
    """Create a .s3push profile file in the current directory."""
    from s3push import config as _cfg

    target = Path.cwd() / _cfg.PROJECT_FILE

    if target.exists() and not args.force:
        print(f"error: {_cfg.PROJECT_FILE} already exists in {Path.cwd()}", file=sys.stderr)
        print("Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)

    g_defaults = _cfg.load_global_config().get("defaults") or {}

    directory = args.directory or "."
    bucket = args.bucket or _ask("Bucket", str(g_defaults.get("bucket", "")))
    if not bucket:
        print("error: bucket is required (--bucket).", file=sys.stderr)
        sys.exit(1)

    prefix = args.prefix if args.prefix is not None else _ask("Prefix", Path.cwd().name)
    region = args.region or _ask("Region", str(g_defaults.get("region", _cfg.REGION)))
    credential_profile = args.credential_profile or _ask(
        "AWS credential profile", str(g_defaults.get("credential_profile", "default")))

    concurrency = args.concurrency
    if concurrency is None:
        concurrency = int(g_defaults.get("max_concurrent_uploads", _cfg.MAX_CONCURRENT_UPLOADS))
    if concurrency < 1:
        print("error: --concurrency must be at least 1.", file=sys.stderr)
        sys.exit(1)

    directory_yaml = directory.replace("\\", "/")

    lines = [
        "# .s3push — s3push project configuration",
        "#",
        "# profiles: list of sync targets for this project.",
        "# directory is relative to this file unless absolute.",
        "# Credentials: credential_profile, or access_key + secret_key.",
        "profiles:",
        f"  - name: {args.profile or 'default'}",
        f"    directory: {_yq(directory_yaml)}",
        f"    bucket: {_yq(bucket)}",
        f"    prefix: {_yq(prefix)}",
        f"    region: {_yq(region)}",
        f"    credential_profile: {_yq(credential_profile)}",
        f"    max_concurrent_uploads: {concurrency}",
    ]
    content = "\n".join(lines) + "\n"

    if args.dry_run:
        print(f"[dry-run] Would write {target}:")
        print(content)
        return

    target.write_text(content, encoding="utf-8")
    print(f"Created {target}")
    if args.verbose:
        print(content)


# ── sync ─────────────────────────────────────────────────────────────────────

def cmd_sync(args):
    """Run sync using the nearest .s3push config file."""
    from s3push import config as _cfg
    from s3push.errors import UsageError

    config_path = _cfg.find_s3push()
    if config_path is None:
        print(f"error: no {_cfg.PROJECT_FILE} file found in this directory or any parent.",
              file=sys.stderr)
        print("Run 's3push init' to create one.", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        print(f"[config] Using {config_path}")

    try:
        data = _cfg.load_yaml_file(config_path)
    except UsageError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(exc.exit_code)
    profile = _cfg.get_profile(data, args.profile or "default")

    directory = Path(str(profile.get("directory", "."))).expanduser()
    if not directory.is_absolute():
        directory = config_path.parent / directory
    profile["directory"] = str(directory)

    _execute(profile, args.dry_run, args.verbose)


def main_subcommand(argv: list):
    parser = argparse.ArgumentParser(
        prog="s3push",
        description="One-way local directory → S3 prefix sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # ── init ──────────────────────────────────────────────────────────────────
    init_p = subparsers.add_parser(
        "init",
        help="Create a .s3push config file in the current directory",
        description="Create a .s3push YAML config file for this project.",
    )
    init_p.add_argument("--directory", metavar="PATH",
                        help="Local directory to sync (default: .)")
    init_p.add_argument("--bucket", metavar="NAME", help="Destination bucket")
    init_p.add_argument("--prefix", metavar="PREFIX",
                        help="Key prefix inside the bucket (default: current directory name)")
    init_p.add_argument("--region", metavar="REGION", help="Bucket region")
    init_p.add_argument("--credential-profile", metavar="NAME",
                        help="AWS shared-credentials profile (default: default)")
    init_p.add_argument("--concurrency", type=int, metavar="N",
                        help="Max concurrent uploads (default: 4)")
    init_p.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile name to create (default: default)")
    init_p.add_argument("--force", action="store_true",
                        help="Overwrite existing .s3push")
    init_p.add_argument("-n", "--dry-run", action="store_true",
                        help="Preview without writing files")
    init_p.add_argument("-v", "--verbose", action="store_true",
                        help="Show extra output")

    # ── sync ──────────────────────────────────────────────────────────────────
    sync_p = subparsers.add_parser(
        "sync",
        help="Upload new and changed files using the nearest .s3push config",
        description="Sync the local directory to S3 using settings from .s3push.",
    )
    sync_p.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile to use (default: default)")
    sync_p.add_argument("-n", "--dry-run", action="store_true",
                        help="Preview uploads without sending anything")
    sync_p.add_argument("-v", "--verbose", action="store_true",
                        help="Show every file considered, not just uploads")

    args = parser.parse_args(argv)

    if args.command == "init":
        cmd_init(args)
    elif args.command == "sync":
        cmd_sync(args)
    else:
        parser.print_help()
        sys.exit(1)


# ── main ──────────────────────────────────────────────────────────────────────

def main(argv=None):
    """CLI entry point for s3push"""
    argv = sys.argv[1:] if argv is None else list(argv)
    if argv and argv[0] in SUBCOMMANDS:
        main_subcommand(argv)
    else:
        main_direct(argv)


if __name__ == "__main__":
    main()
