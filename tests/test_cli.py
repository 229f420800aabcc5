"""
Integration tests for s3push CLI behavior and config loading.

Tests:
  - .s3push discovery: searching parent directories upward
  - config loading: apply_profile correctly mutates module variables
  - direct form: argument-count and concurrency validation
  - s3push init: creates a valid .s3push YAML, refuses overwrite without --force
  - s3push sync: fails cleanly without a .s3push file
"""
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock


# ── Helpers ───────────────────────────────────────────────────────────────────

REPO_ROOT = Path(__file__).parent.parent


def run_s3push(*args, cwd=None, input_text=None, env_extra=None):
    """Run the s3push CLI and return (returncode, stdout, stderr)."""
    result = subprocess.run(
        [sys.executable, "-m", "s3push", *args],
        cwd=str(cwd or REPO_ROOT),
        capture_output=True,
        text=True,
        encoding="utf-8",
        input=input_text or "",
        env={**os.environ, "PYTHONPATH": str(REPO_ROOT), "PYTHONIOENCODING": "utf-8",
             "XDG_CONFIG_HOME": str(Path(tempfile.gettempdir()) / "s3push-test-config"),
             **(env_extra or {})},
    )
    return result.returncode, result.stdout, result.stderr


# ── Tests: .s3push discovery ──────────────────────────────────────────────────

class TestFindS3push(unittest.TestCase):
    """Tests for find_s3push() — upward search through parent directories."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name).resolve()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_find_in_same_directory(self):
        from s3push.config import find_s3push
        (self.root / ".s3push").write_text("profiles: []\n", encoding="utf-8")
        self.assertEqual(find_s3push(self.root), self.root / ".s3push")

    def test_find_in_parent_directory(self):
        from s3push.config import find_s3push
        (self.root / ".s3push").write_text("profiles: []\n", encoding="utf-8")
        subdir = self.root / "a" / "b" / "c"
        subdir.mkdir(parents=True)
        self.assertEqual(find_s3push(subdir), self.root / ".s3push")

    def test_finds_nearest_file(self):
        from s3push.config import find_s3push
        (self.root / ".s3push").write_text("profiles: []\n", encoding="utf-8")
        sub_a = self.root / "a"
        sub_a.mkdir()
        (sub_a / ".s3push").write_text("profiles: []\n", encoding="utf-8")
        deep = sub_a / "b" / "c"
        deep.mkdir(parents=True)
        self.assertEqual(find_s3push(deep), sub_a / ".s3push")


# ── Tests: config loading ─────────────────────────────────────────────────────

class TestLoadProfile(unittest.TestCase):
    """Tests for load_yaml_file, get_profile and apply_profile."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        import s3push.config as cfg
        cfg.BUCKET = ""
        cfg.PREFIX = ""
        cfg.REGION = "us-east-1"
        cfg.ACCESS_KEY = cfg.SECRET_KEY = cfg.CREDENTIAL_PROFILE = None
        cfg.MAX_CONCURRENT_UPLOADS = 4

    def tearDown(self):
        self.tmpdir.cleanup()

    def _write(self, content):
        p = self.root / ".s3push"
        p.write_text(content, encoding="utf-8")
        return p

    def test_load_profile_basic(self):
        import s3push.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: default\n"
            "    directory: /tmp/site\n"
            "    bucket: my-bucket\n"
            "    prefix: backups/site\n"
            "    region: eu-west-1\n"
            "    credential_profile: deploy\n"
            "    max_concurrent_uploads: 8\n"
        )
        cfg.apply_profile(cfg.get_profile(cfg.load_yaml_file(p), "default"))
        self.assertEqual(cfg.BUCKET, "my-bucket")
        self.assertEqual(cfg.PREFIX, "backups/site")
        self.assertEqual(cfg.REGION, "eu-west-1")
        self.assertEqual(cfg.CREDENTIAL_PROFILE, "deploy")
        self.assertEqual(cfg.MAX_CONCURRENT_UPLOADS, 8)
        self.assertTrue(os.path.isabs(cfg.LOCAL_ROOT))

    def test_defaults_are_merged(self):
        import s3push.config as cfg
        p = self._write(
            "defaults:\n"
            "  region: ap-south-1\n"
            "  max_concurrent_uploads: 2\n"
            "profiles:\n"
            "  - name: default\n"
            "    bucket: b\n"
        )
        profile = cfg.get_profile(cfg.load_yaml_file(p), "default")
        self.assertEqual(profile["region"], "ap-south-1")
        self.assertEqual(profile["bucket"], "b")

    def test_get_profile_by_name(self):
        import s3push.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: staging\n"
            "    bucket: staging-bucket\n"
            "  - name: prod\n"
            "    bucket: prod-bucket\n"
        )
        self.assertEqual(cfg.get_profile(cfg.load_yaml_file(p), "prod")["bucket"], "prod-bucket")

    def test_get_profile_falls_back_to_first(self):
        import s3push.config as cfg
        p = self._write(
            "profiles:\n"
            "  - name: only\n"
            "    bucket: only-bucket\n"
        )
        self.assertEqual(cfg.get_profile(cfg.load_yaml_file(p), "missing")["bucket"], "only-bucket")

    def test_bad_concurrency_is_usage_error(self):
        import s3push.config as cfg
        from s3push.errors import UsageError
        for raw in ("abc", "0", "-3", "2.5"):
            with self.assertRaises(UsageError):
                cfg.parse_concurrency(raw)

    def test_half_a_key_pair_is_rejected(self):
        import s3push.config as cfg
        from s3push.errors import UsageError
        cfg.apply_profile({"directory": ".", "bucket": "b", "access_key": "AKIA"})
        with self.assertRaises(UsageError):
            cfg.validate()

    def test_non_mapping_file_is_rejected(self):
        import s3push.config as cfg
        from s3push.errors import UsageError
        p = self._write("- just\n- a list\n")
        with self.assertRaises(UsageError):
            cfg.load_yaml_file(p)

    def test_empty_defaults_and_profiles_keys(self):
        import s3push.config as cfg
        p = self._write("defaults:\nprofiles:\n")
        self.assertEqual(cfg.get_profile(cfg.load_yaml_file(p), "default"), {})
        p = self._write("defaults:\nprofiles:\n  - name: default\n    bucket: b\n")
        self.assertEqual(cfg.get_profile(cfg.load_yaml_file(p), "default")["bucket"], "b")


# ── Tests: direct (positional) form ───────────────────────────────────────────

class TestProfileFromArgs(unittest.TestCase):

    def test_seven_arguments_use_inline_keys(self):
        from s3push.cli import profile_from_args
        profile = profile_from_args(["dir", "AKIA", "SECRET", "us-west-2", "bkt", "pre", "5"])
        self.assertEqual(profile["access_key"], "AKIA")
        self.assertEqual(profile["secret_key"], "SECRET")
        self.assertIsNone(profile["credential_profile"])
        self.assertEqual(profile["max_concurrent_uploads"], "5")

    def test_six_arguments_use_named_profile(self):
        from s3push.cli import profile_from_args
        profile = profile_from_args(["dir", "deploy", "us-west-2", "bkt", "pre", "5"])
        self.assertEqual(profile["credential_profile"], "deploy")
        self.assertIsNone(profile["access_key"])
        self.assertEqual(profile["bucket"], "bkt")

    def test_other_counts_are_rejected(self):
        from s3push.cli import profile_from_args
        for n in (0, 1, 5, 8):
            self.assertIsNone(profile_from_args(["x"] * n))


class TestDirectCommand(unittest.TestCase):

    def test_wrong_argument_count_prints_usage(self):
        rc, out, err = run_s3push("only", "three", "args")
        self.assertEqual(rc, 2)
        self.assertIn("usage: s3push <directory>", out)
        self.assertEqual(len(out.strip().splitlines()), 1)

    def test_no_arguments_prints_usage(self):
        rc, out, err = run_s3push()
        self.assertEqual(rc, 2)
        self.assertIn("usage:", out)

    def test_unparseable_concurrency_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            rc, out, err = run_s3push(tmp, "deploy", "us-east-1", "bkt", "pre", "many")
        self.assertEqual(rc, 2)
        self.assertIn("integer", out)

    def test_unknown_credential_profile_fails_cleanly(self):
        with tempfile.TemporaryDirectory() as tmp:
            nowhere = str(Path(tmp) / "absent")
            rc, out, err = run_s3push(
                tmp, "nosuchprofile", "us-east-1", "bkt", "pre", "2",
                env_extra={"AWS_CONFIG_FILE": nowhere, "AWS_SHARED_CREDENTIALS_FILE": nowhere},
            )
        self.assertEqual(rc, 2)
        self.assertIn("Sync failed", out)
        self.assertIn("nosuchprofile", out)
        self.assertNotIn("Traceback", err)


class TestS3ManagerConnect(unittest.TestCase):

    def setUp(self):
        import s3push.config as cfg
        self.tmpdir = tempfile.TemporaryDirectory()
        nowhere = str(Path(self.tmpdir.name) / "absent")
        self.env = mock.patch.dict(os.environ, {"AWS_CONFIG_FILE": nowhere,
                                                "AWS_SHARED_CREDENTIALS_FILE": nowhere})
        self.env.start()
        cfg.ACCESS_KEY = cfg.SECRET_KEY = None
        cfg.CREDENTIAL_PROFILE = "nosuchprofile"

    def tearDown(self):
        import s3push.config as cfg
        cfg.CREDENTIAL_PROFILE = None
        self.env.stop()
        self.tmpdir.cleanup()

    def test_unknown_profile_is_usage_error(self):
        import io
        from contextlib import redirect_stdout
        from s3push.core.s3_manager import S3Manager
        from s3push.errors import UsageError
        with redirect_stdout(io.StringIO()), self.assertRaises(UsageError) as ctx:
            S3Manager().connect()
        self.assertIn("nosuchprofile", str(ctx.exception))
        self.assertEqual(ctx.exception.exit_code, 2)


# ── Tests: s3push init ────────────────────────────────────────────────────────

class TestInitCommand(unittest.TestCase):
    """Tests for the 's3push init' subcommand."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.cwd = Path(self.tmpdir.name)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_init_creates_config_file(self):
        rc, out, err = run_s3push(
            "init", "--bucket", "my-bucket", "--prefix", "site",
            "--region", "eu-west-1", "--credential-profile", "deploy",
            cwd=self.cwd,
        )
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        content = (self.cwd / ".s3push").read_text(encoding="utf-8")
        self.assertIn("my-bucket", content)
        self.assertIn("eu-west-1", content)
        self.assertIn("deploy", content)

    def test_init_refuses_overwrite(self):
        (self.cwd / ".s3push").write_text("profiles: []\n", encoding="utf-8")
        rc, out, err = run_s3push("init", "--bucket", "b", "--prefix", "p", cwd=self.cwd)
        self.assertNotEqual(rc, 0)
        self.assertIn("already exists", err)

    def test_init_force_overwrites(self):
        (self.cwd / ".s3push").write_text("profiles: []\n", encoding="utf-8")
        rc, out, err = run_s3push("init", "--bucket", "new-bucket", "--prefix", "p",
                                  "--force", cwd=self.cwd)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        self.assertIn("new-bucket", (self.cwd / ".s3push").read_text(encoding="utf-8"))

    def test_init_dry_run_does_not_write(self):
        rc, out, err = run_s3push("init", "--bucket", "b", "--prefix", "p", "--dry-run",
                                  cwd=self.cwd)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        self.assertFalse((self.cwd / ".s3push").exists())
        self.assertIn("dry-run", out)

    def test_init_rejects_zero_concurrency(self):
        rc, out, err = run_s3push("init", "--bucket", "b", "--prefix", "p",
                                  "--concurrency", "0", cwd=self.cwd)
        self.assertEqual(rc, 1)
        self.assertIn("at least 1", err)
        self.assertFalse((self.cwd / ".s3push").exists())

    def test_init_requires_bucket(self):
        rc, out, err = run_s3push("init", "--prefix", "p", cwd=self.cwd)
        self.assertEqual(rc, 1)
        self.assertIn("bucket is required", err)

    def test_init_creates_valid_yaml(self):
        rc, out, err = run_s3push("init", "--bucket", "b", "--prefix", "it's here",
                                  "--concurrency", "6", cwd=self.cwd)
        self.assertEqual(rc, 0, msg=f"stderr: {err}")
        import yaml
        data = yaml.safe_load((self.cwd / ".s3push").read_text(encoding="utf-8"))
        profile = data["profiles"][0]
        self.assertEqual(profile["bucket"], "b")
        self.assertEqual(profile["prefix"], "it's here")
        self.assertEqual(profile["max_concurrent_uploads"], 6)


# ── Tests: s3push sync ────────────────────────────────────────────────────────

class TestSyncCommand(unittest.TestCase):

    def test_sync_without_config_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            cwd = Path(tmp)
            import s3push.config as cfg
            if cfg.find_s3push(cwd) is not None:
                self.skipTest("a .s3push exists above the temp directory")
            rc, out, err = run_s3push("sync", cwd=cwd)
        self.assertEqual(rc, 1)
        self.assertIn("s3push init", err)


if __name__ == "__main__":
    unittest.main()
