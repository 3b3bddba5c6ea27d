import io
import sys
import tarfile
import tempfile
import unittest
import zipfile
from contextlib import contextmanager
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))

from ghrelgrab_core.errors import ConfigError, HttpStatusError
from ghrelgrab_core.formats import ArchiveFormat
from ghrelgrab_core.pipeline import GrabRequest, grab, resolve_filename


def _request(out_dir: Path, template: str, **overrides) -> GrabRequest:
    fields = dict(
        repo="owner/tool",
        version="v1.2.3",
        file_template=template,
        out_dir=out_dir,
        os_name="linux",
        arch="amd64",
    )
    fields.update(overrides)
    return GrabRequest(**fields)


class _FakeFetcher:
    """Serves a local file as if it had been downloaded and records the call."""

    def __init__(self, payload: Path):
        self.payload = payload
        self.calls: list[tuple[str, str | None, int]] = []
        self.released = False

    @contextmanager
    def __call__(self, url, token=None, timeout_s=60):
        self.calls.append((url, token, timeout_s))
        try:
            yield self.payload
        finally:
            self.released = True


class PipelineTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.out = self.root / "out" / "bin"

    def tearDown(self):
        self._tmp.cleanup()

    def _tar_payload(self) -> Path:
        path = self.root / "payload.tgz"
        with tarfile.open(path, "w:gz") as tar:
            info = tarfile.TarInfo("a")
            info.type = tarfile.DIRTYPE
            tar.addfile(info)
            data = b"hello"
            info = tarfile.TarInfo("a/b.txt")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
        return path

    def test_resolve_applies_maps_before_expansion(self):
        request = _request(
            self.out,
            "tool-{version}-{os}-{arch}.zip",
            os_map="linux=ubuntu",
            arch_map="amd64=x86_64,arm64=aarch64",
        )
        ctx, filename = resolve_filename(request)
        self.assertEqual(ctx.os_name, "ubuntu")
        self.assertEqual(ctx.arch, "x86_64")
        self.assertEqual(filename, "tool-v1.2.3-ubuntu-x86_64.zip")

    def test_tar_gz_pipeline(self):
        fetcher = _FakeFetcher(self._tar_payload())
        result = grab(_request(self.out, "tool-{os}-{arch}.TAR.GZ", token="t0k"), fetcher)

        self.assertEqual(result.archive_format, ArchiveFormat.TAR_GZ)
        self.assertEqual(result.produced, [self.out / "a" / "b.txt"])
        self.assertEqual(
            fetcher.calls,
            [("https://github.com/owner/tool/releases/download/v1.2.3/tool-linux-amd64.TAR.GZ", "t0k", 60)],
        )
        self.assertTrue(fetcher.released)

    def test_zip_pipeline_matches_tar(self):
        payload = self.root / "payload.zip"
        with zipfile.ZipFile(payload, "w") as zf:
            zf.writestr("a/", b"")
            zf.writestr("a/b.txt", b"hello")

        result = grab(_request(self.out, "tool.zip"), _FakeFetcher(payload))
        self.assertEqual(result.produced, [self.out / "a" / "b.txt"])
        self.assertEqual((self.out / "a" / "b.txt").read_text(encoding="utf-8"), "hello")

    def test_plain_file_pipeline(self):
        payload = self.root / "payload.bin"
        payload.write_bytes(b"\x00binary\xff")

        result = grab(_request(self.out, "tool-{version}-{os}-{arch}"), _FakeFetcher(payload))

        self.assertEqual(result.archive_format, ArchiveFormat.FILE)
        self.assertEqual(result.produced, [self.out / "tool-v1.2.3-linux-amd64"])
        self.assertEqual(result.produced[0].read_bytes(), b"\x00binary\xff")

    def test_running_twice_is_idempotent(self):
        fetcher = _FakeFetcher(self._tar_payload())
        request = _request(self.out, "tool.tgz")
        first = grab(request, fetcher)
        second = grab(request, fetcher)
        self.assertEqual(first.produced, second.produced)

    def test_missing_inputs_fail_before_fetch(self):
        fetcher = _FakeFetcher(self.root / "unused")
        with self.assertRaises(ConfigError):
            grab(_request(self.out, ""), fetcher)
        with self.assertRaises(ConfigError):
            grab(_request(self.out, "x.zip", version=""), fetcher)
        self.assertEqual(fetcher.calls, [])

    def test_fetch_failure_leaves_output_untouched(self):
        @contextmanager
        def failing(url, token=None, timeout_s=60):
            raise HttpStatusError(url, 404, "Not Found")
            yield  # pragma: no cover

        with self.assertRaises(HttpStatusError) as ctx:
            grab(_request(self.out, "tool.tgz"), failing)
        self.assertIn("releases/download/v1.2.3/tool.tgz", str(ctx.exception))
        self.assertFalse(self.out.exists())


if __name__ == "__main__":
    unittest.main()
