"""Download, verify, unpack and install a release package."""

from __future__ import annotations

import os
import posixpath
import shutil
import stat
import tempfile
import time
import urllib.request
from collections.abc import Callable, Iterator
from typing import BinaryIO

from . import log
from .arch import OSInfo
from .config import Config
from .debpkg import extract_deb
from .github import Release
from .prompts import UI
from .tmpdirs import register_tmp_dir, unregister_tmp_dir
from .verify import PGPError, verify_pgp

SIGNATURE_URL = "https://cdn.mullvad.net/app/desktop/releases/{version}/{base}.deb.asc"
PROGRESS_INTERVAL = 0.2


class ProgressReader:
    """A readable stream wrapper that reports download progress."""

    def __init__(
        self,
        reader: BinaryIO,
        total: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._reader = reader
        self._clock = clock
        self.total = total
        self.bytes_read = 0
        self._start = clock()
        self._last_print = self._start

    def read(self, size: int = -1) -> bytes:
        """Read from the wrapped stream, redrawing progress now and then."""
        chunk = self._reader.read(size)
        self.bytes_read += len(chunk)
        now = self._clock()
        at_eof = not chunk and size != 0
        if now - self._last_print > PROGRESS_INTERVAL or at_eof:
            log.progress(self.bytes_read, self.total, now - self._start)
            self._last_print = now
        return chunk

    def finish(self) -> None:
        """Print the final download summary."""
        log.finish_progress(self.bytes_read, self.total, self._clock() - self._start)


def select_deb_asset(release: Release, arch: str) -> str:
    """Return the download URL of the release's .deb for ``arch``."""
    wanted = f"{arch}.deb"
    for asset in release.assets:
        if wanted in asset.name:
            return asset.url
    raise LookupError(f'no .deb for arch "{arch}"')


def _signature_url(release: Release, asset_url: str) -> str:
    asset_name = posixpath.basename(asset_url.rstrip("/"))
    version = release.tag.removeprefix("MullvadVPN-")
    base = asset_name.removesuffix(".deb")
    return SIGNATURE_URL.format(version=version, base=base)


def fetch_file(url: str, dest: str, cfg: Config) -> None:
    """Download ``url`` to ``dest`` with a progress display."""
    if cfg.dry_run:
        log.info(f"(dry-run) would download  {url} → {dest}")
        return
    with urllib.request.urlopen(url) as resp:
        length = resp.headers.get("Content-Length")
        total = int(length) if length else -1
        with open(dest, "wb") as out:
            reader = ProgressReader(resp, total)
            shutil.copyfileobj(reader, out)
    reader.finish()


def _walk(path: str) -> Iterator[tuple[str, bool, int]]:
    st = os.lstat(path)
    is_dir = stat.S_ISDIR(st.st_mode)
    yield path, is_dir, stat.S_IMODE(st.st_mode)
    if is_dir:
        for name in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, name))


def install_tree(src: str, dst: str, cfg: Config) -> None:
    """Copy the tree under ``src`` onto ``dst``, keeping permission bits."""
    for path, is_dir, mode in _walk(src):
        target = os.path.normpath(os.path.join(dst, os.path.relpath(path, src)))
        if is_dir:
            if cfg.dry_run:
                log.info(f"(dry-run) mkdir {target}")
            else:
                os.makedirs(target, mode=mode, exist_ok=True)
            continue
        log.info("Installing file", target)
        if not cfg.dry_run:
            copy_file_with_mode(path, target, mode)


def copy_file_with_mode(src: str, dst: str, mode: int) -> None:
    """Copy the contents of ``src`` to ``dst``, creating it with ``mode``."""
    with open(src, "rb") as source:
        fd = os.open(dst, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as out:
            shutil.copyfileobj(source, out)


def install(
    release: Release,
    os_info: OSInfo,
    cfg: Config,
    ui: UI,
    use_system_xz: bool,
) -> None:
    """Fetch, verify and unpack the package, then copy it into /opt and /usr."""
    asset_url = select_deb_asset(release, os_info.arch)

    tmp_dir = tempfile.mkdtemp(prefix="mullvad-")
    register_tmp_dir(tmp_dir)
    try:
        deb_path = os.path.join(tmp_dir, "package.deb")
        log.info("Downloading URL:", asset_url)
        if cfg.dry_run:
            log.info("(dry-run) would download", asset_url, "→", deb_path)
        else:
            fetch_file(asset_url, deb_path, cfg)

        asset_name = posixpath.basename(asset_url.rstrip("/"))
        sig_url = _signature_url(release, asset_url)
        log.info("Verifying PGP signature of ", asset_name, " via CDN…")
        if cfg.dry_run:
            log.info("Skipping PGP signature verification (dry-run)")
        else:
            try:
                verify_pgp(deb_path, sig_url)
            except PGPError as exc:
                raise PGPError(
                    f"pgp signature verification failed for {asset_name}: {exc}"
                ) from exc
            log.info("PGP signature OK")

        extract_dir = os.path.join(tmp_dir, "ex")
        if cfg.dry_run:
            log.info("(dry-run) would extract .deb from", deb_path, "to", extract_dir)
        else:
            extract_deb(deb_path, extract_dir, use_system_xz)
            log.info("Extracted .deb to", extract_dir)

        for src, dst in (
            (os.path.join(extract_dir, "opt"), "/opt"),
            (os.path.join(extract_dir, "usr"), "/usr"),
        ):
            if cfg.dry_run:
                log.info("(dry-run) would copy tree from", src, "to", dst)
            else:
                log.info("Installing tree from", src, "→", dst)
                install_tree(src, dst, cfg)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)
        unregister_tmp_dir(tmp_dir)