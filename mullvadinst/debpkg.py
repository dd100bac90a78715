"""Extraction of the data archive inside a Debian package."""

from __future__ import annotations

import io
import lzma
import os
import shutil
import subprocess
import tarfile
from typing import BinaryIO

AR_MAGIC_SIZE = 8
AR_HEADER_SIZE = 60
AR_NAME_FIELD = 16
AR_SIZE_OFFSET = 48
AR_SIZE_FIELD = 10
DEFAULT_DIR_PERM = 0o755
DATA_MEMBER = "data.tar.xz"


class DebError(Exception):
    """Base class for package extraction failures."""


class BadInputError(DebError):
    """An input path was empty."""


class PathOutsideError(DebError):
    """An archive entry would land outside the destination."""


class BadLinkError(DebError):
    """A symlink target climbs out of the tree."""


class XZNotFoundError(DebError):
    """The system xz utility could not be started."""


class ArNotFoundError(DebError):
    """The system ar utility could not be started."""


def read_ar_member(stream: BinaryIO, name: str) -> io.BytesIO:
    """Scan ar headers from the current position and return the named member."""
    while True:
        header = stream.read(AR_HEADER_SIZE)
        if len(header) != AR_HEADER_SIZE:
            raise DebError(f"read ar header: unexpected end of archive looking for {name}")
        member = header[:AR_NAME_FIELD].decode("latin-1").rstrip(" /")
        size_text = header[AR_SIZE_OFFSET:AR_SIZE_OFFSET + AR_SIZE_FIELD].decode("latin-1").strip()
        try:
            size = int(size_text, 10)
        except ValueError as exc:
            raise DebError(f"parse ar size: {size_text!r}") from exc
        if member == name:
            return io.BytesIO(stream.read(size))
        stream.seek(size + (size % 2), os.SEEK_CUR)


def _check_inputs(deb_path: str, dest: str) -> None:
    if not str(deb_path).strip() or not str(dest).strip():
        raise BadInputError("invalid input path")


def extract_deb(deb_path: str, dest: str, use_system: bool) -> None:
    """Unpack ``data.tar.xz`` of ``deb_path`` into ``dest``."""
    _check_inputs(deb_path, dest)
    abs_dest = os.path.abspath(dest)
    if use_system:
        _extract_with_system_tools(str(deb_path), abs_dest)
        return
    try:
        with open(deb_path, "rb") as deb:
            deb.seek(AR_MAGIC_SIZE)
            data = read_ar_member(deb, DATA_MEMBER)
    except OSError as exc:
        raise DebError(f"open .deb: {exc}") from exc
    try:
        with lzma.LZMAFile(data) as xz, tarfile.open(fileobj=xz, mode="r|") as tar:
            _extract_all(tar, abs_dest)
    except (lzma.LZMAError, tarfile.TarError) as exc:
        raise DebError(f"xz reader: {exc}") from exc


def _extract_with_system_tools(deb_path: str, dest: str) -> None:
    try:
        ar = subprocess.Popen(
            ["ar", "p", deb_path, DATA_MEMBER],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as exc:
        raise ArNotFoundError(f"system ar not found: {exc}") from exc
    try:
        xz = subprocess.Popen(
            ["xz", "-d", "-c"],
            stdin=ar.stdout,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as exc:
        ar.kill()
        ar.wait()
        raise XZNotFoundError(f"system xz not found: {exc}") from exc
    assert ar.stdout is not None and xz.stdout is not None
    ar.stdout.close()
    try:
        with tarfile.open(fileobj=xz.stdout, mode="r|") as tar:
            _extract_all(tar, dest)
    except tarfile.TarError as exc:
        raise DebError(f"tar next: {exc}") from exc
    finally:
        xz.stdout.close()
        xz.wait()
        ar.wait()


def _extract_all(tar: tarfile.TarFile, dest: str) -> None:
    for member in tar:
        _write_entry(tar, member, dest)


def _write_entry(tar: tarfile.TarFile, member: tarfile.TarInfo, dest: str) -> None:
    clean = os.path.normpath(member.name)
    if clean == ".":
        return
    if clean.startswith(".." + os.sep):
        raise PathOutsideError(f"path outside of destination: {member.name}")
    full_path = os.path.normpath(os.path.join(dest, clean.lstrip(os.sep)))
    if os.path.relpath(full_path, dest).startswith(".."):
        raise PathOutsideError(f"path outside of destination: {member.name}")

    if member.isdir():
        os.makedirs(full_path, mode=member.mode & 0o7777, exist_ok=True)
    elif member.issym():
        target = member.linkname
        if (".." + os.sep) in target:
            raise BadLinkError(f"invalid symlink target: {member.name} → {member.linkname}")
        if os.path.isabs(target):
            target = os.path.join(dest, target.lstrip(os.sep))
        os.makedirs(os.path.dirname(full_path), mode=DEFAULT_DIR_PERM, exist_ok=True)
        os.symlink(target, full_path)
    elif member.isreg() or member.islnk() or member.ischr() or member.isblk() or member.isfifo():
        os.makedirs(os.path.dirname(full_path), mode=DEFAULT_DIR_PERM, exist_ok=True)
        fd = os.open(full_path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, member.mode & 0o7777)
        with os.fdopen(fd, "wb") as out:
            if member.isreg():
                source = tar.extractfile(member)
                if source is not None:
                    shutil.copyfileobj(source, out)