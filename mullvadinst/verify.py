"""OpenPGP detached signature verification for downloaded packages."""

from __future__ import annotations

import base64
import binascii
import hashlib
import urllib.error
import urllib.request
from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa, utils
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

CODE_SIGNING_KEY_URL = "https://mullvad.net/media/mullvad-code-signing.asc"
HTTP_TIMEOUT = 10.0

_ED25519_OID = bytes.fromhex("2b06010401da470f01")
_HASHES = {
    2: (hashlib.sha1, hashes.SHA1),
    8: (hashlib.sha256, hashes.SHA256),
    9: (hashlib.sha384, hashes.SHA384),
    10: (hashlib.sha512, hashes.SHA512),
    11: (hashlib.sha224, hashes.SHA224),
}


class PGPError(Exception):
    """Armor, key or signature data was invalid or did not verify."""


def _crc24(data: bytes) -> int:
    crc = 0xB704CE
    for byte in data:
        crc ^= byte << 16
        for _ in range(8):
            crc <<= 1
            if crc & 0x1000000:
                crc ^= 0x1864CFB
    return crc & 0xFFFFFF


def dearmor(text: str | bytes) -> tuple[str, bytes]:
    """Decode the first ASCII-armored block; return its type and payload."""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    lines = [line.strip() for line in text.splitlines()]
    try:
        start = next(i for i, line in enumerate(lines) if line.startswith("-----BEGIN PGP "))
    except StopIteration:
        raise PGPError("no armored block found") from None
    block_type = lines[start][len("-----BEGIN "):].rstrip("-")
    body = lines[start + 1:]
    if "" in body and all(":" in line for line in body[: body.index("")]):
        body = body[body.index("") + 1:]
    payload: list[str] = []
    checksum = None
    for line in body:
        if line.startswith("-----END "):
            break
        if line.startswith("=") and len(line) == 5:
            checksum = line[1:]
        elif line:
            payload.append(line)
    else:
        raise PGPError("armor end line missing")
    try:
        data = base64.b64decode("".join(payload), validate=True)
    except binascii.Error as exc:
        raise PGPError(f"bad armor payload: {exc}") from exc
    if checksum is not None:
        try:
            expected = int.from_bytes(base64.b64decode(checksum), "big")
        except binascii.Error as exc:
            raise PGPError("bad armor checksum") from exc
        if expected != _crc24(data):
            raise PGPError("armor checksum mismatch")
    return block_type, data


def _packets(data: bytes):
    pos = 0
    while pos < len(data):
        first = data[pos]
        pos += 1
        if not first & 0x80:
            raise PGPError("invalid packet header")
        if first & 0x40:
            tag = first & 0x3F
            body = bytearray()
            while True:
                b0 = data[pos]
                if b0 < 192:
                    length, pos, partial = b0, pos + 1, False
                elif b0 < 224:
                    length = ((b0 - 192) << 8) + data[pos + 1] + 192
                    pos, partial = pos + 2, False
                elif b0 == 255:
                    length = int.from_bytes(data[pos + 1:pos + 5], "big")
                    pos, partial = pos + 5, False
                else:
                    length, pos, partial = 1 << (b0 & 0x1F), pos + 1, True
                body += data[pos:pos + length]
                pos += length
                if not partial:
                    break
            yield tag, bytes(body)
        else:
            tag = (first >> 2) & 0x0F
            kind = first & 3
            if kind == 3:
                yield tag, data[pos:]
                return
            size = (1, 2, 4)[kind]
            length = int.from_bytes(data[pos:pos + size], "big")
            pos += size
            yield tag, data[pos:pos + length]
            pos += length


def _mpi(data: bytes, pos: int) -> tuple[bytes, int]:
    bits = int.from_bytes(data[pos:pos + 2], "big")
    size = (bits + 7) // 8
    return data[pos + 2:pos + 2 + size], pos + 2 + size


@dataclass
class _Key:
    fingerprint: bytes
    algo: int
    material: object

    @property
    def key_id(self) -> bytes:
        return self.fingerprint[-8:]


def _parse_key(body: bytes) -> _Key | None:
    if not body or body[0] != 4:
        return None
    fingerprint = hashlib.sha1(b"\x99" + len(body).to_bytes(2, "big") + body).digest()
    algo = body[5]
    if algo in (1, 3):
        n, pos = _mpi(body, 6)
        e, _ = _mpi(body, pos)
        key = rsa.RSAPublicNumbers(int.from_bytes(e, "big"), int.from_bytes(n, "big")).public_key()
        return _Key(fingerprint, algo, key)
    if algo == 22:
        oid_len = body[6]
        oid = body[7:7 + oid_len]
        point, _ = _mpi(body, 7 + oid_len)
        if oid != _ED25519_OID or len(point) != 33 or point[0] != 0x40:
            return None
        return _Key(fingerprint, algo, Ed25519PublicKey.from_public_bytes(point[1:]))
    return None


def _subpackets(data: bytes):
    pos = 0
    while pos < len(data):
        b0 = data[pos]
        if b0 < 192:
            length, pos = b0, pos + 1
        elif b0 < 255:
            length, pos = ((b0 - 192) << 8) + data[pos + 1] + 192, pos + 2
        else:
            length, pos = int.from_bytes(data[pos + 1:pos + 5], "big"), pos + 5
        yield data[pos] & 0x7F, data[pos + 1:pos + length]
        pos += length


def _canonical_text(data: bytes) -> bytes:
    return data.replace(b"\r\n", b"\n").replace(b"\n", b"\r\n")


def check_detached_signature(key_armor: str | bytes, data: bytes, sig_armor: str | bytes) -> str:
    """Verify ``data`` against a detached signature; return the signer key id in hex."""
    _, key_bytes = dearmor(key_armor)
    keys = [k for tag, body in _packets(key_bytes) if tag in (6, 14) for k in [_parse_key(body)] if k]
    if not keys:
        raise PGPError("no usable public key")
    _, sig_bytes = dearmor(sig_armor)
    sig = next((body for tag, body in _packets(sig_bytes) if tag == 2), None)
    if sig is None:
        raise PGPError("no signature packet")
    if sig[0] != 4:
        raise PGPError(f"unsupported signature version {sig[0]}")
    sig_type, pub_algo, hash_algo = sig[1], sig[2], sig[3]
    if sig_type not in (0, 1):
        raise PGPError(f"unexpected signature type {sig_type}")
    if hash_algo not in _HASHES:
        raise PGPError(f"unsupported hash algorithm {hash_algo}")
    hashed_len = int.from_bytes(sig[4:6], "big")
    head = sig[:6 + hashed_len]
    pos = 6 + hashed_len
    unhashed_len = int.from_bytes(sig[pos:pos + 2], "big")
    unhashed = sig[pos + 2:pos + 2 + unhashed_len]
    pos += 2 + unhashed_len
    left16 = sig[pos:pos + 2]
    pos += 2

    issuers: set[bytes] = set()
    for kind, value in [*_subpackets(head[6:]), *_subpackets(unhashed)]:
        if kind == 16:
            issuers.add(value)
        elif kind == 33 and len(value) >= 21:
            issuers.add(value[1:][-8:])
    candidates = [k for k in keys if not issuers or k.key_id in issuers]
    candidates = [k for k in candidates if k.algo == pub_algo or {k.algo, pub_algo} <= {1, 3}]
    if not candidates:
        raise PGPError("signature made by unknown key")

    message = _canonical_text(data) if sig_type == 1 else data
    message += head + b"\x04\xff" + len(head).to_bytes(4, "big")
    hash_fn, hash_cls = _HASHES[hash_algo]
    digest = hash_fn(message).digest()
    if digest[:2] != left16:
        raise PGPError("signature invalid: hash tag mismatch")

    for key in candidates:
        try:
            if key.algo == 22:
                r, p = _mpi(sig, pos)
                s, _ = _mpi(sig, p)
                raw = r.rjust(32, b"\x00") + s.rjust(32, b"\x00")
                key.material.verify(raw, digest)
            else:
                s, _ = _mpi(sig, pos)
                size = (key.material.key_size + 7) // 8
                key.material.verify(
                    s.rjust(size, b"\x00"), digest, padding.PKCS1v15(), utils.Prehashed(hash_cls())
                )
            return key.key_id.hex().upper()
        except InvalidSignature:
            continue
    raise PGPError("signature invalid")


def _fetch(url: str, what: str) -> bytes:
    try:
        with urllib.request.urlopen(url, timeout=HTTP_TIMEOUT) as resp:
            status = getattr(resp, "status", 200)
            if status != 200:
                raise PGPError(f"{what} status {status}")
            return resp.read()
    except urllib.error.HTTPError as exc:
        raise PGPError(f"{what} status {exc.code}") from exc
    except OSError as exc:
        raise PGPError(f"get {what}: {exc}") from exc


def verify_pgp(file: str, sig_url: str) -> None:
    """Check ``file`` against the signature at ``sig_url`` using the signing key."""
    key_armor = _fetch(CODE_SIGNING_KEY_URL, "key")
    sig_armor = _fetch(sig_url, "sig")
    block_type, _ = dearmor(sig_armor)
    if block_type != "PGP SIGNATURE":
        raise PGPError(f'unexpected block "{block_type}"')
    try:
        with open(file, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise PGPError(f"open file: {exc}") from exc
    check_detached_signature(key_armor, data, sig_armor)