import base64
import hashlib
from unittest import mock

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from mullvadinst.verify import PGPError, check_detached_signature, dearmor, verify_pgp


def _mpi(value: int) -> bytes:
    return value.bit_length().to_bytes(2, "big") + value.to_bytes((value.bit_length() + 7) // 8, "big")


def _packet(tag: int, body: bytes) -> bytes:
    return bytes([0xC0 | tag, 255]) + len(body).to_bytes(4, "big") + body


def _armor(kind: str, data: bytes) -> str:
    return f"-----BEGIN PGP {kind}-----\nComment: test\n\n{base64.b64encode(data).decode()}\n-----END PGP {kind}-----\n"


@pytest.fixture(scope="module")
def signer():
    priv = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    nums = priv.public_key().public_numbers()
    key_body = b"\x04" + (1700000000).to_bytes(4, "big") + b"\x01" + _mpi(nums.n) + _mpi(nums.e)
    fp = hashlib.sha1(b"\x99" + len(key_body).to_bytes(2, "big") + key_body).digest()
    key_armor = _armor("PUBLIC KEY BLOCK", _packet(6, key_body))

    def sign(data: bytes) -> str:
        hashed = b"\x05\x02" + (1700000000).to_bytes(4, "big") + b"\x16\x21\x04" + fp
        head = bytes([4, 0, 1, 8]) + len(hashed).to_bytes(2, "big") + hashed
        message = data + head + b"\x04\xff" + len(head).to_bytes(4, "big")
        sig = priv.sign(message, padding.PKCS1v15(), hashes.SHA256())
        unhashed = b"\x09\x10" + fp[-8:]
        body = (
            head + len(unhashed).to_bytes(2, "big") + unhashed
            + hashlib.sha256(message).digest()[:2] + _mpi(int.from_bytes(sig, "big"))
        )
        return _armor("SIGNATURE", _packet(2, body))

    return key_armor, sign, fp


def test_dearmor_round_trip():
    kind, data = dearmor(_armor("SIGNATURE", b"\x01\x02payload"))
    assert kind == "PGP SIGNATURE"
    assert data == b"\x01\x02payload"


def test_dearmor_checksum_mismatch():
    text = "-----BEGIN PGP SIGNATURE-----\n\nAQID\n=AAAA\n-----END PGP SIGNATURE-----\n"
    with pytest.raises(PGPError):
        dearmor(text)


def test_dearmor_without_block():
    with pytest.raises(PGPError):
        dearmor("nothing here")


def test_valid_signature_returns_key_id(signer):
    key_armor, sign, fp = signer
    assert check_detached_signature(key_armor, b"package bytes", sign(b"package bytes")) == fp[-8:].hex().upper()


def test_tampered_data_rejected(signer):
    key_armor, sign, _ = signer
    with pytest.raises(PGPError):
        check_detached_signature(key_armor, b"package bytez", sign(b"package bytes"))


class _Resp:
    def __init__(self, body, status=200):
        self.body, self.status = body, status

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _requested_url(call):
    target = call.args[0] if call.args else call.kwargs.get("url")
    return getattr(target, "full_url", target)


def test_verify_pgp_fetches_key_and_signature(signer, tmp_path):
    key_armor, sign, _ = signer
    pkg = tmp_path / "p.deb"
    pkg.write_bytes(b"deb contents")
    responses = [_Resp(key_armor.encode()), _Resp(sign(b"deb contents").encode())]
    sig_url = "https://cdn.example.com/p.deb.asc"
    with mock.patch("urllib.request.urlopen", side_effect=responses) as opener:
        result = verify_pgp(str(pkg), sig_url)
    assert result is None
    assert opener.call_count == 2
    assert _requested_url(opener.call_args_list[1]) == sig_url
    assert _requested_url(opener.call_args_list[0]) != sig_url


def test_verify_pgp_rejects_modified_file(signer, tmp_path):
    key_armor, sign, _ = signer
    pkg = tmp_path / "p.deb"
    pkg.write_bytes(b"deb contentz")
    responses = [_Resp(key_armor.encode()), _Resp(sign(b"deb contents").encode())]
    with mock.patch("urllib.request.urlopen", side_effect=responses):
        with pytest.raises(PGPError):
            verify_pgp(str(pkg), "https://cdn.example.com/p.deb.asc")


def test_verify_pgp_bad_status(tmp_path):
    with mock.patch("urllib.request.urlopen", return_value=_Resp(b"", status=404)):
        with pytest.raises(PGPError, match="404"):
            verify_pgp(str(tmp_path / "x"), "https://cdn.example.com/x.asc")