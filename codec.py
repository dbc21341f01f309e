import base64
import binascii

from errors import Base64DecodeError, InvalidLengthError, LicenseBytesError
from key_derivation import CHECKSUM_LENGTH
from models import License, LicenseStructParameters

SEPARATOR = "-"
GROUP_SIZE = 4

def b64encode_unpadded(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")

def b64decode_unpadded(text) -> bytes:
    """
    Strictly decode unpadded standard base64.

    Padding, characters outside the alphabet, impossible lengths and
    non-zero trailing bits are all rejected with ``binascii.Error``.
    """
    if isinstance(text, str):
        try:
            raw = text.encode("ascii")
        except UnicodeEncodeError as e:
            raise binascii.Error("non-ascii character in base64 input") from e
    else:
        raw = bytes(text)
    if b"=" in raw:
        raise binascii.Error("padding is not allowed")
    if len(raw) % 4 == 1:
        raise binascii.Error(f"invalid base64 length {len(raw)}")
    decoded = base64.b64decode(raw + b"=" * (-len(raw) % 4), validate=True)
    if base64.b64encode(decoded).rstrip(b"=") != raw:
        raise binascii.Error("non-canonical trailing bits")
    return decoded

def parse_bytes(data: bytes, params: LicenseStructParameters) -> License:
    """
    Split raw license bytes into seed, payload chunks and checksum.

    Only the total length is checked; whether the license is genuine is for
    the verifier to decide.
    """
    data = bytes(data)
    if len(data) != params.license_length:
        raise InvalidLengthError(params.license_length, len(data))

    payload_start = params.seed_length
    payload_end = payload_start + params.payload_bytes
    payload = tuple(
        data[offset:offset + params.chunk_size]
        for offset in range(payload_start, payload_end, params.chunk_size)
    )
    return License(
        seed=data[:payload_start],
        payload=payload,
        checksum=data[len(data) - CHECKSUM_LENGTH:],
    )

def to_bytes(license: License) -> bytes:
    return license.seed + b"".join(license.payload) + license.checksum

def to_human_readable(license: License) -> str:
    """
    Unpadded base64 of ``[seed][chunk_0]...[chunk_n-1][checksum]`` with a dash
    after every fourth character, e.g. ``BWQq-RQNa-kDp6-mJn8``.
    """
    encoded = b64encode_unpadded(to_bytes(license))
    groups = [encoded[i:i + GROUP_SIZE] for i in range(0, len(encoded), GROUP_SIZE)]
    return SEPARATOR.join(groups)

def from_human_readable(text: str, params: LicenseStructParameters) -> License:
    """
    Parse a dashed key as typed or pasted by a user.

    Raises ``Base64DecodeError`` when the text is not unpadded base64 and
    ``LicenseBytesError`` when the decoded bytes have the wrong length.
    """
    stripped = text.replace(SEPARATOR, "")
    try:
        decoded = b64decode_unpadded(stripped)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeError(f"license is not valid base64: {e}") from e

    try:
        return parse_bytes(decoded, params)
    except InvalidLengthError as e:
        raise LicenseBytesError(str(e)) from e
