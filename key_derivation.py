import hashlib
from typing import Sequence

# Truncated SHA-256 is used for both payload chunks and the checksum.
DIGEST_SIZE = hashlib.sha256().digest_size

# Two bytes only: a typo/corruption detector, trivially collidable.
# Authenticity comes from the derived chunks, never from the checksum.
CHECKSUM_LENGTH = 2

def derive_chunk(iv: bytes, seed: bytes, chunk_size: int) -> bytes:
    """
    Derive one payload chunk for a seed.

    The chunk is the SHA-256 digest of ``iv || seed`` truncated to
    ``chunk_size`` bytes, so only a holder of the IV can produce it.
    """
    digest = hashlib.sha256(bytes(iv) + bytes(seed)).digest()
    return digest[:chunk_size]

def compute_checksum(seed: bytes, payload: Sequence[bytes]) -> bytes:
    """
    Short integrity digest over the seed and all payload chunks.
    """
    digest = hashlib.sha256(bytes(seed) + b"".join(payload)).digest()
    return digest[:CHECKSUM_LENGTH]
