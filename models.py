from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from key_derivation import CHECKSUM_LENGTH, DIGEST_SIZE

class LicenseStructParameters(BaseModel):
    """
    Layout of a license. Must be identical for the generator and the checker.
    """
    model_config = ConfigDict(frozen=True)

    seed_length: int = Field(default=6, gt=0)  # bytes
    payload_length: int = Field(default=10, gt=0)  # chunks
    chunk_size: int = Field(default=2, gt=0, le=DIGEST_SIZE)  # bytes per chunk

    @property
    def payload_bytes(self) -> int:
        return self.payload_length * self.chunk_size

    @property
    def license_length(self) -> int:
        return self.seed_length + self.payload_bytes + CHECKSUM_LENGTH

class License(BaseModel):
    model_config = ConfigDict(frozen=True)

    seed: bytes
    payload: Tuple[bytes, ...]
    checksum: bytes

class LicenseCheckInfo(BaseModel):
    """
    What a client build knows: one IV and the payload position it signs.
    """
    model_config = ConfigDict(frozen=True)

    known_iv: bytes
    iv_index: int

class BlockCheckResult(str, Enum):
    OK = "ok"
    BLOCKED = "blocked"  # seed intentionally revoked
    BAD_LIST = "bad_list"  # revocation data unavailable or unparsable

class LicenseVerifyResult(str, Enum):
    LICENSE_GOOD = "license_good"
    CHECKSUM_FAILED = "checksum_failed"
    INVALID_IV_INDEX = "invalid_iv_index"
    LICENSE_FORGED = "license_forged"
    LICENSE_BLOCKED = "license_blocked"
    MALFORMED = "malformed"

class LicenseVerification(BaseModel):
    model_config = ConfigDict(frozen=True)

    result: LicenseVerifyResult
    block_reason: Optional[BlockCheckResult] = None
    message: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.result == LicenseVerifyResult.LICENSE_GOOD
