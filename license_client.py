import hmac
from typing import Optional

from blockers import Blocker, NoBlock
from codec import from_human_readable
from errors import HumanReadableParseError
from key_derivation import compute_checksum, derive_chunk
from logging_config import get_logger
from models import (
    BlockCheckResult,
    License,
    LicenseCheckInfo,
    LicenseStructParameters,
    LicenseVerification,
    LicenseVerifyResult
)

logger = get_logger(__name__)

def verify_checksum(license: License) -> bool:
    """
    Check only the checksum, ignoring whether the key chunks are genuine.

    A passing checksum is NOT proof of authenticity: two bytes collide easily.
    """
    expected = compute_checksum(license.seed, license.payload)
    return hmac.compare_digest(expected, license.checksum)

def verify_license(
    license: License,
    info: LicenseCheckInfo,
    blocker: Blocker
) -> LicenseVerification:
    """
    Validate a parsed license against the one IV this client knows.

    Checks run in order and the first failure decides the result:
    checksum, IV index, derived chunk, then the blocker.
    """
    if not verify_checksum(license):
        return LicenseVerification(result=LicenseVerifyResult.CHECKSUM_FAILED)

    if not 0 <= info.iv_index < len(license.payload):
        logger.error(
            "IV index out of range, issuer and client disagree on the license layout",
            extra={"iv_index": info.iv_index, "payload_length": len(license.payload)}
        )
        return LicenseVerification(result=LicenseVerifyResult.INVALID_IV_INDEX)

    chunk = license.payload[info.iv_index]
    expected = derive_chunk(info.known_iv, license.seed, len(chunk))
    if not hmac.compare_digest(expected, chunk):
        return LicenseVerification(result=LicenseVerifyResult.LICENSE_FORGED)

    block = blocker.check_block(license.seed)
    if block != BlockCheckResult.OK:
        return LicenseVerification(
            result=LicenseVerifyResult.LICENSE_BLOCKED,
            block_reason=block
        )

    return LicenseVerification(result=LicenseVerifyResult.LICENSE_GOOD)

class LicenseVerifier:
    """
    Everything a client build needs to check keys typed in by its users.
    """

    def __init__(
        self,
        parameters: LicenseStructParameters,
        info: LicenseCheckInfo,
        blocker: Optional[Blocker] = None
    ):
        self.parameters = parameters
        self.info = info
        self.blocker = blocker if blocker is not None else NoBlock()

    def verify(self, license: License) -> LicenseVerification:
        return verify_license(license, self.info, self.blocker)

    def verify_key(self, key: str) -> LicenseVerification:
        """
        Parse and verify a human readable key.

        Unparsable input is reported as MALFORMED rather than raised.
        """
        try:
            license = from_human_readable(key.strip(), self.parameters)
        except HumanReadableParseError as e:
            return LicenseVerification(
                result=LicenseVerifyResult.MALFORMED,
                message=str(e)
            )

        verification = self.verify(license)
        if not verification.valid:
            logger.info(
                "License rejected",
                extra={
                    "result": verification.result.value,
                    "block_reason": verification.block_reason.value if verification.block_reason else None
                }
            )
        return verification
