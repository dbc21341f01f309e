import base64
import secrets
from typing import Any, Dict, Sequence, Tuple

from errors import InvalidSeedLengthError
from key_derivation import compute_checksum, derive_chunk
from logging_config import get_logger
from models import License, LicenseCheckInfo, LicenseStructParameters

logger = get_logger(__name__)

# IV lengths are drawn from [IV_MIN_LENGTH, IV_MAX_LENGTH)
IV_MIN_LENGTH = 10
IV_MAX_LENGTH = 16

def random_iv() -> bytes:
    length = IV_MIN_LENGTH + secrets.randbelow(IV_MAX_LENGTH - IV_MIN_LENGTH)
    return secrets.token_bytes(length)

class AdminGenerator:
    """
    Issuer-side license factory holding one secret IV per payload chunk.

    Create it once per product and persist it (see ``database.save_generator``);
    new IVs invalidate every license issued before.
    """

    def __init__(self, parameters: LicenseStructParameters, ivs: Sequence[bytes]):
        ivs = tuple(bytes(iv) for iv in ivs)
        if len(ivs) != parameters.payload_length:
            raise ValueError(
                f"expected {parameters.payload_length} IVs, got {len(ivs)}"
            )
        if any(len(iv) == 0 for iv in ivs):
            raise ValueError("IVs must not be empty")

        self.parameters = parameters
        self._ivs = ivs

    @classmethod
    def new_with_random_ivs(cls, parameters: LicenseStructParameters) -> "AdminGenerator":
        """
        Create a generator with fresh IVs from the OS CSPRNG.
        """
        ivs = [random_iv() for _ in range(parameters.payload_length)]
        logger.info(
            "Generated new IV set",
            extra={"payload_length": parameters.payload_length},
        )
        return cls(parameters, ivs)

    @property
    def ivs(self) -> Tuple[bytes, ...]:
        return self._ivs

    def generate_license(self, seed: bytes) -> License:
        """
        Create a valid license for ``seed``.

        Deterministic: the same seed always yields the same license, so a lost
        key can be reissued without storing it.
        """
        seed = bytes(seed)
        if len(seed) != self.parameters.seed_length:
            raise InvalidSeedLengthError(self.parameters.seed_length, len(seed))

        payload = tuple(
            derive_chunk(iv, seed, self.parameters.chunk_size) for iv in self._ivs
        )
        return License(
            seed=seed,
            payload=payload,
            checksum=compute_checksum(seed, payload),
        )

    def check_info(self, iv_index: int) -> LicenseCheckInfo:
        """
        Verification material for a client build: one IV and its position.
        """
        if not 0 <= iv_index < len(self._ivs):
            raise IndexError(f"IV index {iv_index} out of range")
        return LicenseCheckInfo(known_iv=bytes(self._ivs[iv_index]), iv_index=iv_index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameters": self.parameters.model_dump(),
            "ivs": [base64.b64encode(iv).decode("ascii") for iv in self._ivs],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdminGenerator":
        parameters = LicenseStructParameters(**data["parameters"])
        ivs = [base64.b64decode(iv, validate=True) for iv in data["ivs"]]
        return cls(parameters, ivs)

    def __repr__(self) -> str:
        # IVs are secret; keep them out of reprs and tracebacks
        return f"AdminGenerator(parameters={self.parameters!r}, ivs=<{len(self._ivs)} hidden>)"
