from typing import List, Optional

from pydantic_settings import BaseSettings

from models import LicenseStructParameters

class Settings(BaseSettings):
    # License Structure (must match between issuer and client)
    SEED_LENGTH: int = 6
    PAYLOAD_LENGTH: int = 10
    CHUNK_SIZE: int = 2

    # Issuer IV Store
    DATABASE_URL: str = "sqlite:///./license_ivs.db"
    PRODUCT_NAME: str = "default"

    # Revocation
    BLOCKLIST_URL: str = ""  # Remote list disabled when empty
    BLOCKLIST_TIMEOUT: Optional[float] = None  # None = wait for the server
    BLOCKED_SEEDS: str = ""  # Comma separated base64 seeds baked into the client

    # Logging
    LOG_LEVEL: str = "INFO"

    APP_VERSION: str = "1.0.0"

    class Config:
        env_file = ".env"

    def parameters(self) -> LicenseStructParameters:
        """
        Build the license layout described by this configuration.
        """
        return LicenseStructParameters(
            seed_length=self.SEED_LENGTH,
            payload_length=self.PAYLOAD_LENGTH,
            chunk_size=self.CHUNK_SIZE
        )

    def blocked_seeds(self) -> List[str]:
        return [s.strip() for s in self.BLOCKED_SEEDS.split(",") if s.strip()]

settings = Settings()
