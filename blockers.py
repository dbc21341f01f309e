import binascii
from abc import ABC, abstractmethod
from typing import Iterable, Optional

import httpx

from codec import b64decode_unpadded
from logging_config import get_logger
from models import BlockCheckResult

logger = get_logger(__name__)

class Blocker(ABC):
    """
    Revocation check, consulted only after a license passed the checksum and
    authenticity checks. BAD_LIST means the revocation data could not be
    obtained or understood and must not be treated as allowed.
    """

    @abstractmethod
    def check_block(self, seed: bytes) -> BlockCheckResult:
        """Decide whether ``seed`` has been revoked."""

class NoBlock(Blocker):
    """Blocker that never blocks anything."""

    def check_block(self, seed: bytes) -> BlockCheckResult:
        return BlockCheckResult.OK

class BuiltinBlocklist(Blocker):
    """Blocks seeds hardcoded into the verifying program."""

    def __init__(self, seeds: Iterable[bytes]):
        self._seeds = frozenset(bytes(seed) for seed in seeds)

    @property
    def seeds(self) -> frozenset:
        return self._seeds

    def check_block(self, seed: bytes) -> BlockCheckResult:
        if bytes(seed) in self._seeds:
            return BlockCheckResult.BLOCKED
        return BlockCheckResult.OK

class RemoteFileBlocker(Blocker):
    """
    Fetch a plain text list of revoked seeds, one unpadded base64 seed per line.

    The list can live on any static file host; there is no server logic.
    Every check performs a fresh GET. Failures to fetch or decode the list
    yield BAD_LIST: a partially readable list never lets unlisted seeds pass.
    """

    def __init__(
        self,
        url: str,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None
    ):
        self.url = url
        self.timeout = timeout
        self._client = client

    def _fetch(self) -> bytes:
        if self._client is not None:
            kwargs = {} if self.timeout is None else {"timeout": self.timeout}
            response = self._client.get(self.url, follow_redirects=True, **kwargs)
        else:
            with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                response = client.get(self.url)
        response.raise_for_status()
        return response.content

    def check_block(self, seed: bytes) -> BlockCheckResult:
        try:
            body = self._fetch()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                "Blocklist fetch failed",
                extra={"url": self.url, "error": str(e)},
            )
            return BlockCheckResult.BAD_LIST

        blocked = set()
        for lineno, line in enumerate(body.split(b"\n"), start=1):
            try:
                blocked.add(b64decode_unpadded(line))
            except (binascii.Error, ValueError):
                logger.warning(
                    "Blocklist contains an undecodable line",
                    extra={"url": self.url, "line": lineno},
                )
                return BlockCheckResult.BAD_LIST

        if bytes(seed) in blocked:
            return BlockCheckResult.BLOCKED
        return BlockCheckResult.OK

def blocker_from_settings(settings) -> Blocker:
    """
    Pick the blocker a client build is configured for.

    A remote list takes precedence over built-in seeds; with neither set,
    nothing is blocked.
    """
    if settings.BLOCKLIST_URL:
        return RemoteFileBlocker(settings.BLOCKLIST_URL, timeout=settings.BLOCKLIST_TIMEOUT)
    seeds = settings.blocked_seeds()
    if seeds:
        return BuiltinBlocklist(b64decode_unpadded(s) for s in seeds)
    return NoBlock()
