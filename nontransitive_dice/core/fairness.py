"""
fairness.py
Implements the commit-reveal protocol used every time the house needs a random value
the player can neither predict nor see altered after the fact.

Flow for one cycle:
    1) commit(bound): draw number in [0, bound) and a fresh 256-bit key, publish
       HMAC-SHA3-256(key, str(number)) as lowercase hex.
    2) the counterparty answers without knowing number.
    3) reveal(): publish key and number with the recomputed digest; a digest that
       differs from the published one is a protocol violation.

Related modules:
- engine.py: Runs one FairRandomGenerator per randomness point of the round.
- persistence/recorder.py: Re-verifies revealed commitments from a transcript.
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from .config import GameConfig

logger = logging.getLogger(__name__)

HASH_ALGORITHM = hashlib.sha3_256

UNCOMMITTED = "UNCOMMITTED"
COMMITTED = "COMMITTED"
REVEALED = "REVEALED"


class RandomnessSourceError(Exception):
    """
    Raised when the cryptographically secure random source is unavailable.
    There is no fallback to a weaker source.
    """
    pass


class ProtocolViolationError(Exception):
    """
    Raised when a revealed (key, number) pair does not reproduce the published digest.
    """
    pass


class ProtocolStateError(RuntimeError):
    """
    Raised when commit/reveal are called out of order.
    """
    pass


@dataclass(frozen=True)
class Commitment:
    """
    Private state of one commitment. Only hmac is published before the reveal.
    Fields:
        number (int): Committed value in [0, bound).
        key (bytes): Secret HMAC key.
        hmac (str): Lowercase hex digest of str(number) under key.
        bound (int): Exclusive upper bound of number.
    """
    number: int
    key: bytes
    hmac: str
    bound: int

    @property
    def key_hex(self) -> str:
        return self.key.hex()


@dataclass(frozen=True)
class Reveal:
    """
    What the committing party discloses after the counterparty has answered.
    """
    number: int
    key: bytes
    hmac: str

    @property
    def key_hex(self) -> str:
        return self.key.hex()


def compute_hmac(key: bytes, number: int) -> str:
    """
    HMAC-SHA3-256 of the decimal string of number, as lowercase hex.
    """
    return hmac.new(key, str(number).encode("utf-8"), HASH_ALGORITHM).hexdigest()


def verify_commitment(key: bytes, number: int, published_hmac: str) -> bool:
    """
    Check a revealed (key, number) against the digest published at commit time.
    """
    return hmac.compare_digest(compute_hmac(key, number), published_hmac.lower())


class RandomSource:
    """
    Cryptographically secure randomness backed by the secrets module.
    Tests substitute a scripted subclass.
    """

    def randbelow(self, bound: int) -> int:
        try:
            return secrets.randbelow(bound)
        except (OSError, NotImplementedError) as e:
            raise RandomnessSourceError(f"Secure random source unavailable: {e}") from e

    def token_bytes(self, size: int) -> bytes:
        try:
            return secrets.token_bytes(size)
        except (OSError, NotImplementedError) as e:
            raise RandomnessSourceError(f"Secure random source unavailable: {e}") from e


class FairRandomGenerator:
    """
    One commit-reveal cycle: UNCOMMITTED -> COMMITTED -> REVEALED, no rollback.
    """

    def __init__(self, source: Optional[RandomSource] = None, config: Optional[GameConfig] = None):
        self.source = source or RandomSource()
        self.config = config or GameConfig()
        self.state = UNCOMMITTED
        self._commitment: Optional[Commitment] = None

    def commit(self, bound: int) -> Commitment:
        """
        Draw a number uniformly in [0, bound) and bind it to a fresh key.
        Args:
            bound (int): Exclusive upper bound, at least 1.
        Returns:
            Commitment: number, key and hmac; the caller publishes only hmac.
        Raises:
            ProtocolStateError: If this generator has already committed.
            RandomnessSourceError: If the secure source fails.
        """
        if self.state != UNCOMMITTED:
            raise ProtocolStateError(f"Cannot commit in state {self.state}")
        if bound < 1:
            raise ValueError("bound must be at least 1")
        number = self.source.randbelow(bound)
        key = self.source.token_bytes(self.config.key_bytes)
        if not 0 <= number < bound:
            raise RandomnessSourceError(f"Random source returned {number} outside [0, {bound})")
        self._commitment = Commitment(number=number, key=key, hmac=compute_hmac(key, number), bound=bound)
        self.state = COMMITTED
        logger.debug("Committed to a value in [0, %d), hmac=%s", bound, self._commitment.hmac)
        return self._commitment

    def reveal(self) -> Reveal:
        """
        Recompute the digest from the stored key and number and disclose them.
        Raises:
            ProtocolStateError: If called before commit or twice.
            ProtocolViolationError: If the recomputed digest differs from the published one.
        """
        if self.state != COMMITTED:
            raise ProtocolStateError(f"Cannot reveal in state {self.state}")
        c = self._commitment
        digest = compute_hmac(c.key, c.number)
        self.state = REVEALED
        if not hmac.compare_digest(digest, c.hmac):
            logger.error("Digest mismatch on reveal: published %s, recomputed %s", c.hmac, digest)
            raise ProtocolViolationError(
                f"Revealed value does not match the published HMAC ({c.hmac} != {digest})"
            )
        logger.debug("Revealed number=%d key=%s", c.number, c.key_hex)
        return Reveal(number=c.number, key=c.key, hmac=digest)
