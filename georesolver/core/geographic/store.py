"""Optional Redis persistence for the verified destination registry."""

from typing import Optional

from redis import Redis

from georesolver.core.config import settings
from georesolver.core.logging import get_logger
from georesolver.models.geographic import VerifiedDestination

logger = get_logger(__name__, module="destination_store")


class DestinationStore:
    """Stores each verified destination as JSON under ``<prefix>destination:<id>``.

    Redis errors are logged and swallowed; the in-memory registry stays
    authoritative for the running process.
    """

    def __init__(self, redis_client: Redis, key_prefix: Optional[str] = None):
        self.redis_client = redis_client
        self.key_prefix = (
            key_prefix if key_prefix is not None else settings.REDIS_KEY_PREFIX
        )

    @classmethod
    def from_url(
        cls, redis_url: Optional[str] = None, key_prefix: Optional[str] = None
    ) -> Optional["DestinationStore"]:
        """Connect to Redis, or return None when no URL is set or it is unreachable."""
        redis_url = redis_url or settings.REDIS_URL
        if not redis_url:
            return None

        try:
            client = Redis.from_url(redis_url, decode_responses=True)
            client.ping()
            logger.info("Redis persistence enabled for verified destinations")
            return cls(client, key_prefix)
        except Exception as e:
            logger.warning(f"Redis connection failed, persistence disabled: {e}")
            return None

    def _key(self, destination_id: str) -> str:
        return f"{self.key_prefix}destination:{destination_id}"

    def save(self, destination: VerifiedDestination) -> None:
        try:
            self.redis_client.set(
                self._key(destination.id), destination.model_dump_json()
            )
        except Exception as e:
            logger.warning(f"Failed to persist destination {destination.id}: {e}")

    def load_all(self) -> list[VerifiedDestination]:
        """Read every stored destination, skipping entries that fail to parse."""
        destinations: list[VerifiedDestination] = []
        try:
            keys = list(self.redis_client.scan_iter(match=self._key("*")))
        except Exception as e:
            logger.warning(f"Failed to list stored destinations: {e}")
            return destinations

        for key in keys:
            try:
                raw = self.redis_client.get(key)
                if raw:
                    destinations.append(VerifiedDestination.model_validate_json(raw))
            except Exception as e:
                logger.warning(f"Skipping unreadable destination {key}: {e}")

        return destinations
