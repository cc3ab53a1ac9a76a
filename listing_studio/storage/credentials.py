import logging
from typing import Any, Optional

from pydantic import BaseModel

from listing_studio.config import settings
from listing_studio.errors import ValidationError
from listing_studio.storage.client_storage import ClientStorage

logger = logging.getLogger("listing.credentials")


class SaveResult(BaseModel):
    ok: bool


def validate_credential(raw: Any, min_length: int = settings.CREDENTIAL_MIN_LENGTH) -> str:
    """
    Check an API key and return it trimmed.

    Raises:
        ValidationError: Not a string, blank, or shorter than min_length
    """
    if not isinstance(raw, str):
        raise ValidationError("Invalid API key")
    key = raw.strip()
    if len(key) < min_length:
        raise ValidationError("Invalid API key")
    return key


class CredentialStore:
    """The remove.bg API key, kept in client storage under a fixed key."""

    def __init__(
        self,
        storage: ClientStorage,
        key: str = settings.CREDENTIAL_STORAGE_KEY,
        min_length: int = settings.CREDENTIAL_MIN_LENGTH,
    ):
        self.storage = storage
        self.key = key
        self.min_length = min_length

    async def save(self, raw: Any) -> SaveResult:
        try:
            value = validate_credential(raw, self.min_length)
        except ValidationError:
            logger.info("Rejected API key that failed validation")
            return SaveResult(ok=False)

        # Storage failures propagate to the caller
        await self.storage.set_async(self.key, value)
        logger.info("API key saved")
        return SaveResult(ok=True)

    async def load(self) -> Optional[str]:
        return await self.storage.get_async(self.key)
