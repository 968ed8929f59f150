"""
Supabase Storage reader for match JSON documents.

Objects are fetched with the service key from::

    {SUPABASE_URL}/storage/v1/object/{bucket}/{path}

Each path segment is URL-encoded separately so folder separators survive.
"""

import logging
from typing import Dict, Optional
from urllib.parse import quote

import requests

from xgsim.config import Settings
from xgsim.errors import MatchStorageError
from xgsim.services.match_index import strip_trailing_slash

logger = logging.getLogger(__name__)


def build_object_url(base_url: str, bucket: str, object_path: str) -> str:
    segments = "/".join(quote(seg, safe="") for seg in object_path.split("/") if seg)
    return f"{strip_trailing_slash(base_url)}/storage/v1/object/{quote(bucket, safe='')}/{segments}"


class SupabaseMatchStorage:
    """Downloads raw match JSON text from a Storage bucket."""

    def __init__(
        self,
        base_url: str,
        bucket: str,
        service_key: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = strip_trailing_slash(base_url)
        self.bucket = bucket.lstrip("/")
        self.service_key = service_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseMatchStorage":
        return cls(
            settings.supabase_url,
            settings.matches_bucket,
            settings.supabase_service_key,
            timeout=settings.http_timeout_s,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Accept": "application/json",
        }

    def fetch_json(self, path: str) -> str:
        """
        Return the object body as text.

        Raises:
            MatchStorageError: transport failure or non-2xx status.
        """
        url = build_object_url(self.base_url, self.bucket, path.lstrip("/"))

        try:
            response = self.session.get(url, headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Storage request failed for %s: %s", path, e)
            raise MatchStorageError(str(e) or "Unexpected error fetching match JSON") from e

        if not response.ok:
            reason = response.text or ""
            message = f"Storage responded with {response.status_code} {response.reason or ''}".rstrip()
            if reason:
                message = f"{message}: {reason}"
            logger.error("Storage fetch %s failed: %s", path, message)
            raise MatchStorageError(message)

        logger.debug("Fetched %s (%d bytes)", path, len(response.content or b""))
        return response.text
