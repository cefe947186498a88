import base64
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import cloudinary
import cloudinary.api
import cloudinary.uploader
import httpx
from cloudinary.search import Search
from fastapi import Depends

from collage_api.errors import BlobFormatError, BlobNotFound
from collage_api.security import get_settings
from collage_api.settings import Settings, settings

logger = logging.getLogger(__name__)


class CloudinaryStorage:
    """
    Thin wrapper over the Cloudinary SDK (admin calls) and the public CDN
    (reads of raw JSON blobs).
    """

    def __init__(self, http: httpx.Client):
        self.http = http

    def search(
        self, expression: str, max_results: int, next_cursor: Optional[str] = None
    ) -> Dict[str, Any]:
        query = Search().expression(expression).max_results(max_results)
        if next_cursor:
            query = query.next_cursor(next_cursor)
        return query.execute()

    def upload_json(self, public_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        encoded = base64.b64encode(json.dumps(data).encode("utf-8")).decode("ascii")
        return cloudinary.uploader.upload(
            f"data:application/json;base64,{encoded}",
            resource_type="raw",
            public_id=public_id,
            overwrite=True,
            format="json",
        )

    def delete_raw(self, public_ids: Iterable[str]) -> Dict[str, Any]:
        return cloudinary.api.delete_resources(list(public_ids), resource_type="raw")

    def fetch_json(self, url: str) -> Any:
        response = self.http.get(url)
        if not response.is_success:
            raise BlobNotFound(f"{url} returned {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise BlobFormatError(f"{url} is not valid JSON: {e}") from e


def configure_cloudinary(current_settings: Settings = settings) -> None:
    cloudinary.config(
        cloud_name=current_settings.CLD_CLOUD_NAME,
        api_key=current_settings.CLD_API_KEY,
        api_secret=current_settings.CLD_API_SECRET,
        secure=True,
    )


def get_storage(current_settings: Settings = Depends(get_settings)):
    """
    Configure the SDK and yield a storage handle.
    Called at runtime to avoid import-time configuration.
    """
    configure_cloudinary(current_settings)
    http = httpx.Client(timeout=current_settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True)
    try:
        yield CloudinaryStorage(http)
    finally:
        http.close()


def deleted_ids(result: Dict[str, Any]) -> List[str]:
    """Public ids reported as ``deleted`` by ``delete_resources``."""
    return [
        public_id
        for public_id, state in (result.get("deleted") or {}).items()
        if state == "deleted"
    ]
