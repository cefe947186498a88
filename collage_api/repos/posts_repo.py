import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterator, List, Optional, Tuple

from collage_api.db.cloudinary import deleted_ids
from collage_api.errors import BlobFormatError, BlobNotFound, StorageError

logger = logging.getLogger(__name__)


class CloudinaryPostsRepo:
    def __init__(
        self,
        storage,
        prefix: str,
        delivery_url: str,
        page_size: int = 100,
        concurrency: int = 8,
    ):
        self.storage = storage
        self.prefix = prefix.strip("/")
        self.delivery_url = delivery_url.rstrip("/")
        self.page_size = page_size
        self.concurrency = max(1, concurrency)
        self._data_id_re = re.compile(
            rf"^{re.escape(self.prefix)}/([^/]+)/data(\.json)?$"
        )

    def data_public_id(self, slug: str) -> str:
        return f"{self.prefix}/{slug}/data"

    def data_url(self, slug: str) -> str:
        return f"{self.delivery_url}/{self.data_public_id(slug)}.json"

    def iter_data_resources(self) -> Iterator[dict]:
        expression = f"resource_type:raw AND public_id:{self.prefix}/*"
        cursor = None
        while True:
            page = self.storage.search(expression, self.page_size, cursor)
            yield from page.get("resources") or []
            cursor = page.get("next_cursor")
            if not cursor:
                break

    def find_data_resources(self) -> Dict[str, dict]:
        """
        Map slug -> the one storage resource that represents it.

        ``<prefix>/<slug>/data`` and ``<prefix>/<slug>/data.json`` may both
        exist for the same post; the highest version wins, then the
        un-suffixed id.
        """
        found: Dict[str, dict] = {}
        for resource in self.iter_data_resources():
            match = self._data_id_re.match(resource.get("public_id") or "")
            if not match:
                continue
            slug = match.group(1)
            current = found.get(slug)
            if current is None or _rank(resource) > _rank(current):
                found[slug] = resource
        return found

    def resource_url(self, resource: dict) -> str:
        url = resource.get("secure_url") or resource.get("url")
        if url:
            return url
        public_id = resource["public_id"]
        if not public_id.endswith(".json"):
            public_id = f"{public_id}.json"
        return f"{self.delivery_url}/{public_id}"

    def load_records(self) -> List[Tuple[str, dict]]:
        resources = sorted(self.find_data_resources().items())
        if not resources:
            return []

        workers = min(self.concurrency, len(resources))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            fetched = pool.map(lambda item: self._load_one(*item), resources)
            return [record for record in fetched if record is not None]

    def _load_one(self, slug: str, resource: dict) -> Optional[Tuple[str, dict]]:
        url = self.resource_url(resource)
        try:
            data = self.storage.fetch_json(url)
        except (BlobNotFound, BlobFormatError) as e:
            logger.warning(f"Skipping post {slug}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Skipping post {slug}: data is not an object")
            return None
        return slug, data

    def get_record(self, slug: str) -> Optional[dict]:
        try:
            data = self.storage.fetch_json(self.data_url(slug))
        except BlobNotFound:
            return None
        if not isinstance(data, dict):
            raise BlobFormatError(f"data for {slug} is not an object")
        return data

    def save_record(self, slug: str, record: Dict[str, Any]) -> None:
        try:
            self.storage.upload_json(self.data_public_id(slug), record)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(_sdk_message(e)) from e

    def delete_record(self, slug: str) -> List[str]:
        public_id = self.data_public_id(slug)
        try:
            result = self.storage.delete_raw([public_id, f"{public_id}.json"])
        except Exception as e:
            raise StorageError(_sdk_message(e)) from e
        return deleted_ids(result)


def _rank(resource: dict) -> Tuple[int, int]:
    try:
        version = int(resource.get("version") or 0)
    except (TypeError, ValueError):
        version = 0
    canonical = 0 if (resource.get("public_id") or "").endswith(".json") else 1
    return version, canonical


def _sdk_message(error: Exception) -> str:
    return str(error) or error.__class__.__name__
