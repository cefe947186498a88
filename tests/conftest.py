import time

from jose import jwt

from collage_api.errors import BlobFormatError, BlobNotFound
from collage_api.schemas.post import PostRecord

TEST_SECRET = "test-secret"


def make_token(secret: str = TEST_SECRET, **overrides) -> str:
    payload = {"role": "admin", "exp": int(time.time()) + 3600}
    payload.update(overrides)
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class FakeStorage:
    """
    Minimal in-memory Cloudinary stand-in.
    ``pages`` is a list of search results returned in order; ``blobs`` maps
    delivery URLs to JSON data (an exception instance is raised instead).
    """

    def __init__(self, pages=None, blobs=None, delete_result=None):
        self.pages = list(pages or [])
        self.blobs = dict(blobs or {})
        self.delete_result = delete_result or {"deleted": {}}
        self.searches = []
        self.uploads = []
        self.deletes = []
        self.fetched = []

    def search(self, expression, max_results, next_cursor=None):
        self.searches.append((expression, max_results, next_cursor))
        if not self.pages:
            return {"resources": []}
        return self.pages.pop(0)

    def upload_json(self, public_id, data):
        self.uploads.append((public_id, data))
        return {"public_id": public_id}

    def delete_raw(self, public_ids):
        self.deletes.append(list(public_ids))
        return self.delete_result

    def fetch_json(self, url):
        self.fetched.append(url)
        if url not in self.blobs:
            raise BlobNotFound(f"{url} returned 404")
        value = self.blobs[url]
        if isinstance(value, Exception):
            raise value
        return value


class FakeRepo:
    """
    Minimal repo stand-in used in service tests.
    """

    def __init__(self, records=None, stored=None, deleted=None):
        self.records = list(records or [])
        self.stored = dict(stored or {})
        self.deleted = deleted if deleted is not None else []
        self.saved = []
        self.delete_calls = []

    def load_records(self):
        return list(self.records)

    def get_record(self, slug):
        value = self.stored.get(slug)
        if value == "corrupt":
            raise BlobFormatError(f"{slug} is not valid JSON")
        return dict(value) if value is not None else None

    def save_record(self, slug, record):
        self.saved.append((slug, record))

    def delete_record(self, slug):
        self.delete_calls.append(slug)
        return list(self.deleted)


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    """

    def __init__(self, list_posts_return=None, get_post_return=None):
        self._list_posts_return = list_posts_return or []
        self._get_post_return = get_post_return
        self.calls = []

    def list_posts(self, show_hidden=False):
        self.calls.append(("list_posts", show_hidden))
        return self._list_posts_return

    def get_post(self, slug):
        self.calls.append(("get_post", slug))
        return self._get_post_return

    def create_post(self, payload):
        self.calls.append(("create_post", payload))
        return PostRecord(slug=payload.slug.strip(), items=payload.items or [])

    def set_visibility(self, slug, visible):
        self.calls.append(("set_visibility", slug, visible))
        return visible is not False

    def delete_post(self, slug):
        self.calls.append(("delete_post", slug))
        return [f"collages/{slug}/data"]
