import json
import logging

from fastapi import Depends, Request
from pydantic import ValidationError

from collage_api.db.cloudinary import get_storage
from collage_api.errors import PostValidationError
from collage_api.repos.posts_repo import CloudinaryPostsRepo
from collage_api.security import get_settings, require_admin
from collage_api.services.posts_service import PostsService

logger = logging.getLogger(__name__)


def get_posts_repo(storage=Depends(get_storage), current_settings=Depends(get_settings)):
    return CloudinaryPostsRepo(
        storage,
        prefix=current_settings.POSTS_PREFIX,
        delivery_url=current_settings.raw_delivery_url,
        page_size=current_settings.SEARCH_PAGE_SIZE,
        concurrency=current_settings.FETCH_CONCURRENCY,
    )


def get_posts_service(repo=Depends(get_posts_repo)):
    return PostsService(repo=repo)


def admin_body(model):
    """
    Dependency that parses the JSON body into ``model`` only after the
    caller has been verified as admin, so anonymous requests get 401 first.
    """

    async def parse_body(request: Request, admin=Depends(require_admin)):
        raw = await request.body()
        if not raw.strip():
            return model()
        try:
            data = json.loads(raw)
        except ValueError:
            raise PostValidationError("Invalid JSON body")
        if not isinstance(data, dict):
            return model()
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid body for {request.url.path}: {e.errors()}")
            raise PostValidationError("Invalid request body")

    return parse_body
