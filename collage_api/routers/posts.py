import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from collage_api import dependencies as deps
from collage_api.errors import PostsError
from collage_api.schemas.post import (
    CreatePostResponse,
    DeletePostResponse,
    PostCreate,
    PostList,
    SlugRequest,
    VisibilityResponse,
    VisibilityUpdate,
)
from collage_api.security import get_admin
from collage_api.services.posts_service import PostsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/list-posts", response_model=PostList)
def list_posts(
    show_hidden: Optional[str] = Query(None, alias="showHidden"),
    admin=Depends(get_admin),
    service: PostsService = Depends(deps.get_posts_service),
):
    """List posts newest first; hidden ones only for admins with ?showHidden=1."""
    include_hidden = show_hidden == "1"
    if include_hidden and admin is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return PostList(items=service.list_posts(show_hidden=include_hidden))
    except (HTTPException, PostsError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=_message(e))


@router.get("/get-post")
def get_post(
    slug: Optional[str] = Query(None),
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single post record by slug."""
    try:
        post = service.get_post(slug)
        if post is None:
            raise HTTPException(status_code=404, detail="not found")
        return post
    except (HTTPException, PostsError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {slug}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=_message(e))


@router.post("/create-post", response_model=CreatePostResponse)
def create_post(
    payload: PostCreate = Depends(deps.admin_body(PostCreate)),
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        record = service.create_post(payload)
        return CreatePostResponse(slug=record.slug)
    except (HTTPException, PostsError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error creating post: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=_message(e))


@router.post("/update-visible", response_model=VisibilityResponse)
def update_visible(
    payload: VisibilityUpdate = Depends(deps.admin_body(VisibilityUpdate)),
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        visible = service.set_visibility(payload.slug, payload.visible)
        return VisibilityResponse(slug=payload.slug.strip(), visible=visible)
    except (HTTPException, PostsError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error updating visibility: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=_message(e))


@router.post("/delete-post", response_model=DeletePostResponse)
def delete_post(
    payload: SlugRequest = Depends(deps.admin_body(SlugRequest)),
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        deleted = service.delete_post(payload.slug)
        return DeletePostResponse(slug=payload.slug.strip(), deleted=deleted)
    except (HTTPException, PostsError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error deleting post: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=_message(e))


def _message(error: Exception) -> str:
    return str(error) or "Unknown error"
