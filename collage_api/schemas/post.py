from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: Optional[str] = None
    caption: Any = ""


class PostRecord(BaseModel):
    """Stored shape of a post's data.json blob."""

    slug: str
    title: str = ""
    date: str = ""
    tags: List[str] = Field(default_factory=list)
    items: List[PostItem] = Field(default_factory=list)
    created_at: str = ""
    preview: Optional[str] = None
    visible: bool = True


class PostSummary(BaseModel):
    """Listing entry. Items are passed through as stored."""

    slug: str
    title: str = ""
    date: str = ""
    tags: List[str] = Field(default_factory=list)
    items: List[Any] = Field(default_factory=list)
    created_at: str = ""
    preview: Optional[str] = None
    visible: bool = True


class PostList(BaseModel):
    items: List[PostSummary] = Field(default_factory=list)


class PostCreate(BaseModel):
    slug: Optional[str] = None
    title: Optional[str] = None
    date: Optional[str] = None
    tags: Optional[List[str]] = None
    items: Optional[List[PostItem]] = None


class VisibilityUpdate(BaseModel):
    slug: Optional[str] = None
    # only a literal JSON false hides a post
    visible: Any = None


class SlugRequest(BaseModel):
    slug: Optional[str] = None


class CreatePostResponse(BaseModel):
    ok: bool = True
    slug: str


class VisibilityResponse(CreatePostResponse):
    visible: bool


class DeletePostResponse(CreatePostResponse):
    deleted: List[str] = Field(default_factory=list)
