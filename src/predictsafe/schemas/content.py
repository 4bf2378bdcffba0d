from typing import Any, Optional
from uuid import UUID
from datetime import datetime

from .base import BaseSchema, BaseResponseSchema


class BlogPostBase(BaseSchema):
    title: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    published: bool = False


class BlogPostCreate(BlogPostBase):
    slug: Optional[str] = None


class BlogPostUpdate(BaseSchema):
    title: Optional[str] = None
    slug: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    published: Optional[bool] = None


class BlogPostResponse(BlogPostBase, BaseResponseSchema):
    slug: str
    author_id: Optional[UUID] = None
    published_at: Optional[datetime] = None


class SiteConfigUpsert(BaseSchema):
    value: Any


class SiteConfigResponse(BaseSchema):
    key: str
    value: Any = None
    updated_at: Optional[datetime] = None


class AdLinkBase(BaseSchema):
    title: str
    url: str
    description: Optional[str] = None
    display_order: int = 0
    is_active: bool = True


class AdLinkCreate(AdLinkBase):
    pass


class AdLinkUpdate(BaseSchema):
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class AdLinkResponse(AdLinkBase, BaseResponseSchema):
    pass
