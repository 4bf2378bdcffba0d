from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException

from predictsafe.api.auth_deps import AdminSession
from predictsafe.crud.crud_content import ad_link as crud_ad_link
from predictsafe.crud.crud_content import blog_post as crud_blog_post
from predictsafe.crud.crud_content import site_config as crud_site_config
from predictsafe.crud.crud_transaction import payment_method as crud_payment_method
from predictsafe.db.session import SessionDep
from predictsafe.schemas import (
    AdLinkCreate, AdLinkResponse, AdLinkUpdate, BlogPostCreate, BlogPostResponse, BlogPostUpdate,
    MessageResponse, PaymentMethodCreate, PaymentMethodResponse, PaymentMethodUpdate, SiteConfigResponse,
    SiteConfigUpsert,
)
from predictsafe.utils.dates import utcnow
from predictsafe.utils.validation import normalize_whatsapp_numbers, slugify

router = APIRouter()

WHATSAPP_KEY = "whatsapp_number"


def _config_value(key: str, value: Any) -> Any:
    if key == WHATSAPP_KEY:
        return normalize_whatsapp_numbers(value)
    return value


def _config_response(row) -> SiteConfigResponse:
    return SiteConfigResponse(key=row.key, value=_config_value(row.key, row.value), updated_at=row.updated_at)


# Blog
@router.get("/blog", response_model=list[BlogPostResponse])
async def read_blog_posts(db: SessionDep, skip: int = 0, limit: int = 20):
    return await crud_blog_post.list_published(db, skip=skip, limit=limit)


@router.get("/blog/{slug}", response_model=BlogPostResponse)
async def read_blog_post(slug: str, db: SessionDep):
    post = await crud_blog_post.get_by_slug(db, slug=slug)
    if not post or not post.published:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/blog", response_model=BlogPostResponse)
async def create_blog_post(post_in: BlogPostCreate, db: SessionDep, session: AdminSession):
    data = post_in.model_dump()
    data["slug"] = slugify(post_in.slug or post_in.title)
    if not data["slug"]:
        raise HTTPException(status_code=400, detail="A slug could not be derived from the title")
    if await crud_blog_post.get_by_slug(db, slug=data["slug"]):
        raise HTTPException(status_code=400, detail="A post with this slug already exists")
    data["author_id"] = session.user_id
    data["published_at"] = utcnow() if post_in.published else None
    return await crud_blog_post.create(db, obj_in=data)


@router.put("/blog/{post_id}", response_model=BlogPostResponse)
async def update_blog_post(post_id: UUID, post_in: BlogPostUpdate, db: SessionDep, session: AdminSession):
    post = await crud_blog_post.get(db, id=post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    data = post_in.model_dump(exclude_unset=True)
    if data.get("slug"):
        data["slug"] = slugify(data["slug"])
    # published_at is stamped on the first publish only
    if data.get("published") and post.published_at is None:
        data["published_at"] = utcnow()
    return await crud_blog_post.update(db, db_obj=post, obj_in=data)


@router.delete("/blog/{post_id}", response_model=MessageResponse)
async def delete_blog_post(post_id: UUID, db: SessionDep, session: AdminSession):
    if not await crud_blog_post.remove(db, id=post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    return MessageResponse(message="Post deleted")


# Site config
@router.get("/site-config", response_model=list[SiteConfigResponse])
async def read_site_config(db: SessionDep):
    return [_config_response(row) for row in await crud_site_config.list_all(db)]


@router.get("/site-config/{key}", response_model=SiteConfigResponse)
async def read_site_config_key(key: str, db: SessionDep):
    row = await crud_site_config.get_value(db, key=key)
    if not row:
        raise HTTPException(status_code=404, detail="Config key not found")
    return _config_response(row)


@router.put("/site-config/{key}", response_model=SiteConfigResponse)
async def upsert_site_config(key: str, config_in: SiteConfigUpsert, db: SessionDep, session: AdminSession):
    row = await crud_site_config.upsert(db, key=key, value=_config_value(key, config_in.value))
    return _config_response(row)


# Ad links
@router.get("/ad-links", response_model=list[AdLinkResponse])
async def read_ad_links(db: SessionDep):
    return await crud_ad_link.list_ordered(db)


@router.get("/ad-links/all", response_model=list[AdLinkResponse])
async def read_all_ad_links(db: SessionDep, session: AdminSession):
    return await crud_ad_link.list_ordered(db, active_only=False)


@router.post("/ad-links", response_model=AdLinkResponse)
async def create_ad_link(link_in: AdLinkCreate, db: SessionDep, session: AdminSession):
    return await crud_ad_link.create(db, obj_in=link_in)


@router.put("/ad-links/{link_id}", response_model=AdLinkResponse)
async def update_ad_link(link_id: UUID, link_in: AdLinkUpdate, db: SessionDep, session: AdminSession):
    link = await crud_ad_link.get(db, id=link_id)
    if not link:
        raise HTTPException(status_code=404, detail="Ad link not found")
    return await crud_ad_link.update(db, db_obj=link, obj_in=link_in)


@router.delete("/ad-links/{link_id}", response_model=MessageResponse)
async def delete_ad_link(link_id: UUID, db: SessionDep, session: AdminSession):
    if not await crud_ad_link.remove(db, id=link_id):
        raise HTTPException(status_code=404, detail="Ad link not found")
    return MessageResponse(message="Ad link deleted")


# Payment methods
@router.get("/payment-methods", response_model=list[PaymentMethodResponse])
async def read_payment_methods(db: SessionDep, currency: Optional[str] = None):
    return await crud_payment_method.list_active(db, currency=currency)


@router.post("/payment-methods", response_model=PaymentMethodResponse)
async def create_payment_method(method_in: PaymentMethodCreate, db: SessionDep, session: AdminSession):
    return await crud_payment_method.create(db, obj_in=method_in)


@router.put("/payment-methods/{method_id}", response_model=PaymentMethodResponse)
async def update_payment_method(
    method_id: UUID, method_in: PaymentMethodUpdate, db: SessionDep, session: AdminSession
):
    method = await crud_payment_method.get(db, id=method_id)
    if not method:
        raise HTTPException(status_code=404, detail="Payment method not found")
    return await crud_payment_method.update(db, db_obj=method, obj_in=method_in)


@router.delete("/payment-methods/{method_id}", response_model=MessageResponse)
async def delete_payment_method(method_id: UUID, db: SessionDep, session: AdminSession):
    if not await crud_payment_method.remove(db, id=method_id):
        raise HTTPException(status_code=404, detail="Payment method not found")
    return MessageResponse(message="Payment method deleted")
