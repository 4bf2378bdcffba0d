from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel

from predictsafe.crud.base import CRUDBase
from predictsafe.models.content import AdLink, BlogPost, SiteConfig
from predictsafe.schemas.content import AdLinkCreate, AdLinkUpdate, BlogPostCreate, BlogPostUpdate


class CRUDBlogPost(CRUDBase[BlogPost, BlogPostCreate, BlogPostUpdate]):
    """CRUD operations for blog posts."""

    async def get_by_slug(self, db: AsyncSession, *, slug: str) -> Optional[BlogPost]:
        return await self.get_by_key(db, key_field="slug", key_value=slug)

    async def list_published(self, db: AsyncSession, *, skip: int = 0, limit: int = 20) -> List[BlogPost]:
        stmt = (
            select(BlogPost)
            .where(BlogPost.published.is_(True))
            .order_by(BlogPost.published_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())


class CRUDSiteConfig(CRUDBase[SiteConfig, BaseModel, BaseModel]):
    """Key/value access to site configuration."""

    async def get_value(self, db: AsyncSession, *, key: str) -> Optional[SiteConfig]:
        return await self.get_by_key(db, key_field="key", key_value=key)

    async def list_all(self, db: AsyncSession) -> List[SiteConfig]:
        result = await db.execute(select(SiteConfig).order_by(SiteConfig.key))
        return list(result.scalars().all())

    async def upsert(self, db: AsyncSession, *, key: str, value: Any) -> SiteConfig:
        row = await self.get_value(db, key=key)
        if row is None:
            return await self.create(db, obj_in={"key": key, "value": value})
        return await self.update(db, db_obj=row, obj_in={"value": value})


class CRUDAdLink(CRUDBase[AdLink, AdLinkCreate, AdLinkUpdate]):
    """CRUD operations for ad links."""

    async def list_ordered(self, db: AsyncSession, *, active_only: bool = True) -> List[AdLink]:
        stmt = select(AdLink)
        if active_only:
            stmt = stmt.where(AdLink.is_active.is_(True))
        stmt = stmt.order_by(AdLink.display_order, AdLink.created_at)
        result = await db.execute(stmt)
        return list(result.scalars().all())


blog_post = CRUDBlogPost(BlogPost)
site_config = CRUDSiteConfig(SiteConfig)
ad_link = CRUDAdLink(AdLink)
