from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid

from predictsafe.models.base import Base


class BlogPost(Base):
    """Blog article."""
    __tablename__ = "blog_posts"

    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    featured_image = Column(String, nullable=True)
    author_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime, nullable=True)


class SiteConfig(Base):
    """Key/value site configuration (social links, WhatsApp numbers)."""
    __tablename__ = "site_config"

    key = Column(String, nullable=False, unique=True)
    value = Column(JSON, nullable=True)


class AdLink(Base):
    """Sponsored link shown on the site."""
    __tablename__ = "ad_links"

    title = Column(String, nullable=False)
    url = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
