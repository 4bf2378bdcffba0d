from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from predictsafe.models.base import Base


class Plan(Base):
    """Subscription tier (Free, Standard, Daily 2 Odds, Profit Multiplier, Correct Score)."""
    __tablename__ = "plans"

    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    benefits = Column(JSON, default=list, nullable=False)
    requires_activation = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    max_predictions_per_day = Column(Integer, nullable=True)

    # Relationships
    prices = relationship("PlanPrice", back_populates="plan", lazy="selectin", cascade="all, delete-orphan")


class PlanPrice(Base):
    """Price of a plan for one country and duration."""
    __tablename__ = "plan_prices"

    plan_id = Column(Uuid, ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True)
    country = Column(String, nullable=False)
    duration_days = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    activation_fee = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    currency = Column(String(8), nullable=False, default="USD")

    # Relationships
    plan = relationship("Plan", back_populates="prices")


class UserSubscription(Base):
    """Entitlement of a user to a plan."""
    __tablename__ = "user_subscriptions"
    __table_args__ = (UniqueConstraint("user_id", "plan_id", name="uq_user_subscriptions_user_plan"),)

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(Uuid, ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_status = Column(String, nullable=False, default="inactive")
    subscription_fee_paid = Column(Boolean, default=False, nullable=False)
    activation_fee_paid = Column(Boolean, default=False, nullable=False)
    start_date = Column(DateTime, nullable=True)
    expiry_date = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", back_populates="subscriptions", lazy="selectin")
    plan = relationship("Plan", lazy="selectin")
