from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from predictsafe.models.base import Base


class Transaction(Base):
    """Payment attempt for a subscription or activation fee."""
    __tablename__ = "transactions"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subscription_id = Column(Uuid, ForeignKey("user_subscriptions.id", ondelete="SET NULL"), nullable=True)
    plan_id = Column(Uuid, ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    currency = Column(String(8), nullable=False)
    payment_gateway = Column(String, nullable=False)
    payment_type = Column(String, nullable=False, default="subscription")
    status = Column(String, nullable=False, default="pending", index=True)
    gateway_transaction_id = Column(String, nullable=True)
    # `metadata` is reserved on declarative classes
    payment_metadata = Column("metadata", JSON, default=dict, nullable=False)

    # Relationships
    user = relationship("User", lazy="selectin")
    plan = relationship("Plan", lazy="selectin")


class PaymentMethod(Base):
    """Manual payment destination shown at checkout (bank account, wallet)."""
    __tablename__ = "payment_methods"

    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    currency = Column(String(8), nullable=False)
    details = Column(JSON, default=dict, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
