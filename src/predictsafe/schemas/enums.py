from enum import Enum


class PlanStatus(str, Enum):
    """Entitlement status of a user subscription."""
    INACTIVE = "inactive"
    PENDING = "pending"
    PENDING_ACTIVATION = "pending_activation"
    ACTIVE = "active"
    EXPIRED = "expired"


class TransactionStatus(str, Enum):
    """Lifecycle of a payment attempt."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentType(str, Enum):
    """What a transaction pays for."""
    SUBSCRIPTION = "subscription"
    ACTIVATION = "activation"


class PaymentMethodType(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CRYPTO = "crypto"


class PlanType(str, Enum):
    """Plan a prediction row is published to."""
    PROFIT_MULTIPLIER = "profit_multiplier"
    DAILY_2_ODDS = "daily_2_odds"
    STANDARD = "standard"
    FREE = "free"
    CORRECT_SCORE = "correct_score"

    @property
    def slug(self) -> str:
        return self.value.replace("_", "-")


class MatchStatus(str, Enum):
    NOT_STARTED = "not_started"
    LIVE = "live"
    FINISHED = "finished"


class PredictionResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    PENDING = "pending"


class NotificationType(str, Enum):
    """Kinds of in-app notification, each with a matching email template."""
    PREDICTION_DROPPED = "prediction_dropped"
    SUBSCRIPTION_CONFIRMED = "subscription_confirmed"
    SUBSCRIPTION_EXPIRED = "subscription_expired"
    SUBSCRIPTION_REMOVED = "subscription_removed"
    ADMIN_NEW_SUBSCRIPTION = "admin_new_subscription"
    PAYMENT_REJECTED = "payment_rejected"
    PAYMENT_APPROVED = "payment_approved"
    ADMIN_NEW_PAYMENT = "admin_new_payment"
    USER_WELCOME = "user_welcome"
    SUBSCRIPTION_CREATED = "subscription_created"


class SubscriptionEvent(str, Enum):
    CONFIRMED = "confirmed"
    EXPIRED = "expired"
    REMOVED = "removed"
