from .base import Base
from .core import User, Notification, Message
from .plan import Plan, PlanPrice, UserSubscription
from .payment import Transaction, PaymentMethod
from .prediction import Prediction, CorrectScorePrediction, VIPWinning
from .content import BlogPost, SiteConfig, AdLink

__all__ = [
    "Base",
    "User",
    "Notification",
    "Message",
    "Plan",
    "PlanPrice",
    "UserSubscription",
    "Transaction",
    "PaymentMethod",
    "Prediction",
    "CorrectScorePrediction",
    "VIPWinning",
    "BlogPost",
    "SiteConfig",
    "AdLink",
]
