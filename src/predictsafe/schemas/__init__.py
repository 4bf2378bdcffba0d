from .base import BaseSchema, TimestampSchema, IDSchema, BaseResponseSchema, MessageResponse, CountResponse
from .enums import (
    PlanStatus, TransactionStatus, PaymentType, PaymentMethodType, PlanType, MatchStatus,
    PredictionResult, NotificationType, SubscriptionEvent,
)
from .user import UserCreate, UserUpdate, UserResponse, UserPublic, AvatarResponse
from .auth import Token, SupabaseSession, UserInfo, AuthResponse, RegisterRequest, RegisterResponse
from .plan import (
    PlanCreate, PlanUpdate, PlanResponse, PlanPriceCreate, PlanPriceUpdate, PlanPriceResponse,
    ResolvedPriceResponse, SubscriptionResponse, SubscriptionDetail, GrantSubscriptionRequest,
    ExpireOverdueResponse,
)
from .payment import (
    PaymentMethodCreate, PaymentMethodUpdate, PaymentMethodResponse, TransactionResponse,
    CheckoutRequest, ActivationPaymentRequest, RejectTransactionRequest, CheckoutResponse,
)
from .prediction import (
    PredictionCreate, PredictionUpdate, PredictionResponse, RecordResultRequest,
    CorrectScoreCreate, CorrectScoreUpdate, CorrectScoreResponse, VIPWinningCreate, VIPWinningResponse,
    SyncPredictionsRequest, SyncPredictionsResponse, CandidatePrediction,
    InsertPredictionsRequest, InsertPredictionsResponse,
)
from .content import (
    BlogPostCreate, BlogPostUpdate, BlogPostResponse, SiteConfigUpsert, SiteConfigResponse,
    AdLinkCreate, AdLinkUpdate, AdLinkResponse,
)
from .notification import (
    NotificationResponse, CreateNotificationPayload, SubscriptionEventPayload, AdminNewSubscriptionPayload,
    SendEmailPayload, NotifyPredictionUpdatePayload, NotifyResponse,
)
from .chat import MessageCreate, ConversationSummary
from .chat import MessageResponse as ChatMessageResponse
from .admin import BadgeCounts, DashboardStats, ActiveSubscriptionCountdown, UserWithSubscriptions
