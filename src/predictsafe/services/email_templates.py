"""HTML email templates sharing one branded layout."""
from dataclasses import dataclass
from html import escape
from typing import Optional

from predictsafe.core.config import settings

BRAND_COLORS = {
    "primary": ("#1e40af", "#1e3a8a"),
    "green": ("#22c55e", "#16a34a"),
    "orange": ("#f97316", "#ea580c"),
    "red": ("#ef4444", "#dc2626"),
    "purple": ("#8b5cf6", "#7c3aed"),
}


@dataclass
class RenderedEmail:
    subject: str
    html: str


def _styles(color: str) -> str:
    light, dark = BRAND_COLORS[color]
    return f"""
    body {{ font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #1f2937; margin: 0; padding: 0; background-color: #f3f4f6; }}
    .email-wrapper {{ max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 12px; overflow: hidden; }}
    .header {{ background: linear-gradient(135deg, {light} 0%, {dark} 100%); color: white; padding: 40px 30px; text-align: center; }}
    .header h1 {{ margin: 0; font-size: 28px; font-weight: 700; color: white; }}
    .content {{ padding: 40px 30px; }}
    .content p {{ margin: 0 0 16px 0; font-size: 16px; color: #374151; }}
    .button {{ display: inline-block; padding: 14px 32px; background: {light}; color: #ffffff !important; text-decoration: none; border-radius: 8px; margin: 24px 0; font-weight: 600; }}
    .info-box {{ background: #f0f9ff; border-left: 4px solid {light}; padding: 20px; border-radius: 8px; margin: 24px 0; }}
    .alert-box {{ background: #fef2f2; border-left: 4px solid {BRAND_COLORS['red'][0]}; padding: 20px; border-radius: 8px; margin: 24px 0; }}
    .footer {{ padding: 30px; text-align: center; background: #f9fafb; border-top: 1px solid #e5e7eb; }}
    .footer p {{ margin: 8px 0; color: #6b7280; font-size: 14px; }}
    """


def _layout(
    color: str,
    heading: str,
    body: str,
    button: Optional[tuple[str, str]] = None,
    signature: str = "The PredictSafe Team",
) -> str:
    cta = ""
    if button:
        label, path = button
        cta = f'<div style="text-align: center;"><a href="{settings.SITE_URL}{path}" class="button">{label}</a></div>'
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <style>{_styles(color)}</style>
  </head>
  <body>
    <div style="padding: 20px;">
      <div class="email-wrapper">
        <div class="header"><h1>{heading}</h1></div>
        <div class="content">{body}{cta}</div>
        <div class="footer">
          <p><strong>Best regards,</strong></p>
          <p>{signature}</p>
        </div>
      </div>
    </div>
  </body>
</html>"""


def _plan(plan_name: str, color: str) -> str:
    return f'<strong style="color: {BRAND_COLORS[color][0]};">{escape(plan_name)}</strong>'


def welcome(full_name: Optional[str] = None) -> RenderedEmail:
    name = f" {escape(full_name)}" if full_name else ""
    body = (
        f"<p>Hello{name},</p>"
        f"<p>Thank you for signing up to {_plan('PredictSafe', 'primary')}.</p>"
        "<p>You're all set to start exploring premium predictions, VIP plans, and tools to help you win more consistently.</p>"
    )
    return RenderedEmail(
        subject="Welcome to PredictSafe!",
        html=_layout("primary", f"👋 Welcome{',' + name if name else ''}!", body, ("Go to Dashboard", "/dashboard")),
    )


def subscription_created(plan_name: str) -> RenderedEmail:
    body = (
        "<p>Hello,</p>"
        f"<p>Your subscription request for {_plan(plan_name, 'primary')} has been received.</p>"
        "<p>Your payment proof has been submitted and is <strong>pending admin approval</strong>. "
        "You'll receive another email once your payment is approved and your plan is active.</p>"
    )
    return RenderedEmail(subject=f"Subscription Created - {plan_name}", html=_layout("primary", "📦 Subscription Created", body))


def prediction_dropped(plan_name: str) -> RenderedEmail:
    body = (
        "<p>Hello,</p>"
        f"<p>Great news! Predictions for {_plan(plan_name, 'primary')} have just been dropped!</p>"
        "<p>Don't miss out on these opportunities. Log in to your dashboard to view all the latest predictions.</p>"
    )
    return RenderedEmail(
        subject=f"New Predictions Available for {plan_name}!",
        html=_layout("primary", "🎯 New Predictions Available!", body, ("View Predictions", "/dashboard/predictions")),
    )


def subscription_confirmed(plan_name: str) -> RenderedEmail:
    body = (
        "<p>Hello,</p>"
        f"<p>Your subscription for {_plan(plan_name, 'green')} has been confirmed and is now active!</p>"
        "<p>You can now access all the premium features and predictions for your plan.</p>"
    )
    return RenderedEmail(
        subject=f"Subscription Confirmed - {plan_name}",
        html=_layout("green", "✅ Subscription Confirmed!", body, ("Go to Dashboard", "/dashboard")),
    )


def subscription_expired(plan_name: str) -> RenderedEmail:
    body = (
        "<p>Hello,</p>"
        f"<p>Your subscription for {_plan(plan_name, 'orange')} has expired.</p>"
        "<p>To continue enjoying our premium predictions and features, please renew your subscription.</p>"
    )
    return RenderedEmail(
        subject=f"Subscription Expired - {plan_name}",
        html=_layout("orange", "⏰ Subscription Expired", body, ("Renew Subscription", "/subscriptions")),
    )


def subscription_removed(plan_name: str) -> RenderedEmail:
    body = (
        "<p>Hello,</p>"
        f"<p>Your subscription for {_plan(plan_name, 'red')} has been removed.</p>"
        "<p>Please renew your subscription to get back on track and continue accessing premium predictions.</p>"
    )
    return RenderedEmail(
        subject=f"Subscription Removed - {plan_name}",
        html=_layout("red", "⚠️ Subscription Removed", body, ("View Plans", "/subscriptions")),
    )


def admin_new_subscription(plan_name: str, user_email: str, user_name: Optional[str] = None) -> RenderedEmail:
    body = (
        "<p>Hello Admin,</p><p>A new subscription has been created:</p>"
        '<div class="info-box">'
        f"<p><strong>User:</strong> {escape(user_name or user_email)}</p>"
        f"<p><strong>Email:</strong> {escape(user_email)}</p>"
        f"<p><strong>Plan:</strong> {escape(plan_name)}</p>"
        "</div>"
    )
    return RenderedEmail(
        subject=f"New Subscription - {plan_name}",
        html=_layout("purple", "🎉 New Subscription!", body, ("Open Admin", "/admin/users"), "PredictSafe System"),
    )


def payment_approved(plan_name: str) -> RenderedEmail:
    body = (
        "<p>Hello,</p>"
        f"<p>Great news! Your payment for {_plan(plan_name, 'green')} has been approved and your subscription is now active!</p>"
        "<p>You can now access all premium features and predictions for your plan.</p>"
    )
    return RenderedEmail(
        subject=f"Payment Approved - {plan_name}",
        html=_layout("green", "✅ Payment Approved!", body, ("Go to Dashboard", "/dashboard")),
    )


def admin_new_payment(
    plan_name: str, user_email: str, amount: float, currency: str, user_name: Optional[str] = None
) -> RenderedEmail:
    body = (
        "<p>Hello Admin,</p><p>A new payment has been submitted and requires your review:</p>"
        '<div class="info-box">'
        f"<p><strong>User:</strong> {escape(user_name or user_email)}</p>"
        f"<p><strong>Email:</strong> {escape(user_email)}</p>"
        f"<p><strong>Plan:</strong> {escape(plan_name)}</p>"
        f"<p><strong>Amount:</strong> {escape(currency)} {amount}</p>"
        "</div>"
        "<p>Please review the payment proof and activate the subscription if payment is confirmed.</p>"
    )
    return RenderedEmail(
        subject=f"New Payment Submitted - {plan_name}",
        html=_layout("orange", "💰 New Payment Submitted!", body, ("Review Payment", "/admin/transactions"), "PredictSafe System"),
    )


def payment_rejected(plan_name: str, reason: Optional[str] = None) -> RenderedEmail:
    reason_box = ""
    if reason:
        reason_box = f'<div class="alert-box"><p><strong>Reason:</strong></p><p>{escape(reason)}</p></div>'
    body = (
        "<p>Hello,</p>"
        f"<p>We regret to inform you that your payment for {_plan(plan_name, 'red')} has been rejected.</p>"
        f"{reason_box}"
        "<p>If you believe this is an error, please contact our support team with your payment proof for review.</p>"
        "<p>You can resubmit your payment with a valid proof of payment.</p>"
    )
    return RenderedEmail(
        subject=f"Payment Rejected - {plan_name}",
        html=_layout("red", "❌ Payment Rejected", body, ("Resubmit Payment", "/subscriptions")),
    )
