from __future__ import annotations

from dataclasses import dataclass
from html import escape

from ..schemas.notifications import UpgradeRequest
from ..schemas.workout import Workout

DEFAULT_RATIONALE = "This workout is designed to help you reach your fitness goals with a balanced approach."

_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="margin: 0; padding: 40px 20px; background-color: #0a0a0a; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;">
  <div style="max-width: 600px; margin: 0 auto; background-color: #171717; border-radius: 12px; overflow: hidden;">
{body}
  </div>
</body>
</html>"""

_STAT = (
    '<td style="padding: 8px 16px; background-color: #262626; border-radius: 8px;">'
    '<span style="color: #a3a3a3; font-size: 12px;">{label}</span><br>'
    '<span style="color: #ffffff; font-size: 14px; font-weight: 500;">{value}</span></td>'
)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


def _section_html(workout: Workout) -> str:
    blocks = []
    for section in workout.sections:
        items = "".join(
            f'<li style="padding: 2px 0;"><strong style="color: #ffffff;">{escape(ex.name)}</strong>'
            f"{' &middot; ' + escape(ex.details) if ex.details else ''}</li>"
            for ex in section.exercises
        )
        if not items:
            continue
        blocks.append(
            f'<h3 style="margin: 16px 0 8px; color: #0ea5e9; font-size: 15px;">{escape(section.title)}</h3>'
            f'<ul style="margin: 0; padding-left: 20px; color: #d4d4d4; font-size: 14px;">{items}</ul>'
        )
    return "\n".join(blocks)


def render_daily_workout_email(workout: Workout, *, app_url: str) -> RenderedEmail:
    stats = "<td width=\"8\"></td>".join(
        [
            _STAT.format(label="Type", value=escape(workout.type or "Workout")),
            _STAT.format(label="Duration", value=f"{workout.duration_minutes or '?'} min"),
            _STAT.format(label="Est. Calories", value=f"~{workout.estimated_calories or 0} cal"),
        ]
    )
    link = escape(app_url, quote=True)
    body = f"""    <div style="padding: 32px 32px 24px; background: linear-gradient(135deg, #0ea5e9 0%, #3b82f6 100%);">
      <h1 style="margin: 0; color: white; font-size: 24px; font-weight: 600;">Your Daily Workout</h1>
      <p style="margin: 8px 0 0; color: rgba(255,255,255,0.9); font-size: 14px;">Good morning! Here's your personalized workout for today.</p>
    </div>
    <div style="padding: 32px;">
      <h2 style="margin: 0 0 16px; color: #ffffff; font-size: 20px; font-weight: 600;">{escape(workout.title)}</h2>
      <table width="100%" cellspacing="0" cellpadding="0" style="margin-bottom: 24px;"><tr>{stats}</tr></table>
      <div style="background-color: #262626; border-radius: 8px; padding: 16px; margin-bottom: 24px;">
        <p style="margin: 0; color: #d4d4d4; font-size: 14px; line-height: 1.6;">
          <strong style="color: #0ea5e9;">Why this workout?</strong><br>
          {escape(workout.rationale or DEFAULT_RATIONALE)}
        </p>
      </div>
      {_section_html(workout)}
      <p style="text-align: center; margin: 32px 0 0;">
        <a href="{link}" style="display: inline-block; padding: 14px 32px; background: #0ea5e9; color: white; text-decoration: none; border-radius: 8px; font-weight: 600; font-size: 16px;">Go to Workout</a>
      </p>
    </div>
    <div style="padding: 24px 32px; border-top: 1px solid #262626;">
      <p style="margin: 0; color: #737373; font-size: 12px; text-align: center;">
        You're receiving this because you enabled daily workout notifications.<br>
        <a href="{link}" style="color: #0ea5e9; text-decoration: none;">Update your preferences</a>
      </p>
    </div>"""
    return RenderedEmail(subject=f"Your Daily Workout: {workout.title}", html=_PAGE.format(body=body))


def render_upgrade_request_email(request: UpgradeRequest, *, user_id: str) -> RenderedEmail:
    features = "".join(f'<li style="padding: 4px 0;">{escape(f)}</li>' for f in request.interested_features)
    message = ""
    if request.message:
        message = (
            '<div style="background-color: #262626; border-radius: 8px; padding: 20px; margin-bottom: 24px;">'
            '<h2 style="color: #ffffff; margin: 0 0 16px 0; font-size: 16px;">Message</h2>'
            f'<p style="margin: 0; color: #a3a3a3; white-space: pre-wrap;">{escape(request.message)}</p></div>'
        )
    body = f"""    <div style="padding: 32px;">
      <h1 style="color: #22d3ee; margin: 0 0 24px 0; font-size: 24px;">New Premium Upgrade Request</h1>
      <div style="background-color: #262626; border-radius: 8px; padding: 20px; margin-bottom: 24px;">
        <h2 style="color: #ffffff; margin: 0 0 16px 0; font-size: 16px;">User Details</h2>
        <p style="margin: 8px 0; color: #a3a3a3;"><strong style="color: #ffffff;">Name:</strong> {escape(request.user_name or "Not provided")}</p>
        <p style="margin: 8px 0; color: #a3a3a3;"><strong style="color: #ffffff;">Email:</strong> {escape(request.user_email)}</p>
        <p style="margin: 8px 0; color: #a3a3a3;"><strong style="color: #ffffff;">User ID:</strong> {escape(user_id)}</p>
      </div>
      <div style="background-color: #262626; border-radius: 8px; padding: 20px; margin-bottom: 24px;">
        <h2 style="color: #ffffff; margin: 0 0 16px 0; font-size: 16px;">Interested Features</h2>
        <ul style="margin: 0; padding-left: 20px; color: #22d3ee;">{features or "<li>None selected</li>"}</ul>
      </div>
      {message}
    </div>"""
    subject = f"New Premium Upgrade Request - {request.user_name or request.user_email}"
    return RenderedEmail(subject=subject, html=_PAGE.format(body=body))
