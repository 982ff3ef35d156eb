"""HTML email templates (Jinja).

Autoescaping is on: subjects, bodies, names, links and file names are all
user-supplied and end up inside HTML.
"""

from __future__ import annotations

from collections.abc import Sequence

from jinja2 import Environment, Template
from markupsafe import Markup, escape

from agora.shared.utils.datetime import utc_now

PASSCODE_SUBJECTS: dict[str, str] = {
    "admin-login": "Your admin login code",
    "login": "Your login code",
    "registration": "Verify your email address",
}

_PASSCODE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; color: #222; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">{{ brand }}</h2>
  <p>Hello{% if name %} {{ name }}{% endif %},</p>
  <p>Your verification code is:</p>
  <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; background: #f4f4f4; padding: 16px; text-align: center;">{{ code }}</p>
  <p>This code expires in {{ ttl_minutes }} minute{% if ttl_minutes != 1 %}s{% endif %}.</p>
  <p style="color: #888; font-size: 12px;">If you did not request this code, you can ignore this email. Never share this code with anyone.</p>
</body>
</html>
"""

_BROADCAST_TEMPLATE = """\
<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; color: #222; max-width: 600px; margin: 0 auto;">
  <p>Hello {{ recipient_name }},</p>
  <div style="line-height: 1.6;"><p>{{ body_html }}</p></div>
  {% if media_links %}
  <div style="margin: 20px 0;">
    {% for link in media_links %}
    <p><a href="{{ link }}" style="display: inline-block; background: #2563eb; color: #fff; padding: 10px 18px; text-decoration: none; border-radius: 4px;">Watch video {{ loop.index }}</a></p>
    {% endfor %}
  </div>
  {% endif %}
  {% if attachments %}
  <div style="margin: 20px 0;">
    <p><strong>Attachments:</strong></p>
    <ul>
    {% for attachment in attachments %}
      <li>{{ attachment }}</li>
    {% endfor %}
    </ul>
  </div>
  {% endif %}
  <hr style="border: none; border-top: 1px solid #eee;">
  <p style="color: #888; font-size: 12px;">&copy; {{ year }} {{ brand }}. You are receiving this email as a member of {{ brand }}.</p>
</body>
</html>
"""

_env = Environment(autoescape=True)
_passcode_template: Template = _env.from_string(_PASSCODE_TEMPLATE)
_broadcast_template: Template = _env.from_string(_BROADCAST_TEMPLATE)


def passcode_subject(purpose: str) -> str:
    return PASSCODE_SUBJECTS.get(str(purpose), "Your verification code")


def paragraphs(text: str) -> Markup:
    """Escape text, then turn line breaks into paragraph breaks."""
    escaped = str(escape(text.replace("\r\n", "\n")))
    return Markup(escaped.replace("\n", "</p><p>"))


def render_passcode_email(
    code: str,
    *,
    name: str | None = None,
    ttl_minutes: int = 10,
    brand: str = "Agora Community",
) -> str:
    return _passcode_template.render(
        code=code,
        name=(name or "").strip(),
        ttl_minutes=ttl_minutes,
        brand=brand,
    )


def render_broadcast_email(
    content: str,
    *,
    recipient_name: str,
    media_links: Sequence[str] = (),
    attachments: Sequence[str] = (),
    brand: str = "Agora Community",
    year: int | None = None,
) -> str:
    """Render one recipient's copy of a broadcast.

    Args:
        content: Author's plain-text body; escaped, newlines become paragraphs.
        recipient_name: Greeting name.
        media_links: URLs rendered as buttons, in order.
        attachments: File names listed under the body.
        brand: Footer brand name.
        year: Footer year (defaults to the current UTC year).
    """
    return _broadcast_template.render(
        body_html=paragraphs(content),
        recipient_name=recipient_name,
        media_links=[link for link in media_links if link],
        attachments=list(attachments),
        brand=brand,
        year=year or utc_now().year,
    )
