"""
Prompt, response parsing and fallback text for follow-up drafts.
"""

import re

from inboxiq.features.leads.domain import FollowUpContext

FOLLOW_UP_PROMPT = """You are a professional email assistant that helps users write polite, concise follow-up emails.

Goals:
- Increase reply rates
- Sound human and natural
- Be respectful and low-pressure

Rules:
- Max 120 words
- Professional, friendly tone
- No emojis
- No sales hype
- No assumptions of interest
- Do not invent facts
- Do not sound automated

Write a short follow-up email based on the context below.

Context:
- Recipient name: {{recipient_name_or_empty}}
- Recipient email: {{recipient_email}}
- Last email subject: {{last_subject}}
- Last email snippet: {{last_snippet}}
- Days since last reply: {{days_since_last_reply}}

Instructions:
- Reference the previous email naturally
- Politely check if they had a chance to see it
- Invite a response without pressure
- End with a soft, professional closing

Formatting rules:
- If recipient name is missing, start with "Hi there,"
- Keep the subject simple and neutral

Output format (STRICT):
Subject: <subject line>

<email body>"""

FALLBACK_CHECK_IN = (
    "I wanted to check if you had a chance to review it. If you have any questions "
    "or need anything, please let me know."
)
FALLBACK_NO_PRESSURE = (
    "If now isn't a good time, no problem at all. Just let me know when would work "
    "better for you."
)

_SUBJECT_LINE = re.compile(r"Subject:[ \t]*(.+?)[ \t]*(?:\n|$)", re.IGNORECASE)
_QUOTE_LIMIT = 100


def render_prompt(context: FollowUpContext, template: str = FOLLOW_UP_PROMPT) -> str:
    """Plain placeholder substitution; context values are inserted as-is."""
    replacements = {
        "{{recipient_name_or_empty}}": context.recipient_name or "",
        "{{recipient_email}}": context.recipient_email,
        "{{last_subject}}": context.last_subject,
        "{{last_snippet}}": context.last_snippet,
        "{{days_since_last_reply}}": str(context.days_since_last_reply),
    }
    rendered = template
    for placeholder, value in replacements.items():
        rendered = rendered.replace(placeholder, value)
    return rendered


def reply_subject(last_subject: str) -> str:
    return f"Re: {last_subject}"


def parse_generated_email(text: str, last_subject: str) -> tuple[str, str] | None:
    """
    Split model output in the "Subject: ...\\n\\n<body>" shape.

    The body is everything after the first blank-line paragraph (or after
    the first line when there is no blank line). Returns None when no body
    survives, so the caller can fall back.
    """
    text = (text or "").replace("\r\n", "\n").strip()
    if not text:
        return None

    match = _SUBJECT_LINE.search(text)
    subject = match.group(1).strip() if match else ""

    body = "\n\n".join(text.split("\n\n")[1:]).strip()
    if not body:
        body = "\n".join(text.split("\n")[1:]).strip()
    if not body:
        return None

    return subject or reply_subject(last_subject), body


def build_fallback_email(context: FollowUpContext) -> tuple[str, str]:
    """Deterministic follow-up used whenever generation is unavailable."""
    greeting = f"Hi {context.recipient_name}," if context.recipient_name else "Hi there,"
    days = context.days_since_last_reply
    days_text = "day" if days == 1 else "days"

    paragraphs = [
        greeting,
        f"I wanted to follow up on my email from {days} {days_text} ago about {context.last_subject}.",
    ]
    if context.last_snippet:
        quoted = context.last_snippet[:_QUOTE_LIMIT]
        if len(context.last_snippet) > _QUOTE_LIMIT:
            quoted += "..."
        paragraphs.append(f'You mentioned: "{quoted}"')
    paragraphs.extend([FALLBACK_CHECK_IN, FALLBACK_NO_PRESSURE, "Best regards"])

    return reply_subject(context.last_subject), "\n\n".join(paragraphs)


def to_html(body: str) -> str:
    return body.replace("\n", "<br>")
