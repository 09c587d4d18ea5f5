"""Generation request primitives: prompt composition and inline images."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional

from turbocontent.core.domain.exceptions import InvalidRequestError

_DATA_URL_RE = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)
_DEFAULT_IMAGE_MIME = "image/png"

SOCIAL_POST_TEMPLATE = """Generate social media post about the topic: "{topic}".
The goal of the posts is to "{goal}".
The target platform is {platform}.
The desired tone is {tone}.

Post option should include:
- Engaging text optimized for the platform.
- Relevant images and hashtags.

Return the response as a markdown"""


@dataclass(frozen=True)
class InlineImage:
    data: bytes
    mime_type: str = _DEFAULT_IMAGE_MIME


@dataclass(frozen=True)
class BackendRequest:
    """What a backend handler receives after route resolution."""

    prompt: str
    model_name: str
    temperature: Optional[float]
    reasoning_effort: Optional[str] = None
    image: Optional[InlineImage] = None
    image_output: bool = False


def compose_social_post_prompt(*, topic: str, goal: str, platform: str, tone: str) -> str:
    return SOCIAL_POST_TEMPLATE.format(
        topic=topic.strip(),
        goal=goal.strip(),
        platform=platform.strip(),
        tone=tone.strip(),
    )


def parse_inline_image(raw: str) -> InlineImage:
    """Accept a ``data:image/...;base64,`` URL or bare base64.

    Raises InvalidRequestError when the payload is not valid base64.
    """
    text = raw.strip()
    mime = _DEFAULT_IMAGE_MIME
    match = _DATA_URL_RE.match(text)
    if match:
        mime = match.group("mime")
        text = match.group("data")

    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidRequestError("Inline image is not valid base64") from exc

    if not data:
        raise InvalidRequestError("Inline image is empty")
    return InlineImage(data=data, mime_type=mime)
