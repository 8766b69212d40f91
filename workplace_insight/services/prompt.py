from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Union

from workplace_insight.schemas.inputs import DEFAULT_MIME_TYPE, FormFields, UploadSet

NOT_PROVIDED = "not provided"

SYSTEM_PROMPT = (
    "You are a master of workplace negotiation. You have sharp insight into the "
    "psychology and outward behaviour of colleagues and managers, and a strong "
    "toolkit for handling complex office politics. You are good at producing "
    "short but effective analysis and advice."
)

TASK_PROMPT = (
    "Task: based on the workplace conversation screenshots provided by the user, "
    "quickly build a profile and give short, effective negotiation advice. The goal "
    "is to move shared goals forward in a workplace setting without being "
    "underestimated or misled (no outcome is guaranteed)."
)

FOCUS_PROMPT = (
    "Focus: stay professional and respectful, centre on data and shared goals, "
    "avoid emotional or manipulative language; advice must be actionable."
)

OUTPUT_SCHEMA = """
Return JSON with the following structure:
{
  "summary": {
    "traits": [role and tendencies...],
    "interests": [concerns and asks...],
    "communication_style": "communication style",
    "values": [workplace values and priorities...]
  },
  "recommendations": {
    "openers": [openers and key phrasing...],
    "topics": [negotiation topics...],
    "activities": [suggested actions...],
    "dos": [do...],
    "donts": [don't...]
  },
  "risks": [strings...],
  "confidence": number 0-1,
  "disclaimer": "statement on following workplace ethics and compliance"
}""".strip()


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


ContentPart = Union[TextPart, ImagePart]
PromptPayload = tuple[ContentPart, ...]


def _or_default(value: str | None) -> str:
    return value or NOT_PROVIDED


def build_context_line(fields: FormFields) -> str:
    return (
        f"goal={_or_default(fields.goal)}; "
        f"stage={_or_default(fields.stage)}; "
        f"age_range={_or_default(fields.age_range)}; "
        f"gender_pref={_or_default(fields.gender_pref)}; "
        f"context={_or_default(fields.context)}; "
        f"relation={fields.relation_excerpt}; "
        f"extra_text={fields.extra_text_excerpt}."
    )


def build_prompt_text(fields: FormFields) -> str:
    return "\n".join([
        SYSTEM_PROMPT,
        TASK_PROMPT,
        FOCUS_PROMPT,
        OUTPUT_SCHEMA,
        build_context_line(fields),
    ])


def build_prompt(uploads: UploadSet, fields: FormFields) -> PromptPayload:
    """
    Leading instruction text, then the free text (if any), then every image
    in upload order.
    """
    parts: list[ContentPart] = [TextPart(build_prompt_text(fields))]
    if fields.text_only:
        parts.append(TextPart(fields.extra_text_excerpt))
    parts.extend(
        ImagePart(data=u.data, mime_type=u.mime_type or DEFAULT_MIME_TYPE)
        for u in uploads
    )
    return tuple(parts)
