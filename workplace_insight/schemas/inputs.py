from pydantic import BaseModel, Field
from typing import Optional

DEFAULT_MIME_TYPE = "image/jpeg"

MAX_FILES = 20
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

RELATION_MAX_CHARS = 300
EXTRA_TEXT_MAX_CHARS = 500


class ImageUpload(BaseModel):
    data: bytes
    mime_type: str = DEFAULT_MIME_TYPE
    filename: Optional[str] = None


UploadSet = list[ImageUpload]


class FormFields(BaseModel):
    stage: Optional[str] = None
    age_range: Optional[str] = None
    gender_pref: Optional[str] = None
    goal: Optional[str] = None
    context: Optional[str] = None
    extra_text: Optional[str] = None
    relation: Optional[str] = None

    @property
    def text_only(self) -> bool:
        """True when the caller supplied usable free text."""
        return bool((self.extra_text or "").strip())

    @property
    def relation_excerpt(self) -> str:
        return (self.relation or "")[:RELATION_MAX_CHARS]

    @property
    def extra_text_excerpt(self) -> str:
        return (self.extra_text or "")[:EXTRA_TEXT_MAX_CHARS]


class HealthResponse(BaseModel):
    ok: bool = True
    has_key: bool
    has_model: bool
    port: int = Field(ge=0)
