# backend/scriptgenie/models.py
import json
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, field_validator


class FreeTextRequest(BaseModel):
    """Request body whose text fields take any JSON scalar, rendered as it would appear in JSON."""

    @field_validator(
        "language", "niche", "topic", "tone", "audience", "text", "voice",
        mode="before", check_fields=False,
    )
    @classmethod
    def scalar_to_text(cls, value: Any) -> Any:
        if isinstance(value, (bool, int, float)):
            return json.dumps(value)
        return value


class ScriptRequest(FreeTextRequest):
    language: Optional[str] = None
    niche: Optional[str] = None
    topic: Optional[str] = None
    tone: Optional[str] = None
    audience: Optional[str] = None
    max_tokens: int = 1200


class VoiceRequest(FreeTextRequest):
    text: Optional[str] = None
    language: Optional[str] = "en"
    voice: Optional[str] = None


class GenerateRequest(FreeTextRequest):
    language: Optional[str] = None
    niche: Optional[str] = None
    topic: Optional[str] = None
    tone: Optional[str] = None
    audience: Optional[str] = None
    voice: Optional[str] = None

    def script_request(self) -> ScriptRequest:
        return ScriptRequest(**self.model_dump(exclude={"voice"}))


class ScriptOutcome(BaseModel):
    ok: bool
    data: Optional[Dict[str, Any]] = None
    raw: Optional[str] = None
    message: Optional[str] = None

    def envelope(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "raw": self.raw, "message": self.message}


class VoiceResult(BaseModel):
    url: str


class PaymentStatus(BaseModel):
    status: Literal["disabled", "todo"]
    reason: Optional[str] = None
    message: Optional[str] = None
