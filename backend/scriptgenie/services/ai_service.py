import asyncio
import json
import logging
from typing import Any, Dict, Optional

from elevenlabs import ElevenLabs
from fastapi import HTTPException
from mistralai import Mistral

from ..config import Settings
from ..models import ScriptOutcome, ScriptRequest, VoiceResult
from ..prompts import build_messages
from .file_service import FileProcessor

logger = logging.getLogger(__name__)

SCRIPT_TEMPERATURE = 0.2
INVALID_JSON_MESSAGE = "Model did not return valid JSON"

# Logical language -> voice mapping; swap in voices available to your account
DEFAULT_VOICE_KEY = "default"
VOICE_BY_LANG = {
    "en": DEFAULT_VOICE_KEY,
    "fr": DEFAULT_VOICE_KEY,
    "ar": DEFAULT_VOICE_KEY,
    "ma": DEFAULT_VOICE_KEY,  # darija, handled via prompt
    "es": DEFAULT_VOICE_KEY,
    "pt": DEFAULT_VOICE_KEY,
}


def pick_voice(language: Optional[str], requested: Optional[str], default_voice: str) -> str:
    """Resolve the voice id: an explicit request wins, otherwise look up the language prefix."""
    if requested:
        return requested
    key = (language or "en")[:2].lower()
    entry = VOICE_BY_LANG.get(key, DEFAULT_VOICE_KEY)
    return default_voice if entry == DEFAULT_VOICE_KEY else entry


def extract_structured(raw: str) -> Optional[Dict[str, Any]]:
    """Best-effort structured extraction of a JSON object from model output.

    Tries the whole text first, then the span between the first '{' and the
    last '}'. Returns None when neither parses to an object.
    """
    candidates = [raw]
    first, last = raw.find("{"), raw.rfind("}")
    if first > -1 and last > first:
        candidates.append(raw[first:last + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _message_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    # Chunked content: keep the text parts only
    return "".join(getattr(chunk, "text", "") or "" for chunk in content)


class AIProcessor:
    def __init__(
        self,
        settings: Settings,
        file_processor: Optional[FileProcessor] = None,
        mistral_client: Optional[Mistral] = None,
        elevenlabs_client: Optional[ElevenLabs] = None,
    ):
        self.mistral_model = settings.MISTRAL_MODEL
        self.mistral_client = mistral_client or Mistral(api_key=settings.MISTRAL_API_KEY)

        self.elevenlabs_client = elevenlabs_client or ElevenLabs(api_key=settings.ELEVEN_API_KEY)
        self.elevenlabs_voice_id = settings.ELEVEN_VOICE_ID
        self.elevenlabs_model = settings.ELEVEN_MODEL
        self.elevenlabs_output_format = settings.ELEVEN_OUTPUT_FORMAT

        self.file_processor = file_processor or FileProcessor(settings.output_dir)

    async def generate_script(self, request: ScriptRequest) -> ScriptOutcome:
        """Ask the completion model for a script and parse its JSON answer.

        An unparseable answer is a normal outcome (ok=False with the raw text);
        only a failed call raises.
        """
        if not request.topic or not request.language:
            raise HTTPException(status_code=400, detail="Missing language or topic")

        try:
            completion = await self.mistral_client.chat.complete_async(
                model=self.mistral_model,
                messages=build_messages(request),
                temperature=SCRIPT_TEMPERATURE,
                max_tokens=request.max_tokens,
            )
        except Exception:
            logger.exception("generate-script error")
            raise HTTPException(status_code=500, detail="Server error")

        raw = ""
        if completion is not None and completion.choices:
            raw = _message_text(completion.choices[0].message.content).strip()

        data = extract_structured(raw)
        if data is None:
            logger.warning("Unparseable script response (%d chars)", len(raw))
            return ScriptOutcome(ok=False, raw=raw, message=INVALID_JSON_MESSAGE)
        return ScriptOutcome(ok=True, data=data)

    async def generate_voiceover(
        self, text: Optional[str], language: Optional[str] = "en", voice: Optional[str] = None
    ) -> VoiceResult:
        """Synthesize text with Eleven Labs and store the MP3 under the outputs directory"""
        if not text:
            raise HTTPException(status_code=400, detail="Missing text")

        voice_id = pick_voice(language, voice, self.elevenlabs_voice_id)

        def _sync_synthesize() -> str:
            audio = self.elevenlabs_client.text_to_speech.convert(
                text=text,
                voice_id=voice_id,
                model_id=self.elevenlabs_model,
                output_format=self.elevenlabs_output_format,
            )
            return self.file_processor.save_audio(audio)

        try:
            url = await asyncio.to_thread(_sync_synthesize)
        except Exception:
            logger.exception("generate-voice error")
            raise HTTPException(status_code=500, detail="TTS error")
        return VoiceResult(url=url)
