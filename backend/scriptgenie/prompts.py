from typing import Dict, List, Optional

from .models import ScriptRequest

SYSTEM_PROMPT = """You are ScriptGenie, an expert AI for writing YouTube scripts that rank in search.
You produce JSON ONLY with fields: title, description, script, short_script.
Rules:
- The 'title' must include the target keyword naturally.
- The 'description' should be 1-2 lines with the main keyword in the first sentence.
- The 'script' must start with a 5-10 second HOOK, then 3 clear sections, then a CTA that mentions watching a related video.
- The 'short_script' is a 30-45 second condensed version with a punchy opening.
- Write in the EXACT language requested, including punctuation and numerals as common for that language.
- If language='darija', write in Moroccan Arabic (Darija) using Arabic characters and common colloquial words."""

CONSTRAINTS = (
    "Include one specific example, and include an internal CTA that references a related video "
    "using a placeholder [RELATED_VIDEO_TITLE]. Output JSON only."
)


def build_user_prompt(
    language: Optional[str] = None,
    niche: Optional[str] = None,
    topic: Optional[str] = None,
    tone: Optional[str] = None,
    audience: Optional[str] = None,
) -> str:
    """Render the per-request instruction. Empty fields fall back to generic values."""
    return "\n".join([
        f"Language: {language or 'en'}",
        f"Niche: {niche or 'general'}",
        f"Topic: {topic or 'useful topic'}",
        f"Tone: {tone or 'friendly'}",
        f"Audience: {audience or 'beginners'}",
        f"Constraints: {CONSTRAINTS}",
    ])


def build_messages(request: ScriptRequest) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": build_user_prompt(
                language=request.language,
                niche=request.niche,
                topic=request.topic,
                tone=request.tone,
                audience=request.audience,
            ),
        },
    ]
