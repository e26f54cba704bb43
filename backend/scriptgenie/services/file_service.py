import logging
import secrets
import string
from pathlib import Path
from typing import Iterator, Union

from elevenlabs import save

logger = logging.getLogger(__name__)

UID_ALPHABET = string.ascii_lowercase + string.digits
OUTPUTS_URL_PREFIX = "/outputs"


def uid(n: int = 12) -> str:
    """Random lowercase alphanumeric identifier used for output file names."""
    return "".join(secrets.choice(UID_ALPHABET) for _ in range(n))


class FileProcessor:
    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def new_voice_filename() -> str:
        return f"voice_{uid()}.mp3"

    @staticmethod
    def public_url(file_name: str) -> str:
        return f"{OUTPUTS_URL_PREFIX}/{file_name}"

    def save_audio(self, audio: Union[bytes, Iterator[bytes]]) -> str:
        """Write an audio payload under a fresh name and return its public URL.

        Files are never cleaned up; every URL handed out stays reachable.
        """
        file_name = self.new_voice_filename()
        file_path = self.output_dir / file_name
        save(audio, str(file_path))
        logger.info("Saved voiceover to %s", file_path)
        return self.public_url(file_name)
