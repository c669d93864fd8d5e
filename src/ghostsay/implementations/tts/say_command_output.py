import asyncio
import logging
from typing import Optional

from ghostsay.interfaces.speech_output import ISpeechOutput
from ghostsay.utils.config import Config

DEFAULT_SAY_EXECUTABLE = "/usr/bin/say"


class SayCommandOutput(ISpeechOutput):
    """
    Speaks text through the operating system's speech executable.

    The text is passed as the only element of the argument vector; no shell is
    involved. Each call spawns its own process, so concurrent requests never
    wait on each other. There is no timeout: a hung executable hangs the
    request that started it.
    """
    def __init__(self, executable: Optional[str] = None):
        if executable is None:
            executable = Config.section("speech").get("executable", DEFAULT_SAY_EXECUTABLE)
        self.executable = executable

    async def speak(self, text: str) -> bool:
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable, text,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logging.error(f"Failed to execute say command ({self.executable}): {e}")
            return False

        returncode = await process.wait()
        if returncode != 0:
            logging.error(f"Say command exited with status {returncode}")
            return False

        logging.info(f"Spoke {len(text)} characters")
        return True
