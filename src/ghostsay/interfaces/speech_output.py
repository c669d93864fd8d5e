"""Speech Output Interface

This interface defines the contract for text-to-speech implementations.
Any class implementing this interface must provide an async speak() method
that turns already-sanitized text into audible speech and reports whether
it worked.
"""

from abc import ABC, abstractmethod


class ISpeechOutput(ABC):
    """Interface for text-to-speech implementations"""

    @abstractmethod
    async def speak(self, text: str) -> bool:
        """Speak the text and wait until it has been spoken.

        Args:
            text: Sanitized text, passed on as one opaque argument

        Returns:
            True if speech completed successfully, False otherwise.
            Implementations never raise for speech failures.
        """
        pass
