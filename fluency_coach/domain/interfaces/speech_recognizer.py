"""Speech recognizer interface."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SpeechRecognizer(Protocol):
    """Protocol for the speech-to-text engine.
    
    The engine itself is a black box: once started it delivers partial and
    final hypotheses to the session controller through its submit methods.
    """
    
    async def start(self) -> None:
        """Begin recognition.
        
        Raises:
            RecognitionError: If the engine cannot be started.
        """
        ...
    
    async def stop(self) -> None:
        """Stop recognition. Calling it when already stopped is a no-op."""
        ...
