"""Speech recognizer running on a remote client."""

import logging

logger = logging.getLogger(__name__)


class ClientSpeechRecognizer:
    """SpeechRecognizer for clients that run speech-to-text themselves.
    
    Hypotheses arrive over the transport as transcript messages; this adapter
    only tracks ownership of the recognizer for the active session.
    """
    
    def __init__(self, client_id: str = "client"):
        self.client_id = client_id
        self.is_active = False
    
    async def start(self) -> None:
        self.is_active = True
        logger.info(f"Speech recognition started for {self.client_id}")
    
    async def stop(self) -> None:
        if not self.is_active:
            return
        self.is_active = False
        logger.info(f"Speech recognition stopped for {self.client_id}")
