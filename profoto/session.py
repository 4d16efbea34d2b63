"""
Per-browser studio state: idle / processing / success / error.
"""
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import GenerationError
from .variations import GenerationResult, VariationOrchestrator, decode_source_image

logger = logging.getLogger(__name__)

MISSING_IMAGE_MESSAGE = "please upload a product image first"
GENERIC_ERROR_MESSAGE = "something went wrong while processing the image"


class AppStatus(str, Enum):
    IDLE = "IDLE"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass
class StudioSession:
    """
    State of one user's studio page.

    A reset or a new generation does not cancel calls already in flight;
    their results are dropped when they arrive for a superseded batch.
    """
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: AppStatus = AppStatus.IDLE
    source_image: Optional[str] = None
    prompt: str = ""
    results: List[GenerationResult] = field(default_factory=list)
    error_message: Optional[str] = None
    batch_id: int = 0

    def load_image(self, data_uri: str) -> None:
        """Store a new source image and clear the previous batch."""
        decode_source_image(data_uri)
        self.source_image = data_uri
        self.results = []
        self.status = AppStatus.IDLE
        self.error_message = None

    def fail(self, message: str) -> None:
        self.status = AppStatus.ERROR
        self.error_message = message

    async def generate(self, orchestrator: VariationOrchestrator, prompt: Optional[str] = None) -> None:
        """Run one batch and move to SUCCESS or ERROR."""
        if prompt is not None:
            self.prompt = prompt

        if not self.source_image:
            self.fail(MISSING_IMAGE_MESSAGE)
            return

        self.batch_id += 1
        batch_id = self.batch_id
        self.status = AppStatus.PROCESSING
        self.error_message = None
        self.results = []

        try:
            results = await orchestrator.generate_all(self.source_image, self.prompt)
        except GenerationError as e:
            if batch_id == self.batch_id:
                self.fail(str(e))
            return
        except Exception as e:
            logger.error(f"Unexpected error in session {self.session_id}: {e}")
            if batch_id == self.batch_id:
                self.fail(GENERIC_ERROR_MESSAGE)
            return

        if batch_id != self.batch_id:
            logger.info(f"Dropping results of superseded batch {batch_id} in session {self.session_id}")
            return

        self.results = results
        self.status = AppStatus.SUCCESS

    def reset(self) -> None:
        """Clear image, results, prompt and error."""
        self.batch_id += 1
        self.source_image = None
        self.results = []
        self.prompt = ""
        self.status = AppStatus.IDLE
        self.error_message = None


class SessionStore:
    """
    In-memory store of studio sessions keyed by session id.

    Only sessions that were written to are kept. Once ``max_sessions`` is
    reached the least recently used session is evicted.
    """

    def __init__(self, max_sessions: int = 256):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, StudioSession]" = OrderedDict()

    def get(self, session_id: Optional[str]) -> StudioSession:
        """Return the stored session for this id, or a fresh unsaved one."""
        if session_id and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return self._sessions[session_id]
        return StudioSession()

    def save(self, session: StudioSession) -> None:
        self._sessions[session.session_id] = session
        self._sessions.move_to_end(session.session_id)
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted least recently used session {evicted_id}")

    def __contains__(self, session_id: Optional[str]) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
