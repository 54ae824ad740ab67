"""Chat request handling between the transport and the orchestrator."""

import uuid
from typing import Optional

from src.agents.orchestrator import Orchestrator, get_orchestrator
from src.api.request import ChatRequest, ChatResponse
from src.api.validation import validate_files, validate_prompt
from src.content.models import ConversationTurn, Role
from src.session.store import SessionStore, get_session_store
from src.utils.logger import get_logger

logger = get_logger()


class ChatHandlers:
    """Centralized chat request handling."""

    def __init__(
        self,
        orchestrator: Optional[Orchestrator] = None,
        session_store: Optional[SessionStore] = None,
    ):
        """Initialize handlers with the shared orchestrator and session store."""
        self.orchestrator = orchestrator or get_orchestrator()
        self.session_store = session_store or get_session_store()

        logger.info("ChatHandlers initialized")

    async def handle_chat(self, request: ChatRequest) -> ChatResponse:
        """
        Answer one chat request.

        Args:
            request: Parsed request body

        Returns:
            ChatResponse with the answer and the session id

        Raises:
            InvalidRequestError: If the prompt or files fail validation
        """
        prompt = validate_prompt(request.prompt)
        attachments = validate_files(request.files)
        session_id = request.session_id or str(uuid.uuid4())

        logger.info(
            f"Chat request for session {session_id} "
            f"({len(prompt)} chars, {len(attachments)} files)"
        )

        try:
            history = await self.session_store.get(session_id)
        except Exception as e:
            logger.warning(f"Failed to load history for session {session_id}: {e}")
            history = []

        response_text = await self.orchestrator.chat(prompt, history, attachments)

        new_turns = [
            ConversationTurn(role=Role.USER, content=prompt),
            ConversationTurn(role=Role.ASSISTANT, content=response_text),
        ]
        try:
            if not await self.session_store.append(session_id, new_turns):
                logger.warning(f"Chat history for session {session_id} was not saved")
        except Exception as e:
            logger.warning(f"Failed to save chat history for session {session_id}: {e}")

        return ChatResponse(response=response_text, session_id=session_id)

    async def handle_health(self) -> dict:
        """Report service status."""
        return {
            "status": "OK",
            "specialists": self.orchestrator.specialist_names,
        }


# Global handlers instance
_handlers: Optional[ChatHandlers] = None


def get_chat_handlers() -> ChatHandlers:
    """Get or create the global chat handlers."""
    global _handlers
    if _handlers is None:
        _handlers = ChatHandlers()
    return _handlers
