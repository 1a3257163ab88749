from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
import logging

from openai import OpenAI

from ..config import OpenAISettings, get_settings
from ..models.user import User
from ..schemas.chat import ChatMessage
from .chat_tools import ChatToolRouter
from .errors import ServiceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are Tempora, an assistant that helps the signed-in user inspect and change their schedules and events.

Rules:
- Call the provided tools whenever you need real data. Never guess IDs or invent schedule contents.
- List schedules before referring to one, and list the relevant events before updating or deleting them.
- For new events, confirm the target schedule and make sure every time slot ends after it starts.
- Shared events and friend calendars are only available for confirmed friends; use list_friends to find them.
- When a tool returns an error, fix the request or ask the user for what is missing.
- If the user has not given enough information (schedule, time window and so on) ask a follow-up question.
- Use ISO-8601 timestamps in UTC and keep answers short. Finish with a summary of what you did or still need."""

FALLBACK_REPLY = "I could not generate a response."


class ChatServiceError(ServiceError):
    """Base exception for chat service errors"""

    pass


class AssistantUnavailableError(ChatServiceError):
    """The language model provider is not configured"""

    pass


def create_openai_client(settings: Optional[OpenAISettings] = None) -> OpenAI:
    settings = settings or get_settings().openai
    if not settings.is_configured:
        raise AssistantUnavailableError("The assistant is not configured.")
    return OpenAI(api_key=settings.api_key)


class ChatService:
    def __init__(
        self,
        db: Session,
        client: Any,
        settings: Optional[OpenAISettings] = None,
        max_tool_iterations: Optional[int] = None,
    ):
        self.db = db
        self.client = client
        self.settings = settings or get_settings().openai
        self.max_tool_iterations = (
            max_tool_iterations or get_settings().chat_max_tool_iterations
        )

    def reply(self, user: User, messages: List[ChatMessage]) -> Dict[str, str]:
        """Run the tool loop for one turn and return the assistant's message"""
        router = ChatToolRouter(self.db, user)
        tools = router.tool_specs()

        conversation: List[Dict[str, Any]] = [
            {"role": "system", "content": SYSTEM_PROMPT}
        ] + [{"role": m.role, "content": m.content} for m in messages]

        for iteration in range(self.max_tool_iterations):
            message = self._complete(conversation, tools)
            tool_calls = list(message.tool_calls or [])

            if not tool_calls:
                return self._assistant_message(message.content)

            logger.info(
                f"Chat iteration {iteration} for user {user.id}: "
                f"{[call.function.name for call in tool_calls]}"
            )

            conversation.append(
                {
                    "role": "assistant",
                    "content": message.content or "",
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in tool_calls
                    ],
                }
            )

            # Calls run in order; later ones may depend on earlier writes
            for call in tool_calls:
                conversation.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": router.execute(
                            call.function.name, call.function.arguments
                        ),
                    }
                )

        logger.warning(
            f"Chat for user {user.id} hit {self.max_tool_iterations} tool iterations"
        )
        final = self._complete(conversation, tools=None)
        return self._assistant_message(final.content)

    def _complete(self, conversation: List[Dict[str, Any]], tools: Optional[list]):
        params: Dict[str, Any] = {
            "model": self.settings.model,
            "messages": conversation,
        }
        if tools:
            params["tools"] = tools
        if self.settings.max_completion_tokens:
            params["max_completion_tokens"] = self.settings.max_completion_tokens
        if self.settings.reasoning_effort:
            params["reasoning_effort"] = self.settings.reasoning_effort

        response = self.client.chat.completions.create(**params)
        return response.choices[0].message

    @staticmethod
    def _assistant_message(content: Any) -> Dict[str, str]:
        return {"role": "assistant", "content": normalize_content(content) or FALLBACK_REPLY}


def normalize_content(content: Any) -> str:
    """Plain text from a string or a list of content parts"""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "\n".join(part for part in parts if part)
    return ""
