"""Single-call chat handler with one round of model-requested tool use."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from recipe_assistant.domain.chat import ChatMessage
from recipe_assistant.domain.tools import ToolCall, ToolResponse
from recipe_assistant.services.conversations import ConversationService
from recipe_assistant.services.intents import GENERAL, classify_request
from recipe_assistant.services.language_model import TextGenerationClient
from recipe_assistant.services.llm_json import extract_json_object
from recipe_assistant.services.prompts import append_tool_result, build_chat_prompt
from recipe_assistant.services.recipes import RecipeService, RecipeStoreError
from recipe_assistant.services.tools import ToolRouter

TOOL_CALL = "tool_call"
CONTEXT_MESSAGE_LIMIT = 10
RECENT_RECIPE_LIMIT = 5

DEFAULT_REPLY = (
    "I'm here to help with your cooking questions! What would you like to know?"
)
TOOL_SUCCESS_FALLBACK = (
    "Based on the information I found, I can help you with your cooking "
    "questions. What would you like to know?"
)
TOOL_FAILURE_FALLBACK = (
    "I had trouble accessing that information, but I'm still here to help "
    "with your cooking questions!"
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatReply:
    """Assistant reply returned to the client."""

    message: str
    type: str
    session_id: str


@dataclass
class ChatService:
    """Answers chat messages using stored context and the tool router."""

    conversation_service: ConversationService
    recipe_service: RecipeService
    tool_router: ToolRouter
    client: TextGenerationClient
    model: str

    async def handle_message(  # noqa: PLR0913
        self,
        user_id: str,
        session_id: str,
        message: str,
        request_type: str | None = None,
        current_recipes: Sequence[dict[str, object]] | None = None,
        current_ingredients: Sequence[dict[str, object]] | None = None,
    ) -> ChatReply:
        """Persist the exchange and return the assistant's reply."""
        self.conversation_service.create_or_update_session(user_id, session_id)
        await self.conversation_service.refresh_summary_if_needed(user_id, session_id)
        self.conversation_service.save_message(
            ChatMessage(
                user_id=user_id,
                session_id=session_id,
                role="user",
                content=message,
                message_type=request_type or GENERAL,
                metadata={
                    "current_ingredients": list(current_ingredients or []),
                    "current_recipes": list(current_recipes or []),
                },
            )
        )

        context = self.conversation_service.get_recent_messages(user_id, session_id)
        summary = self.conversation_service.get_session_summary(user_id, session_id)
        recipe_names = self._recent_recipe_names(user_id)
        request_kind = classify_request(
            message, request_type, context, current_recipes
        )
        prompt = build_chat_prompt(
            user_id=user_id,
            session_id=session_id,
            now=datetime.now(tz=UTC),
            request_kind=request_kind,
            message=message,
            context_messages=[m for m in context if m.role != "system"][
                -CONTEXT_MESSAGE_LIMIT:
            ],
            session_summary=summary,
            current_recipes=current_recipes,
            current_ingredients=current_ingredients,
            recent_recipe_names=recipe_names,
            tool_catalog=ToolRouter.available_tools(),
        )

        parsed = await self._ask(prompt)
        if parsed is None:
            parsed = {"type": GENERAL, "message": DEFAULT_REPLY}
        tool_used: str | None = None
        if parsed.get("type") == TOOL_CALL:
            tool_call = _tool_call_from(parsed)
            tool_used = tool_call.tool
            parsed = await self._answer_with_tool(user_id, prompt, tool_call)

        reply_type = str(parsed.get("type") or GENERAL)
        reply_text = str(parsed.get("message") or DEFAULT_REPLY)
        metadata: dict[str, object] = {"request_kind": request_kind}
        if tool_used is not None:
            metadata["tool_used"] = tool_used
        self.conversation_service.save_message(
            ChatMessage(
                user_id=user_id,
                session_id=session_id,
                role="assistant",
                content=reply_text,
                message_type=reply_type,
                metadata=metadata,
            )
        )
        return ChatReply(message=reply_text, type=reply_type, session_id=session_id)

    async def _answer_with_tool(
        self, user_id: str, prompt: str, tool_call: ToolCall
    ) -> dict[str, object]:
        result = self.tool_router.execute(user_id, tool_call)
        _logger.info(
            "Executed tool for chat",
            extra={"tool": tool_call.tool, "success": result.success},
        )
        follow_up = await self._ask(append_tool_result(prompt, tool_call.tool, result))
        if follow_up is None:
            return {"type": GENERAL, "message": _tool_fallback(result)}
        return follow_up

    async def _ask(self, prompt: str) -> dict[str, object] | None:
        try:
            reply = await self.client.generate(
                model=self.model, messages=[{"role": "user", "content": prompt}]
            )
        except Exception:
            _logger.exception("Chat model call failed")
            return None
        return extract_json_object(reply)

    def _recent_recipe_names(self, user_id: str) -> list[str]:
        try:
            recipes = self.recipe_service.get_user_recipes(
                user_id, limit=RECENT_RECIPE_LIMIT
            )
        except RecipeStoreError:
            return []
        return [recipe.name for recipe in recipes]


def _tool_call_from(parsed: dict[str, object]) -> ToolCall:
    parameters = parsed.get("parameters")
    return ToolCall(
        tool=str(parsed.get("tool") or ""),
        parameters=dict(parameters) if isinstance(parameters, dict) else {},
        description=str(parsed.get("message") or ""),
    )


def _tool_fallback(result: ToolResponse) -> str:
    return TOOL_SUCCESS_FALLBACK if result.success else TOOL_FAILURE_FALLBACK
