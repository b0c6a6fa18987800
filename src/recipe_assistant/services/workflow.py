"""Streaming assistant workflow with progress reporting."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

from recipe_assistant.domain.chat import ChatMessage
from recipe_assistant.domain.preferences import UserPreferences
from recipe_assistant.domain.progress import ProgressEvent
from recipe_assistant.domain.recipes import SourceIngredient
from recipe_assistant.services.conversations import ConversationService
from recipe_assistant.services.intents import GENERAL, needs_older_context
from recipe_assistant.services.language_model import ModelMessage, TextGenerationClient
from recipe_assistant.services.preferences import PreferenceService
from recipe_assistant.services.prompts import build_workflow_system_prompt

RECENT_CONTEXT_HOURS = 2
OLDER_CONTEXT_LIMIT = 20
GENERATION_ERROR = "Failed to generate response"
APOLOGY = "I apologize, but I couldn't generate a response."
PIPELINE_ERROR = "Failed to process message"

_logger = logging.getLogger(__name__)


@dataclass
class WorkflowState:
    """Mutable state threaded through the workflow steps."""

    user_id: str
    session_id: str
    messages: list[ChatMessage]
    ingredients: list[SourceIngredient] = field(default_factory=list)
    preferences: UserPreferences | None = None
    context: list[ChatMessage] = field(default_factory=list)
    needs_older_context: bool = False
    current_step: str = ""
    progress: int = 0
    error: str | None = None

    @property
    def last_message(self) -> ChatMessage:
        return self.messages[-1]

    def reply(self) -> str:
        """Return the assistant reply, or the apology when none was produced."""
        if len(self.messages) > 1 and self.messages[-1].role == "assistant":
            return self.messages[-1].content
        return APOLOGY


Step = Callable[[WorkflowState], Awaitable[WorkflowState]]


@dataclass
class RecipeWorkflow:
    """Runs the fixed preference-context-generate-save pipeline."""

    conversation_service: ConversationService
    preference_service: PreferenceService
    client: TextGenerationClient
    model: str

    def _leading_steps(self) -> list[tuple[str, int, str, Step]]:
        return [
            (
                "load_preferences",
                10,
                "Loading your preferences...",
                self.load_preferences,
            ),
            ("load_context", 30, "Loading conversation context...", self.load_context),
            (
                "check_context_need",
                50,
                "Checking if more context is needed...",
                self.check_context_need,
            ),
        ]

    async def stream(
        self,
        user_id: str,
        session_id: str,
        message: str,
        ingredients: Sequence[SourceIngredient] = (),
    ) -> AsyncIterator[ProgressEvent]:
        """Run the workflow, yielding progress and one terminal event."""
        state = WorkflowState(
            user_id=user_id,
            session_id=session_id,
            messages=[
                ChatMessage(
                    user_id=user_id,
                    session_id=session_id,
                    role="user",
                    content=message,
                )
            ],
            ingredients=list(ingredients),
        )
        try:
            for name, progress, status, step in self._leading_steps():
                yield ProgressEvent(step=status, progress=progress)
                state = await self._run_step(state, name, progress, step)
            if state.needs_older_context:
                yield ProgressEvent(step="Loading older conversations...", progress=65)
                state = await self._run_step(
                    state, "load_older_context", 65, self.load_older_context
                )
            yield ProgressEvent(step="Generating response...", progress=80)
            state = await self._run_step(
                state, "generate_response", 80, self.generate_response
            )
            yield ProgressEvent(step="Saving conversation...", progress=95)
            state = await self._run_step(state, "save_response", 95, self.save_response)
        except Exception:
            _logger.exception("Workflow crashed", extra={"session_id": session_id})
            yield ProgressEvent(
                step="Error", progress=100, done=True, error=PIPELINE_ERROR
            )
            return
        yield ProgressEvent(
            step="Complete",
            progress=100,
            done=True,
            payload={"response": state.reply()},
        )

    async def execute(
        self,
        user_id: str,
        session_id: str,
        message: str,
        ingredients: Sequence[SourceIngredient] = (),
    ) -> str:
        """Run the workflow to completion and return the reply text."""
        final: ProgressEvent | None = None
        async for event in self.stream(user_id, session_id, message, ingredients):
            final = event
        if final is None or final.error is not None:
            return APOLOGY
        return str(final.payload.get("response", APOLOGY))

    async def _run_step(
        self, state: WorkflowState, name: str, progress: int, step: Step
    ) -> WorkflowState:
        state = replace(state, current_step=name, progress=progress)
        state = await step(state)
        _logger.debug(
            "Workflow step finished",
            extra={"step": name, "outcome": state.current_step},
        )
        return state

    async def load_preferences(self, state: WorkflowState) -> WorkflowState:
        """Attach the user's saved preferences, if any."""
        try:
            preferences = self.preference_service.get_preferences(state.user_id)
        except Exception:
            _logger.exception("Failed to load preferences")
            return replace(state, current_step="Preferences load failed")
        return replace(
            state, preferences=preferences, current_step="Preferences loaded"
        )

    async def load_context(self, state: WorkflowState) -> WorkflowState:
        """Attach the last two hours of conversation."""
        try:
            context = self.conversation_service.get_recent_messages(
                state.user_id, state.session_id, hours_back=RECENT_CONTEXT_HOURS
            )
        except Exception:
            _logger.exception("Failed to load context")
            return replace(state, context=[], current_step="Context load failed")
        return replace(state, context=context, current_step="Context loaded")

    async def check_context_need(self, state: WorkflowState) -> WorkflowState:
        """Decide whether older conversation is needed."""
        return replace(
            state,
            needs_older_context=needs_older_context(state.last_message.content),
            current_step="Context analysis complete",
        )

    async def load_older_context(self, state: WorkflowState) -> WorkflowState:
        """Prepend messages from before the recent window."""
        before = datetime.now(tz=UTC) - timedelta(hours=RECENT_CONTEXT_HOURS)
        try:
            older = self.conversation_service.get_older_messages(
                state.user_id, state.session_id, before, limit=OLDER_CONTEXT_LIMIT
            )
        except Exception:
            _logger.exception("Failed to load older context")
            return replace(state, current_step="Older context load failed")
        return replace(
            state,
            context=[*older, *state.context],
            current_step="Extended context loaded",
        )

    async def generate_response(self, state: WorkflowState) -> WorkflowState:
        """Ask the model for a reply and append it to the messages."""
        system_prompt = build_workflow_system_prompt(
            state.user_id,
            datetime.now(tz=UTC),
            state.preferences,
            state.ingredients,
        )
        messages: list[ModelMessage] = [{"role": "system", "content": system_prompt}]
        messages += [
            {"role": m.role, "content": m.content}
            for m in state.context
            if m.role in ("user", "assistant")
        ]
        messages.append({"role": "user", "content": state.last_message.content})
        try:
            reply = await self.client.generate(model=self.model, messages=messages)
        except Exception:
            _logger.exception("Failed to generate response")
            return replace(
                state,
                error=GENERATION_ERROR,
                current_step="Response generation failed",
            )
        assistant = ChatMessage(
            user_id=state.user_id,
            session_id=state.session_id,
            role="assistant",
            content=reply,
        )
        return replace(
            state,
            messages=[*state.messages, assistant],
            current_step="Response generated",
        )

    async def save_response(self, state: WorkflowState) -> WorkflowState:
        """Persist the user message and the assistant reply."""
        try:
            self.conversation_service.create_or_update_session(
                state.user_id, state.session_id
            )
            user_message = state.messages[0]
            self.conversation_service.save_message(
                replace(user_message, message_type=GENERAL)
            )
            if state.error is None and state.last_message.role == "assistant":
                self.conversation_service.save_message(
                    replace(state.last_message, message_type=GENERAL)
                )
        except Exception:
            _logger.exception(
                "Failed to save conversation", extra={"session_id": state.session_id}
            )
            return replace(state, current_step="Save failed")
        return replace(state, current_step="Complete")
