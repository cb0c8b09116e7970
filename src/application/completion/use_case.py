"""Completion use case - context-augmented chat/generate requests to Ollama."""

import logging
from collections.abc import AsyncIterator, Callable

from sse_starlette.sse import ServerSentEvent

from src.application.completion.dto import ChatRequest, EmbeddingRequest, GenerateRequest
from src.application.completion.prompting import add_context_to_messages, add_context_to_prompt
from src.application.retrieval.engine import RetrievalEngine
from src.application.streaming.transcoder import Dialect, StreamTranscoder
from src.domain.entities.completions import ChatCompletion, chat_completion_id, chat_completion_payload
from src.domain.errors import MissingRequiredFieldError, StoreUninitializedError
from src.domain.ports.document_store import DocumentStorePort
from src.domain.ports.llm import LLMPort

logger = logging.getLogger(__name__)

# Optional /api/generate fields forwarded when present
_GENERATE_PASSTHROUGH = ("system", "template", "context", "options")


class CompletionUseCase:
    """Builds upstream payloads with code context and dispatches them.

    prepare_* methods do all validation and retrieval, so errors surface
    before a streaming response has started.
    """

    def __init__(
        self,
        llm: LLMPort,
        retrieval: RetrievalEngine,
        store_getter: Callable[[], DocumentStorePort | None],
        default_model: str,
        embedding_model: str,
    ) -> None:
        self._llm = llm
        self._retrieval = retrieval
        self._store_getter = store_getter
        self._default_model = default_model
        self._embedding_model = embedding_model

    def model_for(self, requested: str | None) -> str:
        return requested or self._default_model

    async def prepare_chat(self, request: ChatRequest) -> dict:
        """Chat payload with retrieved context. The store must be initialized."""
        if not request.messages:
            raise MissingRequiredFieldError("messages")
        store = self._store_getter()
        if store is None:
            raise StoreUninitializedError()

        user_message = next((m.content for m in request.messages if m.role == "user"), "")
        code_context = await self._retrieval.retrieve(store, user_message)

        payload: dict = {
            "model": self.model_for(request.model),
            "messages": add_context_to_messages(request.messages, code_context),
        }
        if request.options:
            payload["options"] = request.options
        return payload

    async def prepare_generate(self, request: GenerateRequest) -> dict:
        """Generate payload; context is added only when retrieval succeeds."""
        if not request.prompt:
            raise MissingRequiredFieldError("prompt")

        prompt = request.prompt
        store = self._store_getter()
        if store is not None:
            try:
                code_context = await self._retrieval.retrieve(store, request.prompt)
                prompt = add_context_to_prompt(request.prompt, code_context)
            except StoreUninitializedError as e:
                logger.warning("Adding code context failed, using original prompt: %s", e)

        payload: dict = {"model": self.model_for(request.model), "prompt": prompt}
        for key in _GENERATE_PASSTHROUGH:
            value = getattr(request, key)
            if value:
                payload[key] = value
        return payload

    def stream_chat(self, payload: dict) -> AsyncIterator[ServerSentEvent]:
        """chat.completion.chunk events for a prepared chat payload."""
        transcoder = StreamTranscoder(Dialect.CHAT, payload["model"])
        return transcoder.transcode(self._llm.stream_chat(payload))

    def stream_generate(self, payload: dict) -> AsyncIterator[ServerSentEvent]:
        """text_completion.chunk events for a prepared generate payload."""
        transcoder = StreamTranscoder(Dialect.GENERATE, payload["model"])
        return transcoder.transcode(self._llm.stream_generate(payload))

    async def chat(self, payload: dict) -> dict:
        """Ollama's own chat response."""
        return await self._llm.chat(payload)

    async def chat_completion(self, payload: dict) -> dict:
        """Chat response converted to an OpenAI chat.completion."""
        data = await self._llm.chat(payload)
        message = data.get("message") or {}
        completion = ChatCompletion(
            id=chat_completion_id(),
            model=payload["model"],
            role=message.get("role") or "assistant",
            content=message.get("content") or "",
        )
        return chat_completion_payload(completion)

    async def generate(self, payload: dict) -> dict:
        """Ollama's own generate response."""
        return await self._llm.generate(payload)

    async def embeddings(self, request: EmbeddingRequest) -> dict:
        """Pass-through embedding request."""
        if not request.prompt:
            raise MissingRequiredFieldError("prompt")
        return await self._llm.embeddings(request.model or self._embedding_model, request.prompt)

    async def context_for(self, prompt: str | None) -> str:
        """Retrieval result for a prompt, as it would be injected."""
        if not prompt:
            raise MissingRequiredFieldError("prompt")
        return await self._retrieval.retrieve(self._store_getter(), prompt)
