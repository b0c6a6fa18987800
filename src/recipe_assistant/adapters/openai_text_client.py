"""OpenAI Responses API client for text and image prompts."""

from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from recipe_assistant.services.language_model import ModelMessage, TextGenerationClient


@dataclass
class OpenAITextClient(TextGenerationClient):
    """Text generation client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls,
        api_key: str,
        timeout_seconds: float = 60.0,
        reasoning_effort: str | None = None,
        store: bool = False,
    ) -> "OpenAITextClient":
        """Create an OpenAI text client with a bounded request timeout."""
        http_client = httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))
        return cls(
            client=AsyncOpenAI(api_key=api_key, http_client=http_client),
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def generate(
        self,
        *,
        model: str,
        messages: list[ModelMessage],
        image_data_url: str | None = None,
    ) -> str:
        """Call OpenAI Responses API and return the output text."""
        input_items: list[dict[str, object]] = [
            {"role": message["role"], "content": message["content"]}
            for message in messages
        ]
        if image_data_url is not None:
            last = input_items[-1] if input_items else {"role": "user", "content": ""}
            input_items[-1:] = [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": str(last["content"])},
                        {"type": "input_image", "image_url": image_data_url},
                    ],
                }
            ]
        request_payload: dict[str, object] = {
            "model": model,
            "input": input_items,
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        await self.client.close()
