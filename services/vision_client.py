"""
Vision LLM client for reading menu screenshots.

Sends all tiles of one capture, in reading order, to an OpenAI-compatible
chat-completions endpoint and returns the raw JSON text of the answer.
Interpreting that text is the normalizer's job.
"""
import base64
import logging
import time
from typing import Any, Dict, List, Optional, Protocol, Sequence

from config import Settings, settings as default_settings
from services.exceptions import InferenceError
from utils.http_client import HttpClient, http_client

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = "Return accurate, structured data only."

MENU_PARSER_PROMPT = """You are a precise menu parser. Extract menu items from the image(s).
Return ONLY JSON:
{
  "items": [
    { "item": "Latte", "size": "12 oz", "price": 4.25, "description": "Espresso with steamed milk", "currency": "USD" }
  ]
}
Rules:
- One row per size/price (split multi-size entries).
- Price must be a number (no currency symbol).
- Keep names concise; do not merge multiple items.
- Include description only if clearly tied to the item; else "".
- Currency "" if unknown."""


class VisionInference(Protocol):
    """Images + instruction in, JSON text out."""

    async def parse_images(self, images: Sequence[bytes], model: str) -> str: ...


def png_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def build_messages(images: Sequence[bytes], instruction: str = MENU_PARSER_PROMPT) -> List[Dict[str, Any]]:
    """Chat messages with the instruction followed by every image in order."""
    content: List[Dict[str, Any]] = [{"type": "text", "text": instruction}]
    for png in images:
        content.append({"type": "image_url", "image_url": {"url": png_data_url(png)}})

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]


def message_content(data: Dict[str, Any]) -> str:
    """Pull ``choices[0].message.content`` out of a completion, or ""."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


class MenuVisionClient:
    """Chat-completions client for menu screenshots."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        client: Optional[HttpClient] = None,
    ):
        self._config = config or default_settings
        self._client = client or http_client

    @property
    def endpoint(self) -> str:
        return self._config.inference_base_url.rstrip("/") + "/chat/completions"

    async def parse_images(self, images: Sequence[bytes], model: str) -> str:
        """
        Ask the model to read menu items from the images.

        Returns:
            Message content of the first choice ("" when the service
            answered without one)

        Raises:
            InferenceError: no usable HTTP response
        """
        payload = {
            "model": model,
            "response_format": {"type": "json_object"},
            "temperature": self._config.inference_temperature,
            "messages": build_messages(images),
        }
        headers = {"Authorization": f"Bearer {self._config.openai_api_key}"}

        logger.info(f"[VISION] Sending {len(images)} image(s) to {model}")
        started = time.monotonic()

        response = await self._client.post_json(
            self.endpoint,
            payload,
            headers=headers,
            max_retries=self._config.inference_max_retries,
        )
        if not response.ok:
            raise InferenceError(f"Inference call to {model} failed: {response.error}")

        content = message_content(response.data)
        logger.info(
            f"[VISION] {model} answered {len(content)} chars "
            f"in {time.monotonic() - started:.1f}s"
        )
        return content
