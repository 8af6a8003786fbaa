import base64

import pytest

from services.exceptions import InferenceError
from services.vision_client import (
    MENU_PARSER_PROMPT,
    SYSTEM_PROMPT,
    MenuVisionClient,
    build_messages,
    message_content,
)
from utils.http_client import JsonResponse


class FakeHttpClient:
    def __init__(self, response: JsonResponse):
        self.response = response
        self.requests = []

    async def post_json(self, url, payload, headers=None, max_retries=3):
        self.requests.append({"url": url, "payload": payload, "headers": headers, "max_retries": max_retries})
        return self.response


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_build_messages_keeps_image_order():
    messages = build_messages([b"first", b"second"])

    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    parts = messages[1]["content"]
    assert parts[0] == {"type": "text", "text": MENU_PARSER_PROMPT}

    urls = [p["image_url"]["url"] for p in parts[1:]]
    assert urls == [
        "data:image/png;base64," + base64.b64encode(b"first").decode(),
        "data:image/png;base64," + base64.b64encode(b"second").decode(),
    ]


@pytest.mark.parametrize(
    "data",
    [{}, {"choices": []}, {"choices": [{}]}, {"choices": [{"message": {"content": None}}]}],
)
def test_message_content_missing(data):
    assert message_content(data) == ""


@pytest.mark.asyncio
async def test_parse_images_posts_completion_request(test_settings):
    http = FakeHttpClient(JsonResponse(data=_completion('{"items": []}')))
    client = MenuVisionClient(test_settings, client=http)

    content = await client.parse_images([b"a", b"b"], "gpt-4o-mini")

    assert content == '{"items": []}'
    sent = http.requests[0]
    assert sent["url"] == "https://api.openai.com/v1/chat/completions"
    assert sent["headers"] == {"Authorization": "Bearer sk-test"}
    assert sent["payload"]["model"] == "gpt-4o-mini"
    assert sent["payload"]["response_format"] == {"type": "json_object"}
    assert sent["payload"]["temperature"] == test_settings.inference_temperature
    assert len(sent["payload"]["messages"][1]["content"]) == 3
    assert sent["max_retries"] == test_settings.inference_max_retries


@pytest.mark.asyncio
async def test_custom_base_url(test_settings):
    settings = test_settings.model_copy(update={"inference_base_url": "http://llm.local/v1/"})
    http = FakeHttpClient(JsonResponse(data=_completion("{}")))

    await MenuVisionClient(settings, client=http).parse_images([b"a"], "m")

    assert http.requests[0]["url"] == "http://llm.local/v1/chat/completions"


@pytest.mark.asyncio
async def test_empty_completion_is_not_an_error(test_settings):
    http = FakeHttpClient(JsonResponse(data={"choices": []}))
    assert await MenuVisionClient(test_settings, client=http).parse_images([b"a"], "m") == ""


@pytest.mark.asyncio
async def test_http_failure_raises(test_settings):
    http = FakeHttpClient(JsonResponse(error="HTTP 401 from api.openai.com: invalid key"))

    with pytest.raises(InferenceError, match="invalid key"):
        await MenuVisionClient(test_settings, client=http).parse_images([b"a"], "m")
