from __future__ import annotations

import openai
from openai import AsyncOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

# Transport-level failures worth another attempt. Bad requests, auth errors and
# invalid model output are not retried.
TRANSIENT_ERRORS = (
    openai.APIConnectionError,  # includes APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
)


def build_async_client(api_key: str, *, base_url: str | None = None, timeout: float = 60.0) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)


@retry(
    wait=wait_exponential(min=1, max=20),
    stop=stop_after_attempt(4),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    reraise=True,
)
async def responses_parse(*, client: AsyncOpenAI, model: str, input_messages: list[dict], text_format, temperature: float):
    """
    Wrapper with retries around client.responses.parse.
    """
    return await client.responses.parse(
        model=model,
        input=input_messages,
        text_format=text_format,
        temperature=temperature,
        store=False,
    )


@retry(
    wait=wait_exponential(min=1, max=20),
    stop=stop_after_attempt(4),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    reraise=True,
)
async def chat_complete(
    *,
    client: AsyncOpenAI,
    model: str,
    messages: list[dict],
    temperature: float,
    max_tokens: int | None = None,
) -> str:
    """
    Plain chat completion, for OpenAI-compatible endpoints without structured output.
    Returns the stripped message text ("" when the model returned nothing).
    """
    kwargs = {"max_tokens": max_tokens} if max_tokens is not None else {}
    resp = await client.chat.completions.create(
        model=model,
        messages=messages,
        temperature=temperature,
        **kwargs,
    )
    if not resp.choices:
        return ""
    return (resp.choices[0].message.content or "").strip()
