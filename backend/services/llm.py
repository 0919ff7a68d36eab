# backend/services/llm.py
from __future__ import annotations

import logging
from typing import Optional

import openai
from fastapi import Request
from openai import OpenAI

from ..config import settings
from ..errors import LLMAuthenticationError, LLMError

logger = logging.getLogger("llm")


class LLMClient:
    """
    One prompt in, generated text out. No retries, no streaming; the caller
    decides what a failure means for the user.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout_s: Optional[int] = None,
    ):
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model or settings.MODEL_NAME
        self.max_tokens = max_tokens or settings.MAX_TOKENS
        self.temperature = settings.TEMPERATURE if temperature is None else float(temperature)
        self.timeout_s = timeout_s or settings.LLM_TIMEOUT_S
        self._client: Optional[OpenAI] = None

    def _get_client(self) -> OpenAI:
        # built lazily so the app can start without a key
        if self._client is None:
            if not self.api_key:
                raise LLMAuthenticationError("OPENAI_API_KEY missing")
            self._client = OpenAI(api_key=self.api_key).with_options(timeout=self.timeout_s)
        return self._client

    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        client = self._get_client()
        use_model = model or self.model
        logger.info(f"[OpenAI] model={use_model} max_tokens={self.max_tokens} temp={self.temperature} prompt_chars={len(prompt)}")
        try:
            resp = client.chat.completions.create(
                model=use_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.AuthenticationError as e:
            logger.error(f"[OpenAI] authentication error: {e}")
            raise LLMAuthenticationError(f"authentication failed: {e}") from e
        except openai.OpenAIError as e:
            logger.error(f"[OpenAI] error: {e}")
            raise LLMError(f"openai_error: {e}") from e
        return resp.choices[0].message.content or ""


def get_llm(request: Request) -> LLMClient:
    return request.app.state.llm
