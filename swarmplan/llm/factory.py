"""LLM factory: returns a LangChain BaseChatModel backed by LiteLLM."""

from __future__ import annotations

from functools import lru_cache

from langchain_core.language_models import BaseChatModel


@lru_cache(maxsize=32)
def get_llm(
    model_name: str = "ollama/llama3.2:3b",
    temperature: float = 0.0,
    max_tokens: int | None = None,
    api_base: str | None = None,
) -> BaseChatModel:
    """Return a cached LangChain chat model via LiteLLM.

    Supports any model string that LiteLLM understands:
      - "ollama/llama3.2:3b" / "ollama/phi3:mini"
      - "gpt-4o" / "gpt-4o-mini"
      - etc.
    """
    from langchain_litellm import ChatLiteLLM

    kwargs: dict[str, object] = {"model": model_name, "temperature": temperature}
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    if api_base:
        kwargs["api_base"] = api_base
    return ChatLiteLLM(**kwargs)  # type: ignore[return-value]
