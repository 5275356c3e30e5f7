"""Shared utilities for talentmatch."""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

from langchain_groq import ChatGroq

from talentmatch.config import GROQ_API_KEY, GROQ_MODEL, LLM_TEMPERATURE
from talentmatch.errors import ProviderError, ProviderTimeoutError

T = TypeVar("T")

# Provider calls run here so a caller can stop waiting on a hung request
_provider_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="provider")


class LLMConfigurationError(Exception):
    """Raised when LLM is not properly configured."""

    pass


def check_llm_configured() -> None:
    """Check if Groq API key is configured.

    Raises:
        LLMConfigurationError: If GROQ_API_KEY is not set.
    """
    if not GROQ_API_KEY:
        raise LLMConfigurationError(
            "GROQ_API_KEY environment variable is not set. "
            "Please create a .env file with your Groq API key. "
            "Get your free API key at https://console.groq.com"
        )


def create_llm() -> ChatGroq:
    """Create a Groq chat model from the configured settings."""
    return ChatGroq(
        model=GROQ_MODEL,
        temperature=LLM_TEMPERATURE,
        api_key=GROQ_API_KEY,
    )


def call_with_timeout(func: Callable[..., T], timeout: float | None, *args, **kwargs) -> T:
    """Run a provider call, giving up after `timeout` seconds.

    The worker thread is not interrupted on timeout; its result is discarded.

    Args:
        func: Callable performing the provider request.
        timeout: Seconds to wait, or None to wait indefinitely.

    Returns:
        Whatever `func` returns.

    Raises:
        ProviderTimeoutError: If the call did not finish in time.
        ProviderError: If the call raised; the original error is chained.
    """
    future = _provider_executor.submit(func, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as e:
        future.cancel()
        raise ProviderTimeoutError(
            f"Provider call {getattr(func, '__name__', func)!r} timed out after {timeout}s"
        ) from e
    except ProviderError:
        raise
    except Exception as e:
        raise ProviderError(f"Provider call failed: {e}") from e
