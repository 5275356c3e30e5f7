"""Tests for the embedding and document analysis clients."""

import time
from unittest.mock import patch

import numpy as np
import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from talentmatch.embeddings import FastEmbedClient, GroqDocumentClient
from talentmatch.errors import ProviderError, ProviderTimeoutError
from talentmatch.utils import call_with_timeout


def _fake_embed(texts):
    return (np.array([float(len(text)), 1.0]) for text in texts)


class TestFastEmbedClient:
    def test_embed_text_returns_list(self):
        with patch("talentmatch.embeddings.fastembed_client.TextEmbedding") as mock_model_class:
            mock_model_class.return_value.embed.side_effect = _fake_embed
            client = FastEmbedClient(model_name="test-model")

            result = client.embed_text("hello")

        assert result == [5.0, 1.0]
        mock_model_class.assert_called_once_with("test-model")

    def test_model_loaded_once(self):
        with patch("talentmatch.embeddings.fastembed_client.TextEmbedding") as mock_model_class:
            mock_model_class.return_value.embed.side_effect = _fake_embed
            client = FastEmbedClient()

            client.embed_text("one")
            client.embed_text("two")

        assert mock_model_class.call_count == 1

    def test_embed_texts_batch(self):
        with patch("talentmatch.embeddings.fastembed_client.TextEmbedding") as mock_model_class:
            mock_model_class.return_value.embed.side_effect = _fake_embed
            client = FastEmbedClient()

            result = client.embed_texts_batch(["a", "abc"])

        assert result == [[1.0, 1.0], [3.0, 1.0]]

    def test_embed_texts_batch_empty(self):
        assert FastEmbedClient().embed_texts_batch([]) == []

    @pytest.mark.parametrize("text", ["", "   \n"])
    def test_empty_text_raises(self, text):
        with pytest.raises(ProviderError, match="empty"):
            FastEmbedClient().embed_text(text)

    def test_model_failure_raises_provider_error(self):
        with patch("talentmatch.embeddings.fastembed_client.TextEmbedding") as mock_model_class:
            mock_model_class.side_effect = RuntimeError("download failed")

            with pytest.raises(ProviderError, match="download failed"):
                FastEmbedClient().embed_text("hello")

    def test_slow_model_times_out(self):
        def slow_embed(texts):
            time.sleep(1)
            return _fake_embed(texts)

        with patch("talentmatch.embeddings.fastembed_client.TextEmbedding") as mock_model_class:
            mock_model_class.return_value.embed.side_effect = slow_embed

            with pytest.raises(ProviderTimeoutError):
                FastEmbedClient(timeout=0.05).embed_text("hello")


class TestCallWithTimeout:
    def test_returns_result(self):
        assert call_with_timeout(lambda x: x * 2, 1, 21) == 42

    def test_wraps_exceptions(self):
        def boom():
            raise KeyError("missing")

        with pytest.raises(ProviderError) as exc_info:
            call_with_timeout(boom, 1)

        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_provider_errors_pass_through(self):
        def fail():
            raise ProviderTimeoutError("upstream timeout")

        with pytest.raises(ProviderTimeoutError, match="upstream timeout"):
            call_with_timeout(fail, 1)


class TestGroqDocumentClient:
    def test_session_lifecycle(self):
        client = GroqDocumentClient(llm=FakeListChatModel(responses=['{"strengths": []}']))

        session_id = client.open_session("Jane Doe, Python developer")
        answer = client.analyze(session_id, "Compare with the job")
        client.close_session(session_id)

        assert answer == '{"strengths": []}'

    def test_document_and_prompt_reach_the_model(self):
        seen = []

        def record(prompt_value):
            seen.append(prompt_value.to_string())
            return "ok"

        client = GroqDocumentClient(llm=RunnableLambda(record))
        session_id = client.open_session("Jane Doe, Python developer")

        client.analyze(session_id, "Compare with the Data Engineer job")

        assert "Jane Doe, Python developer" in seen[0]
        assert "Compare with the Data Engineer job" in seen[0]

    def test_sessions_are_independent(self):
        client = GroqDocumentClient(llm=FakeListChatModel(responses=["a"]))

        first = client.open_session("cv one")
        second = client.open_session("cv two")
        client.close_session(first)

        assert first != second
        assert client.analyze(second, "prompt") == "a"

    def test_unknown_session_raises(self):
        client = GroqDocumentClient(llm=FakeListChatModel(responses=["a"]))

        with pytest.raises(ProviderError, match="Unknown analysis session"):
            client.analyze("nope", "prompt")

    def test_closing_twice_raises(self):
        client = GroqDocumentClient(llm=FakeListChatModel(responses=["a"]))
        session_id = client.open_session("cv")
        client.close_session(session_id)

        with pytest.raises(ProviderError):
            client.close_session(session_id)

    def test_model_error_raises_provider_error(self):
        def fail(_):
            raise ConnectionError("rate limited")

        client = GroqDocumentClient(llm=RunnableLambda(fail))
        session_id = client.open_session("cv")

        with pytest.raises(ProviderError, match="rate limited"):
            client.analyze(session_id, "prompt")

    def test_slow_model_times_out(self):
        def slow(_):
            time.sleep(1)
            return "late"

        client = GroqDocumentClient(llm=RunnableLambda(slow), timeout=0.05)
        session_id = client.open_session("cv")

        with pytest.raises(ProviderTimeoutError):
            client.analyze(session_id, "prompt")

    def test_llm_created_lazily(self):
        with patch("talentmatch.embeddings.document_client.create_llm") as mock_create:
            mock_create.return_value = FakeListChatModel(responses=["a"])
            client = GroqDocumentClient()

            assert mock_create.call_count == 0
            session_id = client.open_session("cv")
            client.analyze(session_id, "prompt")

        mock_create.assert_called_once()
