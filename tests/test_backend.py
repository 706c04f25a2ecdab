from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from personal_kb_assistant.backend import GenerationError, OpenAIBackend


def _response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_generate_returns_stripped_text():
    client = MagicMock()
    client.chat.completions.create.return_value = _response("  In 2019.  ")
    backend = OpenAIBackend(model="gpt-test", client=client)

    assert backend.generate("When?") == "In 2019."
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["messages"][-1] == {"role": "user", "content": "When?"}


def test_provider_error_becomes_generation_error():
    client = MagicMock()
    client.chat.completions.create.side_effect = OpenAIError("rate limited")
    with pytest.raises(GenerationError):
        OpenAIBackend(client=client).generate("prompt")


@pytest.mark.parametrize("content", [None, "", "   "])
def test_empty_reply_is_an_error(content):
    client = MagicMock()
    client.chat.completions.create.return_value = _response(content)
    with pytest.raises(GenerationError):
        OpenAIBackend(client=client).generate("prompt")


def test_missing_api_key_is_generation_error(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(GenerationError):
        OpenAIBackend().generate("prompt")
