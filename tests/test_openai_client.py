"""Tests for the OpenAI client helper."""
from __future__ import annotations

import importlib
import sys
from types import ModuleType, SimpleNamespace

import pytest

from school_eval.analysis.prompts import build_analysis_prompt
from school_eval.exceptions import UpstreamUnavailableError


def _completion(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], model="m")


def _install_openai_stub(monkeypatch, create=None):
    """Insert a fake ``openai`` module into ``sys.modules``.

    The fake ``OpenAI`` class records its constructor kwargs and every
    ``create`` call on the returned module.
    """

    fake_openai = ModuleType("openai")
    fake_openai.constructed = []  # type: ignore[attr-defined]
    fake_openai.calls = []  # type: ignore[attr-defined]

    def _default_create(**kwargs):
        return _completion('{"summary": "ok"}')

    def _create(**kwargs):
        fake_openai.calls.append(kwargs)
        return (create or _default_create)(**kwargs)

    class FakeOpenAI:  # pragma: no cover – simple stub
        def __init__(self, **kwargs):
            fake_openai.constructed.append(kwargs)
            self.chat = SimpleNamespace(completions=SimpleNamespace(create=_create))

    fake_openai.OpenAI = FakeOpenAI  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "openai", fake_openai)
    return fake_openai


def reload_client_module():
    """Ensure a fresh import state (and no cached client)."""

    if "school_eval.openai_client" in sys.modules:
        del sys.modules["school_eval.openai_client"]
    return importlib.import_module("school_eval.openai_client")


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    _install_openai_stub(monkeypatch)

    oc = reload_client_module()

    with pytest.raises(oc.OpenAIClientError):
        oc.get_openai_client()


def test_client_built_once_with_credentials(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("OPENAI_ORG", "org-1")
    fake_openai = _install_openai_stub(monkeypatch)

    oc = reload_client_module()
    first = oc.get_openai_client()

    assert oc.get_openai_client() is first
    assert fake_openai.constructed == [{"api_key": "test-key", "organization": "org-1"}]

    oc.reset_client()
    assert oc.get_openai_client() is not first


def test_chat_completion_forwards_arguments(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.delenv("OPENAI_MODEL", raising=False)
    fake_openai = _install_openai_stub(monkeypatch)

    oc = reload_client_module()
    text = oc.chat_completion(
        [{"role": "user", "content": "Hello"}], temperature=0, timeout=30
    )

    call = fake_openai.calls[0]
    assert text == '{"summary": "ok"}'
    assert call["model"] == "gpt-4.1"
    assert call["messages"][0]["content"] == "Hello"
    assert call["temperature"] == 0
    assert call["timeout"] == 30


def test_model_override_from_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
    fake_openai = _install_openai_stub(monkeypatch)

    oc = reload_client_module()
    oc.chat_completion([{"role": "user", "content": "Hi"}])

    assert fake_openai.calls[0]["model"] == "gpt-4o-mini"


def test_generate_text_forwards_request(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    fake_openai = _install_openai_stub(
        monkeypatch, lambda **_: _completion('{"summary": "요약"}')
    )
    oc = reload_client_module()

    request = build_analysis_prompt(["좋아요"])
    assert oc.generate_text(request) == '{"summary": "요약"}'
    assert fake_openai.calls[0]["timeout"] == request.timeout
    assert fake_openai.calls[0]["messages"] == request.messages


def test_generate_text_wraps_transport_errors(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")

    def _create(**_kwargs):
        raise ConnectionError("network down")

    _install_openai_stub(monkeypatch, _create)
    oc = reload_client_module()

    with pytest.raises(UpstreamUnavailableError, match="network down"):
        oc.generate_text(build_analysis_prompt([]))


def test_generate_text_missing_key_is_upstream_error(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    _install_openai_stub(monkeypatch)
    oc = reload_client_module()

    with pytest.raises(UpstreamUnavailableError):
        oc.generate_text(build_analysis_prompt([]))


@pytest.mark.parametrize(
    "completion",
    [SimpleNamespace(choices=[]), _completion(None), {"choices": []}],
)
def test_generate_text_bad_shape(monkeypatch, completion):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    _install_openai_stub(monkeypatch, lambda **_: completion)
    oc = reload_client_module()

    with pytest.raises(UpstreamUnavailableError):
        oc.generate_text(build_analysis_prompt([]))
