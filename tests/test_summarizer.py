"""Tests for the LLM summary generator."""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from pet_health.assembler import assemble, build_activity
from pet_health.config import settings
from pet_health.models import ReportIdentity
from pet_health.summarizer import (
    PROVIDERS,
    SummaryProvider,
    build_system_prompt,
    build_user_prompt,
    fallback_summary,
    generate_summary,
)


@pytest.fixture
def report(now):
    return assemble(
        build_activity(9000),
        None,
        None,
        None,
        None,
        ReportIdentity(pet_id="105", report_date=date(2024, 6, 15)),
        now=now,
    )


def _completion(text):
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = text
    completion.model = "gemini-2.0-flash"
    completion.usage.prompt_tokens = 120
    completion.usage.completion_tokens = 45
    return completion


class TestPrompts:
    @pytest.mark.unit
    def test_system_prompt_voice_by_species(self):
        assert "dog" in build_system_prompt(1)
        assert "Meow~" in build_system_prompt(2)
        assert "pet" in build_system_prompt(99)

    @pytest.mark.unit
    def test_user_prompt_contains_metrics(self, report):
        prompt = build_user_prompt(report)

        assert "9000 steps" in prompt
        assert "90.0%" in prompt
        assert "38.5°C" in prompt

    @pytest.mark.unit
    def test_fallback_text(self, report):
        text = fallback_summary(report)

        assert text.startswith("[Syncing]")
        assert text.endswith("Woof!")


class TestGenerateSummary:
    @pytest.mark.unit
    def test_unknown_provider(self, report):
        with pytest.raises(ValueError, match="Unsupported provider"):
            generate_summary(report, "claude")

    @pytest.mark.unit
    def test_missing_key_falls_back_without_calling_provider(self, report):
        with patch("pet_health.summarizer.OpenAI") as mock_openai:
            text, metadata = generate_summary(report, "gemini")

        mock_openai.assert_not_called()
        assert text == fallback_summary(report)
        assert metadata["error"] == "GEMINI_API_KEY is not set"

    @pytest.mark.unit
    def test_success(self, report, monkeypatch):
        monkeypatch.setattr(settings, "DEEPSEEK_API_KEY", "sk-test")
        with patch("pet_health.summarizer.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.return_value = _completion("  Woof! Great day.  ")
            text, metadata = generate_summary(report, "deepseek")

        endpoint = PROVIDERS[SummaryProvider.DEEPSEEK]
        mock_openai.assert_called_once_with(api_key="sk-test", base_url=endpoint.base_url, timeout=30.0)
        call_kwargs = mock_openai.return_value.chat.completions.create.call_args.kwargs
        assert call_kwargs["model"] == "deepseek-chat"
        assert call_kwargs["messages"][0]["role"] == "system"

        assert text == "Woof! Great day."
        assert metadata["provider"] == "deepseek"
        assert metadata["usage"] == {"input_tokens": 120, "output_tokens": 45}
        assert "error" not in metadata

    @pytest.mark.unit
    def test_provider_failure_falls_back(self, report, monkeypatch):
        monkeypatch.setattr(settings, "QWEN_API_KEY", "sk-test")
        with patch("pet_health.summarizer.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.side_effect = RuntimeError("429 Too Many Requests")
            text, metadata = generate_summary(report, "qwen")

        assert text.startswith("[Syncing]")
        assert metadata["provider"] == "qwen"
        assert "429" in metadata["error"]

    @pytest.mark.unit
    def test_empty_reply_falls_back(self, report, monkeypatch):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "key")
        with patch("pet_health.summarizer.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.return_value = _completion("   ")
            text, metadata = generate_summary(report)

        assert text.startswith("[Syncing]")
        assert metadata["error"] == "provider returned an empty reply"
