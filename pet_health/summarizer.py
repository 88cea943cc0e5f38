"""First-person daily summaries from an LLM provider."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

from openai import OpenAI

from .classification import LOW_BATTERY_V
from .config import settings
from .logging_utils import setup_logger
from .models import DailyReport

logger = setup_logger(__name__)


class SummaryProvider(str, Enum):
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    QWEN = "qwen"


@dataclass(frozen=True)
class ProviderEndpoint:
    base_url: str
    model: str
    api_key_setting: str


# All three expose an OpenAI-compatible chat completions API
PROVIDERS: Dict[SummaryProvider, ProviderEndpoint] = {
    SummaryProvider.GEMINI: ProviderEndpoint(
        base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
        model="gemini-2.0-flash",
        api_key_setting="GEMINI_API_KEY",
    ),
    SummaryProvider.DEEPSEEK: ProviderEndpoint(
        base_url="https://api.deepseek.com",
        model="deepseek-chat",
        api_key_setting="DEEPSEEK_API_KEY",
    ),
    SummaryProvider.QWEN: ProviderEndpoint(
        base_url="https://dashscope.aliyuncs.com/compatible-mode/v1",
        model="qwen-plus",
        api_key_setting="QWEN_API_KEY",
    ),
}

MAX_TOKENS = 150
TEMPERATURE = 0.8

SPECIES_VOICES = {
    1: ("dog", "loyal and full of energy", "Woof!"),
    2: ("cat", "elegant and a little lazy", "Meow~"),
}
DEFAULT_VOICE = ("pet", "curious and friendly", "🐾")


def build_system_prompt(species_id: int) -> str:
    species, trait, sign_off = SPECIES_VOICES.get(species_id, DEFAULT_VOICE)
    return f"""You are a pet health expert who understands animal behaviour.
Write a short daily health summary in the voice of a {trait} {species}, based on today's data.
Rules:
1. Write in the first person with a distinct personality.
2. Be proud when the step goal is reached; complain gently when the temperature is abnormal.
3. If the tracker battery is below {LOW_BATTERY_V}V, mention that "my energy is running low".
4. Always end with: {sign_off}
5. Keep it under 80 words and output only the summary text."""


def build_user_prompt(report: DailyReport) -> str:
    return (
        f"Today's health data: {report.activity.steps} steps, "
        f"goal completion {report.activity.completion_rate * 100:.1f}%, "
        f"average temperature {report.vitals.avg_temp}°C ({report.vitals.status.value}), "
        f"trend vs yesterday {report.trend.vs_yesterday:+.0%}, "
        f"tracker battery {report.device.battery}V."
    )


def fallback_summary(report: DailyReport) -> str:
    """Canned text used whenever the provider cannot answer."""
    _, _, sign_off = SPECIES_VOICES.get(report.species_id, DEFAULT_VOICE)
    if report.activity.steps > 8000:
        mood = "Full marks for exercise today, I'm the best!"
    else:
        mood = "I slacked off a little today, but I feel comfortable."
    return f"[Syncing] {mood} {sign_off}"


def _fallback_response(report: DailyReport, provider: SummaryProvider, reason: str) -> Tuple[str, Dict[str, Any]]:
    logger.warning(f"Summary fallback triggered for {provider.value}: {reason}")
    return (
        fallback_summary(report),
        {
            "provider": provider.value,
            "model": None,
            "error": reason,
        },
    )


def generate_summary(report: DailyReport, provider: str = "gemini") -> Tuple[str, Dict[str, Any]]:
    """Generate a first-person summary of ``report``.

    Args:
        report: Report to describe.
        provider: One of ``gemini``, ``deepseek``, ``qwen``.

    Returns:
        ``(text, metadata)``; ``metadata["error"]`` is set when the canned
        fallback text was returned instead of a model reply.

    Raises:
        ValueError: If the provider is unknown.
    """
    try:
        selected = SummaryProvider(provider)
    except ValueError:
        raise ValueError(
            f"Unsupported provider: {provider}. Must be one of: "
            + ", ".join(item.value for item in SummaryProvider)
        )

    endpoint = PROVIDERS[selected]
    api_key = getattr(settings, endpoint.api_key_setting)
    if not api_key:
        return _fallback_response(report, selected, f"{endpoint.api_key_setting} is not set")

    try:
        client = OpenAI(api_key=api_key, base_url=endpoint.base_url, timeout=settings.LLM_TIMEOUT_SECONDS)
        completion = client.chat.completions.create(
            model=endpoint.model,
            messages=[
                {"role": "system", "content": build_system_prompt(report.species_id)},
                {"role": "user", "content": build_user_prompt(report)},
            ],
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
        )
    except Exception as exc:
        # Any provider failure degrades to the canned text
        return _fallback_response(report, selected, str(exc))

    text = ""
    if completion.choices:
        text = (completion.choices[0].message.content or "").strip()
    if not text:
        return _fallback_response(report, selected, "provider returned an empty reply")

    usage = getattr(completion, "usage", None)
    metadata = {
        "provider": selected.value,
        "model": getattr(completion, "model", None) or endpoint.model,
        "usage": {
            "input_tokens": getattr(usage, "prompt_tokens", 0) if usage else 0,
            "output_tokens": getattr(usage, "completion_tokens", 0) if usage else 0,
        },
    }
    logger.info(f"Generated summary for tracker {report.pet_id} with {selected.value}")
    return text, metadata
