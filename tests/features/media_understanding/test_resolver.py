from features.media_understanding.config import CapabilityConfig, ModelEntry
from features.media_understanding.resolver import (
    REASON_CONFIGURED_UNAVAILABLE,
    REASON_DISABLED,
    REASON_NO_ELIGIBLE_PROVIDER,
    REASON_NO_PROVIDER,
    Candidate,
    resolve_capability,
)


def test_explicit_disable_wins_over_models(fake_provider, make_registry) -> None:
    registry = make_registry(fake_provider("openai"))
    config = CapabilityConfig(enabled=False, models=(ModelEntry("openai", "whisper-1"),))

    resolution = resolve_capability("audio", config, registry)

    assert resolution.enabled is False
    assert resolution.candidates == ()
    assert resolution.reason == REASON_DISABLED


def test_explicit_models_drop_unknown_and_unsupported(fake_provider, make_registry) -> None:
    registry = make_registry(
        fake_provider("openai", capabilities=("audio", "image")),
        fake_provider("deepgram", capabilities=("audio",)),
    )
    config = CapabilityConfig(
        models=(
            ModelEntry("missing", "x"),
            ModelEntry("deepgram", "nova-3"),
            ModelEntry("openai", "gpt-4o"),
        )
    )

    resolution = resolve_capability("image", config, registry)

    assert resolution.enabled is True
    assert resolution.candidates == (Candidate("openai", "gpt-4o"),)
    assert len(resolution.notes) == 2


def test_explicit_models_all_filtered_out(fake_provider, make_registry) -> None:
    registry = make_registry(fake_provider("deepgram"))
    config = CapabilityConfig(models=(ModelEntry("missing"),))

    resolution = resolve_capability("audio", config, registry)

    assert resolution.enabled is False
    assert resolution.reason == REASON_CONFIGURED_UNAVAILABLE


def test_auto_mode_uses_registration_order_with_unset_model(fake_provider, make_registry) -> None:
    registry = make_registry(
        fake_provider("gemini", capabilities=("audio", "video")),
        fake_provider("openai"),
    )

    resolution = resolve_capability("audio", CapabilityConfig(), registry)

    assert resolution.enabled is True
    assert resolution.candidates == (Candidate("gemini"), Candidate("openai"))


def test_auto_mode_skips_providers_without_credentials(fake_provider, make_registry) -> None:
    registry = make_registry(fake_provider("gemini"), fake_provider("openai"))
    config = CapabilityConfig(credentialed_providers=frozenset({"openai"}))

    resolution = resolve_capability("audio", config, registry)

    assert resolution.candidates == (Candidate("openai"),)
    assert resolution.notes == ("provider 'gemini' has no credentials",)


def test_auto_mode_without_provider_is_unavailable(fake_provider, make_registry) -> None:
    registry = make_registry(fake_provider("deepgram"))

    resolution = resolve_capability("video", CapabilityConfig(), registry)

    assert resolution.enabled is False
    assert resolution.reason == REASON_NO_PROVIDER


def test_forced_enable_without_provider_reports_no_eligible_provider(
    fake_provider, make_registry
) -> None:
    registry = make_registry(fake_provider("openai"))
    config = CapabilityConfig(enabled=True, credentialed_providers=frozenset())

    resolution = resolve_capability("audio", config, registry)

    assert resolution.enabled is False
    assert resolution.reason == REASON_NO_ELIGIBLE_PROVIDER


def test_resolution_is_deterministic(fake_provider, make_registry) -> None:
    registry = make_registry(
        fake_provider("a", capabilities=("image",)),
        fake_provider("b", capabilities=("image",)),
    )
    config = CapabilityConfig()

    first = resolve_capability("image", config, registry)
    second = resolve_capability("image", config, registry)

    assert first == second
