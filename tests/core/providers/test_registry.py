import pytest

from core.exceptions import ConfigurationError, ProviderError
from core.providers import DEFAULT_PROVIDER_ORDER, create_default_registry
from core.providers.base import Capability, MediaRequest, ProviderDescriptor
from core.providers.registry import ProviderRegistry


def test_providers_for_keeps_registration_order(fake_provider, make_registry) -> None:
    registry = make_registry(
        fake_provider("deepgram", capabilities=("audio",)),
        fake_provider("gemini", capabilities=("audio", "image", "video")),
        fake_provider("openai", capabilities=("audio", "image")),
    )

    assert registry.providers_for("audio") == ["deepgram", "gemini", "openai"]
    assert registry.providers_for(Capability.IMAGE) == ["gemini", "openai"]
    assert registry.providers_for("video") == ["gemini"]


def test_duplicate_registration_raises(fake_provider) -> None:
    registry = ProviderRegistry()
    registry.register(fake_provider("openai").descriptor())

    with pytest.raises(ConfigurationError):
        registry.register(fake_provider("openai").descriptor())

    assert len(registry) == 1


def test_capability_without_function_is_rejected() -> None:
    registry = ProviderRegistry()
    descriptor = ProviderDescriptor(id="broken", capabilities=frozenset({"image"}))

    with pytest.raises(ConfigurationError) as excinfo:
        registry.register(descriptor)

    assert "broken" in str(excinfo.value)
    assert "broken" not in registry


def test_empty_provider_id_is_rejected(fake_provider) -> None:
    with pytest.raises(ConfigurationError):
        ProviderRegistry().register(fake_provider("  ").descriptor())


def test_register_fills_known_default_models(fake_provider, make_registry) -> None:
    registry = make_registry(
        fake_provider("openai", capabilities=("audio",)),
        fake_provider("custom", capabilities=("audio",), default_models={"audio": "c-1"}),
        fake_provider("unknown", capabilities=("audio",)),
    )

    assert registry.get("openai").default_model(Capability.AUDIO) == "gpt-4o-mini-transcribe"
    assert registry.get("custom").default_model(Capability.AUDIO) == "c-1"
    assert registry.get("unknown").default_model(Capability.AUDIO) is None


def test_registered_default_models_are_read_only(fake_provider, make_registry) -> None:
    custom = fake_provider("custom", capabilities=("audio",), default_models={"audio": "c-1"})
    registry = make_registry(custom)

    with pytest.raises(TypeError):
        registry.get("custom").default_models[Capability.AUDIO] = "other"
    custom.default_models["audio"] = "changed-later"

    assert registry.get("custom").default_model(Capability.AUDIO) == "c-1"


def test_supports_reflects_declared_capabilities(fake_provider, make_registry) -> None:
    registry = make_registry(fake_provider("deepgram", capabilities=("audio",)))

    assert registry.supports("deepgram", "audio") is True
    assert registry.supports("deepgram", "image") is False
    assert registry.supports("missing", "audio") is False


@pytest.mark.anyio
async def test_invoke_dispatches_to_capability_function(fake_provider, make_registry) -> None:
    provider = fake_provider("gemini", "a cat", capabilities=("image",))
    registry = make_registry(provider)

    result = await registry.invoke("gemini", "image", MediaRequest(data=b"png", model="m-1"))

    assert result.text == "a cat"
    assert result.model == "m-1"
    assert provider.requests[0].data == b"png"


@pytest.mark.anyio
async def test_invoke_unsupported_capability_raises_provider_error(
    fake_provider, make_registry
) -> None:
    registry = make_registry(fake_provider("deepgram", capabilities=("audio",)))

    with pytest.raises(ProviderError) as excinfo:
        await registry.invoke("deepgram", "video", MediaRequest(data=b""))

    assert excinfo.value.kind == "unsupported"
    assert excinfo.value.provider == "deepgram"


def test_create_default_registry_registers_builtin_integrations() -> None:
    registry = create_default_registry({"openai": {"api_key": "sk-test"}})

    assert [descriptor.id for descriptor in registry] == list(DEFAULT_PROVIDER_ORDER)
    assert registry.providers_for("audio") == ["openai", "gemini", "deepgram"]
    assert registry.providers_for("image") == ["openai", "gemini"]
    assert registry.providers_for("video") == ["gemini"]
