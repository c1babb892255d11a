import pytest

from features.inbound.context import InboundMessage, apply_media_understanding, build_inbound_body
from features.media_understanding.attachments import MediaAttachment
from features.media_understanding.service import MediaUnderstandingService


def test_direct_message_body_is_plain_text() -> None:
    message = InboundMessage(channel="telegram", sender_id="42", text="  hi there ")

    assert build_inbound_body(message) == "hi there"


def test_group_message_is_prefixed_with_sender() -> None:
    message = InboundMessage(
        channel="signal", sender_id="+4800", sender_name="Alice", text="hello", is_group=True
    )

    assert build_inbound_body(message) == "Alice (+4800): hello"


def test_group_message_without_name_uses_sender_id() -> None:
    message = InboundMessage(channel="signal", sender_id="+4800", text="hello", is_group=True)

    assert build_inbound_body(message) == "+4800: hello"


@pytest.mark.anyio
async def test_media_outputs_are_folded_into_body(fake_provider, make_registry) -> None:
    registry = make_registry(
        fake_provider("openai", "remember the milk", capabilities=("audio",)),
        fake_provider("gemini", "a shopping list", capabilities=("image",)),
    )
    service = MediaUnderstandingService(
        registry=registry, env_keys={"openai": "sk-test", "gemini": "g-test"}
    )
    message = InboundMessage(
        channel="telegram",
        sender_id="42",
        text="see attached",
        attachments=(
            MediaAttachment(data=b"ogg", filename="voice.ogg", mime_type="audio/ogg"),
            MediaAttachment(data=b"jpg", filename="list.jpg"),
        ),
    )

    enriched = await apply_media_understanding(message, service)

    assert set(enriched.media_results) == {"audio", "image"}
    assert build_inbound_body(enriched) == (
        "see attached\n\n[Audio]\nremember the milk\n\n[Image]\na shopping list"
    )


@pytest.mark.anyio
async def test_failed_capability_leaves_body_untouched(fake_provider, make_registry) -> None:
    registry = make_registry(fake_provider("openai", RuntimeError("offline")))
    service = MediaUnderstandingService(registry=registry, env_keys={"openai": "sk-test"})
    message = InboundMessage(
        channel="telegram",
        sender_id="42",
        text="listen",
        attachments=(MediaAttachment(data=b"ogg", filename="voice.ogg", mime_type="audio/ogg"),),
    )

    enriched = await apply_media_understanding(message, service)

    assert enriched.media_results == {}
    assert build_inbound_body(enriched) == "listen"
