"""Tests for chronicle_weaver.characters: building characters from provider output."""

import pytest

from chronicle_weaver.characters import (
    DEFAULT_APPEARANCE,
    DEFAULT_NAME,
    STRANGER,
    UNNAMED,
    build_character,
    character_from_image,
    finalize_character,
    random_character,
    random_name,
    random_portrait,
)
from chronicle_weaver.models import InlineImage
from chronicle_weaver.prompts import (
    CHARACTER_FROM_IMAGE_PROMPT,
    NAME_FROM_IMAGE_PROMPT,
    RANDOM_CHARACTER_PROMPT,
    RANDOM_NAME_PROMPT,
)
from chronicle_weaver.provider import SchemaError, TransportError
from tests.helpers import PNG, StubProvider, make_character, make_profile

UPLOAD = InlineImage(mime_type="image/jpeg", data="dXBsb2Fk")


class TestBuildCharacter:
    def test_normalises_stats(self) -> None:
        c = build_character(make_profile())  # 9, 0, 2, 1
        assert c.stats() == {"strength": 5, "dexterity": 2, "intelligence": 2, "charisma": 1}

    def test_blank_text_fields_get_defaults(self) -> None:
        c = build_character(make_profile(name="  ", appearance_description=""))
        assert c.name == DEFAULT_NAME
        assert c.appearance_description == DEFAULT_APPEARANCE

    def test_portrait_attached(self) -> None:
        c = build_character(make_profile(), portrait="https://example.test/p.png")
        assert c.portrait_image == "https://example.test/p.png"


class TestFromImage:
    async def test_keeps_upload_as_portrait(self, provider: StubProvider) -> None:
        c = await character_from_image(provider, UPLOAD)
        assert c.portrait_image == "data:image/jpeg;base64,dXBsb2Fk"
        assert sum(c.stats().values()) == 10
        assert provider.profile_requests == [(CHARACTER_FROM_IMAGE_PROMPT, UPLOAD)]
        assert "image" not in provider.calls

    async def test_profile_error_propagates(self, provider: StubProvider) -> None:
        provider.profiles.append(SchemaError("bad"))
        with pytest.raises(SchemaError):
            await character_from_image(provider, UPLOAD)


class TestRandomCharacter:
    async def test_profile_then_portrait(self, provider: StubProvider) -> None:
        c = await random_character(provider)
        assert provider.calls == ["profile", "image"]
        assert provider.profile_requests == [(RANDOM_CHARACTER_PROMPT, None)]
        assert provider.image_requests[0][1] == "1:1"
        assert c.portrait_image == PNG.to_data_url()

    async def test_portrait_failure_uses_placeholder(self, provider: StubProvider) -> None:
        provider.images.append(TransportError("down"))
        c = await random_character(provider)
        assert c.portrait_image.endswith("/200/200")

    async def test_random_portrait_without_image_data(self, provider: StubProvider) -> None:
        provider.images.append(None)
        assert (await random_portrait(provider)).startswith("https://picsum.photos/seed/")


class TestRandomName:
    async def test_plain_name(self, provider: StubProvider) -> None:
        provider.texts.append(" Elara\n")
        assert await random_name(provider) == "Elara"
        assert provider.text_requests == [(RANDOM_NAME_PROMPT, 20, None)]

    async def test_plain_fallback(self, provider: StubProvider) -> None:
        assert await random_name(provider) == UNNAMED

    async def test_from_image(self, provider: StubProvider) -> None:
        provider.texts.append("Kaelen Stonehand")
        assert await random_name(provider, UPLOAD) == "Kaelen Stonehand"
        assert provider.text_requests == [(NAME_FROM_IMAGE_PROMPT, 30, UPLOAD)]

    async def test_from_image_fallback(self, provider: StubProvider) -> None:
        assert await random_name(provider, UPLOAD) == STRANGER

    async def test_errors_propagate(self, provider: StubProvider) -> None:
        provider.texts.append(TransportError("down"))
        with pytest.raises(TransportError):
            await random_name(provider)


class TestFinalize:
    def test_entered_name_wins(self) -> None:
        assert finalize_character(make_character(), "  Mira ").name == "Mira"

    def test_blank_entry_keeps_generated_name(self) -> None:
        assert finalize_character(make_character(), "   ").name == "Elara"

    def test_original_untouched(self) -> None:
        original = make_character()
        finalize_character(original, "Mira")
        assert original.name == "Elara"
