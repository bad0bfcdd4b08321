"""Character builder.

Each step is a small fallible coroutine; callers compose them:

    character_from_image(provider, image)  profile from an uploaded image;
                                           the image becomes the portrait
    random_character(provider)             profile from nothing, then a
                                           generated portrait
    random_name(provider, image=None)      one short name, fixed fallback on
                                           empty output
    finalize_character(character, name)    apply the player's own name

Every generated profile goes through build_character(), which normalises the
stat line (see stats.normalize_stats) and fills in blank text fields.
Provider errors from the profile and name calls propagate; portrait
generation falls back to a placeholder and never raises.
"""

from __future__ import annotations

import logging

from chronicle_weaver.models import Character, CharacterProfile, InlineImage
from chronicle_weaver.orchestrator import placeholder_image
from chronicle_weaver.prompts import (
    CHARACTER_FROM_IMAGE_PROMPT,
    NAME_FROM_IMAGE_PROMPT,
    PORTRAIT_ASPECT_RATIO,
    RANDOM_CHARACTER_PROMPT,
    RANDOM_NAME_PROMPT,
    RANDOM_PORTRAIT_PROMPT,
)
from chronicle_weaver.provider import ContentProvider, ProviderError
from chronicle_weaver.stats import normalize_stats

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Random Hero"
DEFAULT_APPEARANCE = "A mysterious figure ready for adventure."
UNNAMED = "Unnamed Hero"
STRANGER = "Mysterious Stranger"

PORTRAIT_SIZE = (200, 200)

# maxOutputTokens for name calls
NAME_LENGTH = 20
NAME_FROM_IMAGE_LENGTH = 30


def build_character(profile: CharacterProfile, portrait: str | None = None) -> Character:
    stats, _ = normalize_stats(profile.stats())
    return Character(
        name=profile.name.strip() or DEFAULT_NAME,
        appearance_description=profile.appearance_description.strip() or DEFAULT_APPEARANCE,
        portrait_image=portrait,
        **stats,
    )


async def character_from_image(provider: ContentProvider, image: InlineImage) -> Character:
    profile = await provider.generate_character_profile(CHARACTER_FROM_IMAGE_PROMPT, image)
    return build_character(profile, portrait=image.to_data_url())


async def random_portrait(provider: ContentProvider) -> str:
    """Data URL of a generated 1:1 portrait, or a placeholder URL."""
    try:
        image = await provider.generate_image(RANDOM_PORTRAIT_PROMPT, PORTRAIT_ASPECT_RATIO)
    except ProviderError as e:
        logger.warning("Portrait generation failed, using placeholder: %s", e)
        image = None
    if image is None:
        return placeholder_image(*PORTRAIT_SIZE)
    return image.to_data_url()


async def random_character(provider: ContentProvider) -> Character:
    profile = await provider.generate_character_profile(RANDOM_CHARACTER_PROMPT)
    portrait = await random_portrait(provider)
    return build_character(profile, portrait=portrait)


async def random_name(provider: ContentProvider, image: InlineImage | None = None) -> str:
    if image is None:
        text = await provider.generate_short_text(RANDOM_NAME_PROMPT, NAME_LENGTH)
        return text.strip() or UNNAMED
    text = await provider.generate_short_text(NAME_FROM_IMAGE_PROMPT, NAME_FROM_IMAGE_LENGTH, image)
    return text.strip() or STRANGER


def finalize_character(character: Character, entered_name: str = "") -> Character:
    """The player's own name wins over the generated one."""
    name = entered_name.strip() or character.name.strip() or UNNAMED
    return character.model_copy(update={"name": name})
