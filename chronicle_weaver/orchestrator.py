"""Turn orchestrator: produces one Scene per player action.

Turn flow:
  1. Build the scene request: origin story + character block, the full
     history replayed in order, then the action as the final user turn.
  2. Call generate_scene → validated SceneDraft. Provider errors propagate.
  3. Call generate_image on the styled illustration prompt (16:9). Any
     failure, or a response without an image, falls back to a placeholder
     URL; this step never raises.
  4. Assemble the Scene with a fresh id.

The text call always finishes before the image call starts, since the image
prompt comes from the text result.
"""

from __future__ import annotations

import logging
import random
import string
from typing import Iterable

from chronicle_weaver.models import Character, HistoryEntry, Scene
from chronicle_weaver.prompts import (
    RANDOM_STORY_PROMPT,
    SCENE_ASPECT_RATIO,
    build_scene_request,
    illustration_prompt,
)
from chronicle_weaver.provider import ContentProvider, ProviderError

logger = logging.getLogger(__name__)

SCENE_IMAGE_SIZE = (1200, 675)

FALLBACK_STORY = (
    "An ancient evil stirs in the Whispering Woods, calling upon a lone hero to embark "
    "on a perilous quest. Destiny awaits!"
)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_scene_id() -> str:
    # Collisions are tolerable: ids are never used as storage keys.
    return "".join(random.choices(_ID_ALPHABET, k=9))


def placeholder_image(width: int, height: int, seed: str | None = None) -> str:
    seed = seed or str(random.random())
    return f"https://picsum.photos/seed/{seed}/{width}/{height}"


async def produce_scene(
    provider: ContentProvider,
    *,
    original_story: str,
    history: Iterable[HistoryEntry],
    action: str,
    character: Character | None,
) -> Scene:
    """Run one turn against the provider and return the new scene."""
    request = build_scene_request(original_story, history, action, character)
    logger.debug("producing scene turns=%d action_len=%d", len(request.turns), len(action))

    draft = await provider.generate_scene(request)
    image = await illustrate(provider, draft.image_prompt)

    return Scene(
        id=new_scene_id(),
        description=draft.scene_description,
        image_prompt=draft.image_prompt,
        image=image,
        choices=tuple(draft.suggested_choices),
        is_ending=draft.is_ending,
    )


async def illustrate(provider: ContentProvider, prompt: str) -> str:
    """Return a data URL for the scene illustration, or a placeholder URL."""
    try:
        image = await provider.generate_image(illustration_prompt(prompt), SCENE_ASPECT_RATIO)
    except ProviderError as e:
        logger.warning("Scene illustration failed, using placeholder: %s", e)
        image = None
    else:
        if image is None:
            logger.warning("Scene illustration returned no image data, using placeholder")

    if image is None:
        return placeholder_image(*SCENE_IMAGE_SIZE)
    return image.to_data_url()


async def generate_story(provider: ContentProvider) -> str:
    """A short provider-written origin story, or FALLBACK_STORY on empty output."""
    text = await provider.generate_short_text(RANDOM_STORY_PROMPT, 150)
    return text.strip() or FALLBACK_STORY
