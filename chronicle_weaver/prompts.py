"""Prompt text, response schemas and scene-request assembly.

Schemas use the provider's OpenAPI-subset type names (OBJECT, STRING, ...).
The scene request replays the whole history on every call:

    user   Original Story Context + Player Character block (once)
    model  opening narration
    user   action 1
    model  narration 1
    ...
    user   Player Action: <new action>
"""

from __future__ import annotations

from typing import Iterable

from chronicle_weaver.models import Character, HistoryEntry, ProviderTurn, SceneRequest
from chronicle_weaver.stats import STAT_MAX, STAT_MIN, STAT_TOTAL

SYSTEM_INSTRUCTION = """\
You are an expert Dungeon Master and Storyteller.
The user will provide an "Original Story" which serves as the foundation, lore, and tone of the world.
Your job is to guide the user through a text-based RPG based on this story.
IMPORTANT RULES:
1. Stay faithful to the original story's themes, but allow the player to "stray" from the original plot.
2. React logically to user actions. If they do something unexpected, adapt the world consequences.
3. Every response must be in JSON format.
4. Provide 3-4 distinct choices for the player, plus allow for custom input.
5. Provide a detailed "imagePrompt" for a high-quality fantasy/RPG illustration based on the current scene.
6. Track if the player has reached a natural conclusion (isEnding).
"""

SCENE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "sceneDescription": {
            "type": "STRING",
            "description": "A 2-4 paragraph description of the current situation and surroundings.",
        },
        "imagePrompt": {
            "type": "STRING",
            "description": (
                "A descriptive prompt for an AI image generator (e.g., 'A dark forest with "
                "glowing blue mushrooms, cinematic lighting, oil painting style')."
            ),
        },
        "suggestedChoices": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "minItems": 3,
            "maxItems": 4,
            "description": "3-4 concise action choices for the player.",
        },
        "isEnding": {
            "type": "BOOLEAN",
            "description": "True if the story has reached a definitive end.",
        },
    },
    "required": ["sceneDescription", "imagePrompt", "suggestedChoices", "isEnding"],
}

CHARACTER_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING", "description": "A creative fantasy character name."},
        "appearanceDescription": {
            "type": "STRING",
            "description": "A detailed description of the character's appearance and inferred personality.",
        },
        "strength": {"type": "INTEGER", "description": f"Character's strength stat ({STAT_MIN}-{STAT_MAX})."},
        "dexterity": {"type": "INTEGER", "description": f"Character's dexterity stat ({STAT_MIN}-{STAT_MAX})."},
        "intelligence": {"type": "INTEGER", "description": f"Character's intelligence stat ({STAT_MIN}-{STAT_MAX})."},
        "charisma": {"type": "INTEGER", "description": f"Character's charisma stat ({STAT_MIN}-{STAT_MAX})."},
    },
    "required": ["name", "appearanceDescription", "strength", "dexterity", "intelligence", "charisma"],
}

OPENING_CUE = "The adventure begins."

ILLUSTRATION_STYLE = "16-bit pixel art style, Digital RPG illustration, high fantasy, cinematic composition: "
SCENE_ASPECT_RATIO = "16:9"
PORTRAIT_ASPECT_RATIO = "1:1"

_STAT_RULES = (
    "assign starting stats (Strength, Dexterity, Intelligence, Charisma). "
    f"Each stat must be between {STAT_MIN} and {STAT_MAX} (inclusive). "
    f"The total sum of all four stats must be exactly {STAT_TOTAL}."
)

CHARACTER_FROM_IMAGE_PROMPT = (
    "16-bit pixel art style. Analyze the provided image and generate a detailed fantasy RPG "
    "character profile. Include a creative name, a descriptive appearance, and "
    + _STAT_RULES
    + " The stats should logically reflect the character's visual traits. "
    "Provide the output in JSON format."
)

RANDOM_CHARACTER_PROMPT = (
    "Generate a detailed fantasy RPG character profile: a creative name, a brief appearance "
    "description (1-2 sentences), and "
    + _STAT_RULES
    + " The stats should logically reflect typical fantasy archetypes. "
    "Provide the output in JSON format."
)

RANDOM_PORTRAIT_PROMPT = (
    "16-bit pixel art style. Digital RPG portrait of a generic fantasy hero, random race "
    "(e.g., human, elf, dwarf, orc), random class (e.g., warrior, rogue, mage), simple "
    "background. Focus on a clear facial expression, neutral pose, 1:1 aspect ratio. Clear lighting."
)

RANDOM_NAME_PROMPT = (
    'Generate a single, creative fantasy character name. Just the name, no extra text. Example: "Elara"'
)

NAME_FROM_IMAGE_PROMPT = (
    "Analyze the provided image of a character. Based on their appearance and overall vibe, "
    "suggest a unique, fitting, and clever fantasy character name. Just the name, no extra "
    'text, no descriptions. Example: "Kaelen Stonehand"'
)

RANDOM_STORY_PROMPT = (
    "Generate a captivating, brief fantasy RPG origin story (2-3 sentences). Focus on setting "
    "the scene for an adventure. Just the story, no extra text, no choices, no titles."
)


def character_context(character: Character | None) -> str:
    """Player Character block for the first user turn, or "" without a character."""
    if character is None:
        return ""
    portrait = " (Portrait: Player sees this image)" if character.portrait_image else ""
    return (
        "Player Character:\n"
        f"Name: {character.name}\n"
        f"Appearance: {character.appearance_description}\n"
        f"Stats: Strength {character.strength}, Dexterity {character.dexterity}, "
        f"Intelligence {character.intelligence}, Charisma {character.charisma}{portrait}\n\n"
    )


def build_scene_request(
    original_story: str,
    history: Iterable[HistoryEntry],
    action: str,
    character: Character | None,
) -> SceneRequest:
    turns = [
        ProviderTurn(
            role="user",
            text=f"Original Story Context:\n{original_story}\n\n{character_context(character)}",
        )
    ]
    for entry in history:
        turns.append(ProviderTurn(role="model" if entry.role == "narrator" else "user", text=entry.text))
    turns.append(ProviderTurn(role="user", text=f"Player Action: {action}"))
    return SceneRequest(system_instruction=SYSTEM_INSTRUCTION, turns=turns)


def illustration_prompt(prompt: str) -> str:
    return f"{ILLUSTRATION_STYLE}{prompt}"
