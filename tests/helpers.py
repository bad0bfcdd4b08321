"""Test doubles shared across test modules."""

from __future__ import annotations

from chronicle_weaver.models import (
    Character,
    CharacterProfile,
    InlineImage,
    SceneDraft,
    SceneRequest,
)

PNG = InlineImage(mime_type="image/png", data="aW1hZ2UtYnl0ZXM=")


def make_draft(n: int = 1, *, ending: bool = False) -> SceneDraft:
    return SceneDraft(
        scene_description=f"Scene {n}: the road bends toward the mountains.",
        image_prompt=f"mountain road, scene {n}",
        suggested_choices=["Climb the pass", "Make camp", "Turn back"],
        is_ending=ending,
    )


def make_profile(**overrides) -> CharacterProfile:
    fields = dict(
        name="Brannoc",
        appearance_description="A broad-shouldered smith with soot on his hands.",
        strength=9,
        dexterity=0,
        intelligence=2,
        charisma=1,
    )
    fields.update(overrides)
    return CharacterProfile(**fields)


def make_character(**overrides) -> Character:
    fields = dict(
        name="Elara",
        appearance_description="A wiry ranger in a moss-green cloak.",
        strength=2,
        dexterity=4,
        intelligence=2,
        charisma=2,
    )
    fields.update(overrides)
    return Character(**fields)


class StubProvider:
    """Scripted ContentProvider.

    Each queue is consumed front to back; an Exception instance in a queue is
    raised instead of returned. Empty queues fall back to sensible defaults,
    so a test only scripts the calls it cares about.
    """

    def __init__(self) -> None:
        self.scenes: list[SceneDraft | Exception] = []
        self.images: list[InlineImage | None | Exception] = []
        self.profiles: list[CharacterProfile | Exception] = []
        self.texts: list[str | Exception] = []
        self.calls: list[str] = []
        self.scene_requests: list[SceneRequest] = []
        self.image_requests: list[tuple[str, str]] = []
        self.profile_requests: list[tuple[str, InlineImage | None]] = []
        self.text_requests: list[tuple[str, int, InlineImage | None]] = []

    @staticmethod
    def _next(queue: list, default):
        item = queue.pop(0) if queue else default
        if isinstance(item, Exception):
            raise item
        return item

    async def generate_scene(self, request: SceneRequest) -> SceneDraft:
        self.calls.append("scene")
        self.scene_requests.append(request)
        return self._next(self.scenes, make_draft(len(self.scene_requests)))

    async def generate_image(self, prompt: str, aspect_ratio: str) -> InlineImage | None:
        self.calls.append("image")
        self.image_requests.append((prompt, aspect_ratio))
        return self._next(self.images, PNG)

    async def generate_character_profile(
        self, prompt: str, image: InlineImage | None = None
    ) -> CharacterProfile:
        self.calls.append("profile")
        self.profile_requests.append((prompt, image))
        return self._next(self.profiles, make_profile())

    async def generate_short_text(
        self, prompt: str, max_length: int, image: InlineImage | None = None
    ) -> str:
        self.calls.append("text")
        self.text_requests.append((prompt, max_length, image))
        return self._next(self.texts, "")
