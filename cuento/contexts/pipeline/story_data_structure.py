"""
Story record data structures and validation.

Story records arrive as plain JSON-like mappings:

    {
        "id": "a1b2",
        "name": "lucía",
        "story": {
            "title": "El dragón que no sabía volar",
            "chapters": [{"title": "...", "content": "..."}, ...],
            "word_count": 812
        },
        "generatedImages": [{"url": "https://...", "description": "..."}, ...],
        "style": "acuarela",
        "language": "es"
    }

validate_story_data() checks the mapping and returns a typed StoryDocument.
Templates keep receiving the original mapping; the typed view feeds result metadata.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from cuento.exceptions import ValidationError

REQUIRED_FIELDS = ("id", "name", "story")

# Story ids become part of artifact file names
UNSAFE_ID_CHARACTERS = ("/", "\\", "\x00")


@dataclass(frozen=True)
class Chapter:
    title: str = ""
    content: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "Chapter":
        """Build from a chapter mapping, or treat any other value as the chapter text."""
        if isinstance(raw, Mapping):
            return cls(title=str(raw.get("title") or ""), content=str(raw.get("content") or ""))
        return cls(content=str(raw))


@dataclass(frozen=True)
class ImageRef:
    url: str
    description: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "ImageRef":
        """Build from an image mapping, or treat any other value as the URL."""
        if isinstance(raw, Mapping):
            return cls(url=str(raw.get("url") or ""), description=str(raw.get("description") or ""))
        return cls(url=str(raw))


@dataclass(frozen=True)
class StoryDocument:
    """
    Typed view of a validated story record.

    Attributes:
        id: Opaque identifier, unique per generation request
        name: Name of the child the story is for
        title: Story title (non-empty)
        chapters: Ordered chapters (at least one)
        word_count: Word count reported by the story source (>= 0)
        generated_images: Ordered image references (may be empty)
        style: Visual style label
        language: Language code
    """

    id: str
    name: str
    title: str
    chapters: Tuple[Chapter, ...]
    word_count: int = 0
    generated_images: Tuple[ImageRef, ...] = ()
    style: Optional[str] = None
    language: Optional[str] = None

    @property
    def chapter_count(self) -> int:
        return len(self.chapters)

    @property
    def image_count(self) -> int:
        return len(self.generated_images)


def validate_story_data(story_data: Any) -> StoryDocument:
    """
    Validate a raw story record and return its typed view.

    Checks, in order:
    - the record is a mapping
    - id, name and story are present and non-empty (all missing fields reported together)
    - id contains no path separators (it becomes part of file names)
    - story.title is non-empty
    - story.chapters is a list and has at least one chapter
    - story.word_count, when given, is a non-negative integer (integral floats and
      digit strings are coerced)

    Args:
        story_data: Raw story record

    Returns:
        StoryDocument

    Raises:
        ValidationError: On the first failed check
    """
    if not isinstance(story_data, Mapping):
        raise ValidationError(
            f"Story record must be a mapping, got {type(story_data).__name__}"
        )

    missing = [field_name for field_name in REQUIRED_FIELDS if not story_data.get(field_name)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    story_id = str(story_data["id"])
    if story_id in (".", "..") or any(char in story_id for char in UNSAFE_ID_CHARACTERS):
        raise ValidationError(f"Story id must not contain path separators, got {story_id!r}")

    story = story_data["story"]
    if not isinstance(story, Mapping):
        raise ValidationError(f"'story' must be a mapping, got {type(story).__name__}")

    title = story.get("title")
    if not title or not str(title).strip():
        raise ValidationError("Story must have a title (story.title)")

    chapters = story.get("chapters")
    if not isinstance(chapters, (list, tuple)):
        raise ValidationError("Story must have valid chapters (story.chapters must be a list)")
    if len(chapters) == 0:
        raise ValidationError("Story must have at least one chapter (story.chapters is empty)")

    word_count = _coerce_word_count(story.get("word_count"))

    images = story_data.get("generatedImages") or []
    if not isinstance(images, (list, tuple)):
        raise ValidationError("generatedImages must be a list")

    return StoryDocument(
        id=story_id,
        name=str(story_data["name"]),
        title=str(title),
        chapters=tuple(Chapter.from_raw(chapter) for chapter in chapters),
        word_count=word_count,
        generated_images=tuple(ImageRef.from_raw(image) for image in images),
        style=story_data.get("style"),
        language=story_data.get("language"),
    )


def _coerce_word_count(value: Any) -> int:
    """Accept 812, 812.0 and "812" from JSON producers; missing means 0."""
    if value is None or value == "":
        return 0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())

    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"story.word_count must be a non-negative integer, got {value!r}")
    return value
