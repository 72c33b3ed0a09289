"""Unit tests for story record validation."""

import pytest

from cuento.contexts.pipeline import StoryDocument, validate_story_data
from cuento.exceptions import CuentoError, ValidationError


@pytest.mark.unit
def test_valid_record(story_data):
    story = validate_story_data(story_data)

    assert isinstance(story, StoryDocument)
    assert story.id == "a1b2c3"
    assert story.title == "El dragón que no sabía volar"
    assert story.chapter_count == 2
    assert story.image_count == 1
    assert story.word_count == 42
    assert story.chapters[0].title == "el huevo"
    assert story.generated_images[0].description == "Un huevo enorme"


@pytest.mark.unit
def test_missing_fields_reported_together():
    with pytest.raises(ValidationError) as exc_info:
        validate_story_data({"story": {"title": "x", "chapters": ["a"]}})

    assert "id" in str(exc_info.value)
    assert "name" in str(exc_info.value)


@pytest.mark.unit
def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        validate_story_data({})
    assert issubclass(ValidationError, CuentoError)


@pytest.mark.unit
def test_non_mapping_record():
    with pytest.raises(ValidationError, match="mapping"):
        validate_story_data(["not", "a", "record"])


@pytest.mark.unit
@pytest.mark.parametrize("title", [None, "", "   "])
def test_missing_title(story_data, title):
    story_data["story"]["title"] = title

    with pytest.raises(ValidationError, match="title"):
        validate_story_data(story_data)


@pytest.mark.unit
def test_empty_chapters(story_data):
    story_data["story"]["chapters"] = []

    with pytest.raises(ValidationError, match="at least one chapter"):
        validate_story_data(story_data)


@pytest.mark.unit
@pytest.mark.parametrize("chapters", ["one long chapter", {"title": "x"}, None])
def test_chapters_not_a_list(story_data, chapters):
    story_data["story"]["chapters"] = chapters

    with pytest.raises(ValidationError, match="valid chapters"):
        validate_story_data(story_data)


@pytest.mark.unit
@pytest.mark.parametrize("word_count", [-1, "many", True, 3.5, "-4", [812]])
def test_bad_word_count(story_data, word_count):
    story_data["story"]["word_count"] = word_count

    with pytest.raises(ValidationError, match="word_count"):
        validate_story_data(story_data)


@pytest.mark.unit
def test_optional_fields_absent(story_data):
    for key in ("generatedImages", "style", "language"):
        del story_data[key]
    del story_data["story"]["word_count"]

    story = validate_story_data(story_data)

    assert story.image_count == 0
    assert story.word_count == 0
    assert story.style is None
    assert story.language is None


@pytest.mark.unit
def test_string_chapters_and_images(story_data):
    story_data["story"]["chapters"] = ["Había una vez."]
    story_data["generatedImages"] = ["https://example.org/a.png"]

    story = validate_story_data(story_data)

    assert story.chapters[0].content == "Había una vez."
    assert story.generated_images[0].url == "https://example.org/a.png"


@pytest.mark.unit
@pytest.mark.parametrize("word_count, expected", [(812, 812), (812.0, 812), ("812", 812), (None, 0), (0, 0)])
def test_word_count_coercion(story_data, word_count, expected):
    story_data["story"]["word_count"] = word_count

    assert validate_story_data(story_data).word_count == expected


@pytest.mark.unit
@pytest.mark.parametrize("story_id", ["../x", "a/b", "a\\b", "..", "."])
def test_story_id_with_path_separators(story_data, story_id):
    story_data["id"] = story_id

    with pytest.raises(ValidationError, match="path separators"):
        validate_story_data(story_data)


@pytest.mark.unit
def test_numeric_story_id(story_data):
    story_data["id"] = 1234

    assert validate_story_data(story_data).id == "1234"
