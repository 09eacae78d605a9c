"""Tests for visual prompt extraction heuristics."""

from tutorialize.services.visual_prompt import (
    VisualPromptExtractor,
    strip_literal_text,
)


def test_extracts_picture_sentence() -> None:
    text = (
        "Let's start with the basics. When you first open the application, "
        "it's like entering a house - the front door is your entry point. "
        "Picture a cozy house with a welcoming entrance."
    )

    assert VisualPromptExtractor().extract(text) == (
        "cozy house with a welcoming entrance."
    )


def test_strips_quoted_words_and_sign_cues() -> None:
    text = (
        "Now your data travels. Imagine a delivery truck with a sign that says "
        '"FAST" zooming down the road.'
    )

    assert VisualPromptExtractor().extract(text) == (
        "delivery truck zooming down the road."
    )


def test_falls_back_to_whole_text_without_visual_cue() -> None:
    text = "Your data sits safely in storage until you need it."

    assert VisualPromptExtractor().extract(text) == text


def test_strip_literal_text_removes_labels() -> None:
    assert strip_literal_text('A robot holding a banner labeled "Hello World"') == (
        "A robot holding a banner"
    )


def test_strip_literal_text_removes_single_quoted_fragment() -> None:
    assert strip_literal_text("A chalkboard showing 'hello world' in the corner") == (
        "A chalkboard showing in the corner"
    )


def test_build_prompt_wraps_scene_in_cartoon_style() -> None:
    prompt = VisualPromptExtractor().build_prompt(
        "Finally, it all comes together. Visualize a waiter carrying a plate."
    )

    assert prompt == (
        "Cartoon illustration, simple colorful style: waiter carrying a plate. "
        "No text, letters, or writing anywhere in the image."
    )
