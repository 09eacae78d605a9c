"""Heuristic image prompts derived from narrated step text."""

import re
from dataclasses import dataclass
from typing import Protocol

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_VISUAL_CUE = re.compile(
    r"^(?:picture|imagine|visualize|envision|see)\b[\s,:]*",
    re.IGNORECASE,
)
_QUOTED = re.compile(r"\"[^\"]*\"|“[^”]*”|‘[^’]*’|(?<!\w)'[^']{2,}'(?!\w)")
_LITERAL_TEXT_CUES = re.compile(
    r"\s*\b(?:"
    r"(?:that|which)\s+(?:says|reads|spells)"
    r"|with\s+the\s+words?"
    r"|labell?ed(?:\s+as)?"
    r"|with\s+(?:a\s+)?(?:label|caption|sign|text)s?"
    r"|(?:labels?|captions?|signs?|text|words|letters)"
    r")\b",
    re.IGNORECASE,
)
_LEADING_ARTICLE = re.compile(r"^(?:a|an|the)\s+", re.IGNORECASE)

IMAGE_STYLE_PREFIX = "Cartoon illustration, simple colorful style"
IMAGE_STYLE_SUFFIX = "No text, letters, or writing anywhere in the image."


class VisualPromptStrategy(Protocol):
    """Turns narrated step text into an image generation prompt."""

    def build_prompt(self, text: str) -> str:
        """Return the image prompt for ``text``."""


@dataclass(frozen=True)
class VisualPromptExtractor(VisualPromptStrategy):
    """Pattern-based extraction of the visual scene from narration."""

    prefix: str = IMAGE_STYLE_PREFIX
    suffix: str = IMAGE_STYLE_SUFFIX

    def extract(self, text: str) -> str:
        """Return the visual description embedded in a step's narration."""
        sentences = [part.strip() for part in _SENTENCE_SPLIT.split(text.strip())]
        visual = next(
            (sentence for sentence in sentences if _VISUAL_CUE.match(sentence)),
            None,
        )
        if visual is None:
            scene = text
        else:
            scene = _LEADING_ARTICLE.sub("", _VISUAL_CUE.sub("", visual), count=1)
        return strip_literal_text(scene)

    def build_prompt(self, text: str) -> str:
        """Return a cartoon-style image prompt for the step text."""
        scene = self.extract(text) or text.strip()
        return f"{self.prefix}: {scene} {self.suffix}".strip()


def strip_literal_text(scene: str) -> str:
    """Remove quoted fragments and cues asking for rendered words."""
    cleaned = _QUOTED.sub("", scene)
    cleaned = _LITERAL_TEXT_CUES.sub("", cleaned)
    cleaned = re.sub(r"\s+([,.!?;:])", r"\1", cleaned)
    cleaned = re.sub(r"\s{2,}", " ", cleaned)
    return cleaned.strip(" ,;:")
