"""Narration styles offered to tutorial requesters."""

from enum import StrEnum


class NarrationStyle(StrEnum):
    """Enumerated narration styles, each with a fixed prompt fragment."""

    EXPLAIN5 = "explain5"
    FRAT = "frat"
    PIZZA = "pizza"
    CAR = "car"
    PROFESSIONAL = "professional"
    DEFAULT = "default"

    @classmethod
    def parse(cls, raw: str | None) -> "NarrationStyle":
        """Resolve a request value, falling back to the default style."""
        if not raw:
            return cls.DEFAULT
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.DEFAULT

    @property
    def hint(self) -> str:
        """Instruction fragment injected into generation prompts."""
        return _STYLE_HINTS[self]


_STYLE_HINTS: dict[NarrationStyle, str] = {
    NarrationStyle.EXPLAIN5: (
        "Explain like I am 5 years old, using simple words and concepts."
    ),
    NarrationStyle.FRAT: (
        "Explain in a casual college frat guy tone, with humor and slang."
    ),
    NarrationStyle.PIZZA: (
        "Use a Pizza Restaurant as an analogy context "
        "(e.g., orders, kitchen, delivery)."
    ),
    NarrationStyle.CAR: (
        "Use a Car Factory analogy for the explanation "
        "(e.g., assembly line, parts, workers)."
    ),
    NarrationStyle.PROFESSIONAL: (
        "Explain in a formal, adult professional manner suitable for "
        "business contexts."
    ),
    NarrationStyle.DEFAULT: "Explain in a clear and engaging manner.",
}
