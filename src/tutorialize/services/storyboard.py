"""Storyboard generation from extracted source text."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from tutorialize.domain.errors import StoryboardGenerationError
from tutorialize.domain.styles import NarrationStyle

logger = logging.getLogger(__name__)

_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]+\}")

STORYBOARD_INSTRUCTIONS = """\
You are a tutorial creator that transforms content into engaging, \
conversational stories using visual analogies.

Your goal is to create a TUTORIAL that teaches the user step-by-step, \
NOT just describe images.

Each frame should:
1. Tell a story that flows naturally from the previous frame
2. Use conversational language that directly addresses the learner
3. Explain concepts through relatable analogies
4. Focus on TEACHING and UNDERSTANDING, not just describing visuals
5. BE CONCISE - Keep each frame to 2-3 sentences maximum

IMPORTANT: Only output a valid JSON object where each key is a step \
(step1, step2, step3, etc.) and each value contains:
- A SHORT conversational tutorial explanation (2-3 sentences max)
- A brief visual scene description to illustrate it (but NO text/labels \
in the scene)

Use the MINIMUM number of steps needed (typically 5-7 frames). Make it \
flow like a story.

CRITICAL RULES:
1. Write in a conversational, tutorial style: "Let's start by...", \
"Now...", "Here's how..."
2. KEEP IT SHORT - Maximum 2-3 sentences per frame
3. NEVER mention text, labels, signs, or written words in the visual \
descriptions
4. Make each frame build on the previous one - create a narrative flow
5. Focus on teaching and understanding, not just listing features

Example output format:
{
  "step1": "Let's start with the basics. When you first open the \
application, it's like entering a house - the front door is your entry \
point. Picture a cozy house with a welcoming entrance.",
  "step2": "Now you need to send information somewhere. Think of it like a \
delivery truck picking up packages. Visualize a friendly delivery truck \
loading colorful boxes.",
  "step3": "Finally, all that information gets stored safely in a \
warehouse. Your data sits here until you need it again. Imagine a large \
warehouse with neatly stacked boxes."
}

Do not include any text before or after the JSON object. Only return valid \
JSON."""


class TextGenerationClient(Protocol):
    """Interface for single-turn text generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
    ) -> str:
        """Return the model's free-form text reply."""


@dataclass(frozen=True)
class StoryboardPrompt:
    """System instructions and user content for one storyboard request."""

    instructions: str
    prompt: str


@dataclass
class StoryboardGenerator:
    """Builds storyboard prompts and parses the model's reply."""

    client: TextGenerationClient
    model: str
    reasoning_effort: str | None
    store: bool
    char_budget: int = 8_000

    def build_prompt(self, content: str, style: NarrationStyle) -> StoryboardPrompt:
        """Build the storyboard prompt for source text and a style."""
        excerpt = content[: self.char_budget]
        prompt = (
            f'Content to explain:\n"""{excerpt}"""\n\n'
            f"Style requirement: {style.hint}\n\n"
            "Create a conversational tutorial that teaches this content "
            "step-by-step. Use 5-8 frames that flow together as a story. "
            "Make it engaging and easy to understand. Each frame should teach "
            "something new while building on what came before."
        )
        return StoryboardPrompt(instructions=STORYBOARD_INSTRUCTIONS, prompt=prompt)

    async def generate(self, content: str, style: NarrationStyle) -> dict[str, str]:
        """Generate an ordered step map for the given source text."""
        request = self.build_prompt(content, style)
        reply = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=request.instructions,
            prompt=request.prompt,
        )
        storyboard = parse_storyboard(reply)
        logger.info("Generated storyboard with %d steps", len(storyboard))
        return storyboard


def parse_storyboard(reply: str) -> dict[str, str]:
    """Parse a storyboard object out of a possibly chatty model reply."""
    try:
        parsed = json.loads(reply)
    except json.JSONDecodeError:
        match = _JSON_OBJECT_PATTERN.search(reply)
        if not match:
            logger.error("Storyboard reply contained no JSON object: %r", reply)
            raise StoryboardGenerationError(
                "Model output was not valid JSON"
            ) from None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            logger.error("Storyboard JSON substring failed to parse: %r", reply)
            raise StoryboardGenerationError("Model output was not valid JSON") from exc

    if not isinstance(parsed, dict):
        raise StoryboardGenerationError("Model output was not a JSON object")
    if not parsed:
        raise StoryboardGenerationError("Model did not generate any storyboard steps")
    return {str(key): _step_text(value) for key, value in parsed.items()}


def _step_text(value: object) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        return " ".join(str(part).strip() for part in value.values() if part)
    return str(value).strip()
