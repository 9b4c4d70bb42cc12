"""Best-effort AI drafting and summarization for the knowledge base.

Neither operation raises on service failure: each returns a fixed,
human-readable fallback message instead.
"""

import logging
from collections.abc import Sequence

from ..errors import ValidationError
from .llm_client import LLMClient

logger = logging.getLogger(__name__)

GENERATE_DISABLED = "<p>AI Suggestions are disabled (Missing API Key).</p>"
GENERATE_EMPTY = "<p>Could not generate a response.</p>"
GENERATE_ERROR = "<p>Error communicating with AI service.</p>"
GENERATE_FALLBACKS = frozenset({GENERATE_DISABLED, GENERATE_EMPTY, GENERATE_ERROR})

SUMMARY_DISABLED = "AI Summary is disabled (Missing API Key)."
SUMMARY_NO_TITLES = "No entries available to summarize."
SUMMARY_EMPTY = "Could not generate summary."
SUMMARY_ERROR = "Error communicating with AI service to generate summary."

GENERATE_SYSTEM_PROMPT = """You are a senior IT Support Specialist at a major bank.
Provide technical, concise and professional answers (or drafts) for Knowledge Base entries.

Format the response as valid HTML using simple tags (e.g., <p>, <ul>, <ol>, <li>, <strong>, <em>, <br>).
Do not include the outer ```html``` code blocks or the <html>/<body> tags. Just the content body.
Ensure the tone is suitable for an IT knowledge base."""

SUMMARY_SYSTEM_PROMPT = """You are an intelligent IT Knowledge Base assistant.
Provide a high-level, concise summary (max 2-3 sentences) of the topics and technical solutions in a list of article titles.
Group common themes (e.g., "Users can find solutions for VPN connectivity, printer setup on specific floors, and security policy updates.").
Do not list every single title. Keep it professional and helpful."""


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code block, if the model added one."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    lines = stripped.split("\n")[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


class Assistant:
    """Drafts entry content and summarizes visible entries via an LLM."""

    def __init__(self, llm: LLMClient | None) -> None:
        """Initialize the assistant.

        Args:
            llm: The LLM client, or None when no API key is configured.
        """
        self.llm = llm

    @property
    def enabled(self) -> bool:
        return self.llm is not None

    @staticmethod
    def is_fallback(text: str) -> bool:
        """Check whether a generate() result is a fallback message, not a draft."""
        return text in GENERATE_FALLBACKS

    async def generate(self, question: str, context: str | None = None) -> str:
        """Draft HTML content for an entry title or question.

        Args:
            question: The entry title or question.
            context: Optional extra context for the model.

        Returns:
            Generated HTML, or a fallback message.

        Raises:
            ValidationError: If question is blank.
        """
        if not question.strip():
            raise ValidationError("Please enter a title first so the AI knows what to generate.")
        if self.llm is None:
            return GENERATE_DISABLED

        prompt = f"Question: {question.strip()}"
        if context:
            prompt += f"\n\nContext provided: {context}"

        try:
            text = await self.llm.complete(prompt, system=GENERATE_SYSTEM_PROMPT)
        except Exception as e:
            logger.warning(f"AI content generation failed: {e}")
            return GENERATE_ERROR

        return _strip_code_fence(text) or GENERATE_EMPTY

    async def summarize(self, titles: Sequence[str]) -> str:
        """Summarize a list of entry titles in two or three sentences."""
        if self.llm is None:
            return SUMMARY_DISABLED
        if not titles:
            return SUMMARY_NO_TITLES

        listing = "\n".join(f"- {title}" for title in titles)
        prompt = (
            "Analyze the following list of Knowledge Base article titles "
            f"currently visible in the dashboard:\n{listing}"
        )

        try:
            text = await self.llm.complete(prompt, system=SUMMARY_SYSTEM_PROMPT)
        except Exception as e:
            logger.warning(f"AI summary failed: {e}")
            return SUMMARY_ERROR

        return text.strip() or SUMMARY_EMPTY
