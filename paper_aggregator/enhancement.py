"""Post-merge enhancement of paper records.

Enhancement is additive: it only fills fields a record does not carry yet and
never changes the identity fields a source produced.
"""

import json
import logging
import re

from pydantic import ValidationError

from .llm import LLMProvider
from .papers.models import AISummary, EnhancedContent, PaperRecord
from .papers.protocols import SignalProvider
from .scoring.heuristics import assess_breakthrough, paper_citation_velocity

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "You explain research papers to practitioners. "
    "Reply with a single JSON object and nothing else."
)

SUMMARY_PROMPT = """Summarize this paper for a busy engineer.

Title: {title}

Abstract: {abstract}

Return JSON with exactly these keys:
- "whyMatters": one sentence on why the paper matters
- "keyContribution": one sentence on its key contribution
- "practicalImpact": one sentence on its practical impact"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_summary(text: str) -> AISummary | None:
    """Parse a model reply into an AISummary, or None if it isn't one."""
    cleaned = _CODE_FENCE.sub("", text.strip())
    try:
        return AISummary.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, ValidationError, TypeError):
        return None


class PaperEnhancer:
    """
    Attaches metrics, generated content and a breakthrough assessment.

    Placeholder values come from the signal provider. When a language model
    is configured it writes the AI summary; any failure there falls back to
    the signal provider's template summary.

    Usage:
        enhancer = PaperEnhancer(RandomSignalProvider(seed=7))
        enhanced = await enhancer.enhance(paper)
    """

    def __init__(self, signals: SignalProvider, llm: LLMProvider | None = None):
        self.signals = signals
        self.llm = llm

    async def summarize(self, title: str, abstract: str) -> AISummary | None:
        """Ask the language model for a summary. Returns None on any failure."""
        if self.llm is None:
            return None

        prompt = SUMMARY_PROMPT.format(title=title, abstract=abstract)
        try:
            reply = await self.llm.complete(
                prompt,
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                temperature=0.3,
                max_tokens=400,
            )
        except Exception as e:
            logger.warning(f"Summary generation failed for '{title[:60]}': {e}")
            return None

        summary = parse_summary(reply)
        if summary is None:
            logger.warning(f"Unparseable summary reply for '{title[:60]}'")
        return summary

    async def summary_for(self, paper: PaperRecord) -> AISummary:
        summary = await self.summarize(paper.title, paper.abstract)
        return summary or self.signals.summary(paper)

    async def enhance(self, paper: PaperRecord) -> PaperRecord:
        """Return a copy of the record with every enhancement field attached."""
        velocity = paper_citation_velocity(paper)
        content = EnhancedContent(
            ai_summary=await self.summary_for(paper),
            lineage=self.signals.lineage(paper),
            key_insights=self.signals.key_insights(paper),
            related_papers=self.signals.related_papers(paper),
        )
        return paper.with_enhancements(
            citation_velocity=velocity,
            metrics=self.signals.impact_metrics(paper),
            enhanced=content,
            breakthrough=assess_breakthrough(self.signals.breakthrough_indicators(paper)),
        )
