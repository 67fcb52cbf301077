"""Operator mentor: hosted model first, local lesson lookup as fallback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from boiler_ots.advisory.client import AdvisoryClient, AdvisoryError, ImageAttachment
from boiler_ots.logger import get_logger
from boiler_ots.models.constants import COMBUSTION
from boiler_ots.safety.anomaly_detector import AnomalyState

logger = get_logger(__name__)

LOCAL_MARKER = "[Local mentor]"


@dataclass(frozen=True)
class Lesson:
    id: str
    category: str
    keywords: tuple
    question: str
    answer: str
    source: str


LESSONS = [
    Lesson(
        id="sh5-high",
        category="temperature",
        keywords=("sh5", "superheat", "temperature", "overheat"),
        question="How do I bring SH5 temperature down?",
        answer=(
            "1. Check the fire barycenter: a rear fire (> 3.5) heats the superheaters.\n"
            "2. Shift primary air from zone 3 towards zones 1-2.\n"
            "3. In mode 2, let the air balance raise secondary air; it cools the flue gas.\n"
            "4. If fouling is high, run a soot blow."
        ),
        source="Shift handbook, superheater protection",
    ),
    Lesson(
        id="barycenter",
        category="fire",
        keywords=("barycenter", "fire position", "rear fire", "center"),
        question="How do I re-center the fire?",
        answer=(
            "The barycenter is the air-weighted position of the fire on the six rollers "
            "(1 = front, 6 = back). Aim for 2.0-3.5. Move it forward with more zone 1 air "
            "or a higher zone 1 sub-split. A high-PCI mix pulls it forward by itself; wet or "
            "low-PCI waste lets it drift back."
        ),
        source="Grate operation manual",
    ),
    Lesson(
        id="oxygen",
        category="combustion",
        keywords=("o2", "oxygen", "excess air", "unburnt"),
        question="What should the O2 be?",
        answer=(
            "Target about 6 % in the flue gas. Below 4 % combustion becomes incomplete "
            "and CO rises; reduce the pusher speed. Above 8 % the furnace cools; feed more waste."
        ),
        source="Combustion control guide",
    ),
    Lesson(
        id="modes",
        category="regulation",
        keywords=("mode", "regulation", "automatic", "manual", "air balance"),
        question="What is the difference between mode 1 and mode 2?",
        answer=(
            "Mode 1 is the fixed law: secondary air follows steam flow (250 Nm3/h per t/h). "
            "Mode 2 is the air balance: total air is held at 1330 Nm3/h per t/h of steam and "
            "the loop trims the pusher on Kp and the zone 2/3 split on O2."
        ),
        source="Regulation manual",
    ),
    Lesson(
        id="fouling",
        category="fouling",
        keywords=("fouling", "soot", "clean", "deposit"),
        question="When should I soot-blow?",
        answer=(
            "Fouling insulates the exchanger tubes and raises SH5 about 0.5 C per point. "
            "Soot-blow when fouling passes 30 %; one pass removes 30 points."
        ),
        source="Boiler maintenance notes",
    ),
    Lesson(
        id="pci",
        category="waste",
        keywords=("pci", "calorific", "waste", "mix", "inert", "plastic"),
        question="How does the waste mix change the fire?",
        answer=(
            "Wet waste (4000 kJ/kg) slows burnout and pulls the fire back; plastics "
            "(21000 kJ/kg) burn fast and raise SH5. Inert ballast adds no heat. Watch the "
            "estimated PCI and adapt the pusher before temperatures move."
        ),
        source="Waste reception guide",
    ),
]

HELP_TOPICS = (
    "- SH5 temperature and overheating\n"
    "- Fire barycenter\n"
    "- Oxygen and combustion\n"
    "- Regulation modes\n"
    "- Fouling and soot blowing\n"
    "- PCI and waste quality"
)


@dataclass(frozen=True)
class MentorContext:
    """Live plant values quoted in every answer."""

    sh5_temp: float
    o2: float
    barycenter: float
    mode: int
    fouling: float
    pci: float
    as_flow: float

    def describe(self) -> str:
        return (
            f"- SH5: {self.sh5_temp:.0f} C\n"
            f"- O2: {self.o2:.1f} %\n"
            f"- Barycenter: {self.barycenter:.2f}\n"
            f"- Mode: {self.mode}\n"
            f"- Fouling: {self.fouling:.0f} %\n"
            f"- Estimated PCI: {self.pci:.0f} kJ/kg\n"
            f"- Secondary air: {self.as_flow:.0f} Nm3/h"
        )


def find_lessons(question: str) -> List[Lesson]:
    q = question.lower()
    return [l for l in LESSONS if any(kw in q for kw in l.keywords)]


def _format_lesson(lesson: Lesson, ctx: MentorContext) -> str:
    sh5_flag = "critical" if ctx.sh5_temp > COMBUSTION.sh5_safe_limit else "ok"
    text = (
        f"**{lesson.question}**\n\n{lesson.answer}\n\n---\n"
        f"**Your plant now**:\n"
        f"- SH5: {ctx.sh5_temp:.0f} C ({sh5_flag})\n"
        f"- O2: {ctx.o2:.1f} %\n"
        f"- Barycenter: {ctx.barycenter:.2f}\n"
        f"- Mode: {ctx.mode}\n"
    )
    if lesson.category == "temperature" and ctx.sh5_temp > 640:
        text += "\n**WARNING**: SH5 is in the danger zone."
    if lesson.category == "fouling" and ctx.fouling > 30:
        text += f"\nFouling is at {ctx.fouling:.0f} %. A soot blow is recommended."
    return text + f"\n\n*Source: {lesson.source}*"


def _contextual_answer(question: str, ctx: MentorContext) -> str:
    q = question.lower()
    if "help" in q or q.strip().endswith("?"):
        return f"I can help with:\n\n{HELP_TOPICS}\n\nAsk me a specific question."

    issues = []
    if ctx.sh5_temp > COMBUSTION.sh5_safe_limit:
        issues.append(f"SH5 is high ({ctx.sh5_temp:.0f} C). Ask about \"SH5\".")
    if ctx.fouling > 40:
        issues.append(f"Fouling is heavy ({ctx.fouling:.0f} %). Ask about \"soot\".")
    if ctx.barycenter < 2.5 or ctx.barycenter > 4.0:
        issues.append(f"The fire is off-center ({ctx.barycenter:.2f}). Ask about \"barycenter\".")
    if issues:
        return "I did not understand the question, but I noticed:\n\n" + "\n\n".join(issues)
    return "Sorry, I did not understand. Try rephrasing or ask for \"help\"."


def _anomaly_advice(anomaly: Optional[AnomalyState]) -> str:
    if anomaly is None or anomaly.is_clear:
        return ""
    lines = [f"- {a.message}: {a.action}" for a in anomaly.active_anomalies]
    return f"\n\n**Active alerts ({anomaly.risk_level.value})**:\n" + "\n".join(lines)


def local_answer(
    question: str, ctx: MentorContext, anomaly: Optional[AnomalyState] = None
) -> str:
    """Rule-based answer built from the lesson table and the live context."""
    matches = find_lessons(question)
    body = _format_lesson(matches[0], ctx) if matches else _contextual_answer(question, ctx)
    return f"{LOCAL_MARKER} {body}{_anomaly_advice(anomaly)}"


class Mentor:
    """Answer operator questions; never raises on advisory failure."""

    def __init__(self, client: Optional[AdvisoryClient] = None):
        self.client = client

    @property
    def online(self) -> bool:
        return self.client is not None

    def ask(
        self,
        question: str,
        ctx: MentorContext,
        anomaly: Optional[AnomalyState] = None,
        images: Sequence[ImageAttachment] = (),
    ) -> str:
        if self.client is not None:
            try:
                return self.client.ask(question, ctx.describe() + _anomaly_advice(anomaly), images)
            except AdvisoryError as exc:
                logger.warning("Advisory model unavailable, answering locally: %s", exc)
        return local_answer(question, ctx, anomaly)
