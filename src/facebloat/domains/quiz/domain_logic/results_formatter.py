"""Plain-text rendering of a score result, for download or sharing."""

from __future__ import annotations

import textwrap
from datetime import datetime

from facebloat.domains.quiz.domain_logic.models import ScoreResult

RULE = "─" * 59
BANNER = "═" * 59

_DRIVER_EMOJI = {
    "sleep": "😴",
    "hydration": "🥤",
    "nutrition": "🍽️",
    "exercise": "🏃",
    "stress": "😰",
    "allergies": "🤧",
    "hormones": "⚖️",
    "medications": "💊",
}

TODAY_PLAN = [
    "Drink 16oz of water with a pinch of sea salt",
    "Elevate your head 10-20° for tonight's sleep",
    "Avoid adding salt to your meals today",
    "Set a bedtime alarm for 8+ hours of sleep",
]

WEEK_PLAN = [
    "Establish consistent 7.5-8 hour sleep schedule",
    "Replace one processed meal daily with fresh ingredients",
    "Drink 2+ liters of water, evenly spaced",
    "Add potassium-rich foods (banana, spinach) daily",
]

DISCLAIMER = (
    "This quiz is for educational purposes only and is not medical advice. "
    "Results are based on lifestyle factors and should not replace professional "
    "medical consultation. If you have persistent facial swelling or health "
    "concerns, please consult with a healthcare provider."
)


def driver_emoji(category_id: str) -> str:
    return _DRIVER_EMOJI.get(category_id, "📊")


def risk_marker(letter: str) -> str:
    """Later letters are the riskier answers."""
    if letter >= "F":
        return "⚠️"
    if letter >= "D":
        return "⚡"
    return "✅"


def _wrap(text: str, width: int, indent: str = "") -> str:
    return textwrap.fill(
        text,
        width=width,
        initial_indent=indent,
        subsequent_indent=indent,
        break_long_words=False,
        break_on_hyphens=False,
    )


def _section(lines: list[str], title: str) -> None:
    lines.append(title)
    lines.append(RULE)


def format_results_as_text(
    result: ScoreResult,
    *,
    include_header: bool = True,
    include_timestamp: bool = True,
    include_coaching: bool = True,
    include_action_plans: bool = True,
    now: datetime | None = None,
) -> str:
    lines: list[str] = []

    if include_header:
        lines += [BANNER, "        🎯 FACE BLOAT RISK ASSESSMENT RESULTS", BANNER, ""]

    lines.append(f"📊 YOUR SCORE: {result.score}/100")
    lines.append(f"📈 RISK LEVEL: {result.band.label}")
    lines.append("")

    _section(lines, "💡 OVERVIEW")
    lines.append(_wrap(result.band.blurb, 60))
    lines.append("")

    if result.top_drivers:
        _section(lines, "🔍 TOP RISK FACTORS")
        for i, driver in enumerate(result.top_drivers, start=1):
            dots = "." * max(2, 40 - len(driver.label))
            lines.append(
                f"{i}. {driver_emoji(driver.category_id)} {driver.label} {dots} {driver.pct}%"
            )
        lines.append("")

    if include_coaching and result.answer_contexts:
        _section(lines, "📝 YOUR RESPONSES & COACHING")
        for i, answer in enumerate(result.answer_contexts, start=1):
            if i > 1:
                lines.append("")
            lines.append(f"Q{i}: {answer.question_text}")
            lines.append(
                f"{risk_marker(answer.choice)} Your choice ({answer.choice}): {answer.choice_title}"
            )
            lines.append("💬 Coaching:")
            lines.append(_wrap(answer.context, 60, indent="   "))
        lines.append("")

    if include_action_plans:
        _section(lines, "🎯 TODAY'S ACTION PLAN")
        lines += [f"• {item}" for item in TODAY_PLAN]
        lines.append("")
        _section(lines, "📅 7-DAY PLAN")
        lines += [f"• {item}" for item in WEEK_PLAN]
        lines.append("")

    _section(lines, "⚠️  IMPORTANT DISCLAIMER")
    lines.append(_wrap(DISCLAIMER, 60))
    lines.append("")

    if include_timestamp:
        now = now or datetime.now()
        lines.append(RULE)
        lines.append(f"Generated: {now:%Y-%m-%d} at {now:%H:%M:%S}")
        lines.append("Source: Face Bloat Risk Assessment Tool")
        lines.append("")

    return "\n".join(lines)
