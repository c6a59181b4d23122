"""Plain-language sentences for a simulation summary."""

from typing import Optional

from .summary import SimulationSummary, StabilityTier, XFactor

_STABILITY_TEXT = {
    StabilityTier.FRAGILE: "Near coin flip with wide swings; small breaks decide it.",
    StabilityTier.TRAP: "There is a favorite, but the outcome range is wide.",
    StabilityTier.MODERATE: "Typical spread of outcomes.",
    StabilityTier.STABLE: "Clear favorite with a tight outcome range.",
}


def confidence_range_text(summary: SimulationSummary, name_a: str, name_b: str) -> str:
    """Describe the central 95% of trial deltas (p2.5 to p97.5)."""
    floor = summary.percentiles.p2_5
    ceiling = summary.percentiles.p97_5
    if floor > 0:
        return f"{name_a} wins by {floor:.2f} to {ceiling:.2f}."
    if ceiling < 0:
        return f"{name_b} wins by {abs(ceiling):.2f} to {abs(floor):.2f}."
    return f"Anything from {name_b} by {abs(floor):.2f} to {name_a} by {ceiling:.2f}."


def x_factor_text(x_factor: Optional[XFactor], name_a: str, name_b: str) -> str:
    if x_factor is None:
        return "No single category stands out."
    offense = name_a if x_factor.offense == "A" else name_b
    defense = name_b if x_factor.offense == "A" else name_a
    if x_factor.advantage >= 0:
        return (
            f"{x_factor.label}: {offense}'s offense holds a {x_factor.advantage:.2f} sigma edge "
            f"over {defense}'s defense."
        )
    return (
        f"{x_factor.label}: {defense}'s defense holds a {abs(x_factor.advantage):.2f} sigma edge "
        f"over {offense}'s offense."
    )


def stability_text(tier: StabilityTier) -> str:
    return _STABILITY_TEXT[tier]


def summary_lines(summary: SimulationSummary, name_a: str, name_b: str) -> list:
    """Rows for the analytics table: (label, text)."""
    return [
        ("Win Probability", f"{summary.win_prob_a * 100:.1f}% for {name_a}"),
        ("95% Confidence Range", confidence_range_text(summary, name_a, name_b)),
        ("Matchup Frangibility", f"{summary.stability.value}. {stability_text(summary.stability)}"),
        ("Confidence", summary.confidence.value),
        ("Upset Outlook", _upset_text(summary, name_a, name_b)),
        ("Key X-Factor", x_factor_text(summary.x_factor, name_a, name_b)),
    ]


def _upset_text(summary: SimulationSummary, name_a: str, name_b: str) -> str:
    upset = summary.upset
    if upset.underdog is None:
        return "Even matchup; no underdog."
    name = name_a if upset.underdog == "A" else name_b
    return f"{upset.label}: {name} wins {upset.rate * 100:.1f}% of simulations."
