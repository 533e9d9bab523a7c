"""Color-aware correction of generic classifier labels toward produce names."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from domain.models import ColorSample, CorrectedResult, DominantColor, RawPrediction

logger = logging.getLogger(__name__)

# (lowercased raw label, sample) -> (new label, marks corrected) or None
RuleFn = Callable[[str, ColorSample], Optional[Tuple[str, bool]]]


@dataclass(frozen=True)
class CorrectionRule:
    """A named relabeling rule."""
    name: str
    action: str  # Shown in the debug panel
    apply: RuleFn


def keyword_rule(keywords: Sequence[str], color: Optional[DominantColor],
                 new_label: str, marks_corrected: bool = True) -> RuleFn:
    """
    Build a rule that fires when the label contains any keyword and the
    sample has the required dominant color (None means any color).
    """
    keywords = tuple(k.lower() for k in keywords)

    def rule(label: str, sample: ColorSample) -> Optional[Tuple[str, bool]]:
        if color is not None and sample.dominant != color:
            return None
        if any(k in label for k in keywords):
            return (new_label, marks_corrected)
        return None

    return rule


DEFAULT_RULES: List[CorrectionRule] = [
    CorrectionRule(
        name="red_fruit_to_tomato",
        action="Correction: red color -> Tomato",
        apply=keyword_rule(["orange", "apple", "pomegranate", "peach", "apricot"],
                           DominantColor.RED, "Tomato"),
    ),
    CorrectionRule(
        name="green_vegetable_to_cucumber",
        action="Correction: green color -> Cucumber",
        apply=keyword_rule(["zucchini", "squash", "banana", "corn"],
                           DominantColor.GREEN, "Cucumber"),
    ),
    CorrectionRule(
        name="green_brassica_to_leafy_greens",
        action="Correction: green + cabbage -> Leafy Greens",
        apply=keyword_rule(["cabbage", "broccoli"], DominantColor.GREEN, "Leafy Greens"),
    ),
    CorrectionRule(
        name="simplify_pepper",
        action="Simplified name",
        apply=keyword_rule(["pepper"], None, "Pepper", marks_corrected=False),
    ),
]


class CorrectionEngine:
    """Applies an ordered rule list to one prediction."""

    def __init__(self, rules: Optional[List[CorrectionRule]] = None):
        """
        Args:
            rules: Ordered rules (default: DEFAULT_RULES)
        """
        self.rules = list(DEFAULT_RULES if rules is None else rules)

    def correct(self, prediction: RawPrediction, sample: ColorSample) -> CorrectedResult:
        """
        Every rule is checked against the original label, in order. The last
        matching rule sets the label; the corrected flag is OR-ed over all
        matches so a cosmetic rule never clears it.

        Args:
            prediction: Top classifier entry
            sample: Color sample of the same frame

        Returns:
            CorrectedResult (raw label passed through when nothing matches)
        """
        raw_label = prediction.label
        display_label = raw_label
        was_corrected = False
        rule_applied = None

        try:
            original = raw_label.lower()
        except AttributeError:
            logger.debug("Unusable label %r, passing through", raw_label)
            original = None

        if original is not None:
            for rule in self.rules:
                hit = rule.apply(original, sample)
                if hit is None:
                    continue
                display_label, marks_corrected = hit
                was_corrected = was_corrected or marks_corrected
                rule_applied = rule.name

        return CorrectedResult(
            display_label=display_label,
            raw_label=raw_label,
            was_corrected=was_corrected,
            rule_applied=rule_applied,
            confidence=float(prediction.confidence),
        )

    def describe(self, rule_name: Optional[str]) -> Optional[str]:
        """Human-readable action for a rule name, None if unknown."""
        for rule in self.rules:
            if rule.name == rule_name:
                return rule.action
        return None
