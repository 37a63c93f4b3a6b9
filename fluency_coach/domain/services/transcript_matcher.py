"""Lenient matching of speech-to-text hypotheses against practice targets."""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_EDGE_PUNCTUATION = re.compile(r"^[\W_]+|[\W_]+$")


def tokenize(text: str) -> list[str]:
    """Split on whitespace, case-fold and strip surrounding punctuation.
    
    Edge apostrophes and quotes are stripped too, so only inner apostrophes
    survive and punctuation-only fragments are dropped.
    """
    tokens = []
    for raw in text.split():
        token = _EDGE_PUNCTUATION.sub("", raw.casefold())
        if token:
            tokens.append(token)
    return tokens


@dataclass(frozen=True)
class MatchDecision:
    """Outcome of matching one hypothesis against the current target."""
    
    percent: int
    accepted: bool = False


class TranscriptMatcher:
    """Score how much of a target a hypothesis covers.
    
    The heuristic is deliberately forgiving so that interim hypotheses,
    which are often truncated or slightly misrecognized, still show progress.
    It is not an edit distance.
    """
    
    def __init__(self, acceptance_threshold: int = 60):
        if not 0 <= acceptance_threshold <= 100:
            raise ValueError("acceptance_threshold must be within [0, 100]")
        self.acceptance_threshold = acceptance_threshold
    
    def count_matches(self, candidate_text: str, target_text: str) -> tuple[int, int]:
        """Return ``(matched, total)`` target tokens for a hypothesis.
        
        Each target token claims at most one candidate token. Candidates are
        scanned outward from the target token's own position, and a pair
        matches when either token contains the other.
        """
        target_tokens = tokenize(target_text)
        candidate_tokens = tokenize(candidate_text)
        used = [False] * len(candidate_tokens)
        
        matched = 0
        for position, target_token in enumerate(target_tokens):
            for index in self._scan_order(position, len(candidate_tokens)):
                if used[index]:
                    continue
                candidate_token = candidate_tokens[index]
                if candidate_token in target_token or target_token in candidate_token:
                    used[index] = True
                    matched += 1
                    break
        
        return matched, len(target_tokens)
    
    def score(self, candidate_text: str, target_text: str) -> int:
        """Percentage of target tokens found among the candidate tokens, rounded."""
        matched, total = self.count_matches(candidate_text, target_text)
        if total == 0:
            return 0
        return round(matched / total * 100)
    
    def evaluate_interim(self, candidate_text: str, target_text: str) -> MatchDecision:
        """Score a partial hypothesis. Interim results never accept a target."""
        return MatchDecision(percent=self.score(candidate_text, target_text))
    
    def evaluate_final(self, candidate_text: str, target_text: str) -> MatchDecision:
        """Score a final hypothesis and decide whether it satisfies the target.
        
        Acceptance compares the exact ratio with the threshold; only the
        reported percent is rounded.
        """
        matched, total = self.count_matches(candidate_text, target_text)
        percent = round(matched / total * 100) if total else 0
        accepted = total > 0 and matched * 100 >= self.acceptance_threshold * total
        logger.debug(
            f"Final hypothesis matched {matched}/{total} tokens of '{target_text}' "
            f"({'accepted' if accepted else 'rejected'})"
        )
        return MatchDecision(percent=percent, accepted=accepted)
    
    @staticmethod
    def _scan_order(position: int, count: int) -> list[int]:
        return sorted(range(count), key=lambda index: (abs(index - position), index))
