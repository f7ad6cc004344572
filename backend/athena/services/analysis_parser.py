"""
Parsing and scoring of the model's bracketed-section analysis text.

The analysis prompt asks for sections such as ``[VERDICT]`` and
``[SUPPORTING_EVIDENCE]``; everything here is best-effort string handling
over whatever came back.
"""

import re
from typing import List, Optional

from athena.core.utils import days_since
from athena.models.fact_check import (
    EnhancedSource,
    EvidenceBreakdown,
    EvidenceQuality,
    ParsedAnalysis,
    ReasoningBreakdown,
    Verdict,
)

SECTION_ORDER = [
    "VERDICT", "EXPLANATION", "CLAIM_EXPLANATION", "REASONING_CHAIN",
    "SUPPORTING_EVIDENCE", "CONTRADICTING_EVIDENCE", "NEUTRAL_EVIDENCE",
    "KEY_FACTORS", "METHODOLOGY", "LIMITATIONS", "CONTEXTUAL_NOTES",
    "RELATED_CLAIMS", "SOURCES_ANALYSIS", "CONFIDENCE_FACTORS",
]

DEFAULT_METHODOLOGY = "Multi-source analysis with AI-powered evidence evaluation and systematic reasoning"

BULLET_PREFIXES = ("•", "-", "*")
BULLET_RE = re.compile(r"^[•\-*]\s*")
STEP_RE = re.compile(r"^(Step \d+:|-|•|\*)\s*")

SPECIFICITY_PHRASES = [
    "according to", "reported by", "data shows", "statistics", "study",
    "research", "official", "government", "university", "journal",
]

TRUE_INDICATORS = ["true", "correct", "accurate", "valid", "confirmed", "verified", "supported"]
FALSE_INDICATORS = ["false", "incorrect", "inaccurate", "invalid", "debunked", "refuted", "unsupported"]

# Whole words only: "unverified" must not count as "verified"
TRUE_RE = re.compile(r"\b(" + "|".join(TRUE_INDICATORS) + r")\b")
FALSE_RE = re.compile(r"\b(" + "|".join(FALSE_INDICATORS) + r")\b")


def clean_text(text: str) -> str:
    """Strip bracketed markers, asterisks and bullets, and collapse blank lines."""
    text = re.sub(r"\[.*?\]", "", text)
    text = re.sub(r"\*+", "", text)
    text = text.replace("•", "")
    text = re.sub(r"^\s*[-•*]\s*", "", text, flags=re.MULTILINE)
    text = re.sub(r"\n\s*\n", "\n", text)
    return text.strip()


def extract_section(analysis: str, section_name: str) -> str:
    """
    Return the text between ``[SECTION_NAME]`` and the next section's marker.

    The "next" section is the one that follows in SECTION_ORDER, not
    whichever marker happens to appear next in the text; if it is absent
    the section runs to the end of the analysis.
    """
    marker = f"[{section_name}]"
    start = analysis.find(marker)
    if start == -1:
        return ""

    end = -1
    index = SECTION_ORDER.index(section_name)
    if index < len(SECTION_ORDER) - 1:
        end = analysis.find(f"[{SECTION_ORDER[index + 1]}]", start)

    body_start = start + len(marker)
    if end == -1:
        return analysis[body_start:].strip()
    return analysis[body_start:end].strip()


def parse_bullets(section: str) -> List[str]:
    items = []
    for line in section.split("\n"):
        if not line.strip().startswith(BULLET_PREFIXES):
            continue
        item = BULLET_RE.sub("", line).strip()
        if item and "[" not in item and "]" not in item:
            items.append(item)
    return items


def parse_reasoning_steps(section: str) -> List[str]:
    steps = []
    for line in section.split("\n"):
        stripped = line.strip()
        if not (stripped.startswith("Step") or stripped.startswith(BULLET_PREFIXES)):
            continue
        step = STEP_RE.sub("", line).strip()
        if step and "[" not in step and "]" not in step:
            steps.append(step)
    return steps


def parse_analysis(analysis: str) -> ParsedAnalysis:
    return ParsedAnalysis(
        verdict=extract_section(analysis, "VERDICT"),
        explanation=extract_section(analysis, "EXPLANATION"),
        claim_explanation=extract_section(analysis, "CLAIM_EXPLANATION"),
        reasoning_chain=extract_section(analysis, "REASONING_CHAIN"),
        supporting_evidence=extract_section(analysis, "SUPPORTING_EVIDENCE"),
        contradicting_evidence=extract_section(analysis, "CONTRADICTING_EVIDENCE"),
        neutral_evidence=extract_section(analysis, "NEUTRAL_EVIDENCE"),
        key_factors=extract_section(analysis, "KEY_FACTORS"),
        methodology=extract_section(analysis, "METHODOLOGY"),
        limitations=extract_section(analysis, "LIMITATIONS"),
        contextual_notes=extract_section(analysis, "CONTEXTUAL_NOTES"),
        related_claims=parse_bullets(extract_section(analysis, "RELATED_CLAIMS")),
        sources_analysis=extract_section(analysis, "SOURCES_ANALYSIS"),
        confidence_factors=extract_section(analysis, "CONFIDENCE_FACTORS"),
    )


def append_source_diversity(analysis: str, sources: List[EnhancedSource]) -> str:
    """Append a ``[SOURCE_DIVERSITY]`` summary of the scored sources to the analysis."""
    unique_domains = len({s.domain for s in sources})
    avg_credibility = sum(s.credibility_score or 50 for s in sources) / max(len(sources), 1)

    return analysis + f"""
[SOURCE_DIVERSITY] - Analysis of source variety and reliability
- Total sources analyzed: {len(sources)}
- Unique domains: {unique_domains}
- Average credibility score: {round(avg_credibility)}%
- Source types: {', '.join(s.source_type.value for s in sources)}
- Geographic diversity: {', '.join(s.country or 'Unknown' for s in sources)}
- Temporal spread: {', '.join(s.publish_date or 'Unknown' for s in sources)}
"""


def determine_verdict(verdict_text: str) -> Verdict:
    lower = verdict_text.lower()

    if any(p in lower for p in ("mostly true", "largely true", "generally true")):
        return Verdict.MOSTLY_TRUE
    if any(p in lower for p in ("mostly false", "largely false", "generally false")):
        return Verdict.MOSTLY_FALSE
    if any(p in lower for p in ("mixed", "partially", "some truth")):
        return Verdict.MIXED

    has_true = TRUE_RE.search(lower) is not None
    has_false = FALSE_RE.search(lower) is not None

    if has_true and not has_false:
        return Verdict.TRUE
    if has_false and not has_true:
        return Verdict.FALSE
    if has_true and has_false:
        return Verdict.MIXED
    return Verdict.UNVERIFIED


def _tier(value: float, high: float, mid: float, top: int = 3, middle: int = 2, low: int = 1) -> int:
    if value >= high:
        return top
    if value >= mid:
        return middle
    return low


def create_evidence_breakdown(parsed: ParsedAnalysis, sources: Optional[List[EnhancedSource]] = None) -> EvidenceBreakdown:
    """
    Split the evidence sections into bullet lists and grade overall quality.

    Quality is a points total over evidence count, variety and specificity,
    plus source diversity, credibility and recency: 15+ is high, 10+ medium.
    """
    sources = sources or []
    supporting = parse_bullets(parsed.supporting_evidence)
    contradicting = parse_bullets(parsed.contradicting_evidence)
    neutral = parse_bullets(parsed.neutral_evidence)

    all_evidence = supporting + contradicting + neutral
    total_evidence = len(all_evidence)
    evidence_diversity = len(set(all_evidence))
    evidence_specificity = sum(
        1 for evidence in all_evidence
        if any(phrase in evidence.lower() for phrase in SPECIFICITY_PHRASES)
    )

    source_diversity = len({s.domain for s in sources})
    avg_credibility = sum(s.credibility_score for s in sources) / max(len(sources), 1)
    high_credibility_sources = sum(1 for s in sources if s.credibility_score >= 80)
    recent_sources = 0
    for source in sources:
        age_days = days_since(source.publish_date)
        if age_days is not None and age_days < 365:
            recent_sources += 1

    quality_score = (
        _tier(total_evidence, 6, 3)
        + _tier(evidence_diversity, 4, 2)
        + _tier(evidence_specificity, 3, 1)
        + _tier(source_diversity, 4, 2)
        + _tier(avg_credibility, 80, 60)
        + _tier(high_credibility_sources, 3, 1, top=2, middle=1, low=0)
        + (1 if recent_sources >= 2 else 0)
    )

    if quality_score >= 15:
        quality = EvidenceQuality.HIGH
    elif quality_score >= 10:
        quality = EvidenceQuality.MEDIUM
    else:
        quality = EvidenceQuality.LOW

    return EvidenceBreakdown(
        supporting_evidence=supporting,
        contradicting_evidence=contradicting,
        neutral_evidence=neutral,
        evidence_quality=quality,
    )


def create_reasoning_breakdown(parsed: ParsedAnalysis) -> ReasoningBreakdown:
    return ReasoningBreakdown(
        key_factors=parse_bullets(parsed.key_factors),
        methodology=clean_text(parsed.methodology or DEFAULT_METHODOLOGY),
        limitations=parse_bullets(parsed.limitations),
        contextual_notes=parse_bullets(parsed.contextual_notes),
        reasoning_chain=parse_reasoning_steps(parsed.reasoning_chain),
        confidence_factors=clean_text(parsed.confidence_factors),
    )


def calculate_confidence(
    verdict: Verdict,
    evidence_count: int,
    sources: Optional[List[EnhancedSource]] = None,
    reasoning_chain: Optional[List[str]] = None
) -> float:
    """Heuristic confidence in [0.1, 0.95] built up from a 0.5 baseline."""
    sources = sources or []
    reasoning_chain = reasoning_chain or []
    confidence = 0.5

    if evidence_count > 10:
        confidence += 0.2
    elif evidence_count > 5:
        confidence += 0.15
    elif evidence_count > 2:
        confidence += 0.1

    avg_credibility = sum(s.credibility_score or 50 for s in sources) / max(len(sources), 1)
    if avg_credibility > 80:
        confidence += 0.15
    elif avg_credibility > 60:
        confidence += 0.1
    elif avg_credibility > 40:
        confidence += 0.05

    if verdict in (Verdict.TRUE, Verdict.FALSE):
        confidence += 0.1
    elif verdict in (Verdict.MOSTLY_TRUE, Verdict.MOSTLY_FALSE):
        confidence += 0.05
    elif verdict == Verdict.MIXED:
        confidence -= 0.05
    elif verdict == Verdict.UNVERIFIED:
        confidence -= 0.1

    if len(reasoning_chain) > 4:
        confidence += 0.05
    elif len(reasoning_chain) > 2:
        confidence += 0.02

    unique_domains = len({s.domain for s in sources})
    if unique_domains > 5:
        confidence += 0.05
    elif unique_domains > 3:
        confidence += 0.03
    elif unique_domains > 1:
        confidence += 0.01

    return round(max(0.1, min(0.95, confidence)), 4)
