"""
Evidence attribution: grounding metadata -> per-category evidence graph.

PURPOSE: Build citations, retrieved segments and a per-asset-class confidence
         summary from the service's grounding chunks and supports.
CONTEXT: Heuristic by nature. Citations are tied to categories through title
         keyword matching driven by constants.evidence_keywords.

alignmentScore carries a small random component (10%) on top of the average
confidence. The generator is injectable so tests can seed it.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

import numpy as np

from fincraft.constants.evidence_keywords import (
    EVIDENCE_KEYWORDS,
    HIGH_CONFIDENCE,
    MEDIUM_CONFIDENCE,
)
from fincraft.model_interface.types import (
    Citation,
    EvidenceSupport,
    GroundingMetadata,
    RetrievedTextSegment,
    TransparencyMetadata,
)

GROUNDED_SYNTHESIS = (
    "Retrieval-augmented generation: Google Search grounding with per-claim source attribution"
)
UNGROUNDED_SYNTHESIS = "Direct model synthesis from the user profile and supplied context (no live web data)"

DEFAULT_CHUNK_CONFIDENCE = 0.85    # chunk with no score from any support
DEFAULT_CITATION_CONFIDENCE = 0.8  # citation whose confidence is unset
NO_EVIDENCE_CONFIDENCE = 0.75      # category left with no citations at all
DEFAULT_OVERALL_CONFIDENCE = 0.8   # no citations in the response
FALLBACK_CITATIONS = 2


def confidence_level(score: float) -> str:
    """Bucket a 0-1 score: high >= 0.85, medium >= 0.70, else low."""
    if score >= HIGH_CONFIDENCE:
        return "high"
    if score >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def _mean(values: List[float]) -> float:
    return float(np.mean(values))


def build_confidence_map(meta: GroundingMetadata) -> Dict[int, float]:
    """
    Average confidence per chunk index across every support that references it.

    notes:
    - A support lists chunk indices and scores in parallel; the score at position i
      belongs to the chunk at position i. Indices without a score are skipped here
      and fall back to the default when citations are built.
    """
    scores: Dict[int, List[float]] = {}
    for support in meta.get("groundingSupports") or []:
        indices = support.get("groundingChunkIndices") or []
        conf = support.get("confidenceScores") or []
        for pos, idx in enumerate(indices):
            if pos < len(conf) and conf[pos] is not None:
                scores.setdefault(int(idx), []).append(float(conf[pos]))
    return {idx: _mean(vals) for idx, vals in scores.items()}


def build_citations(meta: GroundingMetadata, confidence_map: Optional[Dict[int, float]] = None) -> List[Citation]:
    """Citations for every chunk that has both a URI and a title, in chunk order."""
    if confidence_map is None:
        confidence_map = build_confidence_map(meta)
    citations: List[Citation] = []
    for idx, chunk in enumerate(meta.get("groundingChunks") or []):
        web = (chunk or {}).get("web") or {}
        uri, title = web.get("uri"), web.get("title")
        if not uri or not title:
            continue
        citations.append({
            "uri": uri,
            "title": title,
            "confidence": confidence_map.get(idx, DEFAULT_CHUNK_CONFIDENCE),
        })
    return citations


def build_retrieved_segments(meta: GroundingMetadata) -> List[RetrievedTextSegment]:
    """One segment per support that carries text, attributed to its first chunk."""
    chunks = meta.get("groundingChunks") or []
    segments: List[RetrievedTextSegment] = []
    for pos, support in enumerate(meta.get("groundingSupports") or []):
        text = ((support or {}).get("segment") or {}).get("text")
        if not text:
            continue
        source = f"Source {pos + 1}"
        indices = support.get("groundingChunkIndices") or []
        if indices and 0 <= indices[0] < len(chunks):
            title = ((chunks[indices[0]] or {}).get("web") or {}).get("title")
            if title:
                source = title
        segment: RetrievedTextSegment = {"text": text, "source": source}
        scores = support.get("confidenceScores") or []
        if scores:
            segment["relevanceScore"] = float(scores[0])
        segments.append(segment)
    return segments


def _category_groups(category: str) -> List[str]:
    name = category.lower()
    return [
        keyword for keyword, group in EVIDENCE_KEYWORDS.items()
        if keyword in name or any(alias in name for alias in group["aliases"])
    ]


def is_relevant(category: str, title: str) -> bool:
    """Case-insensitive: title mentions the category, or a keyword group term for it."""
    cat, ttl = category.lower().strip(), title.lower()
    if cat and cat in ttl:
        return True
    return any(
        term in ttl
        for keyword in _category_groups(cat)
        for term in EVIDENCE_KEYWORDS[keyword]["terms"]
    )


def relevant_citations(category: str, citations: List[Citation]) -> List[Citation]:
    """Matching citations for a category; the first two overall when nothing matches."""
    matched = [c for c in citations if is_relevant(category, c.get("title", ""))]
    return matched or citations[:FALLBACK_CITATIONS]


def _citation_confidence(c: Citation) -> float:
    conf = c.get("confidence")
    return DEFAULT_CITATION_CONFIDENCE if conf is None else float(conf)


def evidence_for_category(category: str, citations: List[Citation], rng: np.random.Generator) -> EvidenceSupport:
    supporting = relevant_citations(category, citations)
    if supporting:
        avg = _mean([_citation_confidence(c) for c in supporting])
    else:
        avg = NO_EVIDENCE_CONFIDENCE
    return {
        "category": category,
        "sourceCount": len(supporting),
        "avgConfidence": avg,
        "confidenceLevel": confidence_level(avg),
        "supportingCitations": supporting,
        "alignmentScore": avg * 0.9 + float(rng.random()) * 0.1,
    }


def overall_confidence(citations: List[Citation]) -> float:
    if not citations:
        return DEFAULT_OVERALL_CONFIDENCE
    return _mean([_citation_confidence(c) for c in citations])


def attribute(
    recommendation: Dict[str, Any],
    grounding_metadata: Optional[GroundingMetadata],
    rng: Optional[np.random.Generator] = None,
) -> TransparencyMetadata:
    """
    Build transparency metadata for a normalized recommendation.

    parameters:
    - recommendation: dict – normalized PortfolioRecommendation (not modified).
    - grounding_metadata: dict|None – plain-dict grounding data from the client.
    - rng: numpy Generator (optional) – jitter source for alignmentScore.

    returns:
    - dict – TransparencyMetadata. Without grounding it carries only the
      synthesis method (plus any model rationale already on the recommendation).
    """
    existing = recommendation.get("transparencyMetadata")
    meta: TransparencyMetadata = {}
    if isinstance(existing, dict) and existing.get("modelRationale"):
        meta["modelRationale"] = existing["modelRationale"]

    if not grounding_metadata:
        meta["synthesisMethod"] = UNGROUNDED_SYNTHESIS
        return meta

    rng = rng if rng is not None else np.random.default_rng()
    confidence_map = build_confidence_map(grounding_metadata)
    citations = build_citations(grounding_metadata, confidence_map)

    meta["synthesisMethod"] = GROUNDED_SYNTHESIS
    meta["retrievedSegments"] = build_retrieved_segments(grounding_metadata)
    meta["evidenceGraph"] = [
        evidence_for_category(str(entry.get("category", "")), citations, rng)
        for entry in recommendation.get("recommended_portfolio") or []
    ]
    meta["overallConfidence"] = overall_confidence(citations)
    return meta


def apply_grounding(
    recommendation: Dict[str, Any],
    grounding_metadata: Optional[GroundingMetadata],
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, Any]:
    """
    Attach citations, search queries and transparency metadata to a recommendation.

    returns:
    - dict – the same recommendation object, updated in place.
    """
    if grounding_metadata:
        recommendation["citations"] = build_citations(grounding_metadata)
        recommendation["searchQueries"] = list(grounding_metadata.get("webSearchQueries") or [])
    recommendation["transparencyMetadata"] = attribute(recommendation, grounding_metadata, rng)
    return recommendation
