from __future__ import annotations

import json
import logging
import re
from typing import List, Optional

from pydantic import ValidationError

from matching.llm_anthropic import complete
from matching.prompts import BULLETS_PROMPT, MATCH_PROMPT, REQUIREMENTS_SECTION
from schemas import CoverLetterBullet, MatchAnalysis

logger = logging.getLogger(__name__)

MAX_TOKENS = 1024

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```$")


def fallback_analysis() -> MatchAnalysis:
    return MatchAnalysis(
        overall_score=50,
        matching_skills=[],
        missing_skills=[],
        experience_gap="Unable to analyze",
        recommendations=["Please ensure your resume is complete"],
    )


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json marker and a trailing ``` marker, if present."""
    cleaned = (text or "").strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_match_analysis(raw: str) -> MatchAnalysis:
    """Parse a provider response into a MatchAnalysis, or the fixed fallback."""
    try:
        data = json.loads(strip_code_fences(raw))
        return MatchAnalysis.model_validate(data)
    except (json.JSONDecodeError, RecursionError, ValidationError) as e:
        logger.warning("Failed to parse match analysis JSON: %s", e)
        logger.warning("Raw response: %s", raw)
        return fallback_analysis()


def parse_cover_letter_bullets(raw: str) -> List[CoverLetterBullet]:
    try:
        data = json.loads(strip_code_fences(raw))
    except (json.JSONDecodeError, RecursionError) as e:
        logger.warning("Failed to parse cover letter bullets JSON: %s", e)
        logger.warning("Raw response: %s", raw)
        return []
    if not isinstance(data, list):
        logger.warning("Cover letter bullets response is not a JSON array")
        return []

    bullets: List[CoverLetterBullet] = []
    for item in data:
        try:
            bullets.append(CoverLetterBullet.model_validate(item))
        except ValidationError:
            logger.debug("Dropping malformed bullet: %r", item)
    return bullets


def analyze_match(
    resume_text: str,
    job_title: str,
    job_description: str,
    job_requirements: Optional[str] = None,
) -> MatchAnalysis:
    """Score resume-to-job fit with a single completion call.

    Unparseable output degrades to a fixed fallback; provider failures raise.
    """
    if not resume_text or not resume_text.strip():
        raise ValueError("resume_text cannot be empty.")
    if not job_description or not job_description.strip():
        raise ValueError("job_description cannot be empty.")

    requirements_section = ""
    if job_requirements:
        requirements_section = REQUIREMENTS_SECTION.format(requirements=job_requirements)

    prompt = MATCH_PROMPT.format(
        resume=resume_text,
        title=job_title,
        description=job_description,
        requirements_section=requirements_section,
    )
    raw = complete(prompt, max_tokens=MAX_TOKENS)
    analysis = parse_match_analysis(raw)
    logger.info(
        "Match analysis for %r: score=%d matching=%d missing=%d",
        job_title, analysis.overall_score, len(analysis.matching_skills), len(analysis.missing_skills),
    )
    return analysis


def generate_cover_letter_bullets(
    resume_text: str,
    job_title: str,
    job_description: str,
    company_name: str,
) -> List[CoverLetterBullet]:
    prompt = BULLETS_PROMPT.format(
        resume=resume_text,
        title=job_title,
        company=company_name,
        description=job_description,
    )
    raw = complete(prompt, max_tokens=MAX_TOKENS)
    bullets = parse_cover_letter_bullets(raw)
    logger.info("Generated %d cover letter bullets for %r @ %s", len(bullets), job_title, company_name)
    return bullets
