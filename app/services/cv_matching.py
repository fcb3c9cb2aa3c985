# app/services/cv_matching.py
# CV-matching collaborator: suggest_courses(cv_text, courses) → [course_id]
#
# Used only to pre-populate the tutor's application choices -- never
# authoritative. Results are always restricted to the candidate courses passed in.
#
# Providers (settings.cv_matcher):
#   keyword -- token overlap between CV text and course title/category/description
#   vertex  -- Gemini via Vertex AI

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from app.core.config import settings
from app.core.exceptions import CollaboratorFailure
from app.core.logging import get_logger
from app.services import vertex_ai

logger = get_logger("cv_matching")

_TOKEN_RE = re.compile(r"[a-z][a-z0-9+#]{2,}")
_STOPWORDS = {
    "and", "the", "for", "with", "from", "into", "this", "that", "your", "you",
    "course", "courses", "introduction", "intro", "basics", "beginner",
    "intermediate", "advanced", "years", "experience",
}


@dataclass
class CandidateCourse:
    id: str
    title: str
    category_name: str = ""
    description: str = ""


def _tokens(text: str) -> set:
    return {t for t in _TOKEN_RE.findall((text or "").lower()) if t not in _STOPWORDS}


class CVMatcher:
    def suggest_courses(
        self, cv_text: str, courses: Sequence[CandidateCourse], limit: int = 5
    ) -> List[str]:
        raise NotImplementedError


class KeywordCVMatcher(CVMatcher):
    """Ranks courses by how many title/category tokens appear in the CV."""

    def suggest_courses(self, cv_text, courses, limit=5):
        cv_tokens = _tokens(cv_text)
        if not cv_tokens:
            return []

        scored = []
        for course in courses:
            strong = _tokens(f"{course.title} {course.category_name}")
            weak = _tokens(course.description) - strong
            score = 2 * len(strong & cv_tokens) + len(weak & cv_tokens)
            if score:
                scored.append((score, course.title.lower(), course.id))

        scored.sort(key=lambda row: (-row[0], row[1]))
        return [course_id for _, _, course_id in scored[:limit]]


CV_PROMPT = """You match tutors to courses.

Tutor CV:
\"\"\"{cv}\"\"\"

Available courses (id | title | category):
{courses}

Return STRICT JSON only: {{"course_ids": ["<id>", ...]}} with at most {limit}
ids of the courses this tutor is best qualified to teach, best match first.
"""


class VertexCVMatcher(CVMatcher):

    def suggest_courses(self, cv_text, courses, limit=5):
        if not courses:
            return []
        listing = "\n".join(f"{c.id} | {c.title} | {c.category_name}" for c in courses)
        prompt = CV_PROMPT.format(cv=(cv_text or "")[:6000], courses=listing, limit=limit)
        try:
            result = vertex_ai.generate_json(prompt)
        except vertex_ai.VertexAIError as e:
            raise CollaboratorFailure(f"CV matching failed: {e}") from e

        known = {c.id for c in courses}
        ids = result.get("course_ids", []) if isinstance(result, dict) else []
        suggested = []
        for course_id in ids:
            course_id = str(course_id)
            if course_id in known and course_id not in suggested:
                suggested.append(course_id)
        return suggested[:limit]


_PROVIDERS = {
    "keyword": KeywordCVMatcher,
    "vertex": VertexCVMatcher,
}


def get_cv_matcher(name: Optional[str] = None) -> CVMatcher:
    provider = name or settings.cv_matcher
    try:
        return _PROVIDERS[provider]()
    except KeyError:
        raise ValueError(f"Unknown CV matcher '{provider}'")
