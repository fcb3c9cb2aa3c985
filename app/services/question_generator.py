# app/services/question_generator.py
# Question-generation collaborator: generate(course_context) → [question]
#
# Providers (settings.question_generator):
#   static -- fixed question bank, for local development and demos
#   vertex -- Gemini via Vertex AI, strict JSON
#
# A question is {"text", "type": "mcq"|"boolean", "options": [str], "correct_index": int}.
# Any failure raises GenerationFailed; validate_questions() rejects malformed output.

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.core.config import settings
from app.core.exceptions import GenerationFailed
from app.core.logging import get_logger
from app.services import vertex_ai

logger = get_logger("question_generator")


@dataclass
class CourseContext:
    course_id: str
    title: str
    description: str = ""
    level: str = "beginner"
    category_name: str = ""
    attempt_number: int = 1
    question_count: int = 5


QUIZ_PROMPT = """You are a tutor assistant. Create a short quiz for a student.

This quiz is attempt #{attempt} generated at "{now}" for course "{title}".

Course title: "{title}"
Course category: "{category}"
Course level: "{level}"
Course description: "{description}"

Goal:
- {count} short questions only.
- Use a mix of multiple-choice (mcq) with 4 options and true/false (boolean)
  with the 2 options "True", "False".
- Answerable by a student who attended an intro session.
- Vary wording and focus so this attempt is not identical to earlier ones.

Return STRICT JSON only in this format (no extra text):
{{
  "questions": [
    {{"text": "Question text ...", "type": "mcq", "options": ["A", "B", "C", "D"], "correct_index": 1}},
    {{"text": "Another question ...", "type": "boolean", "options": ["True", "False"], "correct_index": 0}}
  ]
}}
"""


def validate_questions(raw: object) -> List[Dict]:
    """
    Normalise collaborator output into the stored question shape.
    Accepts either a list or {"questions": [...]}; camelCase correctIndex is tolerated.
    """
    if isinstance(raw, dict):
        raw = raw.get("questions")
    if not isinstance(raw, list) or not raw:
        raise GenerationFailed("Question generator returned no questions.")

    questions = []
    for i, q in enumerate(raw):
        if not isinstance(q, dict):
            raise GenerationFailed(f"Question {i + 1} is not an object.")
        text = str(q.get("text") or "").strip()
        options = q.get("options")
        correct = q.get("correct_index", q.get("correctIndex"))
        if not text:
            raise GenerationFailed(f"Question {i + 1} has no text.")
        if not isinstance(options, list) or len(options) < 2:
            raise GenerationFailed(f"Question {i + 1} needs at least two options.")
        if not isinstance(correct, int) or isinstance(correct, bool) or not 0 <= correct < len(options):
            raise GenerationFailed(f"Question {i + 1} has an invalid correct index.")
        questions.append({
            "text": text,
            "type": "boolean" if q.get("type") == "boolean" else "mcq",
            "options": [str(o) for o in options],
            "correct_index": correct,
        })
    return questions


class QuestionGenerator:
    """Base collaborator. Subclasses implement _generate()."""

    def generate(self, context: CourseContext) -> List[Dict]:
        try:
            raw = self._generate(context)
        except GenerationFailed:
            raise
        except Exception as e:
            logger.warning(f"Question generation failed for course {context.course_id}: {e}")
            raise GenerationFailed(f"Question generation failed: {e}") from e
        return validate_questions(raw)

    def _generate(self, context: CourseContext):
        raise NotImplementedError


class StaticQuestionGenerator(QuestionGenerator):
    """Deterministic bank: rotates through general study-skills questions."""

    BANK = [
        {
            "text": "Which of these best describes a prerequisite course?",
            "type": "mcq",
            "options": [
                "A course you must complete first",
                "An optional extra course",
                "A course taught by the same tutor",
                "A course with no assignments",
            ],
            "correct_index": 0,
        },
        {
            "text": "Reviewing material shortly after a session improves retention.",
            "type": "boolean",
            "options": ["True", "False"],
            "correct_index": 0,
        },
        {
            "text": "What is the most effective way to prepare for a quiz?",
            "type": "mcq",
            "options": [
                "Re-reading notes once",
                "Practising with questions and checking answers",
                "Skipping difficult topics",
                "Studying only the night before",
            ],
            "correct_index": 1,
        },
        {
            "text": "Asking your tutor questions during a session is discouraged.",
            "type": "boolean",
            "options": ["True", "False"],
            "correct_index": 1,
        },
        {
            "text": "Which habit helps most when learning a new topic?",
            "type": "mcq",
            "options": [
                "Multitasking during sessions",
                "Avoiding feedback",
                "Spacing practice over several days",
                "Memorising without understanding",
            ],
            "correct_index": 2,
        },
        {
            "text": "A quiz score of 70 or above counts as a pass.",
            "type": "boolean",
            "options": ["True", "False"],
            "correct_index": 0,
        },
    ]

    def _generate(self, context: CourseContext):
        count = max(1, context.question_count)
        offset = (context.attempt_number - 1) % len(self.BANK)
        rotated = self.BANK[offset:] + self.BANK[:offset]
        return [dict(q) for q in (rotated * (count // len(rotated) + 1))[:count]]


class VertexQuestionGenerator(QuestionGenerator):

    def _generate(self, context: CourseContext):
        prompt = QUIZ_PROMPT.format(
            attempt=context.attempt_number,
            now=datetime.now(timezone.utc).isoformat(),
            title=context.title,
            category=context.category_name or "General",
            level=context.level,
            description=(context.description or "")[:2000],
            count=context.question_count,
        )
        return vertex_ai.generate_json(prompt, temperature=0.7)


_PROVIDERS = {
    "static": StaticQuestionGenerator,
    "vertex": VertexQuestionGenerator,
}


def get_question_generator(name: Optional[str] = None) -> QuestionGenerator:
    provider = name or settings.question_generator
    try:
        return _PROVIDERS[provider]()
    except KeyError:
        raise ValueError(f"Unknown question generator '{provider}'")
