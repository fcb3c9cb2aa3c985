import pytest

from app.core.exceptions import CollaboratorFailure, GenerationFailed
from app.services import vertex_ai
from app.services.cv_matching import CandidateCourse, KeywordCVMatcher, VertexCVMatcher, get_cv_matcher
from app.services.question_generator import (
    CourseContext,
    StaticQuestionGenerator,
    VertexQuestionGenerator,
    get_question_generator,
    validate_questions,
)


# ── Question validation ───────────────────────────────────────────────────────

def test_validate_accepts_wrapped_and_camel_case():
    questions = validate_questions({"questions": [
        {"text": " 2 + 2? ", "type": "mcq", "options": [3, 4, 5, 6], "correctIndex": 1},
        {"text": "Sky is blue", "type": "boolean", "options": ["True", "False"], "correct_index": 0},
    ]})
    assert questions[0] == {"text": "2 + 2?", "type": "mcq", "options": ["3", "4", "5", "6"], "correct_index": 1}
    assert questions[1]["type"] == "boolean"


@pytest.mark.parametrize("raw", [
    None,
    [],
    {"questions": "nope"},
    ["not a dict"],
    [{"text": "", "options": ["a", "b"], "correct_index": 0}],
    [{"text": "Q", "options": ["only one"], "correct_index": 0}],
    [{"text": "Q", "options": ["a", "b"], "correct_index": 2}],
    [{"text": "Q", "options": ["a", "b"], "correct_index": True}],
    [{"text": "Q", "options": ["a", "b"]}],
])
def test_validate_rejects_malformed(raw):
    with pytest.raises(GenerationFailed):
        validate_questions(raw)


def test_static_generator_rotates_by_attempt():
    generator = StaticQuestionGenerator()
    first = generator.generate(CourseContext(course_id="c1", title="Algebra", attempt_number=1))
    second = generator.generate(CourseContext(course_id="c1", title="Algebra", attempt_number=2))

    assert len(first) == 5
    assert first != second
    assert second[0] == first[1]


def test_static_generator_repeats_bank_for_long_quizzes():
    questions = StaticQuestionGenerator().generate(
        CourseContext(course_id="c1", title="Algebra", question_count=8)
    )
    assert len(questions) == 8


def test_vertex_generator_wraps_errors(monkeypatch):
    def fail(prompt, temperature=0.3):
        raise vertex_ai.VertexAIError("quota exceeded")

    monkeypatch.setattr(vertex_ai, "generate_json", fail)
    with pytest.raises(GenerationFailed) as exc:
        VertexQuestionGenerator().generate(CourseContext(course_id="c1", title="Algebra"))
    assert exc.value.retryable


def test_vertex_generator_prompt_mentions_attempt(monkeypatch):
    seen = {}

    def fake(prompt, temperature=0.3):
        seen["prompt"] = prompt
        return {"questions": [{"text": "Q", "options": ["a", "b"], "correct_index": 1}]}

    monkeypatch.setattr(vertex_ai, "generate_json", fake)
    questions = VertexQuestionGenerator().generate(
        CourseContext(course_id="c1", title="Algebra", attempt_number=3)
    )
    assert "attempt #3" in seen["prompt"]
    assert questions[0]["correct_index"] == 1


def test_provider_lookup():
    assert isinstance(get_question_generator("static"), StaticQuestionGenerator)
    assert isinstance(get_cv_matcher("keyword"), KeywordCVMatcher)
    with pytest.raises(ValueError):
        get_question_generator("gpt")


# ── CV matching ───────────────────────────────────────────────────────────────

COURSES = [
    CandidateCourse(id="1", title="Python Programming", category_name="Programming"),
    CandidateCourse(id="2", title="Algebra I", category_name="Mathematics",
                    description="Equations, functions and python notebooks"),
    CandidateCourse(id="3", title="Piano Basics", category_name="Music"),
]


def test_keyword_matcher_ranks_title_hits_first():
    cv = "Software engineer, 8 years of Python programming. Tutored mathematics."
    assert KeywordCVMatcher().suggest_courses(cv, COURSES) == ["1", "2"]


def test_keyword_matcher_respects_limit_and_empty_cv():
    cv = "python mathematics music piano"
    assert len(KeywordCVMatcher().suggest_courses(cv, COURSES, limit=2)) == 2
    assert KeywordCVMatcher().suggest_courses("", COURSES) == []


def test_vertex_matcher_drops_unknown_ids(monkeypatch):
    monkeypatch.setattr(
        vertex_ai, "generate_json", lambda prompt: {"course_ids": ["3", "99", "3", 1]}
    )
    assert VertexCVMatcher().suggest_courses("cv", COURSES) == ["3", "1"]


def test_vertex_matcher_failure_is_collaborator_failure(monkeypatch):
    def fail(prompt):
        raise vertex_ai.VertexAIError("unavailable")

    monkeypatch.setattr(vertex_ai, "generate_json", fail)
    with pytest.raises(CollaboratorFailure):
        VertexCVMatcher().suggest_courses("cv", COURSES)
