import json

import pytest

from quizgen.models.enums import QuestionType
from quizgen.services.quiz_assembler import (
    QuizAssembler,
    infer_question_type,
    normalize_marks,
    normalize_question_type,
)


@pytest.fixture
def assembler():
    ids = iter(f"q{i}" for i in range(1, 100))
    return QuizAssembler(id_factory=lambda: next(ids), clock=lambda: 1700000000000)


@pytest.mark.parametrize("raw_type,expected", [
    ("MCQ", QuestionType.MCQ),
    ("Multiple Choice", QuestionType.MCQ),
    ("single choice", QuestionType.MCQ),
    ("TrueFalse", QuestionType.TRUE_FALSE),
    ("true/false", QuestionType.TRUE_FALSE),
    ("False or True", QuestionType.TRUE_FALSE),
    ("Short Answer", QuestionType.SHORT_ANSWER),
    ("Long Answer", QuestionType.ESSAY),
    ("Essay", QuestionType.ESSAY),
    ("Fill in the blank", QuestionType.FILL_IN_THE_BLANK),
    ("matching", QuestionType.MCQ),
    ("", QuestionType.MCQ),
    (None, QuestionType.MCQ),
])
def test_normalize_question_type(raw_type, expected):
    assert normalize_question_type(raw_type) == expected


def test_keyword_order_decides_ambiguous_labels():
    # "multiple" is checked before "true"
    assert normalize_question_type("multiple true/false") == QuestionType.MCQ


@pytest.mark.parametrize("raw,expected", [
    ({"options": ["a", "b", "c", "d"]}, QuestionType.MCQ),
    ({"options": ["True", "False"]}, QuestionType.TRUE_FALSE),
    ({"text": "x" * 101}, QuestionType.ESSAY),
    ({"text": "x" * 31}, QuestionType.SHORT_ANSWER),
    ({"text": "short"}, QuestionType.MCQ),
    ({"type": "essay", "options": ["a", "b"]}, QuestionType.ESSAY),
])
def test_infer_question_type(raw, expected):
    assert infer_question_type(raw) == expected


@pytest.mark.parametrize("raw_marks,expected", [
    (3, 3),
    (2.5, 2),
    (3.5, 4),
    ("4", 4),
    (0, 1),
    (-2, 1),
    (None, 1),
    ("lots", 1),
    (float("inf"), 1),
    (float("nan"), 1),
])
def test_normalize_marks(raw_marks, expected):
    assert normalize_marks(raw_marks) == expected


@pytest.mark.asyncio
async def test_assemble_builds_quiz_result(assembler, generation_request, emitter):
    data = {
        "title": "Light Reactions",
        "questions": [
            {"text": "Q1?", "type": "mcq", "options": ["a", "b", "c", "d"], "correctAnswer": "a",
             "explanation": "e1", "marks": 3},
            {"text": "Q2?", "type": "true/false", "options": ["True", "False"], "correctAnswer": "True",
             "explanation": "e2", "marks": 3.0},
            {"text": "Q3?", "type": "short answer", "correctAnswer": "chlorophyll",
             "explanation": "e3", "marks": 3},
        ],
    }

    quiz = await assembler.assemble(data, generation_request, emitter)

    assert quiz.title == "Light Reactions"
    assert quiz.topic == "Photosynthesis"
    assert quiz.difficulty == "Easy"
    assert quiz.total_questions == 3
    assert quiz.total_marks == 9
    assert quiz.exam_style == "Standard / Generic"
    assert quiz.created_at == 1700000000000
    assert [q.id for q in quiz.questions] == ["q1", "q2", "q3"]
    assert [q.type for q in quiz.questions] == [
        QuestionType.MCQ, QuestionType.TRUE_FALSE, QuestionType.SHORT_ANSWER,
    ]
    assert quiz.questions[2].options == []
    assert quiz.questions[1].marks == 3

    formatting = [e for e in emitter.history if e.stage == "Formatting & validating"]
    assert [(e.percentage, e.questions_generated) for e in formatting] == [
        (70, None), (75, 1), (80, 2), (85, 3),
    ]


@pytest.mark.asyncio
async def test_assemble_defaults_title_and_style(assembler, generation_request):
    request = generation_request.model_copy(update={"exam_style_id": "unknown_style"})

    quiz = await assembler.assemble({"questions": [{"text": "Q?", "correctAnswer": 1}]}, request)

    assert quiz.title == "Photosynthesis Quiz"
    assert quiz.exam_style == "Standard"
    assert quiz.questions[0].correct_answer == "1"


@pytest.mark.asyncio
async def test_assemble_keeps_count_mismatch(assembler, generation_request):
    quiz = await assembler.assemble({"questions": [{"text": "only one"}]}, generation_request)

    assert quiz.total_questions == 1
    assert quiz.total_marks == generation_request.total_marks


@pytest.mark.asyncio
async def test_quiz_result_serialises_with_camel_case(assembler, generation_request):
    quiz = await assembler.assemble({"questions": [{"text": "Q?", "correctAnswer": "A"}]}, generation_request)

    payload = quiz.model_dump(by_alias=True)

    assert {"createdAt", "totalQuestions", "totalMarks", "examStyle"} <= set(payload)
    assert payload["questions"][0]["correctAnswer"] == "A"
    assert payload["questions"][0]["type"] == "MCQ"


def test_build_question_keeps_fields():
    raw = {
        "text": "Which pigment absorbs light?",
        "type": "MCQ",
        "options": ["Chlorophyll", "Keratin", "Melanin", "Haemoglobin"],
        "correctAnswer": "Chlorophyll",
        "explanation": "Chlorophyll absorbs red and blue light.",
        "marks": 2,
    }
    assembler = QuizAssembler()

    first = assembler.build_question(raw)
    second = assembler.build_question(raw)

    assert (first.text, first.options, first.correct_answer, first.explanation, first.marks) == (
        raw["text"], raw["options"], raw["correctAnswer"], raw["explanation"], raw["marks"],
    )
    assert first.type in set(QuestionType)
    assert first.id and first.id != second.id


@pytest.mark.asyncio
async def test_assemble_tolerates_overflowing_marks(assembler, generation_request):
    data = json.loads('{"questions": [{"text": "Q?", "marks": 1e400}]}')

    quiz = await assembler.assemble(data, generation_request)

    assert quiz.questions[0].marks == 1
