import pytest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from formforge.models.forms import FormDefinition, FormSection, Question, QuestionKind, QuizSettings


# --- Shared form definitions (used by both compiler test suites) ---

SCENARIO_A = FormDefinition(
    title="T",
    is_quiz=False,
    sections=[
        FormSection(title="S1", questions=[
            Question(title="Name?", kind=QuestionKind.SHORT_ANSWER, required=True),
        ]),
    ],
)

SCENARIO_B = FormDefinition(
    title="Two pages",
    sections=[
        FormSection(title="S1", questions=[Question(title="Q1", kind=QuestionKind.SHORT_ANSWER)]),
        FormSection(title="S2", description="Second page", questions=[
            Question(title="Q2", kind=QuestionKind.PARAGRAPH),
        ]),
    ],
)

SCENARIO_C = FormDefinition(
    title="Quiz",
    is_quiz=True,
    sections=[
        FormSection(title="S1", questions=[
            Question(
                title="Pick Y",
                kind=QuestionKind.MULTIPLE_CHOICE,
                options=["X", "Y"],
                correct_answers=["Y"],
                points=10,
            ),
        ]),
    ],
)

MIXED_QUIZ = FormDefinition(
    title='Course "Final" Exam',
    description="Line one\nLine two",
    is_quiz=True,
    quiz_settings=QuizSettings(release_immediately=True, show_correct_answers=False, show_point_values=True),
    sections=[
        FormSection(title="Basics", questions=[
            Question(title="Your name", kind=QuestionKind.SHORT_ANSWER, required=True),
            Question(title="Capital of France?", kind=QuestionKind.MULTIPLE_CHOICE,
                     options=["Berlin", "Paris", "Rome"], correct_answers=["Paris"], points=5),
            Question(title="Primes", kind=QuestionKind.CHECKBOXES,
                     options=["2", "4", "5"], correct_answers=["2", "5"], points=10),
        ]),
        FormSection(title="Media", description="Look closely", questions=[
            Question(title="Diagram", kind=QuestionKind.IMAGE_DISPLAY,
                     image_url="https://example.com/d.png", points=7),
            Question(title="Describe it\nin detail", kind=QuestionKind.PARAGRAPH,
                     image_url="https://example.com/e.png"),
        ]),
        FormSection(title="Wrap-up", questions=[
            Question(title="Anything else?", kind=QuestionKind.PARAGRAPH),
        ]),
    ],
)

SURVEY_WITH_STRAY_POINTS = FormDefinition(
    title="Survey",
    is_quiz=False,
    sections=[
        FormSection(title="Only", questions=[
            Question(title="Favorite color", kind=QuestionKind.MULTIPLE_CHOICE,
                     options=["Red", "Blue"], correct_answers=["Blue"], points=3),
            Question(title="Legacy", kind="DATE"),
        ]),
    ],
)

ALL_DEFINITIONS = {
    "scenario_a": SCENARIO_A,
    "scenario_b": SCENARIO_B,
    "scenario_c": SCENARIO_C,
    "mixed_quiz": MIXED_QUIZ,
    "survey_with_stray_points": SURVEY_WITH_STRAY_POINTS,
}


@pytest.fixture(params=list(ALL_DEFINITIONS), ids=list(ALL_DEFINITIONS))
def definition(request) -> FormDefinition:
    """Each shared definition in turn."""
    return ALL_DEFINITIONS[request.param]


@pytest.fixture
def scenario_a() -> FormDefinition:
    return SCENARIO_A


@pytest.fixture
def scenario_b() -> FormDefinition:
    return SCENARIO_B


@pytest.fixture
def scenario_c() -> FormDefinition:
    return SCENARIO_C


@pytest.fixture
def mixed_quiz() -> FormDefinition:
    return MIXED_QUIZ


@pytest.fixture
def stray_points_survey() -> FormDefinition:
    return SURVEY_WITH_STRAY_POINTS


# --- Canned Forms API responses ---

FORMS_API_CREATE = {
    "formId": "form123",
    "info": {"title": "T", "documentTitle": "T"},
    "responderUri": "https://docs.google.com/forms/d/e/form123/viewform",
}


@pytest.fixture
def signed_in_session():
    session = MagicMock()
    session.is_signed_in.return_value = True
    session.get_token.return_value = "token-abc"
    return session


@pytest.fixture
def mock_forms_build(mocker):
    mock_svc = MagicMock()
    mocker.patch("formforge.services.forms.build", return_value=mock_svc)
    return mock_svc


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from formforge.main import api
    return TestClient(api)
