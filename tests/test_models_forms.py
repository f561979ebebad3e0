import pytest
from pydantic import ValidationError

from formforge.models.forms import FormDefinition, Question, QuestionKind, is_choice_kind

LLM_OUTPUT = {
    "title": "Onboarding",
    "description": "Before day one",
    "isQuiz": True,
    "quizSettings": {"releaseImmediately": True, "showCorrectAnswers": True, "showPointValues": False},
    "sections": [
        {
            "title": "About you",
            "questions": [
                {"title": "Full name", "type": "SHORT_ANSWER", "required": True},
                {
                    "title": "Size",
                    "type": "MULTIPLE_CHOICE",
                    "options": ["S", "M"],
                    "correctAnswers": ["M"],
                    "points": 4,
                    "imageUrl": "",
                },
            ],
        }
    ],
}


class TestFormDefinitionParsing:
    def test_parses_camel_case_wire_format(self):
        definition = FormDefinition.model_validate(LLM_OUTPUT)
        assert definition.is_quiz is True
        assert definition.quiz_settings.release_immediately is True
        q = definition.sections[0].questions[1]
        assert q.kind == QuestionKind.MULTIPLE_CHOICE
        assert q.correct_answers == ["M"]
        assert q.points == 4

    def test_defaults(self):
        definition = FormDefinition.model_validate({"title": "X", "sections": []})
        assert definition.is_quiz is False
        assert definition.quiz_settings is None
        assert definition.description is None

    def test_dumps_back_to_camel_case(self):
        definition = FormDefinition.model_validate(LLM_OUTPUT)
        data = definition.model_dump(by_alias=True, mode="json")
        assert data["isQuiz"] is True
        assert data["sections"][0]["questions"][0]["type"] == "SHORT_ANSWER"
        assert "correctAnswers" in data["sections"][0]["questions"][1]

    def test_question_count(self):
        assert FormDefinition.model_validate(LLM_OUTPUT).question_count() == 2


class TestQuestion:
    def test_unknown_kind_kept_as_string(self):
        q = Question.model_validate({"title": "When?", "type": "DATE"})
        assert q.kind == "DATE"
        assert not isinstance(q.kind, QuestionKind)

    def test_known_kind_becomes_enum(self):
        q = Question.model_validate({"title": "Why?", "type": "PARAGRAPH"})
        assert q.kind is QuestionKind.PARAGRAPH

    def test_negative_points_rejected(self):
        with pytest.raises(ValidationError):
            Question(title="Q", kind=QuestionKind.SHORT_ANSWER, points=-1)

    def test_is_frozen(self):
        q = Question(title="Q", kind=QuestionKind.SHORT_ANSWER)
        with pytest.raises(ValidationError):
            q.title = "changed"


class TestIsChoiceKind:
    @pytest.mark.parametrize("kind", [QuestionKind.MULTIPLE_CHOICE, QuestionKind.CHECKBOXES])
    def test_choice(self, kind):
        assert is_choice_kind(kind)

    @pytest.mark.parametrize("kind", [QuestionKind.SHORT_ANSWER, QuestionKind.IMAGE_DISPLAY, "DATE"])
    def test_not_choice(self, kind):
        assert not is_choice_kind(kind)
