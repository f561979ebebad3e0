from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from formforge.models.common import Locale


class QuestionKind(str, Enum):
    SHORT_ANSWER = "SHORT_ANSWER"
    PARAGRAPH = "PARAGRAPH"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    CHECKBOXES = "CHECKBOXES"
    IMAGE_DISPLAY = "IMAGE_DISPLAY"


CHOICE_KINDS = (QuestionKind.MULTIPLE_CHOICE, QuestionKind.CHECKBOXES)


def is_choice_kind(kind: "QuestionKind | str") -> bool:
    return kind in CHOICE_KINDS


class _DefinitionModel(BaseModel):
    # camelCase on the wire (LLM output, HTTP bodies), snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Question(_DefinitionModel):
    title: str
    # Unrecognized kinds survive parsing as raw strings; compilers fall back to a text item.
    kind: QuestionKind | str = Field(alias="type", union_mode="left_to_right")
    options: list[str] = []
    image_url: str | None = None
    required: bool = False
    points: int | None = Field(default=None, ge=0)
    correct_answers: list[str] = []


class FormSection(_DefinitionModel):
    title: str
    description: str | None = None
    questions: list[Question] = []


class QuizSettings(_DefinitionModel):
    release_immediately: bool = False
    show_correct_answers: bool = False
    show_point_values: bool = False


class FormDefinition(_DefinitionModel):
    title: str
    description: str | None = None
    sections: list[FormSection] = []
    is_quiz: bool = False
    quiz_settings: QuizSettings | None = None

    def question_count(self) -> int:
        return sum(len(s.questions) for s in self.sections)


# --- Request / response bodies ---

class GenerateFormRequest(BaseModel):
    text: str
    locale: Locale = Locale.EN


class CompileScriptRequest(BaseModel):
    definition: FormDefinition
    create_results_sheet: bool = False
    locale: Locale = Locale.EN


class ScriptResponse(BaseModel):
    script: str
    locale: Locale


class MutationPlanResponse(BaseModel):
    requests: list[dict]
    count: int


class RemoteForm(BaseModel):
    form_id: str
    edit_url: str
    share_url: str
    operation_count: int
