"""Typed Forms API v1 batchUpdate payloads.

Each item kind is its own model and renders its own request body, so the
mutation compiler never assembles free-form dicts.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChoiceType(str, Enum):
    RADIO = "RADIO"
    CHECKBOX = "CHECKBOX"


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True)


class ItemImage(_Payload):
    source_uri: str | None = None
    alignment: str = "CENTER"

    def to_request(self) -> dict:
        image = {"properties": {"alignment": self.alignment}}
        if self.source_uri:
            image["sourceUri"] = self.source_uri
        return image


class Grading(_Payload):
    point_value: int
    correct_answers: list[str] = []

    def to_request(self) -> dict:
        return {
            "pointValue": self.point_value,
            "correctAnswers": {"answers": [{"value": a} for a in self.correct_answers]},
        }


class TextQuestion(_Payload):
    kind: Literal["text"] = "text"
    paragraph: bool = False

    def to_request(self) -> dict:
        return {"textQuestion": {"paragraph": self.paragraph}}


class ChoiceQuestion(_Payload):
    kind: Literal["choice"] = "choice"
    type: ChoiceType
    options: list[str]

    def to_request(self) -> dict:
        return {
            "choiceQuestion": {
                "type": self.type.value,
                "options": [{"value": opt} for opt in self.options],
            }
        }


QuestionBody = Annotated[TextQuestion | ChoiceQuestion, Field(discriminator="kind")]


class QuestionItem(_Payload):
    required: bool = False
    question: QuestionBody
    grading: Grading | None = None
    image: ItemImage | None = None

    def to_request(self) -> dict:
        question = {"required": self.required, **self.question.to_request()}
        if self.grading is not None:
            question["grading"] = self.grading.to_request()
        body = {"question": question}
        if self.image is not None:
            body["image"] = self.image.to_request()
        return body


class QuestionFormItem(_Payload):
    kind: Literal["question"] = "question"
    title: str
    question_item: QuestionItem

    def to_request(self) -> dict:
        return {"title": self.title, "questionItem": self.question_item.to_request()}


class ImageFormItem(_Payload):
    kind: Literal["image"] = "image"
    title: str
    image: ItemImage

    def to_request(self) -> dict:
        return {"title": self.title, "imageItem": {"image": self.image.to_request()}}


class PageBreakFormItem(_Payload):
    kind: Literal["page_break"] = "page_break"
    title: str
    description: str | None = None

    def to_request(self) -> dict:
        item = {"title": self.title, "pageBreakItem": {}}
        if self.description:
            item["description"] = self.description
        return item


FormItem = Annotated[
    QuestionFormItem | ImageFormItem | PageBreakFormItem, Field(discriminator="kind")
]


class GradePolicy(_Payload):
    score_released: bool
    correct_answers_shown: bool
    points_shown: bool

    def to_request(self) -> dict:
        return {
            "score": "RELEASED" if self.score_released else "NOT_RELEASED",
            "correctAnswersShown": self.correct_answers_shown,
            "pointsShown": self.points_shown,
        }


class QuizSettingsUpdate(_Payload):
    is_quiz: bool = True
    grade: GradePolicy | None = None

    def update_mask(self) -> str:
        paths = ["quizSettings.isQuiz"]
        if self.grade is not None:
            paths.append("quizSettings.grade")
        return ",".join(paths)

    def to_request(self) -> dict:
        settings = {"isQuiz": self.is_quiz}
        if self.grade is not None:
            settings["grade"] = self.grade.to_request()
        return settings


class CreateItem(_Payload):
    op: Literal["create_item"] = "create_item"
    item: FormItem
    insert_at_index: int

    def to_request(self) -> dict:
        return {
            "createItem": {
                "item": self.item.to_request(),
                "location": {"index": self.insert_at_index},
            }
        }


class UpdateSettings(_Payload):
    op: Literal["update_settings"] = "update_settings"
    quiz_settings: QuizSettingsUpdate

    def to_request(self) -> dict:
        return {
            "updateSettings": {
                "settings": {"quizSettings": self.quiz_settings.to_request()},
                "updateMask": self.quiz_settings.update_mask(),
            }
        }


MutationOp = Annotated[CreateItem | UpdateSettings, Field(discriminator="op")]
