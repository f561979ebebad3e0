import logging

from formforge.exceptions import FormValidationError
from formforge.models.forms import FormDefinition, FormSection, Question, is_choice_kind

logger = logging.getLogger(__name__)


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def _normalize_question(question: Question, path: str) -> Question:
    correct_answers: list[str] = []
    if is_choice_kind(question.kind):
        for answer in question.correct_answers:
            if answer not in question.options:
                logger.warning("%s: dropping correct answer %r not among options", path, answer)
                continue
            if answer not in correct_answers:
                correct_answers.append(answer)
    return question.model_copy(update={
        "image_url": _blank_to_none(question.image_url),
        "correct_answers": correct_answers,
    })


def validate_definition(definition: FormDefinition) -> FormDefinition:
    """Check a definition before either compiler runs and return a normalized copy.

    Checks short-circuit on the first failure, in order: title, sections,
    per-section questions, choice options. Correct answers that are not among
    a question's options are dropped with a warning rather than rejected.
    """
    if not definition.title.strip():
        raise FormValidationError("title", "Form title must not be empty")
    if not definition.sections:
        raise FormValidationError("sections", "Form must have at least one section")

    for i, section in enumerate(definition.sections):
        if not section.questions:
            raise FormValidationError(
                f"sections[{i}].questions", f"Section {section.title!r} has no questions",
            )

    for i, section in enumerate(definition.sections):
        for j, question in enumerate(section.questions):
            if is_choice_kind(question.kind) and not question.options:
                raise FormValidationError(
                    f"sections[{i}].questions[{j}].options",
                    f"Choice question {question.title!r} needs at least one option",
                )

    sections: list[FormSection] = []
    for i, section in enumerate(definition.sections):
        questions = [
            _normalize_question(q, f"sections[{i}].questions[{j}]")
            for j, q in enumerate(section.questions)
        ]
        sections.append(section.model_copy(update={
            "description": _blank_to_none(section.description),
            "questions": questions,
        }))

    return definition.model_copy(update={
        "description": _blank_to_none(definition.description),
        "sections": sections,
        "quiz_settings": definition.quiz_settings if definition.is_quiz else None,
    })
