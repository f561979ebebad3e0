"""Compile a FormDefinition into an ordered Forms API batchUpdate plan.

Pure and total over any validated definition: no I/O, no shared state.
"""

from formforge.models.forms import FormDefinition, Question, QuestionKind
from formforge.models.mutations import (
    ChoiceQuestion,
    ChoiceType,
    CreateItem,
    FormItem,
    GradePolicy,
    Grading,
    ImageFormItem,
    ItemImage,
    MutationOp,
    PageBreakFormItem,
    QuestionFormItem,
    QuestionItem,
    QuizSettingsUpdate,
    TextQuestion,
    UpdateSettings,
)


def _question_body(question: Question) -> TextQuestion | ChoiceQuestion:
    if question.kind == QuestionKind.SHORT_ANSWER:
        return TextQuestion(paragraph=False)
    if question.kind == QuestionKind.PARAGRAPH:
        return TextQuestion(paragraph=True)
    if question.kind == QuestionKind.MULTIPLE_CHOICE:
        return ChoiceQuestion(type=ChoiceType.RADIO, options=list(question.options))
    if question.kind == QuestionKind.CHECKBOXES:
        return ChoiceQuestion(type=ChoiceType.CHECKBOX, options=list(question.options))
    # Unknown kinds are treated as short answers
    return TextQuestion(paragraph=False)


def map_question(question: Question) -> FormItem:
    """Map one question to its Forms API item."""
    if question.kind == QuestionKind.IMAGE_DISPLAY:
        return ImageFormItem(title=question.title, image=ItemImage(source_uri=question.image_url))

    grading = None
    # Not gated on the form-level quiz flag; the backend ignores grading on non-quiz forms.
    if question.points and question.points > 0:
        grading = Grading(point_value=question.points, correct_answers=list(question.correct_answers))

    image = ItemImage(source_uri=question.image_url) if question.image_url else None

    return QuestionFormItem(
        title=question.title,
        question_item=QuestionItem(
            required=question.required,
            question=_question_body(question),
            grading=grading,
            image=image,
        ),
    )


def _quiz_settings_op(definition: FormDefinition) -> UpdateSettings:
    grade = None
    if definition.quiz_settings is not None:
        settings = definition.quiz_settings
        grade = GradePolicy(
            score_released=settings.release_immediately,
            correct_answers_shown=settings.show_correct_answers,
            points_shown=settings.show_point_values,
        )
    return UpdateSettings(quiz_settings=QuizSettingsUpdate(is_quiz=True, grade=grade))


def compile_mutations(definition: FormDefinition) -> list[MutationOp]:
    """Return the batch operations that build ``definition`` on an empty form.

    Quiz settings come first. Items follow in section-major, question-minor
    order, with a page break carrying the next section's title between
    sections. Every CreateItem takes the next insertion index.
    """
    ops: list[MutationOp] = []
    if definition.is_quiz:
        ops.append(_quiz_settings_op(definition))

    index = 0
    last = len(definition.sections) - 1
    for section_index, section in enumerate(definition.sections):
        for question in section.questions:
            ops.append(CreateItem(item=map_question(question), insert_at_index=index))
            index += 1
        if section_index < last:
            next_section = definition.sections[section_index + 1]
            page_break = PageBreakFormItem(title=next_section.title, description=next_section.description)
            ops.append(CreateItem(item=page_break, insert_at_index=index))
            index += 1
    return ops


def to_batch_requests(ops: list[MutationOp]) -> list[dict]:
    return [op.to_request() for op in ops]
