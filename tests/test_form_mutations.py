from formforge.models.forms import FormDefinition, FormSection, Question, QuestionKind
from formforge.models.mutations import (
    ChoiceQuestion,
    ChoiceType,
    CreateItem,
    ImageFormItem,
    PageBreakFormItem,
    QuestionFormItem,
    TextQuestion,
    UpdateSettings,
)
from formforge.services.form_mutations import compile_mutations, map_question, to_batch_requests


def _create_items(ops):
    return [op for op in ops if isinstance(op, CreateItem)]


class TestOperationShape:
    def test_operation_count(self, definition):
        ops = compile_mutations(definition)
        expected = (
            definition.question_count()
            + (len(definition.sections) - 1)
            + (1 if definition.is_quiz else 0)
        )
        assert len(ops) == expected

    def test_indices_strictly_increase_by_one(self, definition):
        indices = [op.insert_at_index for op in _create_items(compile_mutations(definition))]
        assert indices == list(range(len(indices)))

    def test_settings_only_for_quiz(self, definition):
        ops = compile_mutations(definition)
        settings = [op for op in ops if isinstance(op, UpdateSettings)]
        if definition.is_quiz:
            assert len(settings) == 1
            assert ops[0] is settings[0]
        else:
            assert settings == []

    def test_section_major_order(self, definition):
        titles = [op.item.title for op in _create_items(compile_mutations(definition))]
        expected = []
        for i, section in enumerate(definition.sections):
            if i > 0:
                expected.append(section.title)
            expected.extend(q.title for q in section.questions)
        assert titles == expected

    def test_image_display_never_graded(self, definition):
        for op in _create_items(compile_mutations(definition)):
            if isinstance(op.item, ImageFormItem):
                assert "grading" not in str(op.to_request())

    def test_idempotent(self, definition):
        assert compile_mutations(definition) == compile_mutations(definition)


class TestScenarios:
    def test_scenario_a(self, scenario_a):
        ops = compile_mutations(scenario_a)
        assert len(ops) == 1
        op = ops[0]
        assert isinstance(op, CreateItem)
        assert op.insert_at_index == 0
        assert op.item.title == "Name?"
        assert op.item.question_item.required is True
        assert op.item.question_item.question == TextQuestion(paragraph=False)

    def test_scenario_b(self, scenario_b):
        ops = compile_mutations(scenario_b)
        assert [op.insert_at_index for op in ops] == [0, 1, 2]
        assert isinstance(ops[0].item, QuestionFormItem)
        assert isinstance(ops[1].item, PageBreakFormItem)
        assert ops[1].item.title == "S2"
        assert ops[1].item.description == "Second page"
        assert isinstance(ops[2].item, QuestionFormItem)

    def test_scenario_c(self, scenario_c):
        ops = compile_mutations(scenario_c)
        assert len(ops) == 2
        assert isinstance(ops[0], UpdateSettings)
        assert ops[0].quiz_settings.is_quiz is True
        assert ops[0].quiz_settings.grade is None
        item = ops[1].item
        assert item.question_item.question == ChoiceQuestion(type=ChoiceType.RADIO, options=["X", "Y"])
        assert item.question_item.grading.point_value == 10
        assert item.question_item.grading.correct_answers == ["Y"]


class TestMapQuestion:
    def test_kind_mapping(self):
        cases = {
            QuestionKind.SHORT_ANSWER: TextQuestion(paragraph=False),
            QuestionKind.PARAGRAPH: TextQuestion(paragraph=True),
            QuestionKind.MULTIPLE_CHOICE: ChoiceQuestion(type=ChoiceType.RADIO, options=["a"]),
            QuestionKind.CHECKBOXES: ChoiceQuestion(type=ChoiceType.CHECKBOX, options=["a"]),
        }
        for kind, body in cases.items():
            item = map_question(Question(title="Q", kind=kind, options=["a"]))
            assert item.question_item.question == body

    def test_unknown_kind_falls_back_to_text(self):
        item = map_question(Question(title="When", kind="DATE"))
        assert item.question_item.question == TextQuestion(paragraph=False)

    def test_choice_options_keep_order_and_mark_correct(self):
        q = Question(title="Pick", kind=QuestionKind.CHECKBOXES, options=["a", "b", "c"],
                     correct_answers=["b"], points=2)
        request = map_question(q).to_request()
        question = request["questionItem"]["question"]
        assert [o["value"] for o in question["choiceQuestion"]["options"]] == ["a", "b", "c"]
        assert question["grading"]["correctAnswers"]["answers"] == [{"value": "b"}]

    def test_points_graded_even_when_form_is_not_quiz(self, stray_points_survey):
        # grading is attached from the question alone; the quiz flag is not consulted
        ops = compile_mutations(stray_points_survey)
        assert not any(isinstance(op, UpdateSettings) for op in ops)
        assert ops[0].item.question_item.grading.point_value == 3

    def test_zero_points_not_graded(self):
        item = map_question(Question(title="Q", kind=QuestionKind.SHORT_ANSWER, points=0))
        assert item.question_item.grading is None

    def test_attachment_image_centered(self):
        item = map_question(Question(title="Q", kind=QuestionKind.PARAGRAPH, image_url="https://x/y.png"))
        assert item.question_item.image.to_request() == {
            "sourceUri": "https://x/y.png",
            "properties": {"alignment": "CENTER"},
        }

    def test_image_display_item(self):
        item = map_question(Question(title="Look", kind=QuestionKind.IMAGE_DISPLAY,
                                     image_url="https://x/y.png", points=9, required=True))
        assert isinstance(item, ImageFormItem)
        assert item.to_request() == {
            "title": "Look",
            "imageItem": {"image": {"sourceUri": "https://x/y.png", "properties": {"alignment": "CENTER"}}},
        }


class TestBatchRequests:
    def test_quiz_settings_request(self, mixed_quiz):
        requests = to_batch_requests(compile_mutations(mixed_quiz))
        assert requests[0] == {
            "updateSettings": {
                "settings": {
                    "quizSettings": {
                        "isQuiz": True,
                        "grade": {"score": "RELEASED", "correctAnswersShown": False, "pointsShown": True},
                    }
                },
                "updateMask": "quizSettings.isQuiz,quizSettings.grade",
            }
        }

    def test_quiz_without_settings_masks_only_is_quiz(self, scenario_c):
        requests = to_batch_requests(compile_mutations(scenario_c))
        assert requests[0]["updateSettings"]["updateMask"] == "quizSettings.isQuiz"

    def test_create_item_request(self, scenario_a):
        assert to_batch_requests(compile_mutations(scenario_a)) == [{
            "createItem": {
                "item": {
                    "title": "Name?",
                    "questionItem": {"question": {"required": True, "textQuestion": {"paragraph": False}}},
                },
                "location": {"index": 0},
            }
        }]

    def test_page_break_request(self, scenario_b):
        requests = to_batch_requests(compile_mutations(scenario_b))
        assert requests[1]["createItem"]["item"] == {
            "title": "S2", "description": "Second page", "pageBreakItem": {},
        }

    def test_title_with_newline_passed_verbatim(self):
        definition = FormDefinition(title="F", sections=[FormSection(title="S", questions=[
            Question(title='Say "hi"\nplease', kind=QuestionKind.SHORT_ANSWER),
        ])])
        requests = to_batch_requests(compile_mutations(definition))
        assert requests[0]["createItem"]["item"]["title"] == 'Say "hi"\nplease'
