"""Generate a standalone Google Apps Script that rebuilds a form.

The user pastes the output into the Apps Script editor and runs
``createGoogleFormFromAI``. Every user-supplied string goes through
``script_string`` so quotes and newlines cannot break the script.
"""

import json
import uuid

from formforge.exceptions import CompilationError
from formforge.models.common import Locale
from formforge.models.forms import FormDefinition, Question, QuestionKind, is_choice_kind

ENTRY_FUNCTION = "createGoogleFormFromAI"

ITEM_CONSTRUCTORS = {
    QuestionKind.SHORT_ANSWER: "addTextItem",
    QuestionKind.PARAGRAPH: "addParagraphTextItem",
    QuestionKind.MULTIPLE_CHOICE: "addMultipleChoiceItem",
    QuestionKind.CHECKBOXES: "addCheckboxItem",
    QuestionKind.IMAGE_DISPLAY: "addImageItem",
}
FALLBACK_CONSTRUCTOR = "addTextItem"

_HEADERS = {
    Locale.EN: [
        "This Google Apps Script will create a new Google Form based on your specifications.",
        "To use it:",
        "1. Open a Google Sheet or Google Doc.",
        "2. Go to Extensions > Apps Script.",
        "3. Paste this entire code into the editor, replacing any existing code.",
        '4. Click the "Save project" icon.',
        f'5. From the function dropdown, select "{ENTRY_FUNCTION}" and click "Run".',
        "6. You will be asked to grant permissions. Follow the prompts to allow the script to run.",
        "7. A new Google Form will be created in your Google Drive.",
    ],
    Locale.VI: [
        "Google Apps Script này sẽ tạo một Google Form mới theo yêu cầu của bạn.",
        "Cách sử dụng:",
        "1. Mở một Google Sheet hoặc Google Doc.",
        "2. Chọn Tiện ích mở rộng > Apps Script.",
        "3. Dán toàn bộ mã này vào trình soạn thảo, thay thế mã hiện có.",
        '4. Nhấn biểu tượng "Lưu dự án".',
        f'5. Trong danh sách hàm, chọn "{ENTRY_FUNCTION}" rồi nhấn "Chạy".',
        "6. Bạn sẽ được yêu cầu cấp quyền. Làm theo hướng dẫn để cho phép tập lệnh chạy.",
        "7. Một Google Form mới sẽ được tạo trong Google Drive của bạn.",
    ],
}

_QUIZ_SETTINGS_NOTES = {
    Locale.EN: [
        "Quiz release and visibility options cannot be set from Apps Script.",
        "After running, open the form and go to Settings > Quizzes to set:",
    ],
    Locale.VI: [
        "Không thể thiết lập tùy chọn công bố điểm và hiển thị của bài kiểm tra bằng Apps Script.",
        "Sau khi chạy, mở biểu mẫu và vào Cài đặt > Bài kiểm tra để thiết lập:",
    ],
}

_QUIZ_SETTING_LABELS = {
    Locale.EN: {
        "release": "Release grade: {}",
        "immediately": "Immediately after each submission",
        "later": "Later, after manual review",
        "correct": "Show correct answers: {}",
        "points": "Show point values: {}",
        "yes": "yes",
        "no": "no",
    },
    Locale.VI: {
        "release": "Công bố điểm: {}",
        "immediately": "Ngay sau mỗi lần gửi",
        "later": "Sau đó, sau khi xem xét thủ công",
        "correct": "Hiển thị câu trả lời đúng: {}",
        "points": "Hiển thị điểm: {}",
        "yes": "có",
        "no": "không",
    },
}

_LOG_LINES = {
    Locale.EN: {
        "done": "Form created successfully!",
        "edit": "Edit URL: ",
        "share": "Share URL: ",
        "sheet": "Results sheet URL: ",
        "image_failed": "Could not fetch image for question ",
        "help_text": "Error: Could not load image from ",
        "results_suffix": " (Responses)",
    },
    Locale.VI: {
        "done": "Đã tạo biểu mẫu thành công!",
        "edit": "URL chỉnh sửa: ",
        "share": "URL chia sẻ: ",
        "sheet": "URL bảng kết quả: ",
        "image_failed": "Không thể tải hình ảnh cho câu hỏi ",
        "help_text": "Lỗi: Không thể tải hình ảnh từ ",
        "results_suffix": " (Câu trả lời)",
    },
}


def script_string(value: str | None) -> str:
    """Encode ``value`` as a JSON string literal, which is also a valid JS literal."""
    if not value:
        return '""'
    return json.dumps(value, ensure_ascii=False)


def _comment_text(value: str) -> str:
    return " ".join(value.splitlines())


def _item_var() -> str:
    return "item" + uuid.uuid4().hex[:7]


class _ScriptWriter:
    def __init__(self):
        self.lines: list[str] = []

    def line(self, text: str = "", indent: int = 1):
        self.lines.append(("  " * indent + text) if text else "")

    def render(self) -> str:
        return "\n".join(self.lines) + "\n"


def _emit_header(w: _ScriptWriter, locale: Locale):
    w.line("/**", indent=0)
    for text in _HEADERS[locale]:
        w.line(f" * {text}", indent=0)
    w.line(" */", indent=0)


def _emit_quiz(w: _ScriptWriter, definition: FormDefinition, locale: Locale):
    w.line("form.setIsQuiz(true);")
    settings = definition.quiz_settings
    if settings is None:
        return
    labels = _QUIZ_SETTING_LABELS[locale]

    def yes_no(flag: bool) -> str:
        return labels["yes"] if flag else labels["no"]

    for text in _QUIZ_SETTINGS_NOTES[locale]:
        w.line(f"// {text}")
    release = labels["immediately"] if settings.release_immediately else labels["later"]
    w.line(f"//   - {labels['release'].format(release)}")
    w.line(f"//   - {labels['correct'].format(yes_no(settings.show_correct_answers))}")
    w.line(f"//   - {labels['points'].format(yes_no(settings.show_point_values))}")


def _emit_question(w: _ScriptWriter, question: Question, is_quiz: bool, locale: Locale):
    var = _item_var()
    constructor = ITEM_CONSTRUCTORS.get(question.kind, FALLBACK_CONSTRUCTOR)
    title = script_string(question.title)

    w.line()
    w.line(f"// Question: {_comment_text(question.title)}")
    w.line(f"var {var} = form.{constructor}();")
    w.line(f"{var}.setTitle({title});")
    # ImageItem has no setRequired.
    if question.required and question.kind != QuestionKind.IMAGE_DISPLAY:
        w.line(f"{var}.setRequired(true);")
    if is_quiz and question.kind != QuestionKind.IMAGE_DISPLAY and question.points:
        w.line(f"{var}.setPoints({int(question.points)});")
    if is_choice_kind(question.kind) and question.options:
        correct = set(question.correct_answers)
        choices = [
            f"{var}.createChoice({script_string(opt)}, {'true' if opt in correct else 'false'})"
            for opt in question.options
        ]
        w.line(f"{var}.setChoices([")
        w.line(",\n    ".join(choices), indent=2)
        w.line("]);")

    if question.image_url:
        log = _LOG_LINES[locale]
        w.line("try {")
        w.line(f"var imageUrl = {script_string(question.image_url)};", indent=2)
        w.line("var imageBlob = UrlFetchApp.fetch(imageUrl).getBlob();", indent=2)
        w.line(f"{var}.setImage(imageBlob);", indent=2)
        w.line("} catch (e) {")
        w.line(
            f"Logger.log({script_string(log['image_failed'])} + {title} + ': ' + e.message);",
            indent=2,
        )
        if question.kind != QuestionKind.IMAGE_DISPLAY:
            w.line(f"{var}.setHelpText({script_string(log['help_text'])} + imageUrl);", indent=2)
        w.line("}")


def compile_script(
    definition: FormDefinition,
    create_results_sheet: bool = False,
    locale: Locale = Locale.EN,
) -> str:
    """Return Apps Script source that creates ``definition`` from scratch.

    Output is deterministic apart from the per-item variable names.
    """
    try:
        locale = Locale(locale)
    except ValueError as e:
        raise CompilationError(f"Unsupported script locale: {locale!r}") from e
    log = _LOG_LINES[locale]
    w = _ScriptWriter()

    _emit_header(w, locale)
    w.line(f"function {ENTRY_FUNCTION}() {{", indent=0)
    w.line(f"var form = FormApp.create({script_string(definition.title)});")
    if definition.description:
        w.line(f"form.setDescription({script_string(definition.description)});")
    if definition.is_quiz:
        _emit_quiz(w, definition, locale)

    last = len(definition.sections) - 1
    for section_index, section in enumerate(definition.sections):
        w.line()
        w.line(f"// --- Section: {_comment_text(section.title)} ---")
        for question in section.questions:
            _emit_question(w, question, definition.is_quiz, locale)
        if section_index < last:
            next_section = definition.sections[section_index + 1]
            page_break = f"pageBreak{section_index}"
            w.line()
            w.line(f"var {page_break} = form.addPageBreakItem();")
            w.line(f"{page_break}.setTitle({script_string(next_section.title)});")
            if next_section.description:
                w.line(f"{page_break}.setHelpText({script_string(next_section.description)});")

    if create_results_sheet:
        sheet_title = script_string(definition.title + log["results_suffix"])
        w.line()
        w.line(f"var resultsSheet = SpreadsheetApp.create({sheet_title});")
        w.line("form.setDestination(FormApp.DestinationType.SPREADSHEET, resultsSheet.getId());")

    w.line()
    w.line(f"Logger.log({script_string(log['done'])});")
    w.line(f"Logger.log({script_string(log['edit'])} + form.getEditUrl());")
    w.line(f"Logger.log({script_string(log['share'])} + form.getPublishedUrl());")
    if create_results_sheet:
        w.line(f"Logger.log({script_string(log['sheet'])} + resultsSheet.getUrl());")
    w.line("}", indent=0)
    return w.render()
