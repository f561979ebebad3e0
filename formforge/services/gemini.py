"""Gemini structured-output client and the form-definition generation prompt."""

import json
import logging
from typing import Callable

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError

from formforge.config import get_settings
from formforge.exceptions import GenerationError, GenerationFailure
from formforge.models.common import Locale
from formforge.models.forms import FormDefinition

logger = logging.getLogger(__name__)

FORM_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {
            "type": "STRING",
            "description": "The main title of the form, extracted from the user's input.",
        },
        "description": {
            "type": "STRING",
            "description": "A brief description or introduction for the form, extracted from the user's input.",
        },
        "isQuiz": {
            "type": "BOOLEAN",
            "description": "Set to true if the input suggests this is a quiz, test, or assessment.",
        },
        "sections": {
            "type": "ARRAY",
            "description": "An array of form sections. Each section represents a page in the form.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {
                        "type": "STRING",
                        "description": "The title for this section/page of the form (e.g., 'Contact Information').",
                    },
                    "description": {
                        "type": "STRING",
                        "description": "An optional description for this section.",
                    },
                    "questions": {
                        "type": "ARRAY",
                        "description": "An array of question objects for this section.",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "title": {"type": "STRING", "description": "The text of the question."},
                                "type": {
                                    "type": "STRING",
                                    "description": (
                                        "The type of question. Must be one of: SHORT_ANSWER, PARAGRAPH, "
                                        "MULTIPLE_CHOICE, CHECKBOXES, IMAGE_DISPLAY."
                                    ),
                                },
                                "options": {
                                    "type": "ARRAY",
                                    "description": (
                                        "Options for MULTIPLE_CHOICE or CHECKBOXES questions. The correct "
                                        "answer marker (*) should be removed from the option text."
                                    ),
                                    "items": {"type": "STRING"},
                                },
                                "imageUrl": {
                                    "type": "STRING",
                                    "description": (
                                        "A URL for an image associated with the question, either the content "
                                        "of an IMAGE_DISPLAY item or an attachment. Empty string if not applicable."
                                    ),
                                },
                                "required": {
                                    "type": "BOOLEAN",
                                    "description": "Whether the question is mandatory. Infer this if the input mentions 'required', '*', etc.",
                                },
                                "points": {
                                    "type": "INTEGER",
                                    "description": "The point value for this question if it's part of a quiz. Omit or set to 0 if not a quiz question.",
                                },
                                "correctAnswers": {
                                    "type": "ARRAY",
                                    "description": "The correct answer(s). For choice questions, this should match the text of the correct option(s).",
                                    "items": {"type": "STRING"},
                                },
                            },
                            "required": ["title", "type"],
                        },
                    },
                },
                "required": ["title", "questions"],
            },
        },
    },
    "required": ["title", "description", "sections"],
}

SYSTEM_INSTRUCTIONS = {
    Locale.EN: """You are an expert form and quiz generator. Analyze the following content and convert it into a structured JSON object.
1. Extract the main title and description.
2. Group questions into logical sections.
3. For each question, identify its text, type, and required status.
4. **CRITICAL (QUIZ):** If the content suggests it is a quiz (e.g., has points, correct answers), set `isQuiz: true` at the top level.
5. **CORRECT ANSWERS:** For multiple choice or checkbox questions, if an option ends with an asterisk (*), it is the correct answer. Add the option's text (without the *) to the `correctAnswers` array for that question.
6. **POINTS:** If a question has a correct answer, assign it a point value (e.g., 10) in the `points` field. If the user specifies a default point value, use that instead.
7. **GOOGLE FORMS API JSON:** If the input is a JSON from the Google Forms API, parse it and transform it into the target schema.
8. Return a single, valid JSON object matching the provided schema.""",
    Locale.VI: """Bạn là một chuyên gia tạo biểu mẫu và bài kiểm tra. Hãy phân tích nội dung sau và chuyển nó thành một đối tượng JSON có cấu trúc.
1. Trích xuất tiêu đề chính và mô tả.
2. Nhóm câu hỏi vào các phần hợp lý.
3. Đối với mỗi câu hỏi, xác định văn bản, loại, và trạng thái bắt buộc.
4. **QUAN TRỌNG (QUIZ):** Nếu nội dung gợi ý đây là một bài kiểm tra (ví dụ: có điểm, có đáp án đúng), hãy đặt `isQuiz: true` ở cấp độ cao nhất.
5. **ĐÁP ÁN ĐÚNG:** Đối với câu hỏi trắc nghiệm hoặc hộp kiểm, nếu một lựa chọn kết thúc bằng dấu hoa thị (*), đó là câu trả lời đúng. Hãy thêm văn bản của lựa chọn đó (không có dấu *) vào mảng `correctAnswers` cho câu hỏi đó.
6. **ĐIỂM SỐ:** Nếu một câu hỏi có đáp án đúng, hãy gán cho nó một số điểm (ví dụ: 10 điểm) vào trường `points`. Nếu người dùng chỉ định một số điểm mặc định, hãy sử dụng số điểm đó.
7. **GOOGLE FORMS API JSON:** Nếu đầu vào là JSON từ API Google Forms, hãy phân tích nó và chuyển đổi sang schema mục tiêu.
8. Chỉ trả về một đối tượng JSON hợp lệ duy nhất khớp với schema đã cung cấp.""",
}

REMEDIATIONS = {
    Locale.EN: {
        GenerationFailure.SAFETY_BLOCKED: "The request was blocked due to safety settings. Please modify your input.",
        GenerationFailure.INVALID_KEY: "The Gemini API key is missing or not valid. Open settings and check GEMINI_API_KEY.",
        GenerationFailure.EMPTY: "The model returned an empty response. Try again or add more detail to your input.",
        GenerationFailure.OTHER: "Failed to generate a form definition from the provided text.",
    },
    Locale.VI: {
        GenerationFailure.SAFETY_BLOCKED: "Yêu cầu bị chặn do cài đặt an toàn. Vui lòng chỉnh sửa nội dung nhập.",
        GenerationFailure.INVALID_KEY: "Khóa API Gemini bị thiếu hoặc không hợp lệ. Mở phần cài đặt và kiểm tra GEMINI_API_KEY.",
        GenerationFailure.EMPTY: "Mô hình trả về phản hồi trống. Hãy thử lại hoặc bổ sung thêm chi tiết.",
        GenerationFailure.OTHER: "Không thể tạo biểu mẫu từ nội dung đã cung cấp.",
    },
}

Generate = Callable[..., dict]


def remediation_message(reason: GenerationFailure, locale: Locale = Locale.EN) -> str:
    return REMEDIATIONS[Locale(locale)][reason]


def _get_client() -> genai.Client:
    api_key = get_settings().gemini_api_key
    if not api_key:
        raise GenerationError(
            GenerationFailure.INVALID_KEY,
            "Gemini API key not configured. Get one at "
            "https://aistudio.google.com/apikey and set GEMINI_API_KEY in .env",
        )
    return genai.Client(api_key=api_key)


def _is_blocked(response) -> bool:
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and feedback.block_reason:
        return True
    for candidate in response.candidates or []:
        if candidate.finish_reason == types.FinishReason.SAFETY:
            return True
    return False


def generate(
    prompt: str,
    schema: dict,
    system_instruction: str | None = None,
    model: str | None = None,
) -> dict:
    """Run one structured generation and return the parsed JSON object."""
    client = _get_client()
    model = model or get_settings().gemini_model
    try:
        response = client.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
    except genai_errors.APIError as e:
        logger.error("Gemini call failed: %s", e)
        if "API key not valid" in str(e) or e.code in (401, 403):
            raise GenerationError(GenerationFailure.INVALID_KEY, str(e)) from e
        if "SAFETY" in str(e):
            raise GenerationError(GenerationFailure.SAFETY_BLOCKED, str(e)) from e
        raise GenerationError(GenerationFailure.OTHER, str(e)) from e

    if _is_blocked(response):
        raise GenerationError(GenerationFailure.SAFETY_BLOCKED, "Response blocked by safety filters.")
    text = (response.text or "").strip()
    if not text:
        raise GenerationError(GenerationFailure.EMPTY, "API returned an empty response.")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise GenerationError(GenerationFailure.OTHER, f"Model returned invalid JSON: {e}") from e


def build_form_prompt(raw_input: str) -> str:
    return f"Here is the content to analyze:\n---\n{raw_input}\n---\n"


def generate_form_definition(
    raw_input: str,
    locale: Locale = Locale.EN,
    generate: Generate = generate,
) -> FormDefinition:
    """Turn free text (markdown, HTML, JSON, ...) into a FormDefinition via the LLM."""
    locale = Locale(locale)
    data = generate(
        build_form_prompt(raw_input),
        FORM_SCHEMA,
        system_instruction=SYSTEM_INSTRUCTIONS[locale],
    )
    try:
        return FormDefinition.model_validate(data)
    except ValidationError as e:
        logger.error("Generated form definition did not match the schema: %s", e)
        raise GenerationError(
            GenerationFailure.OTHER, "Generated form definition did not match the expected shape."
        ) from e
