from typing import Callable, Dict, List, Optional

import structlog

from ..api.v1.schemas import GenerationRequest
from ..config import get_settings
from ..models.exam_styles import get_style_instruction, get_style_label
from .transcript_service import TranscriptService

logger = structlog.get_logger(__name__)


# Gemini structured-output schema (OpenAPI subset, upper-case type names)
QUIZ_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "questions": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "text": {"type": "STRING"},
                    "type": {"type": "STRING"},
                    "options": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "correctAnswer": {"type": "STRING"},
                    "explanation": {"type": "STRING"},
                    "marks": {"type": "NUMBER"},
                },
                "required": ["text", "type", "correctAnswer", "explanation", "marks"],
            },
        },
    },
    "required": ["title", "questions"],
}

DOCUMENT_ONLY_RULE = (
    "**CRITICAL: ALL questions MUST be based ONLY on the content of the attached document(s). "
    "Do NOT generate questions about topics not covered in the document. "
    "Every question must be answerable from the document content.**\n"
)

TRANSCRIPT_RULE = (
    "**Base ALL questions on the video transcript provided below. "
    "Do NOT ask about anything the transcript does not cover.**\n"
)

FORMATTING_RULES = """- For each question, include a field "type" exactly as one of: MCQ, TrueFalse, ShortAnswer, Essay, FillInTheBlank.
- For 'MCQ', provide 4 options, DON'T PROVIDE WITH OPTIONS PREFIXES LIKE 'A. or B.'.
- For 'TrueFalse', provide 2 options (True, False).
- For Short/Long Answer, 'options' can be empty array.
- Return JSON only.
- Question marks must be whole numbers, not numbers like 2.5, 3.5, etc."""


class PromptAssembler:
    """Builds the multi-part Gemini request for one quiz generation."""

    def __init__(
        self,
        transcript_service: Optional[TranscriptService] = None,
        style_instructions: Optional[Callable[[str], str]] = None,
        temperature: Optional[float] = None,
    ):
        self.transcript_service = transcript_service
        self.style_instructions = style_instructions or get_style_instruction
        self.temperature = temperature if temperature is not None else get_settings().generation_temperature

    async def assemble(self, request: GenerationRequest) -> dict:
        """
        Fetch the transcript when a video URL is supplied, then build the payload.

        A transcript failure propagates immediately as TranscriptFetchError.
        """
        transcript = None
        if request.youtube_url:
            if self.transcript_service is None:
                self.transcript_service = TranscriptService()
            transcript = await self.transcript_service.fetch(request.youtube_url)
        return self.build_payload(request, transcript)

    def build_payload(self, request: GenerationRequest, transcript: Optional[str] = None) -> dict:
        parts = self.build_parts(request, transcript)
        logger.info(
            "prompt_assembled",
            part_count=len(parts),
            attachment_count=len(request.attachments),
            has_transcript=transcript is not None,
        )
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": QUIZ_RESPONSE_SCHEMA,
                "temperature": self.temperature,
            },
        }

    def build_parts(self, request: GenerationRequest, transcript: Optional[str] = None) -> List[Dict]:
        attachments = request.attachments
        text = self.build_instructions(request, has_transcript=transcript is not None)

        if attachments:
            suffix = "s" if len(attachments) > 1 else ""
            text += f" Use the attached document{suffix} context to generate relevant questions."

        parts: List[Dict] = [{"text": text}]
        for attachment in attachments:
            parts.append({"inlineData": {"mimeType": attachment.mime_type, "data": attachment.data}})

        if transcript is not None:
            parts.append({"text": f"Video transcript:\n{transcript}"})

        return parts

    def build_instructions(self, request: GenerationRequest, has_transcript: bool = False) -> str:
        style_label = get_style_label(request.exam_style_id)
        style_instruction = self.style_instructions(request.exam_style_id)
        type_string = ", ".join(request.types)

        source_rules = ""
        if request.is_document_mode:
            source_rules += DOCUMENT_ONLY_RULE
        if has_transcript:
            source_rules += TRANSCRIPT_RULE

        return (
            f'Generate a {request.difficulty} level quiz about "{request.topic}".\n'
            f"**Exam Style: {style_label}**. {style_instruction}\n\n"
            f"The quiz should have exactly {request.question_count} questions.\n"
            f"The Total Marks for the entire quiz must equal exactly {request.total_marks}. "
            f"Distribute these marks logically among the questions based on their complexity.\n"
            f"Include a mix of the following question types: {type_string}.\n\n"
            f"{source_rules}"
            f"{FORMATTING_RULES}"
        )
