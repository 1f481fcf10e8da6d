from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...models.enums import Difficulty, QuestionType


class FileData(BaseModel):
    mime_type: Optional[str] = Field(default=None, alias="mimeType", description="MIME type of the attachment")
    data: Optional[str] = Field(default=None, description="Base64-encoded file content")

    class Config:
        populate_by_name = True

    @property
    def is_usable(self) -> bool:
        return bool(self.mime_type and self.data)


class GenerationRequest(BaseModel):
    topic: str = Field(..., description="Quiz topic; may reference an attached document")
    difficulty: str = Field(default=Difficulty.MEDIUM.value, description="Difficulty label, e.g. Easy, Medium, Hard")
    question_count: int = Field(..., ge=1, alias="questionCount", description="Exact number of questions")
    types: List[str] = Field(default_factory=lambda: ["MCQ"], description="Requested question kinds, in order")
    total_marks: int = Field(..., ge=1, alias="totalMarks", description="Total marks for the whole quiz")
    exam_style_id: str = Field(default="standard", alias="examStyleId", description="Exam style identifier")
    file_data: List[FileData] = Field(default_factory=list, alias="fileData", description="Inline attachments")
    youtube_url: Optional[str] = Field(default=None, alias="youtubeUrl", description="Video to build the quiz from")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "topic": "Photosynthesis",
                "difficulty": "Easy",
                "questionCount": 3,
                "types": ["MCQ"],
                "totalMarks": 9,
                "examStyleId": "standard"
            }
        }

    @field_validator("file_data", mode="before")
    @classmethod
    def wrap_single_file(cls, value):
        if value is None:
            return []
        if isinstance(value, (dict, FileData)):
            return [value]
        if isinstance(value, list):
            return [item for item in value if item]
        return value

    @field_validator("types", mode="before")
    @classmethod
    def dedupe_types(cls, value):
        if not isinstance(value, list):
            return value
        seen = []
        for item in value:
            if item not in seen:
                seen.append(item)
        return seen

    @property
    def attachments(self) -> List[FileData]:
        return [f for f in self.file_data if f.is_usable]

    @property
    def is_document_mode(self) -> bool:
        return "attached document" in self.topic


class DemoRequest(BaseModel):
    topic: str = Field(default="", description="Topic for the demo quiz")


class Question(BaseModel):
    id: str
    type: QuestionType
    text: str
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    explanation: Optional[str] = None
    marks: int = 1

    class Config:
        populate_by_name = True


class QuizResult(BaseModel):
    title: str
    topic: str
    difficulty: str
    questions: List[Question]
    created_at: int = Field(..., alias="createdAt", description="Creation time in epoch milliseconds")
    total_questions: int = Field(..., alias="totalQuestions")
    total_marks: int = Field(..., alias="totalMarks")
    exam_style: str = Field(..., alias="examStyle")

    class Config:
        populate_by_name = True


class QuizSummary(BaseModel):
    topic: str
    score: Optional[float] = None
    created_at: Optional[int] = Field(default=None, alias="createdAt")

    class Config:
        populate_by_name = True


class ReviewRequest(BaseModel):
    quizzes: List[QuizSummary] = Field(default_factory=list)


class ReviewResponse(BaseModel):
    review: str


class SSEFrame(BaseModel):
    """Base for frames written to a text/event-stream response"""

    def to_sse(self) -> str:
        return f"data: {self.model_dump_json(by_alias=True)}\n\n"


class ProgressFrame(SSEFrame):
    type: Literal["progress"] = "progress"
    stage: str
    percentage: int
    questions_generated: Optional[int] = Field(default=None, alias="questionsGenerated")

    class Config:
        populate_by_name = True


class CompleteFrame(SSEFrame):
    type: Literal["complete"] = "complete"
    data: QuizResult


class ErrorFrame(SSEFrame):
    type: Literal["error"] = "error"
    message: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
    details: Optional[dict[str, Any]] = None
