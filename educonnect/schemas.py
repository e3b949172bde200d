"""Request payloads that do not fit flat forms: assignments with embedded
questions, and the submission body, which is a tagged variant per
assignment type.
"""
from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import QUESTION_MULTIPLE_CHOICE, QUESTION_SHORT_ANSWER, TYPE_DOCUMENT, TYPE_TEST


def _naive_utc(value: datetime) -> datetime:
    # the store keeps naive UTC timestamps
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class QuestionIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=False, extra="ignore")

    question_text: str = Field(min_length=1, max_length=5000)
    type: Literal["MULTIPLE_CHOICE", "SHORT_ANSWER"]
    options: Optional[List[str]] = None
    correct_answer: str = Field(min_length=1, max_length=500)
    points: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_options(self):
        if self.type == QUESTION_MULTIPLE_CHOICE:
            if not self.options or len(self.options) < 2:
                raise ValueError("multiple choice questions need at least two options")
            if any(not o.strip() for o in self.options):
                raise ValueError("options must not be blank")
            valid = {str(i) for i in range(1, len(self.options) + 1)}
            if self.correct_answer not in valid:
                raise ValueError("correct_answer must be the 1-based index of one of the options")
        elif self.type == QUESTION_SHORT_ANSWER and self.options:
            raise ValueError("short answer questions take no options")
        return self


class AssignmentCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=20000)
    due_date: datetime
    type: Literal["TEST", "DOCUMENT"]
    total_points: Optional[int] = Field(default=None, ge=0)
    questions: List[QuestionIn] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()

    @field_validator("due_date")
    @classmethod
    def _due_naive(cls, v: datetime) -> datetime:
        return _naive_utc(v)

    @model_validator(mode="after")
    def _check_questions(self):
        if self.type == TYPE_TEST and not self.questions:
            raise ValueError("a TEST assignment needs at least one question")
        if self.type == TYPE_DOCUMENT and self.questions:
            raise ValueError("a DOCUMENT assignment takes no questions")
        return self


class AssignmentUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=20000)
    due_date: Optional[datetime] = None
    total_points: Optional[int] = Field(default=None, ge=0)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("title must not be blank")
        return v.strip() if v is not None else v

    @field_validator("due_date")
    @classmethod
    def _due_naive(cls, v):
        return _naive_utc(v) if v is not None else v


class DocumentSubmission(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["DOCUMENT"] = TYPE_DOCUMENT
    file_url: str = Field(min_length=1, max_length=500)

    @field_validator("file_url")
    @classmethod
    def _url_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("file_url must not be blank")
        return v


class TestSubmission(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["TEST"] = TYPE_TEST
    answers: Dict[str, str]

    @field_validator("answers", mode="before")
    @classmethod
    def _keys_as_str(cls, v):
        if isinstance(v, dict):
            return {str(k): val for k, val in v.items()}
        return v


SubmissionPayload = Annotated[Union[DocumentSubmission, TestSubmission], Field(discriminator="type")]
_submission_adapter = TypeAdapter(SubmissionPayload)


def _errors(exc: PydanticValidationError):
    out = {}
    for e in exc.errors():
        key = ".".join(str(p) for p in e["loc"]) or "__root__"
        out.setdefault(key, []).append(e["msg"])
    return out


def parse(model, data):
    """Validate ``data`` against a pydantic model, raising our ValidationError."""
    try:
        return model.model_validate(data or {})
    except PydanticValidationError as exc:
        raise ValidationError("Invalid data", errors=_errors(exc)) from exc


def parse_submission_payload(data) -> Union[DocumentSubmission, TestSubmission]:
    """Build the tagged submission variant. Without an explicit ``type`` the
    tag is inferred: a body carrying ``answers`` is a TEST submission."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid data", errors={"__root__": ["expected a JSON object"]})
    data = dict(data)
    data.setdefault("type", TYPE_TEST if "answers" in data else TYPE_DOCUMENT)
    try:
        return _submission_adapter.validate_python(data)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid data", errors=_errors(exc)) from exc
