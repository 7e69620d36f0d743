"""
Project question and answer schemas
"""
from pydantic import BaseModel
from typing import Optional, List, Any
from datetime import datetime
from uuid import UUID


class QuestionResponse(BaseModel):
    id: UUID
    project_id: UUID
    section: str
    question_text: str
    placeholder_text: Optional[str] = None
    input_type: str
    options: Optional[List[Any]] = None
    order_index: int
    is_required: bool

    class Config:
        from_attributes = True


class AnswerInput(BaseModel):
    question_id: UUID
    answer: str


class AnswersSave(BaseModel):
    answers: List[AnswerInput]


class AnswerResponse(BaseModel):
    id: UUID
    project_id: UUID
    question_id: UUID
    answer_text: Optional[str] = None
    updated_at: datetime

    class Config:
        from_attributes = True
