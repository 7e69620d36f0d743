"""
Response shapes expected back from the LLM completion endpoint.

Every payload the AI service receives is parsed into one of these models;
anything that does not fit is treated as a malformed response.
"""
from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict

from projectflow.models.feature import FEATURE_PRIORITIES, FEATURE_EFFORTS, FEATURE_CATEGORIES
from projectflow.models.question import QUESTION_SECTIONS, QUESTION_INPUT_TYPES


def _match_choice(value, choices, default, field):
    """Case-insensitive match against an allowed set; blank means default"""
    if value is None or not str(value).strip():
        return default
    lookup = {choice.lower(): choice for choice in choices}
    match = lookup.get(str(value).strip().lower())
    if match is None:
        raise ValueError(f"{field} must be one of {', '.join(choices)}")
    return match


class GeneratedQuestion(BaseModel):
    question: str
    type: str = "textarea"
    section: str = "general"
    required: bool = True
    placeholder: Optional[str] = None
    options: Optional[List[str]] = None

    @validator('question')
    def validate_question(cls, v):
        if not v.strip():
            raise ValueError('Question text cannot be empty')
        return v.strip()

    @validator('type', pre=True)
    def validate_type(cls, v):
        return _match_choice(v, QUESTION_INPUT_TYPES, "textarea", "Input type")

    @validator('section', pre=True)
    def validate_section(cls, v):
        return _match_choice(v, QUESTION_SECTIONS, "general", "Section")


class QuestionGenerationResult(BaseModel):
    questions: List[GeneratedQuestion]


class GeneratedFeature(BaseModel):
    title: str = "Untitled Feature"
    description: str = ""
    priority: str = "Medium"
    effort: str = "Medium"
    category: str = "Core"
    acceptance_criteria: List[str] = Field(default_factory=list, alias="acceptanceCriteria")
    technical_notes: Optional[str] = Field(None, alias="technicalNotes")

    class Config:
        populate_by_name = True

    @validator('title', pre=True)
    def validate_title(cls, v):
        if v is None or not str(v).strip():
            return "Untitled Feature"
        return str(v).strip()

    @validator('description', pre=True)
    def validate_description(cls, v):
        return "" if v is None else str(v)

    @validator('priority', pre=True)
    def validate_priority(cls, v):
        return _match_choice(v, FEATURE_PRIORITIES, "Medium", "Priority")

    @validator('effort', pre=True)
    def validate_effort(cls, v):
        return _match_choice(v, FEATURE_EFFORTS, "Medium", "Effort")

    @validator('category', pre=True)
    def validate_category(cls, v):
        return _match_choice(v, FEATURE_CATEGORIES, "Core", "Category")

    def implementation_details(self) -> Optional[str]:
        """Flatten acceptance criteria and technical notes into one text block"""
        parts = []
        if self.acceptance_criteria:
            parts.append("Acceptance criteria:\n" + "\n".join(f"- {c}" for c in self.acceptance_criteria))
        if self.technical_notes:
            parts.append(f"Technical notes: {self.technical_notes}")
        return "\n\n".join(parts) or None


class FeatureGenerationResult(BaseModel):
    features: List[GeneratedFeature]


class DevelopmentPhase(BaseModel):
    phase: str
    duration: Optional[str] = None
    description: Optional[str] = None


class ProjectSummaryResult(BaseModel):
    overview: str
    objectives: List[str] = []
    target_audience: Optional[str] = Field(None, alias="targetAudience")
    use_cases: List[str] = Field(default_factory=list, alias="useCases")
    features_breakdown: Dict[str, List[str]] = Field(default_factory=dict, alias="featuresBreakdown")
    technical_considerations: List[str] = Field(default_factory=list, alias="technicalConsiderations")
    development_phases: List[DevelopmentPhase] = Field(default_factory=list, alias="developmentPhases")
    success_metrics: List[str] = Field(default_factory=list, alias="successMetrics")

    class Config:
        populate_by_name = True

    @validator('overview')
    def validate_overview(cls, v):
        if not v.strip():
            raise ValueError('Summary overview cannot be empty')
        return v.strip()


class GeneratedPrompt(BaseModel):
    content: str

    @validator('content')
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError('Prompt cannot be empty')
        return v.strip()


class ImplementationChallenge(BaseModel):
    challenge: str
    solution: str = ""


class ImplementationGuide(BaseModel):
    """Step-by-step build plan for a single feature"""
    implementation_steps: List[str] = Field(alias="implementationSteps")
    technical_considerations: List[str] = Field(default_factory=list, alias="technicalConsiderations")
    challenges: List[ImplementationChallenge] = []
    code_structure: Optional[str] = Field(None, alias="codeStructure")
    ai_prompt: Optional[str] = Field(None, alias="aiPrompt")

    class Config:
        populate_by_name = True

    @validator('implementation_steps')
    def validate_steps(cls, v):
        steps = [step.strip() for step in v if step and step.strip()]
        if not steps:
            raise ValueError('Implementation guide needs at least one step')
        return steps
