"""
AI service for question, feature, prompt, summary and documentation generation
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ValidationError as PydanticValidationError

from projectflow.config import settings
from projectflow.core.exceptions import AIResponseError, ExternalServiceError
from projectflow.schemas.ai import (
    GeneratedQuestion, QuestionGenerationResult, GeneratedFeature, FeatureGenerationResult,
    ProjectSummaryResult, GeneratedPrompt, ImplementationGuide, ImplementationChallenge
)

logger = logging.getLogger(__name__)


DEFAULT_QUESTIONS = [
    GeneratedQuestion(
        question="Who is the target audience for this project?",
        type="textarea", section="business", required=True,
        placeholder="Describe your ideal users or customers..."
    ),
    GeneratedQuestion(
        question="What problem does this project solve?",
        type="textarea", section="business", required=True,
        placeholder="Explain the main problem your project addresses..."
    ),
    GeneratedQuestion(
        question="What are the key features you want in the MVP?",
        type="textarea", section="technical", required=True,
        placeholder="List the most important features for your minimum viable product..."
    ),
    GeneratedQuestion(
        question="What is your timeline for this project?",
        type="text", section="business", required=True,
        placeholder="e.g., 3 months, 6 months, 1 year"
    ),
    GeneratedQuestion(
        question="What technologies or platforms do you prefer to use?",
        type="textarea", section="technical", required=True,
        placeholder="List any preferred technologies, frameworks, or platforms..."
    ),
]

DEFAULT_FEATURES = [
    GeneratedFeature(
        title="User Authentication",
        description="Secure login and registration system with email verification and password reset functionality.",
        priority="High", effort="Medium", category="Core",
        acceptance_criteria=[
            "Users can register with email and password",
            "Email verification is required before account activation",
            "Password reset functionality via email",
        ],
    ),
    GeneratedFeature(
        title="Project Dashboard",
        description="Overview of all project activity with key metrics and recent changes.",
        priority="High", effort="Medium", category="Core",
    ),
    GeneratedFeature(
        title="Task Management",
        description="Create, assign and track tasks through their lifecycle.",
        priority="Medium", effort="Medium", category="Core",
    ),
]

QUESTIONS_SYSTEM_PROMPT = """You are a helpful assistant that generates relevant context questions for software projects.
Generate exactly 5 questions that will help understand the project requirements better.
The questions should cover different aspects like business goals, technical requirements, user experience, and constraints.
Return a JSON object {"questions": [...]} where each item has:
- question: the question text
- type: one of text, textarea, select, radio, checkbox
- section: one of general, technical, business, user_experience
- required: boolean
- placeholder: optional placeholder text
- options: list of strings, only for select/radio/checkbox"""

FEATURES_SYSTEM_PROMPT = """You are a helpful assistant that generates software features based on project requirements.
Return a JSON object {"features": [...]} where each item has:
- title: feature name (concise and clear)
- description: detailed description of the feature
- priority: one of "Low", "Medium", "High", "Critical"
- effort: one of "Small", "Medium", "Large", "XL"
- category: one of "Core", "Enhancement", "Integration", "UI/UX", "Performance", "Security"
- acceptanceCriteria: list of strings
- technicalNotes: optional implementation notes
Never repeat a feature the project already has."""

SUMMARY_SYSTEM_PROMPT = """You are a senior product manager who creates comprehensive, strategic project summaries.
Always respond with a JSON object with keys: overview, objectives, targetAudience, useCases,
featuresBreakdown (phase1/phase2/phase3 lists), technicalConsiderations,
developmentPhases (list of {phase, duration, description}) and successMetrics."""

PROMPT_SYSTEM_PROMPT = """You are an expert software developer and technical writer.
Create a detailed, structured implementation prompt that gives a developer enough technical detail
to build what is described. Respond with plain text."""

DOCUMENTATION_SYSTEM_PROMPT = """You are an expert technical documentation writer who creates comprehensive,
well-structured documentation for software projects. Your documentation is clear, professional and
technically accurate. Respond with markdown."""

IMPLEMENTATION_SYSTEM_PROMPT = """You are a senior software engineer who creates detailed, practical implementation guides.
Return a JSON object with keys:
- implementationSteps: 4-6 ordered steps
- technicalConsiderations: list of strings
- challenges: list of {challenge, solution}
- codeStructure: recommended file structure and architecture approach
- aiPrompt: a complete prompt a developer can hand to an AI coding assistant"""

TECH_STACK_NAMES = {
    "nextjs-supabase": "Next.js + Supabase",
    "nextjs-convex": "Next.js + Convex",
    "mern": "MERN Stack (MongoDB, Express, React, Node)",
    "reactjs-supabase": "React.js + Supabase",
    "reactjs-convex": "React.js + Convex",
}


def _features_text(features: Sequence[Any]) -> str:
    return "\n".join(
        f"- {f.title}: {f.description or 'No description'} (Priority: {f.priority}, Effort: {f.effort})"
        for f in features
    )


def _answers_text(answers: Sequence[Dict[str, str]]) -> str:
    return "\n\n".join(f"Q: {qa['question']}\nA: {qa['answer']}" for qa in answers)


def tech_stack_label(tech_stack: Any) -> str:
    """Readable stack name from a stored {"name": ...} dict or a preset key"""
    if isinstance(tech_stack, dict):
        tech_stack = tech_stack.get("name")
    if not tech_stack:
        return ""
    return TECH_STACK_NAMES.get(tech_stack, tech_stack)


class AIService:
    """Thin boundary around the LLM completion endpoint.

    All structured responses are validated against pydantic models. When AI is
    disabled or no API key is configured the call cannot be made and static
    defaults are returned instead; a reachable endpoint that answers with
    something malformed is always an error.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None,
                 enabled: Optional[bool] = None):
        self.model = model or settings.openai_model
        self.ai_enabled = settings.ai_enabled if enabled is None else enabled

        if client is not None:
            self.client = client
        elif self.ai_enabled and settings.openai_api_key:
            self.client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.ai_request_timeout)
            logger.info(f"OpenAI initialized with model: {self.model}")
        else:
            self.client = None
            logger.warning("OpenAI not configured - using built-in defaults")

    @property
    def is_available(self) -> bool:
        return self.ai_enabled and self.client is not None

    async def _complete(self, system: str, user: str, max_tokens: int,
                        temperature: float = 0.7, json_mode: bool = True) -> str:
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user}
                ],
                max_tokens=max_tokens,
                temperature=temperature,
                **kwargs
            )
        except OpenAIError as e:
            logger.error(f"OpenAI API call failed: {e}")
            raise ExternalServiceError(f"AI generation failed: {e}")

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            raise AIResponseError("No response from AI service")
        return content

    async def _complete_model(self, model: type, system: str, user: str, max_tokens: int,
                              temperature: float = 0.7) -> BaseModel:
        content = await self._complete(system, user, max_tokens, temperature)
        try:
            return model.model_validate(json.loads(content))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error(
                "Failed to parse AI response",
                extra={"expected": model.__name__, "payload": content[:500]}
            )
            raise AIResponseError(details={"expected": model.__name__, "reason": str(e)[:500]})

    async def generate_questions(self, project_name: str, project_description: str) -> List[GeneratedQuestion]:
        if not self.is_available:
            return [q.model_copy() for q in DEFAULT_QUESTIONS]

        result = await self._complete_model(
            QuestionGenerationResult,
            QUESTIONS_SYSTEM_PROMPT,
            f"Generate 5 context questions for this project.\nProject Name: {project_name}\n"
            f"Project Description: {project_description}",
            max_tokens=800,
        )
        if not result.questions:
            raise AIResponseError("AI service returned no questions")
        return result.questions

    async def generate_features(
        self,
        project_name: str,
        project_description: str,
        answers: Sequence[Dict[str, str]],
        existing_titles: Sequence[str],
        count: int = 1
    ) -> List[GeneratedFeature]:
        if not self.is_available:
            existing = {title.lower() for title in existing_titles}
            fresh = [f.model_copy() for f in DEFAULT_FEATURES if f.title.lower() not in existing]
            return fresh[:count]

        existing_text = "\n".join(f"- {t}" for t in existing_titles) or "None"
        result = await self._complete_model(
            FeatureGenerationResult,
            FEATURES_SYSTEM_PROMPT,
            f"Project Name: {project_name}\nProject Description: {project_description}\n\n"
            f"Context Information:\n{_answers_text(answers)}\n\n"
            f"Existing Features:\n{existing_text}\n\n"
            f"Generate {count} new feature(s) for this project. Focus on core functionality first.",
            max_tokens=1500,
        )
        return result.features[:count]

    async def generate_summary(
        self,
        project_name: str,
        project_description: str,
        features: Sequence[Any],
        answers: Sequence[Dict[str, str]]
    ) -> ProjectSummaryResult:
        if not self.is_available:
            return self.default_summary(project_name, project_description, features)

        return await self._complete_model(
            ProjectSummaryResult,
            SUMMARY_SYSTEM_PROMPT,
            f"Project Name: {project_name}\nProject Description: {project_description}\n\n"
            f"Generated Features:\n{_features_text(features)}\n\n"
            f"Additional Context:\n{_answers_text(answers)}",
            max_tokens=2000,
            temperature=0.6,
        )

    async def generate_project_prompt(self, project_name: str, project_description: str,
                                      features: Sequence[Any]) -> str:
        if not self.is_available:
            return self.default_project_prompt(project_name, project_description, features)

        content = await self._complete(
            PROMPT_SYSTEM_PROMPT,
            f"Create a detailed implementation prompt for the following project:\n"
            f"Project Name: {project_name}\nProject Description: {project_description}\n\n"
            f"Features:\n{_features_text(features)}\n\n"
            "Start with a high-level overview, break down the technical requirements, suggest an "
            "architecture and outline implementation steps in a logical order.",
            max_tokens=2000,
            json_mode=False,
        )
        return GeneratedPrompt(content=content).content

    async def generate_feature_prompt(self, project_name: str, project_description: str,
                                      feature: Any) -> str:
        if not self.is_available:
            return self.default_feature_prompt(project_name, project_description, feature)

        content = await self._complete(
            PROMPT_SYSTEM_PROMPT,
            f"Create a detailed implementation prompt for the following feature:\n"
            f"Project Name: {project_name}\nProject Description: {project_description}\n"
            f"Feature: {feature.title}\nDescription: {feature.description or 'No description'}\n"
            f"Priority: {feature.priority}\nEffort: {feature.effort}\n\n"
            "Describe what the feature should accomplish, the technical requirements, step-by-step "
            "implementation instructions and the testing considerations.",
            max_tokens=1500,
            json_mode=False,
        )
        return GeneratedPrompt(content=content).content

    async def generate_documentation(
        self,
        project_name: str,
        project_description: str,
        tech_stack: str,
        features: Sequence[Any],
        summary: Optional[str] = None
    ) -> str:
        """Markdown documentation covering overview, architecture, features and setup"""
        if not self.is_available:
            return self.default_documentation(project_name, project_description, tech_stack, features, summary)

        features_text = "\n\n".join(
            f"Feature {index}: {f.title}\nDescription: {f.description or 'No description'}\n"
            f"Priority: {f.priority}\nEffort: {f.effort}\nCategory: {f.category}"
            + (f"\nImplementation Details: {f.implementation_details}" if f.implementation_details else "")
            for index, f in enumerate(features, start=1)
        ) or "No features provided."

        content = await self._complete(
            DOCUMENTATION_SYSTEM_PROMPT,
            f"Project Name: {project_name}\nProject Description: {project_description}\n"
            f"Tech Stack: {tech_stack or 'Not specified'}\n\nFeatures:\n{features_text}\n\n"
            + (f"Project Summary: {summary}\n\n" if summary else "")
            + "Include a title and project overview, tech stack details and architecture, feature "
            "descriptions with implementation guidelines, setup and installation instructions and "
            "development workflow recommendations.",
            max_tokens=4000,
            json_mode=False,
        )
        return GeneratedPrompt(content=content).content

    async def generate_implementation_guide(
        self,
        feature_title: str,
        feature_description: str,
        project_context: Optional[str] = None,
        tech_stack: Optional[str] = None
    ) -> ImplementationGuide:
        if not self.is_available:
            return self.default_implementation_guide(feature_title, feature_description, tech_stack)

        return await self._complete_model(
            ImplementationGuide,
            IMPLEMENTATION_SYSTEM_PROMPT,
            f"Generate a detailed implementation guide for the following feature:\n"
            f"Feature: {feature_title}\nDescription: {feature_description}\n"
            f"Project Context: {project_context or 'General web application'}\n"
            f"Tech Stack: {tech_stack or 'Not specified'}\n\n"
            "Make the guide practical, detailed and actionable for developers.",
            max_tokens=2000,
            temperature=0.6,
        )

    @staticmethod
    def default_summary(project_name: str, project_description: str,
                        features: Sequence[Any]) -> ProjectSummaryResult:
        titles = [f.title for f in features]
        overview = f"Project {project_name} aims to {project_description}."
        if titles:
            overview += f" It includes key features such as {', '.join(titles)}."
        return ProjectSummaryResult(
            overview=overview,
            features_breakdown={"phase1": titles},
        )

    @staticmethod
    def default_project_prompt(project_name: str, project_description: str,
                               features: Sequence[Any]) -> str:
        lines = [
            f"Build {project_name}.",
            "",
            f"Overview: {project_description}",
        ]
        if features:
            lines += ["", "Features:", _features_text(features)]
        lines += ["", "Implement the core features first, then the enhancements, with tests for each."]
        return "\n".join(lines)

    @staticmethod
    def default_feature_prompt(project_name: str, project_description: str, feature: Any) -> str:
        return "\n".join([
            f"Implement the feature \"{feature.title}\" for {project_name}.",
            "",
            f"Project: {project_description}",
            f"Feature: {feature.description or 'No description'}",
            f"Priority: {feature.priority}, Effort: {feature.effort}, Category: {feature.category}",
            "",
            "Describe the data it needs, the user-facing behaviour, the edge cases and how it will be tested.",
        ])

    @staticmethod
    def default_documentation(project_name: str, project_description: str, tech_stack: str,
                              features: Sequence[Any], summary: Optional[str] = None) -> str:
        lines = [f"# {project_name} Documentation", "", "## Overview", "", project_description]
        if summary:
            lines += ["", summary]
        lines += ["", "## Tech Stack", "", tech_stack or "Not specified", "", "## Features"]
        if not features:
            lines += ["", "No features have been defined yet."]
        for feature in features:
            lines += [
                "",
                f"### {feature.title}",
                "",
                feature.description or "No description",
                "",
                f"Priority: {feature.priority}, Effort: {feature.effort}, Category: {feature.category}",
            ]
            if feature.implementation_details:
                lines += ["", feature.implementation_details]
        lines += [
            "",
            "## Getting Started",
            "",
            "Clone the repository, install the dependencies for the chosen stack and configure the environment.",
            "",
            "## Development Workflow",
            "",
            "Build the core features first, keep each feature on its own branch and cover it with tests.",
        ]
        return "\n".join(lines)

    @staticmethod
    def default_implementation_guide(feature_title: str, feature_description: str,
                                     tech_stack: Optional[str] = None) -> ImplementationGuide:
        stack = tech_stack or "the project stack"
        return ImplementationGuide(
            implementation_steps=[
                f"Step 1: Define the data model and API contract for {feature_title}",
                f"Step 2: Implement the server-side logic using {stack}",
                "Step 3: Build the user interface and wire it to the API",
                "Step 4: Add validation, error handling and tests",
            ],
            technical_considerations=[
                "Validate every input on the server",
                "Keep the feature behind clear module boundaries",
            ],
            challenges=[
                ImplementationChallenge(
                    challenge="Requirements may shift during implementation",
                    solution="Agree on acceptance criteria before starting",
                ),
            ],
            code_structure=f"Group the {feature_title} model, service, routes and tests in one module.",
            ai_prompt=f"Implement the feature \"{feature_title}\" using {stack}.\n\n{feature_description}",
        )
