"""
Project documentation and implementation guide tests
"""
import json
import uuid

import pytest

from projectflow.core.exceptions import (
    AIResponseError, InsufficientPermissionsError, ResourceNotFoundError, ValidationError
)
from projectflow.schemas.feature import FeatureCreate
from projectflow.services.ai_service import tech_stack_label
from projectflow.services.document_service import DocumentService
from projectflow.services.feature_service import FeatureService


@pytest.fixture
async def test_data(db_session, project_service, owner, make_user, grant_role):
    """Create a described project with one feature and a viewer"""
    project = await project_service.create_project(owner)
    await project_service.update_project_name(owner, project.id, "Acme")
    await project_service.update_project_description(owner, project.id, "A widget", tech_stack="nextjs-convex")
    feature = await FeatureService(db_session).create_feature(
        owner, project.id,
        FeatureCreate(title="Search", description="Full text search", priority="High",
                      implementation_details="Use an inverted index")
    )
    viewer = await make_user("carol")
    await grant_role(project, viewer, "viewer")
    return {'project': project, 'feature': feature, 'viewer': viewer}


@pytest.fixture
def document_service(db_session, ai_service):
    return DocumentService(db_session, ai_service)


def test_tech_stack_label():
    assert tech_stack_label({"name": "mern"}) == "MERN Stack (MongoDB, Express, React, Node)"
    assert tech_stack_label("nextjs-supabase") == "Next.js + Supabase"
    assert tech_stack_label({"name": "FastAPI"}) == "FastAPI"
    assert tech_stack_label(None) == ""


@pytest.mark.asyncio
async def test_viewer_can_generate_documentation(document_service, test_data):
    """Test that the default documentation covers the project, its stack and every feature"""
    project = test_data['project']

    document = await document_service.generate_documentation(test_data['viewer'], project.id)

    assert document["title"] == "Acme Documentation"
    assert document["tech_stack"] == "Next.js + Convex"
    content = document["content"]
    assert content.startswith("# Acme Documentation")
    assert "### Search" in content
    assert "Use an inverted index" in content
    assert "## Getting Started" in content


@pytest.mark.asyncio
async def test_documentation_needs_description(document_service, project_service, owner):
    project = await project_service.create_project(owner)
    await project_service.update_project_name(owner, project.id, "Acme")

    with pytest.raises(ValidationError):
        await document_service.generate_documentation(owner, project.id)


@pytest.mark.asyncio
async def test_outsider_cannot_generate_documentation(document_service, test_data, make_user):
    outsider = await make_user("mallory")

    with pytest.raises(InsufficientPermissionsError):
        await document_service.generate_documentation(outsider, test_data['project'].id)


@pytest.mark.asyncio
async def test_documentation_sends_project_context_to_ai(db_session, test_data, owner, ai_with):
    ai = ai_with("# Acme\n\nGenerated docs")

    document = await DocumentService(db_session, ai).generate_documentation(owner, test_data['project'].id)

    assert document["content"] == "# Acme\n\nGenerated docs"
    call = ai.client.completions.calls[0]
    assert "response_format" not in call
    user_message = call["messages"][1]["content"]
    assert "Tech Stack: Next.js + Convex" in user_message
    assert "Feature 1: Search" in user_message


@pytest.mark.asyncio
async def test_default_implementation_guide(document_service, test_data):
    guide = await document_service.generate_implementation_guide(test_data['viewer'], test_data['feature'].id)

    assert len(guide.implementation_steps) == 4
    assert "Search" in guide.implementation_steps[0]
    assert guide.challenges[0].solution
    assert guide.ai_prompt.startswith('Implement the feature "Search"')


@pytest.mark.asyncio
async def test_implementation_guide_parses_camel_case(db_session, test_data, owner, ai_with):
    """Test that the AI guide is read from camelCase keys and serialized back the same way"""
    payload = {
        "implementationSteps": ["Step 1: Index documents", " ", "Step 2: Query the index"],
        "technicalConsiderations": ["Tokenize per locale"],
        "challenges": [{"challenge": "Large indexes", "solution": "Shard them"}],
        "codeStructure": "search/ module",
        "aiPrompt": "Build search",
    }
    ai = ai_with(json.dumps(payload))

    guide = await DocumentService(db_session, ai).generate_implementation_guide(owner, test_data['feature'].id)

    assert guide.implementation_steps == ["Step 1: Index documents", "Step 2: Query the index"]
    assert guide.challenges[0].challenge == "Large indexes"
    assert guide.model_dump(by_alias=True)["codeStructure"] == "search/ module"
    user_message = ai.client.completions.calls[0]["messages"][1]["content"]
    assert "Project Context: Acme: A widget" in user_message


@pytest.mark.asyncio
async def test_implementation_guide_without_steps_is_malformed(db_session, test_data, owner, ai_with):
    ai = ai_with(json.dumps({"implementationSteps": [], "codeStructure": "n/a"}))

    with pytest.raises(AIResponseError):
        await DocumentService(db_session, ai).generate_implementation_guide(owner, test_data['feature'].id)


@pytest.mark.asyncio
async def test_implementation_guide_needs_feature_description(db_session, document_service, test_data, owner):
    feature = await FeatureService(db_session).create_feature(
        owner, test_data['project'].id, FeatureCreate(title="Export")
    )

    with pytest.raises(ValidationError):
        await document_service.generate_implementation_guide(owner, feature.id)
    with pytest.raises(ResourceNotFoundError):
        await document_service.generate_implementation_guide(owner, uuid.uuid4())
