"""
Implementation prompt tests
"""
import pytest

from projectflow.core.exceptions import InsufficientPermissionsError, ValidationError
from projectflow.services.prompt_service import PromptService
from projectflow.services.task_service import TaskService


@pytest.fixture
async def test_data(project_service, features_step_project, owner):
    """Create a project on the prompts step with two generated features"""
    project = await features_step_project()
    features = await project_service.generate_features(owner, project.id, count=2)
    await project_service.complete_features_step(owner, project.id)
    return {'project': project, 'features': features}


@pytest.fixture
def prompt_service(db_session, ai_service):
    return PromptService(db_session, ai_service)


@pytest.mark.asyncio
async def test_project_prompt_lists_features(prompt_service, test_data, owner):
    project = test_data['project']

    prompt = await prompt_service.generate_prompt(owner, project.id)

    assert prompt.type == "project"
    assert prompt.feature_id is None
    assert prompt.content.startswith("Build Acme.")
    assert "User Authentication" in prompt.content
    assert project.prompts_generated is True


@pytest.mark.asyncio
async def test_feature_prompt_requires_promoted_feature(db_session, prompt_service, test_data, owner):
    """Test that only features already on the task board get a prompt"""
    project = test_data['project']
    feature = test_data['features'][0]

    with pytest.raises(ValidationError):
        await prompt_service.generate_prompt(owner, project.id, feature.id)

    await TaskService(db_session).add_feature_to_task(owner, project.id, feature.id)
    prompt = await prompt_service.generate_prompt(owner, project.id, feature.id)

    assert prompt.type == "feature"
    assert f'"{feature.title}"' in prompt.content
    assert [p.id for p in await prompt_service.list_feature_prompts(owner, feature.id)] == [prompt.id]


@pytest.mark.asyncio
async def test_prompts_need_the_prompts_step(prompt_service, features_step_project, owner):
    project = await features_step_project()

    with pytest.raises(ValidationError):
        await prompt_service.generate_prompt(owner, project.id)


@pytest.mark.asyncio
async def test_prompt_deletion_rights(prompt_service, test_data, owner, make_user, grant_role):
    project = test_data['project']
    viewer = await make_user("carol")
    await grant_role(project, viewer, "viewer")
    prompt = await prompt_service.generate_prompt(owner, project.id)

    assert [p.id for p in await prompt_service.list_project_prompts(viewer, project.id)] == [prompt.id]
    with pytest.raises(InsufficientPermissionsError):
        await prompt_service.delete_prompt(viewer, prompt.id)

    await prompt_service.delete_prompt(owner, prompt.id)
    assert await prompt_service.list_project_prompts(owner, project.id) == []
