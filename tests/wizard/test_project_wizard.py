"""
Project creation wizard tests
"""
import uuid

import pytest
from sqlalchemy import select, func

from projectflow.core.exceptions import (
    AIResponseError, InsufficientPermissionsError, ResourceNotFoundError, ValidationError
)
from projectflow.models import ChatMessage, Feature, Project, ProjectAnswer, ProjectQuestion, Task
from projectflow.schemas.project import ProjectUpdate
from projectflow.schemas.question import AnswerInput
from projectflow.services.project_service import ProjectService
from projectflow.services.task_service import TaskService


@pytest.mark.asyncio
async def test_round_trip_from_new_project_to_removed_task(db_session, project_service, owner):
    """Test the full path: wizard steps, feature generation, promotion, move and removal"""
    # Name and description
    project = await project_service.create_project(owner)
    assert project.status == "draft"
    assert project.current_step == 1

    project = await project_service.update_project_name(owner, project.id, "Acme")
    project = await project_service.update_project_description(owner, project.id, "A widget")
    assert project.questions_generated is True

    questions = await project_service.questions.list_questions(owner, project.id)
    assert len(questions) == 5

    # Answer every required question and advance
    answers = [AnswerInput(question_id=q.id, answer="Small teams") for q in questions if q.is_required]
    project = await project_service.save_question_answers(owner, project.id, answers)
    assert project.questions_answered is True
    assert project.current_step == 4

    features = await project_service.generate_features(owner, project.id, count=2)
    assert len(features) == 2
    feature_a = features[0]

    # Promote feature A
    tasks = TaskService(db_session)
    task = await tasks.add_feature_to_task(owner, project.id, feature_a.id)
    assert task.status == "todo"
    assert task.position == 1
    assert task.title == feature_a.title
    assert feature_a.added_to_task is True

    # Completing the task leaves the feature alone
    await tasks.move_task(owner, task.id, "completed", 0)
    assert task.status == "completed"
    assert feature_a.added_to_task is True

    removed = await tasks.remove_feature_from_task(owner, feature_a.id)
    assert removed == 1
    assert feature_a.added_to_task is False
    assert await db_session.get(Task, task.id) is None


@pytest.mark.asyncio
async def test_steps_cannot_be_skipped(project_service, owner):
    """Test that a step is rejected until the step before it has been completed"""
    project = await project_service.create_project(owner)

    with pytest.raises(ValidationError) as exc_info:
        await project_service.update_project_description(owner, project.id, "A widget")
    assert "name step" in exc_info.value.message

    with pytest.raises(ValidationError):
        await project_service.generate_summary(owner, project.id)

    assert project.last_edited_step == 1
    assert project.questions_generated is False


@pytest.mark.asyncio
async def test_blank_name_is_rejected(project_service, owner):
    project = await project_service.create_project(owner)

    with pytest.raises(ValidationError):
        await project_service.update_project_name(owner, project.id, "   ")

    assert project.name == ""
    assert project.current_step == 1


@pytest.mark.asyncio
async def test_only_owner_can_drive_the_wizard(project_service, owner, make_user, grant_role):
    """Test that even an admin collaborator cannot edit wizard steps"""
    project = await project_service.create_project(owner)
    admin = await make_user("alice")
    await grant_role(project, admin, "admin")

    with pytest.raises(InsufficientPermissionsError):
        await project_service.update_project_name(admin, project.id, "Hijacked")

    # Collaborators can still read it
    assert (await project_service.get_project(admin, project.id)).id == project.id


@pytest.mark.asyncio
async def test_outsider_cannot_read_project(project_service, owner, make_user):
    project = await project_service.create_project(owner)
    outsider = await make_user("mallory")

    with pytest.raises(InsufficientPermissionsError):
        await project_service.get_project(outsider, project.id)

    with pytest.raises(ResourceNotFoundError):
        await project_service.get_project(owner, uuid.uuid4())


@pytest.mark.asyncio
async def test_description_stores_tech_stack(project_service, owner):
    project = await project_service.create_project(owner)
    await project_service.update_project_name(owner, project.id, "Acme")

    project = await project_service.update_project_description(
        owner, project.id, "  A widget  ", tech_stack="FastAPI"
    )

    assert project.description == "A widget"
    assert project.tech_stack == {"name": "FastAPI"}
    assert project.current_step == 3
    assert project.last_edited_step == 3


@pytest.mark.asyncio
async def test_required_answers_must_be_present(project_service, owner):
    """Test that saving answers fails when a required question is left blank"""
    project = await project_service.create_project(owner)
    await project_service.update_project_name(owner, project.id, "Acme")
    await project_service.update_project_description(owner, project.id, "A widget")
    questions = await project_service.questions.list_questions(owner, project.id)

    partial = [AnswerInput(question_id=questions[0].id, answer="Developers")]
    with pytest.raises(ValidationError) as exc_info:
        await project_service.save_question_answers(owner, project.id, partial)

    assert len(exc_info.value.details["missing_question_ids"]) == len(questions) - 1
    assert project.questions_answered is False


@pytest.mark.asyncio
async def test_draft_answers_count_towards_required(project_service, owner):
    """Test that answers saved earlier as a draft satisfy the required check"""
    project = await project_service.create_project(owner)
    await project_service.update_project_name(owner, project.id, "Acme")
    await project_service.update_project_description(owner, project.id, "A widget")
    questions = await project_service.questions.list_questions(owner, project.id)

    draft = [AnswerInput(question_id=q.id, answer="Draft") for q in questions[1:]]
    await project_service.questions.upsert_answers(owner, project.id, draft)

    project = await project_service.save_question_answers(
        owner, project.id, [AnswerInput(question_id=questions[0].id, answer="Final")]
    )
    assert project.questions_answered is True


@pytest.mark.asyncio
async def test_features_need_the_features_step(project_service, owner):
    project = await project_service.create_project(owner)
    await project_service.update_project_name(owner, project.id, "Acme")

    with pytest.raises(ValidationError):
        await project_service.generate_features(owner, project.id, count=1)


@pytest.mark.asyncio
async def test_generated_features_skip_existing_titles(project_service, features_step_project, owner):
    """Test that a second generation does not repeat features the project already has"""
    project = await features_step_project()

    first = await project_service.generate_features(owner, project.id, count=1)
    second = await project_service.generate_features(owner, project.id, count=1)

    assert first[0].title != second[0].title
    assert project.current_step == 4


@pytest.mark.asyncio
async def test_summary_activates_project(project_service, features_step_project, owner):
    """Test that the summary step fills the summary and moves the project to active"""
    project = await features_step_project()
    await project_service.generate_features(owner, project.id, count=2)
    await project_service.complete_features_step(owner, project.id)
    await project_service.generate_prompt(owner, project.id)
    project = await project_service.complete_prompts_step(owner, project.id)
    assert project.prompts_generated is True
    assert project.current_step == 6

    project = await project_service.generate_summary(owner, project.id)

    assert project.status == "active"
    assert project.current_step == 6
    assert project.last_edited_step == 6
    assert project.summary.startswith("Project Acme aims to A widget.")
    assert "User Authentication" in project.summary
    assert sorted(project.summary_details["featuresBreakdown"]["phase1"]) == [
        "Project Dashboard", "User Authentication"
    ]


@pytest.mark.asyncio
async def test_step_navigation(project_service, features_step_project, owner):
    """Test moving back and jumping to steps already reached"""
    project = await features_step_project()

    project = await project_service.set_current_step(owner, project.id, 2)
    assert project.current_step == 2
    assert project.last_edited_step == 4

    with pytest.raises(ValidationError):
        await project_service.set_current_step(owner, project.id, 5)
    with pytest.raises(ValidationError):
        await project_service.set_current_step(owner, project.id, 0)

    project = await project_service.go_to_previous_step(owner, project.id)
    project = await project_service.go_to_previous_step(owner, project.id)
    assert project.current_step == 1


@pytest.mark.asyncio
async def test_update_project_rejects_blank_name(project_service, owner):
    project = await project_service.create_project(owner)

    updated = await project_service.update_project(owner, project.id, ProjectUpdate(category="Mobile"))
    assert updated.category == "Mobile"

    with pytest.raises(ValidationError):
        await project_service.update_project(owner, project.id, ProjectUpdate(name=""))


@pytest.mark.asyncio
async def test_archive_keeps_data(project_service, features_step_project, owner, db_session):
    project = await features_step_project()
    await project_service.generate_features(owner, project.id, count=1)

    project = await project_service.archive_project(owner, project.id)

    assert project.status == "archived"
    count = await db_session.execute(select(func.count(Feature.id)).where(Feature.project_id == project.id))
    assert count.scalar() == 1
    assert await project_service.list_user_projects(owner, ["archived"]) == [project]
    assert await project_service.list_user_projects(owner, ["draft"]) == []


@pytest.mark.asyncio
async def test_delete_removes_everything_owned_by_project(
    db_session, project_service, features_step_project, owner
):
    """Test that deleting a project leaves no questions, answers, features, tasks or messages behind"""
    project = await features_step_project()
    features = await project_service.generate_features(owner, project.id, count=1)
    await TaskService(db_session).add_feature_to_task(owner, project.id, features[0].id)
    db_session.add(ChatMessage(project_id=project.id, user_id=owner.user_id, content="hello"))
    await db_session.commit()
    project_id = project.id

    await project_service.delete_project(owner, project_id)

    for model in (ProjectQuestion, ProjectAnswer, Feature, Task, ChatMessage):
        count = await db_session.execute(select(func.count()).select_from(model).where(model.project_id == project_id))
        assert count.scalar() == 0
    with pytest.raises(ResourceNotFoundError):
        await project_service.get_project(owner, project_id)


@pytest.mark.asyncio
async def test_unknown_status_filter_is_rejected(project_service, owner):
    with pytest.raises(ValidationError):
        await project_service.list_user_projects(owner, ["paused"])


@pytest.mark.asyncio
async def test_shared_projects_exclude_owned(project_service, owner, make_user, grant_role):
    project = await project_service.create_project(owner)
    alice = await make_user("alice")
    await grant_role(project, alice, "viewer")

    assert [p.id for p in await project_service.list_shared_projects(alice)] == [project.id]
    assert await project_service.list_shared_projects(owner) == []
    assert await project_service.list_user_projects(alice) == []


@pytest.mark.asyncio
async def test_renaming_later_keeps_reached_steps(project_service, features_step_project, owner):
    """Test that going back to rename a project does not lock the steps already reached"""
    project = await features_step_project()

    project = await project_service.update_project_name(owner, project.id, "Acme Pro")

    assert project.name == "Acme Pro"
    assert project.current_step == 2
    assert project.last_edited_step == 4
    project = await project_service.set_current_step(owner, project.id, 4)
    assert project.current_step == 4


@pytest.mark.asyncio
async def test_renaming_active_project_keeps_summary_reachable(project_service, features_step_project, owner):
    project = await features_step_project()
    await project_service.complete_features_step(owner, project.id)
    await project_service.complete_prompts_step(owner, project.id)
    await project_service.generate_summary(owner, project.id)

    project = await project_service.update_project_name(owner, project.id, "Renamed")
    project = await project_service.set_current_step(owner, project.id, 6)

    assert project.status == "active"
    assert project.last_edited_step == 6
    assert project.current_step == 6


async def _wizard_state(session_factory, project_id):
    """Reload the project and its generated rows from a fresh session"""
    async with session_factory() as session:
        project = await session.get(Project, project_id)
        questions = await session.execute(
            select(func.count()).select_from(ProjectQuestion).where(ProjectQuestion.project_id == project_id)
        )
        features = await session.execute(
            select(func.count()).select_from(Feature).where(Feature.project_id == project_id)
        )
        return project, questions.scalar(), features.scalar()


@pytest.mark.asyncio
async def test_malformed_questions_reply_saves_nothing(db_session, session_factory, owner, ai_with):
    """Test that a bad AI reply during the description step leaves the wizard where it was"""
    service = ProjectService(db_session, ai_with("not json"))
    project = await service.create_project(owner)
    await service.update_project_name(owner, project.id, "Acme")

    with pytest.raises(AIResponseError):
        await service.update_project_description(owner, project.id, "A widget")
    project_id = project.id
    await db_session.rollback()

    stored, questions, features = await _wizard_state(session_factory, project_id)
    assert stored.current_step == 2
    assert stored.last_edited_step == 2
    assert stored.description == ""
    assert stored.questions_generated is False
    assert questions == 0


@pytest.mark.asyncio
async def test_malformed_features_reply_saves_nothing(
    db_session, session_factory, features_step_project, owner, ai_with
):
    project = await features_step_project()
    service = ProjectService(db_session, ai_with("not json"))

    with pytest.raises(AIResponseError):
        await service.generate_features(owner, project.id, count=2)
    project_id = project.id
    await db_session.rollback()

    stored, questions, features = await _wizard_state(session_factory, project_id)
    assert stored.current_step == 4
    assert stored.last_edited_step == 4
    assert questions == 5
    assert features == 0


@pytest.mark.asyncio
async def test_malformed_summary_reply_keeps_project_draft(
    db_session, session_factory, project_service, features_step_project, owner, ai_with
):
    """Test that a failed summary neither activates the project nor stores a summary"""
    project = await features_step_project()
    await project_service.complete_features_step(owner, project.id)
    await project_service.complete_prompts_step(owner, project.id)
    service = ProjectService(db_session, ai_with("not json"))

    with pytest.raises(AIResponseError):
        await service.generate_summary(owner, project.id)
    project_id = project.id
    await db_session.rollback()

    stored, _, features = await _wizard_state(session_factory, project_id)
    assert stored.status == "draft"
    assert stored.summary is None
    assert stored.current_step == 6
    assert stored.last_edited_step == 6
    assert features == 0
