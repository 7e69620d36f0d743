"""
Dashboard aggregation tests
"""
import pytest

from projectflow.schemas.feature import FeatureCreate
from projectflow.schemas.task import TaskCreate
from projectflow.services.dashboard_service import DashboardService
from projectflow.services.feature_service import FeatureService
from projectflow.services.task_service import TaskService


@pytest.fixture
async def test_data(db_session, project_service, owner, make_user, grant_role):
    """Create one owned project and one shared with the owner by someone else"""
    mine = await project_service.create_project(owner)
    await project_service.update_project_name(owner, mine.id, "Mine")

    dave = await make_user("dave")
    shared = await project_service.create_project(dave)
    await project_service.update_project_name(dave, shared.id, "Shared")
    shared.category = None
    await grant_role(shared, owner, "member")

    await FeatureService(db_session).create_features(owner, mine.id, [
        FeatureCreate(title="Login", priority="High", category="Security"),
        FeatureCreate(title="Search"),
    ])
    tasks = TaskService(db_session)
    await tasks.create_task(owner, mine.id, TaskCreate(title="A"))
    await tasks.create_task(owner, shared.id, TaskCreate(title="B", status="blocked"))

    return {'mine': mine, 'shared': shared, 'dave': dave}


@pytest.mark.asyncio
async def test_stats_cover_owned_and_shared_projects(db_session, test_data, owner):
    stats = await DashboardService(db_session).get_dashboard_stats(owner)

    assert stats["total_projects"] == 2
    assert stats["member_projects_count"] == 1
    assert stats["projects_by_status"]["draft"] == 2
    assert stats["tasks_by_status"] == {"todo": 1, "in_progress": 0, "completed": 0, "blocked": 1}
    assert stats["total_tasks"] == 2
    assert {p.name for p in stats["recent_projects"]} == {"Mine", "Shared"}


@pytest.mark.asyncio
async def test_stats_for_user_without_projects(db_session, test_data, make_user):
    stranger = await make_user("erin")

    stats = await DashboardService(db_session).get_dashboard_stats(stranger)

    assert stats["total_projects"] == 0
    assert stats["total_tasks"] == 0
    assert await DashboardService(db_session).get_recent_activities(stranger) == []


@pytest.mark.asyncio
async def test_category_stats_label_missing_category(db_session, test_data, owner):
    categories = await DashboardService(db_session).get_project_stats_by_category(owner)

    assert categories == {"Other": 1, "Uncategorized": 1}


@pytest.mark.asyncio
async def test_feature_stats_fill_every_bucket(db_session, test_data, owner):
    stats = await DashboardService(db_session).get_feature_stats(owner)

    assert stats["by_priority"] == {"Low": 0, "Medium": 1, "High": 1, "Critical": 0}
    assert stats["by_effort"]["Medium"] == 2
    assert stats["by_category"] == {"Core": 1, "Security": 1}

    # The shared project's owner does not see features of projects they cannot access
    dave_stats = await DashboardService(db_session).get_feature_stats(test_data['dave'])
    assert sum(dave_stats["by_priority"].values()) == 0


@pytest.mark.asyncio
async def test_recent_activity_is_newest_first(db_session, test_data, owner):
    activities = await DashboardService(db_session).get_recent_activities(owner, limit=20)

    assert {a["type"] for a in activities} == {"project_created", "task_created", "feature_created"}
    timestamps = [a["timestamp"] for a in activities]
    assert timestamps == sorted(timestamps, reverse=True)
    assert len(await DashboardService(db_session).get_recent_activities(owner, limit=2)) == 2
