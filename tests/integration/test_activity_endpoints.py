"""Integration tests for task, risk, comment and file endpoints."""
import pytest
from datetime import date, timedelta


async def create_project(app_client, **overrides):
    data = {
        "name": "Website Redesign",
        "client": "Acme Corp",
        "description": "New marketing site",
        "startDate": (date.today() - timedelta(days=10)).isoformat(),
        "endDate": (date.today() + timedelta(days=30)).isoformat(),
    }
    data.update(overrides)
    response = await app_client.post("/projects", json=data)
    return response.json()


@pytest.mark.asyncio
class TestTaskEndpoints:
    """Tests for task endpoints."""

    async def test_add_task(self, app_client):
        """Test adding a task resets progress to the completed share."""
        project = await create_project(app_client)

        response = await app_client.post(f"/projects/{project['id']}/tasks", json={"title": "Wireframes"})

        assert response.status_code == 201
        task = response.json()
        assert task["title"] == "Wireframes"
        assert task["completed"] is False
        assert "createdAt" in task

        stored = (await app_client.get(f"/projects/{project['id']}")).json()
        assert [t["id"] for t in stored["tasks"]] == [task["id"]]
        assert stored["progress"] == 0
        assert stored["history"][-1]["action"] == "Task added"

    async def test_add_task_blank_title(self, app_client):
        """Test that an empty title is rejected."""
        project = await create_project(app_client)

        response = await app_client.post(f"/projects/{project['id']}/tasks", json={"title": ""})

        assert response.status_code == 422

    async def test_add_task_unknown_project(self, app_client):
        """Test adding a task to an unknown project."""
        response = await app_client.post("/projects/nonexistent/tasks", json={"title": "X"})

        assert response.status_code == 404

    async def test_toggle_task_updates_progress(self, app_client):
        """Test toggling tasks recomputes progress both ways."""
        project = await create_project(app_client)
        pid = project["id"]
        tasks = [
            (await app_client.post(f"/projects/{pid}/tasks", json={"title": title})).json()
            for title in ("A", "B", "C")
        ]

        response = await app_client.post(f"/projects/{pid}/tasks/{tasks[0]['id']}/toggle")

        assert response.status_code == 200
        assert response.json()["completed"] is True
        assert (await app_client.get(f"/projects/{pid}")).json()["progress"] == 33

        await app_client.post(f"/projects/{pid}/tasks/{tasks[1]['id']}/toggle")
        assert (await app_client.get(f"/projects/{pid}")).json()["progress"] == 67

        await app_client.post(f"/projects/{pid}/tasks/{tasks[0]['id']}/toggle")
        stored = (await app_client.get(f"/projects/{pid}")).json()
        assert stored["progress"] == 33
        assert stored["history"][-1]["details"] == 'Task "A" reopened'

    async def test_toggle_unknown_task(self, app_client):
        """Test toggling an unknown task."""
        project = await create_project(app_client)

        response = await app_client.post(f"/projects/{project['id']}/tasks/nonexistent/toggle")

        assert response.status_code == 404
        assert response.json()["detail"] == "Task not found"

    async def test_update_task(self, app_client):
        """Test renaming and completing a task."""
        project = await create_project(app_client)
        pid = project["id"]
        task = (await app_client.post(f"/projects/{pid}/tasks", json={"title": "Draft"})).json()

        response = await app_client.patch(
            f"/projects/{pid}/tasks/{task['id']}",
            json={"title": "Final draft", "completed": True},
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Final draft"
        assert response.json()["completed"] is True
        assert (await app_client.get(f"/projects/{pid}")).json()["progress"] == 100


@pytest.mark.asyncio
class TestRiskEndpoints:
    """Tests for risk endpoints."""

    async def test_add_risk(self, app_client):
        """Test registering a risk with defaults."""
        project = await create_project(app_client)

        response = await app_client.post(
            f"/projects/{project['id']}/risks",
            json={"name": "Vendor delay", "impact": "high", "contingencyPlan": "Second vendor"},
        )

        assert response.status_code == 201
        risk = response.json()
        assert risk["name"] == "Vendor delay"
        assert risk["impact"] == "high"
        assert risk["probability"] == "medium"
        assert risk["status"] == "active"
        assert risk["contingencyPlan"] == "Second vendor"

    async def test_invalid_risk_level(self, app_client):
        """Test that unknown levels are rejected."""
        project = await create_project(app_client)

        response = await app_client.post(
            f"/projects/{project['id']}/risks",
            json={"name": "Vendor delay", "impact": "catastrophic"},
        )

        assert response.status_code == 422

    async def test_update_risk_status(self, app_client):
        """Test moving a risk to mitigated."""
        project = await create_project(app_client)
        pid = project["id"]
        risk = (await app_client.post(f"/projects/{pid}/risks", json={"name": "Scope creep"})).json()

        response = await app_client.patch(f"/projects/{pid}/risks/{risk['id']}", json={"status": "mitigated"})

        assert response.status_code == 200
        assert response.json()["status"] == "mitigated"
        assert response.json()["name"] == "Scope creep"
        stored = (await app_client.get(f"/projects/{pid}")).json()
        assert stored["risks"][0]["status"] == "mitigated"
        assert stored["history"][-1]["action"] == "Risk updated"

    async def test_update_unknown_risk(self, app_client):
        """Test updating an unknown risk."""
        project = await create_project(app_client)

        response = await app_client.patch(
            f"/projects/{project['id']}/risks/nonexistent",
            json={"status": "closed"},
        )

        assert response.status_code == 404


@pytest.mark.asyncio
class TestCommentAndFileEndpoints:
    """Tests for comment and file endpoints."""

    async def test_add_comment(self, app_client):
        """Test appending a comment."""
        project = await create_project(app_client)

        response = await app_client.post(
            f"/projects/{project['id']}/comments",
            json={"text": "Kickoff done", "author": "Ana"},
        )

        assert response.status_code == 201
        assert response.json()["author"] == "Ana"
        stored = (await app_client.get(f"/projects/{project['id']}")).json()
        assert [c["text"] for c in stored["comments"]] == ["Kickoff done"]
        assert stored["history"][-1]["details"] == "New comment by Ana"

    async def test_blank_comment_rejected(self, app_client):
        """Test that whitespace-only text is rejected without changes."""
        project = await create_project(app_client)

        response = await app_client.post(f"/projects/{project['id']}/comments", json={"text": "   "})

        assert response.status_code == 400
        stored = (await app_client.get(f"/projects/{project['id']}")).json()
        assert stored["comments"] == []
        assert len(stored["history"]) == 1

    async def test_comment_unknown_project(self, app_client):
        """Test commenting on an unknown project."""
        response = await app_client.post("/projects/nonexistent/comments", json={"text": "Hi"})

        assert response.status_code == 404

    async def test_add_file(self, app_client):
        """Test attaching file metadata."""
        project = await create_project(app_client)

        response = await app_client.post(
            f"/projects/{project['id']}/files",
            json={"name": "brief.pdf", "type": "application/pdf", "size": 2048},
        )

        assert response.status_code == 201
        assert response.json()["name"] == "brief.pdf"
        assert "uploadedAt" in response.json()
        stored = (await app_client.get(f"/projects/{project['id']}")).json()
        assert stored["files"][0]["size"] == 2048
        assert stored["history"][-1]["details"] == 'File "brief.pdf" attached'

    async def test_add_file_negative_size(self, app_client):
        """Test that a negative size is rejected."""
        project = await create_project(app_client)

        response = await app_client.post(
            f"/projects/{project['id']}/files",
            json={"name": "brief.pdf", "size": -1},
        )

        assert response.status_code == 422
