"""Integration tests for analytics, currency and export endpoints."""
import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock, patch

from agile_canvas.services.currency_service import CurrencyService


async def create_project(app_client, **overrides):
    data = {
        "name": "Website Redesign",
        "client": "Acme Corp",
        "description": "New marketing site",
        "startDate": (date.today() - timedelta(days=30)).isoformat(),
        "endDate": (date.today() + timedelta(days=30)).isoformat(),
    }
    data.update(overrides)
    response = await app_client.post("/projects", json=data)
    return response.json()


def days_ago(days):
    return (date.today() - timedelta(days=days)).isoformat()


@pytest.mark.asyncio
class TestAnalyticsEndpoints:
    """Tests for analytics endpoints."""

    async def test_stats(self, app_client):
        """Test headline counters."""
        await create_project(app_client, name="Open", initialValue=1000)
        await create_project(app_client, name="Late", endDate=days_ago(3))
        await create_project(app_client, name="Done", status="completed", finalValue=500)

        response = await app_client.get("/analytics/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["active"] == 2
        assert data["completed"] == 1
        assert data["overdue"] == 1
        assert data["totalValue"] == 1500
        assert data["completedValue"] == 500

    async def test_dashboard(self, app_client):
        """Test dashboard lists."""
        await create_project(app_client, name="Fresh", startDate=days_ago(1))
        await create_project(app_client, name="Due soon", endDate=(date.today() + timedelta(days=3)).isoformat())
        await create_project(app_client, name="Late", endDate=days_ago(1))

        data = (await app_client.get("/analytics/dashboard")).json()

        assert [p["name"] for p in data["recentProjects"]] == ["Fresh"]
        assert [p["name"] for p in data["upcomingDeadlines"]] == ["Due soon"]
        assert [p["name"] for p in data["overdueProjects"]] == ["Late"]
        assert data["deliveryRate"] == 100
        assert data["completionRate"] == 0
        assert data["riskLevel"] == "high"  # 1 of 3 overdue

    async def test_breakdown(self, app_client):
        """Test tag and team distribution."""
        await create_project(app_client, tags=["web"], team=["Ana"])
        await create_project(app_client, tags=["web", "api"], team=["Ana", "Bruno"], endDate=days_ago(4))

        data = (await app_client.get("/analytics/breakdown")).json()

        assert data["tagStats"] == {"web": 2, "api": 1}
        assert data["teamStats"] == {"Ana": 2, "Bruno": 1}
        assert data["overdueDetails"][0]["daysOverdue"] == 4
        assert len(data["poorPerformance"]) == 2

    async def test_financial_in_usd(self, app_client):
        """Test totals converted into the requested currency."""
        await create_project(app_client, initialValue=1100, finalValue=2200, currency="BRL")

        data = (await app_client.get("/analytics/financial", params={"currency": "USD"})).json()

        assert data["currency"] == "USD"
        assert data["totalInitial"] == pytest.approx(200)
        assert data["totalFinal"] == pytest.approx(400)
        assert data["variationPercent"] == 100

    async def test_overdue_alert_cooldown(self, app_client):
        """Test the alert fires once, then waits for the cooldown."""
        await create_project(app_client, endDate=days_ago(2))

        first = (await app_client.get("/analytics/overdue-alert")).json()
        second = (await app_client.get("/analytics/overdue-alert")).json()
        dismissed = await app_client.post("/analytics/overdue-alert/dismiss")

        assert first == {"shouldShow": True, "overdueCount": 1}
        assert second == {"shouldShow": False, "overdueCount": 1}
        assert dismissed.json() == {"dismissed": True}


@pytest.mark.asyncio
class TestCurrencyEndpoints:
    """Tests for currency endpoints."""

    async def test_rates(self, app_client):
        """Test the fallback rate table."""
        data = (await app_client.get("/currency/rates")).json()

        assert data["base"] == "BRL"
        assert data["rates"] == {"BRL": 1.0, "USD": 5.5, "EUR": 6.2}
        assert data["updatedAt"] is None

    async def test_convert(self, app_client):
        """Test converting and formatting an amount."""
        response = await app_client.get(
            "/currency/convert",
            params={"amount": 100, "from": "USD", "to": "BRL"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == pytest.approx(550)
        assert data["currency"] == "BRL"
        assert data["formatted"] == "R$ 550,00"

    async def test_convert_unknown_currency(self, app_client):
        """Test that unsupported currencies are rejected."""
        response = await app_client.get(
            "/currency/convert",
            params={"amount": 1, "from": "GBP", "to": "BRL"},
        )

        assert response.status_code == 422

    async def test_refresh(self, app_client):
        """Test the refresh endpoint reports the outcome."""
        with patch.object(CurrencyService, "refresh_rates", AsyncMock(return_value=False)):
            response = await app_client.post("/currency/refresh")

        assert response.status_code == 200
        assert response.json() == {"updated": False}


@pytest.mark.asyncio
class TestExportEndpoints:
    """Tests for the PDF export endpoint."""

    async def test_export_single_project(self, app_client):
        """Test exporting one project as a PDF download."""
        project = await create_project(app_client, name="Site v2")
        await app_client.post(f"/projects/{project['id']}/tasks", json={"title": "Wireframes"})

        response = await app_client.post(
            "/export/pdf",
            json={"projectIds": [project["id"]], "currency": "EUR"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="project-Site-v2.pdf"' in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    async def test_export_skips_unknown_ids(self, app_client):
        """Test that unknown ids are ignored."""
        project = await create_project(app_client)

        response = await app_client.post(
            "/export/pdf",
            json={"projectIds": [project["id"], "nonexistent"]},
        )

        assert response.status_code == 200

    async def test_export_nothing_selected(self, app_client):
        """Test that an empty selection is a client error."""
        response = await app_client.post("/export/pdf", json={"projectIds": []})

        assert response.status_code == 400
        assert response.json()["detail"] == "No projects selected for export"
