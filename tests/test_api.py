"""Tests for the HTTP API."""

import io

import openpyxl
import pytest

from conftest import PNG_BYTES

DESCRIPTION = "Uma descrição longa o bastante"


def create_page(client, headers, **overrides):
    payload = {"title": "Evento", "description": DESCRIPTION, "slug": "evento"}
    payload.update(overrides)
    response = client.post("/dashboard/landing-pages", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def publish(client, headers, page_id):
    response = client.post(f"/dashboard/landing-pages/{page_id}/publish", headers=headers)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def published(client, auth_headers):
    page = create_page(client, auth_headers)
    return publish(client, auth_headers, page["id"])


@pytest.fixture
def api_key(client, auth_headers):
    response = client.post("/dashboard/settings/api-key", headers=auth_headers)
    assert response.status_code == 200
    return response.json()["integration_api_key"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        assert client.get("/ready").json() == {"status": "ready"}


class TestAuth:
    def test_register_login_me_signout(self, client):
        response = client.post("/auth/register", json={"email": "new@example.com", "password": "secret123"})
        assert response.status_code == 201
        assert response.json()["name"] == "new"

        response = client.post("/auth/login", json={"email": "new@example.com", "password": "secret123"})
        token = response.json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}
        assert client.get("/auth/me", headers=headers).json()["email"] == "new@example.com"

        assert client.post("/auth/signout", headers=headers).json() == {"success": True}
        assert client.get("/auth/me", headers=headers).status_code == 401

    def test_register_validation_error(self, client):
        response = client.post("/auth/register", json={"email": "bad", "password": "secret123"})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "validation_error"

    def test_wrong_password(self, client, user):
        response = client.post("/auth/login", json={"email": "owner@example.com", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "auth_error"

    def test_dashboard_requires_session(self, client):
        assert client.get("/dashboard/landing-pages").status_code == 401
        response = client.get("/dashboard/landing-pages", headers={"Authorization": "Bearer bogus"})
        assert response.status_code == 401


class TestLandingPageRoutes:
    def test_crud(self, client, auth_headers):
        page = create_page(client, auth_headers)
        assert page["public_path"] == "/evento"
        assert page["published"] is False

        listed = client.get("/dashboard/landing-pages", headers=auth_headers).json()
        assert [p["id"] for p in listed] == [page["id"]]
        assert listed[0]["lead_count"] == 0

        response = client.patch(f"/dashboard/landing-pages/{page['id']}",
                                 json={"title": "Evento Novo"}, headers=auth_headers)
        assert response.json()["title"] == "Evento Novo"

        response = client.delete(f"/dashboard/landing-pages/{page['id']}", headers=auth_headers)
        assert response.json() == {"success": True}
        response = client.get(f"/dashboard/landing-pages/{page['id']}", headers=auth_headers)
        assert response.status_code == 404

    def test_validation_error(self, client, auth_headers):
        response = client.post("/dashboard/landing-pages",
                               json={"title": "AB", "description": DESCRIPTION}, headers=auth_headers)
        assert response.status_code == 400
        body = response.json()["detail"]
        assert body["success"] is False
        assert "Title" in body["detail"]

    @pytest.mark.parametrize("widget", [
        {"type": "image", "config": {"borderRadius": "8px", "opacity": "50%"}},
        {"type": "text", "position": [1, 2]},
    ])
    def test_unusable_widget_is_rejected(self, client, auth_headers, widget):
        response = client.post("/dashboard/landing-pages", json={
            "title": "Evento", "description": DESCRIPTION, "widgets": [widget],
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "validation_error"

    def test_other_users_pages_are_hidden(self, client, auth_headers, other_user):
        page = create_page(client, auth_headers)
        login = client.post("/auth/login", json={"email": "other@example.com", "password": "secret123"})
        other_headers = {"Authorization": f"Bearer {login.json()['access_token']}"}
        response = client.get(f"/dashboard/landing-pages/{page['id']}", headers=other_headers)
        assert response.status_code == 404

    def test_duplicate_and_preview(self, client, auth_headers):
        page = create_page(client, auth_headers)
        response = client.post(f"/dashboard/landing-pages/{page['id']}/duplicate", headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["slug"] == "evento-copy"

        response = client.get(f"/dashboard/landing-pages/{page['id']}/preview", headers=auth_headers)
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]

    def test_image_upload_and_public_file(self, client, auth_headers):
        page = create_page(client, auth_headers)
        response = client.post(
            f"/dashboard/landing-pages/{page['id']}/images/logo",
            files={"file": ("logo.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 200
        url = response.json()["images"]["logo"]
        path = url.replace("http://testserver", "")

        response = client.get(path)
        assert response.status_code == 200
        assert response.content == PNG_BYTES
        assert response.headers["content-type"] == "image/png"

    def test_bad_image_kind(self, client, auth_headers):
        page = create_page(client, auth_headers)
        response = client.post(
            f"/dashboard/landing-pages/{page['id']}/images/banner",
            files={"file": ("logo.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_create_from_template(self, client, auth_headers):
        response = client.post("/dashboard/templates", json={
            "title": "Tema", "description": "Escuro", "form_position": "center",
        }, headers=auth_headers)
        assert response.status_code == 201
        template = response.json()

        response = client.post(f"/dashboard/templates/{template['id']}/use", json={
            "title": "Do Tema", "description": DESCRIPTION,
        }, headers=auth_headers)
        assert response.status_code == 201
        page = response.json()
        assert page["template_id"] == template["id"]
        assert page["content"]["formPosition"] == "center"

    def test_template_with_bad_style_is_rejected(self, client, auth_headers):
        response = client.post("/dashboard/templates", json={
            "title": "Tema", "description": "Escuro", "colors": {"primary": "blue"},
        }, headers=auth_headers)
        assert response.status_code == 400

        response = client.post("/dashboard/templates", json={
            "title": "Tema", "description": "Escuro", "widgets": [{"type": "text", "size": [1]}],
        }, headers=auth_headers)
        assert response.status_code == 400


class TestThankYouRoutes:
    def test_linked_thank_you_page(self, client, auth_headers):
        page = create_page(client, auth_headers)
        response = client.post("/dashboard/thank-you-pages", json={
            "title": "Obrigado", "message": "Recebemos!", "published": True,
            "landing_page_id": page["id"],
        }, headers=auth_headers)
        assert response.status_code == 201
        thank_you = response.json()

        page = client.get(f"/dashboard/landing-pages/{page['id']}", headers=auth_headers).json()
        assert page["thank_you_page_id"] == thank_you["id"]

        response = client.get("/obrigado")
        assert response.status_code == 200
        assert "Recebemos!" in response.text


class TestPublicRoutes:
    def test_published_page_is_served(self, client, published):
        response = client.get("/evento")
        assert response.status_code == 200
        assert "lead-capture-form" in response.text

    def test_unpublished_or_unknown_page(self, client, auth_headers):
        create_page(client, auth_headers, slug="rascunho")
        assert client.get("/rascunho").status_code == 404
        response = client.get("/nao-existe")
        assert response.status_code == 404
        assert "Página não encontrada" in response.text

    def test_submit_json(self, client, published, auth_headers):
        response = client.post("/evento/submit", json={"name": "Ana", "email": "ana@example.com"})
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["redirect_url"] is None

        leads = client.get("/dashboard/leads", headers=auth_headers).json()
        assert leads["total"] == 1
        assert leads["leads"][0]["data"]["name"] == "Ana"

    def test_submit_validation_error(self, client, published):
        response = client.post("/evento/submit", json={"name": "Ana"})
        assert response.status_code == 400

    def test_submit_to_unpublished_page(self, client, auth_headers):
        create_page(client, auth_headers, slug="rascunho")
        response = client.post("/rascunho/submit", json={"name": "Ana", "email": "ana@example.com"})
        assert response.status_code == 404

    def test_form_post_redirects_to_thank_you_page(self, client, auth_headers, published):
        client.post("/dashboard/thank-you-pages", json={
            "title": "Obrigado", "message": "Valeu", "published": True,
            "landing_page_id": published["id"],
        }, headers=auth_headers)

        response = client.post("/evento/submit", data={"name": "Ana", "email": "ana@example.com"},
                               follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/obrigado"

        response = client.post("/evento/submit", json={"name": "Bia", "email": "bia@example.com"})
        assert response.json()["redirect_url"] == "/obrigado"

    def test_submit_sends_notification(self, client, auth_headers, published, email_session):
        client.put("/dashboard/settings", json={"admin_email": "admin@example.com"}, headers=auth_headers)
        client.post("/evento/submit", json={"name": "Ana", "email": "ana@example.com"})
        assert len(email_session.calls) == 1
        assert email_session.calls[0]["json"]["to"] == ["admin@example.com"]

    def test_tracking(self, client, published, auth_headers):
        view = {"landing_page_id": published["id"], "session_id": "visit-1", "referrer": "https://google.com"}
        assert client.post("/api/track/view", json=view).json() == {"success": True}
        assert client.post("/api/track/duration",
                           json={"session_id": "visit-1", "duration_seconds": 12}).json() == {"success": True}
        event = {"landing_page_id": published["id"], "session_id": "visit-1", "event_type": "scroll_50_percent"}
        assert client.post("/api/track/event", json=event).json() == {"success": True}

        metrics = client.get("/dashboard/analytics?days=7", headers=auth_headers).json()["metrics"][0]
        assert metrics["total_visitors"] == 1
        assert metrics["visitors_from_google"] == 1
        assert metrics["avg_duration_seconds"] == 12.0

    def test_tracking_rejects_bad_session(self, client, published):
        view = {"landing_page_id": published["id"], "session_id": "not valid!"}
        assert client.post("/api/track/view", json=view).status_code == 400

    def test_unknown_upload(self, client):
        assert client.get("/storage/v1/object/public/landing-pages/logos/none.png").status_code == 404
        assert client.get("/storage/v1/object/public/private/x.png").status_code == 404


class TestIntegrationApi:
    def test_missing_and_wrong_key(self, client, api_key):
        response = client.get("/api/leads")
        assert response.status_code == 401
        assert response.json() == {"error": "API key não fornecida"}

        response = client.get("/api/leads", headers={"x-api-key": "sk_wrong"})
        assert response.status_code == 401
        assert response.json() == {"error": "API key inválida"}

    def test_list_leads_with_pagination(self, client, api_key, published):
        for i in range(3):
            client.post("/evento/submit", json={"name": f"Lead {i}", "email": f"l{i}@example.com"})

        response = client.get("/api/leads?limit=2", headers={"x-api-key": api_key})
        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 1, "total_pages": 2, "total_items": 3}

        response = client.get(f"/api/leads?page=2&limit=2&landing_page_id={published['id']}",
                              headers={"x-api-key": api_key})
        assert len(response.json()["data"]) == 1

    @pytest.mark.parametrize("query,field", [
        ("page=0", "page"),
        ("limit=500", "limit"),
        ("limit=abc", "limit"),
        ("landing_page_id=123", "landing_page_id"),
        ("start_date=2024-1-1x", "start_date"),
    ])
    def test_invalid_parameters(self, client, api_key, query, field):
        response = client.get(f"/api/leads?{query}", headers={"x-api-key": api_key})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Parâmetros inválidos"
        assert field in body["details"]

    def test_get_lead(self, client, api_key, published):
        lead_id = client.post("/evento/submit", json={"name": "Ana", "email": "ana@example.com"}).json()["lead_id"]
        response = client.get(f"/api/leads/{lead_id}", headers={"x-api-key": api_key})
        body = response.json()
        assert body["id"] == lead_id
        assert body["data"]["name"] == "Ana"
        assert body["landing_page"]["slug"] == "evento"

        response = client.get("/api/leads/missing", headers={"x-api-key": api_key})
        assert response.status_code == 404
        assert response.json() == {"error": "Lead não encontrado"}


class TestNotificationRoutes:
    LEAD = {"data": {"name": "Ana"}, "created_at": "2024-05-04T13:07:09+00:00"}

    def test_requires_credentials(self, client):
        response = client.post("/api/notifications/email", json={"to": "a@b.com", "lead": self.LEAD})
        assert response.status_code == 401

    def test_send_email(self, client, api_key, email_session):
        response = client.post("/api/notifications/email",
                               json={"to": "a@b.com", "lead": self.LEAD},
                               headers={"x-api-key": api_key})
        assert response.json() == {"success": True}
        assert email_session.calls[0]["json"]["subject"] == "Novo Lead Capturado!"

    def test_email_failure(self, client, auth_headers, email_session):
        email_session.status_codes = [500, 500, 500]
        response = client.post("/api/notifications/email",
                               json={"to": "a@b.com", "lead": self.LEAD},
                               headers=auth_headers)
        assert response.status_code == 500
        assert response.json() == {"error": "Erro ao enviar email"}

    def test_send_whatsapp(self, client, auth_headers):
        response = client.post("/api/notifications/whatsapp",
                               json={"to": "+5511999999999", "message": "Oi", "lead": self.LEAD},
                               headers=auth_headers)
        assert response.json() == {"success": True}


class TestDashboardLeadsAndAnalytics:
    def test_leads_search_export_delete(self, client, auth_headers, published):
        client.post("/evento/submit", json={"name": "Ana", "email": "ana@example.com"})
        client.post("/evento/submit", json={"name": "Bia", "email": "bia@example.com"})

        found = client.get("/dashboard/leads?search=bia", headers=auth_headers).json()
        assert found["total"] == 1

        response = client.get("/dashboard/leads/export?format=xlsx", headers=auth_headers)
        assert response.status_code == 200
        assert "leads-" in response.headers["content-disposition"]
        ws = openpyxl.load_workbook(io.BytesIO(response.content))["Leads"]
        assert ws.max_row == 3

        response = client.get("/dashboard/leads/export?format=csv", headers=auth_headers)
        assert response.text.splitlines()[0].startswith("ID,Data de Criação,Landing Page,Slug")

        lead_id = found["leads"][0]["id"]
        assert client.delete(f"/dashboard/leads/{lead_id}", headers=auth_headers).json() == {"success": True}
        assert client.get(f"/dashboard/leads/{lead_id}", headers=auth_headers).status_code == 404

    def test_summary(self, client, auth_headers, published):
        client.post("/evento/submit", json={"name": "Ana", "email": "ana@example.com"})
        summary = client.get("/dashboard/summary", headers=auth_headers).json()
        assert summary["total_pages"] == 1
        assert summary["published_pages"] == 1
        assert summary["total_leads"] == 1

    def test_analytics_validation_and_export(self, client, auth_headers, published):
        assert client.get("/dashboard/analytics?days=0", headers=auth_headers).status_code == 400

        response = client.get(f"/dashboard/analytics/daily?landing_page_id={published['id']}&days=7",
                              headers=auth_headers)
        assert len(response.json()["daily"]) == 7

        response = client.get("/dashboard/analytics/export?days=7", headers=auth_headers)
        assert response.status_code == 200
        assert response.text.startswith("Métrica,Valor")
        assert "analytics_" in response.headers["content-disposition"]


class TestSettingsRoutes:
    def test_update_settings(self, client, auth_headers):
        response = client.put("/dashboard/settings", json={"site_name": "Meu Site"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["site_name"] == "Meu Site"

        response = client.put("/dashboard/settings", json={"primary_color": "azul"}, headers=auth_headers)
        assert response.status_code == 400

    def test_revoke_api_key(self, client, auth_headers, api_key):
        client.delete("/dashboard/settings/api-key", headers=auth_headers)
        response = client.get("/api/leads", headers={"x-api-key": api_key})
        assert response.status_code == 401

    def test_profile_and_password(self, client, auth_headers):
        response = client.put("/dashboard/settings/profile", json={"name": "Dona"}, headers=auth_headers)
        assert response.json()["name"] == "Dona"

        response = client.post("/dashboard/settings/password",
                               json={"current_password": "wrong", "new_password": "newpass123"},
                               headers=auth_headers)
        assert response.status_code == 400
        response = client.post("/dashboard/settings/password",
                               json={"current_password": "secret123", "new_password": "newpass123"},
                               headers=auth_headers)
        assert response.json() == {"success": True}
