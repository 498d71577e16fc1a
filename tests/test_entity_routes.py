"""
tests.test_entity_routes
~~~~~~~~~~~~~~~~~~~~~~~~
Generated routes served end to end against the fake Edge backend.

Covers:
- Developer-scoped app routes  (integration, DB)
- Administrative app routes    (integration, DB)
- API product routes           (integration, DB)
- Health check                 (integration, DB)
"""
from __future__ import annotations

import httpx
import pytest
from rest_framework import status

from apps.edge_connector.client import EdgeClient

pytestmark = pytest.mark.django_db

ALICE = "alice@example.com"


# ===========================================================================
# Fixtures
# ===========================================================================

@pytest.fixture
def catalog(edge):
    """One public and one private API product, and one app owned by alice."""
    edge.add_product("basic", display_name="Basic")
    edge.add_product("premium", access="private", display_name="Premium")
    edge.add_app(ALICE, "weather", products=("basic",), DisplayName="Weather")
    return edge


@pytest.fixture
def alice(make_user):
    return make_user(
        "alice",
        "create_developer_app",
        *(f"{operation}_own_developer_app" for operation in ("view", "update", "delete", "analytics")),
    )


@pytest.fixture
def bob(make_user):
    return make_user("bob", "create_developer_app", "view_own_developer_app")


@pytest.fixture
def admin(make_user):
    return make_user("admin", "administer_developer_app", "administer_api_product")


@pytest.fixture
def client_for(api_client):
    def _login(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _login


def app_url(user, suffix: str = "", app: str = "weather") -> str:
    return f"/user/{user.pk}/apps/{app}{suffix}"


# ===========================================================================
# TestDeveloperAppListing  (integration, DB)
# ===========================================================================

class TestDeveloperAppListing:

    def test_own_apps_listed(self, client_for, alice, catalog):
        catalog.add_app(ALICE, "atlas", DisplayName="Atlas")
        response = client_for(alice).get(f"/user/{alice.pk}/apps")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "My apps"
        assert response.data["developer"] == ALICE
        assert response.data["count"] == 2
        assert [app["name"] for app in response.data["results"]] == ["atlas", "weather"]

    def test_other_users_apps_forbidden(self, client_for, alice, bob, catalog):
        response = client_for(bob).get(f"/user/{alice.pk}/apps")
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert catalog.requests == []

    def test_admin_sees_other_users_apps(self, client_for, alice, admin, catalog):
        response = client_for(admin).get(f"/user/{alice.pk}/apps")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Apps of alice"

    def test_unknown_user_is_404(self, client_for, admin, catalog):
        response = client_for(admin).get("/user/999999/apps")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_user_without_email_is_404(self, client_for, make_user, admin, catalog):
        ghost = make_user("ghost", email="")
        response = client_for(admin).get(f"/user/{ghost.pk}/apps")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_non_numeric_user_does_not_match(self, client_for, admin, catalog):
        response = client_for(admin).get("/user/alice/apps")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_anonymous_rejected(self, api_client, alice, catalog):
        response = api_client.get(f"/user/{alice.pk}/apps")
        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


# ===========================================================================
# TestDeveloperAppPages  (integration, DB)
# ===========================================================================

class TestDeveloperAppPages:

    def test_view_own_app(self, client_for, alice, catalog):
        response = client_for(alice).get(app_url(alice))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Weather"
        assert response.data["approved"] is True
        assert response.data["api_products"] == ["basic"]
        # the entity is loaded once per request
        assert len(catalog.requests_to("GET", "/apps/weather")) == 1

    def test_unknown_app_is_404(self, client_for, alice, catalog):
        response = client_for(alice).get(app_url(alice, app="nope"))
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["code"] == "remote_entity_not_found"

    def test_edit_always_reads_backend_state(self, client_for, alice, catalog):
        response = client_for(alice).get(app_url(alice, "/edit"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Edit Weather"
        # once for the form, once more for the title
        assert len(catalog.requests_to("GET", "/apps/weather")) == 2

    def test_edit_own_app(self, client_for, alice, catalog):
        response = client_for(alice).patch(
            app_url(alice, "/edit"),
            {"display_name": "Weather Pro", "callback_url": "https://example.com/cb"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["display_name"] == "Weather Pro"
        assert response.data["title"] == "Edit Weather Pro"
        assert catalog.apps[ALICE]["weather"]["callbackUrl"] == "https://example.com/cb"

    def test_edit_rejects_bad_callback(self, client_for, alice, catalog):
        response = client_for(alice).patch(app_url(alice, "/edit"), {"callback_url": "nope"}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert catalog.requests_to("PUT", "/apps/weather") == []

    def test_edit_requires_update_permission(self, client_for, alice, bob, catalog):
        catalog.add_app(bob.email, "maps")
        response = client_for(bob).patch(app_url(bob, "/edit", app="maps"), {"display_name": "X"}, format="json")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_confirmation(self, client_for, alice, catalog):
        response = client_for(alice).get(app_url(alice, "/delete"))
        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Delete Weather"
        assert response.data["question"] == "Are you sure you want to delete the app Weather?"
        assert "weather" in catalog.apps[ALICE]

    def test_delete_own_app(self, client_for, alice, catalog):
        response = client_for(alice).delete(app_url(alice, "/delete"))
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert "weather" not in catalog.apps[ALICE]

    def test_analytics(self, client_for, alice, catalog):
        catalog.stats = {"environments": [{"name": "prod", "dimensions": [{"name": "weather"}]}]}
        response = client_for(alice).get(app_url(alice, "/analytics"), {"time_unit": "day"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Analytics of Weather"
        assert response.data["environment"] == "prod"
        assert response.data["metrics"] == catalog.stats

        (stats_request,) = catalog.requests_to("GET", "/environments/prod/stats/apps")
        assert stats_request.url.params["filter"] == "(developer_app eq 'weather')"
        assert stats_request.url.params["timeUnit"] == "day"

    def test_analytics_rejects_inverted_range(self, client_for, alice, catalog):
        response = client_for(alice).get(
            app_url(alice, "/analytics"),
            {"since": "2024-02-01T00:00:00Z", "until": "2024-01-01T00:00:00Z"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_analytics_requires_permission(self, client_for, bob, catalog):
        catalog.add_app(bob.email, "maps")
        response = client_for(bob).get(app_url(bob, "/analytics", app="maps"))
        assert response.status_code == status.HTTP_403_FORBIDDEN


# ===========================================================================
# TestDeveloperAppCreation  (integration, DB)
# ===========================================================================

class TestDeveloperAppCreation:

    def test_create_form_offers_public_products(self, client_for, alice, catalog):
        response = client_for(alice).get(f"/user/{alice.pk}/create-app")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Create app"
        assert [p["name"] for p in response.data["api_products"]] == ["basic"]
        assert "developer" not in response.data["fields"]

    def test_create_own_app(self, client_for, alice, catalog):
        response = client_for(alice).post(
            f"/user/{alice.pk}/create-app",
            {"name": "maps", "display_name": "Maps", "api_products": ["basic"]},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["display_name"] == "Maps"
        assert response.data["api_products"] == ["basic"]
        assert "maps" in catalog.apps[ALICE]

    def test_private_product_refused(self, client_for, alice, catalog):
        response = client_for(alice).post(
            f"/user/{alice.pk}/create-app",
            {"name": "maps", "api_products": ["premium"]},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "maps" not in catalog.apps[ALICE]

    def test_duplicate_name_conflicts(self, client_for, alice, catalog):
        response = client_for(alice).post(f"/user/{alice.pk}/create-app", {"name": "weather"}, format="json")
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["code"] == "conflict"

    def test_create_for_someone_else_forbidden(self, client_for, alice, bob, catalog):
        response = client_for(bob).post(f"/user/{alice.pk}/create-app", {"name": "sneaky"}, format="json")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unscoped_add_form_is_admin_only(self, client_for, alice, catalog):
        response = client_for(alice).get("/developer-apps/add")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_creates_for_developer(self, client_for, admin, catalog):
        response = client_for(admin).post(
            "/developer-apps/add",
            {"name": "ledger", "developer": "carol@example.com", "api_products": ["premium"]},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["title"] == "Add app"
        assert response.data["api_products"] == ["premium"]
        assert "ledger" in catalog.apps["carol@example.com"]


# ===========================================================================
# TestAdministrativeRoutes  (integration, DB)
# ===========================================================================

class TestAdministrativeRoutes:

    def test_collection_with_overview_permission(self, client_for, make_user, catalog):
        catalog.add_app("bob@example.com", "maps")
        auditor = make_user("auditor", "access_developer_app_overview")
        response = client_for(auditor).get("/developer-apps")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Apps"
        assert response.data["count"] == 2

    def test_collection_forbidden_without_permission(self, client_for, alice, catalog):
        response = client_for(alice).get("/developer-apps")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_view_by_app_id(self, client_for, make_user, catalog):
        viewer = make_user("viewer", "view_any_developer_app")
        app_id = catalog.apps[ALICE]["weather"]["appId"]
        response = client_for(viewer).get(f"/developer-apps/{app_id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Weather"
        assert response.data["app_id"] == app_id

    def test_admin_edit_saves_through_owner(self, client_for, admin, catalog):
        app_id = catalog.apps[ALICE]["weather"]["appId"]
        response = client_for(admin).patch(
            f"/developer-apps/{app_id}/edit", {"description": "Forecasts"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["description"] == "Forecasts"
        assert len(catalog.requests_to("PUT", "/apps/weather")) == 1

    def test_admin_delete(self, client_for, admin, catalog):
        app_id = catalog.apps[ALICE]["weather"]["appId"]
        response = client_for(admin).delete(f"/developer-apps/{app_id}/delete")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert catalog.apps[ALICE] == {}


# ===========================================================================
# TestApiProductRoutes  (integration, DB)
# ===========================================================================

class TestApiProductRoutes:

    def test_collection(self, client_for, admin, catalog):
        response = client_for(admin).get("/api-products")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "API products"
        assert {p["name"]: p["access_level"] for p in response.data["results"]} == {
            "basic": "public",
            "premium": "private",
        }

    def test_canonical_requires_view_any(self, client_for, make_user, alice, catalog):
        viewer = make_user("viewer", "view_any_api_product")
        assert client_for(alice).get("/api-products/premium").status_code == status.HTTP_403_FORBIDDEN

        response = client_for(viewer).get("/api-products/premium")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Premium"

    def test_backend_failure_is_502(self, client_for, admin, catalog):
        catalog.respond(r".*/apiproducts$", httpx.Response(500, json={"message": "boom"}))
        response = client_for(admin).get("/api-products")
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.data["code"] == "remote_api_error"


# ===========================================================================
# TestHealthCheck  (integration, DB)
# ===========================================================================

class TestHealthCheck:

    def test_healthy(self, api_client, edge_client, monkeypatch):
        monkeypatch.setattr("common.health.get_client", lambda: edge_client)
        response = api_client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "db": "ok", "edge": "ok"}

    def test_edge_unreachable(self, api_client, monkeypatch):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        broken = EdgeClient("https://edge.test/v1", transport=httpx.MockTransport(refuse))
        monkeypatch.setattr("common.health.get_client", lambda: broken)
        response = api_client.get("/health/")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["edge"].startswith("error:")
