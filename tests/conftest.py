"""
tests.conftest
~~~~~~~~~~~~~~
Shared fixtures: an in-memory Edge backend served through
``httpx.MockTransport`` and users holding ``entities.*`` permissions.
"""
from __future__ import annotations

import json
import re
import time
import uuid

import httpx
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from rest_framework.test import APIClient

from apps.edge_connector import client as client_module
from apps.edge_connector.client import EdgeClient
from apps.entities.services import controller_registry

ORG = "test-org"
ENDPOINT = "https://edge.test/v1"


# ===========================================================================
# Fake Edge backend
# ===========================================================================

class FakeEdge:
    """
    Minimal in-memory imitation of the Edge management API for one
    organization.  Every request received is kept in :attr:`requests`.
    """

    def __init__(self, organization: str = ORG) -> None:
        self.organization = organization
        self.products: dict[str, dict] = {}
        self.developers: dict[str, str] = {}  # developer id -> e-mail
        self.apps: dict[str, dict[str, dict]] = {}  # e-mail -> name -> payload
        self.requests: list[httpx.Request] = []
        self.stats = {"environments": [{"name": "prod", "dimensions": []}]}
        prefix = rf"/v1/organizations/{re.escape(organization)}"
        self._routes = [
            (re.compile(rf"^{prefix}$"), self._organization),
            (re.compile(rf"^{prefix}/apiproducts$"), self._products),
            (re.compile(rf"^{prefix}/apiproducts/(?P<name>[^/]+)$"), self._product),
            (re.compile(rf"^{prefix}/developers/(?P<dev>[^/]+)/apps$"), self._developer_apps),
            (re.compile(rf"^{prefix}/developers/(?P<dev>[^/]+)/apps/(?P<name>[^/]+)$"), self._developer_app),
            (re.compile(rf"^{prefix}/apps$"), self._all_apps),
            (re.compile(rf"^{prefix}/apps/(?P<app_id>[^/]+)$"), self._app_by_id),
            (re.compile(rf"^{prefix}/environments/(?P<env>[^/]+)/stats/(?P<dimension>[^/]+)$"), self._stats),
        ]

    # -- seeding -----------------------------------------------------------

    def add_product(self, name: str, *, access: str = "public", **fields) -> dict:
        payload = {
            "name": name,
            "displayName": fields.pop("display_name", name.title()),
            "description": fields.pop("description", ""),
            "approvalType": "auto",
            "environments": ["prod"],
            "apiResources": [],
            "proxies": [],
            "scopes": [],
            "attributes": [{"name": "access", "value": access}],
            "createdAt": 1_600_000_000_000,
            "lastModifiedAt": 1_600_000_000_000,
            **fields,
        }
        self.products[name] = payload
        return payload

    def add_app(self, developer: str, name: str, *, products: tuple[str, ...] = (), **attributes) -> dict:
        developer_id = self._developer_id(developer)
        payload = {
            "name": name,
            "appId": str(uuid.uuid4()),
            "developerId": developer_id,
            "callbackUrl": "",
            "status": "approved",
            "appFamily": "default",
            "attributes": [{"name": key, "value": value} for key, value in attributes.items()],
            "credentials": [{
                "consumerKey": uuid.uuid4().hex,
                "status": "approved",
                "apiProducts": [{"apiproduct": p, "status": "approved"} for p in products],
            }],
            "createdAt": 1_600_000_000_000,
            "lastModifiedAt": 1_600_000_000_000,
        }
        self.apps.setdefault(developer, {})[name] = payload
        return payload

    def _developer_id(self, email: str) -> str:
        for developer_id, known in self.developers.items():
            if known == email:
                return developer_id
        developer_id = f"dev-{len(self.developers) + 1}"
        self.developers[developer_id] = email
        return developer_id

    def _email(self, developer: str) -> str:
        return self.developers.get(developer, developer)

    def respond(self, path_regex: str, response: httpx.Response) -> None:
        """Answer every request whose path matches *path_regex* with *response*."""
        self._routes.insert(0, (re.compile(path_regex), lambda request, **_: response))

    def requests_to(self, method: str, path_suffix: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.endswith(path_suffix)
        ]

    # -- transport ---------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for pattern, view in self._routes:
            match = pattern.match(request.url.path)
            if match:
                return view(request, **match.groupdict())
        return httpx.Response(404, json={"message": "unknown resource"})

    @staticmethod
    def _expanded(request: httpx.Request) -> bool:
        return request.url.params.get("expand") == "true"

    @staticmethod
    def _body(request: httpx.Request) -> dict:
        return json.loads(request.content or b"{}")

    def _organization(self, request):
        return httpx.Response(200, json={"name": self.organization})

    def _products(self, request):
        if self._expanded(request):
            return httpx.Response(200, json={"apiProduct": list(self.products.values())})
        return httpx.Response(200, json=list(self.products))

    def _product(self, request, name):
        if name not in self.products:
            return httpx.Response(404, json={"message": f"API product {name} does not exist"})
        return httpx.Response(200, json=self.products[name])

    def _developer_apps(self, request, dev):
        email = self._email(dev)
        apps = self.apps.get(email, {})
        if request.method == "POST":
            body = self._body(request)
            if body["name"] in apps:
                return httpx.Response(409, json={"message": f"App {body['name']} already exists"})
            payload = self.add_app(email, body["name"], products=tuple(body.get("apiProducts", [])))
            payload["callbackUrl"] = body.get("callbackUrl", "")
            payload["attributes"] = body.get("attributes", [])
            return httpx.Response(201, json=payload)
        if self._expanded(request):
            return httpx.Response(200, json={"app": list(apps.values())})
        return httpx.Response(200, json=list(apps))

    def _developer_app(self, request, dev, name):
        apps = self.apps.get(self._email(dev), {})
        if name not in apps:
            return httpx.Response(404, json={"message": f"App {name} does not exist"})
        if request.method == "PUT":
            body = self._body(request)
            apps[name]["callbackUrl"] = body.get("callbackUrl", apps[name]["callbackUrl"])
            apps[name]["attributes"] = body.get("attributes", apps[name]["attributes"])
            apps[name]["lastModifiedAt"] = int(time.time() * 1000)
        if request.method == "DELETE":
            return httpx.Response(200, json=apps.pop(name))
        return httpx.Response(200, json=apps[name])

    def _all_apps(self, request):
        every = [app for apps in self.apps.values() for app in apps.values()]
        if self._expanded(request):
            return httpx.Response(200, json={"app": every})
        return httpx.Response(200, json=[app["appId"] for app in every])

    def _app_by_id(self, request, app_id):
        for apps in self.apps.values():
            for app in apps.values():
                if app["appId"] == app_id:
                    return httpx.Response(200, json=app)
        return httpx.Response(404, json={"message": f"App {app_id} does not exist"})

    def _stats(self, request, env, dimension):
        return httpx.Response(200, json=self.stats)


# ===========================================================================
# Fixtures
# ===========================================================================

@pytest.fixture
def fake_edge() -> FakeEdge:
    return FakeEdge()


@pytest.fixture
def edge_client(fake_edge: FakeEdge):
    """An :class:`EdgeClient` talking to :fixture:`fake_edge`."""
    client = EdgeClient(ENDPOINT, transport=httpx.MockTransport(fake_edge.handle))
    yield client
    client.close()


@pytest.fixture(autouse=True)
def edge(monkeypatch, fake_edge: FakeEdge, edge_client: EdgeClient) -> FakeEdge:
    """
    Route every controller built by the registry to :fixture:`fake_edge`.
    Autouse so that no test can reach a real backend.
    """
    monkeypatch.setattr(client_module, "get_client", lambda: edge_client)
    controller_registry.reset()
    yield fake_edge
    controller_registry.reset()


@pytest.fixture
def make_user(db):
    """Factory: ``make_user("alice", "view_own_developer_app", ...)``."""

    def _make(username: str, *codenames: str, email: str | None = None):
        user = get_user_model().objects.create_user(
            username=username,
            email=f"{username}@example.com" if email is None else email,
            password="secret-pass-123",
        )
        if codenames:
            user.user_permissions.add(*Permission.objects.filter(
                content_type__app_label="entities", codename__in=codenames
            ))
        return user

    return _make


@pytest.fixture
def api_client() -> APIClient:
    """Return an unauthenticated DRF APIClient."""
    return APIClient()
