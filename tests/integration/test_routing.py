from fastapi.routing import APIRoute

from food_backend.app_setup.routing import RawBodyRoute, iter_routes, raw_body_paths


def _api_routes(app):
    return {r.path: r for r in iter_routes(app.routes) if isinstance(r, APIRoute)}


def test_only_webhook_reads_raw_body(app):
    assert raw_body_paths(app) == {("POST", "/webhook")}


def test_json_routes_use_plain_route(app):
    routes = _api_routes(app)
    for path in ("/create-checkout-session", "/session-status/{session_id}", "/test-email", "/health"):
        assert type(routes[path]) is APIRoute
    assert isinstance(routes["/webhook"], RawBodyRoute)


def test_iter_routes_descends_into_nested_routers():
    class _Included:
        def __init__(self, router):
            self.router = router

    class _Router:
        def __init__(self, routes):
            self.routes = routes

    webhook = RawBodyRoute("/webhook", lambda: None, methods=["POST"])
    checkout = APIRoute("/create-checkout-session", lambda: None, methods=["POST"])
    tree = [_Included(_Router([webhook])), _Router([_Included(_Router([checkout]))])]

    assert list(iter_routes(tree)) == [webhook, checkout]


def test_webhook_hidden_from_openapi(client):
    paths = client.get("/openapi.json").json()["paths"]
    assert "/webhook" not in paths
    assert "/create-checkout-session" in paths


def test_security_headers(client):
    r = client.get("/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
