"""Tests for waypoint.routing.router — registration, matching, groups, names."""

import pytest

from waypoint.errors import (
    BadRequest,
    ConfigurationError,
    MethodNotAllowed,
    NotFound,
    RouteNotFound,
)
from waypoint.routing.router import RouteHandle, Router


def _handler() -> str:
    return "ok"


def _other() -> str:
    return "other"


async def m1(request, next):
    return await next(request)


async def m2(request, next):
    return await next(request)


class TestAddRoute:
    def test_returns_handle(self) -> None:
        r = Router()
        handle = r.add_route("GET", "/users", _handler)
        assert isinstance(handle, RouteHandle)
        assert handle.method == "GET"
        assert handle.uri == "/users"

    def test_record_defaults(self) -> None:
        r = Router()
        record = r.add_route("get", "/users", _handler).record
        assert record.method == "GET"
        assert record.action is _handler
        assert record.name is None
        assert record.constraints == {}
        assert record.middleware == ()

    def test_verb_shortcuts(self) -> None:
        r = Router()
        r.get("/a", _handler)
        r.post("/a", _handler)
        r.put("/a", _handler)
        r.patch("/a", _handler)
        r.delete("/a", _handler)
        r.options("/a", _handler)
        r.head("/a", _handler)
        assert [route.method for route in r.routes] == [
            "GET",
            "POST",
            "PUT",
            "PATCH",
            "DELETE",
            "OPTIONS",
            "HEAD",
        ]

    def test_reregistration_overwrites(self) -> None:
        r = Router()
        r.get("/users", _handler)
        r.get("/users", _other)
        assert len(r.routes) == 1
        assert r.match("GET", "/users").route.action is _other

    def test_reregistration_keeps_position(self) -> None:
        r = Router()
        r.get("/a", _handler)
        r.get("/b", _handler)
        r.get("/a", _other)
        assert [route.uri for route in r.routes] == ["/a", "/b"]

    def test_identical_reregistration_is_idempotent(self) -> None:
        r = Router()
        r.get("/users/{id}", _handler)
        before = r.match("GET", "/users/1")
        r.get("/users/{id}", _handler)
        after = r.match("GET", "/users/1")
        assert len(r.routes) == 1
        assert before.route == after.route
        assert before.path_params == after.path_params

    def test_route_decorator(self) -> None:
        r = Router()

        @r.route("/items", methods=["GET", "POST"], name="items", middleware=m1)
        def items():
            return "items"

        assert [route.method for route in r.routes] == ["GET", "POST"]
        assert all(route.middleware == (m1,) for route in r.routes)
        assert r.url_for("items") == "/items"


class TestHandle:
    def test_middleware_single_ref(self) -> None:
        r = Router()
        record = r.get("/a", _handler).middleware(m1).record
        assert record.middleware == (m1,)

    def test_middleware_appends(self) -> None:
        r = Router()
        handle = r.get("/a", _handler).middleware([m1])
        handle.middleware(m2)
        assert handle.record.middleware == (m1, m2)

    def test_chaining_in_any_order(self) -> None:
        r = Router()
        handle = r.get("/users/{id}", _handler).where("id", r"\d+").middleware(m1).name("user")
        record = handle.record
        assert record.constraints == {"id": r"\d+"}
        assert record.middleware == (m1,)
        assert record.name == "user"

    def test_unknown_alias_fails_at_registration(self) -> None:
        r = Router()
        with pytest.raises(ConfigurationError) as exc_info:
            r.get("/a", _handler).middleware("nope")
        assert "nope" in str(exc_info.value)

    def test_alias_resolves(self) -> None:
        r = Router(middleware_aliases={"first": m1})
        r.register_middleware_alias("second", m2)
        record = r.get("/a", _handler).middleware(["first", "second"]).record
        assert record.middleware == (m1, m2)

    def test_alias_to_import_path(self) -> None:
        r = Router(middleware_aliases={"first": f"{__name__}:m1"})
        record = r.get("/a", _handler).middleware("first").record
        assert record.middleware == (m1,)

    def test_bare_import_path(self) -> None:
        r = Router()
        record = r.get("/a", _handler).middleware(f"{__name__}.m2").record
        assert record.middleware == (m2,)

    def test_non_callable_ref_rejected(self) -> None:
        r = Router()
        with pytest.raises(ConfigurationError):
            r.get("/a", _handler).middleware([42])

    def test_where_applies_to_every_method(self) -> None:
        r = Router()
        r.get("/users/{id}", _handler)
        r.put("/users/{id}", _handler).where("id", r"\d+")
        assert all(route.constraints == {"id": r"\d+"} for route in r.routes)

    def test_where_before_readd_is_kept(self) -> None:
        r = Router()
        r.get("/users/{id}", _handler).where("id", r"\d+")
        record = r.post("/users/{id}", _handler).record
        assert record.constraints == {"id": r"\d+"}

    def test_handle_unusable_after_freeze(self) -> None:
        r = Router()
        handle = r.get("/a", _handler)
        r.freeze()
        with pytest.raises(ConfigurationError):
            handle.name("a")


class TestMatch:
    def test_static(self) -> None:
        r = Router()
        r.get("/users", _handler)
        match = r.match("GET", "/users")
        assert match.route.uri == "/users"
        assert match.path_params == {}

    def test_params(self) -> None:
        r = Router()
        r.get("/users/{user}/posts/{post}", _handler)
        match = r.match("GET", "/users/ada/posts/hello")
        assert match.path_params == {"user": "ada", "post": "hello"}

    def test_method_is_case_insensitive(self) -> None:
        r = Router()
        r.get("/users", _handler)
        assert r.match("get", "/users").route.method == "GET"

    def test_registration_order_wins(self) -> None:
        """A general template registered first shadows a later specific one."""
        r = Router()
        r.get("/users/{id}", _handler)
        r.get("/users/new", _other)
        match = r.match("GET", "/users/new")
        assert match.route.uri == "/users/{id}"
        assert match.path_params == {"id": "new"}

    def test_specific_first_is_reachable(self) -> None:
        r = Router()
        r.get("/users/new", _other)
        r.get("/users/{id}", _handler)
        assert r.match("GET", "/users/new").route.action is _other
        assert r.match("GET", "/users/9").route.action is _handler

    def test_not_found(self) -> None:
        r = Router()
        r.get("/users", _handler)
        with pytest.raises(NotFound) as exc_info:
            r.match("GET", "/nothing")
        assert exc_info.value.status == 404
        assert "/nothing" in exc_info.value.detail

    def test_not_found_on_empty_router(self) -> None:
        with pytest.raises(NotFound):
            Router().match("GET", "/")

    def test_method_not_allowed_literal(self) -> None:
        r = Router()
        r.post("/users", _handler)
        with pytest.raises(MethodNotAllowed) as exc_info:
            r.match("GET", "/users")
        assert dict(exc_info.value.headers)["Allow"] == "POST"

    def test_method_not_allowed_pattern(self) -> None:
        r = Router()
        r.post("/users/{id}", _handler)
        r.delete("/users/{id}", _handler)
        with pytest.raises(MethodNotAllowed) as exc_info:
            r.match("GET", "/users/42")
        assert dict(exc_info.value.headers)["Allow"] == "DELETE, POST"

    def test_other_method_constraint_respected(self) -> None:
        r = Router()
        r.post("/users/{id}", _handler).where("id", r"\d+")
        with pytest.raises(NotFound):
            r.match("GET", "/users/abc")

    def test_constraint_violation_is_bad_request(self) -> None:
        r = Router()
        r.get("/users/{id}", _handler).where("id", "[0-9]+")
        with pytest.raises(BadRequest) as exc_info:
            r.match("GET", "/users/abc")
        assert exc_info.value.status == 400
        assert r.match("GET", "/users/42").path_params == {"id": "42"}

    def test_other_method_wins_over_constraint_violation(self) -> None:
        r = Router()
        r.get("/items/{id}", _handler).where("id", r"\d+")
        r.post("/items/new", _other)
        with pytest.raises(MethodNotAllowed) as exc_info:
            r.match("GET", "/items/new")
        assert dict(exc_info.value.headers)["Allow"] == "POST"
        with pytest.raises(BadRequest):
            r.match("GET", "/items/abc")

    def test_constraint_falls_through_to_later_route(self) -> None:
        r = Router()
        r.get("/users/{id}", _handler).where("id", r"\d+")
        r.get("/users/{slug}", _other)
        match = r.match("GET", "/users/ada")
        assert match.route.action is _other

    def test_malformed_constraint_is_configuration_error(self) -> None:
        r = Router()
        r.get("/users/{id}", _handler).where("id", "(")
        with pytest.raises(ConfigurationError):
            r.match("GET", "/users/1")


class TestGroup:
    def test_prefix_and_middleware(self) -> None:
        r = Router()
        r.group({"prefix": "/admin", "middleware": m1}, lambda g: g.get("/users", _handler))
        record = r.match("GET", "/admin/users").route
        assert record.uri == "/admin/users"
        assert record.middleware == (m1,)

    def test_nested_groups(self) -> None:
        r = Router()

        def v1(g: Router) -> None:
            g.add_route("GET", "/ping", _handler)

        def api(g: Router) -> None:
            g.group({"prefix": "/v1", "middleware": [m2]}, v1)

        r.group({"prefix": "/api", "middleware": [m1]}, api)

        record = r.match("GET", "/api/v1/ping").route
        assert record.uri == "/api/v1/ping"
        assert record.middleware == (m1, m2)
        with pytest.raises(NotFound):
            r.match("GET", "/ping")

    def test_group_middleware_precedes_route_middleware(self) -> None:
        r = Router()
        r.group({"middleware": [m1]}, lambda g: g.get("/a", _handler).middleware(m2))
        assert r.match("GET", "/a").route.middleware == (m1, m2)

    def test_constraints_move_with_prefix(self) -> None:
        r = Router()
        r.group({"prefix": "/api"}, lambda g: g.get("/users/{id}", _handler).where("id", r"\d+"))
        assert r.match("GET", "/api/users/5").route.constraints == {"id": r"\d+"}
        with pytest.raises(BadRequest):
            r.match("GET", "/api/users/x")

    def test_names_use_prefixed_uri(self) -> None:
        r = Router()
        r.group({"prefix": "/api"}, lambda g: g.get("/users/{id}", _handler).name("api-user"))
        assert r.url_for("api-user", id=3) == "/api/users/3"

    def test_routes_before_and_after_group_keep_order(self) -> None:
        r = Router()
        r.get("/first", _handler)
        r.group({"prefix": "/g"}, lambda g: g.get("/inner", _handler))
        r.get("/last", _handler)
        assert [route.uri for route in r.routes] == ["/first", "/g/inner", "/last"]

    def test_scope_restored_after_exception(self) -> None:
        r = Router()
        r.get("/outer", _handler)

        def broken(g: Router) -> None:
            g.get("/inner", _handler)
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            r.group({"prefix": "/g"}, broken)

        assert r.scope_depth == 0
        assert [route.uri for route in r.routes] == ["/outer"]
        r.get("/after", _handler)
        assert r.match("GET", "/after").route.uri == "/after"

    def test_handle_used_after_group_closes(self) -> None:
        r = Router()
        handles: list[RouteHandle] = []
        r.group({"prefix": "/g"}, lambda g: handles.append(g.get("/x", _handler)))
        with pytest.raises(ConfigurationError):
            handles[0].name("late")

    def test_unknown_group_middleware(self) -> None:
        r = Router()
        with pytest.raises(ConfigurationError):
            r.group({"middleware": ["missing"]}, lambda g: None)

    def test_no_attributes(self) -> None:
        r = Router()
        r.group(None, lambda g: g.get("/plain", _handler))
        assert r.match("GET", "/plain").route.middleware == ()


class TestNames:
    def test_url_for(self) -> None:
        r = Router()
        r.get("/users/{id}", _handler).name("show-user")
        assert r.url_for("show-user", {"id": 7}) == "/users/7"

    def test_url_for_kwargs(self) -> None:
        r = Router()
        r.get("/users/{id}/posts/{post}", _handler).name("post")
        assert r.url_for("post", id=1, post="intro") == "/users/1/posts/intro"

    def test_unknown_name(self) -> None:
        with pytest.raises(RouteNotFound) as exc_info:
            Router().url_for("missing")
        assert exc_info.value.name == "missing"

    def test_duplicate_name_for_other_template(self) -> None:
        r = Router()
        r.get("/a", _handler).name("dup")
        with pytest.raises(ConfigurationError):
            r.get("/b", _handler).name("dup")

    def test_same_name_across_methods_of_one_template(self) -> None:
        r = Router()
        r.get("/users", _handler).name("users")
        r.post("/users", _handler).name("users")
        assert r.url_for("users") == "/users"

    def test_rename_releases_old_name(self) -> None:
        r = Router()
        r.get("/a", _handler).name("old").name("new")
        assert r.url_for("new") == "/a"
        with pytest.raises(RouteNotFound):
            r.url_for("old")

    def test_rename_keeps_name_shared_by_other_method(self) -> None:
        r = Router()
        get = r.get("/items", _handler).name("items")
        r.post("/items", _handler).name("items")
        get.name("items-get")
        assert r.url_for("items") == "/items"
        assert r.url_for("items-get") == "/items"
        assert r.match("POST", "/items").route.name == "items"


class TestFreeze:
    def test_add_after_freeze(self) -> None:
        r = Router()
        r.freeze()
        assert r.frozen is True
        with pytest.raises(ConfigurationError):
            r.get("/late", _handler)

    def test_group_after_freeze(self) -> None:
        r = Router()
        r.freeze()
        with pytest.raises(ConfigurationError):
            r.group({"prefix": "/g"}, lambda g: None)
