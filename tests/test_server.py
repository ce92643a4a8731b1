"""Integration tests: requests through the full DevServer pipeline."""

import asyncio

import pytest

from perch import DevServer, ServerConfig
from perch.compilers import CompileContext, Compiled
from perch.errors import CompileError
from perch.http.response import Response
from perch.testing import TestClient


def shout(source: bytes, context: CompileContext) -> Compiled:
    return Compiled(source.upper(), "text/plain; charset=utf-8")


async def slow_shout(source: bytes, context: CompileContext) -> Compiled:
    await asyncio.sleep(0)
    return Compiled(source.upper() + b"!", "text/plain; charset=utf-8")


def make_server(site, **kwargs) -> DevServer:
    kwargs.setdefault("compilers", ((r"\.up$", shout),))
    return DevServer(ServerConfig(base_dir=site, **kwargs))


class TestStaticAssets:
    async def test_serves_mapped_file(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.get("/app/main.js")
        assert response.status == 200
        assert "javascript" in response.content_type
        assert response.text == "console.log('app');"

    async def test_serves_file_from_base_dir(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.get("/robots.txt")
        assert response.status == 200
        assert response.content_type.startswith("text/plain")

    async def test_unknown_extension_is_octet_stream(self, site) -> None:
        (site / "app" / "blob.zzqx").write_bytes(b"\x00\x01")
        async with TestClient(make_server(site)) as client:
            response = await client.get("/app/blob.zzqx")
        assert response.content_type == "application/octet-stream"
        assert response.body == b"\x00\x01"

    async def test_content_length(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.get("/vendor/lib.js")
        assert response.header("content-length") == str(len(b"var lib = 1;"))

    async def test_map_override(self, site) -> None:
        (site / "dist").mkdir()
        (site / "dist" / "bundle.js").write_text("bundled")
        server = make_server(site, map={"js": "dist"})
        async with TestClient(server) as client:
            response = await client.get("/js/bundle.js")
        assert response.text == "bundled"

    async def test_root_prefix(self, site) -> None:
        async with TestClient(make_server(site, root="/static/")) as client:
            asset = await client.get("/static/vendor/lib.js")
            outside = await client.get("/vendor/lib.js")
        assert asset.text == "var lib = 1;"
        assert "<h1>Home</h1>" in outside.text


class TestFallback:
    async def test_client_route_serves_index(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.get("/users/42/profile?tab=posts")
        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert "<h1>Home</h1>" in response.text

    async def test_nul_in_path_serves_index(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.get("/app/x\x00.js")
        assert response.status == 200
        assert "<h1>Home</h1>" in response.text

    async def test_push_state_off_returns_404(self, site) -> None:
        async with TestClient(make_server(site, push_state=False)) as client:
            response = await client.get("/users/42")
        assert response.status == 404
        assert response.text == "Not Found"

    async def test_custom_index(self, site) -> None:
        (site / "shell.html").write_text("<p>shell</p>")
        server = make_server(site, index=site / "shell.html")
        async with TestClient(server) as client:
            response = await client.get("/anything")
        assert response.text == "<p>shell</p>"


class TestCompilers:
    async def test_compiler_output_served(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.get("/app/theme.up")
        assert response.status == 200
        assert response.text == "SHOUT ME"
        assert response.content_type == "text/plain; charset=utf-8"

    async def test_async_compiler(self, site) -> None:
        server = make_server(site, compilers=((r"\.up$", slow_shout),))
        async with TestClient(server) as client:
            response = await client.get("/app/theme.up")
        assert response.text == "SHOUT ME!"

    async def test_compiler_may_return_response(self, site) -> None:
        def teapot(source, context):
            return Response("short and stout", status=418, content_type="text/plain")

        server = make_server(site, compilers=((r"\.up$", teapot),))
        async with TestClient(server) as client:
            response = await client.get("/app/theme.up")
        assert response.status == 418

    async def test_compile_error_is_500_without_detail(self, site) -> None:
        def broken(source, context):
            raise CompileError("theme.up: line 1: unexpected token")

        server = make_server(site, compilers=((r"\.up$", broken),))
        async with TestClient(server) as client:
            response = await client.get("/app/theme.up")
        assert response.status == 500
        assert "unexpected token" not in response.text

    async def test_compile_error_detail_in_debug(self, site) -> None:
        def broken(source, context):
            raise CompileError("theme.up: line 1: unexpected token")

        server = make_server(site, compilers=((r"\.up$", broken),), debug=True)
        async with TestClient(server) as client:
            response = await client.get("/app/theme.up")
        assert response.status == 500
        assert "unexpected token" in response.text

    async def test_unexpected_compiler_failure_is_500(self, site) -> None:
        def crash(source, context):
            raise ValueError("boom")

        server = make_server(site, compilers=((r"\.up$", crash),))
        async with TestClient(server) as client:
            response = await client.get("/app/theme.up")
        assert response.status == 500
        assert response.text == "Internal Server Error"

    async def test_compiler_receives_context(self, site) -> None:
        seen: list[CompileContext] = []

        def record(source, context):
            seen.append(context)
            return Compiled(source, "text/plain")

        server = make_server(site, compilers=((r"\.up$", record),))
        async with TestClient(server) as client:
            await client.get("/app/theme.up?v=2")
        assert seen[0].request_path == "/app/theme.up?v=2"
        assert seen[0].path == (site / "app" / "theme.up").resolve()


class TestMethodsAndErrors:
    async def test_post_not_allowed(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.request("POST", "/app/main.js", body=b"x")
        assert response.status == 405
        assert response.header("Allow") == "GET, HEAD"

    async def test_head_has_headers_but_no_body(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.head("/vendor/lib.js")
        assert response.status == 200
        assert response.body == b""
        assert response.header("content-length") == str(len(b"var lib = 1;"))

    async def test_traversal_is_forbidden(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.get("/app/../../secret.txt")
        assert response.status == 403
        assert "outside the tree" not in response.text

    async def test_unreadable_file_is_500(self, site, monkeypatch) -> None:
        from perch.routing import resolver

        def deny(path):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(resolver, "read_if_present", deny)
        async with TestClient(make_server(site)) as client:
            response = await client.get("/app/main.js")
        assert response.status == 500


class TestFavicon:
    async def test_serves_configured_icon(self, site) -> None:
        (site / "favicon.ico").write_bytes(b"ICO")
        async with TestClient(make_server(site)) as client:
            response = await client.get("/favicon.ico")
        assert response.status == 200
        assert response.content_type == "image/x-icon"
        assert response.body == b"ICO"

    async def test_custom_icon_path(self, site, tmp_path) -> None:
        icon = tmp_path / "brand.ico"
        icon.write_bytes(b"BRAND")
        async with TestClient(make_server(site, favicon=icon)) as client:
            response = await client.get("/favicon.ico")
        assert response.body == b"BRAND"

    async def test_missing_icon_falls_through(self, site) -> None:
        async with TestClient(make_server(site, push_state=False)) as client:
            response = await client.get("/favicon.ico")
        assert response.status == 404


class TestLiveReload:
    async def test_snippet_injected_into_html(self, site) -> None:
        async with TestClient(make_server(site, live_reload=True)) as client:
            response = await client.get("/")
        assert "new EventSource(\"/__perch/events\")" in response.text
        assert response.text.index("EventSource") < response.text.index("</body>")

    async def test_assets_untouched(self, site) -> None:
        async with TestClient(make_server(site, live_reload=True)) as client:
            response = await client.get("/app/main.js")
        assert response.text == "console.log('app');"

    async def test_off_by_default(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            response = await client.get("/")
        assert "EventSource" not in response.text


class TestMiddleware:
    async def test_user_middleware_wraps_responses(self, site) -> None:
        async def no_store(request, next):
            response = await next(request)
            return response.with_header("Cache-Control", "no-store")

        server = make_server(site)
        server.add_middleware(no_store)
        async with TestClient(server) as client:
            response = await client.get("/app/main.js")
        assert response.header("cache-control") == "no-store"

    async def test_cannot_add_after_freeze(self, site) -> None:
        server = make_server(site)
        async with TestClient(server):
            with pytest.raises(RuntimeError, match="Cannot modify"):
                server.add_middleware(lambda request, next: next(request))


class TestFreeze:
    def test_routes_available_after_freeze(self, site) -> None:
        server = make_server(site)
        assert list(server.routes) == ["vendor", "app"]
        assert server.config.base_dir == site.resolve()

    async def test_reads_live_filesystem(self, site) -> None:
        async with TestClient(make_server(site)) as client:
            (site / "app" / "late.js").write_text("late")
            response = await client.get("/app/late.js")
        assert response.text == "late"


class TestLifespan:
    async def _run_lifespan(self, server) -> list[dict]:
        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict] = []

        async def receive():
            return incoming.pop(0)

        async def send(message):
            sent.append(message)

        await server({"type": "lifespan"}, receive, send)
        return sent

    async def test_startup_and_shutdown(self, site) -> None:
        server = make_server(site)
        sent = await self._run_lifespan(server)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        assert server.channel.closed

    async def test_bad_configuration_fails_startup(self, tmp_path) -> None:
        server = DevServer(ServerConfig(base_dir=tmp_path / "missing"))
        sent = await self._run_lifespan(server)
        assert sent[0]["type"] == "lifespan.startup.failed"
        assert "does not exist" in sent[0]["message"]
