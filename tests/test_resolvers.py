"""Tests for the registry resolvers and their dispatch table."""

import httpx
import pytest
import pytest_asyncio
import respx

from depscope.config import Settings
from depscope.errors import EcosystemUnknownError, ResolverNotFoundError
from depscope.manifests import parse_requirement_entry
from depscope.models import Ecosystem, Package
from depscope.resolvers import (
    NpmResolver,
    PyPIResolver,
    ResolverRegistry,
    default_registry,
    parse_requires_dist,
)

from conftest import FakeResolver, pypi


@pytest_asyncio.fixture
async def client():
    async with httpx.AsyncClient() as c:
        yield c


class TestParseRequiresDist:
    def test_skips_extras(self):
        packages = parse_requires_dist([
            "chardet (<5,>=3.0.2)",
            "idna (<3,>=2.5)",
            "urllib3 (<1.27,>=1.21.1)",
            "certifi (>=2017.4.17)",
            'PySocks (!=1.5.7,>=1.5.6) ; extra == "socks"',
            'cryptography (>=1.3.4) ; extra == "security"',
        ])
        assert [p.key for p in packages] == ["chardet@*", "idna@*", "urllib3@*", "certifi@*"]

    def test_names_match_manifest_spelling(self):
        packages = parse_requires_dist(["typing_extensions>=4.0"])
        assert packages == [parse_requirement_entry("typing-extensions")]

    def test_pinned_and_invalid(self):
        packages = parse_requires_dist(["six==1.16.0", "not a requirement!!"])
        assert [p.key for p in packages] == ["six@1.16.0"]


class TestPyPIResolver:
    def test_release_urls(self):
        resolver = PyPIResolver(httpx.AsyncClient(), "https://pypi.org/")
        assert resolver.release_url(pypi("requests")) == "https://pypi.org/pypi/requests/json"
        assert (
            resolver.release_url(pypi("requests", "2.25.1"))
            == "https://pypi.org/pypi/requests/2.25.1/json"
        )

    @pytest.mark.asyncio
    @respx.mock
    async def test_resolve_pinned(self, client):
        respx.get("https://pypi.org/pypi/requests/2.25.1/json").mock(
            return_value=httpx.Response(
                200,
                json={"info": {"requires_dist": ["idna (<3,>=2.5)", "certifi (>=2017.4.17)"]}},
            )
        )
        source = pypi("requests", "2.25.1")
        edges = await PyPIResolver(client, "https://pypi.org").resolve(source)

        assert [str(e) for e in edges] == ["requests@2.25.1->idna@*", "requests@2.25.1->certifi@*"]
        assert all(e.source is source for e in edges)
        assert all(e.target.ecosystem is Ecosystem.pypi for e in edges)

    @pytest.mark.asyncio
    @respx.mock
    async def test_resolve_latest_uses_unversioned_url(self, client):
        route = respx.get("https://pypi.org/pypi/flask/json").mock(
            return_value=httpx.Response(200, json={"info": {"requires_dist": ["click>=8.1.3"]}})
        )
        edges = await PyPIResolver(client, "https://pypi.org").resolve(pypi("flask"))
        assert route.called
        assert [e.target.key for e in edges] == ["click@*"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_requirements(self, client):
        respx.get("https://pypi.org/pypi/six/json").mock(
            return_value=httpx.Response(200, json={"info": {"requires_dist": None}})
        )
        assert await PyPIResolver(client, "https://pypi.org").resolve(pypi("six")) == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_found_is_empty(self, client, caplog):
        respx.get("https://pypi.org/pypi/nope/json").mock(return_value=httpx.Response(404))
        edges = await PyPIResolver(client, "https://pypi.org").resolve(pypi("nope"))
        assert edges == []
        assert "not found" in caplog.text

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_is_empty(self, client):
        respx.get("https://pypi.org/pypi/flaky/json").mock(side_effect=httpx.ConnectTimeout("timeout"))
        assert await PyPIResolver(client, "https://pypi.org").resolve(pypi("flaky")) == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_response_is_empty(self, client):
        respx.get("https://pypi.org/pypi/weird/json").mock(
            return_value=httpx.Response(200, text="<html>oops</html>")
        )
        respx.get("https://pypi.org/pypi/noinfo/json").mock(
            return_value=httpx.Response(200, json={"releases": {}})
        )
        resolver = PyPIResolver(client, "https://pypi.org")
        assert await resolver.resolve(pypi("weird")) == []
        assert await resolver.resolve(pypi("noinfo")) == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_self_dependency_skipped(self, client):
        respx.get("https://pypi.org/pypi/loop/json").mock(
            return_value=httpx.Response(200, json={"info": {"requires_dist": ["loop", "six"]}})
        )
        edges = await PyPIResolver(client, "https://pypi.org").resolve(pypi("loop"))
        assert [e.target.key for e in edges] == ["six@*"]


class TestNpmResolver:
    def test_release_urls(self):
        resolver = NpmResolver(httpx.AsyncClient(), "https://registry.npmjs.org")
        assert resolver.release_url(Package(name="express", ecosystem=Ecosystem.npm)) == (
            "https://registry.npmjs.org/express/latest"
        )
        assert resolver.release_url(
            Package(name="@types/node", version="20.1.0", ecosystem=Ecosystem.npm)
        ) == "https://registry.npmjs.org/@types%2Fnode/20.1.0"

    @pytest.mark.asyncio
    @respx.mock
    async def test_resolve(self, client):
        respx.get("https://registry.npmjs.org/express/4.18.2").mock(
            return_value=httpx.Response(
                200, json={"dependencies": {"accepts": "~1.3.8", "body-parser": "1.20.1"}}
            )
        )
        source = Package(name="express", version="4.18.2", ecosystem=Ecosystem.npm)
        edges = await NpmResolver(client, "https://registry.npmjs.org").resolve(source)
        assert [e.target.key for e in edges] == ["accepts@*", "body-parser@1.20.1"]
        assert all(e.target.ecosystem is Ecosystem.npm for e in edges)


class TestResolverRegistry:
    def test_missing_ecosystem_is_fatal(self):
        registry = ResolverRegistry()
        registry.register(FakeResolver({}))
        with pytest.raises(EcosystemUnknownError, match="mystery"):
            registry.resolver_for(Package(name="mystery"))

    def test_unregistered_ecosystem_is_fatal(self):
        registry = ResolverRegistry()
        registry.register(FakeResolver({}))
        with pytest.raises(ResolverNotFoundError, match="npm"):
            registry.resolver_for(Package(name="left-pad", ecosystem=Ecosystem.npm))

    @pytest.mark.asyncio
    async def test_dispatch_error_raised_before_lookups(self):
        resolver = FakeResolver({"a@1": [pypi("b", "1")]})
        registry = ResolverRegistry()
        registry.register(resolver)
        with pytest.raises(EcosystemUnknownError):
            await registry.resolve_direct_dependencies([pypi("a", "1"), Package(name="untagged")])

    @pytest.mark.asyncio
    async def test_failure_isolated_per_package(self):
        registry = ResolverRegistry()
        registry.register(FakeResolver({
            "x@1": httpx.ConnectError("boom"),
            "y@1": [pypi("z", "1"), pypi("w", "1")],
        }))
        edges = await registry.resolve_direct_dependencies([pypi("x", "1"), pypi("y", "1")])
        assert [str(e) for e in edges] == ["y@1->z@1", "y@1->w@1"]

    @pytest.mark.asyncio
    async def test_unexpected_error_isolated_per_package(self):
        registry = ResolverRegistry()
        registry.register(FakeResolver({
            "x@1": RuntimeError("resolver bug"),
            "y@1": [pypi("z", "1")],
        }))
        edges = await registry.resolve_direct_dependencies([pypi("x", "1"), pypi("y", "1")])
        assert [str(e) for e in edges] == ["y@1->z@1"]

    @pytest.mark.asyncio
    async def test_duplicate_edges_collapsed(self):
        registry = ResolverRegistry()
        registry.register(FakeResolver({"a@1": [pypi("b", "1"), pypi("b", "1")]}))
        edges = await registry.resolve_direct_dependencies([pypi("a", "1"), pypi("a", "1")])
        assert len(edges) == 1

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        assert await ResolverRegistry().resolve_direct_dependencies([]) == []

    def test_default_registry(self):
        settings = Settings(max_concurrency=4)
        registry = default_registry(httpx.AsyncClient(), settings)
        assert set(registry.ecosystems) == {Ecosystem.pypi, Ecosystem.npm}
        assert registry.max_concurrency == 4
        assert isinstance(registry.resolver_for(pypi("six")), PyPIResolver)
