"""Tests for npm/JSR version resolution against a shared build cache."""

import asyncio

import pytest
import semantic_version

from common.errors import HTTPError, InvalidEntryPointError, InvalidMetadataError, InvalidPackageVersionError
from versioning.cache import ResolvedVersions
from versioning.parser import parse_package_specifier
from versioning.resolvers import resolve_specifier
from versioning.resolvers.base import summarize_versions
from versioning.resolvers.npm import NpmVersionResolver, synthesize_exports

NPM = "https://registry.npmjs.org"


def packument(name, versions, exports=None):
    """Abbreviated npm document with the given versions."""
    body = {"name": name, "dist-tags": {"latest": versions[-1]}, "versions": {}}
    for version in versions:
        info = {"name": name, "version": version}
        if exports is not None:
            info["exports"] = exports
        body["versions"][version] = info
    return body


class TestNpmResolution:
    """npm: specifiers resolve to CDN URLs."""

    def test_repeat_resolution_fetches_once(self, fake_fetcher):
        """A second resolution of the same range is served from the build cache."""
        fetcher = fake_fetcher({
            f"{NPM}/left-pad": packument("left-pad", ["0.9.0", "1.0.0", "1.3.0", "2.0.0"]),
        })
        cache = ResolvedVersions()

        first = asyncio.run(resolve_specifier("npm:left-pad@^1.0.0", fetcher, cache))
        second = asyncio.run(resolve_specifier("npm:left-pad@^1.0.0", fetcher, cache))

        assert first == "https://esm.sh/left-pad@1.3.0/"
        assert second == first
        assert fetcher.urls() == [f"{NPM}/left-pad"]

    def test_non_overlapping_ranges_coexist(self, fake_fetcher):
        """Disjoint ranges each get their own highest version."""
        fetcher = fake_fetcher({
            f"{NPM}/left-pad": packument("left-pad", ["0.9.0", "1.0.0", "1.3.0", "2.0.0"]),
        })
        cache = ResolvedVersions()

        v1 = asyncio.run(resolve_specifier("npm:left-pad@^1.0.0", fetcher, cache))
        v2 = asyncio.run(resolve_specifier("npm:left-pad@^2.0.0", fetcher, cache))
        again = asyncio.run(resolve_specifier("npm:left-pad@~1.3", fetcher, cache))

        assert v1.endswith("left-pad@1.3.0/")
        assert v2.endswith("left-pad@2.0.0/")
        assert again == v1
        assert len(fetcher.calls) == 2
        assert [str(v) for v, _ in cache.get("left-pad")] == ["1.3.0", "2.0.0"]

    def test_without_cache_every_call_fetches(self, fake_fetcher):
        """Passing no cache disables memoization."""
        fetcher = fake_fetcher({f"{NPM}/react": packument("react", ["18.2.0"])})
        asyncio.run(resolve_specifier("npm:react", fetcher))
        asyncio.run(resolve_specifier("npm:react", fetcher))
        assert len(fetcher.calls) == 2

    def test_unsatisfiable_range_lists_versions(self, fake_fetcher):
        """At most ten versions plus a marker are carried on the error."""
        versions = [f"1.{minor}.0" for minor in range(15)]
        fetcher = fake_fetcher({f"{NPM}/many": packument("many", versions)})

        with pytest.raises(InvalidPackageVersionError) as excinfo:
            asyncio.run(resolve_specifier("npm:many@^5.0.0", fetcher, ResolvedVersions()))

        err = excinfo.value
        assert err.package_name == "many"
        assert err.tag == "^5.0.0"
        assert len(err.available_versions) == 11
        assert err.available_versions[-1] == "+5 more"
        assert "(5 more versions)" in str(err)

    def test_invalid_versions_are_skipped(self, fake_fetcher):
        """Unparseable version keys do not break selection."""
        fetcher = fake_fetcher({f"{NPM}/odd": packument("odd", ["not-a-version", "1.0.0"])})
        url = asyncio.run(resolve_specifier("npm:odd", fetcher))
        assert url == "https://esm.sh/odd@1.0.0/"

    def test_subpath_export(self, fake_fetcher):
        """Declared subpath exports are mapped onto the CDN URL."""
        fetcher = fake_fetcher({
            f"{NPM}/preact": packument("preact", ["10.19.0"], exports={".": "./dist/preact.mjs", "./hooks": {}}),
        })
        url = asyncio.run(resolve_specifier("npm:preact@10/hooks", fetcher, ResolvedVersions()))
        assert url == "https://esm.sh/preact@10.19.0/hooks"

    def test_unknown_entry_point(self, fake_fetcher):
        """An entry point missing from exports raises InvalidEntryPointError."""
        fetcher = fake_fetcher({f"{NPM}/left-pad": packument("left-pad", ["1.3.0"])})

        with pytest.raises(InvalidEntryPointError) as excinfo:
            asyncio.run(resolve_specifier("npm:left-pad/missing", fetcher))

        assert excinfo.value.entry_point == "./missing"
        assert excinfo.value.available_entry_points == ["."]

    def test_registry_error_propagates(self, fake_fetcher):
        """Metadata fetch failures surface as fetch errors."""
        with pytest.raises(HTTPError) as excinfo:
            asyncio.run(resolve_specifier("npm:nope", fake_fetcher()))
        assert excinfo.value.status == 404

    def test_custom_endpoints(self, fake_fetcher):
        """Registry and CDN endpoints are configurable."""
        fetcher = fake_fetcher({"https://npm.example/react": packument("react", ["18.2.0"])})
        resolver = NpmVersionResolver(fetcher, endpoint="https://npm.example", cdn="https://cdn.example/")
        url = asyncio.run(resolver.resolve(parse_package_specifier("npm:react@18")))
        assert url == "https://cdn.example/react@18.2.0/"

    def test_cache_first_is_forwarded(self, fake_fetcher):
        """The cache-first flag reaches the fetcher."""
        fetcher = fake_fetcher(cached={f"{NPM}/react": packument("react", ["18.2.0"])})
        url = asyncio.run(resolve_specifier("npm:react", fetcher, cache_first=True))
        assert url == "https://esm.sh/react@18.2.0/"
        assert fetcher.calls == [(f"{NPM}/react", True)]


class TestJsrResolution:
    """jsr: specifiers resolve to registry file URLs."""

    def _fetcher(self, fake_fetcher):
        return fake_fetcher({
            "https://jsr.io/@std/path/meta.json": {
                "scope": "std",
                "name": "path",
                "latest": "1.0.8",
                "versions": {"0.9.0": {}, "1.0.0": {}, "1.0.8": {"yanked": True}},
            },
            "https://jsr.io/@std/path/1.0.8_meta.json": {
                "exports": {".": "./mod.ts", "./posix": "./posix/mod.ts"},
                "manifest": {},
            },
        })

    def test_root_export(self, fake_fetcher):
        """Two metadata fetches, then the root export URL."""
        fetcher = self._fetcher(fake_fetcher)
        url = asyncio.run(resolve_specifier("jsr:@std/path@^1.0.0", fetcher, ResolvedVersions()))
        assert url == "https://jsr.io/@std/path/1.0.8/mod.ts"
        assert fetcher.urls() == [
            "https://jsr.io/@std/path/meta.json",
            "https://jsr.io/@std/path/1.0.8_meta.json",
        ]

    def test_subpath_uses_cached_exports(self, fake_fetcher):
        """A later subpath resolution reuses the cached export map."""
        fetcher = self._fetcher(fake_fetcher)
        cache = ResolvedVersions()
        asyncio.run(resolve_specifier("jsr:@std/path@1", fetcher, cache))
        url = asyncio.run(resolve_specifier("jsr:@std/path@^1.0.0/posix", fetcher, cache))
        assert url == "https://jsr.io/@std/path/1.0.8/posix/mod.ts"
        assert len(fetcher.calls) == 2

    def test_unknown_subpath(self, fake_fetcher):
        """Entry points not in the export map are rejected."""
        fetcher = self._fetcher(fake_fetcher)
        with pytest.raises(InvalidEntryPointError):
            asyncio.run(resolve_specifier("jsr:@std/path/win32", fetcher))

    def test_version_document_must_be_an_object(self, fake_fetcher):
        """A non-object version document raises InvalidMetadataError."""
        fetcher = self._fetcher(fake_fetcher)
        fetcher.routes["https://jsr.io/@std/path/1.0.8_meta.json"] = ("\"oops\"", "application/json")

        with pytest.raises(InvalidMetadataError) as excinfo:
            asyncio.run(resolve_specifier("jsr:@std/path", fetcher))

        assert excinfo.value.url == "https://jsr.io/@std/path/1.0.8_meta.json"
        assert "expected an object, got str" in str(excinfo.value)


class TestHelpers:
    """Export synthesis and version summaries."""

    @pytest.mark.parametrize(
        "exports,expected",
        [
            (None, {".": "./"}),
            ("./index.js", {".": "./"}),
            ({"import": "./a.mjs", "require": "./a.cjs"}, {".": "./"}),
            ({".": "./a.js", "./b": "./b.js"}, {".": ".", "./b": "./b"}),
        ],
    )
    def test_synthesize_exports(self, exports, expected):
        """Subpath keys are identity-mapped."""
        assert synthesize_exports(exports) == expected

    def test_summarize_short_list(self):
        """Short lists are returned whole."""
        assert summarize_versions(["1.0.0", "2.0.0"]) == ["1.0.0", "2.0.0"]

    def test_resolved_versions_snapshot(self):
        """get() returns a copy that later appends do not change."""
        cache = ResolvedVersions()
        cache.append("a", semantic_version.Version("1.0.0"), {".": "."})
        snapshot = cache.get("a")
        cache.append("a", semantic_version.Version("2.0.0"), {".": "."})
        assert len(snapshot) == 1
        assert len(cache) == 2
        assert cache.names() == ["a"]
