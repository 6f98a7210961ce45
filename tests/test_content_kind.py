"""Tests for content-kind classification and URL/namespace conversion."""

import pytest

from constants import ContentKind
from loader.content_kind import extension_of, mime_type_to_loader, response_to_loader
from loader.resolution import (
    Resolution,
    has_scheme,
    is_bare_module_name,
    resolution_to_url,
    url_to_resolution,
)


class TestResponseToLoader:
    """Extension first, MIME type second."""

    @pytest.mark.parametrize(
        "url,content_type,expected",
        [
            ("https://example.com/mod.ts", "text/plain", ContentKind.TS),
            ("https://example.com/App.tsx", "", ContentKind.TSX),
            ("https://example.com/a.mjs", "", ContentKind.JS),
            ("https://example.com/a.cts", "", ContentKind.TS),
            ("https://example.com/data.json?x=1", "", ContentKind.JSON),
            ("https://example.com/style.CSS", "", ContentKind.CSS),
            ("https://esm.sh/react@18.2.0", "application/javascript; charset=utf-8", ContentKind.JS),
            ("https://esm.sh/x", "application/typescript", ContentKind.TS),
            ("https://esm.sh/x", "text/css", ContentKind.CSS),
            ("https://esm.sh/x", "application/json", ContentKind.JSON),
            ("https://esm.sh/x", "application/manifest+json", ContentKind.TEXT),
            ("https://esm.sh/x", "text/html", ContentKind.TEXT),
            ("https://esm.sh/x", "image/svg+xml", ContentKind.TEXT),
            ("https://esm.sh/x", "", ContentKind.TEXT),
            ("https://example.com/file.weird", "text/javascript", ContentKind.JS),
            ("data:application/json;base64,e30=", "application/json", ContentKind.JSON),
        ],
    )
    def test_classification(self, url, content_type, expected):
        """Known extensions win; otherwise the MIME subtype decides."""
        assert response_to_loader(url, content_type) == expected

    def test_extension_of(self):
        """Only the last path segment counts."""
        assert extension_of("https://example.com/v1.2/mod") == ""
        assert extension_of("https://example.com/a/b.JS#frag") == "js"
        assert extension_of("data:text/javascript,1") == ""

    def test_mime_without_subtype(self):
        """A bare type is treated as text."""
        assert mime_type_to_loader("text") == ContentKind.TEXT


class TestResolution:
    """URL <-> (namespace, path) conversion."""

    def test_https(self):
        """Everything after the scheme colon is the path."""
        res = url_to_resolution("https://esm.sh/react@18.2.0/")
        assert res == Resolution(namespace="https", path="//esm.sh/react@18.2.0/")
        assert resolution_to_url(res.namespace, res.path) == "https://esm.sh/react@18.2.0/"

    def test_file(self, tmp_path):
        """file: URLs map to filesystem paths."""
        path = tmp_path / "main.ts"
        res = url_to_resolution(path.as_uri())
        assert res.namespace == "file"
        assert res.path == str(path)
        assert resolution_to_url("file", res.path) == path.as_uri()

    def test_package_schemes(self):
        """npm: and jsr: keep their own namespaces."""
        assert url_to_resolution("npm:react@18") == Resolution("npm", "react@18")

    @pytest.mark.parametrize(
        "name,bare",
        [
            ("react", True),
            ("@scope/pkg", True),
            ("./a.js", False),
            ("../a.js", False),
            ("/abs.js", False),
            ("https://esm.sh/react", False),
            ("npm:react", False),
            ("C:/windows", True),
        ],
    )
    def test_is_bare_module_name(self, name, bare):
        """Relative, absolute and URL specifiers are not bare."""
        assert is_bare_module_name(name) is bare

    def test_has_scheme(self):
        """Single letters are not schemes."""
        assert has_scheme("data:,x")
        assert not has_scheme("c:\\x")
