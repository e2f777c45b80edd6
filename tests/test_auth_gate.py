"""
Bookshelf Backend — Request Gate Tests
=========================================

What:  The public/protected routing table and bearer-header parsing.
How:   Pure functions, no app needed. HTTP-level gate behaviour lives in test_api.py.
"""

import pytest

from bookshelf.middleware.auth_gate import extract_bearer_token, is_public


class TestIsPublic:

    @pytest.mark.parametrize(
        "path",
        [
            "/api/books",
            "/api/books/",
            "/api/books/search",
            "/api/books/authors",
            "/api/books/featured",
            "/api/books/stats/average-rating",
            "/api/books/stats/total",
            "/api/books/author/George%20Orwell",
            "/api/books/rating/4",
        ],
    )
    def test_public_reads(self, path):
        assert is_public("GET", path) is True

    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/api/books/1"),
            ("POST", "/api/books"),
            ("PUT", "/api/books/1"),
            ("DELETE", "/api/books/1"),
            ("POST", "/api/books/1/views"),
            ("POST", "/api/books/search"),
            ("GET", "/api/books/author/a/b"),
        ],
    )
    def test_protected(self, method, path):
        assert is_public(method, path) is False

    @pytest.mark.parametrize("path", ["/api/auth/login", "/api/auth/register", "/health", "/docs"])
    def test_outside_catalog_always_public(self, path):
        assert is_public("POST", path) is True

    def test_prefix_lookalike_is_not_protected(self):
        assert is_public("DELETE", "/api/bookstore") is True

    def test_preflight_passes(self):
        assert is_public("OPTIONS", "/api/books/1") is True


class TestExtractBearerToken:

    def test_bearer(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self):
        assert extract_bearer_token("bearer abc") == "abc"

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic dXNlcjpwdw==", "abc.def.ghi"])
    def test_no_token(self, header):
        assert extract_bearer_token(header) is None
