"""
Unit tests for endpoint tokenization.
"""

from __future__ import annotations

import pytest

from permaudit.inference.canonicalizer import UriCanonicalizer
from permaudit.inference.tokenizer import (
    is_identifier_segment,
    normalize_template,
    tokenize,
    tokenize_endpoint,
    tokenize_template,
)

GRAPH = "https://graph.microsoft.com"


class TestIdentifierSegments:
    """Tests for identifier detection."""

    @pytest.mark.parametrize(
        "segment",
        [
            "42",
            "5a1b6c3d-1111-2222-3333-444455556666",
            "AAMkAGI2TGuLAAA1",
            "range(address='A1')",
            "delta()",
        ],
    )
    def test_identifiers(self, segment):
        """Test digits and function-call syntax mark identifiers."""
        assert is_identifier_segment(segment)

    @pytest.mark.parametrize("segment", ["users", "messages", "{id}", "$value", "v1.0", "beta"])
    def test_non_identifiers(self, segment):
        """Test plain names, placeholders and version labels are not identifiers."""
        assert not is_identifier_segment(segment)


class TestTokenize:
    """Tests for tokenize()."""

    def test_final_identifier(self):
        """Test a trailing ID becomes the placeholder."""
        assert tokenize("/users/42") == "/users/{id}"

    def test_inner_identifier(self):
        """Test IDs in the middle of the path become the placeholder."""
        assert (
            tokenize("/users/5a1b6c3d-1111-2222-3333-444455556666/messages/AAMk1")
            == "/users/{id}/messages/{id}"
        )

    def test_names_pass_through(self):
        """Test segments without digits are unchanged."""
        assert tokenize("/applications/abc/owners") == "/applications/abc/owners"

    def test_absolute_uri_keeps_prefix_and_version(self):
        """Test scheme, host and version label survive tokenization."""
        assert tokenize(f"{GRAPH}/v1.0/users/42") == f"{GRAPH}/v1.0/users/{{id}}"

    def test_host_only(self):
        """Test a URI without path segments yields the host portion."""
        assert tokenize(GRAPH) == GRAPH
        assert tokenize(f"{GRAPH}/") == GRAPH

    def test_empty_path(self):
        """Test an empty path stays empty."""
        assert tokenize("") == ""
        assert tokenize("/") == ""

    def test_final_function_call(self):
        """Test a trailing function call is truncated and given a placeholder."""
        assert (
            tokenize("/reports/getEmailActivityUserDetail(period='D7')")
            == "/reports/getEmailActivityUserDetail/{id}"
        )

    def test_final_function_call_with_digit_in_name(self):
        """Test a function name containing digits is itself a placeholder."""
        assert (
            tokenize("/reports/getOffice365ActiveUserDetail(period='D7')")
            == "/reports/{id}/{id}"
        )

    def test_inner_function_call(self):
        """Test function calls inside the path become the placeholder."""
        assert (
            tokenize("/workbook/worksheets/Sheet1/range(address='A1')/format")
            == "/workbook/worksheets/{id}/{id}/format"
        )

    def test_digit_in_collection_name(self):
        """Test collection names with digits are tokenized like identifiers."""
        assert tokenize("/oauth2PermissionGrants") == "/{id}"

    def test_trailing_slash_trimmed(self):
        """Test the result has no trailing slash."""
        assert tokenize("/users/42/") == "/users/{id}"


class TestTemplates:
    """Tests for catalog template normalization."""

    def test_normalize_template(self):
        """Test every {...} placeholder becomes {id}."""
        assert (
            normalize_template("/users/{user-id}/photos/{profilePhoto-id}/$value")
            == "/users/{id}/photos/{id}/$value"
        )

    def test_tokenize_template_function(self):
        """Test function templates tokenize like live function calls."""
        template = "/reports/getEmailActivityUserDetail(period='{period_value}')"
        assert tokenize_template(template) == tokenize(
            "/reports/getEmailActivityUserDetail(period='D30')"
        )

    def test_tokenize_template_adds_leading_slash(self):
        """Test templates without a leading slash are rooted."""
        assert tokenize_template("users/{user-id}") == "/users/{id}"

    def test_template_and_activity_agree(self):
        """Test a template and a live URI reduce to the same shape."""
        canonical = UriCanonicalizer().canonicalize(
            f"{GRAPH}/v1.0/groups/0c2b1a3e-0000-4a2b-9c8d-112233445566/members"
        )
        assert tokenize_endpoint(canonical) == tokenize_template("/groups/{group-id}/members")


class TestIdempotence:
    """Tests that tokenization is idempotent."""

    @pytest.mark.parametrize(
        "path",
        [
            "/users/42/messages/AAMk1",
            "/reports/getEmailActivityUserDetail(period='D7')",
            "/reports/getOffice365ActiveUserDetail(period='D7')",
            "/workbook/range(address='A1')/format",
            "/oauth2PermissionGrants/abc",
            f"{GRAPH}/beta/users/5a1b6c3d-1111-2222-3333-444455556666",
            GRAPH,
        ],
    )
    def test_retokenize(self, path):
        """Test tokenizing a tokenized path changes nothing."""
        once = tokenize(path)
        assert tokenize(once) == once

    def test_unknown_generation_endpoint(self):
        """Test URIs outside the API roots tokenize to an empty path."""
        canonical = UriCanonicalizer().canonicalize("https://example.com/v1.0/users/1")
        assert tokenize_endpoint(canonical) == ""
