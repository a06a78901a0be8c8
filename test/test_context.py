"""
Tests for request and ajax contexts
"""

import json

import pytest

from exposer.auth import ANONYMOUS
from exposer.services.context import AjaxContext, RequestContext, parse_body_params


class TestParseBodyParams:
    def test_json_object(self):
        assert parse_body_params(b'{"a": 1, "b": [2]}', "application/json") == {"a": 1, "b": [2]}

    def test_json_with_charset(self):
        assert parse_body_params(b'{"a": 1}', "application/json; charset=utf-8") == {"a": 1}

    def test_vendor_json(self):
        assert parse_body_params(b'{"a": 1}', "application/vnd.api+json") == {"a": 1}

    @pytest.mark.parametrize("body", [b"[1, 2]", b'"text"', b"{broken"])
    def test_json_non_object_gives_nothing(self, body):
        assert parse_body_params(body, "application/json") == {}

    def test_form(self):
        assert parse_body_params(b"value=My+Site&empty=", "application/x-www-form-urlencoded") == {
            "value": "My Site",
            "empty": "",
        }

    def test_empty_body(self):
        assert parse_body_params(b"", "application/json") == {}

    @pytest.mark.parametrize("content_type", [None, "text/plain", "application/octet-stream"])
    def test_other_content_types(self, content_type):
        assert parse_body_params(b"value=1", content_type) == {}


class TestContexts:
    def test_request_context_defaults(self):
        ctx = RequestContext(method="GET", caller=ANONYMOUS)

        assert ctx.query == {}
        assert ctx.params == {}
        assert ctx.body == b""
        assert ctx.query_string == ""

    def test_ajax_output_buffer(self):
        ajax = AjaxContext(action="ping", method="POST", caller=ANONYMOUS)

        ajax.write("hello ")
        ajax.write("world")

        assert ajax.output == "hello world"

    def test_ajax_send_json(self):
        ajax = AjaxContext(action="ping", method="GET", caller=ANONYMOUS)

        ajax.send_json({"success": True})

        assert json.loads(ajax.output) == {"success": True}

    def test_ajax_buffers_not_shared(self):
        first = AjaxContext(action="a", method="GET", caller=ANONYMOUS)
        second = AjaxContext(action="b", method="GET", caller=ANONYMOUS)

        first.write("x")

        assert second.output == ""
