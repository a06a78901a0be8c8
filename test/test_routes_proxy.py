"""
Tests for exposed endpoints

End-to-end: create a route over the admin API, then call it.
"""

from fastapi import status


def expose(client, ns, headers, slug, kind, method="GET", **params):
    response = client.post(
        f"{ns}/create-route",
        json={"slug": slug, "http_method": method, "target_kind": kind, "target_params": params},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK, response.text
    return response.json()


class TestRouting:
    def test_unknown_slug_is_not_found(self, client, ns):
        response = client.get(f"{ns}/nothing-here")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        error = response.json()["error"]
        assert error["error_code"] == "ROUTE_NOT_FOUND"
        assert error["message"] == "Endpoint not found or not properly configured"

    def test_wrong_method_is_not_found(self, client, ns, admin_headers):
        expose(client, ns, admin_headers, "pinger", "ajax", method="POST", action="ping")

        assert client.get(f"{ns}/pinger").status_code == status.HTTP_404_NOT_FOUND
        assert client.post(f"{ns}/pinger").status_code == status.HTTP_200_OK

    def test_deactivated_route_is_gone_on_next_request(self, client, ns, admin_headers):
        route = expose(client, ns, admin_headers, "pinger", "ajax", action="ping")
        assert client.get(f"{ns}/pinger").status_code == status.HTTP_200_OK

        client.post(f"{ns}/routes/{route['id']}/deactivate", headers=admin_headers)

        assert client.get(f"{ns}/pinger").status_code == status.HTTP_404_NOT_FOUND

        client.post(f"{ns}/routes/{route['id']}/activate", headers=admin_headers)

        assert client.get(f"{ns}/pinger").status_code == status.HTTP_200_OK

    def test_deleted_route_is_gone(self, client, ns, admin_headers):
        route = expose(client, ns, admin_headers, "pinger", "ajax", action="ping")
        client.delete(f"{ns}/routes/{route['id']}", headers=admin_headers)

        assert client.get(f"{ns}/pinger").status_code == status.HTTP_404_NOT_FOUND

    def test_request_id_header(self, client, ns):
        response = client.get(f"{ns}/nothing-here", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestAjaxEndpoint:
    def test_query_and_form_params_reach_handler(self, client, ns, admin_headers):
        expose(client, ns, admin_headers, "pinger", "ajax", method="POST", action="ping")

        response = client.post(f"{ns}/pinger?source=query&who=query", data={"who": "form"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["params"] == {"source": "query", "who": "form", "action": "ping"}

    def test_json_body_params(self, client, ns, admin_headers):
        expose(client, ns, admin_headers, "pinger", "ajax", method="POST", action="ping")

        response = client.post(f"{ns}/pinger", json={"count": 3})

        assert response.json()["data"]["params"] == {"count": 3, "action": "ping"}


class TestRestEndpoint:
    def test_forwards_and_relays_exactly(self, client, ns, admin_headers, upstream):
        upstream.status_code = 202
        upstream.content = b"<accepted/>"
        upstream.content_type = "application/xml"
        expose(client, ns, admin_headers, "orders", "rest", method="PUT", route="shop/v1/orders")

        response = client.put(
            f"{ns}/orders?dry_run=1",
            content=b"raw-payload",
            headers={"Content-Type": "text/plain"},
        )

        sent = upstream.requests[0]
        assert sent.method == "PUT"
        assert sent.url.path == "/wp-json/shop/v1/orders"
        assert sent.url.params["dry_run"] == "1"
        assert sent.content == b"raw-payload"
        assert response.status_code == 202
        assert response.content == b"<accepted/>"
        assert response.headers["content-type"] == "application/xml"

    def test_transport_failure_is_bad_gateway(self, client, ns, admin_headers, upstream):
        import httpx

        upstream.error = httpx.ConnectError("refused")
        expose(client, ns, admin_headers, "orders", "rest", route="shop/v1/orders")

        response = client.get(f"{ns}/orders")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["error"]["error_code"] == "UPSTREAM_ERROR"


class TestOptionEndpoint:
    def test_get_unset_then_set_then_get(self, client, ns, admin_headers):
        expose(client, ns, admin_headers, "site-name", "option", option_name="blogname")
        expose(client, ns, admin_headers, "set-site-name", "option", method="POST", option_name="blogname")

        assert client.get(f"{ns}/site-name").status_code == status.HTTP_404_NOT_FOUND

        response = client.post(f"{ns}/set-site-name", data={"value": "My Site"}, headers=admin_headers)
        assert response.json() == {"success": True, "option_name": "blogname", "value": "My Site"}

        assert client.get(f"{ns}/site-name").json() == {"option_name": "blogname", "value": "My Site"}

    def test_write_without_capability_is_forbidden_and_writes_nothing(
        self, client, ns, admin_headers, subscriber_headers
    ):
        expose(client, ns, admin_headers, "site-name", "option", option_name="blogname")
        expose(client, ns, admin_headers, "set-site-name", "option", method="POST", option_name="blogname")

        response = client.post(f"{ns}/set-site-name", data={"value": "Hacked"}, headers=subscriber_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert client.get(f"{ns}/site-name").status_code == status.HTTP_404_NOT_FOUND

    def test_put_route_answers_method_not_allowed(self, client, ns, admin_headers):
        expose(client, ns, admin_headers, "site-name", "option", method="PUT", option_name="blogname")

        response = client.put(f"{ns}/site-name", headers=admin_headers)

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert response.headers["allow"] == "GET, POST, DELETE"


class TestShortcodeEndpoint:
    def test_site_option_shortcode(self, client, ns, admin_headers):
        expose(client, ns, admin_headers, "blog-title", "shortcode", tag="site_option")

        response = client.get(f"{ns}/blog-title?name=blogname&default=Untitled")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "output": "Untitled",
            "shortcode": '[site_option name="blogname" default="Untitled"]',
        }


class TestWebhookEndpoints:
    def test_receive_then_read_back(self, client, ns, admin_headers):
        expose(client, ns, admin_headers, "webhook", "ajax", method="POST", action="handle_webhook")
        expose(client, ns, admin_headers, "webhook-content", "ajax", action="get_stored_content")

        missing = client.get(f"{ns}/webhook-content")
        assert missing.status_code == status.HTTP_404_NOT_FOUND
        assert missing.json()["error"]["message"] == "No content found."

        response = client.post(f"{ns}/webhook", json={"content": "Updated copy"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"data": "Webhook received successfully."}

        assert client.get(f"{ns}/webhook-content").json() == {"content": "Updated copy"}

    def test_form_post_is_bad_request(self, client, ns, admin_headers):
        expose(client, ns, admin_headers, "webhook", "ajax", method="POST", action="handle_webhook")

        response = client.post(f"{ns}/webhook", data={"content": "Updated copy"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
