"""Tests for platform adapters and their error classification."""

import json

import httpx
import pytest

from adbridge.config.retry import RetryConfig
from adbridge.core.errors import (
    ErrorType,
    GoogleAdsApiError,
    LinkedInApiError,
    MetaApiError,
    TikTokApiError,
)
from adbridge.core.integrations.adapters import (
    AdapterConfig,
    append_meta_auth_params,
    bearer_auth_header,
    build_google_adapter,
    build_linkedin_adapter,
    build_meta_adapter,
    build_tiktok_adapter,
    compute_appsecret_proof,
    get_adapter,
    header_auth_updater,
    replace_token_params,
)
from adbridge.core.integrations.adapters.google import parse_google_error, parse_retry_delay_ms
from adbridge.core.integrations.adapters.linkedin import parse_linkedin_error
from adbridge.core.integrations.adapters.meta import parse_business_usage_ms, parse_meta_error
from adbridge.core.integrations.adapters.tiktok import parse_tiktok_error, tiktok_is_success
from adbridge.core.integrations.resilience import RequestDescriptor, execute_request
from tests.core.integrations.scripted import ScriptedTransport, make_http_client


def response(status: int, headers=None) -> httpx.Response:
    return httpx.Response(status, headers=headers)


class TestAdapterHelpers:
    """Tests for shared adapter helpers."""

    def test_default_headers_read_only(self):
        adapter = build_linkedin_adapter(access_token="tok")
        with pytest.raises(TypeError):
            adapter.default_headers["X-New"] = "1"

    def test_adapter_is_frozen(self):
        adapter = build_tiktok_adapter()
        with pytest.raises(AttributeError):
            adapter.base_url = "https://elsewhere"

    def test_source_headers_not_aliased(self):
        headers = {"X-A": "1"}
        adapter = AdapterConfig(
            platform_id="x", base_url="https://x", parse_error=parse_tiktok_error,
            default_headers=headers,
        )
        headers["X-A"] = "2"
        assert adapter.default_headers["X-A"] == "1"

    def test_bearer_replaces_any_casing(self):
        updated = bearer_auth_header({"authorization": "Bearer old", "X-A": "1"}, "new")
        assert updated == {"X-A": "1", "Authorization": "Bearer new"}

    def test_header_updater_does_not_mutate_input(self):
        original = {"Access-Token": "old"}
        updated = header_auth_updater("Access-Token")(original, "new")
        assert original == {"Access-Token": "old"}
        assert updated == {"Access-Token": "new"}

    def test_replace_token_params(self):
        url = "https://graph.example/me?fields=id&token=old"
        assert replace_token_params(url, "new") == "https://graph.example/me?fields=id&token=new"

    def test_replace_token_params_keeps_other_pairs_verbatim(self):
        url = "https://graph.example/me?fields=id,name&filter=a%20b&access_token=old"
        assert replace_token_params(url, "n/ew") == (
            "https://graph.example/me?fields=id,name&filter=a%20b&access_token=n%2Few"
        )

    def test_replace_token_params_without_token_unchanged(self):
        url = "https://api.example/me?fields=id,name"
        assert replace_token_params(url, "new") == url

    def test_resolve_url(self):
        adapter = build_tiktok_adapter()
        assert adapter.resolve_url("/campaign/get/") == (
            "https://business-api.tiktok.com/open_api/v1.3/campaign/get/"
        )
        assert adapter.resolve_url("https://other.example/x") == "https://other.example/x"

    def test_with_retry_config(self):
        adapter = build_tiktok_adapter()
        updated = adapter.with_retry_config(RetryConfig(max_retries=7))
        assert updated.retry_config.max_retries == 7
        assert adapter.retry_config.max_retries == 3


class TestRegistry:
    """Tests for get_adapter."""

    @pytest.mark.parametrize(
        "platform_id,kwargs",
        [
            ("meta", {}),
            ("google", {"developer_token": "dev"}),
            ("linkedin", {}),
            ("tiktok", {}),
        ],
    )
    def test_known_platforms(self, platform_id, kwargs):
        assert get_adapter(platform_id, **kwargs).platform_id == platform_id

    def test_unknown_platform(self):
        with pytest.raises(ValueError, match="Unknown platform"):
            get_adapter("myspace")


class TestMetaAdapter:
    """Tests for the Meta Graph API adapter."""

    def test_default_headers(self):
        adapter = build_meta_adapter(access_token="tok")
        assert adapter.default_headers["Authorization"] == "Bearer tok"
        assert adapter.base_url == "https://graph.facebook.com/v21.0"

    @pytest.mark.parametrize("code", [190, 102, 463, 464, 2500])
    def test_auth_codes(self, code):
        error = parse_meta_error(response(400), {"error": {"message": "m", "code": code}})
        assert isinstance(error, MetaApiError)
        assert error.is_auth_error is True
        assert error.is_retryable is False

    @pytest.mark.parametrize("code", [4, 17, 32, 613, 80000, 80004, 80014])
    def test_rate_limit_codes(self, code):
        error = parse_meta_error(response(400), {"error": {"message": "m", "code": code}})
        assert error.is_rate_limit_error is True
        assert error.is_retryable is True

    @pytest.mark.parametrize("code", [1, 2, 2601])
    def test_transient_codes(self, code):
        error = parse_meta_error(response(400), {"error": {"message": "m", "code": code}})
        assert error.error_type is ErrorType.SERVER_ERROR

    def test_is_transient_flag(self):
        error = parse_meta_error(
            response(400), {"error": {"message": "m", "code": 100, "is_transient": True}}
        )
        assert error.is_retryable is True

    def test_invalid_parameter_is_client_error(self):
        payload = {
            "error": {
                "message": "Invalid parameter",
                "type": "OAuthException",
                "code": 100,
                "error_subcode": 1487390,
                "fbtrace_id": "AbCdEf",
            }
        }
        error = parse_meta_error(response(400), payload)
        assert error.error_type is ErrorType.INVALID_REQUEST
        assert error.message == "Invalid parameter"
        assert error.subcode == 1487390
        assert error.request_id == "AbCdEf"
        assert error.error_type_name == "OAuthException"
        assert error.to_dict()["subcode"] == 1487390

    def test_auth_beats_rate_limit(self):
        """HTTP 401 with a throttling code is still an auth error."""
        error = parse_meta_error(response(401), {"error": {"message": "m", "code": 17}})
        assert error.is_auth_error is True
        assert error.is_rate_limit_error is False

    def test_string_payload_becomes_message(self):
        error = parse_meta_error(response(502), "Bad Gateway")
        assert error.message == "Bad Gateway"
        assert error.is_retryable is True

    def test_business_usage_header(self):
        usage = {
            "123": [
                {"type": "ads_management", "estimated_time_to_regain_access": 2},
                {"type": "ads_insights", "estimated_time_to_regain_access": 5},
            ]
        }
        resp = response(400, {"X-Business-Use-Case-Usage": json.dumps(usage)})
        assert parse_business_usage_ms(resp) == 300_000.0
        error = parse_meta_error(resp, {"error": {"message": "m", "code": 80004}})
        assert error.retry_after_ms == 300_000.0

    def test_retry_after_preferred_over_usage_header(self):
        usage = {"1": [{"estimated_time_to_regain_access": 5}]}
        resp = response(
            429, {"Retry-After": "7", "X-Business-Use-Case-Usage": json.dumps(usage)}
        )
        assert parse_meta_error(resp, {}).retry_after_ms == 7000.0

    def test_malformed_usage_header_ignored(self):
        resp = response(400, {"X-Business-Use-Case-Usage": "not-json"})
        assert parse_business_usage_ms(resp) is None

    def test_appsecret_proof(self):
        proof = compute_appsecret_proof("token", "secret")
        assert len(proof) == 64
        assert proof == compute_appsecret_proof("token", "secret")
        assert proof != compute_appsecret_proof("token2", "secret")

    def test_append_auth_params(self):
        params = append_meta_auth_params({"fields": "id"}, "tok", "secret")
        assert params["access_token"] == "tok"
        assert params["appsecret_proof"] == compute_appsecret_proof("tok", "secret")
        assert "appsecret_proof" not in append_meta_auth_params({}, "tok")

    def test_url_update_recomputes_proof(self):
        adapter = build_meta_adapter(app_secret="secret")
        old_proof = compute_appsecret_proof("old", "secret")
        url = f"https://graph.facebook.com/v21.0/me?access_token=old&appsecret_proof={old_proof}"
        updated = httpx.URL(adapter.update_auth_in_url(url, "new"))
        assert updated.params["access_token"] == "new"
        assert updated.params["appsecret_proof"] == compute_appsecret_proof("new", "secret")

    def test_url_update_keeps_other_pairs_verbatim(self):
        adapter = build_meta_adapter(app_secret="secret")
        old_proof = compute_appsecret_proof("old", "secret")
        url = (
            "https://graph.facebook.com/v21.0/act_1/insights"
            f"?fields=spend,clicks&access_token=old&appsecret_proof={old_proof}"
        )
        new_proof = compute_appsecret_proof("new", "secret")
        assert adapter.update_auth_in_url(url, "new") == (
            "https://graph.facebook.com/v21.0/act_1/insights"
            f"?fields=spend,clicks&access_token=new&appsecret_proof={new_proof}"
        )

    def test_url_update_without_token_param_unchanged(self):
        adapter = build_meta_adapter(app_secret="secret")
        url = "https://graph.facebook.com/v21.0/me?fields=id"
        assert adapter.update_auth_in_url(url, "new") == url


class TestGoogleAdapter:
    """Tests for the Google Ads adapter."""

    def test_default_headers(self):
        adapter = build_google_adapter(
            developer_token="dev", access_token="tok", login_customer_id="123-456-7890"
        )
        assert adapter.default_headers["developer-token"] == "dev"
        assert adapter.default_headers["login-customer-id"] == "1234567890"
        assert adapter.default_headers["Authorization"] == "Bearer tok"

    def test_quota_error_with_retry_delay(self):
        payload = {
            "error": {
                "code": 429,
                "message": "Resource has been exhausted",
                "status": "RESOURCE_EXHAUSTED",
                "details": [
                    {
                        "errors": [{"errorCode": {"quotaError": "RESOURCE_EXHAUSTED"}}],
                        "requestId": "req-1",
                        "retryDelay": "30s",
                    }
                ],
            }
        }
        error = parse_google_error(response(429), payload)
        assert isinstance(error, GoogleAdsApiError)
        assert error.is_rate_limit_error is True
        assert error.retry_after_ms == 30_000.0
        assert error.request_id == "req-1"
        assert error.google_error_code == "RESOURCE_EXHAUSTED"

    def test_unauthenticated_status(self):
        payload = {"error": {"code": 401, "message": "no", "status": "UNAUTHENTICATED"}}
        error = parse_google_error(response(401), payload)
        assert error.error_type is ErrorType.AUTHENTICATION

    def test_auth_error_code_on_400(self):
        payload = {
            "error": {
                "code": 400,
                "message": "bad",
                "status": "INVALID_ARGUMENT",
                "details": [{"errors": [{"errorCode": {"authenticationError": "OAUTH_TOKEN_EXPIRED"}}]}],
            }
        }
        assert parse_google_error(response(400), payload).is_auth_error is True

    @pytest.mark.parametrize("status", ["UNAVAILABLE", "INTERNAL", "DEADLINE_EXCEEDED"])
    def test_retryable_grpc_status(self, status):
        payload = {"error": {"code": 400, "message": "m", "status": status}}
        assert parse_google_error(response(400), payload).is_retryable is True

    def test_transient_error_code(self):
        payload = {
            "error": {
                "message": "m",
                "details": [{"errors": [{"errorCode": {"internalError": "TRANSIENT_ERROR"}}]}],
            }
        }
        assert parse_google_error(response(400), payload).error_type is ErrorType.SERVER_ERROR

    def test_query_error_is_client_error(self):
        payload = {
            "error": {
                "code": 400,
                "message": "Query error",
                "status": "INVALID_ARGUMENT",
                "details": [{"errors": [{"errorCode": {"queryError": "UNRECOGNIZED_FIELD"}}]}],
            }
        }
        error = parse_google_error(response(400), payload)
        assert error.error_type is ErrorType.INVALID_REQUEST
        assert error.provider_error_code == "UNRECOGNIZED_FIELD"
        assert len(error.error_details) == 1

    def test_stream_list_payload(self):
        payload = [{"error": {"code": 503, "message": "busy", "status": "UNAVAILABLE"}}]
        error = parse_google_error(response(503), payload)
        assert error.message == "busy"

    @pytest.mark.parametrize(
        "value,expected",
        [("30s", 30_000.0), ("1.5s", 1500.0), ("0s", None), ("soon", None), (None, None)],
    )
    def test_parse_retry_delay(self, value, expected):
        assert parse_retry_delay_ms(value) == expected


class TestLinkedInAdapter:
    """Tests for the LinkedIn adapter."""

    def test_default_headers(self):
        adapter = build_linkedin_adapter(access_token="tok", linkedin_version="202409")
        assert adapter.default_headers["X-Restli-Protocol-Version"] == "2.0.0"
        assert adapter.default_headers["LinkedIn-Version"] == "202409"
        assert adapter.default_headers["Authorization"] == "Bearer tok"

    @pytest.mark.parametrize(
        "code",
        ["EXPIRED_ACCESS_TOKEN", "INVALID_ACCESS_TOKEN", "REVOKED_ACCESS_TOKEN", "UNAUTHORIZED"],
    )
    def test_auth_codes(self, code):
        error = parse_linkedin_error(response(400), {"message": "m", "code": code})
        assert isinstance(error, LinkedInApiError)
        assert error.is_auth_error is True

    def test_too_many_requests(self):
        error = parse_linkedin_error(
            response(400, {"Retry-After": "12"}), {"message": "m", "code": "TOO_MANY_REQUESTS"}
        )
        assert error.is_rate_limit_error is True
        assert error.retry_after_ms == 12_000.0

    def test_server_error(self):
        error = parse_linkedin_error(response(504), {"message": "timeout", "status": 504})
        assert error.error_type is ErrorType.SERVER_ERROR

    def test_service_error_code(self):
        error = parse_linkedin_error(
            response(422), {"message": "invalid", "status": 422, "serviceErrorCode": 100}
        )
        assert error.error_type is ErrorType.INVALID_REQUEST
        assert error.service_error_code == 100
        assert error.provider_error_code == 100


class TestTikTokAdapter:
    """Tests for the TikTok adapter."""

    def test_access_token_header(self):
        adapter = build_tiktok_adapter(access_token="tok")
        assert adapter.default_headers == {"Access-Token": "tok"}
        assert adapter.update_auth_header({"Access-Token": "tok"}, "new") == {
            "Access-Token": "new"
        }

    @pytest.mark.parametrize(
        "status,payload,expected",
        [
            (200, {"code": 0, "data": {}}, True),
            (200, {"data": {}}, True),
            (200, {"code": "0"}, True),
            (200, {"code": 40002, "message": "expired"}, False),
            (500, {"code": 0}, False),
        ],
    )
    def test_success_predicate(self, status, payload, expected):
        assert tiktok_is_success(response(status), payload) is expected

    @pytest.mark.parametrize("code", [40001, 40002, 40003, 40004])
    def test_auth_codes(self, code):
        error = parse_tiktok_error(response(200), {"code": code, "message": "m"})
        assert isinstance(error, TikTokApiError)
        assert error.is_auth_error is True

    @pytest.mark.parametrize("code", [40100, 40101, 40102])
    def test_rate_limit_codes(self, code):
        assert parse_tiktok_error(response(200), {"code": code}).is_rate_limit_error is True

    @pytest.mark.parametrize("code", [50000, 50300, 50400])
    def test_server_codes(self, code):
        assert parse_tiktok_error(response(200), {"code": code}).is_retryable is True

    def test_request_id(self):
        error = parse_tiktok_error(
            response(200), {"code": 40000, "message": "bad param", "request_id": "r-9"}
        )
        assert error.request_id == "r-9"
        assert error.error_type is ErrorType.INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_http_200_failure_not_returned(self, fake_sleep):
        """HTTP 200 with a non-zero code is classified and raised, not returned."""
        transport = ScriptedTransport((200, {"code": 40002, "message": "token expired"}))
        adapter = build_tiktok_adapter(access_token="tok")

        with pytest.raises(TikTokApiError) as exc_info:
            await execute_request(
                adapter,
                RequestDescriptor(url="/campaign/get/", operation="list_campaigns"),
                http_client=make_http_client(transport),
                sleep_func=fake_sleep,
            )

        assert exc_info.value.is_auth_error is True
        assert exc_info.value.http_status == 200
        assert transport.call_count == 1

    @pytest.mark.asyncio
    async def test_http_200_server_code_retried(self, fake_sleep):
        transport = ScriptedTransport(
            (200, {"code": 50000, "message": "internal"}),
            (200, {"code": 0, "data": {"list": []}}),
        )
        result = await execute_request(
            build_tiktok_adapter(access_token="tok"),
            RequestDescriptor(url="/campaign/get/", operation="list_campaigns"),
            http_client=make_http_client(transport),
            sleep_func=fake_sleep,
        )
        assert result.payload["data"] == {"list": []}
        assert len(fake_sleep.delays) == 1
        assert transport.requests[0].headers["Access-Token"] == "tok"
