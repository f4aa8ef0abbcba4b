"""
Tests for response normalisation (ghost_gateway/normalizer.py).
"""

import pytest

from ghost_gateway.catalog import TOOL_CATALOG, validate_arguments
from ghost_gateway.models import Outcome, RawOutcome
from ghost_gateway.normalizer import (
    RETRY_HINT,
    extract_collection,
    extract_item,
    first_present,
    normalize,
    retry_hint,
    unwrap_envelope,
)


def succeeded(payload):
    return RawOutcome(kind=Outcome.SUCCEEDED, status_code=200, payload=payload)


class TestFallbackChain:
    def test_first_present_skips_none_only(self):
        assert first_present(None, 0, 5) == 0
        assert first_present(None, False) is False
        assert first_present(None, None) is None

    def test_unwrap_envelope(self):
        assert unwrap_envelope({"success": True, "data": {"a": 1}}) == {"a": 1}
        assert unwrap_envelope({"success": True}) is None
        assert unwrap_envelope([1, 2]) == [1, 2]
        assert unwrap_envelope({"title": "bare"}) == {"title": "bare"}

    def test_extract_item_wrapped(self):
        assert extract_item({"post": {"id": "1"}}) == {"id": "1"}
        assert extract_item({"id": "1"}) == {"id": "1"}
        assert extract_item(None) == {}

    def test_extract_collection_shapes(self):
        assert extract_collection([{"id": "1"}]) == [{"id": "1"}]
        assert extract_collection({"posts": [{"id": "2"}]}) == [{"id": "2"}]
        assert extract_collection({"unexpected": True}) == []
        assert extract_collection(None) == []


class TestSuccess:
    def test_item_falls_back_to_caller_values(self):
        descriptor = TOOL_CATALOG["ghost_create_post"]
        params = {"title": "T", "content": "B", "status": "draft", "is_test": True, "tags": ["a"]}

        result = normalize(descriptor, succeeded({"success": True, "data": {"title": "T"}}), params)

        assert result.ok
        assert result.data["status"] == "draft"
        assert result.data["tags"] == ["a"]
        assert result.data["is_test"] is True

    def test_item_prefers_backend_values(self):
        descriptor = TOOL_CATALOG["ghost_create_post"]
        params = {"title": "T", "content": "B", "status": "draft"}
        payload = {"success": True, "data": {"post": {"id": "p9", "title": "AI title", "status": "published"}}}

        result = normalize(descriptor, succeeded(payload), params)

        assert result.data["title"] == "AI title"
        assert result.data["status"] == "published"
        assert result.data["id"] == "p9"

    def test_get_details_id_falls_back_to_post_id(self):
        result = normalize(TOOL_CATALOG["ghost_get_post_details"], succeeded({"success": True}), {"post_id": "p1"})

        assert result.data == {"id": "p1"}

    def test_collection(self):
        payload = {"success": True, "data": [{"id": "1"}, {"id": "2"}]}

        result = normalize(TOOL_CATALOG["ghost_get_posts"], succeeded(payload), {"limit": 10, "status": "all"})

        assert result.data == {"items": [{"id": "1"}, {"id": "2"}], "count": 2}
        assert result.echo == {"limit": 10, "status": "all"}

    def test_batch_reports_missing(self):
        payload = {"success": True, "data": {"posts": [{"id": "1"}]}}

        result = normalize(TOOL_CATALOG["ghost_batch_get_details"], succeeded(payload), {"post_ids": ["1", "2", "3"]})

        assert result.data["count"] == 1
        assert result.data["requested"] == 3
        assert result.data["missing"] == 2

    def test_deletion(self):
        result = normalize(TOOL_CATALOG["ghost_delete_post"], succeeded({"success": True}), {"post_id": "p1"})

        assert result.data == {"post_id": "p1", "deleted": True}

    def test_health_defaults(self):
        result = normalize(TOOL_CATALOG["ghost_health_check"], succeeded({"success": True, "data": {}}), {})

        assert result.data == {"status": "healthy"}

    def test_summary_passthrough(self):
        summary = {"total_posts": 12, "published": 10, "drafts": 2}

        result = normalize(TOOL_CATALOG["ghost_posts_summary"], succeeded({"success": True, "data": summary}), {"days": 30})

        assert result.data == summary
        assert result.echo == {"days": 30}


class TestFailures:
    def test_backend_failure_verbatim_for_fast_tool(self):
        outcome = RawOutcome(kind=Outcome.BACKEND_FAILED, status_code=404, error="Post not found")

        result = normalize(TOOL_CATALOG["ghost_delete_post"], outcome, {"post_id": "x"})

        assert not result.ok
        assert result.outcome is Outcome.BACKEND_FAILED
        assert result.error == "Post not found"

    def test_backend_failure_for_slow_tool_adds_hint(self):
        outcome = RawOutcome(kind=Outcome.BACKEND_FAILED, error="Image generation failed")

        result = normalize(TOOL_CATALOG["ghost_update_post_image"], outcome, {"post_id": "p1"})

        assert result.error.startswith("Image generation failed")
        assert retry_hint(TOOL_CATALOG["ghost_update_post_image"]) in result.error
        assert "prefer_flux=true" in result.error
        assert "is_test" not in result.error

    def test_transport_failure(self):
        outcome = RawOutcome(kind=Outcome.TRANSPORT_FAILED, error="API call failed: Connection refused")

        result = normalize(TOOL_CATALOG["ghost_get_posts"], outcome, {})

        assert result.outcome is Outcome.TRANSPORT_FAILED
        assert result.error == "API call failed: Connection refused"

    def test_timeout_names_duration_and_hint(self):
        outcome = RawOutcome(
            kind=Outcome.TIMED_OUT, error="Request timed out after 300 seconds.", timeout_seconds=300
        )

        result = normalize(TOOL_CATALOG["ghost_create_post"], outcome, {"title": "T"})

        assert "300 seconds" in result.error
        assert retry_hint(TOOL_CATALOG["ghost_create_post"]) in result.error

    def test_failure_dict_shape(self):
        outcome = RawOutcome(kind=Outcome.BACKEND_FAILED, error="nope")

        payload = normalize(TOOL_CATALOG["ghost_delete_post"], outcome, {"post_id": "x"}).to_dict()

        assert payload["success"] is False
        assert payload["outcome"] == "backend_failed"
        assert payload["error"] == "nope"
        assert payload["input"] == {"post_id": "x"}
        assert "data" not in payload


SLOW_TOOL_REQUIRED_ARGS = {
    "ghost_create_post": {"title": "T", "content": "B"},
    "ghost_smart_create": {"user_input": "notes"},
    "ghost_update_post_image": {"post_id": "p1"},
}


class TestRetryHint:
    @pytest.mark.parametrize("name", sorted(SLOW_TOOL_REQUIRED_ARGS))
    def test_suggested_parameters_are_accepted_by_the_tool(self, name):
        descriptor = TOOL_CATALOG[name]
        assert descriptor.fast_path

        arguments = dict(SLOW_TOOL_REQUIRED_ARGS[name], **dict(descriptor.fast_path))

        validate_arguments(descriptor, arguments)

    @pytest.mark.parametrize("name", sorted(SLOW_TOOL_REQUIRED_ARGS))
    def test_hint_names_only_known_fields(self, name):
        descriptor = TOOL_CATALOG[name]
        hint = retry_hint(descriptor)

        for field in ("prefer_flux", "use_generated_feature_image", "is_test"):
            if field in hint:
                assert field in descriptor.input_model.model_fields

    def test_timed_out_image_update_retry_validates(self):
        descriptor = TOOL_CATALOG["ghost_update_post_image"]
        outcome = RawOutcome(
            kind=Outcome.TIMED_OUT, error="Request timed out after 300 seconds.", timeout_seconds=300
        )

        result = normalize(descriptor, outcome, {"post_id": "p1"})

        assert result.error.endswith("use a faster path: prefer_flux=true.")
        validate_arguments(descriptor, {"post_id": "p1", "prefer_flux": True})

    def test_create_post_lists_every_option(self):
        assert retry_hint(TOOL_CATALOG["ghost_create_post"]).endswith(
            "prefer_flux=true, use_generated_feature_image=false or is_test=true."
        )

    def test_fast_tool_timeout_has_plain_retry(self):
        outcome = RawOutcome(kind=Outcome.TIMED_OUT, error="Request timed out after 30 seconds.")

        result = normalize(TOOL_CATALOG["ghost_get_posts"], outcome, {})

        assert result.error == f"Request timed out after 30 seconds.\n\n{RETRY_HINT}"
