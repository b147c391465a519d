"""Tests for the posture analysis client."""

import asyncio
import json

import pytest

from soulfit.chains.posture_chain import (
    FALLBACK_RECOMMENDATION,
    POSTURAL_AWARENESS,
    PostureAnalysisClient,
    derive_recommendations,
    render_findings,
)
from soulfit.errors import ResponseShapeError, ServiceCallError, ValidationError
from soulfit.schemas.posture import PostureFindings, PostureImage

from fakes import findings_payload, make_llm


def _analyze(llm, images):
    return asyncio.run(PostureAnalysisClient(llm=llm).analyze(images))


class TestImageValidation:
    def test_three_images_rejected_without_call(self, posture_images):
        llm = make_llm(findings_payload())
        del posture_images["bend_down"]

        with pytest.raises(ValidationError) as exc_info:
            _analyze(llm, posture_images)

        assert exc_info.value.message == "Please provide all 4 posture images"
        assert "bend_down" in exc_info.value.details
        llm.ainvoke.assert_not_called()

    def test_images_sent_in_role_order(self):
        images = {
            role: PostureImage(content_type="image/jpeg", data=role.encode())
            for role in ("side", "bend_down", "front", "back")
        }
        llm = make_llm(findings_payload())
        _analyze(llm, images)

        (messages,), _ = llm.ainvoke.call_args
        parts = messages[0].content
        assert parts[0]["type"] == "text"
        urls = [p["image_url"]["url"] for p in parts[1:]]
        expected = [images[r].to_data_url() for r in ("front", "back", "side", "bend_down")]
        assert urls == expected


class TestRecommendations:
    def test_rounded_shoulders(self):
        findings = PostureFindings.model_validate(
            findings_payload(shoulders="Rounded shoulders with protracted scapulae")
        )
        assert derive_recommendations(findings) == [
            "Strengthen middle trapezius and rhomboids",
            "Stretch chest muscles and anterior deltoids",
            POSTURAL_AWARENESS,
        ]

    def test_rules_apply_in_order(self):
        findings = PostureFindings.model_validate(
            findings_payload(head="Forward head", shoulders="rounded", lumbar="Anterior pelvic tilt")
        )
        recs = derive_recommendations(findings)
        assert recs == [
            "Focus on cervical spine alignment exercises",
            "Strengthen deep neck flexors",
            "Strengthen middle trapezius and rhomboids",
            "Stretch chest muscles and anterior deltoids",
            "Core stabilization exercises for pelvic alignment",
            POSTURAL_AWARENESS,
        ]

    def test_no_keywords_gives_single_recommendation(self):
        findings = PostureFindings.model_validate(findings_payload())
        assert derive_recommendations(findings) == [POSTURAL_AWARENESS]

    def test_render_has_three_sections(self):
        text = render_findings(PostureFindings.model_validate(findings_payload(head="Forward head")))
        assert text.startswith("Front/Back View Analysis:")
        assert "Side View Analysis:" in text
        assert "Bend-Down Analysis:" in text
        assert "- Head Posture: Forward head" in text


class TestAnalyze:
    def test_success(self, posture_images):
        llm = make_llm(findings_payload(shoulders="rounded"))
        result = _analyze(llm, posture_images)

        assert result.analysis.startswith("Front/Back View Analysis:")
        assert result.recommendations[-1] == POSTURAL_AWARENESS
        assert result.degraded is False
        llm.ainvoke.assert_called_once()

    def test_fenced_json_is_accepted(self, posture_images):
        llm = make_llm("```json\n" + json.dumps(findings_payload()) + "\n```")
        result = _analyze(llm, posture_images)
        assert result.recommendations == [POSTURAL_AWARENESS]

    def test_unparseable_reply_degrades_to_raw_text(self, posture_images):
        raw = "Posture looks mostly neutral with a slight forward head."
        result = _analyze(make_llm(raw), posture_images)

        assert result.analysis == raw
        assert result.recommendations == [FALLBACK_RECOMMENDATION]
        assert result.degraded is True

    def test_schema_mismatch_degrades(self, posture_images):
        result = _analyze(make_llm({"side_findings": {}}), posture_images)
        assert result.recommendations == [FALLBACK_RECOMMENDATION]

    def test_transport_failure(self, posture_images):
        with pytest.raises(ServiceCallError) as exc_info:
            _analyze(make_llm(ConnectionError("connection reset")), posture_images)

        assert exc_info.value.message == "Failed to analyze posture images"
        assert "connection reset" in exc_info.value.details

    def test_empty_reply(self, posture_images):
        with pytest.raises(ResponseShapeError) as exc_info:
            _analyze(make_llm("   "), posture_images)
        assert exc_info.value.details == "Empty response from model"
