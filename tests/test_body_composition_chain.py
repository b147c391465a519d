"""Tests for body-composition report extraction."""

import asyncio

import pytest

from soulfit.chains.body_composition_chain import BodyCompositionClient, remap_report
from soulfit.errors import ResponseShapeError, ServiceCallError, ValidationError
from soulfit.schemas.health import ExtractedReport
from soulfit.schemas.posture import PostureImage

from fakes import extraction_payload, make_llm


def _extract(llm, image):
    return asyncio.run(BodyCompositionClient(llm=llm).extract(image))


class TestRemap:
    def test_full_report(self):
        report = remap_report(ExtractedReport.model_validate(extraction_payload()))

        assert report.height == 172
        assert report.weight == 64.3
        assert report.gender == "Female"
        assert report.intracellular_fluid == 20.1
        assert report.lean_body_mass == 44.0
        assert report.muscle_mass == 24.8
        assert report.skeletal_muscle_mass == 24.8
        assert report.visceral_fat_area == 62.0
        assert report.body_water_fat_free_ratio == 0.73
        assert report.segmental_data.torso.muscle == 19.5
        assert report.segmental_data.left_leg.fat == 3.6
        assert report.nutritional_assessment.fat == "High"
        assert report.previous_fat_percentage == 33.0

    def test_absent_values_stay_absent(self):
        report = remap_report(
            ExtractedReport.model_validate({"basic_info": {"height_cm": 165}})
        )

        assert report.height == 165
        assert report.weight is None
        assert report.bmi is None
        assert report.segmental_data is None
        assert report.exercise_recommendations is None

    def test_empty_extraction(self):
        report = remap_report(ExtractedReport())
        assert report.model_dump(exclude_none=True) == {}


class TestExtract:
    def test_success(self, image):
        llm = make_llm(extraction_payload())
        report = _extract(llm, image)

        assert report.height == 172
        assert report.weight == 64.3
        (messages,), _ = llm.ainvoke.call_args
        assert messages[0].content[1]["image_url"]["url"] == image.to_data_url()

    def test_missing_image(self):
        llm = make_llm(extraction_payload())
        with pytest.raises(ValidationError):
            _extract(llm, None)
        llm.ainvoke.assert_not_called()

    def test_empty_image(self):
        llm = make_llm(extraction_payload())
        with pytest.raises(ValidationError):
            _extract(llm, PostureImage(content_type="image/png", data=b""))
        llm.ainvoke.assert_not_called()

    def test_invalid_json_is_fatal(self, image):
        with pytest.raises(ResponseShapeError) as exc_info:
            _extract(make_llm("I could not read this report."), image)
        assert exc_info.value.message == "Failed to extract data from body composition report"

    def test_out_of_range_height_is_fatal(self, image):
        payload = extraction_payload()
        payload["basic_info"]["height_cm"] = 1720
        with pytest.raises(ResponseShapeError):
            _extract(make_llm(payload), image)

    def test_transport_failure(self, image):
        with pytest.raises(ServiceCallError):
            _extract(make_llm(TimeoutError("timed out")), image)
