"""
Tests for request, operation, and enum parsing.
"""

import pytest

from veo_continuity.api import (
    AspectRatio,
    ContinuationSource,
    GenerationRequest,
    ModelVariant,
    OperationHandle,
    Resolution,
)
from veo_continuity.api.google import GoogleVeoClient
from veo_continuity.core.config import ModelsConfig
from veo_continuity.core.exceptions import InvalidContinuationError, ValidationError


SOURCE = ContinuationSource(
    operation_name="models/veo-3.1-fast-generate-preview/operations/op1",
    video_uri="https://generativelanguage.googleapis.com/v1beta/files/op1:download?alt=media",
    aspect_ratio=AspectRatio.LANDSCAPE,
    resolution=Resolution.P720,
    model=ModelVariant.FAST,
)


class TestEnums:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("fast", ModelVariant.FAST),
            ("STANDARD", ModelVariant.STANDARD),
            ("veo-3.1-generate-preview", ModelVariant.STANDARD),
            (ModelVariant.FAST, ModelVariant.FAST),
        ],
    )
    def test_model_variant_parse(self, value, expected):
        assert ModelVariant.parse(value) is expected

    def test_aspect_ratio_and_resolution_parse(self):
        assert AspectRatio.parse("9:16") is AspectRatio.PORTRAIT
        assert Resolution.parse(" 1080p ") is Resolution.P1080

    @pytest.mark.parametrize("value", ["4:3", "", None, 720])
    def test_invalid_values_raise(self, value):
        with pytest.raises(ValidationError):
            AspectRatio.parse(value)


class TestGenerationRequest:
    def test_string_fields_are_normalized(self):
        request = GenerationRequest(prompt="  a red ball  ", model="standard", resolution="1080p", aspect_ratio="9:16")

        assert request.prompt == "a red ball"
        assert request.model is ModelVariant.STANDARD
        assert request.resolution is Resolution.P1080
        assert request.aspect_ratio is AspectRatio.PORTRAIT
        assert not request.is_continuation

    def test_continuation_overrides_aspect_ratio(self):
        request = GenerationRequest(prompt="next", aspect_ratio="9:16", continuation_source=SOURCE)

        assert request.is_continuation
        assert request.effective_aspect_ratio is AspectRatio.LANDSCAPE

    def test_long_prompt_is_not_truncated(self):
        prompt = "x" * 2500
        request = GenerationRequest(prompt=prompt + "\x07")

        assert request.prompt == prompt

    def test_blank_prompt_fails_validation(self):
        request = GenerationRequest(prompt=" \t ")
        with pytest.raises(ValidationError):
            request.validate()

    def test_source_without_uri_fails_validation(self):
        broken = ContinuationSource(
            operation_name="op",
            video_uri="",
            aspect_ratio=AspectRatio.LANDSCAPE,
            resolution=Resolution.P720,
            model=ModelVariant.FAST,
        )
        with pytest.raises(InvalidContinuationError):
            GenerationRequest(prompt="next", continuation_source=broken).validate()


class TestOperationHandle:
    def test_rest_shape(self):
        handle = OperationHandle.from_payload({
            "name": "operations/op1",
            "done": True,
            "response": {"generateVideoResponse": {"generatedSamples": [{"video": {"uri": "u1"}}]}},
        })
        assert handle.first_video() == {"uri": "u1"}

    def test_sdk_shape(self):
        handle = OperationHandle.from_payload({
            "name": "operations/op1",
            "done": True,
            "response": {"generatedVideos": [{"video": {"uri": "u2", "mimeType": "video/mp4"}}]},
        })
        assert handle.first_video()["uri"] == "u2"

    @pytest.mark.parametrize(
        "response",
        [None, {}, {"generatedVideos": []}, {"generateVideoResponse": {"generatedSamples": [{}]}}],
    )
    def test_no_video(self, response):
        handle = OperationHandle(name="op", done=True, response=response)
        assert handle.first_video() is None

    def test_pending_payload(self):
        handle = OperationHandle.from_payload({"name": "operations/op1"})
        assert not handle.done
        assert handle.error is None


class TestPayload:
    def test_continuation_payload_includes_video(self):
        client = GoogleVeoClient(models=ModelsConfig(standard="veo-custom"))
        request = GenerationRequest(
            prompt="next",
            model="standard",
            aspect_ratio="9:16",
            continuation_source=SOURCE,
        )

        payload = client._build_payload(request)

        assert client.model_id(request.model) == "veo-custom"
        assert payload["instances"][0]["video"] == {"uri": SOURCE.video_uri}
        assert payload["parameters"]["aspectRatio"] == "16:9"
