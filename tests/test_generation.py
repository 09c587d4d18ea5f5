"""Tests for request validation, prompt composition and inline images."""

import base64

import pytest
from pydantic import ValidationError

from turbocontent.core.domain.exceptions import InvalidRequestError
from turbocontent.core.domain.generation import compose_social_post_prompt, parse_inline_image
from turbocontent.core.domain.schemas import GenerateRequest
from turbocontent.usecases.generate_content import build_prompt


class TestGenerateRequest:
    def test_brief_fields_accepted(self):
        req = GenerateRequest(topic="coffee", goal="sell beans", platform="Instagram", tone="playful")
        assert req.is_brief

    def test_raw_prompt_accepted(self):
        req = GenerateRequest(prompt="Write a haiku")
        assert not req.is_brief

    def test_missing_brief_field_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerateRequest(topic="coffee", goal="sell", platform="X")
        assert "topic, goal, platform, and tone are required" in str(exc_info.value)

    def test_blank_prompt_needs_brief(self):
        with pytest.raises(ValidationError):
            GenerateRequest(prompt="   ")

    def test_temperature_bounds(self):
        with pytest.raises(ValidationError):
            GenerateRequest(prompt="x", temperature=2.5)


class TestPromptComposition:
    def test_fields_interpolated(self):
        prompt = compose_social_post_prompt(
            topic=" Coffee ", goal="sell beans", platform="LinkedIn", tone="formal",
        )
        assert 'about the topic: "Coffee".' in prompt
        assert 'The goal of the posts is to "sell beans".' in prompt
        assert "The target platform is LinkedIn." in prompt
        assert "The desired tone is formal." in prompt
        assert prompt.endswith("Return the response as a markdown")

    def test_build_prompt_uses_raw_prompt(self):
        assert build_prompt(GenerateRequest(prompt="Just this")) == "Just this"

    def test_build_prompt_composes_brief(self):
        req = GenerateRequest(topic="t", goal="g", platform="p", tone="n")
        assert build_prompt(req).startswith('Generate social media post about the topic: "t".')


class TestParseInlineImage:
    def test_data_url(self):
        raw = "data:image/jpeg;base64," + base64.b64encode(b"jpegbytes").decode()
        image = parse_inline_image(raw)
        assert image.data == b"jpegbytes"
        assert image.mime_type == "image/jpeg"

    def test_bare_base64_defaults_to_png(self):
        image = parse_inline_image(base64.b64encode(b"pngbytes").decode())
        assert image.mime_type == "image/png"

    def test_invalid_base64(self):
        with pytest.raises(InvalidRequestError):
            parse_inline_image("not*base64!")

    def test_empty_payload(self):
        with pytest.raises(InvalidRequestError):
            parse_inline_image("data:image/png;base64,")
