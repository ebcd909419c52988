"""Tests for response classification."""

import json

import pytest

from tryon_agent.core.classifier import classify_response
from tryon_agent.models import Outcome
from tryon_agent.utils.errors import (
    FatalHttpError,
    ImageDecodeError,
    MalformedResponseError,
    NoImageInResponseError,
    RetryableHttpError,
)


@pytest.mark.parametrize("status_code", [429, 502, 503, 504])
def test_retryable_status_codes(status_code):
    result = classify_response(status_code, b"")

    assert result.outcome == Outcome.RETRYABLE
    assert isinstance(result.error, RetryableHttpError)
    assert result.error.status_code == status_code


@pytest.mark.parametrize("status_code", [201, 204, 301, 400, 401, 403, 404, 408, 413, 500, 501, 505])
def test_other_status_codes_are_fatal(status_code):
    result = classify_response(status_code, b'{"candidates": []}')

    assert result.outcome == Outcome.FATAL
    assert isinstance(result.error, FatalHttpError)
    assert result.error.status_code == status_code


def test_success(body_factory, output_image):
    result = classify_response(200, body_factory(output_image))

    assert result.outcome == Outcome.SUCCESS
    assert result.error is None
    assert result.image.image_bytes == output_image
    assert result.image.mime_type == "image/png"
    assert (result.image.width, result.image.height) == (20, 30)


def test_success_with_camel_case_keys(body_factory, output_image):
    result = classify_response(200, body_factory(output_image, camel_case=True))

    assert result.outcome == Outcome.SUCCESS
    assert result.image.image_bytes == output_image


def test_image_found_after_text_part(output_image, body_factory):
    body = json.loads(body_factory(output_image))
    body["candidates"][0]["content"]["parts"].insert(0, {"text": "Here is your image"})

    result = classify_response(200, json.dumps(body))

    assert result.outcome == Outcome.SUCCESS


def test_empty_candidates_is_no_image():
    result = classify_response(200, b'{"candidates": []}')

    assert result.outcome == Outcome.FATAL
    assert isinstance(result.error, NoImageInResponseError)


def test_text_only_candidate_is_no_image():
    body = {"candidates": [{"content": {"parts": [{"text": "I cannot do that"}]}}]}

    result = classify_response(200, json.dumps(body).encode())

    assert isinstance(result.error, NoImageInResponseError)


@pytest.mark.parametrize("body", [
    b"<html>oops</html>",
    b"",
    b"[]",
    b'{"promptFeedback": {"blockReason": "SAFETY"}}',
    b'{"candidates": [{"finishReason": "STOP"}]}',
])
def test_malformed_bodies(body):
    result = classify_response(200, body)

    assert result.outcome == Outcome.FATAL
    assert isinstance(result.error, MalformedResponseError)


def test_invalid_base64_is_decode_error():
    body = {"candidates": [{"content": {"parts": [
        {"inline_data": {"mime_type": "image/png", "data": "%%% not base64 %%%"}}
    ]}}]}

    result = classify_response(200, json.dumps(body).encode())

    assert result.outcome == Outcome.FATAL
    assert isinstance(result.error, ImageDecodeError)


def test_base64_that_is_not_an_image_is_decode_error(body_factory):
    result = classify_response(200, body_factory(b"plain text, not pixels"))

    assert result.outcome == Outcome.FATAL
    assert isinstance(result.error, ImageDecodeError)


def test_classification_is_pure(body_factory, output_image):
    body = body_factory(output_image)

    first = classify_response(200, body)
    second = classify_response(200, body)

    assert first.image == second.image


def test_image_past_pixel_limit_is_decode_error(body_factory, oversized_image):
    result = classify_response(200, body_factory(oversized_image))

    assert result.outcome == Outcome.FATAL
    assert isinstance(result.error, ImageDecodeError)
