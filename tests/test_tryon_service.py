"""Tests for the caller-side try-on flow and error descriptions."""

from unittest.mock import MagicMock

import pytest

from conftest import FakeIdentity, ScriptedTransport
from tryon_agent.core import Orchestrator, TryOnService, describe_error
from tryon_agent.models import (
    ClothingState,
    ClothingType,
    FitStyle,
    OutfitRecord,
    UserSession,
)
from tryon_agent.utils.errors import (
    AuthenticationError,
    Cancelled,
    FatalHttpError,
    NoImageInResponseError,
    RetryableHttpError,
    StorageError,
)


async def _no_sleep(seconds):
    return None


def _service(responses, user=None, store=None):
    orchestrator = Orchestrator(ScriptedTransport(responses), sleep=_no_sleep)
    return TryOnService(orchestrator, FakeIdentity(user), store or MagicMock())


class TestDescribeError:

    def test_retryable_suggests_retry(self):
        message = describe_error(RetryableHttpError(503))

        assert message.retry_suggested
        assert "try again" in message.message.lower()

    def test_rate_limit_message(self):
        assert "Too many requests" in describe_error(RetryableHttpError(429)).message

    def test_fatal_does_not_suggest_retry(self):
        fatal = describe_error(FatalHttpError(400))
        retryable = describe_error(RetryableHttpError(502))

        assert not fatal.retry_suggested
        assert fatal.message != retryable.message

    def test_no_image(self):
        message = describe_error(NoImageInResponseError("empty"))

        assert not message.retry_suggested
        assert "did not return an image" in message.message

    def test_cancelled_has_no_message(self):
        assert describe_error(Cancelled("gone")) is None

    def test_not_signed_in(self):
        assert "signed in" in describe_error(AuthenticationError("x")).message

    def test_storage(self):
        assert describe_error(StorageError("disk full")).message == "Failed to save to cloud: disk full"


class TestKeepResult:

    async def test_uploads_and_records(self, ok_response, person_image, clothing_image, output_image):
        store = MagicMock()
        store.upload_image.return_value = "https://cdn.test/user_1/x.png"
        store.save_outfit_record.return_value = OutfitRecord(
            id="o1",
            user_id="user_1",
            image_url="https://cdn.test/user_1/x.png",
            clothing_type=ClothingType.HOODIE,
            fit_style=FitStyle.OVERSIZE,
            clothing_state=ClothingState.CLOSED,
        )
        service = _service([ok_response], user=UserSession(user_id="user_1"), store=store)

        result = await service.try_on(
            person_image, clothing_image, ClothingType.HOODIE, FitStyle.OVERSIZE, ClothingState.CLOSED
        )
        record = await service.keep_result(
            result, ClothingType.HOODIE, FitStyle.OVERSIZE, ClothingState.CLOSED
        )

        assert record.id == "o1"
        store.upload_image.assert_called_once_with(output_image, "user_1", "image/png")
        store.save_outfit_record.assert_called_once_with(
            "user_1",
            "https://cdn.test/user_1/x.png",
            ClothingType.HOODIE,
            FitStyle.OVERSIZE,
            ClothingState.CLOSED,
        )

    async def test_requires_signed_in_user(self, ok_response, person_image, clothing_image):
        store = MagicMock()
        service = _service([ok_response], store=store)
        result = await service.try_on(
            person_image, clothing_image, ClothingType.PANTS, FitStyle.REGULAR, ClothingState.CLOSED
        )

        with pytest.raises(AuthenticationError):
            await service.keep_result(result, ClothingType.PANTS, FitStyle.REGULAR, ClothingState.CLOSED)
        store.upload_image.assert_not_called()

    async def test_explicit_user_overrides_remembered_one(self, ok_response, person_image,
                                                          clothing_image, output_image):
        store = MagicMock()
        service = _service([ok_response], user=UserSession(user_id="user_1"), store=store)
        result = await service.try_on(
            person_image, clothing_image, ClothingType.PANTS, FitStyle.REGULAR, ClothingState.CLOSED
        )

        await service.keep_result(
            result, ClothingType.PANTS, FitStyle.REGULAR, ClothingState.CLOSED,
            user=UserSession(user_id="user_2"),
        )

        store.upload_image.assert_called_once_with(output_image, "user_2", "image/png")
        assert store.save_outfit_record.call_args.args[0] == "user_2"

    async def test_failed_result_cannot_be_kept(self, status_response, person_image, clothing_image):
        store = MagicMock()
        service = _service([status_response(400)], user=UserSession(user_id="user_1"), store=store)
        result = await service.try_on(
            person_image, clothing_image, ClothingType.SKIRT, FitStyle.TIGHT, ClothingState.CLOSED
        )

        with pytest.raises(FatalHttpError):
            await service.keep_result(result, ClothingType.SKIRT, FitStyle.TIGHT, ClothingState.CLOSED)
        store.upload_image.assert_not_called()
