"""Tests for provider parameter validation."""

import pytest

from storyreel.errors import ValidationError
from storyreel.models import HailuoParams, KlingParams, Veo3Params, parse_params


def test_parse_dispatches_on_provider_id():
    assert isinstance(parse_params({"provider_id": "kling-v2"}), KlingParams)
    assert isinstance(parse_params({"provider_id": "veo-3"}), Veo3Params)
    assert isinstance(parse_params({"provider_id": "hailuo-02"}), HailuoParams)


def test_defaults():
    params = parse_params({"provider_id": "kling-v2"})
    assert params.duration == 5
    assert params.cfg_scale == 0.5
    assert params.aspect_ratio == "16:9"


@pytest.mark.parametrize(
    "data",
    [
        {"provider_id": "sora"},
        {},
        {"provider_id": "kling-v2", "duration": 7},
        {"provider_id": "kling-v2", "cfg_scale": 1.5},
        {"provider_id": "kling-v2", "aspect_ratio": "4:3"},
        {"provider_id": "veo-3", "resolution": "4k"},
        {"provider_id": "hailuo-02", "duration": 8},
    ],
)
def test_invalid_params_rejected(data):
    with pytest.raises(ValidationError):
        parse_params(data)


def test_hailuo_ten_seconds_requires_768p():
    with pytest.raises(ValidationError):
        parse_params({"provider_id": "hailuo-02", "duration": 10, "resolution": "1080p"})
    params = parse_params({"provider_id": "hailuo-02", "duration": 10, "resolution": "768p"})
    assert params.duration == 10


def test_seed_support():
    assert KlingParams.supports_seed_image
    assert HailuoParams.supports_seed_image
    assert not Veo3Params.supports_seed_image
