"""Tests for the MoviePy encoder, run against a tiny generated clip."""

import pytest
from moviepy import ColorClip, VideoFileClip

from storyreel.editor.encoder import (
    FRAME_SIZE,
    EncodeClip,
    MergeRequest,
    MoviePyEncoder,
    caption_clip,
    letterbox,
)
from storyreel.errors import CollaboratorUnavailable
from storyreel.models import CaptionStyle


@pytest.fixture(scope="module")
def source_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("clips") / "red.mp4"
    clip = ColorClip(size=(64, 48), color=(200, 0, 0), duration=2)
    clip.write_videofile(str(path), fps=10, codec="libx264", logger=None)
    clip.close()
    return path


@pytest.fixture
def encoder():
    return MoviePyEncoder(preset="ultrafast")


@pytest.mark.parametrize("style", [CaptionStyle.BOX, CaptionStyle.OUTLINE])
def test_caption_clip_renders(style):
    clip = caption_clip("Rain is falling\nover the harbor", 1.5, color="#ffcc00", style=style)
    assert clip.duration == pytest.approx(1.5)
    frame = clip.get_frame(0)
    assert frame.shape[0] == clip.h
    assert frame.shape[1] == clip.w


def test_letterbox_pads_to_frame(source_path):
    with VideoFileClip(str(source_path)) as source:
        boxed = letterbox(source)
        assert tuple(boxed.size) == FRAME_SIZE
        assert boxed.get_frame(0).shape == (FRAME_SIZE[1], FRAME_SIZE[0], 3)


def test_segment_trims_and_speeds_up(encoder, source_path):
    item = EncodeClip(str(source_path), start=0.5, end=1.5, speed=2.0, caption="Rain is falling")
    with VideoFileClip(str(source_path)) as source:
        segment = encoder._segment(source, item, MergeRequest(clips=[item]))
        assert segment.duration == pytest.approx((item.end - item.start) / item.speed, abs=0.05)
        assert tuple(segment.size) == FRAME_SIZE


def test_segment_clamps_end_to_source(encoder, source_path):
    item = EncodeClip(str(source_path), start=1.0, end=8.0)
    with VideoFileClip(str(source_path)) as source:
        segment = encoder._segment(source, item, MergeRequest(clips=[item]))
        assert segment.duration == pytest.approx(source.duration - 1.0, abs=0.1)


@pytest.mark.parametrize("style", [CaptionStyle.BOX, CaptionStyle.OUTLINE])
def test_encode_returns_mp4_bytes(encoder, source_path, style):
    request = MergeRequest(
        clips=[
            EncodeClip(str(source_path), start=0.0, end=1.0, caption="Rain is falling"),
            EncodeClip(f"file://{source_path}", start=0.5, end=1.5, speed=2.0),
        ],
        caption_style=style,
    )

    data = encoder.encode(request)

    assert data
    assert b"ftyp" in data[:64]


def test_encode_missing_clip_is_unavailable(encoder, tmp_path):
    request = MergeRequest(clips=[EncodeClip(str(tmp_path / "missing.mp4"), start=0.0, end=1.0)])
    with pytest.raises(CollaboratorUnavailable):
        encoder.encode(request)
