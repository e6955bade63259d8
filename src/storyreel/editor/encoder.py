"""MoviePy-backed encoder that renders a merge request into an MP4."""

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

import requests
from moviepy import ColorClip, CompositeVideoClip, TextClip, VideoClip, VideoFileClip, concatenate_videoclips
from moviepy.video.fx import MultiplySpeed

from ..errors import CollaboratorUnavailable
from ..models import CaptionStyle

logger = logging.getLogger(__name__)

FRAME_SIZE = (1920, 1080)
FPS = 30
CAPTION_FONT_SIZE = 36
CAPTION_MARGIN = 120
# Black at 60% opacity; PIL takes alpha as 0..255
CAPTION_BOX_COLOR = (0, 0, 0, 153)


@dataclass
class EncodeClip:
    """One validated clip in a merge request."""

    clip_ref: str
    start: float
    end: float
    speed: float = 1.0
    caption: Optional[str] = None


@dataclass
class MergeRequest:
    """Everything the encoder needs to produce the merged video."""

    clips: List[EncodeClip] = field(default_factory=list)
    caption_color: str = "#ffffff"
    caption_style: CaptionStyle = CaptionStyle.BOX
    font: Optional[str] = None


class Encoder(Protocol):
    """Turns a merge request into encoded video bytes."""

    def encode(self, request: MergeRequest) -> bytes:
        ...


def caption_clip(
    text: str,
    duration: float,
    color: str = "#ffffff",
    style: CaptionStyle = CaptionStyle.BOX,
    font: Optional[str] = None,
) -> TextClip:
    """Create a bottom-centered caption clip.

    Args:
        text: Caption text, possibly spanning two lines.
        duration: How long the caption stays on screen.
        color: Text color.
        style: Box draws a translucent background, outline a black stroke.
        font: Optional font file.

    Returns:
        Positioned TextClip.
    """
    params = {
        "text": text,
        "font_size": CAPTION_FONT_SIZE,
        "color": color,
        "method": "label",
        "text_align": "center",
        "interline": 10,
    }
    if font:
        params["font"] = font

    if style == CaptionStyle.BOX:
        params["bg_color"] = CAPTION_BOX_COLOR
        params["margin"] = (6, 6)
    else:
        params["stroke_color"] = "black"
        params["stroke_width"] = 3

    text_clip = TextClip(**params).with_duration(duration)
    return text_clip.with_position(("center", FRAME_SIZE[1] - CAPTION_MARGIN - text_clip.h // 2))


def letterbox(clip: VideoClip, size: tuple = FRAME_SIZE) -> VideoClip:
    """Scale a clip to fit the frame, keeping its aspect ratio, and pad with black."""
    target_w, target_h = size
    scale = min(target_w / clip.w, target_h / clip.h)
    resized = clip.resized(scale)

    background = ColorClip(size=size, color=(0, 0, 0)).with_duration(resized.duration)
    return CompositeVideoClip([background, resized.with_position("center")], size=size)


class MoviePyEncoder:
    """Encode a merge request with MoviePy and ffmpeg."""

    def __init__(
        self,
        work_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
        preset: str = "medium",
    ) -> None:
        """Initialize the encoder.

        Args:
            work_dir: Directory for downloaded clips and output. A temporary
                directory is used per merge when None.
            session: HTTP session used to fetch clips.
            preset: x264 encoding preset.
        """
        self._work_dir = work_dir
        self._session = session or requests.Session()
        self._preset = preset

    def encode(self, request: MergeRequest) -> bytes:
        """Render the request and return the MP4 bytes.

        Raises:
            CollaboratorUnavailable: If a clip cannot be fetched or encoding fails.
        """
        with tempfile.TemporaryDirectory(dir=self._work_dir) as tmp:
            tmp_dir = Path(tmp)
            sources: List[VideoFileClip] = []
            try:
                segments = []
                for i, item in enumerate(request.clips):
                    local_path = self._download(item.clip_ref, tmp_dir / f"clip-{i}.mp4")
                    source = VideoFileClip(str(local_path))
                    sources.append(source)
                    segments.append(self._segment(source, item, request))

                video = concatenate_videoclips(segments, method="compose")
                output_path = tmp_dir / "merged.mp4"
                video.write_videofile(
                    str(output_path),
                    fps=FPS,
                    codec="libx264",
                    audio_codec="aac",
                    preset=self._preset,
                    logger=None,
                )
                data = output_path.read_bytes()
            except CollaboratorUnavailable:
                raise
            except Exception as e:
                logger.error(f"Encoding failed: {e}")
                raise CollaboratorUnavailable("encoder", str(e)) from e
            finally:
                for source in sources:
                    source.close()

        logger.info(f"Encoded {len(request.clips)} clip(s) into {len(data)} bytes")
        return data

    def _segment(self, source: VideoFileClip, item: EncodeClip, request: MergeRequest) -> VideoClip:
        end = min(item.end, source.duration) if source.duration else item.end
        clip = source.subclipped(item.start, end)
        if item.speed != 1.0:
            clip = clip.with_effects([MultiplySpeed(item.speed)])

        clip = letterbox(clip)
        if item.caption:
            caption = caption_clip(
                item.caption,
                clip.duration,
                color=request.caption_color,
                style=request.caption_style,
                font=request.font,
            )
            clip = CompositeVideoClip([clip, caption], size=FRAME_SIZE)
        return clip

    def _download(self, url: str, path: Path) -> Path:
        if url.startswith("file://"):
            return Path(url[len("file://"):])
        if not url.startswith(("http://", "https://")):
            return Path(url)

        logger.debug(f"Downloading clip: {url}")
        try:
            response = self._session.get(url, stream=True, timeout=120)
            response.raise_for_status()
            with open(path, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)
        except requests.RequestException as e:
            raise CollaboratorUnavailable("encoder", f"Failed to download {url}: {e}") from e
        return path
