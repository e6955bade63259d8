"""Working set of clip edits and the merge into a single video."""

import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..config import config
from ..errors import ValidationError
from ..models import CaptionStyle, ClipEdit, GenerationJob, JobStatus
from .encoder import EncodeClip, Encoder, MergeRequest

logger = logging.getLogger(__name__)

MAX_FIRST_LINE = 60


def wrap_caption(text: str) -> str:
    """Split a caption into two lines of roughly equal length.

    Words fill the first line until it reaches half the text length. A first
    line longer than 60 characters gives half of its words to the second line.
    """
    words = text.split(" ")
    midpoint = len(text) // 2

    first: List[str] = []
    second: List[str] = []
    length = 0
    for word in words:
        if length < midpoint:
            first.append(word)
            length += len(word) + 1
        else:
            second.append(word)

    if len(" ".join(first)) > MAX_FIRST_LINE:
        half = len(first) // 2
        first, second = first[:half], first[half:] + second

    first_line = " ".join(first)
    second_line = " ".join(second)
    return f"{first_line}\n{second_line}" if second_line else first_line


class MediaHandle:
    """Temporary file holding merged video bytes.

    The file is deleted on ``release()`` or when the TTL expires, whichever
    comes first. Reading a released handle raises ValidationError.
    """

    def __init__(self, data: bytes, ttl: Optional[float] = None, suffix: str = ".mp4") -> None:
        fd, path = tempfile.mkstemp(prefix="storyreel-", suffix=suffix)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        self._path = Path(path)
        self._lock = threading.Lock()
        self._released = False
        self.ttl = config.merge_handle_ttl if ttl is None else ttl
        self._timer = threading.Timer(self.ttl, self.release)
        self._timer.daemon = True
        self._timer.start()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def released(self) -> bool:
        return self._released

    def read(self) -> bytes:
        with self._lock:
            if self._released:
                raise ValidationError("Merged video has expired; merge again")
            return self._path.read_bytes()

    def release(self) -> None:
        """Delete the temp file. Safe to call more than once."""
        with self._lock:
            if self._released:
                return
            self._released = True
            self._timer.cancel()
            self._path.unlink(missing_ok=True)
        logger.debug(f"Released merged video {self._path}")

    def __enter__(self) -> "MediaHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.release()


@dataclass
class MergeResult:
    """Merged video plus what went into it."""

    handle: MediaHandle
    clip_count: int
    size: int

    def read(self) -> bytes:
        return self.handle.read()

    def release(self) -> None:
        self.handle.release()


class AssemblyEngine:
    """Ordered working set of clip edits feeding the merge."""

    def __init__(self, encoder: Encoder, handle_ttl: Optional[float] = None) -> None:
        self._encoder = encoder
        self._handle_ttl = handle_ttl
        self._clips: List[ClipEdit] = []
        self._lock = threading.Lock()

    @property
    def clips(self) -> List[ClipEdit]:
        """Copies of the working set in order."""
        with self._lock:
            return [clip.model_copy(deep=True) for clip in self._clips]

    def add_clip(self, clip: Union[ClipEdit, str], included: bool = False) -> int:
        """Append a clip edit (or a bare URL) and return its index."""
        if isinstance(clip, str):
            clip = ClipEdit(clip_ref=clip, included=included)
        with self._lock:
            self._clips.append(clip.model_copy(deep=True))
            return len(self._clips) - 1

    def add_rendered(self, jobs: Iterable[GenerationJob], included: bool = True) -> List[int]:
        """Add the clips of succeeded jobs, skipping clips already present."""
        indices = []
        with self._lock:
            present = {clip.clip_ref for clip in self._clips}
            for job in sorted(jobs, key=lambda j: j.scene_number):
                if job.status != JobStatus.SUCCEEDED or not job.result:
                    continue
                if job.result in present:
                    continue
                self._clips.append(
                    ClipEdit(
                        clip_ref=job.result,
                        caption=job.narration or None,
                        included=included,
                        scene_number=job.scene_number,
                    )
                )
                present.add(job.result)
                indices.append(len(self._clips) - 1)
        logger.info(f"Added {len(indices)} rendered clip(s) to the working set")
        return indices

    def update_clip(self, index: int, **changes) -> ClipEdit:
        """Change fields of one clip edit; values are checked at merge time."""
        unknown = set(changes) - set(ClipEdit.model_fields)
        if unknown:
            raise ValidationError(f"Unknown clip fields: {sorted(unknown)}")
        with self._lock:
            self._check_index(index)
            updated = self._clips[index].model_copy(update=changes, deep=True)
            self._clips[index] = updated
            return updated.model_copy(deep=True)

    def remove_clip(self, index: int) -> ClipEdit:
        with self._lock:
            self._check_index(index)
            return self._clips.pop(index)

    def move_clip(self, index: int, new_index: int) -> None:
        with self._lock:
            self._check_index(index)
            self._check_index(new_index)
            clip = self._clips.pop(index)
            self._clips.insert(new_index, clip)

    def clear(self) -> None:
        with self._lock:
            self._clips.clear()

    def merge(
        self,
        caption_color: str = "#ffffff",
        caption_style: Union[CaptionStyle, str] = CaptionStyle.BOX,
        font: Optional[str] = None,
    ) -> MergeResult:
        """Merge the included clips, in working-set order, into one video.

        Args:
            caption_color: Color for every caption.
            caption_style: ``box`` or ``outline``.
            font: Optional font file for captions.

        Returns:
            MergeResult whose handle expires after the configured TTL.

        Raises:
            ValidationError: If nothing is included or any edit is malformed.
                The encoder is not called.
            CollaboratorUnavailable: If encoding fails.
        """
        try:
            caption_style = CaptionStyle(caption_style)
        except ValueError:
            raise ValidationError(f"Unknown caption style: {caption_style}")
        if not caption_color or not caption_color.strip():
            raise ValidationError("Caption color cannot be empty")

        selected = [clip for clip in self.clips if clip.included]
        if not selected:
            raise ValidationError("No clips selected for merge")

        for clip in selected:
            clip.check()

        request = MergeRequest(
            clips=[
                EncodeClip(
                    clip_ref=clip.clip_ref,
                    start=clip.start,
                    end=clip.end,
                    speed=clip.speed,
                    caption=wrap_caption(clip.caption.strip()) if clip.caption and clip.caption.strip() else None,
                )
                for clip in selected
            ],
            caption_color=caption_color,
            caption_style=caption_style,
            font=font,
        )

        logger.info(f"Merging {len(selected)} clip(s)")
        data = self._encoder.encode(request)
        handle = MediaHandle(data, ttl=self._handle_ttl)
        return MergeResult(handle=handle, clip_count=len(selected), size=len(data))

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._clips):
            raise ValidationError(f"Clip index {index} out of range")
