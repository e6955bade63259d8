"""Durable storage for rendered clips and merged videos."""

import logging
from pathlib import Path
from typing import Optional, Protocol

from google.cloud import storage
from google.api_core import exceptions as google_exceptions

from ..config import config
from ..errors import CollaboratorUnavailable, ValidationError

logger = logging.getLogger(__name__)


class Persistence(Protocol):
    """Write/read/delete named blobs; writes succeed or fail as a whole."""

    def write(self, name: str, data: bytes, content_type: str = "video/mp4") -> str:
        ...

    def read(self, ref: str) -> bytes:
        ...

    def delete(self, ref: str) -> None:
        ...


def scene_clip_path(principal: str, scenario_id: str, scene_number: int) -> str:
    """Object name for a scene's durable clip."""
    return f"users/{principal}/newsVideos/{scenario_id}/scene-{scene_number}.mp4"


def merged_video_path(principal: str, scenario_id: str, filename: str = "merged.mp4") -> str:
    """Object name for a merged video."""
    return f"users/{principal}/newsVideos/{scenario_id}/{filename}"


def parse_gcs_uri(gcs_uri: str) -> tuple[str, str]:
    """Split ``gs://bucket/path/to/file`` into bucket and blob name."""
    if not gcs_uri.startswith("gs://"):
        raise ValidationError(f"Invalid GCS URI: {gcs_uri}")

    uri_parts = gcs_uri[5:].split("/", 1)
    if len(uri_parts) != 2 or not uri_parts[1]:
        raise ValidationError(f"Invalid GCS URI format: {gcs_uri}")

    return uri_parts[0], uri_parts[1]


class GcsPersistence:
    """Google Cloud Storage backed persistence."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        project_id: Optional[str] = None,
        client: Optional[storage.Client] = None,
    ) -> None:
        """Initialize the storage client.

        Args:
            bucket: ``gs://`` bucket URI. Defaults to STORYREEL_BUCKET env var.
            project_id: Google Cloud project ID. Defaults to GOOGLE_CLOUD_PROJECT.
            client: Preconfigured storage client.
        """
        bucket = bucket or config.storage_bucket
        if not bucket or not bucket.startswith("gs://"):
            raise ValueError(
                f"Storage bucket must be a GCS URI starting with 'gs://'. Got: {bucket!r}"
            )
        self._bucket_name = bucket[5:].strip("/")
        self._client = client or storage.Client(project=project_id or config.google_cloud_project or None)
        logger.info(f"Initialized storage for bucket {self._bucket_name}")

    def write(self, name: str, data: bytes, content_type: str = "video/mp4") -> str:
        """Upload a blob and return its ``gs://`` reference."""
        try:
            blob = self._client.bucket(self._bucket_name).blob(name)
            blob.upload_from_string(data, content_type=content_type)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Upload of {name} failed: {e}")
            raise CollaboratorUnavailable("storage", str(e)) from e

        ref = f"gs://{self._bucket_name}/{name}"
        logger.info(f"Uploaded {len(data)} bytes to {ref}")
        return ref

    def read(self, ref: str) -> bytes:
        bucket_name, blob_name = parse_gcs_uri(ref)
        try:
            return self._client.bucket(bucket_name).blob(blob_name).download_as_bytes()
        except google_exceptions.NotFound:
            logger.error(f"File not found in GCS: {ref}")
            raise
        except google_exceptions.GoogleAPICallError as e:
            raise CollaboratorUnavailable("storage", str(e)) from e

    def delete(self, ref: str) -> None:
        bucket_name, blob_name = parse_gcs_uri(ref)
        try:
            self._client.bucket(bucket_name).blob(blob_name).delete()
        except google_exceptions.NotFound:
            logger.debug(f"Already deleted: {ref}")
        except google_exceptions.GoogleAPICallError as e:
            raise CollaboratorUnavailable("storage", str(e)) from e


class LocalPersistence:
    """Directory-backed persistence for offline runs."""

    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = Path(root or config.workspace / "storage")

    def write(self, name: str, data: bytes, content_type: str = "video/mp4") -> str:
        path = self._root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling then rename so readers never see a partial file
        tmp_path = path.with_suffix(path.suffix + ".part")
        try:
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise CollaboratorUnavailable("storage", str(e)) from e
        logger.info(f"Saved {len(data)} bytes to {path}")
        return path.resolve().as_uri()

    def read(self, ref: str) -> bytes:
        return self._path(ref).read_bytes()

    def delete(self, ref: str) -> None:
        self._path(ref).unlink(missing_ok=True)

    def _path(self, ref: str) -> Path:
        if ref.startswith("file://"):
            return Path(ref[len("file://"):])
        return self._root / ref
