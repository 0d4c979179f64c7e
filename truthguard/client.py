"""
Client-side submission flow.

Collects text and/or an image, uploads the image to object storage,
calls the analysis endpoint and keeps the outcome in a single
`SubmissionState` value. Each user action swaps the whole state, so a
reader never sees a half-updated mix of old and new fields.
"""

import mimetypes
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from .config import ClientSettings
from .errors import AnalysisFailed, InputRejected, StorageError
from .schemas import AnalysisResult
from .storage import ObjectStorage, make_object_key


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = "default"  # or "destructive"


@dataclass(frozen=True)
class ImageFile:
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path) -> "ImageFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content_type=content_type or "application/octet-stream", data=path.read_bytes())


@dataclass(frozen=True)
class SubmissionState:
    text: str = ""
    image: Optional[ImageFile] = None
    in_flight: bool = False
    result: Optional[AnalysisResult] = None
    notification: Optional[Notification] = None


def validate_image(image: ImageFile, max_bytes: int) -> None:
    if not image.content_type.startswith("image/"):
        raise InputRejected("Invalid File Type", "Please upload an image file (JPG, PNG, WEBP, etc.)")
    if image.size > max_bytes:
        raise InputRejected("File Too Large", f"Please upload an image smaller than {max_bytes // (1024 * 1024)}MB")


class ContentSubmitter:
    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Optional[ClientSettings] = None,
        storage: Optional[ObjectStorage] = None,
    ) -> None:
        self._client = client
        self._settings = settings or ClientSettings()
        if storage is None and self._settings.storage_url:
            storage = ObjectStorage(client, self._settings.storage_url, self._settings.storage_key, self._settings.bucket)
        self._storage = storage
        self._state = SubmissionState()

    @property
    def state(self) -> SubmissionState:
        return self._state

    def set_text(self, text: str) -> SubmissionState:
        self._state = replace(self._state, text=text)
        return self._state

    def select_image(self, image: ImageFile) -> SubmissionState:
        """Validate and select an image. A rejected file leaves the selection as it was."""
        try:
            validate_image(image, self._settings.max_image_bytes)
        except InputRejected as e:
            logger.warning("Rejected image {}: {}", image.name, e.description)
            self._state = replace(self._state, notification=Notification(e.title, e.description, "destructive"))
            raise
        self._state = replace(self._state, image=image, result=None)
        return self._state

    def clear_image(self) -> SubmissionState:
        self._state = replace(self._state, image=None, result=None)
        return self._state

    async def submit(self) -> SubmissionState:
        state = self._state
        if state.in_flight:
            return state

        text = state.text.strip()
        if not text and state.image is None:
            self._state = replace(
                state,
                notification=Notification(
                    "Input Required", "Please enter text or upload an image to analyze.", "destructive"
                ),
            )
            return self._state

        self._state = replace(state, in_flight=True, result=None, notification=None)
        try:
            image_url = await self._upload(state.image) if state.image is not None else None
            result = await self._analyze(text or None, image_url)
        except Exception as e:
            logger.exception("Analysis error: {}", e)
            self._state = replace(
                self._state,
                notification=Notification(
                    "Analysis Failed", str(e) or "Failed to analyze content. Please try again.", "destructive"
                ),
            )
        else:
            self._state = replace(
                self._state,
                result=result,
                notification=Notification("Analysis Complete", "The content has been analyzed successfully."),
            )
        finally:
            self._state = replace(self._state, in_flight=False)
        return self._state

    async def _upload(self, image: ImageFile) -> str:
        if self._storage is None:
            raise StorageError("Object storage is not configured (set SUPABASE_URL)")
        key = make_object_key(image.name)
        await self._storage.upload(key, image.data, image.content_type)
        return self._storage.public_url(key)

    async def _analyze(self, text: Optional[str], image_url: Optional[str]) -> AnalysisResult:
        headers = {}
        if self._settings.storage_key:
            headers = {"Authorization": f"Bearer {self._settings.storage_key}", "apikey": self._settings.storage_key}
        r = await self._client.post(
            self._settings.endpoint_url,
            json={"text": text, "imageUrl": image_url},
            headers=headers,
            timeout=self._settings.request_timeout,
        )
        try:
            body = r.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("error"):
            raise AnalysisFailed(str(body["error"]))
        if not r.is_success:
            raise AnalysisFailed(f"Analysis endpoint returned status {r.status_code}")
        if not isinstance(body, dict):
            raise AnalysisFailed("Analysis endpoint returned a non-JSON body")
        try:
            return AnalysisResult.model_validate(body)
        except ValidationError as e:
            raise AnalysisFailed(f"Unexpected analysis result: {e}") from e
