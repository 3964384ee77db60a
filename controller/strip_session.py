"""
Strip session

Single authoritative owner of the strip inputs (style config, captures, logo).

Goals:
- Render on demand: callers change state, then ask for a render; nothing
  re-renders on its own
- Every render is a full redraw from an immutable snapshot of the inputs
- Renders are serialized, so concurrent requests never share a canvas
- The "logo required" rule applies to export only, never to previews
"""

import dataclasses
import logging
import threading
from typing import List, Optional, Sequence, Tuple

from PIL import Image

from controller.health import HealthCode, HealthStatus
from imaging.image_loader import MAX_UPLOAD_COUNT, MIN_UPLOAD_COUNT, validate_upload_count
from imaging.strip_config import StripConfig
from imaging.strip_errors import MissingLogoError, StripCreationError, UploadCountError
from imaging.strip_export import StripExport, encode_png, export_filename
from imaging.strip_renderer import compose_strip

logger = logging.getLogger(__name__)

MISSING_LOGO_MESSAGE = "Please upload the RiesBeads logo before downloading"


class StripSession:

    def __init__(self, config: Optional[StripConfig] = None):
        self._state_lock = threading.Lock()
        self._render_lock = threading.Lock()

        self._config = config or StripConfig()
        self._captures: List[Image.Image] = []
        self._render_error: Optional[str] = None

    # ---------- Public API ----------

    @property
    def config(self) -> StripConfig:
        with self._state_lock:
            return self._config

    @property
    def captures(self) -> List[Image.Image]:
        with self._state_lock:
            return list(self._captures)

    def get_status(self) -> dict:
        with self._state_lock:
            return {
                "frame_count": self._config.frame_count,
                "captures": len(self._captures),
                "complete": len(self._captures) >= self._config.frame_count,
                "has_logo": self._config.has_logo,
                "ready_to_export": self._config.has_logo,
            }

    def update_config(self, changes: dict) -> StripConfig:
        with self._state_lock:
            self._config = StripConfig.from_dict(changes, base=self._config)
            config = self._config
        logger.info("Config updated: %s", ", ".join(sorted(changes)) or "no changes")
        return config

    def add_capture(self, image: Image.Image) -> bool:
        """Append a single snapshot; ignored once every frame has a photo."""
        with self._state_lock:
            if len(self._captures) >= self._config.frame_count:
                return False
            self._captures.append(image)
            count = len(self._captures)
        logger.info("Capture %d added", count)
        return True

    def set_uploads(self, images: Sequence[Image.Image]) -> int:
        """Replace the captures with an uploaded batch and match the frame count to it."""
        if not validate_upload_count(len(images)):
            raise UploadCountError(
                f"Please upload {MIN_UPLOAD_COUNT}-{MAX_UPLOAD_COUNT} images (got {len(images)})"
            )

        count = len(images)
        with self._state_lock:
            self._config = dataclasses.replace(self._config, frame_count=count)
            self._captures = list(images)
        logger.info("Uploaded %d image(s)", count)
        return count

    def clear_captures(self) -> None:
        with self._state_lock:
            self._captures = []

    def set_logo(self, logo: Optional[Image.Image]) -> None:
        with self._state_lock:
            self._config = dataclasses.replace(self._config, logo=logo)
        logger.info("Logo %s", "set" if logo is not None else "removed")

    def render(self) -> Image.Image:
        return self._render(*self._snapshot())

    def export(self) -> StripExport:
        config, captures = self._snapshot()
        if not config.has_logo:
            logger.warning("Export refused: no logo")
            raise MissingLogoError(MISSING_LOGO_MESSAGE)

        strip = self._render(config, captures)
        return StripExport(filename=export_filename(), data=encode_png(strip))

    def get_health(self) -> HealthStatus:
        with self._state_lock:
            render_error = self._render_error
            has_logo = self._config.has_logo

        if render_error is not None:
            return HealthStatus.error(
                code=HealthCode.RENDER_FAILED,
                message=render_error,
                instructions=[
                    "Choose 2, 3 or 4 frames",
                    "Upload the photos again",
                ],
            )
        if not has_logo:
            return HealthStatus.warning(
                code=HealthCode.LOGO_MISSING,
                message=MISSING_LOGO_MESSAGE,
                instructions=["Upload the RiesBeads logo to brand the header and frames"],
            )
        return HealthStatus.ok()

    # ---------- Internals ----------

    def _snapshot(self) -> Tuple[StripConfig, List[Image.Image]]:
        with self._state_lock:
            return self._config, list(self._captures)

    def _render(self, config: StripConfig, captures: List[Image.Image]) -> Image.Image:
        with self._render_lock:
            try:
                strip = compose_strip(config, captures)
            except StripCreationError as e:
                logger.error("Strip render failed: %s", e)
                with self._state_lock:
                    self._render_error = str(e)
                raise

        with self._state_lock:
            self._render_error = None
        return strip
