"""Storage of uploaded book images in the directory served under /uploads."""

import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"
ALLOWED_IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp"})


class UploadRejectedError(Exception):
    """Raised when an uploaded file has a disallowed type or size."""

    def __init__(self, message: str, status_code: int = 422) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def save_image(content: bytes, filename: str, uploads_dir: Path, max_bytes: int) -> str:
    """
    Write an image under a random name and return its public path (/uploads/<name>).

    The client's filename only contributes its extension.
    """
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise UploadRejectedError(
            f"Image must be one of: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}."
        )
    if not content:
        raise UploadRejectedError("Uploaded file is empty.")
    if len(content) > max_bytes:
        raise UploadRejectedError(
            f"File size must not exceed {max_bytes} bytes.", status_code=413
        )
    uploads_dir.mkdir(parents=True, exist_ok=True)
    name = f"{uuid.uuid4().hex}{ext}"
    (uploads_dir / name).write_bytes(content)
    return f"{UPLOADS_URL_PREFIX}/{name}"


def remove_image(public_path: str | None, uploads_dir: Path) -> bool:
    """Delete a previously saved image. Paths outside uploads_dir are ignored."""
    if not public_path or not public_path.startswith(UPLOADS_URL_PREFIX + "/"):
        return False
    name = public_path[len(UPLOADS_URL_PREFIX) + 1 :]
    root = uploads_dir.resolve()
    target = (root / name).resolve()
    if target.parent != root:
        logger.warning("Refusing to remove image outside uploads directory: %s", public_path)
        return False
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    return True
