"""Turn multipart uploads into PostureImage records."""

from __future__ import annotations

import re

from starlette.datastructures import FormData, UploadFile

from .errors import ValidationError
from .schemas.posture import POSTURE_ROLES, PostureImage

IMAGE_FIELD_SUFFIX = "Image"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


async def read_image(upload: UploadFile) -> PostureImage:
    return PostureImage(
        content_type=upload.content_type or "application/octet-stream",
        filename=upload.filename,
        data=await upload.read(),
    )


def role_from_field(field: str) -> str:
    """'bendDownImage' -> 'bend_down'."""
    stem = field[: -len(IMAGE_FIELD_SUFFIX)]
    return _CAMEL_BOUNDARY.sub("_", stem).lower()


async def posture_images_from_form(
    form: FormData, require_all: bool = True
) -> dict[str, PostureImage]:
    """Collect parts named ``<role>Image``.

    With ``require_all`` exactly four parts are required; otherwise any
    subset of known roles is accepted.
    """
    uploads = [
        (key, value)
        for key, value in form.multi_items()
        if key.endswith(IMAGE_FIELD_SUFFIX) and isinstance(value, UploadFile)
    ]
    if require_all and len(uploads) != 4:
        raise ValidationError(
            "Please provide all 4 posture images",
            details=f"Received {len(uploads)} image(s)",
        )
    images = {role_from_field(key): await read_image(value) for key, value in uploads}
    unknown = [role for role in images if role not in POSTURE_ROLES]
    if not require_all and unknown:
        raise ValidationError("Unknown posture image role", details=", ".join(unknown))
    return images


async def report_image_from_form(form: FormData) -> PostureImage:
    upload = form.get("reportImage")
    if not isinstance(upload, UploadFile):
        raise ValidationError("Please provide a body composition report image")
    return await read_image(upload)
