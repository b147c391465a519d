import pytest

from soulfit.schemas.posture import POSTURE_ROLES, PostureImage


@pytest.fixture
def image():
    return PostureImage(content_type="image/png", filename="photo.png", data=b"\x89PNG fake")


@pytest.fixture
def posture_images(image):
    return {role: image for role in POSTURE_ROLES}
