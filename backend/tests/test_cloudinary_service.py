"""
Email Builder Backend — Cloudinary Upload Client Tests
=======================================================

What:  Tests for the format allow-list and the Cloudinary error mapping.
How:   The SDK's upload call is patched; nothing leaves the process.

What we test:
    ✅ jpg/jpeg/png/gif accepted regardless of case
    ✅ Anything else rejected before the SDK is called
    ✅ Upload options carry the folder, allow-list and credentials
    ✅ secure_url preferred, plain url as fallback
    ✅ Host format rejection → UnsupportedFormatError, other failures → UploadError
"""

import io
from unittest.mock import patch

import pytest
from cloudinary.exceptions import AuthorizationRequired, BadRequest, GeneralError

from emailbuilder.exceptions import UnsupportedFormatError, UploadError
from emailbuilder.services.cloudinary_service import CloudinaryUploader

UPLOAD_TARGET = "cloudinary.uploader.upload"

SECURE_URL = "https://res.cloudinary.com/test-cloud/image/upload/v1/email-images/abc123.png"


class TestFormatValidation:
    """Tests for MediaUploader.validate_format() via the Cloudinary client."""

    def setup_method(self):
        self.uploader = CloudinaryUploader("test-cloud", "key", "secret")

    @pytest.mark.parametrize("filename,expected", [
        ("photo.jpg", "jpg"),
        ("photo.jpeg", "jpeg"),
        ("logo.png", "png"),
        ("spinner.gif", "gif"),
        ("SHOUTING.PNG", "png"),
        ("Mixed.JpEg", "jpeg"),
        ("archive.tar.gif", "gif"),
    ])
    def test_allowed_formats(self, filename, expected):
        assert self.uploader.validate_format(filename) == expected

    @pytest.mark.parametrize("filename", [
        "scan.bmp",
        "document.pdf",
        "vector.svg",
        "photo.webp",
        "no_extension",
        "photo.png.exe",
        "",
        None,
    ])
    def test_rejected_formats(self, filename):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            self.uploader.validate_format(filename)
        assert "Allowed formats: jpg, png, jpeg, gif." in exc_info.value.message

    def test_rejection_names_the_extension(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            self.uploader.validate_format("scan.BMP")
        assert exc_info.value.extension == "bmp"
        assert "'bmp'" in exc_info.value.message


class TestConfiguration:

    def test_configured_with_all_credentials(self):
        assert CloudinaryUploader("cloud", "key", "secret").is_configured

    @pytest.mark.parametrize("cloud,key,secret", [
        ("", "key", "secret"),
        ("cloud", "", "secret"),
        ("cloud", "key", ""),
    ])
    def test_unconfigured_when_any_credential_missing(self, cloud, key, secret):
        assert not CloudinaryUploader(cloud, key, secret).is_configured

    def test_from_settings(self, test_settings):
        uploader = CloudinaryUploader.from_settings(test_settings)
        assert uploader.cloud_name == "test-cloud"
        assert uploader.folder == "email-images"
        assert uploader.is_configured


class TestUpload:
    """Tests for CloudinaryUploader.upload() with the SDK call patched."""

    def setup_method(self):
        self.uploader = CloudinaryUploader("test-cloud", "key", "secret", folder="email-images")

    @pytest.mark.asyncio
    async def test_upload_success(self, sample_image_bytes):
        stream = io.BytesIO(sample_image_bytes)
        with patch(UPLOAD_TARGET, return_value={
            "secure_url": SECURE_URL,
            "url": SECURE_URL.replace("https", "http"),
            "public_id": "email-images/abc123",
        }) as mock_upload:
            result = await self.uploader.upload(stream, "logo.png")

        assert result.url == SECURE_URL
        assert result.public_id == "email-images/abc123"

        args, kwargs = mock_upload.call_args
        assert args[0] is stream
        assert kwargs["folder"] == "email-images"
        assert kwargs["allowed_formats"] == ["jpg", "png", "jpeg", "gif"]
        assert kwargs["resource_type"] == "image"
        assert kwargs["cloud_name"] == "test-cloud"
        assert kwargs["api_key"] == "key"
        assert kwargs["api_secret"] == "secret"

    @pytest.mark.asyncio
    async def test_falls_back_to_plain_url(self, sample_image_bytes):
        with patch(UPLOAD_TARGET, return_value={"url": "http://res.cloudinary.com/x.gif"}):
            result = await self.uploader.upload(io.BytesIO(sample_image_bytes), "x.gif")
        assert result.url == "http://res.cloudinary.com/x.gif"

    @pytest.mark.asyncio
    async def test_response_without_url_is_an_upload_error(self, sample_image_bytes):
        with patch(UPLOAD_TARGET, return_value={"public_id": "email-images/x"}):
            with pytest.raises(UploadError):
                await self.uploader.upload(io.BytesIO(sample_image_bytes), "x.png")

    @pytest.mark.asyncio
    async def test_unsupported_extension_skips_the_host(self):
        with patch(UPLOAD_TARGET) as mock_upload:
            with pytest.raises(UnsupportedFormatError):
                await self.uploader.upload(io.BytesIO(b"BM..."), "scan.bmp")
        mock_upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_host_format_rejection(self, sample_image_bytes):
        """A .png whose content is not an image is rejected by Cloudinary itself."""
        with patch(UPLOAD_TARGET, side_effect=BadRequest("Image file format pdf not allowed")):
            with pytest.raises(UnsupportedFormatError) as exc_info:
                await self.uploader.upload(io.BytesIO(sample_image_bytes), "fake.png")
        assert exc_info.value.context["host_error"] == "Image file format pdf not allowed"

    @pytest.mark.asyncio
    async def test_other_bad_request_is_upload_error(self, sample_image_bytes):
        with patch(UPLOAD_TARGET, side_effect=BadRequest("Invalid image file")):
            with pytest.raises(UploadError) as exc_info:
                await self.uploader.upload(io.BytesIO(sample_image_bytes), "broken.jpg")
        assert exc_info.value.message == "Failed to upload image."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        GeneralError("Server returned unexpected status code - 502"),
        AuthorizationRequired("Invalid Signature"),
        OSError("Connection reset by peer"),
        ValueError("Must supply api_key"),
    ])
    async def test_host_failures_are_upload_errors(self, sample_image_bytes, error):
        with patch(UPLOAD_TARGET, side_effect=error):
            with pytest.raises(UploadError) as exc_info:
                await self.uploader.upload(io.BytesIO(sample_image_bytes), "photo.jpg")

        assert exc_info.value.message == "Failed to upload image."
        assert exc_info.value.context["error_type"] == type(error).__name__
        assert exc_info.value.context["filename"] == "photo.jpg"
