# courtinvite/core/storage.py
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from courtinvite.core.config import settings
from courtinvite.core.errors import StorageError

logger = logging.getLogger(__name__)

PAYMENT_PROOF_PREFIX = "payment-proofs"
COVER_IMAGE_PREFIX = "covers"


def get_s3_client():
    """
    Initializes and returns an S3 client.
    Conditionally configures the endpoint_url for local development with MinIO.
    """
    if settings.AWS_S3_ENDPOINT_URL:
        return boto3.client(
            "s3",
            endpoint_url=settings.AWS_S3_ENDPOINT_URL,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.AWS_S3_REGION,
        )
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_S3_REGION,
    )


def public_url_for(object_name: str) -> str:
    return f"{settings.S3_PUBLIC_BASE_URL}/{object_name}"


class ObjectStorage:
    """Thin wrapper over the S3 bucket holding covers and payment proofs."""

    def __init__(self, client=None, bucket: str | None = None):
        self._client = client
        self.bucket = bucket or settings.AWS_S3_BUCKET_NAME

    @property
    def client(self):
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    def upload_bytes(
        self,
        object_name: str,
        body: bytes,
        content_type: str,
        cache_control: str = "max-age=3600",
    ) -> str:
        """Upload raw bytes and return the public URL of the object."""
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_name,
                Body=body,
                ContentType=content_type,
                CacheControl=cache_control,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"Failed to upload object {object_name}: {e}",
                exc_info=True,
                extra={"bucket": self.bucket, "object_name": object_name},
            )
            raise StorageError("Failed to upload image. Please try again.") from e

        return public_url_for(object_name)

    def delete(self, object_name: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=object_name)
        except (ClientError, BotoCoreError) as e:
            # Orphaned objects are harmless; the caller already has a failure to report.
            logger.warning(f"Failed to delete object {object_name}: {e}")

    def generate_presigned_post(
        self, object_name: str, content_type: str, expires_in: int = 3600
    ) -> dict:
        """
        Generates a pre-signed URL and fields for an S3 POST request.
        """
        try:
            return self.client.generate_presigned_post(
                Bucket=self.bucket,
                Key=object_name,
                Fields={"Content-Type": content_type},
                Conditions=[{"Content-Type": content_type}],
                ExpiresIn=expires_in,
            )
        except ClientError as e:
            logger.error(f"Failed to generate pre-signed URL: {e}")
            raise StorageError("Could not prepare upload. Please try again.") from e


_storage: ObjectStorage | None = None


def get_storage() -> ObjectStorage:
    """FastAPI dependency returning the shared storage wrapper."""
    global _storage
    if _storage is None:
        _storage = ObjectStorage()
    return _storage
