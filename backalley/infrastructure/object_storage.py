"""S3 Presigner: short-lived PUT URLs for image uploads on any S3-compatible endpoint.

Invariants:
    - URLs expire after `url_ttl_seconds` (default 10 minutes)
    - Content type and length are signed into the URL
    - botocore failures are mapped to ObjectStorageError (core/errors.py)
"""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from backalley.core.errors import ObjectStorageError

logger = logging.getLogger(__name__)


class S3Presigner:
    """ObjectStoragePresigner backed by boto3."""

    def __init__(
        self,
        endpoint_url: str,
        bucket: str,
        public_base_url: str,
        access_key_id: str,
        secret_access_key: str,
        region: str = "us-east-1",
        url_ttl_seconds: int = 600,
    ):
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self.url_ttl_seconds = url_ttl_seconds
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    def presign_put(self, object_key: str, content_type: str, size: int) -> str:
        try:
            return self._client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": object_key,
                    "ContentType": content_type,
                    "ContentLength": size,
                },
                ExpiresIn=self.url_ttl_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Presign failed for {object_key}: {e}")
            raise ObjectStorageError(str(e))

    def public_url(self, object_key: str) -> str:
        return f"{self.public_base_url}/{object_key}"
