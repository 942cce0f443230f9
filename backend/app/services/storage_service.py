# app/services/storage_service.py

import os
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from app.core.config import settings
from app.core.logger import logger
from app.utils.helpers import unique_storage_name

R2_PREFIX = "r2:"


class StorageService:
    """
    Document storage: Cloudflare R2 (S3 API) when configured, otherwise
    the local upload directory.

    ``Document.file_path`` holds either ``r2:<key>`` or a local path.
    """

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.bucket = settings.R2_BUCKET_NAME
        self._s3_client = None

    @property
    def use_r2(self) -> bool:
        return settings.r2_configured

    @property
    def s3_client(self):
        if self._s3_client is None:
            self._s3_client = boto3.client(
                's3',
                endpoint_url=settings.r2_endpoint_url,
                region_name='auto',
                aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY
            )
        return self._s3_client

    @staticmethod
    def is_r2_path(file_path: str) -> bool:
        return (file_path or "").startswith(R2_PREFIX)

    def save(self, payload: bytes, original_name: str, content_type: Optional[str] = None) -> str:
        """Store bytes and return the value for ``Document.file_path``."""
        name = unique_storage_name(original_name)

        if self.use_r2:
            key = f"documents/{name}"
            try:
                self.s3_client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=payload,
                    ContentType=content_type or "application/octet-stream",
                )
            except ClientError as e:
                logger.error(f"R2 upload failed for {key}: {str(e)}")
                raise
            logger.info(f"Uploaded to R2: {key} ({len(payload)} bytes)")
            return f"{R2_PREFIX}{key}"

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_dir / name
        path.write_bytes(payload)
        logger.info(f"Stored upload locally: {path} ({len(payload)} bytes)")
        return str(path)

    def exists(self, file_path: str) -> bool:
        if self.is_r2_path(file_path):
            try:
                self.s3_client.head_object(Bucket=self.bucket, Key=file_path[len(R2_PREFIX):])
                return True
            except ClientError:
                return False
        return os.path.exists(file_path)

    def generate_download_url(self, file_path: str, expires_in: int = 3600) -> str:
        """
        Generate pre-signed URL for GET operation (download).
        """
        key = file_path[len(R2_PREFIX):]
        try:
            url = self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': key},
                ExpiresIn=expires_in
            )
        except ClientError as e:
            logger.error(f"Failed to generate download URL: {str(e)}")
            raise
        logger.info(f"Generated download URL for: {key}")
        return url


storage_service = StorageService()
