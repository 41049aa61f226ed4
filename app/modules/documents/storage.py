import boto3
from botocore.exceptions import ClientError
from app.config import settings
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class S3Storage:
    """Objects live under <prefix>/<key> in the configured S3 bucket."""

    def __init__(self, prefix: str):
        if not settings.s3_configured:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name
        self.prefix = prefix.strip("/")

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload file to S3 and return the S3 URL"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=self._key(key),
                Body=file_content,
                ContentType=content_type
            )
            return f"s3://{self.bucket_name}/{self._key(key)}"
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise

    def delete_file(self, key: str) -> bool:
        """Delete file from S3"""
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._key(key))
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False


class SupabaseStorage:
    """Supabase Storage bucket, used when S3 is not configured."""

    def __init__(self, supabase: Client, bucket: str):
        self.supabase = supabase
        self.bucket_name = bucket

    def upload_file(self, file_content: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Upload file to the bucket and return its public URL"""
        bucket = self.supabase.storage.from_(self.bucket_name)
        try:
            bucket.upload(key, file_content, file_options={"content-type": content_type})
        except Exception as e:
            logger.error(f"Failed to upload file to Supabase Storage: {str(e)}")
            raise
        return bucket.get_public_url(key)

    def delete_file(self, key: str) -> bool:
        try:
            self.supabase.storage.from_(self.bucket_name).remove([key])
            return True
        except Exception as e:
            logger.error(f"Failed to delete file from Supabase Storage: {str(e)}")
            return False


def get_storage(supabase: Client, bucket: Optional[str] = None):
    """S3 when credentials are configured, otherwise Supabase Storage."""
    bucket = bucket or settings.storage_bucket
    if settings.s3_configured:
        return S3Storage(prefix=bucket)
    return SupabaseStorage(supabase, bucket)
