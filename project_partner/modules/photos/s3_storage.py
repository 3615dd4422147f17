import boto3
from botocore.exceptions import ClientError
from project_partner.config.settings import settings
import logging

logger = logging.getLogger(__name__)


class S3Storage:
    """Photo object storage in S3; paths are returned as s3://<bucket>/<key>"""

    def __init__(self):
        if not settings.s3_configured:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    @property
    def prefix(self) -> str:
        return f"s3://{self.bucket_name}/"

    def owns(self, storage_path: str) -> bool:
        return storage_path.startswith(self.prefix)

    def key_for(self, storage_path: str) -> str:
        return storage_path.replace(self.prefix, "", 1)

    def upload_photo(self, content: bytes, key: str, content_type: str) -> str:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
                CacheControl="max-age=3600"
            )
            return f"{self.prefix}{key}"
        except ClientError as e:
            logger.error(f"Failed to upload photo to S3: {str(e)}")
            raise

    def signed_url(self, key: str, expires_in: int) -> str:
        return self.s3_client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": key},
            ExpiresIn=expires_in
        )

    def delete_photo(self, key: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete photo from S3: {str(e)}")
            return False
