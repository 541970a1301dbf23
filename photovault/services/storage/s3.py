"""S3 storage gateway: presigned URLs, object deletion and bucket health."""
import boto3
from botocore.client import Config
from botocore.exceptions import ClientError, BotoCoreError
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Dict, List, Any
from datetime import datetime, timezone
import logging
import uuid

from photovault.app.config import settings
from photovault.app.exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)


class S3ServiceError(UpstreamUnavailable):
    """Raised when an S3 operation fails."""

    default_message = "Storage service unavailable"


class S3Service:
    """
    Gateway over the object store.

    Presigned URLs are signed locally by botocore, so a failure to issue
    one is usually a credentials or configuration problem rather than a
    network one. Each operation still carries the client's connect and
    read timeouts.
    """

    def __init__(self, client: Any = None, bucket_name: Optional[str] = None, max_workers: Optional[int] = None):
        """
        Initialize S3 client with configuration.

        Args:
            client: Pre-built boto3 S3 client (tests inject a stub)
            bucket_name: Bucket override, defaults to S3_BUCKET_NAME
            max_workers: Thread fan-out for batch URL issuance
        """
        self.bucket_name = bucket_name or settings.S3_BUCKET_NAME
        self.max_workers = max_workers or settings.S3_URL_WORKERS

        if client is not None:
            self.s3_client = client
            return

        try:
            self.s3_client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.S3_REGION,
                endpoint_url=settings.S3_ENDPOINT_URL,
                config=Config(
                    signature_version='s3v4',
                    s3={'addressing_style': 'virtual'},
                    connect_timeout=settings.S3_CONNECT_TIMEOUT,
                    read_timeout=settings.S3_READ_TIMEOUT,
                    retries={'max_attempts': 3, 'mode': 'standard'},
                )
            )
            logger.info(f"S3 Service initialized for bucket: {self.bucket_name}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to initialize S3 client: {e}")
            raise S3ServiceError(f"S3 initialization failed: {str(e)}")

    @staticmethod
    def generate_s3_key(username: str, filename: str, now: Optional[datetime] = None) -> str:
        """
        Generate a unique S3 key for a user's photo.

        Args:
            username: Owner's username
            filename: Original filename (only its extension is kept)
            now: Upload time, defaults to current UTC time

        Returns:
            S3 key path: users/{username}/photos/{YYYY}/{MM}/{uuid}.{ext}
        """
        now = now or datetime.now(timezone.utc)
        file_ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'jpg'
        return f"users/{username}/photos/{now:%Y}/{now:%m}/{uuid.uuid4()}.{file_ext}"

    def issue_download_url(self, s3_key: str, expires_in: int = 3600) -> str:
        """
        Generate presigned GET URL.

        Args:
            s3_key: S3 object key
            expires_in: URL expiration in seconds

        Returns:
            Presigned download URL

        Raises:
            S3ServiceError: If URL generation fails
        """
        try:
            url = self.s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': s3_key
                },
                ExpiresIn=expires_in
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating download URL for {s3_key}: {e}")
            raise S3ServiceError("Failed to generate download URL", detail=str(e))

        logger.debug(f"Generated download URL for: {s3_key}")
        return url

    def issue_batch_download_urls(self, s3_keys: List[str], expires_in: int = 3600) -> List[Dict[str, Optional[str]]]:
        """
        Generate presigned GET URLs for many keys concurrently.

        Keys that fail during the fan-out are retried one at a time. A key
        that still fails gets `url=None`; the batch itself never raises.

        Args:
            s3_keys: Object keys, in the order results should be returned
            expires_in: URL expiration in seconds

        Returns:
            List of {'key': ..., 'url': ...} in the order of `s3_keys`
        """
        unique_keys = list(dict.fromkeys(s3_keys))
        if not unique_keys:
            return []

        urls: Dict[str, Optional[str]] = {}
        failed: List[str] = []

        workers = min(self.max_workers, len(unique_keys))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                key: executor.submit(self.issue_download_url, key, expires_in)
                for key in unique_keys
            }
            for key, future in futures.items():
                try:
                    urls[key] = future.result()
                except Exception as e:
                    logger.info(f"Download URL for {key} failed in batch, retrying: {e}")
                    failed.append(key)

        for key in failed:
            try:
                urls[key] = self.issue_download_url(key, expires_in)
            except Exception as e:
                logger.warning(f"Download URL unavailable for {key} after retry: {e}")
                urls[key] = None

        return [{'key': key, 'url': urls.get(key)} for key in s3_keys]

    def issue_upload_url(self, s3_key: str, content_type: str, expires_in: int = 3600) -> str:
        """
        Generate presigned PUT URL for direct upload.

        Args:
            s3_key: S3 object key
            content_type: MIME type the client must send
            expires_in: URL expiration in seconds

        Returns:
            Presigned upload URL

        Raises:
            S3ServiceError: If URL generation fails
        """
        try:
            upload_url = self.s3_client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': s3_key,
                    'ContentType': content_type
                },
                ExpiresIn=expires_in
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating upload URL for {s3_key}: {e}")
            raise S3ServiceError("Failed to generate upload URL", detail=str(e))

        logger.debug(f"Generated PUT presigned URL for: {s3_key}")
        return upload_url

    def delete_object(self, s3_key: str) -> None:
        """
        Delete object from S3.

        Args:
            s3_key: S3 object key

        Raises:
            S3ServiceError: If deletion fails
        """
        try:
            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=s3_key
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting object {s3_key}: {e}")
            raise S3ServiceError("Failed to delete object", detail=str(e))

        logger.info(f"Deleted S3 object: {s3_key}")

    def check_bucket_access(self) -> Dict[str, Any]:
        """
        Confirm the bucket exists and the credentials can reach it.

        Returns:
            Dict with bucket name, region and accessibility

        Raises:
            S3ServiceError: If the bucket is missing or access is denied
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', '')
            if error_code in ('403', 'AccessDenied'):
                raise S3ServiceError(f"Access denied to bucket: {self.bucket_name}")
            if error_code in ('404', 'NoSuchBucket'):
                raise S3ServiceError(f"Bucket not found: {self.bucket_name}")
            logger.error(f"Error checking bucket: {e}")
            raise S3ServiceError("Failed to access bucket", detail=str(e))
        except BotoCoreError as e:
            logger.error(f"Error checking bucket: {e}")
            raise S3ServiceError("Failed to access bucket", detail=str(e))

        return {
            'bucket_name': self.bucket_name,
            'region': settings.S3_REGION,
            'accessible': True
        }
