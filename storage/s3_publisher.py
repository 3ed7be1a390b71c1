"""S3 publisher for the generated calendar feed."""
import logging

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class S3CalendarPublisher:
    """Publisher writing the feed to a single S3 object."""

    CONTENT_TYPE = 'text/calendar; charset=utf-8'

    def __init__(self, bucket: str, key: str):
        """
        Initialize the S3 client and target object.

        Args:
            bucket: Name of the S3 bucket serving the feed
            key: Object key of the feed file
        """
        self.bucket = bucket
        self.key = key
        self.s3 = boto3.client('s3')
        logger.info(f"Initialized S3CalendarPublisher for s3://{bucket}/{key}")

    def publish(self, body: str) -> int:
        """
        Replace the published feed with a new document.

        A single PutObject either fully replaces the previous feed or
        leaves it untouched.

        Args:
            body: Serialized iCalendar text

        Returns:
            Size of the written object in bytes
        """
        data = body.encode('utf-8')
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=self.key,
                Body=data,
                ContentType=self.CONTENT_TYPE
            )
        except ClientError as e:
            logger.error(f"Error writing s3://{self.bucket}/{self.key}: {e}")
            raise

        logger.info(f"Published {len(data)} bytes to s3://{self.bucket}/{self.key}")
        return len(data)
