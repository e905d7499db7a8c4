"""S3 client for fetching certificate material."""

import boto3


class S3Client:
    """S3 client for reading certificate files referenced as s3:// sources."""

    def __init__(self, region: str = "eu-west-2") -> None:
        """Initialize S3 client.

        Args:
            region: AWS region for S3 client
        """
        self.client = boto3.client("s3", region_name=region)

    def get_object(self, bucket_name: str, key: str) -> bytes:
        """Download an object from S3.

        Args:
            bucket_name: S3 bucket name
            key: S3 object key

        Returns:
            Object content as bytes

        Raises:
            ClientError: If download fails
        """
        response = self.client.get_object(Bucket=bucket_name, Key=key)
        return response["Body"].read()
