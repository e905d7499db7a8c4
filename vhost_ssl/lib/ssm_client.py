"""SSM client for reading certificate material from AWS Parameter Store."""

import boto3
from botocore.exceptions import ClientError


class SSMClient:
    """SSM client for private keys and certificates kept as SecureString parameters."""

    def __init__(self, region: str = "eu-west-2") -> None:
        """Initialize SSM client.

        Args:
            region: AWS region for SSM client
        """
        self.client = boto3.client("ssm", region_name=region)

    def get_secure_parameter(self, name: str) -> bytes:
        """Fetch and decrypt a parameter value.

        Args:
            name: Full parameter name (e.g., '/web/example.org/private-key')

        Returns:
            Parameter value as bytes

        Raises:
            ValueError: If the parameter does not exist
        """
        try:
            response = self.client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ParameterNotFound":
                raise ValueError(f"parameter not found in SSM: {name}") from e
            raise
        return response["Parameter"]["Value"].encode("utf-8")
