"""S3 notifier: uploads the IP address to a bucket under an assumed role."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from findip.config import S3NotifierConfig
from findip.errors import FindIpError, S3WriteFailedError
from findip.ip_query import IpAddress

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
KEY_SUFFIX = "ipnotification.txt"


class S3ClientProvider(Protocol):
    """Protocol for obtaining an S3 client with short-lived credentials."""

    def acquire_client(
        self,
        access_key_id: str,
        secret_access_key: str,
        role_arn: str,
        region: str,
    ) -> Any:
        """Returns a client exposing ``put_object``."""
        ...


class AssumeRoleClientProvider:
    """Exchanges static keys for role credentials through STS."""

    SESSION_NAME = "findip-notifier"

    def acquire_client(
        self,
        access_key_id: str,
        secret_access_key: str,
        role_arn: str,
        region: str,
    ) -> Any:
        sts = boto3.client(
            "sts",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
        )
        credentials = sts.assume_role(
            RoleArn=role_arn,
            RoleSessionName=self.SESSION_NAME,
        )["Credentials"]
        logger.debug(f"Assumed role {role_arn} until {credentials.get('Expiration')}")

        return boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
        )


def resolve_region(region: str) -> str:
    """Return ``region`` if botocore knows it, otherwise the default region."""
    session = boto3.session.Session()
    known: set[str] = set()
    for partition in session.get_available_partitions():
        known.update(session.get_available_regions("s3", partition_name=partition))
    if region in known:
        return region
    logger.warning(f"Unknown region {region!r}, falling back to {DEFAULT_REGION}")
    return DEFAULT_REGION


def object_key(now: datetime) -> str:
    """Object key for a notification sent at ``now``.

    Hour granularity: notifications within the same hour share a key.
    """
    return f"{now.strftime('%Y-%m-%d-%H')}-{KEY_SUFFIX}"


class S3Notifier:
    """Uploads the bare IP address as a text object."""

    def __init__(
        self,
        config: S3NotifierConfig,
        client_provider: Optional[S3ClientProvider] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize notifier.

        Args:
            config: Bucket, role and credential settings.
            client_provider: Source of S3 clients (for testing).
            clock: Local-time clock used for object keys.
        """
        self._config = config
        self._provider = client_provider or AssumeRoleClientProvider()
        self._clock = clock
        self._region = resolve_region(config.region)

    @property
    def region(self) -> str:
        return self._region

    async def notify_success(self, ip: IpAddress) -> bool:
        try:
            key = await asyncio.to_thread(self._upload_sync, str(ip))
        except S3WriteFailedError as e:
            logger.error(str(e))
            return False
        logger.info(f"Uploaded IP address to s3://{self._config.bucket_name}/{key}")
        return True

    async def notify_error(self, error: FindIpError) -> None:
        logger.error(f"IP query failed, nothing uploaded to S3: {error}")

    def _upload_sync(self, text: str) -> str:
        key = object_key(self._clock())
        try:
            client = self._provider.acquire_client(
                self._config.access_key_id,
                self._config.secret_access_key,
                self._config.assume_role_arn,
                self._region,
            )
            client.put_object(
                Bucket=self._config.bucket_name,
                Key=key,
                Body=text.encode(),
                ContentType="text/plain",
            )
        except (BotoCoreError, ClientError) as e:
            raise S3WriteFailedError(str(e))
        except Exception as e:
            raise S3WriteFailedError(f"{type(e).__name__}: {e}")
        return key
