"""S3 object store.

Stores workspace files as S3 objects under their workspace key::

    s3://{bucket}/{key}

Custom metadata (``timestamp``, ``author``) travels as S3 user metadata and
the content type as the object's ``Content-Type``.

Uses ``anyio.to_thread.run_sync`` to run boto3 calls in the thread pool,
matching the same async pattern as LocalObjectStore.  Throttling, 5xx and
connection timeouts are translated into ``TransientStoreError`` here so the
retry layer never inspects botocore exceptions.
"""

from __future__ import annotations

from functools import partial
from typing import Any

import boto3
from anyio import to_thread
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from switchyard.models.enums import RetryKind
from switchyard.store.base import ListPage, StoredObject, TransientStoreError

_RATE_LIMIT_CODES = frozenset({
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequests",
    "TooManyRequestsException",
})
_UNAVAILABLE_CODES = frozenset({"ServiceUnavailable", "InternalError", "503"})
_TIMEOUT_CODES = frozenset({"RequestTimeout", "RequestTimeoutException"})


def _create_s3_client(
    endpoint_url: str,
    access_key: str,
    secret_key: str,
    region: str | None = None,
    path_style: bool = False,
) -> Any:
    """Create a boto3 S3 client.

    Args:
        endpoint_url: S3 endpoint URL.
        access_key: AWS access key ID.
        secret_key: AWS secret access key.
        region: AWS region name (optional, some endpoints require it).
        path_style: Use path-style addressing instead of virtual-hosted.
            Required by MinIO and some S3-compatible services.
    """
    config = Config(
        request_checksum_calculation="when_required",
        response_checksum_validation="when_required",
        s3={"addressing_style": "path" if path_style else "auto"},
        # Retries are owned by RetryExecutor, not botocore.
        retries={"max_attempts": 1, "mode": "standard"},
    )

    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        region_name=region,
        config=config,
    )


def translate_client_error(exc: ClientError) -> TransientStoreError | None:
    """Map a botocore ``ClientError`` to a transient error, or ``None`` if fatal."""
    error = exc.response.get("Error", {})
    code = str(error.get("Code", ""))
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")

    if code in _RATE_LIMIT_CODES or status == 429:
        return TransientStoreError(RetryKind.RATE_LIMITED, str(exc))
    if code in _UNAVAILABLE_CODES or status in (500, 503):
        return TransientStoreError(RetryKind.SERVICE_UNAVAILABLE, str(exc))
    if code in _TIMEOUT_CODES:
        return TransientStoreError(RetryKind.TIMEOUT, str(exc))
    return None


class S3ObjectStore:
    """S3 implementation of the ObjectStore protocol."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        region: str | None = None,
        path_style: bool = False,
        client: Any | None = None,
    ) -> None:
        self._bucket = bucket
        self._client = client or _create_s3_client(
            endpoint_url, access_key, secret_key, region=region, path_style=path_style
        )

    async def _run(self, func: Any, /, **kwargs: Any) -> Any:
        return await to_thread.run_sync(partial(self._call, func, **kwargs))

    @staticmethod
    def _call(func: Any, /, **kwargs: Any) -> Any:
        """Invoke a boto3 call, translating transient failures."""
        try:
            return func(**kwargs)
        except ClientError as e:
            transient = translate_client_error(e)
            if transient is not None:
                raise transient from e
            raise
        except (ConnectTimeoutError, ReadTimeoutError, EndpointConnectionError, ConnectionClosedError) as e:
            raise TransientStoreError(RetryKind.TIMEOUT, str(e)) from e

    # -- Write -----------------------------------------------------------------

    async def put(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        await self._run(
            self._client.put_object,
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            Metadata=metadata or {},
        )

    # -- Read ------------------------------------------------------------------

    async def get(self, key: str) -> StoredObject | None:
        return await to_thread.run_sync(partial(self._get_object, key))

    def _get_object(self, key: str) -> StoredObject | None:
        """Get object and read body in the same thread.

        Reading the streaming body must happen in the same thread as
        get_object to avoid issues with chunked transfer encoding.
        """
        try:
            resp = self._call(self._client.get_object, Bucket=self._bucket, Key=key)
        except self._client.exceptions.NoSuchKey:
            return None
        return StoredObject(
            key=key,
            body=resp["Body"].read(),
            content_type=resp.get("ContentType"),
            metadata=dict(resp.get("Metadata") or {}),
        )

    async def list(self, prefix: str, *, limit: int = 1000, cursor: str | None = None) -> ListPage:
        kwargs: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix, "MaxKeys": limit}
        if cursor is not None:
            kwargs["ContinuationToken"] = cursor
        resp = await self._run(self._client.list_objects_v2, **kwargs)
        truncated = bool(resp.get("IsTruncated"))
        return ListPage(
            keys=[obj["Key"] for obj in resp.get("Contents", [])],
            truncated=truncated,
            cursor=resp.get("NextContinuationToken") if truncated else None,
        )

    # -- Delete ----------------------------------------------------------------

    async def delete(self, key: str) -> None:
        # S3 delete is idempotent -- no error if key doesn't exist.
        await self._run(self._client.delete_object, Bucket=self._bucket, Key=key)
