"""
S3 Object Store Transport

Thin wrapper around a boto3 S3 client that exposes the two operations release
sources need: paged key listing and streamed object download.
"""

from typing import Any, BinaryIO, Iterator, List, Optional

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.config import Config

from tilefetch.log_utils import logger


def build_s3_client(
    region: Optional[str] = None,
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    endpoint: Optional[str] = None,
    path_style: bool = False,
) -> Any:
    """
    Create a boto3 S3 client for a release repository.

    Parameters:
        region (str | None): AWS region; None defers to the environment.
        access_key_id (str | None): Explicit access key; used only together with `secret_access_key`.
        secret_access_key (str | None): Explicit secret key.
        endpoint (str | None): Custom endpoint URL for S3-compatible stores.
        path_style (bool): Use path-style addressing instead of virtual-hosted buckets.

    Returns:
        botocore S3 client.
    """
    config = Config(s3={"addressing_style": "path"}) if path_style else None
    kwargs = {"region_name": region, "endpoint_url": endpoint, "config": config}
    if access_key_id and secret_access_key:
        kwargs["aws_access_key_id"] = access_key_id
        kwargs["aws_secret_access_key"] = secret_access_key
    return boto3.client("s3", **kwargs)


class S3ObjectStore:
    """Paged listing and concurrent download against one S3 client."""

    def __init__(self, client: Any):
        self.client = client

    def iter_key_pages(self, bucket: str, prefix: str = "") -> Iterator[List[str]]:
        """
        Lazily yield the keys of `bucket` one listing page at a time.

        The next page is requested only when the consumer asks for it, so closing
        the generator stops further listing calls. Client errors propagate unchanged.
        """
        paginator = self.client.get_paginator("list_objects_v2")
        page_kwargs = {"Bucket": bucket}
        if prefix:
            page_kwargs["Prefix"] = prefix
        for page_number, page in enumerate(paginator.paginate(**page_kwargs), start=1):
            keys = [obj["Key"] for obj in page.get("Contents", [])]
            logger.debug(
                f"Listed page {page_number} of s3://{bucket}/{prefix} ({len(keys)} keys)"
            )
            yield keys

    def download(
        self, bucket: str, key: str, fileobj: BinaryIO, concurrency: int = 0
    ) -> None:
        """
        Stream `s3://bucket/key` into the writable binary `fileobj`.

        `concurrency` bounds the parallel ranged requests of the transfer; values
        `<= 0` keep the boto3 TransferConfig default.
        """
        if concurrency > 0:
            transfer_config = TransferConfig(max_concurrency=concurrency)
        else:
            transfer_config = TransferConfig()
        self.client.download_fileobj(bucket, key, fileobj, Config=transfer_config)
