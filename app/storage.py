"""
Blob storage for uploaded documents: S3 when credentials are configured,
a local directory otherwise.
"""

import logging
import os
import pathlib
from typing import Optional

# Optional S3 (only used if creds are present & work)
import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

PRESIGN_EXPIRES = 3600  # 1 hour


def get_s3():
    access = os.getenv("S3_ACCESS_KEY")
    secret = os.getenv("S3_SECRET_KEY")
    bucket = os.getenv("S3_BUCKET")
    if not (access and secret and bucket):
        return None, None
    session = boto3.session.Session()
    client = session.client(
        "s3",
        region_name=os.getenv("S3_REGION", "us-east-1"),
        endpoint_url=os.getenv("S3_ENDPOINT") or None,
        aws_access_key_id=access,
        aws_secret_access_key=secret,
    )
    return client, bucket


class S3BlobStore:
    def __init__(self, client, bucket: str, expires: int = PRESIGN_EXPIRES):
        self.client = client
        self.bucket = bucket
        self.expires = expires

    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        extra = {"ContentType": content_type} if content_type else {}
        self.client.put_object(Bucket=self.bucket, Key=path, Body=data, **extra)
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=self.expires
        )

    def delete(self, path: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=path)
        except ClientError as e:
            logger.warning("S3 delete of %s failed: %s", path, e)


class LocalBlobStore:
    def __init__(self, root: str):
        self.root = pathlib.Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> pathlib.Path:
        target = (self.root / path).resolve()
        if self.root not in target.parents:
            raise ValueError(f"blob path escapes storage root: {path}")
        return target

    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target.as_uri()

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        if target.exists():
            target.unlink()


def get_blob_store(data_dir: str):
    s3, bucket = get_s3()
    if s3 and bucket:
        logger.info("Using S3 blob storage in bucket %s", bucket)
        return S3BlobStore(s3, bucket)
    return LocalBlobStore(os.path.join(data_dir, "blobs"))
