"""Blob store services."""

from s3blobstore.application.services.blob_store import BlobStoreState, S3BlobStore
from s3blobstore.application.services.location import BlobIdLocationResolver
from s3blobstore.application.services.metrics import InMemoryBlobStoreMetricsStore
from s3blobstore.application.services.quota import SpaceUsedQuotaService
from s3blobstore.application.services.uploader import S3Uploader

__all__ = [
    "BlobStoreState",
    "S3BlobStore",
    "BlobIdLocationResolver",
    "InMemoryBlobStoreMetricsStore",
    "SpaceUsedQuotaService",
    "S3Uploader",
]
