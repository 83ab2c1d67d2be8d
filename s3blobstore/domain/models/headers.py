"""Creation header names understood by the blob store."""

BLOB_NAME_HEADER = "BlobStore.blob-name"
CREATED_BY_HEADER = "BlobStore.created-by"
CONTENT_TYPE_HEADER = "BlobStore.content-type"
DIRECT_PATH_BLOB_HEADER = "BlobStore.direct-path"
