"""Application layer - the blob store and its collaborators."""
