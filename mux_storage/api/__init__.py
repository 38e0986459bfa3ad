"""HTTP surface for the storage adapter."""
