"""File cache implementation.

Provides the concrete CacheService backed by plain files: key encoding,
directory layout (flat or sharded), entry encoding with an expiration header
and the pluggable value serializers.
"""
