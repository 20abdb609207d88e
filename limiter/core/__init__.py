"""
Core package - token bucket rate limiters
"""
from .token_bucket import TokenBucket, validate_bucket_params
from .async_bucket import AsyncTokenBucket

__all__ = [
    'TokenBucket',
    'AsyncTokenBucket',
    'validate_bucket_params'
]
