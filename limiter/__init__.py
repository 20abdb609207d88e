"""Token bucket rate limiting"""
from .core import TokenBucket, AsyncTokenBucket

__all__ = ['TokenBucket', 'AsyncTokenBucket']
