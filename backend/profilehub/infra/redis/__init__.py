from .redis_revocation_registry import RedisRevocationRegistry

__all__ = ["RedisRevocationRegistry"]
