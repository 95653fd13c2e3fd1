from infra.api.client import HttpAuthBackend

__all__ = ["HttpAuthBackend"]
