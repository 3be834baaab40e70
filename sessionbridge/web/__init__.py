from sessionbridge.web.middleware import ServerSessionMiddleware

__all__ = ["ServerSessionMiddleware"]
