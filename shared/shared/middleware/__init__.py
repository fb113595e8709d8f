from shared.middleware.error_handler import register_exception_handlers
from shared.middleware.request_id import request_id_middleware

__all__ = ["register_exception_handlers", "request_id_middleware"]
