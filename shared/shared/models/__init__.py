from shared.models.envelope import ApiResponse, ok
from shared.models.pagination import PageMeta, PaginatedResponse, PaginationParams

__all__ = ["ApiResponse", "ok", "PageMeta", "PaginatedResponse", "PaginationParams"]
