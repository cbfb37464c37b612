import math
from datetime import datetime, timezone
from typing import Any, Optional

SUCCESS = "Success"
FAILURE = "Failure"


def success_response(data: Any = None, message: str = "Operation successful", meta: Optional[dict] = None) -> dict:
    response = {
        "status": SUCCESS,
        "message": message,
        "data": data,
    }
    # Pagination/meta info sits next to data, not inside it
    if meta:
        response.update(meta)
    return response


def failure_response(message: str = "Operation failed") -> dict:
    return {
        "status": FAILURE,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def pagination_meta(total: int, page: int, limit: int) -> dict:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }
