# cocopik/utils/errors.py
# Перевод кодов ValueError из сервисов в HTTP-ответы.

from __future__ import annotations

import logging
from typing import Dict, Tuple

from fastapi import HTTPException
from starlette import status

log = logging.getLogger(__name__)

# код причины → (HTTP-статус, человекочитаемое сообщение)
ERRORS: Dict[str, Tuple[int, str]] = {
    "missing_fields": (status.HTTP_400_BAD_REQUEST, "deviceToken and modelId are required"),
    "missing_device_token": (status.HTTP_400_BAD_REQUEST, "deviceToken is required"),
    "already_member": (status.HTTP_400_BAD_REQUEST, "User is already a member of this group"),
    "group_not_found": (status.HTTP_404_NOT_FOUND, "Group not found"),
    "user_not_found": (status.HTTP_404_NOT_FOUND, "User not found"),
    "group_expired": (status.HTTP_410_GONE, "Group invitation has expired"),
}


def http_error(exc: ValueError) -> HTTPException:
    """
    Неизвестный код - это не бизнес-ошибка, а баг: пишем в лог с трейсбеком
    и отдаём как 500, сообщение наружу не пробрасываем.
    """
    code = str(exc)
    if code not in ERRORS:
        log.error("unexpected service error: %s", code, exc_info=exc)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
    status_code, message = ERRORS[code]
    return HTTPException(status_code=status_code, detail=message)
