"""
工具函数模块
"""

from typing import Optional
from datetime import datetime
from fastapi import HTTPException


def format_timestamp_with_timezone(timestamp: Optional[datetime]) -> str:
    """格式化时间戳，确保包含UTC时区标识符"""
    if not timestamp:
        return ""
    # 确保发送给前端的时间戳包含'Z'后缀，表示这是UTC时间
    return timestamp.isoformat() + 'Z'


def error_detail(error: Exception) -> dict:
    """把业务异常转换为统一的错误响应体"""
    return {
        "code": getattr(error, "code", "internal_error"),
        "message": str(error)
    }


def to_http_error(error: ValueError) -> HTTPException:
    """业务异常转换为HTTP异常，未声明状态码的按400处理"""
    return HTTPException(
        status_code=getattr(error, "status_code", 400),
        detail=error_detail(error)
    )
