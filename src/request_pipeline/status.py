"""HTTP status classification.

Maps a transport status code to an error category and the message shown
to the user. Pure lookup; notifying the user is the caller's job.
"""

from request_pipeline.models import ClassifiedError, ErrorCategory

STATUS_TABLE: dict[int, tuple[ErrorCategory, str]] = {
    400: (ErrorCategory.BAD_REQUEST, "请求失败！请您稍后重试"),
    401: (ErrorCategory.UNAUTHORIZED, "登录失效！请您重新登录"),
    403: (ErrorCategory.FORBIDDEN, "当前账号无权限访问！"),
    404: (ErrorCategory.NOT_FOUND, "你所访问的资源不存在！"),
    405: (ErrorCategory.METHOD_NOT_ALLOWED, "请求方式错误！请您稍后重试"),
    408: (ErrorCategory.TIMEOUT, "请求超时！请您稍后重试"),
    500: (ErrorCategory.SERVER_ERROR, "服务异常！"),
    502: (ErrorCategory.BAD_GATEWAY, "网关错误！"),
    503: (ErrorCategory.SERVICE_UNAVAILABLE, "服务不可用！"),
    504: (ErrorCategory.GATEWAY_TIMEOUT, "网关超时！"),
}

UNKNOWN_MESSAGE = "请求失败！"
TIMEOUT_MESSAGE = "请求超时！请您稍后重试"
NETWORK_MESSAGE = "网络错误！请您稍后重试"


def classify_status(status: int | None) -> ClassifiedError:
    """Classify an HTTP status code.

    Args:
        status: HTTP status code, or None when no response was received

    Returns:
        ClassifiedError for the status; unknown codes map to
        ErrorCategory.UNKNOWN with a generic message

    Examples:
        >>> classify_status(404).category
        <ErrorCategory.NOT_FOUND: 'NotFound'>
        >>> classify_status(418).message
        '请求失败！'
    """
    category, message = STATUS_TABLE.get(status, (ErrorCategory.UNKNOWN, UNKNOWN_MESSAGE))  # type: ignore[arg-type]
    return ClassifiedError(category=category, message=message, original_status=status)
