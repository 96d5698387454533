from typing import Any, Dict, Optional

class BizError(Exception):
    """
    通用业务异常
    """
    def __init__(
        self,
        message: str,
        code: int = 400,
        payload: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.payload = payload or {}
        super().__init__(self.message)

class ExternalApiError(BizError):
    """
    第三方API调用失败 (如 Overpass)
    """
    def __init__(self, message: str, original_error: str = ""):
        super().__init__(
            message=message,
            code=502,
            payload={"original_error": str(original_error)}
        )

class NetworkFetchError(ExternalApiError):
    """
    路网数据获取失败（连接失败 / 非 200 / 非 JSON），不重试
    """

class DataIntegrityError(BizError):
    """
    路网原始数据格式异常，终止本次请求
    """
    def __init__(self, message: str, element: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=502,
            payload={"element": element} if element is not None else {},
        )
