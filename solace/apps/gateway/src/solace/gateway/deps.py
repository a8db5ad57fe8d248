"""依赖注入模块 -- 通过 FastAPI Depends 注入服务实例

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from solace.channel import NotificationGateway
from solace.core.store import StoreGroup

from .services.submission_service import SubmissionService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_submission_service(request: Request) -> SubmissionService:
    """从 app.state 获取 SubmissionService 实例"""
    return request.app.state.submission_service


def get_notification_gateway(request: Request) -> NotificationGateway:
    """从 app.state 获取 NotificationGateway 实例"""
    return request.app.state.notification_gateway
