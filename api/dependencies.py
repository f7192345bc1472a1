"""
FastAPI Dependencies.

Provides dependency injection for the orchestrator, the workflow service
and API authentication.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from core.application.dispatchers import EmailDispatcher, PushDispatcher
from core.application.interfaces import IEmailGateway, IPushGateway
from core.application.services import ContentTemplateResolver, RecipientResolver, WorkflowService
from core.infrastructure.adapters.notifications import MockEmailGateway, MockPushGateway
from core.infrastructure.database.config import get_session_factory
from core.infrastructure.database.repositories import (
    SQLAlchemyDeliveryLog,
    SQLAlchemyEntitySnapshotSource,
    SQLAlchemyRecipientDirectory,
    SQLAlchemyTemplateRepository,
    SQLAlchemyWorkflowRepository,
)
from core.settings import get_app_settings
from core.settings.sections import ApiSettings
from gyld_sdk.logging import get_logger
from orchestration import InMemoryEventBus, NotificationOrchestrator

logger = get_logger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_workflow_repository: Optional[SQLAlchemyWorkflowRepository] = None
_push_gateway: Optional[IPushGateway] = None
_email_gateway: Optional[IEmailGateway] = None
_event_bus: Optional[InMemoryEventBus] = None
_orchestrator: Optional[NotificationOrchestrator] = None
_workflow_service: Optional[WorkflowService] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_workflow_repository() -> SQLAlchemyWorkflowRepository:
    global _workflow_repository
    if _workflow_repository is None:
        _workflow_repository = SQLAlchemyWorkflowRepository(get_session_factory())
        logger.info("workflow_repository_created")
    return _workflow_repository


def get_push_gateway() -> IPushGateway:
    global _push_gateway

    if _push_gateway is None:
        settings = get_app_settings().push
        if settings.enabled:
            from core.infrastructure.adapters.notifications.expo_push_gateway import ExpoPushGateway
            _push_gateway = ExpoPushGateway(settings)
        else:
            _push_gateway = MockPushGateway()
            logger.info("push_disabled_using_mock")

    return _push_gateway


def get_email_gateway() -> IEmailGateway:
    global _email_gateway

    if _email_gateway is None:
        settings = get_app_settings().email
        if settings.enabled:
            from core.infrastructure.adapters.notifications.sendgrid_email_gateway import SendGridEmailGateway
            _email_gateway = SendGridEmailGateway(settings)
        else:
            _email_gateway = MockEmailGateway()
            logger.info("email_disabled_using_mock")

    return _email_gateway


def get_event_bus() -> InMemoryEventBus:
    global _event_bus
    if _event_bus is None:
        _event_bus = InMemoryEventBus()
    return _event_bus


def get_orchestrator() -> NotificationOrchestrator:
    global _orchestrator

    if _orchestrator is None:
        settings = get_app_settings()
        session_factory = get_session_factory()
        timeout = settings.orchestration.lookup_timeout

        _orchestrator = NotificationOrchestrator(
            recipient_resolver=RecipientResolver(
                SQLAlchemyRecipientDirectory(session_factory), lookup_timeout=timeout
            ),
            content_resolver=ContentTemplateResolver(
                templates=SQLAlchemyTemplateRepository(session_factory),
                snapshots=SQLAlchemyEntitySnapshotSource(session_factory),
                lookup_timeout=timeout,
            ),
            push_dispatcher=PushDispatcher(get_push_gateway(), settings.push),
            email_dispatcher=EmailDispatcher(get_email_gateway(), settings.email),
            event_bus=get_event_bus(),
            workflow_repository=get_workflow_repository(),
            delivery_log=SQLAlchemyDeliveryLog(session_factory),
            settings=settings.orchestration,
        )
        logger.info("notification_orchestrator_created")

    return _orchestrator


def get_workflow_service() -> WorkflowService:
    global _workflow_service

    if _workflow_service is None:
        _workflow_service = WorkflowService(
            repository=get_workflow_repository(),
            orchestrator=get_orchestrator(),
            due_batch_limit=get_app_settings().orchestration.due_batch_limit,
            executing_timeout=get_app_settings().orchestration.executing_timeout,
        )
        logger.info("workflow_service_created")

    return _workflow_service


# =============================================================================
# AUTHENTICATION
# =============================================================================

_bearer = HTTPBearer(auto_error=False)


def get_api_settings() -> ApiSettings:
    return get_app_settings().api


def verify_api_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: ApiSettings = Depends(get_api_settings),
) -> None:
    """
    Require ``Authorization: Bearer <API_AUTH_TOKEN>`` when a token is configured.

    Raises:
        HTTPException: 401 when the header is missing, 403 when the token is wrong
    """
    if not settings.auth_token:
        return
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if credentials.credentials != settings.auth_token:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid bearer token")


# =============================================================================
# RESET (for testing)
# =============================================================================

def reset_dependencies():
    global _workflow_repository, _push_gateway, _email_gateway
    global _event_bus, _orchestrator, _workflow_service

    _workflow_repository = None
    _push_gateway = None
    _email_gateway = None
    _event_bus = None
    _orchestrator = None
    _workflow_service = None

    logger.info("dependencies_reset")
