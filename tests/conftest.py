"""Shared fixtures: in-memory collaborators and a wired orchestrator."""

import pytest

from core.application.dispatchers import EmailDispatcher, PushDispatcher
from core.application.services import ContentTemplateResolver, RecipientResolver, WorkflowService
from core.infrastructure.adapters.persistence import (
    InMemoryDeliveryLog,
    InMemoryEntitySnapshotSource,
    InMemoryRecipientDirectory,
    InMemoryTemplateRepository,
    InMemoryWorkflowRepository,
)
from core.settings.sections import EmailSettings, OrchestrationSettings, PushSettings
from orchestration import NotificationOrchestrator
from tests.fakes import FakeEmailGateway, FakePushGateway, RecordingEventBus


@pytest.fixture
def push_settings() -> PushSettings:
    return PushSettings(batch_size=100, max_concurrent_batches=4, request_timeout=1.0, logo_url="")


@pytest.fixture
def email_settings() -> EmailSettings:
    return EmailSettings(batch_size=1000, request_timeout=1.0)


@pytest.fixture
def directory() -> InMemoryRecipientDirectory:
    return InMemoryRecipientDirectory()


@pytest.fixture
def templates() -> InMemoryTemplateRepository:
    return InMemoryTemplateRepository()


@pytest.fixture
def snapshots() -> InMemoryEntitySnapshotSource:
    return InMemoryEntitySnapshotSource()


@pytest.fixture
def push_gateway() -> FakePushGateway:
    return FakePushGateway()


@pytest.fixture
def email_gateway() -> FakeEmailGateway:
    return FakeEmailGateway()


@pytest.fixture
def event_bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def workflow_repository() -> InMemoryWorkflowRepository:
    return InMemoryWorkflowRepository()


@pytest.fixture
def delivery_log() -> InMemoryDeliveryLog:
    return InMemoryDeliveryLog()


@pytest.fixture
def orchestrator(
    directory,
    templates,
    snapshots,
    push_gateway,
    email_gateway,
    event_bus,
    workflow_repository,
    delivery_log,
    push_settings,
    email_settings,
) -> NotificationOrchestrator:
    return NotificationOrchestrator(
        recipient_resolver=RecipientResolver(directory, lookup_timeout=1.0),
        content_resolver=ContentTemplateResolver(templates, snapshots, lookup_timeout=1.0),
        push_dispatcher=PushDispatcher(push_gateway, push_settings),
        email_dispatcher=EmailDispatcher(email_gateway, email_settings),
        event_bus=event_bus,
        workflow_repository=workflow_repository,
        delivery_log=delivery_log,
        settings=OrchestrationSettings(service_name="test"),
    )


@pytest.fixture
def workflow_service(workflow_repository, orchestrator) -> WorkflowService:
    return WorkflowService(repository=workflow_repository, orchestrator=orchestrator)
