"""SQLAlchemy repository implementations."""
from .sqlalchemy_delivery_log import SQLAlchemyDeliveryLog
from .sqlalchemy_directory import SQLAlchemyEntitySnapshotSource, SQLAlchemyRecipientDirectory
from .sqlalchemy_template_repository import SQLAlchemyTemplateRepository
from .sqlalchemy_workflow_repository import SQLAlchemyWorkflowRepository, get_or_create_workflow_type

__all__ = [
    "SQLAlchemyDeliveryLog",
    "SQLAlchemyEntitySnapshotSource",
    "SQLAlchemyRecipientDirectory",
    "SQLAlchemyTemplateRepository",
    "SQLAlchemyWorkflowRepository",
    "get_or_create_workflow_type",
]
