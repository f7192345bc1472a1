"""Notification orchestrator - validates, resolves, renders, dispatches and aggregates."""

import asyncio
from datetime import datetime
from typing import Any, Optional, Sequence

from core.application.dispatchers import ChannelDispatcher, DispatchContext
from core.application.dtos import new_workflow_record, parse_notification_request
from core.application.interfaces import IDeliveryLog
from core.application.services.content_template_resolver import ContentTemplateResolver
from core.application.services.recipient_resolver import RecipientResolver
from core.domain.entities import (
    ChannelOutcome,
    OrchestrationRequest,
    OrchestrationResult,
    RecipientFailure,
    RenderedContent,
    ResolvedRecipient,
)
from core.domain.enums import Channel, FailureReason, OrchestrationMode, OrchestrationState
from core.domain.errors import InvalidRequest, NotificationError, WorkflowPersistenceError
from core.domain.repositories import WorkflowRepository
from core.domain.value_objects import (
    ContentSpec,
    ExecutionID,
    ExplicitRecipients,
    LiteralContent,
    MembershipRecipients,
    RsvpRecipients,
    TemplateContent,
)
from core.settings.sections.orchestration import OrchestrationSettings
from gyld_sdk.logging import get_logger
from gyld_sdk.utils.datetime import utc_now

from .bus import EventBusProtocol
from .events import FINISHED, RECIPIENT_FAILED, SCHEDULED, STATE_CHANGED, Event, EventMetadata
from .models import OrchestrationContext

ALL_CHANNELS = (Channel.PUSH, Channel.EMAIL)


class NotificationOrchestrator:
    """Runs one notification request through the orchestration state machine."""

    def __init__(
        self,
        recipient_resolver: RecipientResolver,
        content_resolver: ContentTemplateResolver,
        push_dispatcher: ChannelDispatcher,
        email_dispatcher: ChannelDispatcher,
        event_bus: EventBusProtocol,
        workflow_repository: WorkflowRepository,
        delivery_log: IDeliveryLog | None = None,
        settings: OrchestrationSettings | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            recipient_resolver: Expands recipient specs
            content_resolver: Renders literal or templated content
            push_dispatcher: Push channel
            email_dispatcher: Email channel
            event_bus: EventBusProtocol for publishing events
            workflow_repository: Store for scheduled sends
            delivery_log: Optional audit of sent/failed recipients
            settings: Orchestration settings
        """
        self._recipients = recipient_resolver
        self._content = content_resolver
        self._push = push_dispatcher
        self._email = email_dispatcher
        self._event_bus = event_bus
        self._workflows = workflow_repository
        self._delivery_log = delivery_log
        self._settings = settings or OrchestrationSettings()
        self._logger = get_logger("orchestration.orchestrator")

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def validate_payload(self, payload: Any) -> OrchestrationRequest:
        """Parse an untyped JSON payload, raising InvalidRequest when malformed."""
        return parse_notification_request(payload)

    async def send(self, request: OrchestrationRequest, now: datetime | None = None) -> OrchestrationResult:
        """Schedule the request if it is in the future, otherwise execute it now."""
        now = now or utc_now()
        if request.is_due(now):
            return await self.execute(request)
        return await self.schedule(request)

    async def schedule(self, request: OrchestrationRequest) -> OrchestrationResult:
        """Persist the request as a pending workflow. Nothing is dispatched.

        Raises:
            WorkflowPersistenceError: The record could not be written
        """
        self._validate(request)
        if request.scheduled_for is None:
            raise InvalidRequest("scheduled_for is required to schedule a notification")
        record = new_workflow_record(request)
        try:
            workflow_id = await self._workflows.create(record)
        except WorkflowPersistenceError:
            raise
        except Exception as exc:
            raise WorkflowPersistenceError("Could not schedule notification", detail=str(exc)) from exc

        self._logger.info(
            "notification_scheduled",
            workflow_id=workflow_id,
            kind=record.kind,
            scheduled_for=request.scheduled_for.isoformat(),
            initiated_by=request.initiated_by,
        )
        await self._publish(
            SCHEDULED,
            execution_id=workflow_id,
            initiated_by=request.initiated_by,
            payload={"workflow_id": workflow_id, "scheduled_for": request.scheduled_for.isoformat()},
        )
        return OrchestrationResult(
            success=True,
            message=f"Notification scheduled for {request.scheduled_for.isoformat()}",
            state=OrchestrationState.DONE,
            workflow_id=workflow_id,
        )

    async def execute(self, request: OrchestrationRequest) -> OrchestrationResult:
        """Run the request through every state immediately.

        Raises:
            NotificationError: Request errors (invalid request, unknown
                template or scope, content or directory failures). Nothing
                has been dispatched when these are raised.
        """
        ctx = OrchestrationContext(
            execution_id=ExecutionID.generate(),
            request=request,
            started_at=utc_now(),
        )
        self._logger.info(
            "orchestration_starting",
            execution_id=ctx.execution_key,
            mode=getattr(request.mode, "value", request.mode),
            initiated_by=request.initiated_by,
        )

        try:
            result = await self._run(ctx)
        except NotificationError as exc:
            await self._fail(ctx, exc.code, exc.message)
            raise
        except Exception as exc:
            await self._fail(ctx, "InternalError", str(exc))
            raise

        await self._publish(
            FINISHED,
            execution_id=ctx.execution_key,
            initiated_by=request.initiated_by,
            payload={
                "success": result.success,
                "state": result.state.value,
                "push_succeeded": result.push.succeeded_count,
                "email_succeeded": result.email.succeeded_count,
            },
        )
        self._logger.info(
            "orchestration_finished",
            execution_id=ctx.execution_key,
            success=result.success,
            push_attempted=result.push.attempted,
            email_attempted=result.email.attempted,
            duration_ms=int((utc_now() - ctx.started_at).total_seconds() * 1000),
        )
        return result

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    async def _run(self, ctx: OrchestrationContext) -> OrchestrationResult:
        request = ctx.request

        await self._transition(ctx, OrchestrationState.VALIDATING)
        self._validate(request)
        templates = await self._content.load_templates(request.content, ALL_CHANNELS)

        await self._transition(ctx, OrchestrationState.RESOLVING_RECIPIENTS)
        resolution = await self._recipients.resolve(request.recipients)
        unresolved = [
            RecipientFailure(user_id=user_id, reason=FailureReason.UNKNOWN_USER.value)
            for user_id in resolution.unknown_user_ids
        ]
        for failure in unresolved:
            await self._report_failure(ctx, None, failure)

        if resolution.is_empty:
            await self._transition(ctx, OrchestrationState.DONE)
            return OrchestrationResult(
                success=False,
                message="No recipients resolved",
                unresolved=unresolved,
                state=OrchestrationState.DONE,
                execution_id=ctx.execution_key,
            )

        await self._transition(ctx, OrchestrationState.RENDERING_CONTENT)
        rendered = await self._content.render_all(request.content, ALL_CHANNELS, templates)

        await self._transition(ctx, OrchestrationState.DISPATCHING)
        dispatch_ctx = DispatchContext(
            execution_id=ctx.execution_key,
            initiated_by=request.initiated_by,
            gathering_id=request.gathering_id,
            candidate_id=request.candidate_id,
        )
        push, email = await self._dispatch(ctx, list(resolution.recipients), rendered, dispatch_ctx)

        await self._transition(ctx, OrchestrationState.AGGREGATING)
        for outcome in (push, email):
            for failure in outcome.failures:
                await self._report_failure(ctx, outcome.channel, failure)
        await self._record_deliveries(ctx, rendered, (push, email))

        result = OrchestrationResult(
            success=push.success or email.success,
            message=self._summarize(push, email),
            push=push,
            email=email,
            unresolved=unresolved,
            state=OrchestrationState.DONE,
            execution_id=ctx.execution_key,
        )
        await self._transition(ctx, OrchestrationState.DONE)
        return result

    def _validate(self, request: OrchestrationRequest) -> None:
        if not isinstance(request.mode, OrchestrationMode):
            raise InvalidRequest(f"Unsupported orchestration mode: {request.mode!r}")
        if request.recipients is None:
            raise InvalidRequest("Recipient specification is required")
        if not isinstance(request.recipients, (ExplicitRecipients, RsvpRecipients, MembershipRecipients)):
            raise InvalidRequest("Recipient specification must be user_ids, rsvp_list or group_members")
        self._validate_content(request.content)
        if not request.initiated_by or not str(request.initiated_by).strip():
            raise InvalidRequest("initiated_by is required")

    @staticmethod
    def _validate_content(content: ContentSpec) -> None:
        if content is None:
            raise InvalidRequest("Content is required: literal title/body or a template key")
        if not isinstance(content, (LiteralContent, TemplateContent)):
            raise InvalidRequest("Content must be literal or a template reference")

    async def _dispatch(
        self,
        ctx: OrchestrationContext,
        recipients: list[ResolvedRecipient],
        rendered: dict[Channel, RenderedContent],
        dispatch_ctx: DispatchContext,
    ) -> tuple[ChannelOutcome, ChannelOutcome]:
        request = ctx.request

        if request.mode == OrchestrationMode.BOTH:
            push_call = self._send_channel(self._push, rendered[Channel.PUSH], recipients, request, dispatch_ctx)
            email_call = self._send_channel(self._email, rendered[Channel.EMAIL], recipients, request, dispatch_ctx)
            if self._settings.concurrent_channels:
                push, email = await asyncio.gather(push_call, email_call)
            else:
                push = await push_call
                email = await email_call
            return push, email

        push = await self._send_channel(self._push, rendered[Channel.PUSH], recipients, request, dispatch_ctx)
        if push.succeeded_count > 0:
            return push, ChannelOutcome.not_attempted(Channel.EMAIL)

        fallback = [r for r in recipients if r.has_email]
        if not fallback:
            return push, ChannelOutcome.not_attempted(Channel.EMAIL)

        self._logger.info(
            "push_fallback_to_email",
            execution_id=ctx.execution_key,
            recipient_count=len(fallback),
        )
        email = await self._send_channel(self._email, rendered[Channel.EMAIL], fallback, request, dispatch_ctx)
        return push, email

    async def _send_channel(
        self,
        dispatcher: ChannelDispatcher,
        content: RenderedContent,
        recipients: Sequence[ResolvedRecipient],
        request: OrchestrationRequest,
        dispatch_ctx: DispatchContext,
    ) -> ChannelOutcome:
        try:
            return await dispatcher.send(content, recipients, request.decoration, dispatch_ctx)
        except Exception as exc:
            self._logger.error(
                "channel_dispatch_failed",
                execution_id=dispatch_ctx.execution_id,
                channel=dispatcher.channel.value,
                error=str(exc),
                exc_info=True,
            )
            outcome = ChannelOutcome(channel=dispatcher.channel, attempted=True, error=str(exc))
            for recipient in recipients:
                outcome.record_failure(recipient.user_id, FailureReason.CHANNEL_SEND_ERROR.value)
            return outcome

    @staticmethod
    def _summarize(push: ChannelOutcome, email: ChannelOutcome) -> str:
        parts = []
        for outcome in (push, email):
            if outcome.attempted:
                parts.append(
                    f"{outcome.channel.value} {outcome.succeeded_count}/{outcome.attempted_count} succeeded"
                )
        summary = ", ".join(parts)
        if push.success or email.success:
            return f"Notification sent: {summary}"
        return f"Notification failed for all recipients: {summary}"

    async def _record_deliveries(
        self,
        ctx: OrchestrationContext,
        rendered: dict[Channel, RenderedContent],
        outcomes: tuple[ChannelOutcome, ChannelOutcome],
    ) -> None:
        if self._delivery_log is None:
            return
        for outcome in outcomes:
            if not outcome.attempted:
                continue
            try:
                await self._delivery_log.record(ctx.execution_key, outcome.channel, rendered[outcome.channel], outcome)
            except Exception as exc:
                self._logger.error(
                    "delivery_log_failed",
                    execution_id=ctx.execution_key,
                    channel=outcome.channel.value,
                    error=str(exc),
                )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def _transition(self, ctx: OrchestrationContext, state: OrchestrationState) -> None:
        previous = ctx.state if ctx.history else None
        ctx.state = state
        ctx.history.append((state, utc_now()))
        self._logger.info(
            "orchestration_state_changed",
            execution_id=ctx.execution_key,
            previous=previous.value if previous else None,
            state=state.value,
        )
        await self._publish(
            STATE_CHANGED,
            execution_id=ctx.execution_key,
            initiated_by=ctx.request.initiated_by,
            payload={"previous": previous.value if previous else None, "state": state.value},
        )

    async def _fail(self, ctx: OrchestrationContext, error: str, message: str) -> None:
        self._logger.warning(
            "orchestration_failed",
            execution_id=ctx.execution_key,
            state=ctx.state.value,
            error=error,
            message=message,
        )
        await self._transition(ctx, OrchestrationState.FAILED)
        await self._publish(
            FINISHED,
            execution_id=ctx.execution_key,
            initiated_by=ctx.request.initiated_by,
            payload={"success": False, "state": OrchestrationState.FAILED.value, "error": error},
        )

    async def _report_failure(
        self, ctx: OrchestrationContext, channel: Optional[Channel], failure: RecipientFailure
    ) -> None:
        self._logger.warning(
            "recipient_failed",
            execution_id=ctx.execution_key,
            channel=channel.value if channel else None,
            user_id=failure.user_id,
            reason=failure.reason,
        )
        await self._publish(
            RECIPIENT_FAILED,
            execution_id=ctx.execution_key,
            initiated_by=ctx.request.initiated_by,
            payload={
                "channel": channel.value if channel else None,
                "user_id": failure.user_id,
                "reason": failure.reason,
                "endpoint": failure.endpoint,
            },
        )

    async def _publish(
        self, name: str, execution_id: str, initiated_by: str | None, payload: dict[str, object]
    ) -> None:
        event = Event(
            name=name,
            metadata=EventMetadata(
                execution_id=execution_id,
                service=self._settings.service_name,
                initiated_by=initiated_by,
                timestamp=utc_now(),
            ),
            payload=payload,
        )
        await self._event_bus.publish(event)
