from services.alert_service import AlertService, DeliveryResult, Notifier
from services.command_service import (
    CommandUsageError,
    CreateRequest,
    ParsedCommand,
    format_schedule_line,
    parse_command,
    parse_create_request,
    render_alert,
)
from services.schedule_service import ScheduleService
from services.trigger_service import TriggerScheduler

__all__ = [
    "AlertService",
    "CommandUsageError",
    "CreateRequest",
    "DeliveryResult",
    "Notifier",
    "ParsedCommand",
    "ScheduleService",
    "TriggerScheduler",
    "format_schedule_line",
    "parse_command",
    "parse_create_request",
    "render_alert",
]
