"""
Visit scheduling workflows.

schedule_visit parses the requested slot first, then resolves the property,
resolves (or creates) the contact and inserts the visit. The overlap check
and the reminder task are best-effort. quick_reschedule moves an existing
visit, keeping its duration.
"""

from datetime import date
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from src.models.contact import Contact, ContactType
from src.models.property import Property
from src.models.resolution import EntityKind
from src.models.task import Task, TaskPriority, TaskRelation
from src.models.tool_inputs import QuickRescheduleInput, ScheduleVisitInput
from src.models.visit import Visit
from src.services.contacts import resolve_or_create_contact
from src.services.date_parser import (
    ParsedDate,
    add_days,
    calculate_end_time,
    format_display_date,
    minutes_between,
    parse_date_and_time,
    times_overlap,
)
from src.services.entity_resolver import EntityResolver, parse_record
from src.services.formatters import format_scheduled_visit
from src.services.supabase_client import QueryGateway, get_query_gateway
from src.services.workflow import StepRunner, WorkflowStep
from src.utils.errors import NotFoundError, ResolutionError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

DEFAULT_START_TIME = "10:00"
DEFAULT_DURATION_MINUTES = 60
VISIT_NEXT_STEPS = ["Confirm the visit with the client"]


def parse_visit(row: dict) -> Visit:
    try:
        return Visit.model_validate(row)
    except PydanticValidationError as e:
        raise ResolutionError(
            "Malformed visit row from store",
            context={"record_id": row.get("id"), "errors": e.error_count()},
        )


async def fetch_visit(gateway: QueryGateway, visit_id: str, agency_id: str) -> Visit:
    row = await gateway.get_by_id("visits", visit_id, agency_id)
    if row is None:
        raise NotFoundError(f"Visit not found: {visit_id}")
    return parse_visit(row)


def reminder_task(visit: Visit, prop: Property, contact: Contact) -> Task:
    """High-priority confirmation task due the day before the visit."""
    return Task(
        agency_id=visit.agency_id,
        title=f"Confirm visit with {contact.full_name}",
        description=f"Visit at {prop.reference} on {visit.date} at {visit.start_time}",
        due_date=add_days(date.fromisoformat(visit.date), -1),
        priority=TaskPriority.HIGH,
        assigned_to=visit.agency_id,
        related_to=TaskRelation(type="visit", id=visit.id),
    )


async def insert_task(gateway: QueryGateway, task: Task) -> dict:
    record = task.model_dump(mode="json", exclude={"id", "created_at", "updated_at"})
    return await gateway.insert_record("tasks", record)


class ScheduleVisitWorkflow:
    """Build and run the schedule-visit step list."""

    def __init__(
        self,
        params: ScheduleVisitInput,
        gateway: Optional[QueryGateway] = None,
        resolver: Optional[EntityResolver] = None,
    ):
        self.params = params
        self.gateway = gateway or get_query_gateway()
        self.resolver = resolver or EntityResolver(self.gateway)
        self.runner = StepRunner("schedule_visit")

    @property
    def transcript(self):
        return self.runner.transcript

    def steps(self) -> list[WorkflowStep]:
        return [
            WorkflowStep("slot", self.parse_slot),
            WorkflowStep("property", self.resolve_property),
            WorkflowStep("contact", self.resolve_or_create_contact),
            WorkflowStep("conflicts", self.check_conflicts, fatal=False),
            WorkflowStep("visit", self.create_visit),
            WorkflowStep(
                "reminder",
                self.create_reminder,
                fatal=False,
                when=lambda state: self.params.create_reminder,
            ),
        ]

    async def parse_slot(self, state: dict) -> dict:
        parsed: ParsedDate = parse_date_and_time(self.params.date, self.params.time)
        start = parsed.time or DEFAULT_START_TIME
        return {
            "date": parsed.date_string,
            "start_time": start,
            "end_time": calculate_end_time(start, self.params.duration_minutes),
        }

    async def resolve_property(self, state: dict) -> Property:
        prop = await self.resolver.resolve_or_raise(
            EntityKind.PROPERTY, self.params.property_query, self.params.agency_id
        )
        self.transcript.actions.append(f"Found property: {prop.reference}")
        return prop

    async def resolve_or_create_contact(self, state: dict) -> Contact:
        return await resolve_or_create_contact(
            self.resolver,
            self.gateway,
            self.transcript,
            self.params.contact_query,
            self.params.agency_id,
            self.params,
            ContactType.LEAD,
        )

    async def check_conflicts(self, state: dict) -> list[str]:
        slot = state["slot"]
        rows, _ = await self.gateway.list_records(
            "visits",
            self.params.agency_id,
            filters={"date": slot["date"], "status__neq": "cancelled"},
            order_by="start_time",
            descending=False,
        )
        clashes = [
            f"{row['start_time'][:5]}-{row['end_time'][:5]}"
            for row in rows
            if row.get("start_time") and row.get("end_time")
            and times_overlap(slot["start_time"], slot["end_time"], row["start_time"], row["end_time"])
        ]
        if clashes:
            self.transcript.warnings.append(f"Potential conflicts at {', '.join(clashes)}")
        return clashes

    async def create_visit(self, state: dict) -> Visit:
        slot = state["slot"]
        row = await self.gateway.insert_record(
            "visits",
            {
                "agency_id": self.params.agency_id,
                "property_id": state["property"].id,
                "contact_id": state["contact"].id,
                "date": slot["date"],
                "start_time": slot["start_time"],
                "end_time": slot["end_time"],
                "status": "scheduled",
                "confirmation_status": "pending",
                "notes": self.params.notes or "",
            },
        )
        visit = parse_visit(row)
        self.transcript.record_created(
            "visit",
            visit.id,
            f"Scheduled visit for {format_display_date(visit.date)} at {visit.start_time}",
        )
        logger.info(
            "Visit scheduled",
            visit_id=visit.id,
            property_id=visit.property_id,
            contact_id=visit.contact_id,
            agency_id=self.params.agency_id,
        )
        return visit

    async def create_reminder(self, state: dict) -> str:
        task = reminder_task(state["visit"], state["property"], state["contact"])
        row = await insert_task(self.gateway, task)
        self.transcript.record_created("task", row["id"], "Created reminder task for the day before")
        return row["id"]

    async def run(self) -> dict:
        state = await self.runner.run(self.steps(), {"agency_id": self.params.agency_id})
        self.transcript.next_steps.extend(VISIT_NEXT_STEPS)

        visit: Visit = state["visit"]
        return {
            "visit": visit.model_dump(mode="json"),
            "property_reference": state["property"].reference,
            "contact_name": state["contact"].full_name,
            **self.transcript.to_dict(),
            "text": format_scheduled_visit(
                visit,
                state["property"],
                state["contact"],
                self.transcript.actions,
                self.transcript.warnings,
            ),
        }


async def schedule_visit(
    params: ScheduleVisitInput,
    gateway: Optional[QueryGateway] = None,
    resolver: Optional[EntityResolver] = None,
) -> dict:
    return await ScheduleVisitWorkflow(params, gateway, resolver).run()


async def quick_reschedule(
    params: QuickRescheduleInput,
    gateway: Optional[QueryGateway] = None,
) -> dict:
    """Move a visit to a new date (and optionally time), keeping its duration."""
    gateway = gateway or get_query_gateway()
    agency_id = params.agency_id

    async def load(state: dict) -> Visit:
        return await fetch_visit(gateway, params.visit_id, agency_id)

    async def slot(state: dict) -> dict:
        existing: Visit = state["existing"]
        parsed = parse_date_and_time(params.new_date, params.new_time)
        duration = DEFAULT_DURATION_MINUTES
        if existing.start_time and existing.end_time:
            duration = minutes_between(existing.start_time, existing.end_time) or duration
        start = parsed.time or (existing.start_time or DEFAULT_START_TIME)[:5]
        return {
            "date": parsed.date_string,
            "start_time": start,
            "end_time": calculate_end_time(start, duration),
        }

    async def move(state: dict) -> Visit:
        existing: Visit = state["existing"]
        row = await gateway.update_record(
            "visits",
            existing.id,
            agency_id,
            {**state["slot"], "confirmation_status": "pending"},
        )
        visit = parse_visit(row)
        state["transcript"].record_updated(
            "visit",
            visit.id,
            f"Rescheduled visit from {existing.date} {existing.start_time} to {visit.date} {visit.start_time}",
        )
        return visit

    async def load_contact(state: dict) -> Optional[Contact]:
        contact_id = state["existing"].contact_id
        row = await gateway.get_by_id("contacts", contact_id, agency_id) if contact_id else None
        return parse_record(EntityKind.CONTACT, row) if row else None

    async def notify(state: dict) -> str:
        existing: Visit = state["existing"]
        visit: Visit = state["visit"]
        contact: Optional[Contact] = state.get("contact")
        name = contact.first_name if contact else "the client"
        task = Task(
            agency_id=agency_id,
            title=f"Notify {name} of rescheduled visit",
            description=(
                f"Visit rescheduled from {existing.date} {existing.start_time} "
                f"to {visit.date} {visit.start_time}"
            ),
            due_date=date.today(),
            priority=TaskPriority.HIGH,
            assigned_to=agency_id,
            related_to=TaskRelation(type="visit", id=visit.id),
        )
        row = await insert_task(gateway, task)
        state["transcript"].record_created("task", row["id"], "Created task to notify the client")
        return row["id"]

    runner = StepRunner("quick_reschedule")
    state = await runner.run(
        [
            WorkflowStep("existing", load),
            WorkflowStep("slot", slot),
            WorkflowStep("visit", move),
            WorkflowStep("contact", load_contact, fatal=False),
            WorkflowStep("notification", notify, fatal=False, when=lambda state: params.notify),
        ],
        {"agency_id": agency_id},
    )
    if not params.notify:
        runner.transcript.next_steps.append("Notify the client of the new time")

    existing: Visit = state["existing"]
    return {
        "visit": state["visit"].model_dump(mode="json"),
        "previous": {"date": existing.date, "start_time": existing.start_time},
        **runner.transcript.to_dict(),
    }
