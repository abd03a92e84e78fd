"""Draft client emails from resolved contacts, properties and visits. Never sends."""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from src.models.contact import Contact
from src.models.email import EmailDraft
from src.models.property import Property
from src.models.resolution import EntityKind
from src.models.tool_inputs import DraftEmailInput
from src.models.visit import Visit
from src.services.email_templates import EmailContext, render_email
from src.services.entity_resolver import EntityResolver, parse_record
from src.services.supabase_client import QueryGateway, get_query_gateway
from src.services.workflow import StepRunner, WorkflowStep
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


class DraftEmailWorkflow:
    """Resolve recipient, property and visit, then render a template."""

    def __init__(
        self,
        params: DraftEmailInput,
        gateway: Optional[QueryGateway] = None,
        resolver: Optional[EntityResolver] = None,
    ):
        self.params = params
        self.gateway = gateway or get_query_gateway()
        self.resolver = resolver or EntityResolver(self.gateway)
        self.runner = StepRunner("draft_email")

    def steps(self) -> list[WorkflowStep]:
        return [
            WorkflowStep("contact", self.resolve_contact),
            WorkflowStep(
                "property",
                self.resolve_property,
                when=lambda state: bool(self.params.property_query),
            ),
            WorkflowStep(
                "visit",
                self.fetch_visit,
                fatal=False,
                when=lambda state: bool(self.params.visit_id),
            ),
            WorkflowStep(
                "visit_property",
                self.fetch_visit_property,
                fatal=False,
                when=lambda state: state.get("property") is None and state.get("visit") is not None,
            ),
        ]

    async def resolve_contact(self, state: dict) -> Contact:
        return await self.resolver.resolve_or_raise(
            EntityKind.CONTACT, self.params.contact_query, self.params.agency_id
        )

    async def resolve_property(self, state: dict) -> Property:
        return await self.resolver.resolve_or_raise(
            EntityKind.PROPERTY, self.params.property_query, self.params.agency_id
        )

    async def fetch_visit(self, state: dict) -> Optional[Visit]:
        row = await self.gateway.get_by_id("visits", self.params.visit_id, self.params.agency_id)
        if row is None:
            state["transcript"].warnings.append(f"Visit not found: {self.params.visit_id}")
            return None
        try:
            return Visit.model_validate(row)
        except PydanticValidationError:
            state["transcript"].warnings.append(f"Visit {self.params.visit_id} could not be read")
            return None

    async def fetch_visit_property(self, state: dict) -> None:
        visit: Visit = state["visit"]
        if not visit.property_id:
            return None
        row = await self.gateway.get_by_id("properties", visit.property_id, self.params.agency_id)
        if row is None:
            state["transcript"].warnings.append(f"Property of visit {visit.id} not found")
            return None
        state["property"] = parse_record(EntityKind.PROPERTY, row)
        return None

    async def run(self) -> dict:
        state = await self.runner.run(self.steps(), {"agency_id": self.params.agency_id})
        contact: Contact = state["contact"]
        warnings = self.runner.transcript.warnings

        if not contact.email:
            warnings.append(f"{contact.full_name} has no email address on file")

        params = self.params
        subject, body = render_email(
            params.email_type,
            params.tone,
            params.language,
            EmailContext(
                contact=contact,
                property=state.get("property"),
                visit=state.get("visit"),
                custom_message=params.custom_message,
                include_price=params.include_price,
                include_characteristics=params.include_characteristics,
            ),
            custom_subject=params.custom_subject,
        )
        logger.info(
            "Email drafted",
            email_type=params.email_type.value,
            language=params.language.value,
            tone=params.tone.value,
            contact_id=contact.id,
            warning_count=len(warnings),
            agency_id=params.agency_id,
        )
        draft = EmailDraft(subject=subject, body=body, to=contact.email, warnings=list(warnings))
        return draft.model_dump()


async def draft_email(
    params: DraftEmailInput,
    gateway: Optional[QueryGateway] = None,
    resolver: Optional[EntityResolver] = None,
) -> dict:
    return await DraftEmailWorkflow(params, gateway, resolver).run()
