"""
Contract preparation workflows.

prepare_contract resolves the property, resolves (or creates) the contact,
inserts a draft contract, then applies secondary effects: moving a published
property under offer for sale contracts and creating follow-up tasks. The
secondary effects are best-effort and never undo the contract.
"""

from datetime import date
from typing import Optional

from src.models.contact import Contact, ContactType
from src.models.contract import SALE_CONTRACT_TYPES, Contract, ContractTerms, ContractType
from src.models.property import Property, PropertyStatus
from src.models.resolution import EntityKind
from src.models.task import Task, TaskPriority, TaskRelation
from src.models.tool_inputs import PrepareContractInput, QuickMandateInput
from src.services.contracts import insert_contract
from src.services.contacts import resolve_or_create_contact
from src.services.date_parser import add_days
from src.services.entity_resolver import EntityResolver
from src.services.formatters import format_prepared_contract
from src.services.supabase_client import QueryGateway, get_query_gateway
from src.services.workflow import StepRunner, WorkflowStep
FOLLOW_UP_DELAY_DAYS = 3
FOLLOW_UP_TASK_COUNT = 2

NEXT_STEPS: dict[ContractType, list[str]] = {
    ContractType.MANDATE: [
        "Review contract terms with property owner",
        "Discuss exclusivity and commission",
        "Get contract signed",
        "Start marketing the property",
    ],
    ContractType.SALE_EXISTING: [
        "Review terms with buyer and seller",
        "Coordinate with notary",
        "Schedule signing appointment",
        "Prepare property handover",
    ],
    ContractType.RENTAL: [
        "Review lease terms",
        "Verify tenant references",
        "Schedule lease signing",
        "Plan move-in inspection",
    ],
    ContractType.OFFER: [
        "Review offer terms with buyer",
        "Present offer to seller",
        "Negotiate if needed",
        "Prepare sale contract if accepted",
    ],
    ContractType.RESERVATION: [
        "Confirm reservation details",
        "Collect deposit if required",
        "Schedule property visit",
        "Prepare final contract",
    ],
}
NEXT_STEPS[ContractType.SALE_VEFA] = NEXT_STEPS[ContractType.SALE_EXISTING]

MANDATE_NEXT_STEPS = ["Use sign_contract when the mandate is signed"]


def default_contact_type(contract_type: ContractType) -> ContactType:
    return ContactType.SELLER if contract_type is ContractType.MANDATE else ContactType.BUYER


def follow_up_tasks(
    contract: Contract, contract_type: ContractType, prop: Property, contact: Contact, today: date
) -> list[Task]:
    """The review and signature follow-up tasks for a new contract."""
    relation = TaskRelation(type="contract", id=contract.id)
    return [
        Task(
            agency_id=contract.agency_id,
            title=f"Review and send {contract_type.value} contract",
            description=f"Contract for {contact.full_name} - Property {prop.reference}",
            due_date=today,
            priority=TaskPriority.HIGH,
            assigned_to=contract.agency_id,
            related_to=relation,
        ),
        Task(
            agency_id=contract.agency_id,
            title=f"Follow up on {contract_type.value} contract signature",
            description=f"Check if {contact.first_name} has signed the contract",
            due_date=add_days(today, FOLLOW_UP_DELAY_DAYS),
            priority=TaskPriority.MEDIUM,
            assigned_to=contract.agency_id,
            related_to=relation,
        ),
    ]


class PrepareContractWorkflow:
    """Build and run the prepare-contract step list."""

    def __init__(
        self,
        params: PrepareContractInput,
        gateway: Optional[QueryGateway] = None,
        resolver: Optional[EntityResolver] = None,
    ):
        self.params = params
        self.gateway = gateway or get_query_gateway()
        self.resolver = resolver or EntityResolver(self.gateway)
        self.runner = StepRunner("prepare_contract")

    @property
    def transcript(self):
        return self.runner.transcript

    @property
    def terms(self) -> ContractTerms:
        return ContractTerms(
            commission_rate=self.params.commission_rate,
            duration_months=self.params.duration_months,
            exclusivity=self.params.exclusivity,
            notes=self.params.notes,
        )

    def steps(self) -> list[WorkflowStep]:
        task_steps = [
            WorkflowStep(
                f"task_{index}",
                self._task_action(index),
                fatal=False,
                when=lambda state: "follow_up_tasks" in state,
            )
            for index in range(FOLLOW_UP_TASK_COUNT)
        ]
        return [
            WorkflowStep("property", self.resolve_property),
            WorkflowStep("contact", self.resolve_or_create_contact),
            WorkflowStep("contract", self.create_contract),
            WorkflowStep(
                "property_under_offer",
                self.mark_under_offer,
                fatal=False,
                when=self.should_mark_under_offer,
            ),
            WorkflowStep(
                "follow_up_tasks",
                self.build_follow_up_tasks,
                fatal=False,
                when=lambda state: self.params.create_tasks,
            ),
            *task_steps,
        ]

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
            default_contact_type(self.params.type),
        )

    async def create_contract(self, state: dict) -> Contract:
        contract = await insert_contract(
            self.gateway,
            self.params.agency_id,
            self.params.type,
            state["property"],
            state["contact"],
            self.terms,
        )
        self.transcript.record_created(
            "contract", contract.id, f"Created {self.params.type.value} contract (draft)"
        )
        return contract

    def should_mark_under_offer(self, state: dict) -> bool:
        return (
            self.params.type in SALE_CONTRACT_TYPES
            and state["property"].status == PropertyStatus.PUBLISHED.value
        )

    async def mark_under_offer(self, state: dict) -> None:
        prop: Property = state["property"]
        await self.gateway.update_record(
            "properties",
            prop.id,
            self.params.agency_id,
            {"status": PropertyStatus.UNDER_OFFER.value},
        )
        self.transcript.record_updated("property", prop.id, "Updated property status to 'under offer'")

    async def build_follow_up_tasks(self, state: dict) -> list[Task]:
        return follow_up_tasks(
            state["contract"], self.params.type, state["property"], state["contact"], date.today()
        )

    def _task_action(self, index: int):
        async def create_task(state: dict) -> Optional[str]:
            task = state["follow_up_tasks"][index]
            record = task.model_dump(mode="json", exclude={"id", "created_at", "updated_at"})
            row = await self.gateway.insert_record("tasks", record)
            self.transcript.record_created("task", row["id"], f"Created task: {task.title}")
            return row["id"]

        return create_task

    async def run(self) -> dict:
        state = await self.runner.run(self.steps(), {"agency_id": self.params.agency_id})
        self.transcript.next_steps.extend(NEXT_STEPS.get(self.params.type, []))

        contract: Contract = state["contract"]
        transcript = self.transcript.to_dict()
        return {
            "contract": contract.model_dump(mode="json"),
            "property_id": state["property"].id,
            "contact_id": state["contact"].id,
            **transcript,
            "text": format_prepared_contract(
                contract.id,
                self.params.type,
                state["property"],
                state["contact"],
                contract.data,
                self.transcript.actions,
                self.transcript.next_steps,
                self.transcript.warnings,
            ),
        }


async def prepare_contract(
    params: PrepareContractInput,
    gateway: Optional[QueryGateway] = None,
    resolver: Optional[EntityResolver] = None,
) -> dict:
    return await PrepareContractWorkflow(params, gateway, resolver).run()


async def quick_mandate(
    params: QuickMandateInput,
    gateway: Optional[QueryGateway] = None,
    resolver: Optional[EntityResolver] = None,
) -> dict:
    """Create a draft selling mandate for a resolved property and owner."""
    gateway = gateway or get_query_gateway()
    resolver = resolver or EntityResolver(gateway)
    terms = ContractTerms(
        commission_rate=params.commission_rate,
        duration_months=params.duration_months,
        exclusivity=params.exclusivity,
    )

    async def resolve_property(state: dict) -> Property:
        prop = await resolver.resolve_or_raise(EntityKind.PROPERTY, params.property_query, params.agency_id)
        state["transcript"].actions.append(f"Found property: {prop.reference}")
        return prop

    async def resolve_owner(state: dict) -> Contact:
        owner = await resolver.resolve_or_raise(EntityKind.CONTACT, params.owner_query, params.agency_id)
        state["transcript"].actions.append(f"Found owner: {owner.full_name}")
        return owner

    async def create(state: dict) -> Contract:
        contract = await insert_contract(
            gateway, params.agency_id, ContractType.MANDATE, state["property"], state["owner"], terms
        )
        state["transcript"].record_created("contract", contract.id, "Created mandate contract (draft)")
        return contract

    runner = StepRunner("quick_mandate")
    state = await runner.run(
        [
            WorkflowStep("property", resolve_property),
            WorkflowStep("owner", resolve_owner),
            WorkflowStep("contract", create),
        ],
        {"agency_id": params.agency_id},
    )
    runner.transcript.next_steps.extend(MANDATE_NEXT_STEPS)
    return {
        "contract": state["contract"].model_dump(mode="json"),
        "property_reference": state["property"].reference,
        "owner_name": state["owner"].full_name,
        **runner.transcript.to_dict(),
    }
