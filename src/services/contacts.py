"""Contact resolution with create-if-missing, shared by the workflows."""

from src.models.contact import Contact, ContactStatus, ContactType
from src.models.resolution import EntityKind, Resolved
from src.models.tool_inputs import NewContactFields
from src.services.entity_resolver import EntityResolver, parse_record, resolution_failure
from src.services.supabase_client import QueryGateway
from src.services.workflow import Transcript
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

NEW_CONTACT_SOURCE = "agent"
NEW_CONTACT_HINT = " To create a new contact, also provide: contact_first_name, contact_last_name"


async def resolve_or_create_contact(
    resolver: EntityResolver,
    gateway: QueryGateway,
    transcript: Transcript,
    contact_query: str,
    agency_id: str,
    fields: NewContactFields,
    default_type: ContactType,
) -> Contact:
    """
    Resolve `contact_query`, or insert a new contact from `fields`.

    A new contact needs both name fields; without them the resolution
    error is raised with a hint. Not idempotent: retrying with the same
    name fields after an unresolved query inserts another contact.
    """
    result = await resolver.resolve(EntityKind.CONTACT, contact_query, agency_id)
    if isinstance(result, Resolved):
        transcript.actions.append(f"Found contact: {result.record.full_name}")
        return result.record

    if not (fields.contact_first_name and fields.contact_last_name):
        error = resolution_failure(EntityKind.CONTACT, result)
        error.message += NEW_CONTACT_HINT
        raise error

    contact_type = fields.contact_type or default_type
    row = await gateway.insert_record(
        "contacts",
        {
            "agency_id": agency_id,
            "first_name": fields.contact_first_name,
            "last_name": fields.contact_last_name,
            "type": contact_type.value,
            "status": ContactStatus.NEW.value,
            "phone": fields.contact_phone,
            "email": fields.contact_email,
            "source": NEW_CONTACT_SOURCE,
            "tags": [],
        },
    )
    contact = parse_record(EntityKind.CONTACT, row)
    transcript.record_created(
        "contact",
        contact.id,
        f"Created new contact: {contact.full_name} ({contact_type.value})",
    )
    logger.info(
        "Contact created by workflow",
        contact_id=contact.id,
        contact_type=contact_type.value,
        agency_id=agency_id,
    )
    return contact
