"""Human-readable formatting for tool responses."""

from typing import Optional

from src.models.contact import Contact
from src.models.contract import ContractType
from src.models.property import Address, Property
from src.models.visit import Visit
from src.services.date_parser import format_display_date

# fr-LU groups thousands with a narrow no-break space
_THOUSANDS_SEPARATOR = " "
_CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£", "CHF": "CHF"}

CONTRACT_TYPE_EMOJI = {
    ContractType.MANDATE: "📋",
    ContractType.SALE_EXISTING: "🏷️",
    ContractType.SALE_VEFA: "🏗️",
    ContractType.RENTAL: "🔑",
    ContractType.OFFER: "💰",
    ContractType.RESERVATION: "📝",
}


def format_price(price: Optional[float], currency: str = "EUR") -> str:
    """Format a price without decimals, e.g. `450 000 €`."""
    if price is None:
        return "Price on request"
    amount = f"{int(round(price)):,}".replace(",", _THOUSANDS_SEPARATOR)
    return f"{amount} {_CURRENCY_SYMBOLS.get(currency, currency)}"


def format_address_short(address: Optional[Address]) -> str:
    """`street, city`, or `No address`."""
    if address is None:
        return "No address"
    parts = [part for part in (address.street, address.city) if part]
    return ", ".join(parts) or "No address"


def contract_type_label(contract_type: ContractType) -> str:
    """`sale_existing` -> `Sale existing`."""
    text = contract_type.value.replace("_", " ")
    return text[:1].upper() + text[1:]


def format_prepared_contract(
    contract_id: str,
    contract_type: ContractType,
    prop: Property,
    contact: Contact,
    terms: dict,
    actions: list[str],
    next_steps: list[str],
    warnings: Optional[list[str]] = None,
) -> str:
    """Markdown summary of a prepared contract."""
    emoji = CONTRACT_TYPE_EMOJI.get(contract_type, "📄")
    party = "Owner" if contract_type is ContractType.MANDATE else "Client"

    lines = [
        "# Contract Prepared!",
        "",
        f"## {emoji} {contract_type_label(contract_type)} Contract",
        "",
        "### Property",
        f"**{prop.reference}**",
        format_address_short(prop.address),
        format_price(prop.price),
        "",
        f"### {party}",
        f"**{contact.full_name}**",
    ]
    if contact.phone:
        lines.append(f"📞 {contact.phone}")
    if contact.email:
        lines.append(f"✉️ {contact.email}")

    lines += ["", "### Contract Details", "- **Status**: Draft"]
    if terms.get("commission_rate") is not None:
        lines.append(f"- **Commission**: {terms['commission_rate']:g}%")
    if terms.get("exclusivity"):
        lines.append("- **Exclusive**: Yes")
    if terms.get("duration_months"):
        lines.append(f"- **Duration**: {terms['duration_months']} months")

    lines += ["", "## Actions Taken"]
    lines += [f"- ✅ {action}" for action in actions]

    if warnings:
        lines += ["", "## Warnings"]
        lines += [f"- ⚠️ {warning}" for warning in warnings]

    if next_steps:
        lines += ["", "## Next Steps"]
        lines += [f"- [ ] {step}" for step in next_steps]

    lines += ["", f"**Contract ID**: `{contract_id}`"]
    return "\n".join(lines)


def format_scheduled_visit(
    visit: Visit,
    prop: Property,
    contact: Contact,
    actions: list[str],
    warnings: Optional[list[str]] = None,
) -> str:
    """Markdown summary of a newly scheduled visit."""
    lines = [
        "# Visit Scheduled!",
        "",
        f"**Date**: {format_display_date(visit.date)}",
        f"**Time**: {visit.start_time} - {visit.end_time}",
        "",
        "## Property",
        f"**{prop.reference}**",
        format_address_short(prop.address),
        format_price(prop.price),
        "",
        "## Client",
        f"**{contact.full_name}**",
    ]
    if contact.phone:
        lines.append(f"📞 {contact.phone}")
    if contact.email:
        lines.append(f"✉️ {contact.email}")

    lines += ["", "## Actions Taken"]
    lines += [f"- ✅ {action}" for action in actions]
    if warnings:
        lines += [f"- ⚠️ {warning}" for warning in warnings]

    lines += ["", f"**Visit ID**: `{visit.id}`"]
    return "\n".join(lines)
