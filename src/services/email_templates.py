"""
Email templates keyed by (email type, tone, language).

Greeting and closing depend on tone and language; subject and body depend
on email type and language. Rendering is pure: no store access.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from src.models.contact import Contact
from src.models.email import EmailLanguage, EmailTone, EmailType
from src.models.property import Property
from src.models.visit import Visit
from src.services.date_parser import format_display_date
from src.services.formatters import format_address_short, format_price

EN, FR, DE = EmailLanguage.EN, EmailLanguage.FR, EmailLanguage.DE
PRO, FRIENDLY, FORMAL = EmailTone.PROFESSIONAL, EmailTone.FRIENDLY, EmailTone.FORMAL

GREETINGS: dict[tuple[EmailTone, EmailLanguage], str] = {
    (PRO, EN): "Dear {first_name},",
    (FRIENDLY, EN): "Hi {first_name}!",
    (FORMAL, EN): "Dear Mr./Ms. {last_name},",
    (PRO, FR): "Bonjour {first_name},",
    (FRIENDLY, FR): "Salut {first_name} !",
    (FORMAL, FR): "Cher(e) M./Mme {last_name},",
    (PRO, DE): "Guten Tag {first_name},",
    (FRIENDLY, DE): "Hallo {first_name}!",
    (FORMAL, DE): "Sehr geehrte(r) Herr/Frau {last_name},",
}

CLOSINGS: dict[tuple[EmailTone, EmailLanguage], str] = {
    (PRO, EN): "Best regards,",
    (FRIENDLY, EN): "Cheers,",
    (FORMAL, EN): "Yours sincerely,",
    (PRO, FR): "Cordialement,",
    (FRIENDLY, FR): "À bientôt,",
    (FORMAL, FR): "Veuillez agréer mes salutations distinguées,",
    (PRO, DE): "Mit freundlichen Grüßen,",
    (FRIENDLY, DE): "Viele Grüße,",
    (FORMAL, DE): "Hochachtungsvoll,",
}

# Per-language labels, keyed by language then label name
LABELS: dict[EmailLanguage, dict[str, str]] = {
    EN: {
        "date": "Date", "time": "Time", "property": "Property", "address": "Address",
        "price": "Price", "features": "Features", "bedrooms": "bedrooms", "bathrooms": "bathrooms",
    },
    FR: {
        "date": "Date", "time": "Heure", "property": "Bien", "address": "Adresse",
        "price": "Prix", "features": "Caractéristiques", "bedrooms": "chambres", "bathrooms": "salles de bain",
    },
    DE: {
        "date": "Datum", "time": "Uhrzeit", "property": "Immobilie", "address": "Adresse",
        "price": "Preis", "features": "Merkmale", "bedrooms": "Schlafzimmer", "bathrooms": "Badezimmer",
    },
}


@dataclass
class EmailContext:
    """Everything a template may read."""

    contact: Contact
    property: Optional[Property] = None
    visit: Optional[Visit] = None
    custom_message: Optional[str] = None
    include_price: bool = True
    include_characteristics: bool = True


Renderer = Callable[[EmailContext, EmailLanguage], tuple[str, str]]


def greeting(contact: Contact, tone: EmailTone, language: EmailLanguage) -> str:
    template = GREETINGS.get((tone, language), GREETINGS[(PRO, EN)])
    return template.format(first_name=contact.first_name, last_name=contact.last_name or contact.first_name)


def closing(tone: EmailTone, language: EmailLanguage) -> str:
    return CLOSINGS.get((tone, language), CLOSINGS[(PRO, EN)])


def _reference(prop: Optional[Property], fallback: str) -> str:
    return prop.reference if prop else fallback


def _property_presentation(ctx: EmailContext, language: EmailLanguage) -> tuple[str, str]:
    prop = ctx.property
    if prop is None:
        return "Property Information", "[Property details would go here]"

    kind = prop.type or "property"
    subjects = {
        EN: f"Property Opportunity: {kind} in {prop.address.city or 'Great Location'}",
        FR: f"Opportunité Immobilière: {kind} à {prop.address.city or 'Excellent Emplacement'}",
        DE: f"Immobilienangebot: {kind} in {prop.address.city or 'Top Lage'}",
    }
    intros = {
        EN: "I am pleased to present you with a property that matches your criteria:",
        FR: "J'ai le plaisir de vous présenter un bien correspondant à vos critères :",
        DE: "Ich freue mich, Ihnen eine Immobilie vorzustellen, die Ihren Kriterien entspricht:",
    }
    ctas = {
        EN: "Would you like to schedule a viewing? I am available at your convenience.",
        FR: "Souhaitez-vous organiser une visite ? Je suis disponible selon vos convenances.",
        DE: "Möchten Sie eine Besichtigung vereinbaren? Ich stehe Ihnen gerne zur Verfügung.",
    }
    labels = LABELS[language]

    details = [f"**{prop.reference}**", format_address_short(prop.address)]
    if ctx.include_price:
        details += ["", f"**{labels['price']}**: {format_price(prop.price)}"]
    if ctx.include_characteristics:
        chars = prop.characteristics
        features = []
        if chars.surface:
            features.append(f"{chars.surface:g} m²")
        if chars.bedrooms:
            features.append(f"{chars.bedrooms} {labels['bedrooms']}")
        if chars.bathrooms:
            features.append(f"{chars.bathrooms} {labels['bathrooms']}")
        if features:
            details += ["", f"**{labels['features']}**: {' | '.join(features)}"]

    body = "\n\n".join([intros[language], "\n".join(details), ctas[language]])
    return subjects[language], body


def _visit_confirmation(ctx: EmailContext, language: EmailLanguage) -> tuple[str, str]:
    prop, visit = ctx.property, ctx.visit
    visit_date = visit.date if visit and visit.date else None
    date_placeholder = "[Datum]" if language is DE else "[Date]"
    subjects = {
        EN: f"Visit Confirmation: {_reference(prop, 'Property')} on {visit_date or date_placeholder}",
        FR: f"Confirmation de Visite: {_reference(prop, 'Bien')} le {visit_date or date_placeholder}",
        DE: f"Besichtigungsbestätigung: {_reference(prop, 'Immobilie')} am {visit_date or date_placeholder}",
    }
    intros = {
        EN: "I am writing to confirm your property viewing:",
        FR: "Je vous écris pour confirmer votre visite :",
        DE: "Hiermit bestätige ich Ihren Besichtigungstermin:",
    }
    outros = {
        EN: "Please let me know if you need to reschedule or if you have any questions.",
        FR: "N'hésitez pas à me contacter si vous avez besoin de reporter ou si vous avez des questions.",
        DE: "Bitte lassen Sie mich wissen, falls Sie umplanen müssen oder Fragen haben.",
    }
    labels = LABELS[language]
    details = "\n".join([
        f"**{labels['date']}**: {format_display_date(visit_date) if visit_date else date_placeholder}",
        f"**{labels['time']}**: {(visit.start_time if visit else None) or '[' + labels['time'] + ']'}",
        f"**{labels['property']}**: {_reference(prop, '[Reference]')}",
        f"**{labels['address']}**: {format_address_short(prop.address) if prop else '[' + labels['address'] + ']'}",
    ])
    return subjects[language], "\n\n".join([intros[language], details, outros[language]])


def _visit_followup(ctx: EmailContext, language: EmailLanguage) -> tuple[str, str]:
    prop = ctx.property
    subjects = {
        EN: f"Following up on your visit to {_reference(prop, 'the property')}",
        FR: f"Suite à votre visite de {_reference(prop, 'la propriété')}",
        DE: f"Nachverfolgung Ihrer Besichtigung von {_reference(prop, 'der Immobilie')}",
    }
    bodies = {
        EN: [
            f"Thank you for taking the time to visit {_reference(prop, 'the property')}.",
            "I would love to hear your thoughts. Did the property meet your expectations?",
            "If you have any questions or would like to discuss further, I am at your disposal.",
        ],
        FR: [
            f"Merci d'avoir pris le temps de visiter {_reference(prop, 'le bien')}.",
            "J'aimerais connaître vos impressions. Le bien correspondait-il à vos attentes ?",
            "Si vous avez des questions ou souhaitez en discuter, je reste à votre disposition.",
        ],
        DE: [
            f"Vielen Dank, dass Sie sich die Zeit genommen haben, {_reference(prop, 'die Immobilie')} zu besichtigen.",
            "Ich würde gerne Ihre Meinung hören. Hat die Immobilie Ihren Erwartungen entsprochen?",
            "Wenn Sie Fragen haben oder weitere Informationen wünschen, stehe ich Ihnen gerne zur Verfügung.",
        ],
    }
    return subjects[language], "\n\n".join(bodies[language])


def _offer_received(ctx: EmailContext, language: EmailLanguage) -> tuple[str, str]:
    prop = ctx.property
    subjects = {
        EN: f"Offer Received for {_reference(prop, 'Your Property')}",
        FR: f"Offre Reçue pour {_reference(prop, 'Votre Bien')}",
        DE: f"Angebot erhalten für {_reference(prop, 'Ihre Immobilie')}",
    }
    placeholders = {EN: "[Offer details]", FR: "[Détails de l'offre]", DE: "[Angebotsdetails]"}
    bodies = {
        EN: [
            "I am pleased to inform you that we have received an offer for your property.",
            ctx.custom_message or placeholders[EN],
            "I would like to discuss this offer with you at your earliest convenience.",
        ],
        FR: [
            "J'ai le plaisir de vous informer que nous avons reçu une offre pour votre bien.",
            ctx.custom_message or placeholders[FR],
            "Je souhaiterais discuter de cette offre avec vous dès que possible.",
        ],
        DE: [
            "Ich freue mich, Ihnen mitteilen zu können, dass wir ein Angebot für Ihre Immobilie erhalten haben.",
            ctx.custom_message or placeholders[DE],
            "Ich würde dieses Angebot gerne bei nächster Gelegenheit mit Ihnen besprechen.",
        ],
    }
    return subjects[language], "\n\n".join(bodies[language])


def _contract_ready(ctx: EmailContext, language: EmailLanguage) -> tuple[str, str]:
    prop = ctx.property
    subjects = {
        EN: f"Contract Ready for Signature - {_reference(prop, 'Property')}",
        FR: f"Contrat Prêt à Signer - {_reference(prop, 'Bien')}",
        DE: f"Vertrag zur Unterzeichnung bereit - {_reference(prop, 'Immobilie')}",
    }
    bodies = {
        EN: [
            f"I am pleased to inform you that the contract for {_reference(prop, 'the property')} is now ready for signature.",
            "Please review the attached documents and let me know a convenient time to proceed with the signing.",
        ],
        FR: [
            f"J'ai le plaisir de vous informer que le contrat pour {_reference(prop, 'le bien')} est maintenant prêt à être signé.",
            "Veuillez examiner les documents ci-joints et me faire savoir quand vous seriez disponible pour la signature.",
        ],
        DE: [
            f"Ich freue mich, Ihnen mitteilen zu können, dass der Vertrag für {_reference(prop, 'die Immobilie')} nun zur Unterzeichnung bereit ist.",
            "Bitte prüfen Sie die beigefügten Unterlagen und teilen Sie mir einen passenden Termin für die Unterschrift mit.",
        ],
    }
    return subjects[language], "\n\n".join(bodies[language])


def _general(ctx: EmailContext, language: EmailLanguage) -> tuple[str, str]:
    subjects = {
        EN: "Regarding Your Real Estate Inquiry",
        FR: "Concernant votre demande immobilière",
        DE: "Bezüglich Ihrer Immobilienanfrage",
    }
    placeholders = {EN: "[Your message here]", FR: "[Votre message ici]", DE: "[Ihre Nachricht hier]"}
    return subjects[language], ctx.custom_message or placeholders[language]


RENDERERS: dict[EmailType, Renderer] = {
    EmailType.PROPERTY_PRESENTATION: _property_presentation,
    EmailType.VISIT_CONFIRMATION: _visit_confirmation,
    EmailType.VISIT_FOLLOWUP: _visit_followup,
    EmailType.OFFER_RECEIVED: _offer_received,
    EmailType.CONTRACT_READY: _contract_ready,
    EmailType.GENERAL: _general,
}

# Types whose body already embeds the custom message
_EMBEDS_CUSTOM_MESSAGE = frozenset({EmailType.OFFER_RECEIVED, EmailType.GENERAL})


def render_email(
    email_type: EmailType,
    tone: EmailTone,
    language: EmailLanguage,
    context: EmailContext,
    custom_subject: Optional[str] = None,
) -> tuple[str, str]:
    """Render (subject, body) for a type/tone/language combination."""
    subject, body = RENDERERS[email_type](context, language)
    if context.custom_message and email_type not in _EMBEDS_CUSTOM_MESSAGE:
        body = f"{body}\n\n{context.custom_message}"
    full_body = "\n\n".join([greeting(context.contact, tone, language), body, closing(tone, language)])
    return custom_subject or subject, full_body
