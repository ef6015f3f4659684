# =============================================================================
# lib/ai_client.py - AI Text Generation
# =============================================================================
# Wraps an OpenAI-compatible chat completion endpoint for:
# - Rental agreement drafting (with a plain-text template fallback)
# - Listing copy (titles, descriptions, tags)
#
# OPENAI_BASE_URL lets the same client talk to OpenRouter or any other
# provider that speaks the OpenAI chat completions API.
# =============================================================================

import json
import logging
from datetime import date, datetime
from typing import Any

from app.config import settings
from app.exceptions import AIGenerationError

logger = logging.getLogger(__name__)

# Lazy-loaded OpenAI client
_client = None

DELIVERY_METHOD_LABELS = {
    "self-pickup": "Self Pickup",
    "home-delivery": "Home Delivery",
    "meet-halfway": "Meet Halfway",
}

DESCRIPTION_SUGGESTIONS = [
    "Consider adding specific dimensions or specifications",
    "Mention any included accessories or extras",
    "Highlight unique features that set this item apart",
    "Include care instructions or usage guidelines",
]

AGREEMENT_SYSTEM_PROMPT = """You are a legal document generator specializing in rental agreements.
Create a comprehensive, legally binding rental agreement that protects both parties.

The agreement should include:
1. Clear identification of parties (Renter and Owner)
2. Detailed description of the rental item(s)
3. Rental period and dates
4. Payment terms and amounts
5. Security deposit (if applicable)
6. Responsibilities of both parties
7. Damage and liability clauses
8. Cancellation and refund policies
9. Dispute resolution procedures
10. Governing law and jurisdiction
11. Signature blocks for both parties

Use clear, professional language that is easy to understand while being legally comprehensive.
Format the agreement properly with sections and subsections."""

COPYWRITER_SYSTEM_PROMPT = (
    "You are an expert copywriter specializing in rental marketplace listings. "
    "Create compelling, accurate content that helps items get rented quickly."
)


def get_openai_client():
    """Get or create OpenAI client (lazy initialization)."""
    global _client
    if _client is None:
        from openai import OpenAI
        _client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
        )
    return _client


def _complete(
    messages: list[dict[str, str]],
    model: str,
    temperature: float,
    max_tokens: int,
) -> str:
    """Run one chat completion and return the stripped text."""
    client = get_openai_client()
    response = client.chat.completions.create(
        model=model,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    if not response.choices:
        raise AIGenerationError("No response from AI model")
    content = response.choices[0].message.content
    if not content or not content.strip():
        raise AIGenerationError("AI model returned empty content")
    return content.strip()


def _format_date(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.strftime("%m/%d/%Y")
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10]).strftime("%m/%d/%Y")
        except ValueError:
            return value
    return "Unknown"


def rental_days(start_date: Any, end_date: Any) -> int:
    """Whole days between two ISO dates (at least 1)."""
    start = date.fromisoformat(str(start_date)[:10])
    end = date.fromisoformat(str(end_date)[:10])
    return max((end - start).days, 1)


# =============================================================================
# Rental Agreements
# =============================================================================

def generate_rental_agreement(
    booking: dict[str, Any],
    custom_terms: str | None = None,
) -> str:
    """
    Draft a rental agreement for a booking with the AI model.

    Args:
        booking: Booking row with embedded listing, renter, and owner
        custom_terms: Extra clauses requested by the owner

    Returns:
        Agreement text

    Raises:
        AIGenerationError: If the provider fails or returns nothing
    """
    listing = booking.get("listing") or {}
    renter = booking.get("renter") or {}
    owner = booking.get("owner") or {}
    category = listing.get("category") or {}

    lines = [
        "Generate a rental agreement with the following details:",
        "",
        f"Renter: {renter.get('full_name') or 'Renter'}",
        f"Owner: {owner.get('full_name') or 'Owner'}",
        f"Item: {listing.get('title') or 'Rental Item'}",
    ]
    if listing.get("description"):
        lines.append(f"Description: {listing['description']}")
    if category.get("name"):
        lines.append(f"Category: {category['name']}")
    if listing.get("condition"):
        lines.append(f"Condition: {listing['condition']}")
    lines += [
        f"Rental Period: {booking.get('start_date')} to {booking.get('end_date')}",
        f"Total Rental Price: ${booking.get('total_price') or 0}",
        f"Daily Rate: ${listing.get('price_per_day') or 0}",
    ]
    if listing.get("deposit_amount"):
        lines.append(f"Security Deposit: ${listing['deposit_amount']}")
    if listing.get("address"):
        lines.append(f"Location: {listing['address']}")
    if custom_terms:
        lines.append(f"Special Terms: {custom_terms}")
    lines += [
        "",
        f"Platform: {settings.PLATFORM_NAME} (peer-to-peer rental marketplace)",
        "",
        "Please generate a comprehensive rental agreement that legally binds both parties "
        "and includes provisions for:",
        "- Item damage or loss",
        "- Late returns",
        "- Proper use and care",
        "- Insurance requirements",
        "- Emergency contacts",
        f"- Platform dispute resolution through {settings.PLATFORM_NAME}",
    ]

    messages = [
        {"role": "system", "content": AGREEMENT_SYSTEM_PROMPT},
        {"role": "user", "content": "\n".join(lines)},
    ]

    try:
        text = _complete(
            messages,
            model=settings.AGREEMENT_MODEL,
            temperature=settings.AGREEMENT_TEMPERATURE,
            max_tokens=4000,
        )
    except AIGenerationError:
        raise
    except Exception as e:
        logger.error(f"Agreement generation failed: {e}")
        raise AIGenerationError("Failed to generate rental agreement", error=str(e))

    logger.info(f"Generated rental agreement for booking {booking.get('id')}")
    return text


def build_fallback_agreement(
    booking: dict[str, Any],
    late_fee_per_day: float,
    custom_terms: str | None = None,
    delivery_method: str | None = None,
) -> str:
    """
    Plain-text agreement used when the AI model is unavailable.

    The output depends only on the booking and the arguments (plus today's
    date in the header).
    """
    listing = booking.get("listing") or {}
    renter = booking.get("renter") or {}
    owner = booking.get("owner") or {}
    category = listing.get("category") or {}
    platform = settings.PLATFORM_NAME

    def contact_block(label: str, person: dict[str, Any]) -> str:
        block = f"{label}: {person.get('full_name') or 'Unknown'}\nEmail: {person.get('email') or 'Unknown'}"
        if person.get("phone"):
            block += f"\nPhone: {person['phone']}"
        return block

    try:
        days = rental_days(booking.get("start_date"), booking.get("end_date"))
    except ValueError:
        days = 0

    sections = [
        "RENTAL AGREEMENT",
        f'This Rental Agreement ("Agreement") is entered into on {date.today().strftime("%m/%d/%Y")} between:',
        "PARTIES INVOLVED:\n================",
        contact_block("OWNER (Lessor)", owner),
        contact_block("RENTER (Lessee)", renter),
        "1. ITEM DETAILS\n===============\n"
        f"Item: {listing.get('title') or 'Unknown Item'}\n"
        f"Category: {category.get('name') or 'General'}\n"
        f"Condition: {listing.get('condition') or 'Good'}\n"
        f"Description: {listing.get('description') or 'As shown in photos'}\n"
        f"Location: {listing.get('address') or 'To be confirmed with owner'}",
        "2. RENTAL TERMS\n===============\n"
        f"Rental Period: {_format_date(booking.get('start_date'))} to "
        f"{_format_date(booking.get('end_date'))} ({days} days)\n"
        f"Daily Rate: ${listing.get('price_per_day') or 0}\n"
        f"Total Rental Price: ${booking.get('total_price') or 0}\n"
        f"Security Deposit: ${listing.get('deposit_amount') or 0}\n"
        f"Delivery Method: {DELIVERY_METHOD_LABELS.get(delivery_method or '', 'To be arranged')}",
        "3. RESPONSIBILITY CLAUSES\n========================\n"
        "RENTER RESPONSIBILITIES:\n"
        "- Return the item in the same condition as received (normal wear and tear excepted)\n"
        "- Use the item only for its intended purpose\n"
        "- Notify the owner immediately of any damage or malfunction\n"
        "- Be liable for any damage, loss, or theft during the rental period\n\n"
        "OWNER RESPONSIBILITIES:\n"
        "- Provide the item in clean, working condition as described\n"
        "- Be available for questions or support during rental period\n"
        "- Provide accurate description and photos of the item",
        "4. CANCELLATIONS & REFUNDS\n=========================\n"
        "- Full refund if cancelled within 24 hours of booking\n"
        "- 50% refund if cancelled 24-48 hours before rental start\n"
        "- No refund for cancellations less than 48 hours before rental start",
        "5. LATE RETURNS\n===============\n"
        f"- Late returns incur a fee of ${late_fee_per_day:.2f} per day\n"
        f"- After 3 days late without communication, the renter may be reported to {platform}",
        "6. LIABILITY & DAMAGES\n=====================\n"
        "- Renter is responsible for any damage beyond normal wear and tear\n"
        "- Security deposit will be used first for any damages\n"
        "- If damages exceed deposit, renter agrees to pay the difference within 7 days\n"
        f"- {platform} platform is not liable for lost, stolen, or damaged items",
        "7. PLATFORM TERMS\n=================\n"
        f"- This agreement is facilitated through {platform}\n"
        f"- Both parties agree to abide by {platform}'s Terms of Service\n"
        f"- Disputes will first be handled through {platform}'s resolution process",
        "8. DIGITAL AGREEMENT\n===================\n"
        '- By clicking "I agree to these terms" both parties acknowledge they have read and '
        "understood all terms\n"
        "- Timestamp and IP addresses will be recorded for verification",
    ]
    if custom_terms:
        sections.append(f"9. ADDITIONAL TERMS\n===================\n{custom_terms}")
    sections.append(
        "GOVERNING LAW\n=============\n"
        "This Agreement shall be governed by the laws of the jurisdiction where the rental takes place."
    )
    return "\n\n".join(sections)


# =============================================================================
# Listing Content
# =============================================================================

def _content_prompt(content_type: str, context: dict[str, Any], tone: str, length: str) -> str:
    item = context.get("category") or "item"
    condition = context.get("condition") or "good"
    context_json = json.dumps(context)

    if content_type == "title":
        return (
            f"Create a compelling rental listing title for a {item} in {condition} condition.\n"
            f"Tone: {tone}. Make it engaging and clickable while being accurate.\n\n"
            f"Context: {context_json}\n\nReturn only the title, no explanations."
        )
    if content_type == "description":
        return (
            f"Write a {length} rental listing description for a {item} in {condition} condition.\n"
            f"Tone: {tone}. Include relevant details that would help renters make a decision.\n\n"
            f"Context: {context_json}\n\n"
            "Make it compelling but honest. Focus on benefits and practical information."
        )
    return (
        f"Generate relevant tags for a rental listing of a {item} in {condition} condition.\n\n"
        f"Context: {context_json}\n\n"
        "Return 5-8 tags separated by commas. Focus on searchable keywords that renters might use."
    )


def fallback_listing_content(content_type: str, context: dict[str, Any]) -> dict[str, Any]:
    """Template copy used when the AI model is unavailable."""
    if content_type == "title":
        content = (
            f"Premium {context['category']} Available for Rent"
            if context.get("category")
            else "Quality Item Available for Rent"
        )
    elif content_type == "description":
        content = "This well-maintained item is perfect for your rental needs. "
        if context.get("condition"):
            content += f"In {context['condition']} condition. "
        if context.get("price_range"):
            content += f"Competitively priced within the {context['price_range']} range. "
        content += "Contact for more details and availability."
    else:
        content = ", ".join(["rental", "available", "quality", context.get("condition") or "good-condition"])

    return {
        "generated_content": content,
        "word_count": len(content.split()),
        "suggestions": ["Consider providing more specific details for better AI generation"],
        "fallback": True,
    }


def generate_listing_content(
    content_type: str,
    context: dict[str, Any],
    tone: str = "friendly",
    length: str = "medium",
) -> dict[str, Any]:
    """
    Generate a title, description or tag list for a listing.

    Never raises on provider errors; returns template copy instead.
    """
    messages = [
        {"role": "system", "content": COPYWRITER_SYSTEM_PROMPT},
        {"role": "user", "content": _content_prompt(content_type, context, tone, length)},
    ]

    try:
        content = _complete(messages, model=settings.OPENAI_MODEL, temperature=0.7, max_tokens=800)
    except Exception as e:
        logger.warning(f"Listing content generation failed, using template: {e}")
        return fallback_listing_content(content_type, context)

    result: dict[str, Any] = {
        "generated_content": content,
        "word_count": len(content.split()),
        "fallback": False,
    }
    if content_type == "tags":
        result["tags"] = [tag.strip() for tag in content.split(",") if tag.strip()]
    if content_type == "description":
        result["suggestions"] = DESCRIPTION_SUGGESTIONS
    return result
