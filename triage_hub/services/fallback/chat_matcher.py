"""
Canned help-chat replies used when the chatbot service is unreachable.

Entries are checked in order and the first one with any term contained in
the lower-cased query wins, so a query like "kamusta, need a doctor" gets the
greeting. Terms are English and Filipino.
"""

from typing import List, NamedTuple, Tuple

from triage_hub.models.triage import ChatReply


FAQ_SOURCE = "Community FAQ Database"


class ChatEntry(NamedTuple):
    terms: Tuple[str, ...]
    response: str
    confidence: float
    actions: Tuple[str, ...]


CHAT_ENTRIES: List[ChatEntry] = [
    ChatEntry(
        ("hello", "hi", "hey", "kamusta"),
        "Hello! How can I help you with the community hub today?",
        0.9,
        ("Submit Request", "Browse Events", "Make Donation"),
    ),
    ChatEntry(
        ("request", "help", "assistance", "tulong"),
        "You can submit a help request in the Services section. What type of assistance do you need?",
        0.8,
        ("Medical Help", "Food Support", "Emergency"),
    ),
    ChatEntry(
        ("medical", "doctor", "hospital", "sakit", "gamot"),
        "For medical emergencies, please call 911 immediately. For non-emergencies, "
        "you can submit a medical request through our system.",
        0.85,
        ("Submit Medical Request", "Find Health Center", "Emergency Contacts"),
    ),
    ChatEntry(
        ("food", "hunger", "meal", "gutom", "pagkain"),
        "We have a food assistance program. You can submit a food request or visit "
        "our community pantry during operating hours.",
        0.8,
        ("Submit Food Request", "View Pantry Locations", "Donate Food"),
    ),
    ChatEntry(
        ("event", "activity", "program", "meeting", "pulong"),
        "Check the Events section for upcoming community activities. You can also "
        "register as a volunteer for events!",
        0.8,
        ("Browse Events", "Volunteer Registration", "Create Event"),
    ),
    ChatEntry(
        ("donate", "donation", "contribute", "bigay", "abuloy"),
        "Thank you for wanting to help! Visit the Donations section to contribute. "
        "All donations are tracked transparently.",
        0.9,
        ("Make Donation", "View Campaigns", "Donation History"),
    ),
    ChatEntry(
        ("volunteer", "volunteering", "help others", "tumulong", "boluntaryo"),
        "That's wonderful! Register as a volunteer in your profile settings, then "
        "browse available opportunities.",
        0.85,
        ("Volunteer Registration", "View Opportunities", "My Assignments"),
    ),
    ChatEntry(
        ("clearance", "certificate", "document", "permit", "cedula"),
        "For clearances, please visit the office with: 1) Valid ID, 2) Proof of "
        "residency, 3) Purpose of clearance.",
        0.8,
        ("Requirements List", "Office Hours", "Online Request"),
    ),
    ChatEntry(
        ("complaint", "problem", "issue", "reklamo", "problema"),
        "You can submit a formal complaint through the Services section. Please "
        "provide detailed information and evidence if available.",
        0.8,
        ("Submit Complaint", "View Process", "Status Tracking"),
    ),
    ChatEntry(
        ("thank", "thanks", "salamat", "maraming salamat"),
        "You're welcome! Is there anything else I can help you with?",
        0.95,
        (),
    ),
    ChatEntry(
        ("contact", "phone", "number", "tawag", "telepono"),
        "You can contact the office at (02) 123-4567 during office hours "
        "(Monday-Friday, 8AM-5PM).",
        0.7,
        ("Emergency Contacts", "Office Location", "Email Support"),
    ),
]

DEFAULT_RESPONSE = (
    "I'm not sure about that. Please contact the office directly for specific "
    "inquiries or check our FAQ section."
)
DEFAULT_CONFIDENCE = 0.3
DEFAULT_ACTIONS = ("Contact Support", "Browse FAQ", "Submit General Inquiry")


def match(query: str) -> ChatReply:
    """Return the reply of the first entry matching the query, or the default reply."""
    lower_query = (query or "").lower()

    for entry in CHAT_ENTRIES:
        if any(term in lower_query for term in entry.terms):
            return ChatReply(
                response=entry.response,
                confidence=entry.confidence,
                sources=[FAQ_SOURCE],
                suggested_actions=list(entry.actions),
            )

    return ChatReply(
        response=DEFAULT_RESPONSE,
        confidence=DEFAULT_CONFIDENCE,
        sources=[],
        suggested_actions=list(DEFAULT_ACTIONS),
    )
