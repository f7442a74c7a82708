# chataide/replies.py
# -----------------------------------------------------------------------------
# Lokaler Antwort-Generator (Fallback, wenn kein Backend antwortet).
# Deterministisch: gleicher Ton → gleiche drei Antworten.
# -----------------------------------------------------------------------------

from typing import Union

from .models import ReplySet, Tone

MOCK_REPLIES: dict[Tone, ReplySet] = {
    Tone.CASUAL: ReplySet(
        recommended="yeah totally! sounds good to me",
        backup1="for sure! i'm down",
        backup2="yeah definitely 👍",
    ),
    Tone.FORMAL: ReplySet(
        recommended="Thank you for reaching out. I'd be happy to help with that.",
        backup1="I appreciate you letting me know. I'll take care of this.",
        backup2="Thanks for the update. I'll follow up shortly.",
    ),
    Tone.ENTHUSIASTIC: ReplySet(
        recommended="omg yes!! that sounds amazing! 🎉",
        backup1="absolutely!! i'm so excited about this!",
        backup2="yes yes yes! can't wait!!",
    ),
    Tone.NEUTRAL: ReplySet(
        recommended="Got it, thanks for letting me know.",
        backup1="Understood. I'll look into this.",
        backup2="Thanks for the heads up.",
    ),
}


def mock_replies(tone: Union[Tone, str, None]) -> ReplySet:
    """Unbekannte Töne fallen auf `neutral` zurück; schlägt nie fehl."""
    try:
        key = Tone(tone)
    except ValueError:
        key = Tone.NEUTRAL
    return MOCK_REPLIES[key]
