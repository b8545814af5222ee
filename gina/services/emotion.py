"""
Keyword emotion detector.

Case-insensitive substring match, no scoring,
no negation handling, no stemming.
"""

from dataclasses import dataclass

SADNESS_KEYWORDS = (
    "sad", "depressed", "down", "upset", "crying", "tears", "heartbroken", "devastated",
    "feel awful", "feel terrible", "feel bad", "feel lost", "lost", "lonely", "empty",
    "hopeless", "despair", "grief", "mourning", "miss", "hurt", "pain", "ache",
)

FRUSTRATION_KEYWORDS = (
    "frustrated", "angry", "mad", "annoyed", "irritated", "furious", "rage", "pissed",
    "fed up", "sick of", "tired of", "hate", "can't stand", "bothered", "stressed",
    "overwhelmed", "exhausted", "burnt out", "anxious", "worried", "nervous",
)

HELPLESSNESS_KEYWORDS = (
    "don't know what to do", "need help", "struggling", "difficult time", "hard time",
    "can't cope", "falling apart", "breaking down", "giving up", "want to quit",
    "feel stuck", "trapped", "confused", "lost",
)


@dataclass(frozen=True)
class EmotionalContext:
    needs_empathy: bool = False
    sadness: bool = False
    frustration: bool = False
    helplessness: bool = False

    @property
    def labels(self) -> list[str]:
        """Triggered categories in annotation order."""
        labels = []
        if self.sadness:
            labels.append("sadness")
        if self.frustration:
            labels.append("frustration/stress")
        if self.helplessness:
            labels.append("helplessness")
        return labels

    def annotate(self, message: str) -> str:
        """Prefix the outgoing model message. The user never sees this."""
        if not self.needs_empathy:
            return message
        return f"[User appears to be experiencing: {', '.join(self.labels)}] {message}"


def classify(message: str) -> EmotionalContext:
    text = (message or "").lower()
    sadness = any(k in text for k in SADNESS_KEYWORDS)
    frustration = any(k in text for k in FRUSTRATION_KEYWORDS)
    helplessness = any(k in text for k in HELPLESSNESS_KEYWORDS)
    return EmotionalContext(
        needs_empathy=sadness or frustration or helplessness,
        sadness=sadness,
        frustration=frustration,
        helplessness=helplessness,
    )
