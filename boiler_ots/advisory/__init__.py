from boiler_ots.advisory.client import AdvisoryClient, AdvisoryError, ImageAttachment
from boiler_ots.advisory.mentor import LOCAL_MARKER, Mentor, MentorContext, local_answer

__all__ = [
    "AdvisoryClient",
    "AdvisoryError",
    "ImageAttachment",
    "LOCAL_MARKER",
    "Mentor",
    "MentorContext",
    "local_answer",
]
