"""
Entity registry - one EntityConfig per managed collection.

The sync controller is generic; everything that differs between blogs, FAQ,
programs and the rest lives here: form defaults, media fields, ordering,
record caps, validation rules and operator-facing messages.
"""
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Type

from models import (
    DocumentModel, Blog, FAQ, Program, Testimonial, Trainer, Transformation, Lead
)
from . import validation as v
from .document_store import Ordering
from .exceptions import ValidationError

MAX_FAQS = 5
MAX_TESTIMONIALS = 10
MAX_FACILITIES = 4

MAX_WORDS_QUESTION = 20
MAX_WORDS_ANSWER = 40
MAX_WORDS_REVIEW = 60
MAX_WORDS_TRANSFORMATION = 40
MAX_WORDS_BLOG = 1000


def iso_now() -> str:
    return datetime.utcnow().isoformat()


def today() -> str:
    return date.today().isoformat()


class EntityConfig:
    def __init__(
        self,
        collection: str,
        label: str,
        plural: str,
        schema: Type[DocumentModel],
        defaults: dict,
        rules: List[v.Rule],
        media_fields: List[str] = None,
        order: Optional[Ordering] = ("createdAt", "desc"),
        max_records: Optional[int] = None,
        limit_message: str = None,
        created_field: str = "createdAt",
        created_value: Callable[[], str] = iso_now,
        updated_field: str = "updatedAt",
        numeric_fields: Dict[str, type] = None,
        list_fields: List[str] = None,
        creatable: bool = True,
        editable: bool = True,
        deletable: bool = True,
        messages: dict = None,
    ):
        self.collection = collection
        self.label = label
        self.plural = plural
        self.schema = schema
        self.defaults = defaults
        self.rules = rules
        self.media_fields = media_fields or []
        self.order = order
        self.max_records = max_records
        self.limit_message = limit_message
        self.created_field = created_field
        self.created_value = created_value
        self.updated_field = updated_field
        self.numeric_fields = numeric_fields or {}
        self.list_fields = list_fields or []
        self.creatable = creatable
        self.editable = editable
        self.deletable = deletable

        self.messages = {
            "created": f"{label} added successfully!",
            "updated": f"{label} updated successfully!",
            "deleted": f"{label} deleted successfully",
            "save_failed": f"Failed to save {label.lower()}.",
            "delete_failed": f"Failed to delete {label.lower()}.",
            "fetch_failed": f"Could not fetch {plural.lower()}.",
        }
        self.messages.update(messages or {})

    @property
    def fields(self) -> List[str]:
        return list(self.defaults.keys())

    def build_payload(self, values: dict) -> dict:
        """Form values -> document fields: trimmed text, typed numbers, cleaned lists."""
        payload = {}
        for field in self.fields:
            value = values.get(field, self.defaults[field])
            if field in self.media_fields:
                payload[field] = value
            elif field in self.numeric_fields:
                payload[field] = self._coerce(field, value)
            elif field in self.list_fields:
                if value is not None and not isinstance(value, list):
                    raise ValidationError(f"{field.capitalize()} must be a list")
                payload[field] = [str(item).strip() for item in (value or []) if str(item).strip()]
            elif isinstance(value, str):
                payload[field] = value.strip()
            else:
                payload[field] = value
        return payload

    def _coerce(self, field: str, value):
        if value == "":
            return value
        try:
            return self.numeric_fields[field](str(value).strip())
        except (TypeError, ValueError):
            raise ValidationError(f"{field.capitalize()} must be a number")

    def normalize(self, record: dict) -> dict:
        """Stored document -> record with schema defaults filled in."""
        return self.schema.model_validate(record).model_dump()


# ==================== REGISTRY ====================

BLOGS = EntityConfig(
    collection="blogs",
    label="Blog",
    plural="Blogs",
    schema=Blog,
    defaults={"title": "", "readingTime": "", "category": "", "content": "", "imageUrl": None},
    rules=[
        v.required(["title", "readingTime", "category", "content"]),
        v.required_media(["imageUrl"], "Please select an image"),
        v.single_word("category", "Category"),
        v.content_word_limit("content", MAX_WORDS_BLOG),
    ],
    media_fields=["imageUrl"],
    order=("dateUploaded", "desc"),
    created_field="dateUploaded",
    created_value=today,
    messages={
        "created": "Blog uploaded successfully!",
        "save_failed": "Failed to save blog. Please try again.",
        "delete_failed": "Failed to delete blog",
    },
)

FAQS = EntityConfig(
    collection="FAQ",
    label="FAQ",
    plural="FAQs",
    schema=FAQ,
    defaults={"question": "", "answer": ""},
    rules=[
        v.required(["question", "answer"], "Please fill in both question and answer."),
        v.max_words("question", MAX_WORDS_QUESTION, "Question"),
        v.max_words("answer", MAX_WORDS_ANSWER, "Answer"),
        v.max_records(MAX_FAQS, f"You can only have up to {MAX_FAQS} FAQs. Please delete one first."),
    ],
    order=("createdAt", "asc"),
    max_records=MAX_FAQS,
    limit_message=f"You can only have up to {MAX_FAQS} FAQs. Please delete an old question to add a new one.",
    messages={
        "save_failed": "Failed to save FAQ.",
        "delete_failed": "Failed to delete FAQ.",
        "fetch_failed": "Could not fetch FAQs.",
    },
)

PROGRAMS = EntityConfig(
    collection="programs",
    label="Program",
    plural="Programs",
    schema=Program,
    defaults={
        "programType": "", "planType": "", "price": "", "duration": "",
        "description": "", "facilities": [],
    },
    rules=[
        v.required(["programType", "planType", "price", "duration", "description"]),
        v.numeric("price", "Price"),
        v.max_items("facilities", MAX_FACILITIES, "facilities"),
    ],
    numeric_fields={"price": float},
    list_fields=["facilities"],
)

TESTIMONIALS = EntityConfig(
    collection="testimonials",
    label="Testimonial",
    plural="Testimonials",
    schema=Testimonial,
    defaults={"name": "", "programType": "", "review": "", "rating": 5},
    rules=[
        v.required(["name", "programType", "review"]),
        v.max_words("review", MAX_WORDS_REVIEW, "Review"),
        v.max_records(MAX_TESTIMONIALS, f"You can only show up to {MAX_TESTIMONIALS} testimonials."),
        v.rating_range("rating"),
    ],
    max_records=MAX_TESTIMONIALS,
    limit_message=f"You can only show up to {MAX_TESTIMONIALS} testimonials.",
    numeric_fields={"rating": int},
    messages={"delete_failed": "Failed to delete review."},
)

TRAINERS = EntityConfig(
    collection="trainers",
    label="Trainer",
    plural="Trainers",
    schema=Trainer,
    defaults={"name": "", "speciality": "", "imageUrl": None},
    rules=[
        v.required(["name", "speciality"]),
        v.required_media(["imageUrl"], "Please select an image"),
    ],
    media_fields=["imageUrl"],
)

TRANSFORMATIONS = EntityConfig(
    collection="transformations",
    label="Transformation",
    plural="Transformations",
    schema=Transformation,
    defaults={
        "title": "", "category": "", "duration": "", "description": "",
        "quote": "", "howWeDidIt": "", "beforeImage": None, "afterImage": None,
    },
    rules=[
        v.required(["title", "category", "duration", "description", "quote", "howWeDidIt"],
                   "Please fill in all text fields"),
        v.required_media(["beforeImage", "afterImage"], "Please select both Before and After images"),
        v.max_words("description", MAX_WORDS_TRANSFORMATION, "Description", show_count=False),
        v.max_words("howWeDidIt", MAX_WORDS_TRANSFORMATION, '"How We Did It"', show_count=False),
    ],
    media_fields=["beforeImage", "afterImage"],
    messages={
        "created": "Transformation added!",
        "updated": "Transformation updated!",
        "delete_failed": "Failed to delete.",
    },
)

LEADS = EntityConfig(
    collection="user_data",
    label="Lead",
    plural="Leads",
    schema=Lead,
    defaults={"status": "unread"},
    rules=[],
    order=("created_at", "desc"),
    created_field="created_at",
    creatable=False,
    editable=False,
    deletable=False,
    messages={
        "save_failed": "Failed to mark as read.",
        "fetch_failed": "Could not fetch user data.",
    },
)

ENTITIES: Dict[str, EntityConfig] = {
    e.collection: e for e in (BLOGS, FAQS, PROGRAMS, TESTIMONIALS, TRAINERS, TRANSFORMATIONS, LEADS)
}


def get_entity(collection: str) -> Optional[EntityConfig]:
    return ENTITIES.get(collection)
