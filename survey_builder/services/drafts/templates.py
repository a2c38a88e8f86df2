"""Catalog of starter surveys a draft can be created from.

``match_template`` picks an entry for a free-text prompt by keyword, falling
back to the general survey when nothing matches.
"""

from pydantic import BaseModel

from survey_builder.services.drafts.models import GeneratedQuestion as Q
from survey_builder.services.drafts.models import GeneratedSurvey, QuestionType

GENERAL_TEMPLATE_KEY = "general"


class SurveyTemplate(BaseModel):
    key: str
    name: str
    keywords: tuple[str, ...] = ()
    survey: GeneratedSurvey


class TemplateNotFoundError(KeyError):
    """Raised when a template key is not in the catalog."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Template not found: {key}")


_TEMPLATES: list[SurveyTemplate] = [
    SurveyTemplate(
        key="customer_satisfaction",
        name="Customer Satisfaction Survey",
        keywords=("customer", "satisfaction", "service", "müşteri", "memnuniyet", "hizmet"),
        survey=GeneratedSurvey(
            title="Customer Satisfaction Survey",
            description="Help us evaluate the quality of our service.",
            category="Customer",
            questions=[
                Q(type=QuestionType.RATING, title="Rate your overall satisfaction", required=True),
                Q(
                    type=QuestionType.RADIO,
                    title="How would you rate the quality of our service?",
                    options=["Very good", "Good", "Average", "Poor", "Very poor"],
                    required=True,
                ),
                Q(
                    type=QuestionType.TEXT,
                    title="What should we improve?",
                    placeholder="Write your suggestions...",
                ),
                Q(
                    type=QuestionType.CHECKBOX,
                    title="Which of our services have you used?",
                    options=["Sales", "Technical support", "Consulting", "Training", "Other"],
                    required=True,
                ),
                Q(type=QuestionType.RADIO, title="Would you recommend us to others?", options=["Yes", "No", "Maybe"]),
            ],
        ),
    ),
    SurveyTemplate(
        key="employee_performance",
        name="Employee Performance Review",
        keywords=("employee", "performance", "review", "çalışan", "performans", "değerlendirme"),
        survey=GeneratedSurvey(
            title="Employee Performance Review",
            description="Assess an employee's performance over the review period.",
            category="HR",
            questions=[
                Q(type=QuestionType.NAME, title="Employee name", required=True),
                Q(type=QuestionType.RATING, title="Rate the employee's job performance", required=True),
                Q(
                    type=QuestionType.RADIO,
                    title="How is their teamwork?",
                    options=["Excellent", "Good", "Needs improvement"],
                    required=True,
                ),
                Q(type=QuestionType.TEXTAREA, title="What are their strengths?"),
                Q(type=QuestionType.TEXTAREA, title="Areas for development"),
            ],
        ),
    ),
    SurveyTemplate(
        key="product_feedback",
        name="Product Launch Feedback",
        keywords=("product", "launch", "feedback", "ürün", "lansman", "geri bildirim"),
        survey=GeneratedSurvey(
            title="Product Launch Feedback",
            description="Tell us what you think about our new product.",
            category="Product",
            questions=[
                Q(type=QuestionType.RADIO, title="Did you like the product?", options=["Yes", "No"], required=True),
                Q(type=QuestionType.RATING, title="Rate the product quality", required=True),
                Q(type=QuestionType.TEXT, title="What is the product's best feature?"),
                Q(type=QuestionType.TEXTAREA, title="What should be improved?"),
                Q(
                    type=QuestionType.SELECT,
                    title="Would you buy this product?",
                    options=["Definitely", "Probably", "Not sure", "No"],
                ),
            ],
        ),
    ),
    SurveyTemplate(
        key="event_registration",
        name="Event Registration",
        keywords=("event", "registration", "etkinlik", "kayıt", "organizasyon"),
        survey=GeneratedSurvey(
            title="Event Registration",
            description="Register for the event.",
            category="Event",
            questions=[
                Q(type=QuestionType.NAME, title="Full name", required=True),
                Q(type=QuestionType.EMAIL, title="Email address", required=True),
                Q(type=QuestionType.PHONE, title="Phone number"),
                Q(
                    type=QuestionType.RADIO,
                    title="Will you attend?",
                    options=["Yes", "No", "Not sure yet"],
                    required=True,
                ),
                Q(type=QuestionType.TEXTAREA, title="Any special requests?"),
            ],
        ),
    ),
    SurveyTemplate(
        key="training_evaluation",
        name="Training Evaluation",
        keywords=("training", "course", "seminar", "eğitim", "kurs", "seminer"),
        survey=GeneratedSurvey(
            title="Training Evaluation",
            description="Evaluate the training you attended.",
            category="Education",
            questions=[
                Q(type=QuestionType.RATING, title="Rate the overall quality of the training", required=True),
                Q(
                    type=QuestionType.RADIO,
                    title="How was the instructor?",
                    options=["Excellent", "Good", "Average", "Poor"],
                    required=True,
                ),
                Q(type=QuestionType.TEXT, title="Which topic was most useful?"),
                Q(type=QuestionType.TEXTAREA, title="Was anything missing?"),
                Q(type=QuestionType.RADIO, title="Would you recommend this training?", options=["Yes", "No"]),
            ],
        ),
    ),
    SurveyTemplate(
        key=GENERAL_TEMPLATE_KEY,
        name="General Survey",
        survey=GeneratedSurvey(
            title="General Survey",
            description="Share your opinion with us.",
            category="General",
            questions=[
                Q(type=QuestionType.NAME, title="Your name (optional)"),
                Q(type=QuestionType.SELECT, title="Your age range", options=["18-24", "25-34", "35-44", "45-54", "55+"]),
                Q(type=QuestionType.TEXTAREA, title="Your thoughts"),
                Q(type=QuestionType.RATING, title="Overall rating"),
            ],
        ),
    ),
]

_BY_KEY = {template.key: template for template in _TEMPLATES}


def list_templates() -> list[SurveyTemplate]:
    return list(_TEMPLATES)


def get_template(key: str) -> SurveyTemplate:
    try:
        return _BY_KEY[key]
    except KeyError:
        raise TemplateNotFoundError(key) from None


def match_template(prompt: str) -> SurveyTemplate:
    """Return the first template whose keywords occur in ``prompt``."""
    text = prompt.lower()
    for template in _TEMPLATES:
        if any(keyword in text for keyword in template.keywords):
            return template
    return _BY_KEY[GENERAL_TEMPLATE_KEY]
