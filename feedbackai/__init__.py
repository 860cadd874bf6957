"""FeedbackAI: feedback intake API with an AI insights assistant."""

__version__ = "1.0.0"
