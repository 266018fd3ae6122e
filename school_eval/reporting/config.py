"""Configuration constants for the reporting pipeline."""
from __future__ import annotations

import os

# Maximum free-text responses embedded in an analysis prompt
ANALYSIS_TEXT_LIMIT: int = int(os.getenv("ANALYSIS_TEXT_LIMIT", "50"))

# Maximum free-text responses embedded in a report prompt
REPORT_TEXT_LIMIT: int = int(os.getenv("REPORT_TEXT_LIMIT", "30"))

# Maximum per-question statistics lines embedded in a report prompt
REPORT_QUESTION_LIMIT: int = int(os.getenv("REPORT_QUESTION_LIMIT", "20"))

# Caps applied to model output
MAX_THEMES: int = int(os.getenv("REPORT_MAX_THEMES", "5"))
MAX_RECOMMENDATIONS: int = int(os.getenv("REPORT_MAX_RECOMMENDATIONS", "3"))
MAX_WORDS: int = int(os.getenv("REPORT_MAX_WORDS", "10"))

# Respondents expected per question when estimating the report completion rate
EXPECTED_RESPONDENTS: int = int(os.getenv("REPORT_EXPECTED_RESPONDENTS", "10"))

# Ceilings (seconds) for a single generation call
ANALYSIS_TIMEOUT_SECONDS: float = float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", "120"))
REPORT_TIMEOUT_SECONDS: float = float(os.getenv("REPORT_TIMEOUT_SECONDS", "180"))
