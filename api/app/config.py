import json
import os
from typing import Any

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
MATCH_CANDIDATE_LIMIT = int(os.getenv("MATCH_CANDIDATE_LIMIT", "500"))

DEFAULT_MATCHING_CONFIG: dict[str, Any] = {
    "UNKNOWN_VALUE_CONFIDENCE": float(os.getenv("UNKNOWN_VALUE_CONFIDENCE", "0.5")),
}

if os.getenv("MATCHING_CONFIG_JSON"):
    try:
        DEFAULT_MATCHING_CONFIG.update(json.loads(os.getenv("MATCHING_CONFIG_JSON", "{}")))
    except json.JSONDecodeError:
        pass

# Benefit-of-the-doubt credit for a non-dealbreaker category whose candidate value is unknown.
UNKNOWN_VALUE_CONFIDENCE = min(1.0, max(0.0, float(DEFAULT_MATCHING_CONFIG["UNKNOWN_VALUE_CONFIDENCE"])))
