"""Internal constants shared across the library."""

USER_AGENT = "pystreetlight"
REST_PATH = "/rest/v1"

# ------------------------------------------------------------------
# Remote tables
# ------------------------------------------------------------------

OFFICIAL_LIGHTS_TABLE = "official_lights"
FIXED_LIGHTS_TABLE = "fixed_lights"
LIGHT_ACTIONS_TABLE = "light_actions"
REPORTS_TABLE = "reports"

OFFICIAL_LIGHTS_SELECT = "id, lat, lng, sl_id"
FIXED_LIGHTS_SELECT = "light_id, fixed_at"
LIGHT_ACTIONS_SELECT = "light_id, action, created_at"
REPORTS_SELECT = "id, light_id, report_type, created_at"
#: Reporter columns are only readable with elevated access.
REPORTS_SELECT_WITH_REPORTER = f"{REPORTS_SELECT}, reporter_user_id, reporter_email, reporter_phone"

FIX_ACTION = "fix"

#: Keys per ``in.(...)`` filter.  Larger lists overflow the request URL.
DEFAULT_CHUNK_SIZE = 200
#: Row cap applied to each reports chunk.
DEFAULT_REPORTS_LIMIT = 5000

# ------------------------------------------------------------------
# Report types
# ------------------------------------------------------------------

REPORT_TYPES: dict[str, str] = {
    "out": "Light is out",
    "flickering": "Dim / Flickering",
    "dayburner": "On during daytime",
    "downed_pole": "Pole down",
    "other": "Other",
}

#: Older clients wrote these keys; they resolve to the canonical ones.
LEGACY_REPORT_TYPES: dict[str, str] = {
    "flicker": "flickering",
    "dim": "flickering",
    "on_day": "dayburner",
    "pole_down": "downed_pole",
    "downed-pole": "downed_pole",
}

DEFAULT_REPORT_TYPE = "out"
FALLBACK_REPORT_TYPE = "other"

OPERATIONAL_LABEL = "Operational"

# ------------------------------------------------------------------
# Cooldowns
# ------------------------------------------------------------------

REPORT_COOLDOWN_MS = 24 * 60 * 60 * 1000
