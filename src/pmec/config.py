"""
Configuration constants for PMEC.
These are immutable system constants, not runtime configuration.
"""

# Section identifiers
SECTION_REQUEST = "r"
SECTION_POLICY = "p"
SECTION_ROLE = "g"
SECTION_EFFECT = "e"
SECTION_MATCHER = "m"

# Section id -> CONF section label
SECTION_NAME_MAP = {
    SECTION_REQUEST: "request_definition",
    SECTION_POLICY: "policy_definition",
    SECTION_ROLE: "role_definition",
    SECTION_EFFECT: "policy_effect",
    SECTION_MATCHER: "matchers",
}

# m and r must be registered before any p/g assertion is created
SECTION_READING_ORDER = (
    SECTION_MATCHER,
    SECTION_REQUEST,
    SECTION_POLICY,
    SECTION_ROLE,
    SECTION_EFFECT,
)

REQUIRED_SECTIONS = (
    SECTION_REQUEST,
    SECTION_POLICY,
    SECTION_EFFECT,
    SECTION_MATCHER,
)

# Sections whose assertions carry tokens
TOKENIZED_SECTIONS = frozenset([SECTION_REQUEST, SECTION_POLICY])

# Sections whose assertions carry a row store
POLICY_SECTIONS = frozenset([SECTION_POLICY, SECTION_ROLE])

# Token construction
TOKEN_SEPARATOR = ","
TOKEN_KEY_JOINER = "_"

# Matcher shape used by storage selection
MATCHER_AND = " && "
MATCHER_EQUALITY = "r.{field} == p.{field}"

# Role definition placeholder
ROLE_PLACEHOLDER = "_"

# CONF file constants
CONF_KEY_SEPARATOR = "::"
CONF_DEFAULT_SECTION = "default"
CONF_COMMENT_PREFIXES = ("#", ";")
CONF_LINE_CONTINUATION = "\\"
CONF_LIST_SEPARATOR = ","

# Inline comment marker inside definitions
DEFINITION_COMMENT = "#"
