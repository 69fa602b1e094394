# Environment variables
ENV_BASE_URL = "RESTCALL_BASE_URL"

# Headers
HEADER_CONTENT_TYPE = "Content-Type"

# Content types
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE_MULTIPART = "multipart/form-data"

# Diagnostic body used when a failed response cannot be parsed as JSON
UNPARSABLE_BODY_FALLBACK = "Unable to connect"

SUCCESS_STATUS_RANGE = range(200, 300)
