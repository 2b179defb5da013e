"""
Constants for queuehub.

Reserved store names, timestamp layout and the messages returned to callers.
"""

# =============================================================================
# Registration bookkeeping
# =============================================================================

# Hash holding one "{service}_{identifier}" field per registered identifier
SERVICES_INFO_KEY = "registeredServices"

# Second precision, no timezone
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# =============================================================================
# Request fields
# =============================================================================

FIELD_IDENTIFIER = "identifier"
FIELD_KEY = "key"
FIELD_VALUE = "value"
FIELD_STORE = "store"
FIELD_TARGET_TYPE = "targetType"

# =============================================================================
# Messages
# =============================================================================

MSG_QUEUE_DATA = "'Queue data' is either missing or not in the specified format"
MSG_IDENTIFIER = "'Identifier' is either missing or not in the specified format"
MSG_KEY = "'Key' is either missing or not in the specified format"
MSG_VALUE = "'Value' is either missing or not in the specified format"
MSG_TARGET_TYPE = "'Target type' is either missing or not in the specified format"
MSG_STORE = "'Store' value is either blank or not in the specified format"

MSG_CONNECTION_CONFIG = "'Connection config' is either missing or not in the specified format"
MSG_NO_STORE = "Minimum one valid queue store is required"
MSG_INVALID_STORE = "Not a valid queue store: '{store}'"
MSG_NOT_REGISTERED = "This service is not registered with {store} store for the '{identifier}' identifier"
