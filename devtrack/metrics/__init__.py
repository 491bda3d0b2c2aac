# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics: single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""
from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "devtrack_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "devtrack_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "devtrack_http_errors_total", "Total HTTP error responses", ["method", "endpoint", "status"]
)

# ── Business Metrics (updated by service layer only) ──
USERS_REGISTERED = Counter(
    "devtrack_users_registered_total", "Total users registered"
)
AUTH_FAILURES = Counter(
    "devtrack_auth_failures_total", "Rejected logins and tokens", ["reason"]
)
PROJECTS_CREATED = Counter(
    "devtrack_projects_created_total", "Total projects created"
)
PROJECT_MEMBERSHIP_CHANGES = Counter(
    "devtrack_project_membership_changes_total", "Members added or removed", ["action"]
)
TICKETS_CREATED = Counter(
    "devtrack_tickets_created_total", "Total tickets created", ["type", "priority"]
)
TICKET_MUTATIONS = Counter(
    "devtrack_ticket_mutations_total", "Ticket updates and deletions", ["action"]
)
COMMENTS_ADDED = Counter(
    "devtrack_comments_added_total", "Total comments appended to tickets"
)
ACCESS_DENIED = Counter(
    "devtrack_access_denied_total", "Access policy denials", ["operation"]
)

# ── Event relay ──
RELAY_CONNECTIONS = Gauge(
    "devtrack_relay_connections", "Currently registered realtime channels"
)
RELAY_BROADCASTS = Counter(
    "devtrack_relay_broadcasts_total", "Broadcasts issued to project rooms", ["event"]
)
RELAY_DELIVERIES = Counter(
    "devtrack_relay_deliveries_total", "Per-channel deliveries", ["status"]
)
