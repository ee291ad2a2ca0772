"""Prometheus metrics for monitoring scoring, loan decisions and access denials"""

from prometheus_client import Counter, Histogram

# Financial health metrics
score_request_counter = Counter(
    "mining_score_requests_total",
    "Financial health requests by how they were served",
    ["source"],  # cache | computed
)

score_grade_counter = Counter(
    "mining_credit_score_grade_total",
    "Credit score snapshots written by grade",
    ["grade"],
)

# Loan metrics
loan_decision_counter = Counter(
    "mining_loan_decisions_total",
    "Loan applications by initial decision",
    ["outcome"],  # auto_approved | pending
)

# Authorization metrics
access_denied_counter = Counter(
    "mining_access_denied_total",
    "Requests refused by the membership gate",
    ["reason"],  # not_a_member | insufficient_permissions | organization_missing
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(source: str, grade: str | None = None) -> None:
    """Record whether a score came from the 24h cache or a fresh computation"""
    score_request_counter.labels(source=source).inc()
    if grade is not None:
        score_grade_counter.labels(grade=grade).inc()


def record_loan_decision(auto_approved: bool) -> None:
    outcome = "auto_approved" if auto_approved else "pending"
    loan_decision_counter.labels(outcome=outcome).inc()
