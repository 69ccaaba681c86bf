"""Metrics facade.

Service code should ONLY call the semantic helpers here so the backend can
change freely. Counters are exposed by ``cisops.api.routes_metrics``.
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("metrics")

_LOGINS = Counter("cis_logins_total", "Successful password logins")
_LOGIN_FAILURES = Counter("cis_login_failures_total", "Rejected login attempts")
_SUBCONTRACTORS_CREATED = Counter("cis_subcontractors_created_total", "Subcontractors created")
_INVOICES_CREATED = Counter("cis_invoices_created_total", "Invoices created")
_INVOICE_VALIDATION_FAILURES = Counter(
    "cis_invoice_validation_failures_total", "Invoice payloads rejected by field validation"
)
_DEDUCTIONS = Counter("cis_deductions_total", "Invoice amount calculations by effective CIS rate", ["rate"])
_RETURNS_SUBMITTED = Counter("cis_returns_submitted_total", "Monthly returns submitted")
_RETURN_INVOICE_COUNT = Histogram(
    "cis_return_invoice_count",
    "Invoices included in a submitted monthly return",
    buckets=(1, 2, 5, 10, 20, 50, 100, 250),
)


def login_succeeded():
    _LOGINS.inc()


def login_failed():
    _LOGIN_FAILURES.inc()


def subcontractor_created():
    _SUBCONTRACTORS_CREATED.inc()


def invoice_created(cis_rate) -> None:
    _INVOICES_CREATED.inc()
    _DEDUCTIONS.labels(rate=str(cis_rate)).inc()


def invoice_validation_failed():
    _INVOICE_VALIDATION_FAILURES.inc()


def return_submitted(invoice_count: int):
    _RETURNS_SUBMITTED.inc()
    _RETURN_INVOICE_COUNT.observe(invoice_count)
    logger.debug("metric cis_returns_submitted_total += 1 (invoices=%s)", invoice_count)
